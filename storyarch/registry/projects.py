"""Project registry: creation, lookup, access control and snapshot persistence."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Sequence

from storyarch.models.project import Project
from storyarch.registry.snapshot import MAX_PROJECT_ID, SnapshotStore
from storyarch.utils.logging import get_logger
from storyarch.utils.result import Err, ErrorKind, Ok, RegistryError, Result

logger = get_logger("registry.projects")


@dataclass
class RegistryStats:
    """Statistics about the project registry."""

    total_projects: int = 0
    issued_ids: int = 0
    creators: int = 0
    shared_projects: int = 0
    projects_by_creator: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total_projects": self.total_projects,
            "issued_ids": self.issued_ids,
            "creators": self.creators,
            "shared_projects": self.shared_projects,
            "projects_by_creator": self.projects_by_creator,
        }


class ProjectRegistry:
    """
    In-memory registry of projects keyed by a generated numeric id.

    Provides:
    - Creation with name/creator uniqueness and team member checks
    - Lookup by creator and by sharing
    - Access-controlled open and delete
    - Whole-collection snapshot save and load

    Ids are never recycled: every issued id stays in ``used_ids`` after its
    project is deleted or replaced by a snapshot load. The registry is not
    thread safe; concurrent callers must hold one lock around every call.
    """

    def __init__(self, snapshot_path: Path, rng: Optional[random.Random] = None) -> None:
        """
        Initialize an empty registry.

        Args:
            snapshot_path: Location of the persisted snapshot
            rng: Random source for id generation (defaults to a fresh Random)
        """
        self.store = SnapshotStore(snapshot_path)
        self.projects: dict[int, Project] = {}
        self.used_ids: set[int] = set()
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self.projects)

    def __contains__(self, project_id: object) -> bool:
        return project_id in self.projects

    def get(self, project_id: int) -> Optional[Project]:
        """Get a project by its numeric id."""
        return self.projects.get(project_id)

    def create_project(
        self,
        name: Optional[str],
        description: Optional[str],
        creator: Optional[str],
        created_date: Optional[datetime],
        illustration_services: Any,
        team_members: Optional[Sequence[str]] = None,
    ) -> Result[Project, RegistryError]:
        """
        Create and register a new project.

        Args:
            name: Project name (stored lowercase)
            description: Free text description
            creator: Owning user (stored lowercase)
            created_date: Creation timestamp
            illustration_services: Opaque illustration-service configuration
            team_members: Users granted shared access, stored as supplied

        Returns:
            Result with the created project or an INVALID_ARGUMENT error
        """
        if (
            name is None
            or description is None
            or creator is None
            or created_date is None
            or illustration_services is None
        ):
            return _invalid("one or more required values missing")
        if not isinstance(created_date, datetime):
            return _invalid("created date must be a datetime")

        name = name.lower()
        creator = creator.lower()

        if isinstance(team_members, str):
            return _invalid("team members must be a sequence of names, not a single string")
        members = tuple(team_members) if team_members is not None else None
        if members is not None and creator in (member.lower() for member in members):
            return _invalid("creator cannot be own team member")

        for project in self.projects.values():
            if project.name == name and project.creator == creator:
                return _invalid("duplicate project name for this creator")

        project_id = self._generate_id()
        project = Project(
            project_id=project_id,
            name=name,
            description=description,
            creator=creator,
            created_date=created_date,
            illustration_services=illustration_services,
            team_members=members,
        )
        self.projects[project_id] = project

        logger.info(
            "project_created",
            project_id=project_id,
            name=name,
            creator=creator,
            team_size=len(members) if members else 0,
        )

        return Ok(project)

    def _generate_id(self) -> int:
        # Redraw until unused. Termination is probabilistic: the loop could in
        # theory spin forever once most of the id space has been issued.
        project_id = self._rng.randrange(MAX_PROJECT_ID)
        while project_id in self.used_ids:
            logger.debug("project_id_collision", project_id=project_id)
            project_id = self._rng.randrange(MAX_PROJECT_ID)
        self.used_ids.add(project_id)
        return project_id

    def get_projects_by_creator(self, creator: str) -> dict[int, Project]:
        """Get every project created by ``creator`` (case-insensitive)."""
        creator = creator.lower()
        return {
            project_id: project
            for project_id, project in self.projects.items()
            if project.creator == creator
        }

    def get_shared_projects(self, user_name: str) -> dict[int, Project]:
        """
        Get every project shared with ``user_name``.

        The lowercased user name is compared against team member entries as
        they were stored, so only lowercase entries can match.
        """
        user_name = user_name.lower()
        return {
            project_id: project
            for project_id, project in self.projects.items()
            if project.is_shared_with(user_name)
        }

    def open_project(
        self,
        project_id: Optional[str],
        requester: str,
    ) -> Result[dict[int, Project], RegistryError]:
        """
        Open a project for its creator or a team member.

        Args:
            project_id: Project id as text
            requester: Requesting user

        Returns:
            Result with a single-entry mapping, or an INVALID_ARGUMENT,
            NOT_FOUND or PERMISSION_DENIED error
        """
        lookup = self._lookup(project_id)
        if lookup.is_err():
            return lookup

        project = lookup.unwrap()
        if project.creator != requester.lower() and not project.is_shared_with(requester):
            logger.warning(
                "project_access_denied",
                project_id=project.project_id,
                requester=requester,
                action="open",
            )
            return Err(RegistryError(kind=ErrorKind.PERMISSION_DENIED, message="no access"))

        logger.debug("project_opened", project_id=project.project_id, requester=requester)
        return Ok({project.project_id: project})

    def delete_project(
        self,
        project_id: Optional[str],
        requester: str,
    ) -> Result[Project, RegistryError]:
        """
        Delete a project. Only its creator may do so.

        The id is not released for reuse.

        Args:
            project_id: Project id as text
            requester: Requesting user

        Returns:
            Result with the removed project, or an INVALID_ARGUMENT,
            NOT_FOUND or PERMISSION_DENIED error
        """
        lookup = self._lookup(project_id)
        if lookup.is_err():
            return lookup

        project = lookup.unwrap()
        if project.creator != requester.lower():
            logger.warning(
                "project_access_denied",
                project_id=project.project_id,
                requester=requester,
                action="delete",
            )
            return Err(RegistryError(
                kind=ErrorKind.PERMISSION_DENIED,
                message="only the creator may delete a project",
            ))

        del self.projects[project.project_id]
        logger.info("project_deleted", project_id=project.project_id, creator=project.creator)
        return Ok(project)

    def _lookup(self, project_id: Optional[str]) -> Result[Project, RegistryError]:
        if not project_id or not project_id.isascii():
            return _invalid("empty id")
        try:
            numeric_id = int(project_id)
        except ValueError:
            return _invalid("empty id")

        project = self.projects.get(numeric_id)
        if project is None:
            return Err(RegistryError(
                kind=ErrorKind.NOT_FOUND,
                message="project does not exist",
            ))
        return Ok(project)

    def save_snapshot(self) -> Result[bytes, RegistryError]:
        """
        Persist every project to the configured snapshot location.

        Issued ids that no longer have a project are not persisted.

        Returns:
            Result with the snapshot bytes or an IO_FAILURE error
        """
        result = self.store.write(self.projects)
        if result.is_err():
            logger.error("snapshot_save_failed", error=str(result.unwrap_err()))
            return result

        logger.info(
            "snapshot_saved",
            path=str(self.store.path),
            projects=len(self.projects),
        )
        return result

    def load_snapshot(self) -> Result[int, RegistryError]:
        """
        Replace all projects with the persisted snapshot.

        The snapshot is fully decoded before state changes. Loaded ids are
        added to ``used_ids``; previously issued ids are kept.

        Returns:
            Result with the number of loaded projects, or an IO_FAILURE or
            CORRUPT_SNAPSHOT error
        """
        result = self.store.read()
        if result.is_err():
            logger.error("snapshot_load_failed", error=str(result.unwrap_err()))
            return result

        self.projects = result.unwrap()
        self.used_ids.update(self.projects)

        logger.info(
            "snapshot_loaded",
            path=str(self.store.path),
            projects=len(self.projects),
            issued_ids=len(self.used_ids),
        )
        return Ok(len(self.projects))

    def get_stats(self) -> RegistryStats:
        """Get registry statistics."""
        stats = RegistryStats()
        stats.total_projects = len(self.projects)
        stats.issued_ids = len(self.used_ids)

        for project in self.projects.values():
            creator = project.creator
            stats.projects_by_creator[creator] = stats.projects_by_creator.get(creator, 0) + 1
            if project.team_members:
                stats.shared_projects += 1

        stats.creators = len(stats.projects_by_creator)
        return stats


def _invalid(message: str) -> Err[RegistryError]:
    return Err(RegistryError(kind=ErrorKind.INVALID_ARGUMENT, message=message))
