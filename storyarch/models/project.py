"""Project value entity."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class Project:
    """
    A named, owned, optionally shared unit of work.

    Instances are created by ``ProjectRegistry.create_project`` and are never
    modified afterwards.

    Attributes:
        project_id: Registry-issued identifier in [0, 10_000_000)
        name: Project name, lowercase
        description: Free text description
        creator: Owning user, lowercase
        created_date: Creation timestamp supplied by the caller
        illustration_services: Opaque illustration-service configuration
        team_members: Users granted shared access, stored as supplied
    """

    project_id: int
    name: str
    description: str
    creator: str
    created_date: datetime
    illustration_services: Any
    team_members: Optional[tuple[str, ...]] = None

    def is_shared_with(self, user_name: str) -> bool:
        """Check membership against the stored team member entries."""
        return self.team_members is not None and user_name in self.team_members

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "project_id": self.project_id,
            "name": self.name,
            "description": self.description,
            "creator": self.creator,
            "created_date": self.created_date.isoformat(),
            "illustration_services": self.illustration_services,
            "team_members": (
                list(self.team_members) if self.team_members is not None else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Project":
        """
        Create from dictionary.

        Raises:
            KeyError: If a field is missing
            TypeError: If a field has the wrong type
            ValueError: If the created date is not ISO formatted
        """
        project_id = data["project_id"]
        if not isinstance(project_id, int) or isinstance(project_id, bool):
            raise TypeError(f"project_id must be an integer, got {project_id!r}")

        for key in ("name", "description", "creator", "created_date"):
            if not isinstance(data[key], str):
                raise TypeError(f"{key} must be a string")

        team_members = data["team_members"]
        if team_members is not None:
            if not isinstance(team_members, list) or not all(
                isinstance(member, str) for member in team_members
            ):
                raise TypeError("team_members must be a list of strings or null")
            team_members = tuple(team_members)

        return cls(
            project_id=project_id,
            name=data["name"],
            description=data["description"],
            creator=data["creator"],
            created_date=datetime.fromisoformat(data["created_date"]),
            illustration_services=data["illustration_services"],
            team_members=team_members,
        )
