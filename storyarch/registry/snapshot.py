"""Versioned snapshot encoding and file storage for the project collection."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping

from storyarch.models.project import Project
from storyarch.utils.atomic import AtomicWriteError, atomic_write_bytes
from storyarch.utils.logging import get_logger
from storyarch.utils.result import Err, ErrorKind, Ok, RegistryError, Result

logger = get_logger("registry.snapshot")

SNAPSHOT_FORMAT = "storyarch.projects"
SNAPSHOT_VERSION = 1
MAX_PROJECT_ID = 10_000_000


def encode_snapshot(projects: Mapping[int, Project]) -> Result[bytes, RegistryError]:
    """
    Encode a project mapping as a versioned JSON document.

    Args:
        projects: Mapping of project id to project

    Returns:
        Result with the UTF-8 encoded document or an IO_FAILURE error
        when a project carries an illustration-services value that JSON
        cannot represent or would not read back unchanged (non-string
        dict keys, tuples)
    """
    project_ids = sorted(projects)
    data = {
        "format": SNAPSHOT_FORMAT,
        "version": SNAPSHOT_VERSION,
        "saved_at": datetime.now(timezone.utc).isoformat(),
        "projects": [projects[project_id].to_dict() for project_id in project_ids],
    }

    try:
        text = json.dumps(data, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        return _encoding_failed(e)

    records = json.loads(text)["projects"]
    for project_id, record in zip(project_ids, records):
        if record["illustration_services"] != projects[project_id].illustration_services:
            return _encoding_failed(ValueError(
                f"illustration services of project {project_id} do not survive JSON encoding"
            ))

    return Ok(text.encode("utf-8"))


def _encoding_failed(cause: Exception) -> Err[RegistryError]:
    return Err(RegistryError(
        kind=ErrorKind.IO_FAILURE,
        message="snapshot encoding failed",
        cause=cause,
    ))


def decode_snapshot(payload: bytes) -> Result[dict[int, Project], RegistryError]:
    """
    Decode a snapshot document into a project mapping.

    The whole document is validated before anything is returned.

    Args:
        payload: Raw snapshot bytes

    Returns:
        Result with the decoded mapping or a CORRUPT_SNAPSHOT error
    """
    try:
        data = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        return _corrupt("snapshot is not valid JSON", e)

    if not isinstance(data, dict):
        return _corrupt("snapshot root must be an object")
    if data.get("format") != SNAPSHOT_FORMAT:
        return _corrupt(f"unknown snapshot format: {data.get('format')!r}")
    if data.get("version") != SNAPSHOT_VERSION:
        return _corrupt(f"unsupported snapshot version: {data.get('version')!r}")

    records = data.get("projects")
    if not isinstance(records, list):
        return _corrupt("snapshot projects must be a list")

    projects: dict[int, Project] = {}
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            return _corrupt(f"project record {index} is not an object")
        try:
            project = Project.from_dict(record)
        except (KeyError, TypeError, ValueError) as e:
            return _corrupt(f"project record {index} is malformed", e)

        if not 0 <= project.project_id < MAX_PROJECT_ID:
            return _corrupt(f"project id out of range: {project.project_id}")
        if project.project_id in projects:
            return _corrupt(f"duplicate project id: {project.project_id}")

        projects[project.project_id] = project

    return Ok(projects)


def _corrupt(message: str, cause: Exception | None = None) -> Err[RegistryError]:
    return Err(RegistryError(
        kind=ErrorKind.CORRUPT_SNAPSHOT,
        message=message,
        cause=cause,
    ))


class SnapshotStore:
    """Reads and writes the snapshot file at a fixed location."""

    def __init__(self, path: Path) -> None:
        """
        Initialize the store.

        Args:
            path: Snapshot file path
        """
        self.path = Path(path)

    def exists(self) -> bool:
        """Check if a snapshot has been written."""
        return self.path.is_file()

    def write(self, projects: Mapping[int, Project]) -> Result[bytes, RegistryError]:
        """
        Encode and atomically overwrite the snapshot.

        Returns:
            Result with the bytes written or an IO_FAILURE error
        """
        encoded = encode_snapshot(projects)
        if encoded.is_err():
            logger.error("snapshot_encode_failed", error=str(encoded.unwrap_err()))
            return encoded

        payload = encoded.unwrap()
        try:
            atomic_write_bytes(self.path, payload)
        except AtomicWriteError as e:
            return Err(RegistryError(
                kind=ErrorKind.IO_FAILURE,
                message=f"failed to write snapshot {self.path}",
                cause=e,
            ))

        logger.debug("snapshot_written", path=str(self.path), size=len(payload))
        return Ok(payload)

    def read(self) -> Result[dict[int, Project], RegistryError]:
        """
        Read and decode the snapshot.

        Returns:
            Result with the decoded mapping, an IO_FAILURE error when the
            file cannot be read, or a CORRUPT_SNAPSHOT error
        """
        try:
            with open(self.path, "rb") as f:
                payload = f.read()
        except OSError as e:
            return Err(RegistryError(
                kind=ErrorKind.IO_FAILURE,
                message=f"failed to read snapshot {self.path}",
                cause=e,
            ))

        return decode_snapshot(payload)
