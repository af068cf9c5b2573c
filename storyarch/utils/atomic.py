"""Atomic file operations to prevent data corruption.

Snapshots are written to a temporary file in the target directory and then
renamed over the target, so readers only ever see a complete old or a
complete new snapshot.
"""

from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Generator

from storyarch.utils.logging import get_logger

logger = get_logger("utils.atomic")


class AtomicWriteError(Exception):
    """Raised when an atomic write operation fails."""

    pass


@contextmanager
def atomic_write(path: Path) -> Generator[BinaryIO, None, None]:
    """
    Context manager for atomic binary file writes.

    Writes to a temporary file first, then atomically renames to the target path.
    If any error occurs, the temp file is cleaned up and the original is untouched.

    Args:
        path: Target file path

    Yields:
        Binary file handle for writing

    Raises:
        AtomicWriteError: If the atomic write fails

    Example:
        with atomic_write(Path("projects.json")) as f:
            f.write(payload)
    """
    path = Path(path)
    temp_path: Path | None = None
    success = False

    try:
        path.parent.mkdir(parents=True, exist_ok=True)

        # Temp file in the same directory so the rename stays on one filesystem
        fd, raw_temp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        temp_path = Path(raw_temp_path)
        os.close(fd)

        with open(temp_path, "wb") as f:
            yield f
            f.flush()
            os.fsync(f.fileno())

        temp_path.replace(path)
        success = True

        logger.debug("atomic_write_success", path=str(path))

    except OSError as e:
        logger.error("atomic_write_failed", path=str(path), error=str(e))
        raise AtomicWriteError(f"Failed to atomically write {path}: {e}") from e

    finally:
        if not success and temp_path is not None and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass


def atomic_write_bytes(path: Path, content: bytes) -> None:
    """
    Atomically write binary content to a file.

    Args:
        path: Target file path
        content: Binary content to write
    """
    with atomic_write(path) as f:
        f.write(content)
