"""Project registry and its snapshot persistence.

This package owns the in-memory project collection:
- Creation with uniqueness and team member rules
- Lookup by creator and by sharing
- Access-controlled open and delete
- Versioned snapshot save and load
"""

from storyarch.registry.projects import ProjectRegistry, RegistryStats
from storyarch.registry.snapshot import (
    SNAPSHOT_FORMAT,
    SNAPSHOT_VERSION,
    SnapshotStore,
    decode_snapshot,
    encode_snapshot,
)

__all__ = [
    "ProjectRegistry",
    "RegistryStats",
    "SnapshotStore",
    "SNAPSHOT_FORMAT",
    "SNAPSHOT_VERSION",
    "encode_snapshot",
    "decode_snapshot",
]
