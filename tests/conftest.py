"""Shared fixtures for storyarch tests."""

from __future__ import annotations

import random
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

from storyarch.registry.projects import ProjectRegistry
from storyarch.utils.logging import configure_logging


class SequenceRandom:
    """Random source that replays fixed values from ``randrange``."""

    def __init__(self, values: list[int]) -> None:
        self.values = list(values)

    def randrange(self, *args) -> int:
        return self.values.pop(0)


@pytest.fixture(autouse=True)
def _logging_to_current_stderr() -> None:
    # CliRunner swaps stderr; point structlog back at the live stream.
    configure_logging(level="debug", format_type="json", stream=sys.stderr)


@pytest.fixture()
def snapshot_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "projects.json"


@pytest.fixture()
def registry(snapshot_path: Path) -> ProjectRegistry:
    return ProjectRegistry(snapshot_path, rng=random.Random(1234))


@pytest.fixture()
def created() -> datetime:
    return datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)


@pytest.fixture()
def services() -> dict:
    return {"provider": "sketchbot", "styles": ["ink", "watercolor"], "credits": 40}
