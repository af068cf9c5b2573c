"""CLI tests using click's CliRunner."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from storyarch.cli import cli
from storyarch.config.settings import SNAPSHOT_PATH_ENV
from storyarch.utils.result import ExitCode


@pytest.fixture(autouse=True)
def _no_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(SNAPSHOT_PATH_ENV, raising=False)


@pytest.fixture()
def invoke(tmp_path: Path):
    runner = CliRunner()
    snapshot = tmp_path / "data" / "projects.json"

    def _invoke(*args: str):
        result = runner.invoke(
            cli,
            [
                "--config", str(tmp_path / "config"),
                "--snapshot", str(snapshot),
                "--log-level", "error",
                *args,
            ],
        )
        return result, (json.loads(result.stdout) if result.stdout.startswith("{") else None)

    _invoke.snapshot = snapshot
    return _invoke


def _create(invoke, name: str, creator: str, *extra: str) -> int:
    result, data = invoke("create", name, "--creator", creator, *extra)
    assert result.exit_code == 0, result.output
    return data["project"]["project_id"]


def test_create_and_list(invoke) -> None:
    project_id = _create(
        invoke, "Trip", "Alice",
        "--description", "desc",
        "--team-member", "bob",
        "--date", "2024-05-01",
        "--illustration-services", '{"provider": "sketchbot"}',
    )

    assert invoke.snapshot.exists()
    result, data = invoke("list", "--creator", "ALICE")

    assert result.exit_code == 0
    assert data["count"] == 1
    project = data["projects"][0]
    assert project["project_id"] == project_id
    assert project["name"] == "trip"
    assert project["creator"] == "alice"
    assert project["team_members"] == ["bob"]
    assert project["illustration_services"] == {"provider": "sketchbot"}
    assert project["created_date"] == "2024-05-01T00:00:00"


def test_duplicate_create_exits_with_invalid_argument(invoke) -> None:
    _create(invoke, "Trip", "alice")

    result, data = invoke("create", "TRIP", "--creator", "ALICE")

    assert result.exit_code == ExitCode.INVALID_ARGUMENT
    assert data["kind"] == "invalid_argument"


def test_bad_illustration_services_json(invoke) -> None:
    result, _ = invoke("create", "Trip", "--creator", "alice", "--illustration-services", "{nope")

    assert result.exit_code == 2
    assert not invoke.snapshot.exists()


def test_shared_and_open(invoke) -> None:
    project_id = _create(invoke, "Trip", "alice", "--team-member", "bob")

    _, shared = invoke("shared", "--user", "BOB")
    assert [p["project_id"] for p in shared["projects"]] == [project_id]

    result, opened = invoke("open", str(project_id), "--user", "bob")
    assert result.exit_code == 0
    assert opened["count"] == 1

    result, denied = invoke("open", str(project_id), "--user", "mallory")
    assert result.exit_code == ExitCode.PERMISSION_DENIED
    assert denied["kind"] == "permission_denied"


def test_open_errors(invoke) -> None:
    result, data = invoke("open", "", "--user", "alice")
    assert result.exit_code == ExitCode.INVALID_ARGUMENT

    result, data = invoke("open", "123", "--user", "alice")
    assert result.exit_code == ExitCode.NOT_FOUND
    assert data["kind"] == "not_found"


def test_delete_flow(invoke) -> None:
    project_id = _create(invoke, "Trip", "alice", "--team-member", "bob")

    result, _ = invoke("delete", str(project_id), "--user", "bob")
    assert result.exit_code == ExitCode.PERMISSION_DENIED

    result, data = invoke("delete", str(project_id), "--user", "Alice")
    assert result.exit_code == 0
    assert data["status"] == "success"

    result, _ = invoke("open", str(project_id), "--user", "alice")
    assert result.exit_code == ExitCode.NOT_FOUND


def test_status_json(invoke) -> None:
    _create(invoke, "One", "alice", "--team-member", "bob")
    _create(invoke, "Two", "carol")

    result, data = invoke("status", "--format", "json")

    assert result.exit_code == 0
    assert data["total_projects"] == 2
    assert data["shared_projects"] == 1
    assert data["projects_by_creator"] == {"alice": 1, "carol": 1}


def test_status_table_on_empty_registry(invoke) -> None:
    result, _ = invoke("status")

    assert result.exit_code == 0
    assert "Projects: 0" in result.stdout


def test_corrupt_snapshot_exit_code(invoke) -> None:
    invoke.snapshot.parent.mkdir(parents=True)
    invoke.snapshot.write_text("garbage")

    result, data = invoke("list", "--creator", "alice")

    assert result.exit_code == ExitCode.CORRUPT_SNAPSHOT
    assert data["kind"] == "corrupt_snapshot"


def test_invalid_config_exit_code(tmp_path: Path) -> None:
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "defaults.yaml").write_text("logging:\n  level: chatty\n")

    result = CliRunner().invoke(cli, ["--config", str(config_dir), "status"])

    assert result.exit_code == ExitCode.CONFIG_ERROR
    assert json.loads(result.stdout)["kind"] == "config"


def test_snapshot_option_overrides_directory_in_config(tmp_path: Path) -> None:
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "defaults.yaml").write_text(f"snapshot_path: {config_dir}\n")
    snapshot = tmp_path / "projects.json"

    result = CliRunner().invoke(
        cli,
        [
            "--config", str(config_dir),
            "--snapshot", str(snapshot),
            "--log-level", "error",
            "status", "--format", "json",
        ],
    )

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["snapshot_path"] == str(snapshot)

    result = CliRunner().invoke(cli, ["--config", str(config_dir), "status"])

    assert result.exit_code == ExitCode.CONFIG_ERROR
