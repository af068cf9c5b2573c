"""RegistryConfig loading and validation tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from storyarch.config.settings import (
    DEFAULT_SNAPSHOT_PATH,
    SNAPSHOT_PATH_ENV,
    LoggingConfig,
    RegistryConfig,
    load_config,
)


@pytest.fixture(autouse=True)
def _no_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(SNAPSHOT_PATH_ENV, raising=False)


def test_defaults_without_config_file(tmp_path: Path) -> None:
    config = load_config(tmp_path).unwrap()

    assert config.snapshot_path == DEFAULT_SNAPSHOT_PATH
    assert config.logging == LoggingConfig(level="info", format="json")


def test_loads_defaults_yaml(tmp_path: Path) -> None:
    (tmp_path / "defaults.yaml").write_text(
        "snapshot_path: store/projects.json\n"
        "logging:\n"
        "  level: debug\n"
        "  format: text\n"
    )

    config = load_config(tmp_path).unwrap()

    assert config.snapshot_path == Path("store/projects.json")
    assert config.logging.level == "debug"
    assert config.logging.format == "text"


def test_environment_overrides_snapshot_path(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "defaults.yaml").write_text("snapshot_path: store/projects.json\n")
    monkeypatch.setenv(SNAPSHOT_PATH_ENV, str(tmp_path / "env.json"))

    config = load_config(tmp_path).unwrap()

    assert config.snapshot_path == tmp_path / "env.json"


def test_invalid_yaml_is_reported(tmp_path: Path) -> None:
    (tmp_path / "defaults.yaml").write_text("snapshot_path: [unclosed\n")

    error = load_config(tmp_path).unwrap_err()

    assert error.field == "yaml"


def test_non_mapping_yaml_is_reported(tmp_path: Path) -> None:
    (tmp_path / "defaults.yaml").write_text("- a\n- b\n")

    assert load_config(tmp_path).unwrap_err().field == "yaml"


def test_missing_file_via_from_yaml(tmp_path: Path) -> None:
    assert RegistryConfig.from_yaml(tmp_path / "nope.yaml").unwrap_err().field == "path"


@pytest.mark.parametrize(
    ("data", "field"),
    [
        ({"snapshot_path": 12}, "snapshot_path"),
        ({"logging": "loud"}, "logging"),
    ],
)
def test_from_dict_rejects_wrong_types(data: dict, field: str) -> None:
    assert RegistryConfig.from_dict(data).unwrap_err().field == field


@pytest.mark.parametrize(
    ("config", "field"),
    [
        (RegistryConfig(snapshot_path=Path("")), "snapshot_path"),
        (RegistryConfig(logging=LoggingConfig(level="chatty")), "logging.level"),
        (RegistryConfig(logging=LoggingConfig(format="xml")), "logging.format"),
    ],
)
def test_validate_rejects_bad_values(config: RegistryConfig, field: str) -> None:
    assert config.validate().unwrap_err().field == field


def test_validate_rejects_directory_snapshot_path(tmp_path: Path) -> None:
    config = RegistryConfig(snapshot_path=tmp_path)

    assert config.validate().unwrap_err().field == "snapshot_path"


def test_with_snapshot_path() -> None:
    config = RegistryConfig()

    assert config.with_snapshot_path(None) is config
    assert config.with_snapshot_path(Path("x.json")).snapshot_path == Path("x.json")
    assert config.snapshot_path == DEFAULT_SNAPSHOT_PATH


def test_explicit_snapshot_path_replaces_directory_from_config_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "store").mkdir()
    (tmp_path / "defaults.yaml").write_text(f"snapshot_path: {tmp_path / 'store'}\n")
    monkeypatch.setenv(SNAPSHOT_PATH_ENV, str(tmp_path / "env.json"))

    assert load_config(tmp_path).is_ok()
    assert load_config(tmp_path, snapshot_path=tmp_path / "store").unwrap_err().field == (
        "snapshot_path"
    )

    monkeypatch.delenv(SNAPSHOT_PATH_ENV)
    assert load_config(tmp_path).unwrap_err().field == "snapshot_path"

    config = load_config(tmp_path, snapshot_path=tmp_path / "cli.json").unwrap()

    assert config.snapshot_path == tmp_path / "cli.json"
