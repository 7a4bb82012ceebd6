from __future__ import annotations

from pathlib import Path

import pytest

from app.config import DEFAULT_CONFIG_PATH, AppSettings, load_settings, resolve_config_path


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)


def test_defaults_without_config_file() -> None:
    settings = load_settings()

    assert settings.max_ticks == 1000
    assert settings.log_level == "WARNING"
    assert settings.export.file_prefix == "diakit"
    assert settings.params_path is None


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DIAKIT_MAX_TICKS", "50")
    monkeypatch.setenv("DIAKIT_LOG_LEVEL", "debug")
    monkeypatch.setenv("DIAKIT_EXPORT__FILE_PREFIX", "poster")

    settings = load_settings()

    assert settings.max_ticks == 50
    assert settings.log_level == "DEBUG"
    assert settings.export.file_prefix == "poster"


def test_yaml_config_file(tmp_path: Path) -> None:
    config_path = tmp_path / "custom.yaml"
    config_path.write_text(
        "max_ticks: 12\nexport:\n  file_prefix: custom\n  output_dir: out\n",
        encoding="utf-8",
    )

    settings = load_settings(config_path)

    assert settings.max_ticks == 12
    assert settings.export.file_prefix == "custom"
    assert settings.export.output_dir == Path("out")
    assert AppSettings._yaml_path is None


def test_config_path_from_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "env.yaml"
    config_path.write_text("max_ticks: 7\n", encoding="utf-8")
    monkeypatch.setenv("DIAKIT_CONFIG_PATH", str(config_path))

    assert load_settings().max_ticks == 7


def test_env_wins_over_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "custom.yaml"
    config_path.write_text("max_ticks: 12\n", encoding="utf-8")
    monkeypatch.setenv("DIAKIT_MAX_TICKS", "99")

    assert load_settings(config_path).max_ticks == 99


def test_default_config_location_is_picked_up(tmp_path: Path) -> None:
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "diakit.yaml").write_text("max_ticks: 3\n", encoding="utf-8")

    assert load_settings().max_ticks == 3


def test_blank_prefix_falls_back(tmp_path: Path) -> None:
    config_path = tmp_path / "blank.yaml"
    config_path.write_text("export:\n  file_prefix: '  '\n", encoding="utf-8")

    assert load_settings(config_path).export.file_prefix == "diakit"


def test_missing_explicit_config_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.yaml")


def test_resolve_config_path_prefers_argument_over_env(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    argument = tmp_path / "argument.yaml"
    argument.write_text("max_ticks: 1\n", encoding="utf-8")
    monkeypatch.setenv("DIAKIT_CONFIG_PATH", str(tmp_path / "env.yaml"))

    assert resolve_config_path(argument) == argument


def test_resolve_config_path_without_any_source() -> None:
    assert resolve_config_path() is None


def test_resolve_config_path_uses_default_location(tmp_path: Path) -> None:
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "diakit.yaml").write_text("max_ticks: 3\n", encoding="utf-8")

    assert resolve_config_path() == DEFAULT_CONFIG_PATH


def test_missing_env_config_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DIAKIT_CONFIG_PATH", str(tmp_path / "gone.yaml"))

    with pytest.raises(FileNotFoundError, match="gone.yaml"):
        resolve_config_path()
