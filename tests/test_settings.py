"""Tests for engine settings and config loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from schemalens.config import EngineSettings, get_settings, load_settings
from schemalens.errors import ConfigError, ErrorCode


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for key in (
        "SCHEMALENS_RENDER_MAX_DEPTH",
        "SCHEMALENS_SYNTHESIS_MAX_DEPTH",
        "SCHEMALENS_RESOLVE_MAX_DEPTH",
        "SCHEMALENS_MAX_POINTER_HOPS",
        "SCHEMALENS_PLACEHOLDER_STRING",
        "SCHEMALENS_EXAMPLE_EMAIL",
        "SCHEMALENS_EXAMPLE_URL",
        "SCHEMALENS_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


class TestEngineSettings:
    """Tests for defaults and validators."""

    def test_defaults(self) -> None:
        settings = EngineSettings()
        assert settings.render_max_depth == 4
        assert settings.synthesis_max_depth == 10
        assert settings.resolve_max_depth == 32
        assert settings.max_pointer_hops == 64
        assert settings.placeholder_string == "string"
        assert settings.example_email == "user@example.com"
        assert settings.example_url == "https://example.com"
        assert settings.log_level == "INFO"

    def test_rejects_non_positive_depth(self) -> None:
        with pytest.raises(ValidationError):
            EngineSettings(render_max_depth=0)

    def test_rejects_empty_placeholder(self) -> None:
        with pytest.raises(ValidationError):
            EngineSettings(placeholder_string="")

    def test_log_level_is_normalized(self) -> None:
        assert EngineSettings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            EngineSettings(log_level="chatty")

    def test_settings_are_frozen(self) -> None:
        settings = EngineSettings()
        with pytest.raises(ValidationError):
            settings.render_max_depth = 8  # type: ignore[misc]

    def test_environment_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SCHEMALENS_PLACEHOLDER_STRING", "text")
        assert EngineSettings().placeholder_string == "text"

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()


class TestLoadSettings:
    """Tests for load_settings()."""

    def test_without_file(self) -> None:
        assert load_settings() == EngineSettings()

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "schemalens.yaml"
        path.write_text("render_max_depth: 6\nplaceholder_string: text\n", encoding="utf-8")

        settings = load_settings(path)
        assert settings.render_max_depth == 6
        assert settings.placeholder_string == "text"

    def test_environment_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "schemalens.yaml"
        path.write_text("synthesis_max_depth: 3\n", encoding="utf-8")
        monkeypatch.setenv("SCHEMALENS_SYNTHESIS_MAX_DEPTH", "7")

        assert load_settings(path).synthesis_max_depth == 7

    def test_environment_overrides_every_file_field(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "schemalens.yaml"
        path.write_text(
            "max_pointer_hops: 3\nplaceholder_string: text\nexample_email: a@file.io\nexample_url: https://file.io\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("SCHEMALENS_MAX_POINTER_HOPS", "9")
        monkeypatch.setenv("SCHEMALENS_PLACEHOLDER_STRING", "value")
        monkeypatch.setenv("SCHEMALENS_EXAMPLE_EMAIL", "b@env.io")
        monkeypatch.setenv("SCHEMALENS_EXAMPLE_URL", "https://env.io")

        settings = load_settings(path)
        assert settings.max_pointer_hops == 9
        assert settings.placeholder_string == "value"
        assert settings.example_email == "b@env.io"
        assert settings.example_url == "https://env.io"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_settings(tmp_path / "absent.yaml")
        assert exc_info.value.error_code == ErrorCode.CONFIG_NOT_FOUND

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("render_max_depth: [1\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_settings(path)

    def test_non_mapping_file(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_settings(path)

    def test_invalid_values_become_suggestions(self, tmp_path: Path) -> None:
        path = tmp_path / "schemalens.yaml"
        path.write_text("render_max_depth: 0\n", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            load_settings(path)
        assert exc_info.value.error_code == ErrorCode.INVALID_CONFIG
        assert any(s.startswith("render_max_depth") for s in exc_info.value.suggestions)

    def test_non_integer_environment_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SCHEMALENS_RENDER_MAX_DEPTH", "deep")
        with pytest.raises(ConfigError, match="SCHEMALENS_RENDER_MAX_DEPTH"):
            load_settings()
