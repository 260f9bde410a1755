"""Layered settings: defaults, YAML, environment, overrides."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from RegistryDocs.Stardoc.errors import UserConfigError
from RegistryDocs.Stardoc.settings import LogFormat, StardocSettings, load_raw_yaml, load_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in list(os.environ):
        if key.upper().startswith("REGISTRYDOCS_"):
            monkeypatch.delenv(key, raising=False)


def test_defaults():
    settings = load_settings()

    assert settings.logging.level == "INFO"
    assert settings.logging.format is LogFormat.CONSOLE
    assert settings.archive.descriptor_suffix == ".binaryproto"
    assert settings.render.header_offset_px == 100
    assert settings.render.settle_delay_ms == 1000
    assert settings.render.hash_settle_delay_ms == 100
    assert settings.render.copy_feedback_ms == 2000
    assert settings.build.output_dir == Path("site")


def test_yaml_file_layer(tmp_path):
    config = tmp_path / "stardoc.yaml"
    config.write_text(
        "logging:\n  level: debug\nhttp:\n  read_timeout_s: 12.5\nbuild:\n  workers: 2\n",
        encoding="utf-8",
    )

    settings = load_settings(config)

    assert settings.logging.level == "DEBUG"
    assert settings.http.read_timeout_s == 12.5
    assert settings.http.connect_timeout_s == 5.0
    assert settings.build.workers == 2


def test_environment_beats_file(tmp_path, monkeypatch):
    config = tmp_path / "stardoc.yaml"
    config.write_text("logging:\n  level: debug\n  format: json\n", encoding="utf-8")
    monkeypatch.setenv("REGISTRYDOCS_LOGGING__LEVEL", "ERROR")

    settings = load_settings(config)

    assert settings.logging.level == "ERROR"
    assert settings.logging.format is LogFormat.JSON


def test_overrides_beat_environment(monkeypatch):
    monkeypatch.setenv("REGISTRYDOCS_LOGGING__LEVEL", "ERROR")

    settings = load_settings(logging={"level": "WARNING"})

    assert settings.logging.level == "WARNING"


def test_none_overrides_are_ignored():
    settings = load_settings(logging={"level": None, "format": None})

    assert settings.logging.level == "INFO"


def test_empty_yaml_file_gives_defaults(tmp_path):
    config = tmp_path / "empty.yaml"
    config.write_text("", encoding="utf-8")

    assert load_raw_yaml(config) == {}
    assert load_settings(config).build.workers == 4


@pytest.mark.parametrize(
    "content",
    ["logging: [unclosed\n", "- a\n- b\n", "logging:\n  level: LOUD\n", "build:\n  workers: 0\n"],
    ids=["invalid-yaml", "not-a-mapping", "bad-level", "bad-workers"],
)
def test_invalid_configuration_raises(tmp_path, content):
    config = tmp_path / "stardoc.yaml"
    config.write_text(content, encoding="utf-8")

    with pytest.raises(UserConfigError) as excinfo:
        load_settings(config)

    assert excinfo.value.error_code == "CONFIG"


def test_missing_file_raises(tmp_path):
    with pytest.raises(UserConfigError, match="not found"):
        load_settings(tmp_path / "missing.yaml")


def test_redacted_dump_is_json_friendly():
    data = StardocSettings().model_dump_redacted()

    assert data["build"]["output_dir"] == "site"
    assert data["logging"]["format"] == "console"
