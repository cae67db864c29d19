"""Tests for settings loading and logging setup."""
from __future__ import annotations

import logging

import pytest

from cuke_runner.config import CONFIG_TEMPLATE, ConfigError, Settings, load_settings, parse_settings
from cuke_runner.logs import ROOT_LOGGER, TRACE, configure_logging, level_from_name

# ─── Settings ───

def test_missing_file_gives_defaults(tmp_path):
    settings = load_settings(tmp_path)
    assert settings == Settings()
    assert settings.report_attempts == 20
    assert settings.report_delay == 0.5
    assert settings.debounce == 1.2
    assert settings.exclude_dirs == ["target", "build", "out", "dist", "node_modules", ".git"]


def test_template_parses_to_defaults():
    assert parse_settings(CONFIG_TEMPLATE) == Settings()


def test_empty_document_gives_defaults():
    assert parse_settings("") == Settings()
    assert parse_settings("# only comments\n") == Settings()


def test_values_are_read(tmp_path):
    (tmp_path / ".cuke").mkdir()
    (tmp_path / ".cuke" / "config.yaml").write_text(
        "glue_paths: [com.a, com.b]\n"
        "object_factory: com.example.Factory\n"
        "log_level: DEBUG\n"
        "report_attempts: 3\n"
        "timeout: 30\n",
        encoding="utf-8",
    )
    settings = load_settings(tmp_path)
    assert settings.glue_paths == ["com.a", "com.b"]
    assert settings.object_factory == "com.example.Factory"
    assert settings.log_level == "DEBUG"
    assert settings.report_attempts == 3
    assert settings.timeout == 30.0
    assert isinstance(settings.timeout, float)


def test_unknown_keys_are_ignored():
    assert parse_settings("colour: blue\n") == Settings()


def test_null_list_becomes_empty():
    assert parse_settings("exclude_dirs:\n").exclude_dirs == []


@pytest.mark.parametrize("content, message", [
    ("- a\n- b\n", "expected a mapping"),
    ("glue_paths: com.a\n", "glue_paths"),
    ("glue_paths: [1, 2]\n", "glue_paths"),
    ("report_attempts: 0\n", "positive integer"),
    ("report_attempts: true\n", "positive integer"),
    ("report_delay: -1\n", "non-negative"),
    ("log_level: loud\n", "Unknown log level"),
    ("log_level: 3\n", "log_level"),
    ("runner_command: []\n", "must not be empty"),
    ("object_factory: [x]\n", "object_factory"),
    ("glue_paths: [unclosed\n", "Invalid YAML"),
])
def test_invalid_settings(content, message):
    with pytest.raises(ConfigError, match=message):
        parse_settings(content)

# ─── Logging ───

@pytest.mark.parametrize("name, level", [
    ("error", logging.ERROR),
    ("warn", logging.WARNING),
    ("Info", logging.INFO),
    ("debug", logging.DEBUG),
    ("trace", TRACE),
])
def test_level_from_name(name, level):
    assert level_from_name(name) == level


def test_unknown_level():
    with pytest.raises(ValueError):
        level_from_name("verbose")


def test_configure_logging_is_idempotent():
    log = configure_logging("debug")
    configure_logging("trace")
    handlers = [h for h in log.handlers if getattr(h, "_cuke_runner", False)]
    assert len(handlers) == 1
    assert log.name == ROOT_LOGGER
    assert log.level == TRACE
    configure_logging("info")
