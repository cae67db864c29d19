"""Workspace settings loaded from .cuke/config.yaml."""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from cuke_runner.logs import level_from_name

CONFIG_DIR = ".cuke"
CONFIG_FILE = "config.yaml"

DEFAULT_EXCLUDE_DIRS = ["target", "build", "out", "dist", "node_modules", ".git"]

CONFIG_TEMPLATE = """\
# cuke-runner workspace settings

# Step-definition packages passed to the runner as --glue, in addition to the
# steps package found under src/test/java
glue_paths: []

# Custom Cucumber ObjectFactory class (--object-factory)
# object_factory: io.cucumber.picocontainer.PicoFactory

# Directories skipped while discovering and watching .feature files
exclude_dirs: [target, build, out, dist, node_modules, .git]

# error | warn | info | debug | trace
log_level: info

# Runner argv prefix; -cp <classpath> is inserted after the first element
runner_command: [java, io.cucumber.core.cli.Main]
classpath: [target/test-classes, target/classes]

# Where run reports are written, and how long to wait for them (attempts x delay)
report_dir: target
report_attempts: 20
report_delay: 0.5

# Seconds to wait after the last edit before re-parsing a file
debounce: 1.2

# Runner process timeout in seconds
timeout: 600
"""


class ConfigError(ValueError):
    pass


@dataclass
class Settings:
    glue_paths: list[str] = field(default_factory=list)
    object_factory: str | None = None
    exclude_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))
    log_level: str = "info"
    runner_command: list[str] = field(default_factory=lambda: ["java", "io.cucumber.core.cli.Main"])
    classpath: list[str] = field(default_factory=lambda: ["target/test-classes", "target/classes"])
    report_dir: str = "target"
    report_attempts: int = 20
    report_delay: float = 0.5
    debounce: float = 1.2
    timeout: float = 600.0


_LIST_KEYS = frozenset({"glue_paths", "exclude_dirs", "runner_command", "classpath"})
_INT_KEYS = frozenset({"report_attempts"})
_FLOAT_KEYS = frozenset({"report_delay", "debounce", "timeout"})


def _coerce(key: str, value: Any) -> Any:
    if key in _LIST_KEYS:
        if value is None:
            return []
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigError(f"{key}: expected a list of strings")
        return list(value)
    if key in _INT_KEYS:
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ConfigError(f"{key}: expected a positive integer")
        return value
    if key in _FLOAT_KEYS:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise ConfigError(f"{key}: expected a non-negative number")
        return float(value)
    if key == "object_factory":
        if value is not None and not isinstance(value, str):
            raise ConfigError(f"{key}: expected a string")
        return value or None
    if not isinstance(value, str):
        raise ConfigError(f"{key}: expected a string")
    return value


def parse_settings(content: str) -> Settings:
    try:
        raw = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}") from e
    if raw is None:
        return Settings()
    if not isinstance(raw, dict):
        raise ConfigError("Invalid config: expected a mapping")

    known = {f.name for f in fields(Settings)}
    values = {k: _coerce(k, v) for k, v in raw.items() if k in known}
    settings = Settings(**values)
    try:
        level_from_name(settings.log_level)
    except ValueError as e:
        raise ConfigError(str(e)) from None
    if not settings.runner_command:
        raise ConfigError("runner_command: must not be empty")
    return settings


def config_path(root: str | Path) -> Path:
    return Path(root) / CONFIG_DIR / CONFIG_FILE


def load_settings(root: str | Path) -> Settings:
    path = config_path(root)
    if not path.exists():
        return Settings()
    return parse_settings(path.read_text(encoding="utf-8"))
