"""cuke init: create .cuke/config.yaml from the bundled template."""
from __future__ import annotations

from pathlib import Path

from cuke_runner.config import CONFIG_TEMPLATE, config_path


def init_project(target_dir: Path | None = None) -> str:
    """Write the settings template; returns a message for the user."""
    target = target_dir or Path.cwd()
    path = config_path(target)

    if path.exists():
        return f"Already initialized: {path} exists"

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(CONFIG_TEMPLATE, encoding="utf-8")

    return f"""Initialized cuke-runner workspace:
  {path}

Next steps:
  1. Edit glue_paths if your step definitions are not under src/test/java/**/steps
  2. Run: cuke discover
  3. Run: cuke run
"""


def cmd_init(cwd: str):
    print(init_project(Path(cwd)))
