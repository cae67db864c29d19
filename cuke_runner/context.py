"""Per-invocation context: settings, workspace root, logger and status sink.

Built once by the composition root (a CLI command or an MCP tool) and passed
to whatever needs to log or report status.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from cuke_runner.config import CONFIG_DIR, Settings, load_settings
from cuke_runner.logs import ROOT_LOGGER, configure_logging

if TYPE_CHECKING:
    from collections.abc import Callable


class StatusBar:
    """One-line run summary, e.g. ``Cucumber: 12 tests`` or ``Cucumber: 2 failed``."""

    MAX_NAME = 30

    def __init__(self, listener: Callable[[str], None] | None = None):
        self.test_count = 0
        self.text = ""
        self.state = "idle"  # idle | running | passed | failed
        self._listener = listener
        self.update_idle()

    def _set(self, state: str, text: str) -> None:
        self.state = state
        self.text = text
        if self._listener:
            self._listener(text)

    def update_test_count(self, count: int) -> None:
        self.test_count = count
        self.update_idle()

    def update_idle(self) -> None:
        self._set("idle", f"Cucumber: {self.test_count} tests")

    def update_running(self, name: str | None = None) -> None:
        self._set("running", f"Running: {_truncate(name, self.MAX_NAME)}" if name else "Running tests...")

    def update_passed(self) -> None:
        self._set("passed", "Cucumber: Passed")

    def update_failed(self, count: int | None = None) -> None:
        self._set("failed", f"Cucumber: {count} failed" if count else "Cucumber: Failed")


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


@dataclass
class RunContext:
    root: Path
    settings: Settings = field(default_factory=Settings)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(ROOT_LOGGER))
    status: StatusBar = field(default_factory=StatusBar)

    @classmethod
    def create(cls, root: str | Path, *, status: StatusBar | None = None) -> RunContext:
        """Load settings for ``root`` and configure logging from them."""
        root = Path(root).resolve()
        settings = load_settings(root)
        log = configure_logging(settings.log_level)
        return cls(root=root, settings=settings, logger=log, status=status or StatusBar())

    @property
    def state_dir(self) -> Path:
        return self.root / CONFIG_DIR

    @property
    def db_path(self) -> Path:
        return self.state_dir / "results.db"
