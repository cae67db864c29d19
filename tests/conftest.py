"""Shared fixtures for cuke-runner tests."""
from __future__ import annotations

import json
import logging
import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from cuke_runner.context import RunContext, StatusBar
from cuke_runner.engine.runner import RunnerError
from cuke_runner.ids import file_id
from cuke_runner.logs import ROOT_LOGGER
from cuke_runner.session import Session

if TYPE_CHECKING:
    from cuke_runner.types import RunTarget

# ─── Feature documents ───

# Line numbers matter: tests refer to them directly.
CALCULATOR_FEATURE = """\
Feature: Calculator

  Background:
    Given a calculator

  Scenario: Add two numbers
    When I add 2 and 3
    Then the result is 5

  Scenario Outline: Multiply
    When I multiply <a> and <b>
    Then the result is <c>

    Examples:
      | a | b | c  |
      | 2 | 3 | 6  |
      | 4 | 5 | 20 |

  Rule: Division

    Scenario: Divide by one
      When I divide 4 by 1
      Then the result is 4
"""
# Feature 1, Add 6, Multiply 10 (rows 16, 17), Rule 19, Divide 21

LOGIN_FEATURE = """\
Feature: Login

  Scenario: Valid password
    Given a registered user
    When they log in with the right password
    Then they see the dashboard
"""
# Feature 1, Valid password 3

FAST_CONFIG = """\
report_attempts: 2
report_delay: 0
glue_paths: [com.example.steps]
"""

# ─── Report builders (Cucumber JSON shapes) ───

def step(keyword: str, name: str, line: int, status: str | None = "passed", error: str | None = None) -> dict:
    raw: dict = {"keyword": keyword, "name": name, "line": line}
    if status is not None:
        raw["result"] = {"status": status}
        if error:
            raw["result"]["error_message"] = error
    return raw


def hook(status: str = "passed", error: str | None = None, location: str | None = None) -> dict:
    raw: dict = {"result": {"status": status}}
    if error:
        raw["result"]["error_message"] = error
    if location:
        raw["match"] = {"location": location}
    return raw


def element(
    name: str,
    line: int,
    steps: list[dict] | None = None,
    before: list[dict] | None = None,
    after: list[dict] | None = None,
    type: str = "scenario",
) -> dict:
    raw: dict = {"type": type, "name": name, "line": line, "steps": steps if steps is not None else []}
    if before is not None:
        raw["before"] = before
    if after is not None:
        raw["after"] = after
    return raw


def passing(name: str, line: int) -> dict:
    return element(name, line, [step("When ", "it runs", line + 1), step("Then ", "it works", line + 2)])


def failing(name: str, line: int, error: str = "expected 5 but was 6") -> dict:
    return element(name, line, [
        step("When ", "it runs", line + 1),
        step("Then ", "it works", line + 2, "failed", error),
    ])


def background(line: int = 3) -> dict:
    return element("", line, [step("Given ", "a calculator", line + 1)], type="background")


def entry(uri: str, elements: list[dict]) -> dict:
    return {"uri": uri, "elements": elements}

# ─── Fake runner ───

class FakeRunner:
    """Stands in for the Cucumber process: records calls and writes a canned report."""

    def __init__(self):
        self.report: list | str | bytes | None = []
        self.exit_code = 0
        self.error: str | None = None
        self.calls: list[tuple[list[RunTarget], Path]] = []

    def run(self, targets: list[RunTarget], report_path: Path) -> int:
        self.calls.append((list(targets), report_path))
        if self.error:
            raise RunnerError(self.error)
        if isinstance(self.report, bytes):
            report_path.write_bytes(self.report)
        elif self.report is not None:
            text = self.report if isinstance(self.report, str) else json.dumps(self.report)
            report_path.write_text(text, encoding="utf-8")
        return self.exit_code

# ─── Workspace harness ───

class WorkspaceHarness:
    """A temp workspace with feature files, settings and a fake runner.

    ``open()`` builds a :class:`Session` over the workspace (discovering the
    catalog); reopen after adding files to rediscover.
    """

    def __init__(self, *, config: str | None = FAST_CONFIG):
        self.root = Path(tempfile.mkdtemp()).resolve()
        if config is not None:
            self.write(".cuke/config.yaml", config)
        self.runner = FakeRunner()
        self.status_texts: list[str] = []
        self.session: Session | None = None

    def write(self, rel: str, text: str) -> Path:
        path = self.root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    def write_feature(self, rel: str, text: str) -> str:
        """Write a feature file and return its file id."""
        return file_id(self.write(rel, text))

    def context(self) -> RunContext:
        return RunContext.create(self.root, status=StatusBar(self.status_texts.append))

    def open(self) -> Session:
        if self.session is not None:
            self.session.close()
        self.session = Session(self.root, runner=self.runner, status=StatusBar(self.status_texts.append))
        return self.session

    @property
    def executor(self):
        return self.session.executor

    @property
    def store(self):
        return self.session.store

    def close(self):
        if self.session is not None:
            self.session.close()
        shutil.rmtree(self.root, ignore_errors=True)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


@pytest.fixture
def harness_factory():
    """Factory fixture that creates WorkspaceHarness instances and cleans up after test."""
    created: list[WorkspaceHarness] = []

    def _make(**kwargs) -> WorkspaceHarness:
        h = WorkspaceHarness(**kwargs)
        created.append(h)
        return h

    yield _make

    for h in created:
        h.close()


@pytest.fixture(autouse=True)
def _detach_log_handler():
    """Drop the package stderr handler so each test binds to its own captured stream."""
    yield
    log = logging.getLogger(ROOT_LOGGER)
    for handler in [h for h in log.handlers if getattr(h, "_cuke_runner", False)]:
        log.removeHandler(handler)
