"""Cucumber JSON report model.

The report is untyped JSON with optional fields at every level. Everything is
read through explicit defaults here so the reconciler never touches raw dicts:

    [{"uri": "...", "elements": [{"type": "scenario", "name": "...", "line": 5,
      "before": [{"result": {"status": "passed"}, "match": {"location": "..."}}],
      "steps": [{"keyword": "Given ", "name": "...", "line": 6,
                 "result": {"status": "failed", "error_message": "..."}}],
      "after": [...]}]}]
"""
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from cuke_runner.logs import TRACE

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class ReportError(ValueError):
    """The report is not a JSON array of feature entries."""


@dataclass
class HookResult:
    status: str | None = None  # None: hook carried no result, never counts as failed
    error_message: str | None = None
    location: str | None = None


@dataclass
class StepResult:
    name: str = ""
    keyword: str = ""
    line: int | None = None
    status: str | None = None  # passed | failed | skipped | pending | undefined | ambiguous | unknown
    error_message: str | None = None


@dataclass
class Element:
    type: str = "scenario"  # scenario | background
    name: str = ""
    line: int | None = None
    before: list[HookResult] = field(default_factory=list)
    after: list[HookResult] = field(default_factory=list)
    steps: list[StepResult] = field(default_factory=list)

    @property
    def is_background(self) -> bool:
        return self.type == "background"


@dataclass
class FileEntry:
    uri: str = ""
    elements: list[Element] = field(default_factory=list)


# ─── Field readers ───

def _dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    return value if isinstance(value, int) else None


def _parse_hook(raw: Any) -> HookResult:
    raw = _dict(raw)
    status = None
    if isinstance(raw.get("result"), dict):
        status = _str(raw["result"].get("status")) or "unknown"
    return HookResult(
        status=status,
        error_message=_str(_dict(raw.get("result")).get("error_message")),
        location=_str(_dict(raw.get("match")).get("location")),
    )


def _parse_step(raw: Any) -> StepResult:
    raw = _dict(raw)
    result = _dict(raw.get("result"))
    return StepResult(
        name=_str(raw.get("name")) or "",
        keyword=_str(raw.get("keyword")) or "",
        line=_int(raw.get("line")),
        status=_str(result.get("status")),
        error_message=_str(result.get("error_message")),
    )


def _parse_element(raw: Any) -> Element:
    raw = _dict(raw)
    return Element(
        type=_str(raw.get("type")) or "scenario",
        name=_str(raw.get("name")) or "",
        line=_int(raw.get("line")),
        before=[_parse_hook(h) for h in _list(raw.get("before"))],
        after=[_parse_hook(h) for h in _list(raw.get("after"))],
        steps=[_parse_step(s) for s in _list(raw.get("steps"))],
    )


def parse_report(data: Any) -> list[FileEntry]:
    if not isinstance(data, list):
        raise ReportError("Report is not a JSON array")
    entries: list[FileEntry] = []
    for raw in data:
        raw = _dict(raw)
        entries.append(FileEntry(
            uri=_str(raw.get("uri")) or _str(raw.get("id")) or "",
            elements=[_parse_element(e) for e in _list(raw.get("elements"))],
        ))
    return entries


def load_report(text: str) -> list[FileEntry]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ReportError(f"Report is not valid JSON: {e}") from e
    return parse_report(data)


def wait_for_report(
    path: str | Path,
    attempts: int = 20,
    delay: float = 0.5,
    sleep: Callable[[float], None] = time.sleep,
) -> list[FileEntry] | None:
    """Poll until ``path`` holds a JSON array; None once ``attempts`` are used up."""
    report_path = Path(path)
    for attempt in range(1, attempts + 1):
        try:
            if not report_path.exists():
                logger.log(TRACE, "Attempt %d/%d: report does not exist yet: %s", attempt, attempts, report_path)
            else:
                text = report_path.read_bytes().decode("utf-8")
                if not text.strip():
                    logger.log(TRACE, "Attempt %d/%d: report is empty", attempt, attempts)
                else:
                    report = load_report(text)
                    logger.debug("Report is valid after %d attempt(s)", attempt)
                    return report
        except (OSError, UnicodeDecodeError, ReportError) as e:
            logger.log(TRACE, "Attempt %d/%d: %s", attempt, attempts, e)
        if attempt < attempts:
            sleep(delay)

    logger.error("Report %s did not become valid after %d attempts", report_path, attempts)
    return None
