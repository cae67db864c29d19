"""Locate a feature file's entry in a Cucumber JSON report.

Reports name files inconsistently across runner versions: workspace-relative
(``src/test/resources/a.feature``), absolute, or as a ``file:`` URI. Paths are
compared after normalization, tolerating any of those forms.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import unquote

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cuke_runner.engine.report import FileEntry

logger = logging.getLogger(__name__)


def normalize_path(path: str) -> str:
    if path.startswith("file://"):
        path = unquote(path[len("file://"):])
    elif path.startswith("file:"):
        path = unquote(path[len("file:"):])
    path = path.replace("\\", "/")
    if path.startswith("./"):
        path = path[2:]
    if path.startswith("/"):
        path = path[1:]
    return path.lower()


def is_same_feature_path(target: str, candidate: str) -> bool:
    a = normalize_path(target)
    b = normalize_path(candidate)
    if not a or not b:
        return False

    if a == b:
        return True

    # Either side may carry the longer (absolute) form
    shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
    if longer.endswith("/" + shorter):
        return True

    short_parts = shorter.split("/")
    long_parts = longer.split("/")
    if short_parts[-1] != long_parts[-1]:
        return False
    if len(long_parts) >= len(short_parts):
        return "/".join(long_parts[-len(short_parts):]) == shorter
    return False


def entry_identity(entry: FileEntry) -> str:
    return entry.uri or ""


def locate_file_entry(report: Iterable[FileEntry], target: str) -> FileEntry | None:
    """First report entry whose file identity matches ``target``."""
    for entry in report:
        identity = entry_identity(entry)
        matched = is_same_feature_path(target, identity)
        logger.debug("Comparing %s with report path %s: %s", target, identity, matched)
        if matched:
            return entry
    return None
