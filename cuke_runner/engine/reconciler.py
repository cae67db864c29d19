"""Derive per-scenario outcomes from a report entry and map them onto the catalog.

Each non-background element is classified in this order:
  1. before hooks   first non-passed hook fails the scenario, steps are not read
  2. steps          first step that is neither passed nor skipped is the failure;
                    all-skipped means a setup fault, zero steps is an empty scenario
  3. after hooks    a non-passed hook fails the scenario, keeping any earlier label
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cuke_runner.engine.matcher import locate_file_entry
from cuke_runner.logs import TRACE
from cuke_runner.types import ExampleRow, FailureInfo, Scenario, ScenarioOutcome

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cuke_runner.engine.report import Element, FileEntry, HookResult
    from cuke_runner.types import Feature

logger = logging.getLogger(__name__)

BEFORE_HOOK_FAILED = "Before Hook Failed"
AFTER_HOOK_FAILED = "After Hook Failed"
SETUP_ERROR = "Scenario Setup Error"
EMPTY_SCENARIO = "Empty Scenario"

# Failures that belong to the scenario as a whole, not to one of its steps
SCENARIO_LEVEL_LABELS = frozenset({BEFORE_HOOK_FAILED, AFTER_HOOK_FAILED, SETUP_ERROR, EMPTY_SCENARIO})


def _hook_failed(hook: HookResult) -> bool:
    return hook.status is not None and hook.status != "passed"


def _hook_failure(label: str, hook: HookResult, line: int) -> FailureInfo:
    location = hook.location or "Unknown location"
    error = hook.error_message or f"Hook failed with status: {hook.status}"
    return FailureInfo(label=label, message=f"Hook Location: {location}\n\n{error}", line=line)


def _step_failure(element: Element, scenario_line: int) -> FailureInfo | None:
    for step in element.steps:
        status = step.status
        logger.log(TRACE, 'Step "%s" at line %s: %s', step.name, step.line, status or "no result")
        if status in ("passed", "skipped"):
            continue
        label = f"{step.keyword.strip()} {step.name or 'Unknown step'}".strip()
        message = step.error_message or (f"Step {status}" if status else "Step has no result")
        return FailureInfo(label=label, message=message, line=step.line or scenario_line)

    if all(step.status == "skipped" for step in element.steps):
        return FailureInfo(
            label=SETUP_ERROR,
            message="All steps were skipped. Check for errors in @Before hooks or step definitions.",
            line=scenario_line,
        )
    return None


def classify_element(element: Element) -> ScenarioOutcome:
    line = element.line or 0
    failure: FailureInfo | None = None
    passed = True

    for hook in element.before:
        if _hook_failed(hook):
            failure = _hook_failure(BEFORE_HOOK_FAILED, hook, line)
            break

    if failure is None:
        if element.steps:
            failure = _step_failure(element, line)
        else:
            failure = FailureInfo(label=EMPTY_SCENARIO, message="Scenario has no steps", line=line)

    for hook in element.after:
        if _hook_failed(hook):
            passed = False
            if failure is None:
                failure = _hook_failure(AFTER_HOOK_FAILED, hook, line)
            break

    if failure is not None:
        passed = False

    outcome = ScenarioOutcome(name=element.name or "Unnamed scenario", line=element.line, passed=passed, failure=failure)
    logger.debug(
        'Scenario "%s" at line %s: %s', outcome.name, outcome.line, "PASSED" if passed else "FAILED"
    )
    return outcome


def reconcile(entry: FileEntry) -> list[ScenarioOutcome]:
    """One outcome per non-background element, in report order.

    Mapping onto catalog nodes is left to :func:`match_outcomes`.
    """
    outcomes = [classify_element(e) for e in entry.elements if not e.is_background]
    logger.debug("Reconciled %d scenario(s) for %s", len(outcomes), entry.uri)
    return outcomes


def has_failures(entry: FileEntry) -> bool:
    for element in entry.elements:
        if element.is_background:
            continue
        if not classify_element(element).passed:
            return True
    return False


def has_feature_failures(report: list[FileEntry] | None, target: str) -> bool:
    """Whole-file verdict.

    A report that never became valid fails closed; a valid report that lacks
    the file is presumed to hold nothing that could have failed.
    """
    if report is None:
        logger.error("No valid report for %s, treating it as failed", target)
        return True
    entry = locate_file_entry(report, target)
    if entry is None:
        logger.warning("Feature %s not found in report, assuming passed", target)
        return False
    return has_failures(entry)


def failure_messages(outcomes: Iterable[ScenarioOutcome]) -> list[FailureInfo]:
    """User-facing messages for every failed outcome, prefixed with the scenario."""
    messages: list[FailureInfo] = []
    for outcome in outcomes:
        if outcome.passed or outcome.failure is None:
            continue
        f = outcome.failure
        messages.append(FailureInfo(
            label=f.label,
            message=f"Scenario: {outcome.name} (line {outcome.line})\n\n{f.label}\n\n{f.message}",
            line=f.line,
        ))
    return messages

# ─── Catalog mapping ───

@dataclass
class NodeMatch:
    scenario: Scenario
    example: ExampleRow | None
    outcome: ScenarioOutcome


def match_outcomes(feature: Feature, outcomes: Iterable[ScenarioOutcome]) -> list[NodeMatch]:
    """Attach each outcome to the scenario or example row declared on its line.

    An outline reports once per example row, on that row's line. When several
    nodes share a line the one whose scenario name equals the report name wins.
    """
    by_line: dict[int, list[tuple[Scenario, ExampleRow | None]]] = {}
    for scenario in feature.iter_scenarios():
        by_line.setdefault(scenario.line, []).append((scenario, None))
        for row in scenario.examples:
            by_line.setdefault(row.line, []).append((scenario, row))

    matches: list[NodeMatch] = []
    for outcome in outcomes:
        candidates = by_line.get(outcome.line) if outcome.line is not None else None
        if not candidates:
            logger.debug('No catalog node at line %s for scenario "%s", skipping', outcome.line, outcome.name)
            continue
        scenario, row = next(
            ((s, r) for s, r in candidates if s.name == outcome.name),
            candidates[0],
        )
        matches.append(NodeMatch(scenario=scenario, example=row, outcome=outcome))
    return matches
