"""Roll reconciled outcomes up the catalog tree: example -> scenario -> rule -> feature."""
from __future__ import annotations

from typing import TYPE_CHECKING

from cuke_runner.ids import example_id, file_id, rule_id, scenario_id
from cuke_runner.types import FailureInfo, NodeResult, Rule, RunSummary

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cuke_runner.engine.reconciler import NodeMatch
    from cuke_runner.types import Feature, Scenario, ScenarioOutcome


def _status(outcomes: list[ScenarioOutcome]) -> str:
    if not outcomes:
        return "unmatched"
    return "passed" if all(o.passed for o in outcomes) else "failed"


def _failures(outcomes: Iterable[ScenarioOutcome]) -> list[FailureInfo]:
    result = []
    for o in outcomes:
        if o.passed:
            continue
        result.append(o.failure or FailureInfo(label="Scenario failed", message="Scenario failed", line=o.line or 0))
    return result


def _group_status(scenario_results: list[NodeResult]) -> str:
    statuses = [r.status for r in scenario_results]
    if "failed" in statuses:
        return "failed"
    if statuses and all(s == "passed" for s in statuses):
        return "passed"
    if all(s == "unmatched" for s in statuses):
        return "unmatched"
    return "partial"


def _scenario_results(
    fid: str,
    scenario: Scenario,
    matches: list[NodeMatch],
    results: dict[str, NodeResult],
) -> NodeResult:
    own = [m.outcome for m in matches if m.scenario is scenario and m.example is None]
    collected = list(own)
    failures = _failures(own)

    for row in scenario.examples:
        row_outcomes = [m.outcome for m in matches if m.example is row]
        eid = example_id(fid, scenario.line, row.line)
        row_result = NodeResult(eid, _status(row_outcomes), _failures(row_outcomes))
        results[eid] = row_result
        collected.extend(row_outcomes)
        failures.extend(row_result.failures)

    sid = scenario_id(fid, scenario.line)
    result = NodeResult(sid, _status(collected), failures)
    results[sid] = result
    return result


def aggregate(feature: Feature, matches: list[NodeMatch]) -> dict[str, NodeResult]:
    """Status for every node of ``feature``, keyed by node id.

    Scenarios pass when at least one outcome reached them and all passed.
    Rules and the feature pass only when every scenario below them passed.
    """
    fid = file_id(feature.path) if feature.path else ""
    results: dict[str, NodeResult] = {}
    top: list[NodeResult] = []

    for child in feature.children:
        if isinstance(child, Rule):
            inner = [_scenario_results(fid, s, matches, results) for s in child.scenarios]
            rid = rule_id(fid, child.line)
            results[rid] = NodeResult(
                rid, _group_status(inner), [f for r in inner for f in r.failures]
            )
            top.extend(inner)
        else:
            top.append(_scenario_results(fid, child, matches, results))

    results[fid] = NodeResult(fid, _group_status(top), [f for r in top for f in r.failures])
    return results


def runnable_ids(feature: Feature) -> list[str]:
    """Leaf node ids: example rows of outlines that have rows, otherwise the scenario."""
    fid = file_id(feature.path) if feature.path else ""
    ids: list[str] = []
    for scenario in feature.iter_scenarios():
        if scenario.examples:
            ids.extend(example_id(fid, scenario.line, row.line) for row in scenario.examples)
        else:
            ids.append(scenario_id(fid, scenario.line))
    return ids


def count_tests(feature: Feature) -> int:
    return len(runnable_ids(feature))


def summarize(feature: Feature, results: dict[str, NodeResult], within: Iterable[str] | None = None) -> RunSummary:
    """Counts over runnable leaves, optionally restricted to the ids in ``within``."""
    leaves = runnable_ids(feature)
    if within is not None:
        allowed = set(within)
        leaves = [i for i in leaves if i in allowed]
    summary = RunSummary(total=len(leaves))
    for leaf in leaves:
        res = results.get(leaf)
        status = res.status if res else "unmatched"
        if status == "passed":
            summary.passed += 1
        elif status == "failed":
            summary.failed += 1
        else:
            summary.unmatched += 1
    return summary
