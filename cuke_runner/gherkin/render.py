"""Render a Feature catalog as an indented text tree."""
from __future__ import annotations

from typing import TYPE_CHECKING

from cuke_runner.ids import example_id, file_id, rule_id, scenario_id
from cuke_runner.types import Rule

if TYPE_CHECKING:
    from cuke_runner.types import Feature, NodeResult, Scenario

MARKERS = {
    "passed": "✓",
    "failed": "✗",
    "partial": "◐",
    "unmatched": "·",
}


def _marker(node_id: str, results: dict[str, NodeResult] | None) -> str:
    if results is None:
        return ""
    res = results.get(node_id)
    return MARKERS.get(res.status if res else "unmatched", "·") + " "


def _render_scenario(
    fid: str,
    scenario: Scenario,
    indent: str,
    results: dict[str, NodeResult] | None,
    lines: list[str],
) -> None:
    sid = scenario_id(fid, scenario.line)
    kind = "Scenario Outline" if scenario.outline else "Scenario"
    lines.append(f"{indent}{_marker(sid, results)}{kind}: {scenario.name} (line {scenario.line})")
    for row in scenario.examples:
        eid = example_id(fid, scenario.line, row.line)
        lines.append(f"{indent}  {_marker(eid, results)}Example: {row.data} (line {row.line})")
    if results is not None:
        res = results.get(sid)
        if res and res.failure:
            lines.append(f"{indent}    ↳ {res.failure.label} (line {res.failure.line})")


def render_tree(feature: Feature, results: dict[str, NodeResult] | None = None) -> str:
    """One line per node; with ``results`` each line is prefixed by a status marker."""
    fid = file_id(feature.path) if feature.path else ""
    lines = [f"{_marker(fid, results)}Feature: {feature.name} (line {feature.line})"]
    for child in feature.children:
        if isinstance(child, Rule):
            rid = rule_id(fid, child.line)
            lines.append(f"  {_marker(rid, results)}Rule: {child.name} (line {child.line})")
            for scenario in child.scenarios:
                _render_scenario(fid, scenario, "    ", results, lines)
        else:
            _render_scenario(fid, child, "  ", results, lines)
    return "\n".join(lines)
