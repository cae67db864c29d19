"""Parse Gherkin feature text into a catalog of scenarios and example rows."""
from __future__ import annotations

import logging

from cuke_runner.types import ExampleRow, Feature, Rule, Scenario

logger = logging.getLogger(__name__)

# Recognized at the start of a trimmed line, case-sensitive
FEATURE = "Feature:"
RULE = "Rule:"
SCENARIO = "Scenario:"
OUTLINE = "Scenario Outline:"
EXAMPLES = "Examples:"
TABLE_ROW = "|"


def _after(line: str, keyword: str) -> str:
    return line[len(keyword):].strip()


def find_example_row(lines: list[str], index: int) -> int | None:
    """Classify the table row at ``index`` (0-based).

    Returns the 1-indexed line of the owning ``Scenario Outline:`` when the
    row is an example data row, or None for header rows and tables that are
    not under an ``Examples:`` heading.
    """
    examples_at = -1
    for i in range(index, -1, -1):
        if lines[i].strip().startswith(EXAMPLES):
            examples_at = i
            break
    if examples_at == -1:
        return None

    header_at = -1
    for i in range(examples_at + 1, len(lines)):
        if lines[i].strip().startswith(TABLE_ROW):
            header_at = i
            break
    if header_at == -1 or index <= header_at:
        return None

    for i in range(examples_at, -1, -1):
        if lines[i].strip().startswith(OUTLINE):
            return i + 1
    return None


def parse_feature(text: str, path: str = "") -> Feature | None:
    """Build a Feature from document text; None when there is no ``Feature:`` line."""
    lines = text.split("\n")

    feature_name: str | None = None
    feature_line = 0
    children: list[Scenario | Rule] = []
    current_rule: Rule | None = None
    current_scenario: Scenario | None = None
    # None -> not in an Examples block, "heading" -> waiting for the table,
    # "rows" -> inside the table; a blank or non-table line closes it
    examples_block: str | None = None

    for idx, raw in enumerate(lines):
        line = raw.strip()
        lineno = idx + 1

        if examples_block == "rows" and not line.startswith(TABLE_ROW):
            examples_block = None

        if line.startswith(FEATURE):
            if feature_name is None:
                feature_name = _after(line, FEATURE)
                feature_line = lineno
            else:
                logger.debug("Ignoring extra Feature: at line %d in %s", lineno, path or "<text>")

        elif line.startswith(RULE):
            current_rule = Rule(name=_after(line, RULE), line=lineno)
            children.append(current_rule)
            current_scenario = None
            examples_block = None

        elif line.startswith(OUTLINE) or line.startswith(SCENARIO):
            outline = line.startswith(OUTLINE)
            keyword = OUTLINE if outline else SCENARIO
            current_scenario = Scenario(name=_after(line, keyword), line=lineno, outline=outline)
            if current_rule is not None:
                current_rule.scenarios.append(current_scenario)
            else:
                children.append(current_scenario)
            examples_block = None

        elif line.startswith(EXAMPLES):
            examples_block = "heading"

        elif line.startswith(TABLE_ROW):
            if examples_block is None:
                continue
            examples_block = "rows"
            if current_scenario is None or not current_scenario.outline:
                continue
            owner = find_example_row(lines, idx)
            if owner != current_scenario.line:
                continue
            current_scenario.examples.append(ExampleRow(line=lineno, data=line))

    if feature_name is None:
        logger.debug("No Feature: line found in %s", path or "<text>")
        return None

    return Feature(name=feature_name, line=feature_line, path=path, children=children)


def locate_scenario(text: str, line: int) -> Scenario | None:
    """Scenario (or outline) whose block contains the 1-indexed ``line``."""
    lines = text.split("\n")
    if line < 1 or line > len(lines):
        return None
    for i in range(line - 1, -1, -1):
        stripped = lines[i].strip()
        if stripped.startswith(OUTLINE):
            return Scenario(name=_after(stripped, OUTLINE), line=i + 1, outline=True)
        if stripped.startswith(SCENARIO):
            return Scenario(name=_after(stripped, SCENARIO), line=i + 1)
        if stripped.startswith(RULE) or stripped.startswith(FEATURE):
            return None
    return None


def locate_example(text: str, line: int) -> tuple[int, int] | None:
    """(scenario_line, example_line) when ``line`` is an example data row."""
    lines = text.split("\n")
    if line < 1 or line > len(lines):
        return None
    if not lines[line - 1].strip().startswith(TABLE_ROW):
        return None
    owner = find_example_row(lines, line - 1)
    if owner is None:
        return None
    return (owner, line)
