"""In-memory test catalog: one parsed Feature per .feature file.

A file's subtree is always replaced wholesale (one dict assignment) when its
text changes, so readers never observe a half-updated feature and other files'
nodes are never touched.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from cuke_runner.engine.aggregator import count_tests
from cuke_runner.gherkin.parser import locate_example, locate_scenario, parse_feature
from cuke_runner.ids import example_id, file_id, parse_node_id, rule_id, scenario_id
from cuke_runner.types import ExampleRow, Feature, Rule, RunTarget, Scenario

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from cuke_runner.context import RunContext

CatalogNode = Feature | Rule | Scenario | ExampleRow


def iter_feature_files(root: Path, exclude_dirs: Iterable[str]) -> Iterator[Path]:
    excluded = set(exclude_dirs)
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in excluded)
        for name in sorted(filenames):
            if name.endswith(".feature"):
                yield Path(dirpath) / name


class Catalog:
    def __init__(self, ctx: RunContext):
        self.ctx = ctx
        self._features: dict[str, Feature] = {}

    # ─── Lifecycle ───

    def update_file(self, path: str | Path, text: str | None = None) -> int:
        """Re-parse one file and swap its subtree in; returns its test count."""
        fid = file_id(path)
        if text is None:
            try:
                text = Path(fid).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                self.ctx.logger.error("Cannot read %s: %s", fid, e)
                self.remove_file(fid)
                return 0

        feature = parse_feature(text, path=fid)
        if feature is None:
            self.ctx.logger.debug("No feature found in %s", fid)
            self.remove_file(fid)
            return 0

        action = "Updating" if fid in self._features else "Adding"
        self._features[fid] = feature
        count = count_tests(feature)
        self.ctx.logger.debug('%s feature "%s" (%d tests) from %s', action, feature.name, count, fid)
        return count

    def remove_file(self, path: str | Path) -> bool:
        return self._features.pop(file_id(path), None) is not None

    def refresh(self) -> int:
        """Clear everything and rediscover every .feature file under the workspace root."""
        self._features = {}
        files = list(iter_feature_files(self.ctx.root, self.ctx.settings.exclude_dirs))
        self.ctx.logger.info("Found %d feature file(s)", len(files))
        total = sum(self.update_file(f) for f in files)
        self.ctx.status.update_test_count(total)
        return total

    # ─── Queries ───

    def features(self) -> list[Feature]:
        return [self._features[k] for k in sorted(self._features)]

    def get(self, path: str | Path) -> Feature | None:
        return self._features.get(file_id(path))

    def count_tests(self) -> int:
        return sum(count_tests(f) for f in self._features.values())

    def __len__(self) -> int:
        return len(self._features)

    def resolve(self, node_id: str) -> CatalogNode | None:
        ref = parse_node_id(node_id)
        feature = self._features.get(ref.file_id)
        if feature is None:
            return None
        match ref.kind:
            case "feature":
                return feature
            case "rule":
                return next((r for r in feature.rules if r.line == ref.rule_line), None)
            case "scenario":
                return next((s for s in feature.iter_scenarios() if s.line == ref.scenario_line), None)
            case "example":
                scenario = next((s for s in feature.iter_scenarios() if s.line == ref.scenario_line), None)
                if scenario is None:
                    return None
                return next((r for r in scenario.examples if r.line == ref.example_line), None)
        return None

    def parent_id(self, node_id: str) -> str | None:
        ref = parse_node_id(node_id)
        feature = self._features.get(ref.file_id)
        if feature is None or ref.kind == "feature":
            return None
        if ref.kind == "example":
            return scenario_id(ref.file_id, ref.scenario_line)
        if ref.kind == "scenario":
            for rule in feature.rules:
                if any(s.line == ref.scenario_line for s in rule.scenarios):
                    return rule_id(ref.file_id, rule.line)
        return ref.file_id

    def descendant_ids(self, node_id: str) -> list[str]:
        """``node_id`` and every node id below it, in document order."""
        node = self.resolve(node_id)
        ref = parse_node_id(node_id)
        fid = ref.file_id
        if node is None:
            return []
        if isinstance(node, ExampleRow):
            return [node_id]
        if isinstance(node, Scenario):
            return [node_id, *(example_id(fid, node.line, r.line) for r in node.examples)]
        if isinstance(node, Rule):
            ids = [node_id]
            for s in node.scenarios:
                ids.extend(self.descendant_ids(scenario_id(fid, s.line)))
            return ids
        ids = [fid]
        for child in node.children:
            if isinstance(child, Rule):
                ids.extend(self.descendant_ids(rule_id(fid, child.line)))
            else:
                ids.extend(self.descendant_ids(scenario_id(fid, child.line)))
        return ids

    def label(self, node_id: str) -> str:
        node = self.resolve(node_id)
        match node:
            case Feature():
                return node.name
            case Rule():
                return f"Rule: {node.name}"
            case Scenario():
                return node.name
            case ExampleRow():
                return f"Example: {node.data}"
        return node_id

    # ─── Run selection ───

    def select_roots(self, node_ids: Iterable[str]) -> list[str]:
        """Drop selected nodes whose ancestor is selected too; keeps first-seen order."""
        selected = list(dict.fromkeys(node_ids))
        chosen = set(selected)
        roots = []
        for node_id in selected:
            parent = self.parent_id(node_id)
            covered = False
            while parent is not None:
                if parent in chosen:
                    covered = True
                    break
                parent = self.parent_id(parent)
            if not covered:
                roots.append(node_id)
        return roots

    def relative_path(self, fid: str) -> str:
        try:
            rel = Path(fid).relative_to(self.ctx.root)
        except ValueError:
            rel = Path(fid)
        return rel.as_posix()

    def target_for(self, node_id: str) -> RunTarget:
        ref = parse_node_id(node_id)
        path = self.relative_path(ref.file_id)
        match ref.kind:
            case "rule":
                return RunTarget(path, scenario_line=ref.rule_line)
            case "scenario":
                return RunTarget(path, scenario_line=ref.scenario_line)
            case "example":
                return RunTarget(path, scenario_line=ref.scenario_line, example_line=ref.example_line)
        return RunTarget(path)

    def resolve_target_spec(self, spec: str) -> str:
        """Node id for a ``path[:line]`` target as typed on the command line.

        A line on an example data row selects that row, any other line inside
        a scenario block selects the scenario, a ``Rule:`` line selects the rule.
        """
        path, line = spec, None
        head, sep, tail = spec.rpartition(":")
        if sep and tail.isdigit():
            path, line = head, int(tail)

        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.ctx.root / candidate
        fid = file_id(candidate)
        feature = self._features.get(fid)
        if feature is None:
            raise ValueError(f"Not a known feature file: {path}")
        if line is None:
            return fid

        for rule in feature.rules:
            if rule.line == line:
                return rule_id(fid, line)

        text = Path(fid).read_text(encoding="utf-8")
        example = locate_example(text, line)
        if example is not None and self.resolve(example_id(fid, *example)) is not None:
            return example_id(fid, *example)
        scenario = locate_scenario(text, line)
        if scenario is not None and self.resolve(scenario_id(fid, scenario.line)) is not None:
            return scenario_id(fid, scenario.line)
        raise ValueError(f"No scenario at {path}:{line}")
