from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

# ─── Catalog (parsed from .feature text) ───

@dataclass
class ExampleRow:
    line: int
    data: str  # trimmed row text, e.g. "| 5 | 7 |"

    @property
    def cells(self) -> list[str]:
        inner = self.data.strip()
        if inner.startswith("|"):
            inner = inner[1:]
        if inner.endswith("|"):
            inner = inner[:-1]
        return [c.strip() for c in inner.split("|")]


@dataclass
class Scenario:
    name: str
    line: int
    outline: bool = False
    examples: list[ExampleRow] = field(default_factory=list)


@dataclass
class Rule:
    name: str
    line: int
    scenarios: list[Scenario] = field(default_factory=list)


@dataclass
class Feature:
    name: str
    line: int
    path: str = ""
    children: list[Scenario | Rule] = field(default_factory=list)  # document order

    @property
    def scenarios(self) -> list[Scenario]:
        return [c for c in self.children if isinstance(c, Scenario)]

    @property
    def rules(self) -> list[Rule]:
        return [c for c in self.children if isinstance(c, Rule)]

    def iter_scenarios(self) -> Iterator[Scenario]:
        for child in self.children:
            if isinstance(child, Rule):
                yield from child.scenarios
            else:
                yield child

# ─── Reconciliation results ───

@dataclass
class FailureInfo:
    label: str    # "Before Hook Failed", "When I add 5", ...
    message: str
    line: int     # 1-indexed source line to navigate to (0 = unknown)


@dataclass
class ScenarioOutcome:
    name: str
    line: int | None
    passed: bool
    failure: FailureInfo | None = None


@dataclass
class NodeResult:
    node_id: str
    status: str  # passed | failed | unmatched | partial
    failures: list[FailureInfo] = field(default_factory=list)

    @property
    def failure(self) -> FailureInfo | None:
        return self.failures[0] if self.failures else None

# ─── Runner invocation ───

@dataclass
class RunTarget:
    path: str  # workspace-relative, forward slashes
    scenario_line: int | None = None
    example_line: int | None = None

    @property
    def cucumber_path(self) -> str:
        line = self.example_line or self.scenario_line
        return f"{self.path}:{line}" if line else self.path


@dataclass
class RunSummary:
    total: int = 0
    passed: int = 0
    failed: int = 0
    unmatched: int = 0

    @property
    def success(self) -> bool:
        return self.failed == 0

    def __add__(self, other: RunSummary) -> RunSummary:
        return RunSummary(
            total=self.total + other.total,
            passed=self.passed + other.passed,
            failed=self.failed + other.failed,
            unmatched=self.unmatched + other.unmatched,
        )
