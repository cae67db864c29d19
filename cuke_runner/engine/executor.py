"""Run orchestration: select catalog nodes, invoke the runner, reconcile the report.

The runner and the report wait are the only blocking points; everything after
the report is confirmed to be a JSON array is pure reconciliation over the
catalog, checked for cancellation between selected nodes.
"""
from __future__ import annotations

import contextlib
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any

from cuke_runner.engine.aggregator import aggregate, summarize
from cuke_runner.engine.matcher import locate_file_entry
from cuke_runner.engine.reconciler import failure_messages, has_feature_failures, match_outcomes, reconcile
from cuke_runner.engine.report import load_report, wait_for_report
from cuke_runner.engine.runner import CucumberRunner, RunnerError
from cuke_runner.ids import parse_node_id
from cuke_runner.types import FailureInfo, NodeResult, RunSummary

if TYPE_CHECKING:
    import threading
    from collections.abc import Callable, Iterable

    from cuke_runner.context import RunContext
    from cuke_runner.engine.catalog import Catalog
    from cuke_runner.engine.report import FileEntry
    from cuke_runner.engine.runner import Runner
    from cuke_runner.store.results import ResultStore

# ─── Result type ───

class RunResult:
    def __init__(
        self,
        success: bool,
        message: str,
        summary: RunSummary | None = None,
        results: dict[str, NodeResult] | None = None,
    ):
        self.success = success
        self.message = message
        self.summary = summary or RunSummary()
        self.results = results or {}

    def __bool__(self) -> bool:
        return self.success

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "summary": self.summary.__dict__,
            "results": {
                node_id: {
                    "status": r.status,
                    "failures": [f.__dict__ for f in r.failures],
                }
                for node_id, r in self.results.items()
            },
        }


def _describe(summary: RunSummary) -> str:
    return f"{summary.passed} passed, {summary.failed} failed, {summary.unmatched} not run"

# ─── Executor ───

class RunExecutor:
    def __init__(
        self,
        ctx: RunContext,
        catalog: Catalog,
        store: ResultStore,
        runner: Runner | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.ctx = ctx
        self.catalog = catalog
        self.store = store
        self.runner = runner or CucumberRunner(ctx)
        self._sleep = sleep

    def _selection(self, node_ids: Iterable[str] | None) -> list[str]:
        if node_ids is None:
            node_ids = [f.path for f in self.catalog.features()]
        selected = self.catalog.select_roots(node_ids)
        unknown = [n for n in selected if self.catalog.resolve(n) is None]
        if unknown:
            raise ValueError(f"Unknown test node(s): {', '.join(unknown)}")
        return selected

    def _report_path(self) -> Path:
        report_dir = self.ctx.root / self.ctx.settings.report_dir
        report_dir.mkdir(parents=True, exist_ok=True)
        return report_dir / f".cucumber-result-{time.time_ns() // 1_000_000}.json"

    def _fail_all(self, selected: list[str], run_id: int, failure: FailureInfo, status: str) -> RunResult:
        results = {n: NodeResult(n, "failed", [failure]) for n in selected}
        self.store.record(run_id, results.values())
        summary = RunSummary(total=len(selected), failed=len(selected))
        self.store.finish_run(run_id, summary, status=status)
        self.ctx.status.update_failed()
        return RunResult(False, f"{failure.label}: {failure.message}", summary, results)

    def run(self, node_ids: Iterable[str] | None = None, cancel: threading.Event | None = None) -> RunResult:
        """Run the selected nodes (default: every feature) and record their results."""
        selected = self._selection(node_ids)
        if not selected:
            return RunResult(True, "Nothing to run")

        targets = [self.catalog.target_for(n) for n in selected]
        name = self.catalog.label(selected[0]) if len(selected) == 1 else f"{len(selected)} tests"
        self.ctx.status.update_running(name)
        run_id = self.store.start_run(selected)
        report_path = self._report_path()

        try:
            exit_code = self.runner.run(targets, report_path)
        except RunnerError as e:
            self.ctx.logger.error("Runner failed: %s", e)
            return self._fail_all(selected, run_id, FailureInfo("Run failed", str(e), 0), "error")

        settings = self.ctx.settings
        try:
            report = wait_for_report(report_path, settings.report_attempts, settings.report_delay, sleep=self._sleep)
            if report is None:
                failure = FailureInfo(
                    "No results",
                    f"Could not determine outcome: no valid report was produced (exit code {exit_code}). "
                    "Check the runner output.",
                    0,
                )
                return self._fail_all(selected, run_id, failure, "error")

            results, summary = self.apply_report(report, selected, cancel=cancel, run_id=run_id)
        finally:
            with contextlib.suppress(OSError):
                report_path.unlink(missing_ok=True)

        return self._finish(run_id, summary, results)

    def import_report(self, report_path: str | Path, node_ids: Iterable[str] | None = None) -> RunResult:
        """Reconcile an existing report file onto the selected nodes without running anything."""
        report = load_report(Path(report_path).read_text(encoding="utf-8"))
        selected = self._selection(node_ids)
        run_id = self.store.start_run(selected)
        results, summary = self.apply_report(report, selected, run_id=run_id)
        return self._finish(run_id, summary, results)

    def _finish(self, run_id: int, summary: RunSummary, results: dict[str, NodeResult]) -> RunResult:
        failed = any(r.status == "failed" for r in results.values())
        self.store.finish_run(run_id, summary, status="failed" if failed else None)
        if failed:
            self.ctx.status.update_failed(summary.failed or None)
        else:
            self.ctx.status.update_passed()
        return RunResult(not failed, _describe(summary), summary, results)

    def apply_report(
        self,
        report: list[FileEntry],
        node_ids: Iterable[str] | None = None,
        cancel: threading.Event | None = None,
        run_id: int | None = None,
    ) -> tuple[dict[str, NodeResult], RunSummary]:
        """Reconcile ``report`` onto the selected nodes and record what it speaks to."""
        selected = self._selection(node_ids)
        results: dict[str, NodeResult] = {}
        summary = RunSummary()

        for node_id in selected:
            if cancel is not None and cancel.is_set():
                self.ctx.logger.info("Reconciliation cancelled, %d node(s) left", len(selected) - selected.index(node_id))
                break

            ref = parse_node_id(node_id)
            feature = self.catalog.get(ref.file_id)
            if feature is None:
                continue

            entry = locate_file_entry(report, ref.file_id)
            outcomes = reconcile(entry) if entry is not None else []
            if entry is None:
                self.ctx.logger.warning("No report entry for %s", self.catalog.relative_path(ref.file_id))
            file_results = aggregate(feature, match_outcomes(feature, outcomes))

            subtree = self.catalog.descendant_ids(node_id)
            picked = {i: file_results[i] for i in subtree if i in file_results}

            if ref.kind == "feature":
                failed = has_feature_failures(report, ref.file_id)
                failures = failure_messages(outcomes) if failed else []
                if failed and not failures:
                    failures = [FailureInfo("Test failed", "Feature failed; see the runner output", feature.line)]
                picked[ref.file_id] = NodeResult(ref.file_id, "failed" if failed else "passed", failures)

            # Ancestors only change when this report settles them; partial or
            # unmatched roll-ups keep whatever was stored before.
            rolled: list[NodeResult] = []
            parent = self.catalog.parent_id(node_id)
            while parent is not None:
                res = file_results.get(parent)
                if res is not None and res.status in ("passed", "failed"):
                    rolled.append(res)
                parent = self.catalog.parent_id(parent)

            self.store.record(run_id, [*picked.values(), *rolled])
            results.update(picked)
            summary += summarize(feature, file_results, within=subtree)

        return results, summary
