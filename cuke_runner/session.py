"""Composition root shared by the CLI commands and the MCP server."""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from cuke_runner.context import RunContext
from cuke_runner.engine import Catalog, RunExecutor
from cuke_runner.store import ResultStore

if TYPE_CHECKING:
    from cuke_runner.context import StatusBar
    from cuke_runner.engine.runner import Runner


class Session:
    """Context, catalog, result store and executor for one workspace.

    The catalog is discovered on open; call :meth:`close` when done.
    """

    def __init__(self, root: str | Path, *, runner: Runner | None = None, status: StatusBar | None = None):
        self.ctx = RunContext.create(root, status=status)
        self.ctx.state_dir.mkdir(parents=True, exist_ok=True)
        self.catalog = Catalog(self.ctx)
        self.catalog.refresh()
        self.store = ResultStore(self.ctx.db_path)
        self.executor = RunExecutor(self.ctx, self.catalog, self.store, runner)

    def stored_results(self) -> dict:
        results = {}
        for feature in self.catalog.features():
            results.update(self.store.get_file(feature.path))
        return results

    def close(self) -> None:
        self.store.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
