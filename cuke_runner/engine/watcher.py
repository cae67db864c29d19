"""Filesystem watcher for .feature files, feeding the re-parse scheduler.

Change sets come from ``watchfiles``; the scheduler decides when each file is
re-parsed. Deletions bypass the debounce and drop the file at once.
"""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from watchfiles import Change, DefaultFilter, watch

from cuke_runner.ids import file_id

if TYPE_CHECKING:
    import threading
    from collections.abc import Iterable, Iterator

    from cuke_runner.context import RunContext
    from cuke_runner.engine.catalog import Catalog
    from cuke_runner.engine.scheduler import ReparseScheduler

TICK_MS = 250


class FeatureFilter(DefaultFilter):
    """Accept ``.feature`` files under ``root`` that sit outside the excluded directories."""

    def __init__(self, root: str | Path, exclude_dirs: Iterable[str]):
        # Excluded names are matched below the root only, not against its parents
        super().__init__(ignore_dirs=())
        self.root = Path(root).resolve()
        self.exclude_dirs = frozenset(exclude_dirs)

    def __call__(self, change: Change, path: str) -> bool:
        if not path.endswith(".feature"):
            return False
        try:
            parts = Path(path).relative_to(self.root).parts
        except ValueError:
            return False
        if any(part in self.exclude_dirs for part in parts[:-1]):
            return False
        return super().__call__(change, path)


class FeatureWatcher:
    def __init__(self, ctx: RunContext, catalog: Catalog, scheduler: ReparseScheduler):
        self.ctx = ctx
        self.catalog = catalog
        self.scheduler = scheduler
        self.filter = FeatureFilter(ctx.root, ctx.settings.exclude_dirs)

    def apply(self, changes: Iterable[tuple[Change, str]]) -> list[str]:
        """Schedule re-parses for a change set; returns the file ids removed."""
        removed: list[str] = []
        for change, path in sorted(changes, key=lambda c: c[1]):
            if not self.filter(change, path):
                continue
            fid = file_id(path)
            # Editors that save by rename report delete + add for one path, so
            # the file on disk decides, not the change kind.
            if Path(fid).is_file():
                self.ctx.logger.debug("Change detected (%s), scheduling re-parse: %s", change.name, fid)
                self.scheduler.schedule(fid)
            elif fid not in removed:
                self.scheduler.cancel(fid)
                if self.catalog.remove_file(fid):
                    self.ctx.logger.debug("Removed deleted feature: %s", fid)
                removed.append(fid)
        return removed

    def flush(self, now: float | None = None) -> list[str]:
        """Re-parse every file whose debounce has elapsed."""
        updated = self.scheduler.pop_due(now)
        for fid in updated:
            self.catalog.update_file(fid)
        return updated

    def poll(self, changes: Iterable[tuple[Change, str]] = (), now: float | None = None) -> list[str]:
        """One watch iteration; returns the file ids re-parsed or removed."""
        touched = self.apply(changes)
        touched += [fid for fid in self.flush(now) if fid not in touched]
        if touched:
            self.ctx.status.update_test_count(self.catalog.count_tests())
        return touched

    def follow(self, stop_event: threading.Event | None = None, tick_ms: int = TICK_MS) -> Iterator[list[str]]:
        """Block on filesystem events, yielding each non-empty batch of touched file ids.

        Quiet ticks still yield from ``watchfiles`` so debounced re-parses fire
        without a further edit.
        """
        for changes in watch(
            self.ctx.root,
            watch_filter=self.filter,
            stop_event=stop_event,
            rust_timeout=tick_ms,
            yield_on_timeout=True,
        ):
            touched = self.poll(changes)
            if touched:
                yield touched
