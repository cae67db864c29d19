"""cuke watch: keep the catalog in step with .feature edits until interrupted."""
from __future__ import annotations

import sys

from cuke_runner.config import ConfigError
from cuke_runner.engine.scheduler import ReparseScheduler
from cuke_runner.engine.watcher import FeatureWatcher
from cuke_runner.session import Session


def cmd_watch(cwd: str):
    try:
        session = Session(cwd)
    except ConfigError as e:
        print(f"✗ Config error: {e}", file=sys.stderr)
        sys.exit(1)

    scheduler = ReparseScheduler(session.ctx.settings.debounce)
    watcher = FeatureWatcher(session.ctx, session.catalog, scheduler)
    print(f"Watching {session.ctx.root} ({session.ctx.status.text}). Press Ctrl+C to stop.")

    try:
        for touched in watcher.follow():
            for fid in touched:
                action = "updated" if session.catalog.get(fid) else "removed"
                print(f"  {session.catalog.relative_path(fid)} {action}: {session.ctx.status.text}")
    except KeyboardInterrupt:
        print("Stopped watching.")
    finally:
        scheduler.clear()
        session.close()
