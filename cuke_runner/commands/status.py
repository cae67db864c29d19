"""cuke status: last known results per feature, plus recent run history."""
from __future__ import annotations

import sys

from cuke_runner.config import ConfigError
from cuke_runner.gherkin import render_tree
from cuke_runner.session import Session


def cmd_status(cwd: str, history: int = 5):
    try:
        session = Session(cwd)
    except ConfigError as e:
        print(f"✗ Config error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        results = session.stored_results()
        for feature in session.catalog.features():
            print(render_tree(feature, results))
            print()

        runs = session.store.get_history(history)
        if runs:
            print("Recent runs:")
        for run in runs:
            print(f'  #{run["id"]} {run["status"]:<8} {run["passed"]} passed, {run["failed"]} failed, '
                  f'{run["unmatched"]} not run  ({run["started_at"]})')
        print(session.ctx.status.text)
    finally:
        session.close()
