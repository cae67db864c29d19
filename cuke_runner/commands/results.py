"""cuke results <report> [target...]: map an existing Cucumber JSON report onto the tree."""
from __future__ import annotations

import sys

from cuke_runner.commands.run import print_results, resolve_targets
from cuke_runner.config import ConfigError
from cuke_runner.engine.report import ReportError
from cuke_runner.session import Session


def cmd_results(report_path: str, specs: list[str], cwd: str):
    try:
        session = Session(cwd)
    except ConfigError as e:
        print(f"✗ Config error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        try:
            node_ids = resolve_targets(session, specs)
            result = session.executor.import_report(report_path, node_ids)
        except (OSError, ReportError, ValueError) as e:
            print(f"✗ {e}", file=sys.stderr)
            sys.exit(1)

        print_results(session, result)
        if not result:
            sys.exit(1)
    finally:
        session.close()
