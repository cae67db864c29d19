"""cuke discover: find feature files, parse them, print the test tree."""
from __future__ import annotations

import sys

from cuke_runner.config import ConfigError
from cuke_runner.gherkin import render_tree
from cuke_runner.session import Session


def cmd_discover(cwd: str):
    try:
        session = Session(cwd)
    except ConfigError as e:
        print(f"✗ Config error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        features = session.catalog.features()
        if not features:
            print("No feature files found.")
            return

        for feature in features:
            print(f"# {session.catalog.relative_path(feature.path)}")
            print(render_tree(feature))
            print()

        print(f"✓ {len(features)} feature file(s), {session.catalog.count_tests()} tests")
        print(session.ctx.status.text)
    finally:
        session.close()
