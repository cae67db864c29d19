"""cuke run [target...]: run targets through Cucumber and print the mapped results."""
from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from cuke_runner.config import ConfigError
from cuke_runner.gherkin import render_tree
from cuke_runner.ids import parse_node_id
from cuke_runner.session import Session

if TYPE_CHECKING:
    from cuke_runner.engine import RunResult


def print_results(session: Session, result: RunResult) -> None:
    """Tree per touched feature, then the scenario failures and the summary line."""
    touched = {parse_node_id(n).file_id for n in result.results}
    for feature in session.catalog.features():
        if feature.path in touched:
            print(render_tree(feature, result.results))
            print()

    for node_id, res in result.results.items():
        if res.status != "failed" or parse_node_id(node_id).kind not in ("scenario", "example"):
            continue
        failure = res.failure
        if failure is None:
            continue
        print(f"✗ {session.catalog.label(node_id)}: {failure.label} (line {failure.line})")
        for line in failure.message.splitlines():
            print(f"    {line}")

    mark = "✓" if result.success else "✗"
    print(f"{mark} {result.message}")


def resolve_targets(session: Session, specs: list[str]) -> list[str] | None:
    if not specs:
        return None
    return [session.catalog.resolve_target_spec(s) for s in specs]


def cmd_run(specs: list[str], cwd: str):
    try:
        session = Session(cwd)
    except ConfigError as e:
        print(f"✗ Config error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        try:
            node_ids = resolve_targets(session, specs)
        except ValueError as e:
            print(f"✗ {e}", file=sys.stderr)
            sys.exit(1)

        result = session.executor.run(node_ids)
        print_results(session, result)
        print(session.ctx.status.text)
        if not result:
            sys.exit(1)
    finally:
        session.close()
