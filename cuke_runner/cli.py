"""Thin CLI router: dispatches to commands and the MCP server."""
from __future__ import annotations

import os
import sys

USAGE = """\
cuke-runner: discover Gherkin features, run Cucumber, map results onto scenarios

Usage:
  cuke init                        Create .cuke/config.yaml with the default settings
  cuke discover                    Find .feature files and print the test tree
  cuke run [path[:line] ...]       Run features, rules, scenarios or example rows
  cuke results <report> [target]   Map an existing Cucumber JSON report onto the tree
  cuke status                      Show the last known results and recent runs
  cuke watch                       Re-parse feature files as they change
  cuke reset [path]                Forget stored results (all, or one feature file)

Internal:
  cuke mcp-server                  Start MCP Server
"""


def main():
    args = sys.argv[1:]
    cwd = os.getcwd()
    command = args[0] if args else None

    if command == "init":
        from cuke_runner.commands.init import cmd_init
        cmd_init(cwd)

    elif command == "discover":
        from cuke_runner.commands.discover import cmd_discover
        cmd_discover(cwd)

    elif command == "run":
        from cuke_runner.commands.run import cmd_run
        cmd_run(args[1:], cwd)

    elif command == "results":
        if len(args) < 2:
            print("Usage: cuke results <report.json> [path[:line] ...]", file=sys.stderr)
            sys.exit(1)
        from cuke_runner.commands.results import cmd_results
        cmd_results(args[1], args[2:], cwd)

    elif command == "status":
        from cuke_runner.commands.status import cmd_status
        cmd_status(cwd)

    elif command == "watch":
        from cuke_runner.commands.watch import cmd_watch
        cmd_watch(cwd)

    elif command == "reset":
        from cuke_runner.commands.reset import cmd_reset
        cmd_reset(args[1] if len(args) > 1 else None, cwd)

    elif command == "mcp-server":
        from cuke_runner.integrations.mcp_server import run_server
        run_server()

    elif command in ("help", "--help", "-h", None):
        print(USAGE)

    else:
        print(f"Unknown command: {command}", file=sys.stderr)
        print(USAGE)
        sys.exit(1)
