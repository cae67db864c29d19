"""MCP Server: exposes cuke_* tools for discovering and running Cucumber tests."""
from __future__ import annotations

import json
import os

from mcp.server.fastmcp import FastMCP

from cuke_runner.engine.aggregator import summarize
from cuke_runner.session import Session

mcp = FastMCP("cuke-runner")


def _get_session() -> Session:
    return Session(os.getcwd())


def _node_dict(session: Session, node_id: str, results: dict) -> dict:
    res = results.get(node_id)
    return {
        "id": node_id,
        "label": session.catalog.label(node_id),
        "status": res.status if res else "unmatched",
        "failures": [f.__dict__ for f in res.failures] if res else [],
    }


@mcp.tool()
def cuke_discover() -> str:
    """Discover .feature files and list every runnable test node."""
    try:
        session = _get_session()
    except Exception as e:
        return json.dumps({"error": str(e)}, ensure_ascii=False)
    try:
        features = [
            {
                "path": session.catalog.relative_path(f.path),
                "name": f.name,
                "nodes": session.catalog.descendant_ids(f.path),
            }
            for f in session.catalog.features()
        ]
        return json.dumps({
            "features": features,
            "tests": session.catalog.count_tests(),
            "status": session.ctx.status.text,
        }, ensure_ascii=False, indent=2)
    finally:
        session.close()


@mcp.tool()
def cuke_run(targets: list[str] | None = None) -> str:
    """Run ``path[:line]`` targets (all features when omitted) and return per-node results."""
    try:
        session = _get_session()
    except Exception as e:
        return json.dumps({"error": str(e)}, ensure_ascii=False)
    try:
        node_ids = [session.catalog.resolve_target_spec(t) for t in targets] if targets else None
        result = session.executor.run(node_ids)
        payload = result.to_dict()
        payload["status"] = session.ctx.status.text
        return json.dumps(payload, ensure_ascii=False, indent=2)
    except Exception as e:
        return json.dumps({"error": str(e)}, ensure_ascii=False)
    finally:
        session.close()


@mcp.tool()
def cuke_results(report_path: str, targets: list[str] | None = None) -> str:
    """Map an existing Cucumber JSON report onto the discovered tests."""
    try:
        session = _get_session()
    except Exception as e:
        return json.dumps({"error": str(e)}, ensure_ascii=False)
    try:
        node_ids = [session.catalog.resolve_target_spec(t) for t in targets] if targets else None
        return json.dumps(session.executor.import_report(report_path, node_ids).to_dict(),
                          ensure_ascii=False, indent=2)
    except Exception as e:
        return json.dumps({"error": str(e)}, ensure_ascii=False)
    finally:
        session.close()


@mcp.tool()
def cuke_status() -> str:
    """Last known result of every test node, plus recent run history."""
    try:
        session = _get_session()
    except Exception as e:
        return json.dumps({"error": str(e)}, ensure_ascii=False)
    try:
        results = session.stored_results()
        features = []
        for feature in session.catalog.features():
            summary = summarize(feature, results)
            features.append({
                "path": session.catalog.relative_path(feature.path),
                "summary": summary.__dict__,
                "nodes": [_node_dict(session, n, results) for n in session.catalog.descendant_ids(feature.path)],
            })
        return json.dumps({
            "features": features,
            "history": session.store.get_history(5),
            "status": session.ctx.status.text,
        }, ensure_ascii=False, indent=2)
    except Exception as e:
        return json.dumps({"error": str(e)}, ensure_ascii=False)
    finally:
        session.close()


def run_server():
    mcp.run(transport="stdio")
