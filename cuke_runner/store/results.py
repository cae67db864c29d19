"""SQLite-backed store of the last known result per catalog node, plus run history."""
from __future__ import annotations

import json
import sqlite3
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from cuke_runner.ids import parse_node_id
from cuke_runner.types import FailureInfo, NodeResult

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from cuke_runner.types import RunSummary

INIT_SQL = """
CREATE TABLE IF NOT EXISTS node_results (
    node_id TEXT PRIMARY KEY,
    file_id TEXT NOT NULL,
    status TEXT NOT NULL,
    failures TEXT NOT NULL DEFAULT '[]',
    run_id INTEGER,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS node_results_file ON node_results (file_id);

CREATE TABLE IF NOT EXISTS run_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    targets TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'running',
    total INTEGER NOT NULL DEFAULT 0,
    passed INTEGER NOT NULL DEFAULT 0,
    failed INTEGER NOT NULL DEFAULT 0,
    unmatched INTEGER NOT NULL DEFAULT 0,
    started_at TEXT NOT NULL,
    finished_at TEXT
);
"""


def _now() -> str:
    return datetime.now(tz=UTC).strftime("%Y-%m-%d %H:%M:%S")


def _dump_failures(failures: list[FailureInfo]) -> str:
    return json.dumps([f.__dict__ for f in failures], ensure_ascii=False)


def _load_failures(raw: str) -> list[FailureInfo]:
    return [FailureInfo(**f) for f in json.loads(raw or "[]")]


class ResultStore:
    def __init__(self, db_path: str | Path):
        self.db = sqlite3.connect(str(db_path))
        self.db.execute("PRAGMA journal_mode = WAL")
        self.db.executescript(INIT_SQL)

    # ─── Runs ───

    def start_run(self, targets: Iterable[str]) -> int:
        cur = self.db.execute(
            "INSERT INTO run_history (targets, started_at) VALUES (?, ?)",
            (json.dumps(list(targets), ensure_ascii=False), _now()),
        )
        self.db.commit()
        return int(cur.lastrowid)

    def finish_run(self, run_id: int, summary: RunSummary, status: str | None = None) -> None:
        self.db.execute(
            """UPDATE run_history
               SET status = ?, total = ?, passed = ?, failed = ?, unmatched = ?, finished_at = ?
               WHERE id = ?""",
            (
                status or ("passed" if summary.success else "failed"),
                summary.total, summary.passed, summary.failed, summary.unmatched,
                _now(), run_id,
            ),
        )
        self.db.commit()

    def get_history(self, limit: int = 20) -> list[dict]:
        rows = self.db.execute(
            "SELECT id, targets, status, total, passed, failed, unmatched, started_at, finished_at "
            "FROM run_history ORDER BY id DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [
            {"id": r[0], "targets": json.loads(r[1]), "status": r[2], "total": r[3],
             "passed": r[4], "failed": r[5], "unmatched": r[6],
             "started_at": r[7], "finished_at": r[8]}
            for r in rows
        ]

    # ─── Node results ───

    def record(self, run_id: int | None, results: Iterable[NodeResult]) -> int:
        """Upsert results; ``unmatched`` results are skipped so prior state persists."""
        count = 0
        for res in results:
            if res.status == "unmatched":
                continue
            self.db.execute(
                """INSERT OR REPLACE INTO node_results
                   (node_id, file_id, status, failures, run_id, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (res.node_id, parse_node_id(res.node_id).file_id, res.status,
                 _dump_failures(res.failures), run_id, _now()),
            )
            count += 1
        self.db.commit()
        return count

    def get(self, node_id: str) -> NodeResult | None:
        row = self.db.execute(
            "SELECT node_id, status, failures FROM node_results WHERE node_id = ?", (node_id,)
        ).fetchone()
        if not row:
            return None
        return NodeResult(row[0], row[1], _load_failures(row[2]))

    def get_file(self, file_id: str) -> dict[str, NodeResult]:
        rows = self.db.execute(
            "SELECT node_id, status, failures FROM node_results WHERE file_id = ?", (file_id,)
        ).fetchall()
        return {r[0]: NodeResult(r[0], r[1], _load_failures(r[2])) for r in rows}

    def forget_file(self, file_id: str) -> None:
        self.db.execute("DELETE FROM node_results WHERE file_id = ?", (file_id,))
        self.db.commit()

    def reset(self) -> None:
        self.db.execute("DELETE FROM node_results")
        self.db.execute("DELETE FROM run_history")
        self.db.commit()

    def close(self) -> None:
        self.db.close()
