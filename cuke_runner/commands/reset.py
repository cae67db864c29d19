"""cuke reset [path]: forget stored results, for every feature or just one file."""
from __future__ import annotations

from pathlib import Path

from cuke_runner.config import CONFIG_DIR
from cuke_runner.ids import file_id
from cuke_runner.store import ResultStore


def cmd_reset(path: str | None, cwd: str):
    db_path = Path(cwd) / CONFIG_DIR / "results.db"

    if not db_path.exists():
        print("Nothing to reset: no results database found.")
        return

    store = ResultStore(db_path)
    try:
        if path is None:
            store.reset()
            print("Results and run history cleared.")
        else:
            target = Path(path) if Path(path).is_absolute() else Path(cwd) / path
            store.forget_file(file_id(target))
            print(f"Results cleared for {path}.")
    finally:
        store.close()
