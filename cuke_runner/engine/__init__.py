from cuke_runner.engine.catalog import Catalog
from cuke_runner.engine.executor import RunExecutor, RunResult

__all__ = ["Catalog", "RunExecutor", "RunResult"]
