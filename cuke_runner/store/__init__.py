from cuke_runner.store.results import ResultStore

__all__ = ["ResultStore"]
