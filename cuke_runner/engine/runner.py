"""Cucumber runner invocation: glue discovery, argv construction, process spawn."""
from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cuke_runner.context import RunContext
    from cuke_runner.types import RunTarget


class RunnerError(RuntimeError):
    pass


class Runner(Protocol):
    def run(self, targets: list[RunTarget], report_path: Path) -> int:
        """Execute ``targets``, writing a JSON report to ``report_path``; returns the exit code."""
        ...

# ─── Glue discovery ───

def _has_java(directory: Path) -> bool:
    for _dirpath, _dirnames, filenames in os.walk(directory):
        if any(f.endswith(".java") for f in filenames):
            return True
    return False


def _find_steps_dir(directory: Path) -> Path | None:
    if directory.name.endswith(("steps", "step")) and _has_java(directory):
        return directory
    try:
        children = sorted(p for p in directory.iterdir() if p.is_dir())
    except OSError:
        return None
    for child in children:
        found = _find_steps_dir(child)
        if found:
            return found
    return None


def find_glue_paths(root: str | Path, extra: Iterable[str] = ()) -> list[str]:
    """Configured glue packages plus the first ``steps``/``step`` package under src/test/java."""
    glue = list(extra)
    test_dir = Path(root) / "src" / "test" / "java"
    if test_dir.is_dir():
        steps = _find_steps_dir(test_dir)
        if steps:
            package = ".".join(steps.relative_to(test_dir).parts)
            if package not in glue:
                glue.append(package)
    return glue

# ─── Command line ───

def build_cucumber_args(
    targets: Iterable[RunTarget],
    glue_paths: Iterable[str],
    report_path: str | Path,
    object_factory: str | None = None,
) -> list[str]:
    args: list[str] = []
    for glue in glue_paths:
        args += ["--glue", glue]
    args += ["--plugin", "pretty", "--plugin", f"json:{report_path}"]
    if object_factory:
        args += ["--object-factory", object_factory]
    args += [t.cucumber_path for t in targets]
    return args


class CucumberRunner:
    def __init__(self, ctx: RunContext):
        self.ctx = ctx

    def command(self, targets: list[RunTarget], report_path: Path) -> list[str]:
        settings = self.ctx.settings
        glue = find_glue_paths(self.ctx.root, settings.glue_paths)
        if not glue:
            raise RunnerError("Glue path not specified: set glue_paths in .cuke/config.yaml")

        argv = list(settings.runner_command)
        if settings.classpath:
            classpath = os.pathsep.join(str(self.ctx.root / c) for c in settings.classpath)
            argv[1:1] = ["-cp", classpath]
        return argv + build_cucumber_args(targets, glue, report_path, settings.object_factory)

    def run(self, targets: list[RunTarget], report_path: Path) -> int:
        argv = self.command(targets, report_path)
        self.ctx.logger.info("Running %d target(s)", len(targets))
        self.ctx.logger.debug("Runner command: %s", " ".join(argv))
        try:
            proc = subprocess.run(argv, cwd=self.ctx.root, timeout=self.ctx.settings.timeout, check=False)
        except FileNotFoundError as e:
            raise RunnerError(f"Runner executable not found: {argv[0]}") from e
        except subprocess.TimeoutExpired as e:
            raise RunnerError(f"Runner timed out after {self.ctx.settings.timeout:g}s") from e
        return proc.returncode
