"""Tests for glue discovery, Cucumber argv construction and process errors."""
from __future__ import annotations

import os
import subprocess
from pathlib import Path

import pytest

from cuke_runner.engine.runner import CucumberRunner, RunnerError, build_cucumber_args, find_glue_paths
from cuke_runner.types import RunTarget

# ─── Glue discovery ───

def test_finds_steps_package(tmp_path):
    steps = tmp_path / "src/test/java/com/example/steps"
    steps.mkdir(parents=True)
    (steps / "CalculatorSteps.java").write_text("class CalculatorSteps {}")
    assert find_glue_paths(tmp_path) == ["com.example.steps"]


def test_steps_dir_without_java_is_skipped(tmp_path):
    (tmp_path / "src/test/java/com/empty/steps").mkdir(parents=True)
    other = tmp_path / "src/test/java/com/real/step"
    other.mkdir(parents=True)
    (other / "Hooks.java").write_text("class Hooks {}")
    assert find_glue_paths(tmp_path) == ["com.real.step"]


def test_java_in_nested_package_counts(tmp_path):
    nested = tmp_path / "src/test/java/org/acme/teststeps/calc"
    nested.mkdir(parents=True)
    (nested / "CalcSteps.java").write_text("class CalcSteps {}")
    assert find_glue_paths(tmp_path) == ["org.acme.teststeps"]


def test_configured_glue_comes_first_without_duplicates(tmp_path):
    steps = tmp_path / "src/test/java/com/example/steps"
    steps.mkdir(parents=True)
    (steps / "S.java").write_text("class S {}")
    assert find_glue_paths(tmp_path, ["com.shared", "com.example.steps"]) == ["com.shared", "com.example.steps"]


def test_no_test_sources(tmp_path):
    assert find_glue_paths(tmp_path) == []
    assert find_glue_paths(tmp_path, ["com.shared"]) == ["com.shared"]

# ─── Arguments ───

def test_build_args_order():
    targets = [
        RunTarget("features/calc.feature"),
        RunTarget("features/calc.feature", scenario_line=10, example_line=17),
        RunTarget("features/login.feature", scenario_line=3),
    ]
    args = build_cucumber_args(targets, ["com.a", "com.b"], "/tmp/r.json", "com.example.Factory")
    assert args == [
        "--glue", "com.a", "--glue", "com.b",
        "--plugin", "pretty", "--plugin", "json:/tmp/r.json",
        "--object-factory", "com.example.Factory",
        "features/calc.feature", "features/calc.feature:17", "features/login.feature:3",
    ]


def test_build_args_without_object_factory():
    args = build_cucumber_args([RunTarget("a.feature")], ["g"], "r.json")
    assert "--object-factory" not in args

# ─── CucumberRunner ───

def test_command_inserts_classpath(harness_factory):
    h = harness_factory()
    runner = CucumberRunner(h.context())
    argv = runner.command([RunTarget("a.feature", scenario_line=4)], Path("/tmp/r.json"))
    classpath = os.pathsep.join([str(h.root / "target/test-classes"), str(h.root / "target/classes")])
    assert argv[:4] == ["java", "-cp", classpath, "io.cucumber.core.cli.Main"]
    assert argv[4:6] == ["--glue", "com.example.steps"]
    assert argv[-1] == "a.feature:4"


def test_command_without_classpath(harness_factory):
    h = harness_factory(config="glue_paths: [g]\nclasspath: []\nrunner_command: [cucumber]\n")
    argv = CucumberRunner(h.context()).command([RunTarget("a.feature")], Path("r.json"))
    assert argv[:3] == ["cucumber", "--glue", "g"]


def test_command_requires_glue(harness_factory):
    h = harness_factory(config=None)
    with pytest.raises(RunnerError, match="Glue path not specified"):
        CucumberRunner(h.context()).command([RunTarget("a.feature")], Path("r.json"))


def test_run_returns_exit_code(harness_factory, monkeypatch):
    h = harness_factory()
    seen = {}

    def fake_run(argv, cwd, timeout, check):
        seen.update(argv=argv, cwd=cwd, timeout=timeout)
        return subprocess.CompletedProcess(argv, 1)

    monkeypatch.setattr(subprocess, "run", fake_run)
    assert CucumberRunner(h.context()).run([RunTarget("a.feature")], Path("r.json")) == 1
    assert seen["cwd"] == h.root
    assert seen["timeout"] == 600


def test_missing_executable(harness_factory):
    h = harness_factory(config="glue_paths: [g]\nrunner_command: [/definitely/not/here/java]\n")
    with pytest.raises(RunnerError, match="not found"):
        CucumberRunner(h.context()).run([RunTarget("a.feature")], Path("r.json"))


def test_timeout(harness_factory, monkeypatch):
    h = harness_factory(config="glue_paths: [g]\ntimeout: 5\n")

    def fake_run(argv, cwd, timeout, check):
        raise subprocess.TimeoutExpired(argv, timeout)

    monkeypatch.setattr(subprocess, "run", fake_run)
    with pytest.raises(RunnerError, match="timed out after 5s"):
        CucumberRunner(h.context()).run([RunTarget("a.feature")], Path("r.json"))
