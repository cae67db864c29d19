"""Tests for rolling scenario outcomes up the catalog tree."""
from __future__ import annotations

from conftest import CALCULATOR_FEATURE, entry, failing, passing

from cuke_runner.engine.aggregator import aggregate, count_tests, runnable_ids, summarize
from cuke_runner.engine.reconciler import match_outcomes, reconcile
from cuke_runner.engine.report import parse_report
from cuke_runner.gherkin import parse_feature

FID = "/w/calc.feature"
ADD = f"{FID}:scenario:6"
MULTIPLY = f"{FID}:scenario:10"
ROW_1 = f"{MULTIPLY}:example:16"
ROW_2 = f"{MULTIPLY}:example:17"
RULE = f"{FID}:rule:19"
DIVIDE = f"{FID}:scenario:21"


def _results(elements: list[dict]):
    feature = parse_feature(CALCULATOR_FEATURE, path=FID)
    (file_entry,) = parse_report([entry("calc.feature", elements)])
    return feature, aggregate(feature, match_outcomes(feature, reconcile(file_entry)))


def _status(results, node_id):
    return results[node_id].status


def test_every_node_gets_a_result():
    _, results = _results([])
    assert set(results) == {FID, ADD, MULTIPLY, ROW_1, ROW_2, RULE, DIVIDE}
    assert {r.status for r in results.values()} == {"unmatched"}


def test_all_passed():
    _, results = _results([
        passing("Add two numbers", 6), passing("Multiply", 16), passing("Multiply", 17),
        passing("Divide by one", 21),
    ])
    assert {r.status for r in results.values()} == {"passed"}
    assert all(not r.failures for r in results.values())


def test_failing_example_fails_outline_and_feature_only():
    _, results = _results([
        passing("Add two numbers", 6), passing("Multiply", 16), failing("Multiply", 17),
        passing("Divide by one", 21),
    ])
    assert _status(results, ROW_1) == "passed"
    assert _status(results, ROW_2) == "failed"
    assert _status(results, MULTIPLY) == "failed"
    assert _status(results, ADD) == "passed"
    assert _status(results, RULE) == "passed"
    assert _status(results, FID) == "failed"
    assert results[MULTIPLY].failure.line == 19


def test_outline_with_one_reported_row_passes():
    _, results = _results([passing("Multiply", 16)])
    assert _status(results, ROW_1) == "passed"
    assert _status(results, ROW_2) == "unmatched"
    assert _status(results, MULTIPLY) == "passed"


def test_rule_and_feature_partial():
    _, results = _results([passing("Add two numbers", 6)])
    assert _status(results, ADD) == "passed"
    assert _status(results, RULE) == "unmatched"
    assert _status(results, FID) == "partial"


def test_failure_in_rule_propagates():
    _, results = _results([passing("Add two numbers", 6), failing("Divide by one", 21, "div")])
    assert _status(results, DIVIDE) == "failed"
    assert _status(results, RULE) == "failed"
    assert _status(results, FID) == "failed"
    assert [f.message for f in results[FID].failures] == ["div"]


def test_feature_failures_in_document_order():
    _, results = _results([
        failing("Divide by one", 21, "third"), failing("Multiply", 17, "second"),
        failing("Add two numbers", 6, "first"),
    ])
    assert [f.message for f in results[FID].failures] == ["first", "second", "third"]


def test_runnable_ids_and_count():
    feature = parse_feature(CALCULATOR_FEATURE, path=FID)
    assert runnable_ids(feature) == [ADD, ROW_1, ROW_2, DIVIDE]
    assert count_tests(feature) == 4


def test_summarize_whole_feature():
    feature, results = _results([passing("Add two numbers", 6), failing("Multiply", 16)])
    summary = summarize(feature, results)
    assert (summary.total, summary.passed, summary.failed, summary.unmatched) == (4, 1, 1, 2)
    assert not summary.success


def test_summarize_within_subtree():
    feature, results = _results([passing("Add two numbers", 6), failing("Multiply", 16)])
    summary = summarize(feature, results, within=[MULTIPLY, ROW_1, ROW_2])
    assert (summary.total, summary.passed, summary.failed, summary.unmatched) == (2, 0, 1, 1)
