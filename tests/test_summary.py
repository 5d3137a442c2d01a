import pytest

from apitrend.engine.summary import RunSummary, SummaryError


def test_summary_from_newman_stats(newman_report):
    s = RunSummary.from_newman(newman_report(passing=1, failing=1))
    assert s.total_requests == 2
    assert s.total_assertions == 2
    assert s.failed_assertions == 1
    assert s.passed_assertions == 1
    assert s.success_rate == 50.0
    assert s.duration_ms == 1500
    assert s.ok is False


def test_summary_all_passing(newman_report):
    s = RunSummary.from_newman(newman_report(passing=3, failing=0))
    assert s.ok is True
    assert s.success_rate == 100.0


def test_no_assertions_counts_as_full_success():
    s = RunSummary(total_requests=1, failed_requests=0, total_assertions=0, failed_assertions=0)
    assert s.success_rate == 100.0


def test_missing_stats_raise():
    with pytest.raises(SummaryError):
        RunSummary.from_newman({"run": {}})
