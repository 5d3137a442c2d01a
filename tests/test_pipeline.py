import json
from pathlib import Path

import pytest

from apitrend.models import PipelineConfig
from apitrend.runtime.orchestrator import run_pipeline
from apitrend.runtime.proc_tools import CommandResult
from apitrend.stages import allure_generate_v1, fetch_collection_v1, newman_run_v1
from apitrend.stages.registry import default_registry


SECRET = "abc123def456ghi789"


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        pass

    def json(self):
        return self._payload


@pytest.fixture
def fake_tools(monkeypatch, newman_report):
    """Stands in for the Postman API, newman and allure."""
    seen = {"merged": []}

    def fake_get(url, headers=None, timeout=None):
        seen["url"] = url
        seen["headers"] = headers
        return FakeResponse({"collection": {"info": {"name": "Kwant API"}, "item": []}})

    def fake_newman(args, **kwargs):
        out = Path(args[args.index("--reporter-json-export") + 1])
        out.write_text(json.dumps(newman_report(passing=1, failing=1)))
        return CommandResult(returncode=1, stdout="", stderr="")

    def fake_allure(args, **kwargs):
        results, report = Path(args[2]), Path(args[4])
        seen["merged"].append(sorted(p.name for p in (results / "history").iterdir()))
        seen["results_text"] = "".join(p.read_text() for p in results.glob("*-result.json"))
        (report / "history").mkdir(parents=True, exist_ok=True)
        (report / "history" / "history.json").write_text("{}")
        (report / "history" / "history-trend.json").write_text("[]")
        (report / "index.html").write_text("<html></html>")
        return CommandResult(returncode=0, stdout="", stderr="")

    monkeypatch.setattr(fetch_collection_v1.requests, "get", fake_get)
    monkeypatch.setattr(newman_run_v1, "run_command", fake_newman)
    monkeypatch.setattr(allure_generate_v1, "run_command", fake_allure)
    return seen


def _config() -> PipelineConfig:
    return PipelineConfig.model_validate({"postman": {"collection_uid": "c-42", "api_key": "PMAK-key"}})


def test_one_passing_one_failing_assertion(tmp_path: Path, fake_tools):
    result = run_pipeline(config=_config(), stage_registry=default_registry(), root=tmp_path, run_id="run-1")

    assert result.summary.total_requests == 2
    assert result.summary.total_assertions == 2
    assert result.summary.failed_assertions == 1
    assert result.exit_code == 1

    statuses = {r.stage: r.status for r in result.results}
    for stage in ("prepare", "fetch", "run", "convert", "redact", "trend", "merge_history", "report", "snapshot_history"):
        assert statuses[stage] == "ok", stage
    assert statuses["deploy"] == "skipped"
    assert statuses["notify"] == "skipped"

    assert fake_tools["url"] == "https://api.getpostman.com/collections/c-42"
    assert fake_tools["headers"] == {"X-Api-Key": "PMAK-key"}


def test_first_run_has_empty_history_then_one_entry(tmp_path: Path, fake_tools):
    run_pipeline(config=_config(), stage_registry=default_registry(), root=tmp_path)

    assert fake_tools["merged"] == [[]]
    entries = [p for p in (tmp_path / ".history").iterdir() if p.is_dir()]
    assert len(entries) == 1
    assert sorted(p.name for p in entries[0].iterdir()) == ["history-trend.json", "history.json"]


def test_artifacts_are_redacted_before_report(tmp_path: Path, fake_tools):
    run_pipeline(config=_config(), stage_registry=default_registry(), root=tmp_path)

    newman_json = (tmp_path / "reports" / "newman-report.json").read_text()
    assert SECRET not in newman_json
    assert "***REDACTED***" in newman_json
    assert SECRET not in fake_tools["results_text"]
    assert (tmp_path / "allure-results" / "executor.properties").exists()


def test_four_runs_keep_three_history_entries(tmp_path: Path, fake_tools):
    for i in range(4):
        run_pipeline(config=_config(), stage_registry=default_registry(), root=tmp_path, run_id=f"run-{i}")

    entries = [p for p in (tmp_path / ".history").iterdir() if p.is_dir()]
    assert len(entries) == 3
    # the fourth report saw the three earlier runs, two files each
    assert len(fake_tools["merged"][3]) == 6
    trend = json.loads((tmp_path / "reports" / "trend.json").read_text())
    assert len(trend) == 4


def test_fetch_failure_is_fatal(tmp_path: Path, fake_tools, monkeypatch):
    import requests

    def refuse(url, headers=None, timeout=None):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(fetch_collection_v1.requests, "get", refuse)
    result = run_pipeline(config=_config(), stage_registry=default_registry(), root=tmp_path)

    assert result.aborted is True
    assert result.exit_code == 1
    assert result.status_of("run") is None
    assert "connection refused" in result.results[-1].message


def test_reports_are_redacted_when_conversion_fails(tmp_path: Path, fake_tools, monkeypatch):
    from apitrend.stages import allure_convert_v1

    def broken(*args, **kwargs):
        raise ValueError("unexpected newman layout")

    monkeypatch.setattr(allure_convert_v1, "convert_newman_report", broken)
    result = run_pipeline(config=_config(), stage_registry=default_registry(), root=tmp_path)

    assert result.status_of("convert") == "failed"
    assert result.status_of("redact") == "ok"
    leaked = [p.name for p in (tmp_path / "reports").rglob("*") if p.is_file() and SECRET in p.read_text()]
    assert leaked == []
    assert result.exit_code == 1
