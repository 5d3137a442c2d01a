import json
from pathlib import Path

from apitrend.engine.allure import convert_newman_report, history_id, render_properties


def test_render_properties():
    assert render_properties({"executor.name": "apitrend", "executor.type": "CLI"}) == (
        "executor.name=apitrend\nexecutor.type=CLI"
    )


def test_convert_writes_one_result_per_execution(tmp_path: Path, newman_report):
    written = convert_newman_report(newman_report(passing=1, failing=1), tmp_path, project="Kwant")

    assert len(written) == 2
    results = sorted((json.loads(p.read_text()) for p in written), key=lambda r: r["name"])
    passed, failed = results

    assert all(p.name.endswith("-result.json") for p in written)
    assert passed["status"] == "passed"
    assert failed["status"] == "failed"
    assert failed["steps"][0]["statusDetails"]["message"] == "expected 500 to equal 200"
    assert passed["steps"][0]["statusDetails"] == {}
    assert passed["description"] == "GET https://api.example.com/items/0"
    assert {"name": "feature", "value": "Kwant"} in passed["labels"]
    assert {"name": "suite", "value": "Kwant API"} in passed["labels"]
    assert passed["start"] == 1700000000000
    assert failed["start"] == passed["stop"]


def test_history_id_is_stable_across_runs(tmp_path: Path, newman_report):
    first = convert_newman_report(newman_report(), tmp_path / "a", project="Kwant")
    second = convert_newman_report(newman_report(), tmp_path / "b", project="Kwant")
    ids_a = {json.loads(p.read_text())["historyId"] for p in first}
    ids_b = {json.loads(p.read_text())["historyId"] for p in second}
    assert ids_a == ids_b
    assert history_id("Kwant API", "Request 0") in ids_a


def test_request_error_marks_result_broken(tmp_path: Path):
    report = {
        "run": {
            "executions": [
                {"item": {"name": "Timeout"}, "requestError": {"message": "ETIMEDOUT"}, "assertions": []}
            ]
        }
    }
    [path] = convert_newman_report(report, tmp_path, project="Kwant", now_ms=5)
    result = json.loads(path.read_text())
    assert result["status"] == "broken"
    assert result["statusDetails"]["message"] == "ETIMEDOUT"
    assert result["start"] == 5
