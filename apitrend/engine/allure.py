from __future__ import annotations

import hashlib
import json
import time
import uuid
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional


def render_properties(values: Mapping[str, object]) -> str:
    """`key=value` lines, as Allure expects for executor/environment files."""
    return "\n".join(f"{k}={v}" for k, v in values.items())


def history_id(collection: str, request: str) -> str:
    # stable across runs so Allure can line up trends
    return hashlib.md5(f"{collection}::{request}".encode("utf-8")).hexdigest()


def _request_url(request: Mapping[str, Any]) -> str:
    url = request.get("url")
    if isinstance(url, str):
        return url
    if not isinstance(url, dict):
        return ""
    if url.get("raw"):
        return str(url["raw"])
    host = url.get("host") or []
    path = url.get("path") or []
    host_s = ".".join(host) if isinstance(host, list) else str(host)
    path_s = "/".join(path) if isinstance(path, list) else str(path)
    base = f"{url.get('protocol', 'https')}://{host_s}"
    return f"{base}/{path_s}" if path_s else base


def _error_message(error: Any) -> str:
    if isinstance(error, dict):
        return str(error.get("message") or error.get("name") or "error")
    return str(error)


def build_result(
    execution: Mapping[str, Any],
    *,
    collection_name: str,
    project: str,
    start_ms: int,
) -> Dict[str, Any]:
    item = execution.get("item") or {}
    name = item.get("name") or "Unnamed Request"
    response = execution.get("response") or {}
    stop_ms = start_ms + int(response.get("responseTime") or 1)

    steps: List[Dict[str, Any]] = []
    status = "passed"
    for assertion in execution.get("assertions") or []:
        error = assertion.get("error")
        step_status = "failed" if error else "passed"
        steps.append(
            {
                "name": assertion.get("assertion") or "assertion",
                "status": step_status,
                "stage": "finished",
                "start": start_ms,
                "stop": stop_ms,
                "statusDetails": {
                    "message": _error_message(error),
                    "trace": json.dumps(error, indent=2, default=str),
                }
                if error
                else {},
            }
        )
        if error:
            status = "failed"

    status_details: Dict[str, Any] = {}
    request_error = execution.get("requestError")
    if request_error:
        status = "broken"
        status_details = {"message": _error_message(request_error)}

    request = execution.get("request") or {}
    method = request.get("method") or ""
    description = f"{method} {_request_url(request)}".strip()

    result: Dict[str, Any] = {
        "uuid": str(uuid.uuid4()),
        "historyId": history_id(collection_name, name),
        "name": name,
        "fullName": f"{collection_name} / {name}",
        "status": status,
        "stage": "finished",
        "start": start_ms,
        "stop": stop_ms,
        "labels": [
            {"name": "suite", "value": collection_name},
            {"name": "feature", "value": project},
            {"name": "story", "value": name},
            {"name": "epic", "value": "Postman Collection"},
        ],
        "steps": steps,
    }
    if description:
        result["description"] = description
    if status_details:
        result["statusDetails"] = status_details
    if response.get("code") is not None:
        result["parameters"] = [{"name": "response code", "value": str(response["code"])}]
    return result


def convert_newman_report(
    report: Mapping[str, Any],
    results_dir: Path,
    *,
    project: str,
    now_ms: Optional[int] = None,
) -> List[Path]:
    """
    Write one `<uuid>-result.json` per newman execution into results_dir.
    Returns the written paths.
    """
    collection = report.get("collection") or {}
    info = collection.get("info") or {}
    collection_name = info.get("name") or "Postman Collection"
    run = report.get("run") or {}
    started = (run.get("timings") or {}).get("started")
    start_ms = int(started) if isinstance(started, (int, float)) else (now_ms or int(time.time() * 1000))

    results_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    for execution in run.get("executions") or []:
        result = build_result(
            execution,
            collection_name=collection_name,
            project=project,
            start_ms=start_ms,
        )
        path = results_dir / f"{result['uuid']}-result.json"
        path.write_text(json.dumps(result, indent=2), encoding="utf-8")
        written.append(path)
        start_ms = result["stop"]
    return written
