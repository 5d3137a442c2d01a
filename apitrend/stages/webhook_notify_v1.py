from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from apitrend.engine.summary import RunSummary
from apitrend.runtime.artifact_store import ArtifactStore
from apitrend.runtime.context import RunContext
from apitrend.stages.base import Stage


class NotifyError(RuntimeError):
    pass


def build_payload(summary: RunSummary, report_url: Optional[str], run_id: str, project: str) -> Dict[str, Any]:
    icon = "✅" if summary.ok else "❌"
    lines = [
        f"{icon} {project}: {summary.passed_assertions}/{summary.total_assertions} assertions passed "
        f"({summary.success_rate}%)",
        f"Requests: {summary.total_requests} total, {summary.failed_requests} failed",
    ]
    if report_url:
        lines.append(f"Report: {report_url}")
    return {
        "text": "\n".join(lines),
        "run_id": run_id,
        "total": summary.total_assertions,
        "passed": summary.passed_assertions,
        "failed": summary.failed_assertions,
        "total_requests": summary.total_requests,
        "failed_requests": summary.failed_requests,
        "success_rate": summary.success_rate,
        "report_url": report_url,
    }


class WebhookNotifyV1(Stage):
    def run(self, ctx: RunContext, store: ArtifactStore) -> Dict[str, Any]:
        notify = ctx.config.notify
        if not notify.webhook_url:
            return {"status": "skipped", "message": "no webhook configured", "artifacts": []}
        if ctx.summary is None:
            raise NotifyError("no run summary to send")

        report_url = (ctx.outputs.get("deploy") or {}).get("url") or ctx.config.deploy.report_url
        payload = build_payload(ctx.summary, report_url, ctx.run_id, ctx.config.report.project)
        try:
            res = requests.post(notify.webhook_url, json=payload, timeout=notify.timeout)
            res.raise_for_status()
        except requests.RequestException as e:
            raise NotifyError(ctx.redactor.redact(f"Webhook notification failed: {e}")) from e

        print("📣 Summary sent to webhook")
        return {"message": "webhook notified", "artifacts": [], "meta": {"status_code": res.status_code}}
