from __future__ import annotations

import json
from typing import Any, Dict

from apitrend.engine.summary import RunSummary, SummaryError
from apitrend.runtime.artifact_store import ArtifactStore
from apitrend.runtime.context import RunContext
from apitrend.runtime.proc_tools import CommandError, run_command
from apitrend.stages.base import Stage

REPORT_NAME = "newman-report.json"


class ExecutionError(RuntimeError):
    pass


class NewmanRunV1(Stage):
    def run(self, ctx: RunContext, store: ArtifactStore) -> Dict[str, Any]:
        """
        Runs the fetched collection once with the newman CLI.
        A non-zero exit with a readable JSON report only means assertions
        failed; anything else is an execution error.
        """
        collection_path = store.path("collection.json")
        if not collection_path.exists():
            raise ExecutionError("collection.json missing; fetch stage did not run")

        report_path = store.path(REPORT_NAME)
        if report_path.exists():
            report_path.unlink()

        args = [
            ctx.config.tools.newman,
            "run",
            str(collection_path),
            "--reporters",
            "cli,json",
            "--reporter-json-export",
            str(report_path),
            "--iteration-count",
            "1",
        ]
        try:
            proc = run_command(args, check=False, scrub=ctx.redactor.redact)
        except CommandError as e:
            raise ExecutionError(str(e)) from e

        if not report_path.exists():
            raise ExecutionError(
                ctx.redactor.redact(f"newman exited {proc.returncode} without a report:\n{proc.stderr.strip()}")
            )

        try:
            report = json.loads(report_path.read_text(encoding="utf-8"))
            summary = RunSummary.from_newman(report)
        except (json.JSONDecodeError, SummaryError) as e:
            raise ExecutionError(f"Unreadable newman report: {e}") from e

        ctx.summary = summary
        print("✅ Newman tests completed!")
        print(f"📊 Total requests: {summary.total_requests}")
        print(f"❌ Failed requests: {summary.failed_requests}")
        print(f"🚨 Failed assertions: {summary.failed_assertions}")

        return {
            "message": f"{summary.failed_assertions}/{summary.total_assertions} assertions failed",
            "artifacts": [f"{store.root.name}/{REPORT_NAME}"],
            "meta": {
                "exit_code": proc.returncode,
                "total_requests": summary.total_requests,
                "failed_requests": summary.failed_requests,
                "total_assertions": summary.total_assertions,
                "failed_assertions": summary.failed_assertions,
            },
        }
