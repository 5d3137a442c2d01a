from __future__ import annotations

from typing import Any, Dict

from apitrend.runtime.artifact_store import ArtifactStore
from apitrend.runtime.context import RunContext
from apitrend.runtime.proc_tools import CommandError, run_command
from apitrend.stages.base import Stage


class ReportError(RuntimeError):
    pass


class AllureGenerateV1(Stage):
    def run(self, ctx: RunContext, store: ArtifactStore) -> Dict[str, Any]:
        args = [ctx.config.tools.allure, "generate", str(ctx.results_dir), "-o", str(ctx.report_dir), "--clean"]
        try:
            run_command(args, scrub=ctx.redactor.redact)
        except CommandError as e:
            raise ReportError(str(e)) from e
        print("✅ Allure HTML report generated!")
        return {"message": f"report at {ctx.report_dir}", "artifacts": [str(ctx.report_dir)]}
