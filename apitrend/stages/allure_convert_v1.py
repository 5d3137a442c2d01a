from __future__ import annotations

from typing import Any, Dict

from apitrend.engine.allure import convert_newman_report
from apitrend.runtime.artifact_store import ArtifactStore
from apitrend.runtime.context import RunContext
from apitrend.stages.base import Stage
from apitrend.stages.newman_run_v1 import REPORT_NAME


class AllureConvertV1(Stage):
    def run(self, ctx: RunContext, store: ArtifactStore) -> Dict[str, Any]:
        report = store.read_json(REPORT_NAME)
        written = convert_newman_report(report, ctx.results_dir, project=ctx.config.report.project)
        return {
            "message": f"wrote {len(written)} allure results",
            "artifacts": [f"{ctx.results_dir.name}/{p.name}" for p in written],
        }
