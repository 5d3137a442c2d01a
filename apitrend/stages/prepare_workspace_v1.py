from __future__ import annotations

from typing import Any, Dict

from apitrend.engine.allure import render_properties
from apitrend.runtime.artifact_store import ArtifactStore
from apitrend.runtime.context import RunContext
from apitrend.stages.base import Stage


class PrepareWorkspaceV1(Stage):
    def run(self, ctx: RunContext, store: ArtifactStore) -> Dict[str, Any]:
        """
        Clears the previous run's results (the merged history folder survives)
        and writes the executor/environment property files Allure shows.
        """
        removed = ctx.history.reset_working_set()
        print("🧹 Cleared previous allure-results (trend preserved)")

        report = ctx.config.report
        results = ArtifactStore(ctx.results_dir)
        executor = {f"executor.{k}": v for k, v in report.executor.items()}
        executor.setdefault("executor.buildName", ctx.run_id)
        artifacts = [results.write_text("executor.properties", render_properties(executor))]

        environment = {"COLLECTION_UID": ctx.config.postman.collection_uid, **report.environment}
        artifacts.append(results.write_text("environment.properties", render_properties(environment)))

        return {
            "message": f"workspace ready ({len(removed)} stale entries removed)",
            "artifacts": artifacts,
            "meta": {"removed": len(removed)},
        }
