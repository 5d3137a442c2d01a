from __future__ import annotations

from typing import Any, Dict

from apitrend.runtime.artifact_store import ArtifactStore
from apitrend.runtime.context import RunContext
from apitrend.runtime.proc_tools import CommandError
from apitrend.stages.base import Stage
from apitrend.stages.pages_deploy import deploy_pages
from apitrend.stages.surge_deploy import deploy_surge


class DeployError(RuntimeError):
    pass


class DeployV1(Stage):
    def run(self, ctx: RunContext, store: ArtifactStore) -> Dict[str, Any]:
        deploy = ctx.config.deploy
        tools = ctx.config.tools
        scrub = ctx.redactor.redact

        if deploy.target == "none":
            return {"status": "skipped", "message": "no deployment target configured", "artifacts": []}
        if not ctx.report_dir.is_dir():
            raise DeployError(f"report directory missing: {ctx.report_dir}")

        try:
            if deploy.target == "surge":
                url = deploy_surge(tools.surge, ctx.report_dir, deploy.surge, scrub)
            else:
                url = deploy_pages(
                    tools.git, ctx.report_dir, deploy.pages, scrub, message=f"Publish report {ctx.run_id}"
                )
        except CommandError as e:
            raise DeployError(str(e)) from e

        if url:
            print(f"🌐 Allure report deployed to {deploy.target}: {url}")
        else:
            print(f"🌐 Allure report deployed to {deploy.target}")
        return {"message": f"deployed to {deploy.target}", "artifacts": [], "meta": {"url": url}}
