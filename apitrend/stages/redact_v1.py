from __future__ import annotations

from typing import Any, Dict

from apitrend.runtime.artifact_store import ArtifactStore
from apitrend.runtime.context import RunContext
from apitrend.stages.base import Stage


class RedactV1(Stage):
    def run(self, ctx: RunContext, store: ArtifactStore) -> Dict[str, Any]:
        scanned = changed = replaced = 0
        for root in (ctx.results_dir, ctx.reports_dir):
            report = ctx.redactor.redact_tree(root)
            scanned += report.files_scanned
            changed += len(report.files_changed)
            replaced += report.replacements

        print(f"🔒 Redacted {replaced} value(s) in {changed} of {scanned} file(s)")
        return {
            "message": f"redacted {replaced} values in {changed} files",
            "artifacts": [],
            "meta": {"files_scanned": scanned, "files_changed": changed, "replacements": replaced},
        }
