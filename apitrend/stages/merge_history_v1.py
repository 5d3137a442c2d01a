from __future__ import annotations

from typing import Any, Dict

from apitrend.runtime.artifact_store import ArtifactStore
from apitrend.runtime.context import RunContext
from apitrend.stages.base import Stage


class MergeHistoryV1(Stage):
    def run(self, ctx: RunContext, store: ArtifactStore) -> Dict[str, Any]:
        copied = ctx.history.merge_window()
        print(f"📂 Merged last {ctx.history.window} runs into {ctx.history.merged_dir}")
        return {"message": f"merged {len(copied)} history files", "artifacts": [], "meta": {"files": len(copied)}}
