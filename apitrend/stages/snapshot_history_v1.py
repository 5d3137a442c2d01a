from __future__ import annotations

from typing import Any, Dict

from apitrend.runtime.artifact_store import ArtifactStore
from apitrend.runtime.context import RunContext
from apitrend.stages.base import Stage


class SnapshotHistoryV1(Stage):
    def run(self, ctx: RunContext, store: ArtifactStore) -> Dict[str, Any]:
        before = {e.name for e in ctx.history.entries()}
        entry = ctx.history.snapshot_current_run()
        if entry is None:
            return {"status": "skipped", "message": "report produced no history folder", "artifacts": []}

        print(f"📂 Saved current run's history to {entry.path}")
        after = {e.name for e in ctx.history.entries()}
        removed = sorted(before - after)
        for name in removed:
            print(f"🗑️ Deleted old history: {name}")
        return {
            "message": f"snapshot {entry.name}",
            "artifacts": [str(entry.path)],
            "meta": {"entry": entry.name, "pruned": removed},
        }
