from __future__ import annotations

from typing import Any, Dict

from apitrend.engine.trend import TrendLog
from apitrend.runtime.artifact_store import ArtifactStore
from apitrend.runtime.context import RunContext
from apitrend.stages.base import Stage


class TrendRecordV1(Stage):
    def run(self, ctx: RunContext, store: ArtifactStore) -> Dict[str, Any]:
        if ctx.summary is None:
            raise RuntimeError("no run summary to record")
        window = ctx.config.history.trend_window
        points = TrendLog(ctx.trend_file, window=window).record(ctx.summary)
        print(f"✅ Trend data updated for last {len(points)} runs")
        return {"message": f"trend has {len(points)} points", "artifacts": [str(ctx.trend_file)]}
