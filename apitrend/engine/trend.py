from __future__ import annotations

import json
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from apitrend.engine.summary import RunSummary


class TrendError(ValueError):
    pass


@dataclass(frozen=True)
class TrendPoint:
    date: str
    total: int
    failed: int
    duration: int


class TrendLog:
    """
    JSON list of per-run request totals, capped at `window` points.
    Oldest points fall off the front.
    """

    def __init__(self, path: Path, window: int = 10):
        if window < 1:
            raise ValueError("trend window must be at least 1")
        self._path = path
        self._window = window

    def read(self) -> List[TrendPoint]:
        if not self._path.exists():
            return []
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            return [TrendPoint(**p) for p in raw]
        except (json.JSONDecodeError, TypeError) as e:
            raise TrendError(f"Corrupt trend file {self._path}: {e}") from e

    def record(self, summary: RunSummary, when: Optional[datetime] = None) -> List[TrendPoint]:
        points = self.read()
        points.append(
            TrendPoint(
                date=(when or datetime.now(timezone.utc)).isoformat(),
                total=summary.total_requests,
                failed=summary.failed_requests,
                duration=summary.duration_ms,
            )
        )
        points = points[-self._window:]
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps([asdict(p) for p in points], indent=2), encoding="utf-8")
        return points
