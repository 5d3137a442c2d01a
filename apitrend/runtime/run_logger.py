from __future__ import annotations

import json
from dataclasses import asdict, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from apitrend.runtime.events import StageEvent


class RunLogger:
    """Append-only JSONL log of stage events for one run."""

    def __init__(self, log_path: Path, scrub: Optional[Callable[[str], str]] = None):
        self._log_path = log_path
        self._scrub = scrub
        self._log_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._log_path

    @staticmethod
    def now_iso() -> str:
        return datetime.now(timezone.utc).isoformat()

    def append(self, event: StageEvent) -> None:
        if self._scrub is not None:
            event = replace(event, message=self._scrub(event.message))
        with self._log_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(asdict(event), ensure_ascii=False, default=str))
            f.write("\n")
