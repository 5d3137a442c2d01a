from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

@dataclass(frozen=True)
class StageEvent:
    run_id: str
    stage: str
    handler: str
    timestamp: str

    status: str  # "ok" | "failed" | "skipped"
    message: str

    artifacts: List[str]
    meta: Optional[Dict[str, Any]] = None
