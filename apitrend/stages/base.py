from __future__ import annotations

from typing import Any, Dict

from apitrend.runtime.artifact_store import ArtifactStore
from apitrend.runtime.context import RunContext

class Stage:
    def run(self, ctx: RunContext, store: ArtifactStore) -> Dict[str, Any]:
        raise NotImplementedError
