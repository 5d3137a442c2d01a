from __future__ import annotations

import json
from pathlib import Path
from typing import Any


class ArtifactStore:
    """Writes run artifacts under one root and hands back root-relative names."""

    def __init__(self, root: Path):
        self._root = root
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def path(self, rel_path: str) -> Path:
        return self._root / rel_path

    def write_text(self, rel_path: str, content: str) -> str:
        p = self._root / rel_path
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(content, encoding="utf-8")
        return f"{self._root.name}/{rel_path}"

    def write_json(self, rel_path: str, payload: Any) -> str:
        return self.write_text(rel_path, json.dumps(payload, indent=2))

    def read_json(self, rel_path: str) -> Any:
        return json.loads((self._root / rel_path).read_text(encoding="utf-8"))
