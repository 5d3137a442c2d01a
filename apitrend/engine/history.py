from __future__ import annotations

import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

HISTORY_SUBDIR = "history"


@dataclass(frozen=True)
class HistoryEntry:
    name: str
    path: Path
    mtime: float

    def files(self) -> List[Path]:
        return sorted(p for p in self.path.iterdir() if p.is_file())


def entry_name(now: datetime) -> str:
    # ':' and '.' are rejected by some filesystems
    ts = now.astimezone(timezone.utc).isoformat(timespec="microseconds")
    return ts.replace("+00:00", "Z").replace(":", "-").replace(".", "-")


class HistoryStore:
    """
    Rolling window of past report-history folders.

    Layout: <history_dir>/<timestamp>/<files>, one flat folder per run.
    The window is merged into <results_dir>/history before the report is
    generated, and the report's own history output is snapshotted back after.

    Not safe for concurrent runs sharing one history_dir: no lock is taken.
    """

    def __init__(self, history_dir: Path, results_dir: Path, report_dir: Path, window: int = 3):
        if window < 1:
            raise ValueError("history window must be at least 1")
        self._history_dir = history_dir
        self._results_dir = results_dir
        self._report_dir = report_dir
        self._window = window

    @property
    def window(self) -> int:
        return self._window

    @property
    def merged_dir(self) -> Path:
        return self._results_dir / HISTORY_SUBDIR

    def entries(self) -> List[HistoryEntry]:
        """Persisted entries, newest first. A missing store is an empty window."""
        if not self._history_dir.exists():
            return []
        found = []
        for p in self._history_dir.iterdir():
            if p.is_dir():
                found.append(HistoryEntry(name=p.name, path=p, mtime=p.stat().st_mtime))
        # identifiers are timestamps, so name breaks mtime ties in creation order
        found.sort(key=lambda e: (e.mtime, e.name), reverse=True)
        return found

    def reset_working_set(self) -> List[str]:
        self._history_dir.mkdir(parents=True, exist_ok=True)
        removed: List[str] = []
        if self._results_dir.exists():
            for p in self._results_dir.iterdir():
                if p.name == HISTORY_SUBDIR:
                    continue
                if p.is_dir() and not p.is_symlink():
                    shutil.rmtree(p)
                else:
                    p.unlink()
                removed.append(p.name)
        self._results_dir.mkdir(parents=True, exist_ok=True)
        return removed

    def merge_window(self) -> List[Path]:
        target = self.merged_dir
        if target.exists():
            shutil.rmtree(target)
        target.mkdir(parents=True)

        window = list(reversed(self.entries()[: self._window]))
        copied: List[Path] = []
        for entry in window:
            for src in entry.files():
                dest = target / f"{entry.name}-{src.name}"
                shutil.copyfile(src, dest)
                copied.append(dest)
        return copied

    def snapshot_current_run(self, now: Optional[datetime] = None) -> Optional[HistoryEntry]:
        report_history = self._report_dir / HISTORY_SUBDIR
        if not report_history.is_dir():
            return None

        name = entry_name(now or datetime.now(timezone.utc))
        run_folder = self._history_dir / name
        run_folder.mkdir(parents=True)
        for src in sorted(report_history.iterdir()):
            if src.is_file():
                shutil.copyfile(src, run_folder / src.name)

        entry = HistoryEntry(name=name, path=run_folder, mtime=run_folder.stat().st_mtime)
        self.prune()
        return entry

    def prune(self) -> List[str]:
        removed: List[str] = []
        for entry in self.entries()[self._window:]:
            shutil.rmtree(entry.path)
            removed.append(entry.name)
        return removed
