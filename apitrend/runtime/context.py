from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from apitrend.engine.history import HistoryStore
from apitrend.engine.redaction import Redactor
from apitrend.engine.summary import RunSummary
from apitrend.models import PipelineConfig


@dataclass
class RunContext:
    run_id: str
    config: PipelineConfig
    run_dir: Path

    results_dir: Path
    report_dir: Path
    reports_dir: Path
    trend_file: Path

    history: HistoryStore
    redactor: Redactor

    # filled in by the fetch and run stages
    collection: Optional[Dict[str, Any]] = None
    summary: Optional[RunSummary] = None

    # stage name -> meta returned by that stage
    outputs: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def build(cls, run_id: str, config: PipelineConfig, root: Path = Path(".")) -> "RunContext":
        paths = config.paths
        hist = config.history
        results_dir = root / paths.results_dir
        report_dir = root / paths.report_dir
        return cls(
            run_id=run_id,
            config=config,
            run_dir=root / paths.runs_dir / run_id,
            results_dir=results_dir,
            report_dir=report_dir,
            reports_dir=root / paths.reports_dir,
            trend_file=root / hist.trend_file,
            history=HistoryStore(root / hist.dir, results_dir, report_dir, window=hist.retention),
            redactor=Redactor.from_settings(config.redaction),
        )
