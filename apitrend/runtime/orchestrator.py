from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from apitrend.engine.summary import RunSummary
from apitrend.models import PipelineConfig, StepConfig
from apitrend.runtime.artifact_store import ArtifactStore
from apitrend.runtime.context import RunContext
from apitrend.runtime.events import StageEvent
from apitrend.runtime.run_logger import RunLogger

@dataclass(frozen=True)
class PipelineStep:
    stage: str
    handler: str
    requires: tuple[str, ...] = ()
    # failure aborts the run
    fatal: bool = False
    # failure forces exit code 1 whatever the policy
    gating: bool = False

    @classmethod
    def from_config(cls, step: StepConfig) -> "PipelineStep":
        return cls(
            stage=step.stage,
            handler=step.handler,
            requires=tuple(step.requires),
            fatal=step.fatal,
            gating=step.gating,
        )

DEFAULT_STEPS: tuple[PipelineStep, ...] = (
    PipelineStep("prepare", "prepare_workspace_v1", fatal=True),
    PipelineStep("fetch", "fetch_collection_v1", requires=("prepare",), fatal=True),
    PipelineStep("run", "newman_run_v1", requires=("fetch",), fatal=True),
    PipelineStep("convert", "allure_convert_v1", requires=("run",)),
    PipelineStep("redact", "redact_v1", requires=("run",), gating=True),
    PipelineStep("trend", "trend_record_v1", requires=("redact",)),
    PipelineStep("merge_history", "merge_history_v1", requires=("convert", "redact")),
    PipelineStep("report", "allure_generate_v1", requires=("merge_history",)),
    PipelineStep("snapshot_history", "snapshot_history_v1", requires=("report",)),
    PipelineStep("deploy", "deploy_v1", requires=("report",)),
    PipelineStep("notify", "webhook_notify_v1", requires=("deploy",)),
)

OK = "ok"
FAILED = "failed"
SKIPPED = "skipped"


@dataclass(frozen=True)
class StageResult:
    stage: str
    handler: str
    status: str
    message: str
    artifacts: tuple[str, ...] = ()
    meta: Optional[Dict[str, Any]] = None


@dataclass
class PipelineResult:
    run_id: str
    run_dir: Path
    log_path: Path
    results: List[StageResult] = field(default_factory=list)
    summary: Optional[RunSummary] = None
    aborted: bool = False
    forced_failure: bool = False

    def status_of(self, stage: str) -> Optional[str]:
        for r in self.results:
            if r.stage == stage:
                return r.status
        return None

    @property
    def exit_code(self) -> int:
        if self.aborted or self.forced_failure or self.summary is None:
            return 1
        return 0 if self.summary.ok else 1

def new_run_id() -> str:
    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    suffix = secrets.token_hex(2)
    return f"{ts}_{suffix}"

def resolve_steps(config: PipelineConfig) -> List[PipelineStep]:
    if config.pipeline:
        return [PipelineStep.from_config(s) for s in config.pipeline]
    return list(DEFAULT_STEPS)

def run_pipeline(
    *,
    config: PipelineConfig,
    stage_registry: Dict[str, Any],
    steps: Optional[Sequence[PipelineStep]] = None,
    root: Path = Path("."),
    run_id: Optional[str] = None,
) -> PipelineResult:
    """
    Runs the stages in order, one at a time.

    A step whose required stages did not finish "ok" is skipped. Failures of
    fatal steps abort the run; other failures are recorded and, under the
    fail_fast policy, stop the run with exit code 1.
    """
    run_id = run_id or new_run_id()
    ctx = RunContext.build(run_id, config, root=root)
    scrub = ctx.redactor.redact
    logger = RunLogger(ctx.run_dir / "run_log.jsonl", scrub=scrub)
    store = ArtifactStore(ctx.reports_dir)
    result = PipelineResult(run_id=run_id, run_dir=ctx.run_dir, log_path=logger.path)

    def record(step: PipelineStep, status: str, message: str, artifacts=(), meta=None) -> None:
        message = scrub(message)
        result.results.append(
            StageResult(
                stage=step.stage,
                handler=step.handler,
                status=status,
                message=message,
                artifacts=tuple(artifacts),
                meta=meta,
            )
        )
        logger.append(
            StageEvent(
                run_id=run_id,
                stage=step.stage,
                handler=step.handler,
                timestamp=logger.now_iso(),
                status=status,
                message=message,
                artifacts=list(artifacts),
                meta=meta,
            )
        )

    statuses: Dict[str, str] = {}
    for step in steps if steps is not None else resolve_steps(config):
        blocked = [r for r in step.requires if statuses.get(r) != OK]
        if blocked:
            statuses[step.stage] = SKIPPED
            record(step, SKIPPED, f"skipped: requires {', '.join(blocked)}")
            if step.gating:
                result.forced_failure = True
                print(f"⚠️ {step.stage} did not run; later stages that depend on it will not run")
            continue

        handler = stage_registry.get(step.handler)
        try:
            if handler is None:
                raise RuntimeError(f"Stage handler not registered: {step.handler}")
            produced = handler.run(ctx, store) or {}
        except Exception as e:
            message = f"{type(e).__name__}: {e}"
            statuses[step.stage] = FAILED
            record(step, FAILED, message)
            print(f"❌ {step.stage} failed: {scrub(str(e))}")

            if step.fatal:
                result.aborted = True
                break
            if step.gating:
                result.forced_failure = True
                print(f"⚠️ {step.stage} failed; later stages that depend on it will not run")
            if config.failure_policy == "fail_fast":
                result.forced_failure = True
                break
            continue

        status = produced.get("status", OK)
        meta = produced.get("meta")
        statuses[step.stage] = status
        ctx.outputs[step.stage] = dict(meta or {})
        record(step, status, produced.get("message", "ok"), produced.get("artifacts", []), meta)

    result.summary = ctx.summary
    return result
