from __future__ import annotations

import sys

from apitrend.config_loader import ConfigError, load_config
from apitrend.runtime.orchestrator import FAILED, PipelineResult, run_pipeline
from apitrend.stages.registry import default_registry


def usage() -> None:
    print("Usage:")
    print("  apitrend")
    print("  python -m apitrend.main")
    print("")
    print("Configuration comes from the environment (or .env) and an optional apitrend.yaml:")
    print("  COLLECTION_UID, POSTMAN_API_KEY           required")
    print("  DEPLOY_TARGET=surge|pages|none            optional, inferred when unset")
    print("  SURGE_DOMAIN, SURGE_LOGIN, SURGE_PASSWORD, SURGE_TOKEN")
    print("  PAGES_REPO_URL, PAGES_BRANCH, PAGES_TOKEN, PAGES_URL")
    print("  WEBHOOK_URL, HISTORY_RETENTION, TREND_WINDOW, FAILURE_POLICY")


def print_outcome(result: PipelineResult) -> None:
    failed = [r for r in result.results if r.status == FAILED]
    if result.aborted:
        print(f"⛔ Run aborted at stage '{failed[-1].stage}'" if failed else "⛔ Run aborted")
    elif failed:
        print("⚠️ Completed with post-processing failures:")
        for r in failed:
            print(f"  - {r.stage}: {r.message}")

    if result.summary is not None:
        s = result.summary
        print(f"Assertions: {s.passed_assertions}/{s.total_assertions} passed ({s.success_rate}%)")
    print(f"Run log: {result.log_path}")


def main() -> int:
    if len(sys.argv) > 1:
        usage()
        return 0 if sys.argv[1] in ("-h", "--help") else 1

    try:
        config = load_config()
    except ConfigError as e:
        print(f"❌ {e}")
        return 1

    result = run_pipeline(config=config, stage_registry=default_registry())
    print_outcome(result)
    return result.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
