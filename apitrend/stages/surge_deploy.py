from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, List, Optional

from apitrend.models import SurgeTarget
from apitrend.runtime.proc_tools import run_command


def surge_command(surge_bin: str, report_dir: Path, target: SurgeTarget) -> List[str]:
    args = [surge_bin, str(report_dir), target.domain]
    if not target.token:
        args += ["--login", target.login or "", "--password", target.password or ""]
    return args


def deploy_surge(
    surge_bin: str,
    report_dir: Path,
    target: SurgeTarget,
    scrub: Callable[[str], str],
    base_env: Optional[dict] = None,
) -> str:
    env = dict(os.environ if base_env is None else base_env)
    if target.token:
        # token auth stays out of the process list
        env["SURGE_TOKEN"] = target.token
        if target.login:
            env["SURGE_LOGIN"] = target.login
    run_command(surge_command(surge_bin, report_dir, target), env=env, scrub=scrub)
    return target.public_url
