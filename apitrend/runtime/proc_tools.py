from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence


class CommandError(RuntimeError):
    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str
    stderr: str


def run_command(
    args: Sequence[str],
    *,
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    check: bool = True,
    scrub: Callable[[str], str] = lambda s: s,
) -> CommandResult:
    """
    Run an external CLI to completion. No timeout: blocks until it exits.
    `scrub` is applied to anything that ends up in an error message.
    """
    try:
        proc = subprocess.run(
            list(args),
            cwd=str(cwd) if cwd else None,
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as e:
        raise CommandError(f"Command not found: {args[0]}") from e

    if check and proc.returncode != 0:
        raise CommandError(
            scrub(f"Command failed ({proc.returncode}): {' '.join(args)}\n{proc.stderr.strip()}"),
            returncode=proc.returncode,
        )
    return CommandResult(returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)
