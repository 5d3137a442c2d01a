from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import quote, urlsplit, urlunsplit

from apitrend.models import PagesTarget
from apitrend.runtime.proc_tools import CommandError, run_command


def authenticated_url(repo_url: str, username: str, token: Optional[str]) -> str:
    if not token:
        return repo_url
    parts = urlsplit(repo_url)
    if parts.scheme not in ("http", "https"):
        return repo_url
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    netloc = f"{quote(username, safe='')}:{quote(token, safe='')}@{host}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


def _replace_contents(worktree: Path, report_dir: Path) -> None:
    for p in worktree.iterdir():
        if p.name == ".git":
            continue
        if p.is_dir():
            shutil.rmtree(p)
        else:
            p.unlink()
    shutil.copytree(report_dir, worktree, dirs_exist_ok=True)
    (worktree / ".nojekyll").write_text("", encoding="utf-8")


def deploy_pages(
    git_bin: str,
    report_dir: Path,
    target: PagesTarget,
    scrub: Callable[[str], str],
    message: str,
) -> Optional[str]:
    """
    Publish report_dir as the whole content of target.branch.
    Clones the branch shallowly; starts an orphan branch if it does not exist yet.
    Returns the public URL (if configured), or None.
    """
    remote = authenticated_url(target.repo_url, target.username, target.token)

    def git(*args: str, cwd: Optional[Path] = None, check: bool = True):
        return run_command([git_bin, *args], cwd=cwd, check=check, scrub=scrub)

    with tempfile.TemporaryDirectory(prefix="apitrend-pages-") as tmp:
        worktree = Path(tmp) / "site"
        try:
            git("clone", "--depth", "1", "--branch", target.branch, remote, str(worktree))
        except CommandError:
            worktree.mkdir(parents=True, exist_ok=True)
            git("init", cwd=worktree)
            git("remote", "add", "origin", remote, cwd=worktree)
            git("checkout", "--orphan", target.branch, cwd=worktree)

        _replace_contents(worktree, report_dir)
        git("add", "-A", cwd=worktree)

        status = git("status", "--porcelain", cwd=worktree)
        if status.stdout.strip():
            git(
                "-c", f"user.name={target.commit_name}",
                "-c", f"user.email={target.commit_email}",
                "commit", "-m", message,
                cwd=worktree,
            )
            git("push", "origin", f"HEAD:{target.branch}", cwd=worktree)
    return target.public_url
