"""git operations on the repository checkout."""

from __future__ import annotations

from pathlib import Path

from .errors import CommandError
from .shell import exec_with_output, git


def switch_to_maybe_existing_branch(branch: str, cwd: Path) -> None:
    """Check out a branch, creating it if it doesn't exist yet."""
    result = exec_with_output("git", "checkout", branch, cwd=cwd)
    if result.returncode == 0:
        return
    if "did not match any file(s) known to git" not in result.stderr:
        raise CommandError(result.args, result.returncode, result.stdout, result.stderr)
    git("checkout", "-b", branch, cwd=cwd)


def reset_hard(ref: str, cwd: Path) -> None:
    git("reset", "--hard", ref, cwd=cwd)


def force_checkout(ref: str, cwd: Path) -> None:
    """Check out a ref, discarding local changes to tracked files."""
    git("checkout", "--force", ref, cwd=cwd)


def is_clean(cwd: Path) -> bool:
    """True when the working tree has no changes, tracked or untracked."""
    return git("status", "--porcelain", cwd=cwd) == ""


def commit_all(message: str, cwd: Path) -> None:
    git("add", ".", cwd=cwd)
    git("commit", "-m", message, cwd=cwd)


def force_push_branch(branch: str, cwd: Path) -> None:
    git("push", "origin", f"HEAD:{branch}", "--force", cwd=cwd)


def push_tags(cwd: Path) -> None:
    git("push", "origin", "--tags", cwd=cwd)
