"""Shell and git utilities.

Provides simple wrappers around subprocess calls for running shell commands
and git operations, plus output formatting helpers that double as GitHub
Actions workflow commands.
"""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

from .errors import CommandError

# Shell convention for "command not found"
COMMAND_NOT_FOUND = 127


def git(*args: str, cwd: Path | None = None, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "status", "--porcelain").
        cwd: Directory to run git in. Defaults to the process cwd.
        check: If True (default), raise CommandError on non-zero exit. Set
               to False for commands that may legitimately fail.

    Returns:
        Stripped stdout from the git command.
    """
    result = exec_with_output("git", *args, cwd=cwd)
    if check and result.returncode != 0:
        raise CommandError(result.args, result.returncode, result.stdout, result.stderr)
    return result.stdout.strip()


def gh(
    *args: str, cwd: Path | None = None, check: bool = True, token: str | None = None
) -> str:
    """Run a GitHub CLI command and return stdout.

    Args:
        *args: Arguments to pass to gh (e.g., "pr", "list").
        cwd: Directory to run gh in.
        check: If True (default), raise CommandError on non-zero exit.
        token: Exported to gh as GH_TOKEN. Without one, gh falls back to
               whatever credentials the runner already has.
    """
    env = {**os.environ, "GH_TOKEN": token} if token else None
    result = exec_with_output("gh", *args, cwd=cwd, env=env)
    if check and result.returncode != 0:
        raise CommandError(result.args, result.returncode, result.stdout, result.stderr)
    return result.stdout.strip()


def exec_with_output(
    *args: str, cwd: Path | None = None, env: dict[str, str] | None = None
) -> subprocess.CompletedProcess[str]:
    """Run a command, capturing stdout and stderr as text.

    Never raises on non-zero exit; callers inspect returncode themselves so
    they can attach the captured output to their own error. A command that
    can't be started at all (missing executable, bad cwd) is reported the
    same way, with exit code 127 and the OS error as stderr.
    """
    try:
        return subprocess.run(
            list(args), cwd=cwd, env=env, capture_output=True, text=True
        )
    except OSError as exc:
        return subprocess.CompletedProcess(
            list(args), COMMAND_NOT_FOUND, stdout="", stderr=str(exc)
        )


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate the phases of the release run in the job log.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def warning(msg: str) -> None:
    """Emit a warning annotation visible in the Actions run summary."""
    print(f"::warning::{msg}")


def fatal(msg: str) -> None:
    """Print an error annotation and exit with code 1.

    Use for unrecoverable errors that should halt the run.
    """
    print(f"::error::{msg}", file=sys.stderr)
    sys.exit(1)
