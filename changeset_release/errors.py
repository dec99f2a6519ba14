"""Exceptions raised by the release run.

Everything here derives from ActionError so the CLI can report any of them
as a failed run with a single handler.
"""

from __future__ import annotations

from collections.abc import Sequence


class ActionError(Exception):
    """Base class for fatal release-run errors."""


class MissingInputError(ActionError):
    """A required token or input was not provided."""


class CredentialsError(ActionError):
    """Writing a credentials file failed."""


class ChangesetParseError(ActionError):
    """A changeset file could not be parsed."""


class ManifestError(ActionError):
    """A workspace manifest could not be read."""


class PublishError(ActionError):
    """The publish tool reported something we can't map back to a package."""


class CommandError(ActionError):
    """An external command exited non-zero.

    Attributes:
        command: The command line that was executed.
        returncode: The exit code of the process.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    def __init__(
        self,
        command: Sequence[str],
        returncode: int,
        stdout: str = "",
        stderr: str = "",
        message: str | None = None,
    ) -> None:
        self.command = tuple(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            message or f"`{' '.join(self.command)}` failed (exit {returncode})"
        )

    def diagnostics(self) -> str:
        """Captured output, for printing alongside the error message."""
        parts = []
        if self.stdout.strip():
            parts.append(f"stdout:\n{self.stdout.rstrip()}")
        if self.stderr.strip():
            parts.append(f"stderr:\n{self.stderr.rstrip()}")
        return "\n".join(parts)
