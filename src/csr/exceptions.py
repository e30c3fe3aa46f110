"""csr exception hierarchy."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

__all__ = [
    "CsrError",
    "DelegationExecFailure",
    "DelegationNotFound",
    "FilesystemFailure",
    "LifecycleScriptFailure",
    "LockTimeout",
    "RepositoryAlreadyExists",
    "RepositoryNotFound",
    "ValidationError",
    "VersionControlFailure",
]


class CsrError(Exception):
    """Base class for csr exceptions.

    ``exit_code`` is the process status the CLI reports for the error.
    """

    exit_code = 1


class ValidationError(CsrError):
    """Raised when user input (e.g. a repository name) is rejected."""


class RepositoryAlreadyExists(CsrError):
    """Raised when cloning into a repository name that is already taken."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Repository exists: {name}")
        self.name = name


class RepositoryNotFound(CsrError):
    """Raised when a named repository is not installed."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Repository not found: {name}")
        self.name = name


class VersionControlFailure(CsrError):
    """Raised when a git operation fails or git cannot be started."""


class LifecycleScriptFailure(CsrError):
    """Raised when an install/uninstall script fails."""

    def __init__(
        self, script: Path, mode: str, returncode: Optional[int], message: str = ""
    ) -> None:
        detail = message or f"exit status {returncode}"
        super().__init__(f"{mode} script {script} failed: {detail}")
        self.script = script
        self.mode = mode
        self.returncode = returncode


class FilesystemFailure(CsrError):
    """Raised when a directory, link or link target cannot be handled."""


class LockTimeout(CsrError):
    """Raised when the administrative lock cannot be acquired in time."""


class DelegationNotFound(CsrError):
    """Raised when no installed script answers an invoked name."""

    def __init__(self, command: str) -> None:
        super().__init__(f"Command not found: {command}")
        self.command = command


class DelegationExecFailure(CsrError):
    """Raised when transferring control to a resolved script fails."""

    exit_code = 128

    def __init__(self, command: str, script: Path, error: OSError) -> None:
        super().__init__(f"Exec failed: {script}: {error}")
        self.command = command
        self.script = script
        self.error = error
