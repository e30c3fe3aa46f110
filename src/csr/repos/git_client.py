"""Thin wrapper around the external git binary."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from csr.exceptions import VersionControlFailure

__all__ = ["CommandResult", "GitClient"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of a git invocation."""

    code: int
    output: str


class GitClient:
    """Runs git with inherited stdin/stderr so prompts and progress reach the user."""

    def __init__(self, executable: str = "git") -> None:
        self._git = executable

    def run(self, args: Sequence[str], cwd: Optional[Path] = None) -> CommandResult:
        """Run ``git <args>`` and capture stdout; raise on failure."""
        cmd = [self._git, *args]
        logger.debug("Running command: %s (cwd=%s)", " ".join(cmd), cwd)
        try:
            completed = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd else None,
                stdout=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as exc:
            raise VersionControlFailure(f"git could not be started: {exc}") from exc

        result = CommandResult(completed.returncode, completed.stdout or "")
        logger.debug("Command completed with code %s", result.code)
        if result.code != 0:
            raise VersionControlFailure(
                f"git {' '.join(args)} failed with exit status {result.code}"
            )
        return result

    def clone(self, url: str, dest: Path) -> None:
        self.run(["clone", url, str(dest)], cwd=dest.parent)

    def revision(self, repo_path: Path) -> str:
        """Return the commit id currently checked out."""
        return self.run(["rev-parse", "HEAD"], cwd=repo_path).output.strip()

    def pull(self, repo_path: Path) -> None:
        self.run(["pull"], cwd=repo_path)
