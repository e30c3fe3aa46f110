"""Resolve an invoked command name to a script and hand the process over to it.

Candidates are scanned in repository-name order, then suite-name order; the
first executable candidate wins. A failed hand-over aborts: the router does
not retry with another same-named candidate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional, Sequence

from csr.exceptions import CsrError, DelegationExecFailure, DelegationNotFound
from csr.index.scanner import is_command_name, is_executable
from csr.repos.registry import RepositoryRegistry
from csr.repos.repository import Repository
from csr.shared.environment import suite_environment
from csr.shared.process import ProcessLauncher

__all__ = [
    "Candidate",
    "DelegationOutcome",
    "DelegationResult",
    "DelegationRouter",
]

logger = logging.getLogger(__name__)


class DelegationOutcome(str, Enum):
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    EXEC_ERROR = "exec_error"


@dataclass(frozen=True)
class DelegationResult:
    outcome: DelegationOutcome
    command: str
    script: Optional[Path] = None
    error: Optional[CsrError] = None

    def raise_for_outcome(self) -> None:
        if self.error is not None:
            raise self.error


@dataclass(frozen=True)
class Candidate:
    repository: Repository
    suite: str
    path: Path


class DelegationRouter:
    def __init__(
        self,
        registry: RepositoryRegistry,
        launcher: Optional[ProcessLauncher] = None,
    ) -> None:
        self.registry = registry
        self._launcher = launcher or ProcessLauncher()

    def candidates(self, name: str) -> Iterator[Candidate]:
        """Yield every existing ``suites/*/bin/<name>`` in scan order."""
        if not is_command_name(name):
            return
        for repo in self.registry.list():
            for suite in repo.suites():
                path = repo.suites_dir / suite / "bin" / name
                if path.exists():
                    yield Candidate(repository=repo, suite=suite, path=path)

    def resolve(self, name: str) -> Candidate:
        for candidate in self.candidates(name):
            if is_executable(candidate.path):
                return candidate
            logger.debug("Skipping non-executable candidate %s", candidate.path)
        raise DelegationNotFound(name)

    def delegate(self, name: str, argv: Sequence[str]) -> DelegationResult:
        """Transfer control to the script answering ``name``.

        With the default launcher a successful transfer never returns; the
        returned result therefore describes a failure, or a success recorded
        by a non-terminal launcher.
        """
        try:
            candidate = self.resolve(name)
        except DelegationNotFound as exc:
            return DelegationResult(DelegationOutcome.NOT_FOUND, name, error=exc)

        repo = candidate.repository
        env = suite_environment(repo.name, repo.path, candidate.suite, command=name)
        try:
            self._launcher.exec(candidate.path, list(argv), env)
        except OSError as exc:
            return DelegationResult(
                DelegationOutcome.EXEC_ERROR,
                name,
                script=candidate.path,
                error=DelegationExecFailure(name, candidate.path, exc),
            )
        return DelegationResult(DelegationOutcome.SUCCESS, name, script=candidate.path)
