"""Command discovery for a single repository."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, List

from .scanner import find_executables

if TYPE_CHECKING:
    from csr.repos.repository import Repository

__all__ = ["COMMAND_PATTERN", "Command", "commands"]

COMMAND_PATTERN = "suites/*/bin/*"


@dataclass(frozen=True)
class Command:
    """An executable under ``suites/<suite>/bin`` of one repository."""

    repository: str
    suite: str
    name: str
    path: Path

    @property
    def source(self) -> str:
        return f"{self.repository}/{self.suite}"


def commands(repo: "Repository") -> List[Command]:
    """Return every linkable command of ``repo`` in path order."""
    return [
        Command(
            repository=repo.name,
            suite=script.parent.parent.name,
            name=script.name,
            path=script,
        )
        for script in find_executables(repo.path, COMMAND_PATTERN)
    ]
