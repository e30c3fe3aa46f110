"""Immutable runtime configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Optional

PROGRAM_NAME = "csr"
DEFAULT_BIN_DIR = Path("/usr/local/bin")
DEFAULT_LOCK_TIMEOUT = 300.0

__all__ = ["CsrConfig", "DEFAULT_BIN_DIR", "DEFAULT_LOCK_TIMEOUT", "PROGRAM_NAME"]


@dataclass(frozen=True)
class CsrConfig:
    """Locations and knobs shared by every component.

    ``program_path`` is the canonical location of the ``csr`` executable;
    together with ``program_name`` it is the identity that managed links
    point at.
    """

    home: Path
    repos_base: Path
    bin_dir: Path
    program_path: Path
    program_name: str = PROGRAM_NAME
    doc_viewer: Optional[str] = None
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT

    @property
    def link_target(self) -> str:
        """Target written into newly created command links."""
        if self.program_path.parent == self.bin_dir:
            return self.program_path.name
        return str(self.program_path)

    @property
    def owned_targets(self) -> FrozenSet[str]:
        """Link targets that mark a bin entry as managed by csr."""
        return frozenset(
            {self.program_name, str(self.program_path), self.link_target}
        )

    @property
    def lock_path(self) -> Path:
        return self.home / "csr.lock"

    @property
    def logs_dir(self) -> Path:
        return self.home / "logs"
