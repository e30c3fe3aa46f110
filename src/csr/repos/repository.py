"""Installed repository value type."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

__all__ = ["Repository"]


@dataclass(frozen=True)
class Repository:
    """A git work tree under the repository base, keyed by ``name``."""

    name: str
    path: Path

    @property
    def suites_dir(self) -> Path:
        return self.path / "suites"

    def exists(self) -> bool:
        try:
            self.path.lstat()
        except OSError:
            return False
        return True

    def suites(self) -> List[str]:
        """Return suite names in lexicographic order."""
        try:
            entries = list(self.suites_dir.iterdir())
        except OSError:
            return []
        return sorted(entry.name for entry in entries if entry.is_dir())
