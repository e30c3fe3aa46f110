"""The shared bin directory and the links csr owns in it."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, FrozenSet, Iterable, List

from csr.config.models import PROGRAM_NAME
from csr.exceptions import FilesystemFailure

if TYPE_CHECKING:
    from csr.config import CsrConfig

__all__ = ["BinDirectory"]

logger = logging.getLogger(__name__)

BIN_DIR_MODE = 0o755


class BinDirectory:
    """Creates, lists and removes command links in ``path``.

    An entry is owned only when it is a symlink whose raw target is one of
    ``owned_targets``; every other entry is ignored. The entry named
    ``program_name`` is the program's own entry point and is never owned,
    whatever it points at.
    """

    def __init__(
        self,
        path: Path,
        link_target: str,
        owned_targets: Iterable[str],
        program_name: str = PROGRAM_NAME,
    ) -> None:
        self.path = path
        self.link_target = link_target
        self.owned_targets: FrozenSet[str] = frozenset(owned_targets) | {link_target}
        self.program_name = program_name

    @classmethod
    def from_config(cls, config: "CsrConfig") -> "BinDirectory":
        return cls(
            config.bin_dir,
            config.link_target,
            config.owned_targets,
            program_name=config.program_name,
        )

    def link_path(self, name: str) -> Path:
        return self.path / name

    def ensure(self) -> None:
        try:
            self.path.mkdir(mode=BIN_DIR_MODE, parents=True, exist_ok=True)
        except OSError as exc:
            raise FilesystemFailure(
                f"Unable to create bin directory: {self.path}: {exc}"
            ) from exc

    def owned_links(self, create_missing: bool = False) -> List[str]:
        """Return the names of owned links, sorted.

        A missing directory is created when ``create_missing`` is set and
        yields an empty list otherwise.
        """
        if create_missing:
            self.ensure()
        try:
            with os.scandir(self.path) as it:
                entries = list(it)
        except FileNotFoundError:
            if create_missing:
                raise FilesystemFailure(
                    f"Unable to access bin directory: {self.path}"
                ) from None
            return []
        except OSError as exc:
            raise FilesystemFailure(
                f"Unable to access bin directory: {self.path}: {exc}"
            ) from exc

        names: List[str] = []
        for entry in entries:
            if entry.name == self.program_name or not entry.is_symlink():
                continue
            try:
                target = os.readlink(entry.path)
            except OSError as exc:
                logger.debug("Cannot read link %s: %s", entry.path, exc)
                continue
            if target in self.owned_targets:
                names.append(entry.name)
        return sorted(names)

    def create_link(self, name: str) -> None:
        link = self.link_path(name)
        try:
            os.symlink(self.link_target, link)
        except OSError as exc:
            raise FilesystemFailure(f"Failed to create symlink: {link}: {exc}") from exc

    def remove_link(self, name: str) -> None:
        link = self.link_path(name)
        try:
            os.remove(link)
        except OSError as exc:
            raise FilesystemFailure(f"Failed to remove symlink: {link}: {exc}") from exc
