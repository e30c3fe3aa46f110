"""Repository registry: enumerate, clone, update and remove repositories."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List, Optional

from csr.exceptions import (
    FilesystemFailure,
    RepositoryAlreadyExists,
    RepositoryNotFound,
    ValidationError,
)
from csr.index.lifecycle import LifecycleRunner, SetupMode
from csr.shared.reporting import Reporter

from .git_client import GitClient
from .repository import Repository

__all__ = ["RepositoryRegistry", "name_from_url", "validate_name"]

logger = logging.getLogger(__name__)

BASE_DIR_MODE = 0o775


def validate_name(name: str) -> str:
    """Return ``name`` when it is usable as a directory name under the base."""
    if not isinstance(name, str) or not name or name in (".", ".."):
        raise ValidationError(f"Invalid repository name: {name!r}")
    if "/" in name or "\\" in name or "\0" in name:
        raise ValidationError(f"Invalid repository name: {name!r}")
    return name


def name_from_url(url: str) -> str:
    """Derive a repository name from the last segment of a git URL.

    ``https://host/team/tools.git`` and ``git@host:tools.git`` both give
    ``tools``.
    """
    tail = url.rstrip("/")
    for sep in ("/", ":"):
        pos = tail.rfind(sep)
        if pos >= 0:
            tail = tail[pos + 1 :]
    if tail.endswith(".git"):
        tail = tail[: -len(".git")]
    return validate_name(tail)


class RepositoryRegistry:
    """Repositories stored as directories directly under ``base``."""

    def __init__(
        self,
        base: Path,
        *,
        git: Optional[GitClient] = None,
        lifecycle: Optional[LifecycleRunner] = None,
        reporter: Optional[Reporter] = None,
    ) -> None:
        self.base = base
        self._git = git or GitClient()
        self._reporter = reporter or Reporter()
        self._lifecycle = lifecycle or LifecycleRunner(reporter=self._reporter)

    def path(self, name: str) -> Path:
        return self.base / name

    def repository(self, name: str) -> Repository:
        return Repository(name=validate_name(name), path=self.path(name))

    def exists(self, name: str) -> bool:
        return self.repository(name).exists()

    def get(self, name: str) -> Repository:
        repo = self.repository(name)
        if not repo.exists():
            raise RepositoryNotFound(name)
        return repo

    def list(self) -> List[Repository]:
        """Return installed repositories sorted by name; empty without a base."""
        try:
            entries = list(self.base.iterdir())
        except FileNotFoundError:
            return []
        except OSError as exc:
            logger.warning("Cannot read repository base %s: %s", self.base, exc)
            return []
        return [
            Repository(name=entry.name, path=entry)
            for entry in sorted(entries, key=lambda e: e.name)
            if entry.is_dir()
        ]

    def clone(self, url: str, name: Optional[str] = None) -> Repository:
        """Clone ``url`` as a new repository (named after the URL by default)."""
        repo = self.repository(name or name_from_url(url))
        if repo.exists():
            raise RepositoryAlreadyExists(repo.name)

        self._reporter.repo("CREATE", repo.name, f"Clone from {url}")
        try:
            self.base.mkdir(mode=BASE_DIR_MODE, parents=True, exist_ok=True)
        except OSError as exc:
            raise FilesystemFailure(
                f"Unable to create repository base {self.base}: {exc}"
            ) from exc
        self._git.clone(url, repo.path)
        return repo

    def update(self, repo: Repository) -> bool:
        """Pull ``repo``; return True when the checked-out revision changed."""
        self._reporter.repo("UPDATE", repo.name)
        before = self._git.revision(repo.path)
        self._git.pull(repo.path)
        after = self._git.revision(repo.path)
        logger.debug("repo=%s before=%s after=%s", repo.name, before, after)
        return before != after

    def setup(self, repo: Repository, mode: SetupMode) -> int:
        return self._lifecycle.setup(repo, mode)

    def remove(self, repo: Repository) -> None:
        """Run the uninstall scripts, then delete the work tree.

        A failing uninstall script propagates and the directory is kept.
        """
        self._lifecycle.setup(repo, SetupMode.UNINSTALL)
        self._reporter.repo("REMOVE", repo.name)
        try:
            shutil.rmtree(repo.path)
        except OSError as exc:
            raise FilesystemFailure(f"Unable to delete {repo.path}: {exc}") from exc
