"""Administrative flows: add, remove, sync and clean.

Per-repository steps (update, install setup) stop at their first failure,
but the engine itself keeps going: failures are reported, counted and the
remaining repositories and link mutations are still processed. The counted
total decides the exit status.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from csr.exceptions import (
    FilesystemFailure,
    LifecycleScriptFailure,
    VersionControlFailure,
)
from csr.index.commands import Command, commands
from csr.index.lifecycle import SetupMode
from csr.repos.registry import RepositoryRegistry
from csr.repos.repository import Repository
from csr.shared.reporting import Reporter

from .bin_directory import BinDirectory
from .reconciler import ReconcileReport, Reconciler

__all__ = ["SyncEngine", "SyncReport"]

logger = logging.getLogger(__name__)


@dataclass
class SyncReport:
    failures: int = 0
    links: Optional[ReconcileReport] = None
    ambiguous: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.failures == 0


class SyncEngine:
    def __init__(
        self,
        registry: RepositoryRegistry,
        bin_dir: BinDirectory,
        reporter: Optional[Reporter] = None,
    ) -> None:
        self.registry = registry
        self.bin_dir = bin_dir
        self._reporter = reporter or Reporter()
        self.reconciler = Reconciler(bin_dir, self._reporter)

    def add(self, url: str, name: Optional[str] = None) -> SyncReport:
        """Clone a repository, run its install scripts and link its commands."""
        repo = self.registry.clone(url, name)
        return self.sync([repo.name], update=False, force_setup=True)

    def remove(self, name: str) -> SyncReport:
        """Uninstall and delete a repository, then drop its links.

        Links are reconciled even when the uninstall fails; the failure is
        still counted in the report.
        """
        repo = self.registry.get(name)
        failed = False
        try:
            self.registry.remove(repo)
        except (LifecycleScriptFailure, FilesystemFailure) as exc:
            self._reporter.error(f"Remove repository {repo.name} failed: {exc}")
            failed = True
        report = self.sync(update=False)
        if failed:
            report.failures += 1
        return report

    def sync(
        self,
        names: Sequence[str] = (),
        *,
        update: bool = True,
        force_setup: bool = False,
    ) -> SyncReport:
        """Refresh the selected repositories and reconcile links for all of them.

        ``names`` limits update/setup to those repositories; commands of every
        installed repository are always linked.
        """
        report = SyncReport()
        repos = self.registry.list()
        selected = set(names)

        for missing in sorted(selected - {repo.name for repo in repos}):
            self._reporter.error(f"Repository not found: {missing}")
            report.failures += 1

        for repo in repos:
            if selected and repo.name not in selected:
                continue
            if not self._refresh(repo, update=update, force_setup=force_setup):
                report.failures += 1

        sources = self.command_sources(repos)
        report.ambiguous = self.warn_ambiguous(sources)
        self._drop_program_name(sources)

        try:
            report.links = self.reconciler.reconcile(sources.keys())
        except FilesystemFailure as exc:
            self._reporter.error(str(exc))
            report.failures += 1
            return report

        report.failures += len(report.links.failed)
        return report

    def clean(self) -> ReconcileReport:
        """Remove every owned link; a missing bin directory is not an error."""
        existing = self.bin_dir.owned_links(create_missing=False)
        return self.reconciler.apply((), existing)

    def command_sources(self, repos: Iterable[Repository]) -> Dict[str, List[Command]]:
        """Group commands by name, sources ordered by repository then suite."""
        sources: Dict[str, List[Command]] = defaultdict(list)
        for repo in sorted(repos, key=lambda r: r.name):
            for cmd in sorted(commands(repo), key=lambda c: (c.suite, c.name)):
                sources[cmd.name].append(cmd)
        return dict(sources)

    def warn_ambiguous(self, sources: Dict[str, List[Command]]) -> Dict[str, List[str]]:
        ambiguous: Dict[str, List[str]] = {}
        for name in sorted(sources):
            cmds = sources[name]
            if len(cmds) < 2:
                continue
            ambiguous[name] = [cmd.source for cmd in cmds]
            self._reporter.warning(
                f"ambiguous command: {name}",
                [f"Defined in {source}" for source in ambiguous[name]],
            )
        return ambiguous

    def _drop_program_name(self, sources: Dict[str, List[Command]]) -> None:
        """Never link a command over the program's own entry point."""
        name = self.bin_dir.program_name
        shadowed = sources.pop(name, None)
        if shadowed:
            self._reporter.warning(
                f"reserved command name: {name}",
                [f"Not linked from {cmd.source}" for cmd in shadowed],
            )

    def _refresh(self, repo: Repository, *, update: bool, force_setup: bool) -> bool:
        updated = False
        if update:
            try:
                updated = self.registry.update(repo)
            except VersionControlFailure as exc:
                self._reporter.error(f"Unable to update repository {repo.name}: {exc}")
                return False
        if force_setup or updated:
            try:
                self.registry.setup(repo, SetupMode.INSTALL)
            except LifecycleScriptFailure as exc:
                self._reporter.error(f"Setup repository {repo.name} failed: {exc}")
                return False
        return True
