"""Command handlers for the administrative front end.

Each handler takes the CLI context and parsed arguments and returns an exit
code; ``dispatch`` turns :class:`CsrError` into its exit code.
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict

from rich.text import Text
from rich.tree import Tree

from csr.config import CsrConfig
from csr.exceptions import CsrError
from csr.index.commands import commands
from csr.index.lifecycle import LifecycleRunner
from csr.repos.git_client import GitClient
from csr.repos.registry import RepositoryRegistry
from csr.shared.process import ProcessLauncher
from csr.shared.reporting import Reporter
from csr.sync.bin_directory import BinDirectory
from csr.sync.engine import SyncEngine, SyncReport
from csr.sync.lock import AdminLock

from . import docs, doctor
from .parser import VERSION_INFO

__all__ = ["CliContext", "HANDLERS", "dispatch"]

logger = logging.getLogger(__name__)


@dataclass
class CliContext:
    config: CsrConfig
    reporter: Reporter = field(default_factory=Reporter)
    launcher: ProcessLauncher = field(default_factory=ProcessLauncher)
    git: GitClient = field(default_factory=GitClient)

    def registry(self) -> RepositoryRegistry:
        return RepositoryRegistry(
            self.config.repos_base,
            git=self.git,
            lifecycle=LifecycleRunner(self.launcher, self.reporter),
            reporter=self.reporter,
        )

    def engine(self) -> SyncEngine:
        return SyncEngine(
            self.registry(), BinDirectory.from_config(self.config), self.reporter
        )

    def lock(self, action: str) -> AdminLock:
        return AdminLock(
            self.config.lock_path,
            action=action,
            max_wait_seconds=self.config.lock_timeout,
        )


def _status(report: SyncReport) -> int:
    return 0 if report.ok else 1


def run_add(ctx: CliContext, args: argparse.Namespace) -> int:
    with ctx.lock("add"):
        return _status(ctx.engine().add(args.url, args.name))


def run_rm(ctx: CliContext, args: argparse.Namespace) -> int:
    with ctx.lock("rm"):
        return _status(ctx.engine().remove(args.name))


def run_sync(ctx: CliContext, args: argparse.Namespace) -> int:
    with ctx.lock("sync"):
        report = ctx.engine().sync(
            args.names, update=not args.local, force_setup=args.setup
        )
    return _status(report)


def run_clean(ctx: CliContext, args: argparse.Namespace) -> int:
    with ctx.lock("clean"):
        report = ctx.engine().clean()
    return 0 if report.ok else 1


def run_list(ctx: CliContext, args: argparse.Namespace) -> int:
    console = ctx.reporter.out
    repos = ctx.registry().list()
    if not repos:
        console.print("[yellow]No repositories installed[/yellow]")
        return 0

    tree = Tree(Text(str(ctx.config.repos_base), style="bold"))
    for repo in repos:
        node = tree.add(Text(f"[{repo.name}]", style="cyan"))
        for cmd in sorted(commands(repo), key=lambda c: (c.name, c.suite)):
            label = Text(cmd.name)
            label.append(f"  ({cmd.suite})", style="bright_black")
            node.add(label)
    console.print(tree)
    return 0


def run_help(ctx: CliContext, args: argparse.Namespace) -> int:
    return docs.run_help(
        ctx.reporter.out,
        ctx.reporter,
        ctx.config.repos_base,
        args.name,
        ctx.config.doc_viewer,
    )


def run_version(ctx: CliContext, args: argparse.Namespace) -> int:
    ctx.reporter.out.print(VERSION_INFO, markup=False)
    return 0


def run_doctor(ctx: CliContext, args: argparse.Namespace) -> int:
    return doctor.run_doctor(ctx.reporter.out, ctx.config)


HANDLERS: Dict[str, Callable[[CliContext, argparse.Namespace], int]] = {
    "add": run_add,
    "rm": run_rm,
    "list": run_list,
    "sync": run_sync,
    "clean": run_clean,
    "help": run_help,
    "version": run_version,
    "doctor": run_doctor,
}


def dispatch(ctx: CliContext, args: argparse.Namespace) -> int:
    handler = HANDLERS[args.command]
    try:
        return handler(ctx, args)
    except CsrError as exc:
        logger.debug("command=%s failed", args.command, exc_info=True)
        ctx.reporter.error(str(exc))
        return exc.exit_code
