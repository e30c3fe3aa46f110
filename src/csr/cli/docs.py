"""``csr help``: locate and display a command's markdown document."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.pager import Pager

from csr.index.scanner import is_command_name
from csr.repos.registry import RepositoryRegistry
from csr.shared.reporting import Reporter

__all__ = ["find_documents", "render_markdown", "run_help", "view_document"]

logger = logging.getLogger(__name__)

PAGER_ENV = {"LESS": "-R"}


def find_documents(repos_base: Path, command: str) -> List[Path]:
    """Return ``<repo>/suites/<suite>/docs/<command>.md`` files.

    Ordered by repository, then suite, the same order delegation uses.
    """
    if not is_command_name(command):
        return []
    found: List[Path] = []
    for repo in RepositoryRegistry(repos_base).list():
        for suite in repo.suites():
            path = repo.suites_dir / suite / "docs" / f"{command}.md"
            if path.is_file():
                found.append(path)
    return found


@contextmanager
def _pager_environment() -> Iterator[None]:
    """Apply ``PAGER_ENV`` defaults for the duration of a pager run."""
    added = [key for key in PAGER_ENV if key not in os.environ]
    for key in added:
        os.environ[key] = PAGER_ENV[key]
    try:
        yield
    finally:
        for key in added:
            os.environ.pop(key, None)


def render_markdown(
    console: Console, path: Path, pager: Optional[Pager] = None
) -> None:
    """Render ``path`` through the console pager."""
    text = path.read_text(encoding="utf-8")
    with _pager_environment():
        with console.pager(pager, styles=True):
            console.print(Markdown(text))


def view_document(console: Console, path: Path, viewer: Optional[str]) -> None:
    """Show ``path`` with ``viewer`` when configured, else render it.

    Raises ``OSError`` or ``CalledProcessError`` when viewing fails.
    """
    if viewer:
        subprocess.run([*shlex.split(viewer), str(path)], check=True)
        return
    render_markdown(console, path)


def run_help(
    console: Console,
    reporter: Reporter,
    repos_base: Path,
    command: str,
    viewer: Optional[str],
) -> int:
    for path in find_documents(repos_base, command):
        try:
            view_document(console, path, viewer)
            return 0
        except (OSError, UnicodeDecodeError, subprocess.CalledProcessError) as exc:
            reporter.error(f"Error to view {path}: {exc}")
    reporter.error(f"No document found for: {command}")
    return 1
