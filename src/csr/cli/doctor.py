"""Environment diagnostics (doctor) for the csr CLI.

Splits checks into small helpers for clarity and testability.
"""

from __future__ import annotations

import os
import shutil
import subprocess

from rich.console import Console

from csr.config import CsrConfig
from csr.repos.registry import RepositoryRegistry

__all__ = ["run_doctor"]

Row = tuple[str, str, str, list[str]]


def _print_rows(console: Console, rows: list[Row]) -> int:
    ok = all(status != "✗" for status, *_ in rows)
    for status, title, message, tries in rows:
        if status in ("✓", "✗"):
            console.print(f"{status} {title}: {message}", markup=False)
        else:
            console.print(f"i {title}: {message}", markup=False)
        if status == "✗" and tries:
            console.print("Try:")
            for t in tries[:3]:
                console.print(f"  • {t}", markup=False)
    return 0 if ok else 1


def _check_git(rows: list[Row]) -> None:
    git = shutil.which("git")
    if not git:
        rows.append(("✗", "git", "not found on PATH", ["install git", "check $PATH"]))
        return
    try:
        out = subprocess.run(
            [git, "--version"], capture_output=True, text=True, check=True
        )
        rows.append(("✓", "git", out.stdout.strip(), []))
    except (subprocess.SubprocessError, OSError) as e:  # pragma: no cover
        rows.append(("✗", "git", f"not usable: {e}", ["reinstall git"]))


def _check_repos(config: CsrConfig, rows: list[Row]) -> None:
    base = config.repos_base
    if not base.exists():
        rows.append(("i", "repos", f"{base} (not created yet)", []))
        return
    if not base.is_dir():
        rows.append(("✗", "repos", f"not a directory: {base}", ["set CSR_REPOS_BASE"]))
        return
    count = len(RepositoryRegistry(base).list())
    rows.append(("✓", "repos", f"{base} ({count} installed)", []))


def _check_bin_dir(config: CsrConfig, rows: list[Row]) -> None:
    bin_dir = config.bin_dir
    if not bin_dir.exists():
        rows.append(("i", "bin_dir", f"{bin_dir} (created on first sync)", []))
    elif not os.access(bin_dir, os.W_OK | os.X_OK):
        rows.append(
            (
                "✗",
                "bin_dir",
                f"not writable: {bin_dir}",
                ["adjust permissions", "set CSR_BIN_DIR to a writable directory"],
            )
        )
    else:
        rows.append(("✓", "bin_dir", str(bin_dir), []))


def _check_program(config: CsrConfig, rows: list[Row]) -> None:
    program = config.program_path
    if program.exists():
        rows.append(("✓", "program", str(program), []))
    else:
        rows.append(
            (
                "✗",
                "program",
                f"missing: {program} (command links would dangle)",
                [f"link csr into {config.bin_dir}", "set CSR_BIN"],
            )
        )


def run_doctor(console: Console, config: CsrConfig) -> int:
    """Run system checks and print friendly advice.

    Returns 0 on success, 1 if any failures are detected.
    """
    rows: list[Row] = []
    _check_git(rows)
    _check_repos(config, rows)
    _check_bin_dir(config, rows)
    _check_program(config, rows)
    return _print_rows(console, rows)
