"""Directory scan primitive shared by command and lifecycle discovery."""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import List

__all__ = ["find_executables", "is_command_name", "is_executable"]

_ANY_EXECUTE = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def is_executable(path: Path) -> bool:
    """Return True for a regular file with at least one execute bit set."""
    try:
        info = os.stat(path)
    except OSError:
        return False
    return stat.S_ISREG(info.st_mode) and bool(info.st_mode & _ANY_EXECUTE)


def is_command_name(name: str) -> bool:
    """Return True when ``name`` can only denote a file directly inside a directory."""
    return bool(name) and name not in (".", "..") and not set(name) & set("/\\\0")


def find_executables(root: Path, pattern: str) -> List[Path]:
    """Return executables under ``root`` matching ``pattern``, sorted by path."""
    return sorted(
        (path for path in root.glob(pattern) if is_executable(path)), key=str
    )
