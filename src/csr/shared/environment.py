"""Environment handed to lifecycle scripts and delegated commands."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Mapping, Optional

__all__ = ["suite_environment"]


def suite_environment(
    repo_name: str,
    repo_dir: Path,
    suite: str,
    *,
    command: Optional[str] = None,
    base: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Return the inherited environment extended with suite/repository scope."""
    env = dict(os.environ if base is None else base)
    env.update(
        {
            "CSR_SUITE_NAME": suite,
            "CSR_SUITE_DIR": str(repo_dir / "suites" / suite),
            "CSR_REPO_NAME": repo_name,
            "CSR_REPO_DIR": str(repo_dir),
        }
    )
    if command is not None:
        env["CSR_COMMAND"] = command
    return env
