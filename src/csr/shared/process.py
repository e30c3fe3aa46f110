"""Process launching seam used by lifecycle scripts and delegation."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Mapping, NoReturn, Sequence

__all__ = ["ProcessLauncher"]

logger = logging.getLogger(__name__)


class ProcessLauncher:
    """Runs child processes with inherited stdio.

    ``run`` blocks until the child exits; ``exec`` replaces the current
    process image and only returns by raising ``OSError``. Tests substitute
    a recording double with the same two methods.
    """

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str],
    ) -> int:
        logger.debug("Running %s in %s", " ".join(argv), cwd)
        completed = subprocess.run(list(argv), cwd=str(cwd), env=dict(env))
        logger.debug("Command completed with code %s", completed.returncode)
        return completed.returncode

    def exec(
        self, path: Path, argv: Sequence[str], env: Mapping[str, str]
    ) -> NoReturn:
        logger.debug("Exec %s", path)
        os.execve(str(path), list(argv), dict(env))
