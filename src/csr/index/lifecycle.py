"""Install/uninstall lifecycle scripts."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from csr.exceptions import LifecycleScriptFailure
from csr.shared.environment import suite_environment
from csr.shared.process import ProcessLauncher
from csr.shared.reporting import Reporter

from .scanner import find_executables

if TYPE_CHECKING:
    from csr.repos.repository import Repository

__all__ = ["LifecycleRunner", "SetupMode", "setup_scripts"]

logger = logging.getLogger(__name__)


class SetupMode(str, Enum):
    INSTALL = "install"
    UNINSTALL = "uninstall"


def setup_scripts(repo: "Repository", mode: SetupMode) -> List[Path]:
    """Return the executable ``setup/<mode>`` scripts of every suite, by path."""
    return find_executables(repo.path, f"suites/*/setup/{SetupMode(mode).value}/*")


class LifecycleRunner:
    """Runs a repository's setup scripts in order, stopping at the first failure."""

    def __init__(
        self,
        launcher: Optional[ProcessLauncher] = None,
        reporter: Optional[Reporter] = None,
    ) -> None:
        self._launcher = launcher or ProcessLauncher()
        self._reporter = reporter or Reporter()

    def setup(self, repo: "Repository", mode: SetupMode) -> int:
        """Run the ``mode`` scripts of ``repo``; return how many ran.

        Raises :class:`LifecycleScriptFailure` for the first script that
        exits non-zero or cannot be started. Earlier scripts are not undone.
        """
        mode = SetupMode(mode)
        self._reporter.repo("SETUP", repo.name, mode.value)
        scripts = setup_scripts(repo, mode)
        for script in scripts:
            # suites/<suite>/setup/<mode>/<script>
            suite_dir = script.parent.parent.parent
            suite = suite_dir.name
            self._reporter.repo(
                "SETUP", repo.name, f"{suite}/setup/{mode.value}/{script.name}"
            )
            env = suite_environment(repo.name, repo.path, suite)
            try:
                rc = self._launcher.run(
                    [str(script), mode.value], cwd=suite_dir, env=env
                )
            except OSError as exc:
                raise LifecycleScriptFailure(script, mode.value, None, str(exc)) from exc
            if rc != 0:
                logger.error("setup_script_failed script=%s rc=%s", script, rc)
                raise LifecycleScriptFailure(script, mode.value, rc)
        return len(scripts)
