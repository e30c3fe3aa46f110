from __future__ import annotations

import shutil
from io import StringIO
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

import pytest
from rich.console import Console

from csr.config import CsrConfig
from csr.exceptions import VersionControlFailure
from csr.index.lifecycle import LifecycleRunner
from csr.repos.registry import RepositoryRegistry
from csr.shared.reporting import Reporter
from csr.sync.bin_directory import BinDirectory
from csr.sync.engine import SyncEngine

SCRIPT = "#!/bin/sh\nexit 0\n"


def write_script(path: Path, body: str = SCRIPT, mode: int = 0o755) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body)
    path.chmod(mode)
    return path


class RecordingLauncher:
    """Process launcher double: records calls instead of spawning processes."""

    def __init__(self) -> None:
        self.runs: List[dict] = []
        self.execs: List[dict] = []
        self.exit_codes: Dict[str, int] = {}
        self.exec_error: Optional[OSError] = None

    def run(self, argv: Sequence[str], *, cwd: Path, env: Mapping[str, str]) -> int:
        self.runs.append({"argv": list(argv), "cwd": cwd, "env": dict(env)})
        return self.exit_codes.get(Path(argv[0]).name, 0)

    def exec(self, path: Path, argv: Sequence[str], env: Mapping[str, str]) -> None:
        self.execs.append({"path": path, "argv": list(argv), "env": dict(env)})
        if self.exec_error is not None:
            raise self.exec_error

    @property
    def ran(self) -> List[str]:
        return [Path(call["argv"][0]).name for call in self.runs]


class FakeGit:
    """Git client double backed by template directories and fake revisions."""

    def __init__(self) -> None:
        self.sources: Dict[str, Path] = {}
        self.revisions: Dict[Path, List[str]] = {}
        self.failing: set[str] = set()
        self.calls: List[tuple] = []

    def clone(self, url: str, dest: Path) -> None:
        self.calls.append(("clone", url, dest))
        if url not in self.sources:
            raise VersionControlFailure(f"git clone {url} failed with exit status 128")
        shutil.copytree(self.sources[url], dest, symlinks=True)

    def revision(self, repo_path: Path) -> str:
        self.calls.append(("revision", repo_path))
        if repo_path.name in self.failing:
            raise VersionControlFailure("git rev-parse HEAD failed with exit status 128")
        return self.revisions.setdefault(repo_path, ["r0"])[0]

    def pull(self, repo_path: Path) -> None:
        self.calls.append(("pull", repo_path))
        revs = self.revisions.setdefault(repo_path, ["r0"])
        if len(revs) > 1:
            revs.pop(0)


@pytest.fixture()
def launcher() -> RecordingLauncher:
    return RecordingLauncher()


@pytest.fixture()
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture()
def reporter() -> Reporter:
    return Reporter(
        out=Console(file=StringIO(), force_terminal=False, color_system=None, width=200),
        err=Console(file=StringIO(), force_terminal=False, color_system=None, width=200),
    )


def output(console: Console) -> str:
    return console.file.getvalue()  # type: ignore[attr-defined]


@pytest.fixture()
def config(tmp_path: Path) -> CsrConfig:
    bin_dir = tmp_path / "bin"
    return CsrConfig(
        home=tmp_path / "home",
        repos_base=tmp_path / "home" / "repos",
        bin_dir=bin_dir,
        program_path=bin_dir / "csr",
        lock_timeout=1.0,
    )


@pytest.fixture()
def make_repo(config: CsrConfig) -> Callable[..., Path]:
    """Create ``<repos_base>/<name>`` with ``{suite: [command, ...]}``."""

    def _make(
        name: str,
        suites: Mapping[str, Iterable[str]],
        *,
        base: Optional[Path] = None,
    ) -> Path:
        root = (base or config.repos_base) / name
        for suite, cmds in suites.items():
            (root / "suites" / suite).mkdir(parents=True, exist_ok=True)
            for cmd in cmds:
                write_script(root / "suites" / suite / "bin" / cmd)
        root.mkdir(parents=True, exist_ok=True)
        return root

    return _make


@pytest.fixture()
def registry(
    config: CsrConfig, fake_git: FakeGit, launcher: RecordingLauncher, reporter: Reporter
) -> RepositoryRegistry:
    return RepositoryRegistry(
        config.repos_base,
        git=fake_git,  # type: ignore[arg-type]
        lifecycle=LifecycleRunner(launcher, reporter),  # type: ignore[arg-type]
        reporter=reporter,
    )


@pytest.fixture()
def bin_directory(config: CsrConfig) -> BinDirectory:
    return BinDirectory.from_config(config)


@pytest.fixture()
def engine(
    registry: RepositoryRegistry, bin_directory: BinDirectory, reporter: Reporter
) -> SyncEngine:
    return SyncEngine(registry, bin_directory, reporter)


def linked(bin_dir: Path) -> List[str]:
    if not bin_dir.exists():
        return []
    return sorted(p.name for p in bin_dir.iterdir() if p.is_symlink())
