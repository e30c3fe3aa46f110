from __future__ import annotations

from pathlib import Path

import pytest

from conftest import FakeGit, RecordingLauncher, output, write_script

from csr.config import CsrConfig
from csr.exceptions import (
    LifecycleScriptFailure,
    RepositoryAlreadyExists,
    RepositoryNotFound,
    ValidationError,
    VersionControlFailure,
)
from csr.repos.registry import RepositoryRegistry, name_from_url
from csr.shared.reporting import Reporter


@pytest.mark.parametrize(
    "url, name",
    [
        ("https://github.com/team/tools.git", "tools"),
        ("https://github.com/team/tools", "tools"),
        ("https://github.com/team/tools/", "tools"),
        ("git@github.com:tools.git", "tools"),
        ("ssh://git@host:2222/srv/scripts.git", "scripts"),
        ("/srv/git/local-scripts", "local-scripts"),
    ],
)
def test_name_from_url(url: str, name: str) -> None:
    assert name_from_url(url) == name


@pytest.mark.parametrize("url", ["", "https://host/.git", "https://host/..", "/"])
def test_name_from_url_rejects_unusable_names(url: str) -> None:
    with pytest.raises(ValidationError):
        name_from_url(url)


def test_list_is_sorted_and_ignores_files(
    registry: RepositoryRegistry, make_repo, config: CsrConfig
) -> None:
    make_repo("zeta", {})
    make_repo("alpha", {})
    (config.repos_base / "notes.txt").write_text("not a repo")

    assert [r.name for r in registry.list()] == ["alpha", "zeta"]
    assert registry.list()[0].path == config.repos_base / "alpha"


def test_list_without_base_is_empty(registry: RepositoryRegistry) -> None:
    assert not registry.base.exists()
    assert registry.list() == []


def test_path_and_exists(registry: RepositoryRegistry, make_repo, config) -> None:
    make_repo("tools", {})

    assert registry.path("tools") == config.repos_base / "tools"
    assert registry.exists("tools")
    assert not registry.exists("other")
    with pytest.raises(RepositoryNotFound):
        registry.get("other")


def test_clone_creates_base_and_delegates_to_git(
    registry: RepositoryRegistry,
    fake_git: FakeGit,
    make_repo,
    tmp_path: Path,
    reporter: Reporter,
) -> None:
    fake_git.sources["https://h/x/tools.git"] = make_repo(
        "tools", {"s": ["a"]}, base=tmp_path / "remote"
    )

    repo = registry.clone("https://h/x/tools.git")

    assert repo.name == "tools"
    assert (repo.path / "suites" / "s" / "bin" / "a").exists()
    assert registry.base.is_dir()
    assert "CREATE [tools] Clone from https://h/x/tools.git" in output(reporter.out)


def test_clone_with_explicit_name(
    registry: RepositoryRegistry, fake_git: FakeGit, make_repo, tmp_path: Path
) -> None:
    fake_git.sources["u"] = make_repo("src", {}, base=tmp_path / "remote")

    assert registry.clone("u", "renamed").path == registry.base / "renamed"


def test_clone_existing_fails_without_calling_git(
    registry: RepositoryRegistry, fake_git: FakeGit, make_repo
) -> None:
    make_repo("tools", {})

    with pytest.raises(RepositoryAlreadyExists):
        registry.clone("https://h/tools.git")
    assert fake_git.calls == []


def test_clone_failure_propagates(registry: RepositoryRegistry) -> None:
    with pytest.raises(VersionControlFailure):
        registry.clone("https://h/unknown.git")


def test_update_reports_revision_change(
    registry: RepositoryRegistry, fake_git: FakeGit, make_repo
) -> None:
    root = make_repo("tools", {})
    repo = registry.get("tools")
    fake_git.revisions[root] = ["r1", "r2"]

    assert registry.update(repo) is True
    assert registry.update(repo) is False
    assert [c[0] for c in fake_git.calls] == ["revision", "pull", "revision"] * 2


def test_remove_runs_uninstall_then_deletes(
    registry: RepositoryRegistry, make_repo, launcher: RecordingLauncher
) -> None:
    root = make_repo("tools", {})
    write_script(root / "suites" / "s" / "setup" / "uninstall" / "bye")

    registry.remove(registry.get("tools"))

    assert launcher.ran == ["bye"]
    assert launcher.runs[0]["argv"][1] == "uninstall"
    assert not root.exists()


def test_remove_keeps_directory_when_uninstall_fails(
    registry: RepositoryRegistry, make_repo, launcher: RecordingLauncher
) -> None:
    root = make_repo("tools", {})
    write_script(root / "suites" / "s" / "setup" / "uninstall" / "bye")
    launcher.exit_codes["bye"] = 1

    with pytest.raises(LifecycleScriptFailure):
        registry.remove(registry.get("tools"))
    assert root.is_dir()
