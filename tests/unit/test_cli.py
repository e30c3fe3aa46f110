from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from conftest import FakeGit, RecordingLauncher, linked, output, write_script

import csr.cli.main as cli_main
from csr.cli.handlers import CliContext, dispatch
from csr.cli.main import is_admin_invocation, main, run_admin, run_delegation
from csr.cli.parser import VERSION_INFO, create_parser
from csr.config import CsrConfig
from csr.shared.reporting import Reporter
from csr.sync.lock import AdminLock


@pytest.fixture(autouse=True)
def no_log_setup(monkeypatch):
    monkeypatch.setattr(cli_main, "setup_structured_logging", lambda *a, **k: None)


@pytest.fixture()
def ctx(
    config: CsrConfig,
    reporter: Reporter,
    launcher: RecordingLauncher,
    fake_git: FakeGit,
) -> CliContext:
    return CliContext(
        config,
        reporter=reporter,
        launcher=launcher,  # type: ignore[arg-type]
        git=fake_git,  # type: ignore[arg-type]
    )


def test_parser_sync_flags() -> None:
    ns = create_parser().parse_args(["sync", "-s", "--local", "a", "b"])

    assert ns.command == "sync"
    assert ns.names == ["a", "b"]
    assert ns.setup and ns.local


def test_parser_add_optional_name() -> None:
    parser = create_parser()

    assert parser.parse_args(["add", "git@h:x.git"]).name is None
    assert parser.parse_args(["add", "git@h:x.git", "mine"]).name == "mine"


def test_parser_help_takes_a_command_name() -> None:
    ns = create_parser().parse_args(["help", "deploy"])

    assert ns.command == "help"
    assert ns.name == "deploy"


def test_unknown_subcommand_is_a_usage_error(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        create_parser().parse_args(["frobnicate"])

    assert excinfo.value.code == 2


def test_no_command_prints_help(config: CsrConfig, ctx: CliContext, capsys) -> None:
    assert run_admin(config, [], ctx) == 2
    assert "usage: csr" in capsys.readouterr().err


def test_version(config: CsrConfig, ctx: CliContext, reporter: Reporter) -> None:
    assert run_admin(config, ["version"], ctx) == 0
    assert output(reporter.out).strip() == "Common Scripting Repository v1.0.0"
    assert VERSION_INFO == "Common Scripting Repository v1.0.0"


def test_version_flag(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        create_parser().parse_args(["--version"])

    assert excinfo.value.code == 0
    assert VERSION_INFO in capsys.readouterr().out


def test_list(config: CsrConfig, ctx: CliContext, reporter: Reporter, make_repo) -> None:
    make_repo("tools", {"net": ["probe"], "fs": ["tree2"]})
    make_repo("extra", {})

    assert run_admin(config, ["list"], ctx) == 0

    text = output(reporter.out)
    assert "[extra]" in text and "[tools]" in text
    assert text.index("[extra]") < text.index("[tools]")
    assert "probe" in text and "(net)" in text
    assert "tree2" in text


def test_list_without_repositories(
    config: CsrConfig, ctx: CliContext, reporter: Reporter
) -> None:
    assert run_admin(config, ["list"], ctx) == 0
    assert "No repositories installed" in output(reporter.out)


def test_sync_local_links_commands(
    config: CsrConfig, ctx: CliContext, make_repo, fake_git: FakeGit
) -> None:
    make_repo("tools", {"s": ["one", "two"]})

    assert run_admin(config, ["sync", "--local"], ctx) == 0
    assert linked(config.bin_dir) == ["one", "two"]
    assert fake_git.calls == []


def test_sync_failure_exit_status(
    config: CsrConfig, ctx: CliContext, make_repo, fake_git: FakeGit
) -> None:
    make_repo("tools", {"s": ["one"]})
    fake_git.failing.add("tools")

    assert run_admin(config, ["sync"], ctx) == 1
    assert linked(config.bin_dir) == ["one"]


def test_add_and_rm(
    config: CsrConfig,
    ctx: CliContext,
    make_repo,
    fake_git: FakeGit,
    tmp_path: Path,
    reporter: Reporter,
) -> None:
    fake_git.sources["https://h/tools.git"] = make_repo(
        "tools", {"s": ["hello"]}, base=tmp_path / "remote"
    )

    assert run_admin(config, ["add", "https://h/tools.git"], ctx) == 0
    assert linked(config.bin_dir) == ["hello"]
    assert run_admin(config, ["add", "https://h/tools.git"], ctx) == 1
    assert "Repository exists: tools" in output(reporter.err)

    assert run_admin(config, ["rm", "tools"], ctx) == 0
    assert linked(config.bin_dir) == []


def test_rm_unknown_repository(
    config: CsrConfig, ctx: CliContext, reporter: Reporter
) -> None:
    assert run_admin(config, ["rm", "ghost"], ctx) == 1
    assert "Repository not found: ghost" in output(reporter.err)


def test_clean(config: CsrConfig, ctx: CliContext, make_repo) -> None:
    make_repo("tools", {"s": ["one"]})
    run_admin(config, ["sync", "-l"], ctx)

    assert run_admin(config, ["clean"], ctx) == 0
    assert linked(config.bin_dir) == []


def test_mutating_commands_wait_for_the_lock(
    config: CsrConfig, reporter: Reporter, launcher, fake_git
) -> None:
    config = dataclasses.replace(config, lock_timeout=0.0)
    ctx = CliContext(config, reporter=reporter, launcher=launcher, git=fake_git)

    with AdminLock(config.lock_path, action="sync"):
        rc = run_admin(config, ["clean"], ctx)

    assert rc == 1
    assert "Timeout waiting for csr lock" in output(reporter.err)


def test_help_with_viewer(
    config: CsrConfig, reporter: Reporter, launcher, fake_git, make_repo
) -> None:
    root = make_repo("tools", {"s": ["deploy"]})
    doc = root / "suites" / "s" / "docs" / "deploy.md"
    doc.parent.mkdir(parents=True)
    doc.write_text("# deploy\n")
    ctx = CliContext(
        dataclasses.replace(config, doc_viewer="true --ignored"),
        reporter=reporter,
        launcher=launcher,
        git=fake_git,
    )

    assert dispatch(ctx, create_parser().parse_args(["help", "deploy"])) == 0


def test_help_viewer_failure_and_missing_document(
    config: CsrConfig, reporter: Reporter, launcher, fake_git, make_repo
) -> None:
    root = make_repo("tools", {"s": ["deploy"]})
    doc = root / "suites" / "s" / "docs" / "deploy.md"
    doc.parent.mkdir(parents=True)
    doc.write_text("# deploy\n")
    ctx = CliContext(
        dataclasses.replace(config, doc_viewer="false"),
        reporter=reporter,
        launcher=launcher,
        git=fake_git,
    )

    assert run_admin(ctx.config, ["help", "deploy"], ctx) == 1
    assert run_admin(ctx.config, ["help", "nothing"], ctx) == 1

    err = output(reporter.err)
    assert f"Error to view {doc}" in err
    assert "No document found for: deploy" in err
    assert "No document found for: nothing" in err


def test_doctor_reports_missing_program(
    config: CsrConfig, ctx: CliContext, reporter: Reporter
) -> None:
    assert run_admin(config, ["doctor"], ctx) == 1

    text = output(reporter.out)
    assert "✗ program: missing" in text
    assert "i bin_dir" in text


def test_doctor_healthy_bin_dir(
    config: CsrConfig, ctx: CliContext, reporter: Reporter
) -> None:
    write_script(config.program_path)
    config.repos_base.mkdir(parents=True)

    run_admin(config, ["doctor"], ctx)

    text = output(reporter.out)
    assert f"✓ program: {config.program_path}" in text
    assert f"✓ bin_dir: {config.bin_dir}" in text
    assert "(0 installed)" in text


def test_is_admin_invocation() -> None:
    assert is_admin_invocation("/usr/local/bin/csr", "csr")
    assert is_admin_invocation("csr", "csr")
    assert not is_admin_invocation("/usr/local/bin/deploy", "csr")


def test_delegation_not_found(config: CsrConfig, launcher, capsys) -> None:
    assert run_delegation(config, "deploy", ["deploy"], launcher) == 1
    assert "Command not found: deploy" in capsys.readouterr().err


def test_delegation_exec_failure(
    config: CsrConfig, launcher: RecordingLauncher, make_repo, capsys
) -> None:
    make_repo("tools", {"s": ["deploy"]})
    launcher.exec_error = PermissionError(13, "Permission denied")

    assert run_delegation(config, "deploy", ["deploy", "x"], launcher) == 128
    assert "Exec failed:" in capsys.readouterr().err
    assert launcher.execs[0]["argv"] == ["deploy", "x"]


def test_delegation_success_with_recording_launcher(
    config: CsrConfig, launcher: RecordingLauncher, make_repo
) -> None:
    make_repo("tools", {"s": ["deploy"]})

    assert run_delegation(config, "deploy", ["deploy"], launcher) == 0
    assert launcher.execs[0]["env"]["CSR_COMMAND"] == "deploy"


@pytest.fixture()
def csr_env(monkeypatch, tmp_path: Path) -> Path:
    home = tmp_path / "home"
    monkeypatch.setenv("CSR_HOME", str(home))
    monkeypatch.setenv("CSR_REPOS_BASE", str(home / "repos"))
    monkeypatch.setenv("CSR_BIN_DIR", str(tmp_path / "bin"))
    monkeypatch.setenv("CSR_BIN", str(tmp_path / "bin" / "csr"))
    monkeypatch.setenv("CSR_OS", "placeholder")
    monkeypatch.setenv("CSR_ARCH", "placeholder")
    return home


def test_main_routes_by_invocation_name(csr_env: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["/somewhere/bin/deploy", "arg"])

    assert excinfo.value.code == 1
    assert "Command not found: deploy" in capsys.readouterr().err


def test_main_admin_role(csr_env: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["/somewhere/bin/csr", "version"])

    assert excinfo.value.code == 0
    assert VERSION_INFO in capsys.readouterr().out


def test_main_forced_admin_role(csr_env: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["python -m csr", "version"], admin=True)

    assert excinfo.value.code == 0
