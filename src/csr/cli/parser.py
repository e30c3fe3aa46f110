"""Argument parser for the csr administrative front end."""

from __future__ import annotations

import argparse

from csr.version import __version__

__all__ = ["VERSION_INFO", "create_parser"]

VERSION_INFO = f"Common Scripting Repository v{__version__}"


def _epilog() -> str:
    return (
        "Examples:\n"
        "  # Install a repository (name derived from the URL)\n"
        "  csr add https://github.com/team/tools.git\n\n"
        "  # Pull every repository and refresh links\n"
        "  csr sync\n\n"
        "  # Re-run install scripts of one repository without pulling\n"
        "  csr sync tools --setup --local\n\n"
        "  # Read a command's documentation\n"
        "  csr help deploy\n\n"
        "Environment:\n"
        "  CSR_HOME        data directory (default: ~/.csr)\n"
        "  CSR_REPOS_BASE  repository store (default: $CSR_HOME/repos)\n"
        "  CSR_BIN_DIR     directory receiving command links (default: /usr/local/bin)\n"
        "  CSR_BIN         path of the csr program (default: $CSR_BIN_DIR/csr)\n"
        "  CSR_DOC_VIEWER  command used by 'csr help' instead of the built-in renderer\n"
    )


def _add_repo_commands(sub: argparse._SubParsersAction) -> None:
    p_add = sub.add_parser(
        "add",
        help="install a scripting repository",
        description=(
            "Clone GIT-REPO-URL into the repository store, run its install "
            "scripts and link its commands. Fails if NAME already exists."
        ),
    )
    p_add.add_argument("url", metavar="GIT-REPO-URL")
    p_add.add_argument(
        "name", nargs="?", metavar="NAME", help="defaults to the last URL segment"
    )

    p_rm = sub.add_parser(
        "rm",
        help="remove a scripting repository",
        description="Run the uninstall scripts, delete the repository and unlink its commands.",
    )
    p_rm.add_argument("name", metavar="NAME")

    sub.add_parser("list", help="list repositories and their commands")


def _add_sync_commands(sub: argparse._SubParsersAction) -> None:
    p_sync = sub.add_parser(
        "sync",
        help="update repositories and refresh command links",
        description=(
            "Pull the named (or all) repositories, run install scripts of those "
            "that changed and reconcile command links."
        ),
    )
    p_sync.add_argument("names", nargs="*", metavar="NAME")
    p_sync.add_argument(
        "-s",
        "--setup",
        action="store_true",
        help="run install scripts even when there are no updates",
    )
    p_sync.add_argument(
        "-l", "--local", action="store_true", help="do not pull from remotes"
    )

    sub.add_parser("clean", help="remove all command links")


def _add_info_commands(sub: argparse._SubParsersAction) -> None:
    p_help = sub.add_parser("help", help="view a command's document")
    p_help.add_argument("name", metavar="NAME")
    sub.add_parser("version", help="display version information")
    sub.add_parser("doctor", help="check the local installation")


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="csr",
        description=(
            "Install script suites from git repositories and expose their "
            "commands on the PATH."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=_epilog(),
    )
    parser.add_argument("--version", action="version", version=VERSION_INFO)
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="debug logging on stderr"
    )
    sub = parser.add_subparsers(dest="command", metavar="<command>")
    _add_repo_commands(sub)
    _add_sync_commands(sub)
    _add_info_commands(sub)
    return parser
