#!/usr/bin/env python3
"""csr entrypoint.

The name the process was invoked under decides its role: ``csr`` runs the
administrative front end, any other name (a link in the bin directory) is
delegated to the repository script of that name.
"""

from __future__ import annotations

import os
import sys
from typing import Final, Optional, Sequence

from rich.console import Console

from csr.config import CsrConfig, export_config, load_config
from csr.delegation.router import DelegationRouter
from csr.exceptions import CsrError
from csr.repos.registry import RepositoryRegistry
from csr.shared.process import ProcessLauncher
from csr.utils.structured_logging import setup_structured_logging

from .handlers import CliContext, dispatch
from .parser import create_parser

__all__: Final = ["is_admin_invocation", "main", "run_admin", "run_delegation"]


def is_admin_invocation(argv0: str, program_name: str) -> bool:
    return os.path.basename(argv0) == program_name


def run_admin(
    config: CsrConfig, args: Sequence[str], ctx: Optional[CliContext] = None
) -> int:
    parser = create_parser()
    ns = parser.parse_args(list(args))
    if not ns.command:
        parser.print_help(sys.stderr)
        return 2
    setup_structured_logging(config.logs_dir, verbose=ns.verbose)
    return dispatch(ctx or CliContext(config), ns)


def run_delegation(
    config: CsrConfig,
    name: str,
    argv: Sequence[str],
    launcher: Optional[ProcessLauncher] = None,
) -> int:
    """Hand the process over to the script answering ``name``.

    Only returns when the command is unknown or the hand-over failed.
    """
    router = DelegationRouter(RepositoryRegistry(config.repos_base), launcher)
    try:
        router.delegate(name, argv).raise_for_outcome()
    except CsrError as exc:
        Console(stderr=True, highlight=False, soft_wrap=True).print(
            str(exc), markup=False
        )
        return exc.exit_code
    return 0


def main(argv: Optional[Sequence[str]] = None, *, admin: Optional[bool] = None) -> None:
    """CLI entrypoint."""
    argv = list(sys.argv if argv is None else argv)
    config = load_config()
    export_config(config)

    invoked = argv[0] if argv else config.program_name
    if admin is None:
        admin = is_admin_invocation(invoked, config.program_name)
    if admin:
        rc = run_admin(config, argv[1:])
    else:
        rc = run_delegation(config, os.path.basename(invoked), argv)
    sys.exit(int(rc))


if __name__ == "__main__":
    main()
