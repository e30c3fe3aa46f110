"""Discovery of commands and lifecycle scripts inside repositories."""

from csr.index.commands import COMMAND_PATTERN, Command, commands
from csr.index.lifecycle import LifecycleRunner, SetupMode, setup_scripts
from csr.index.scanner import find_executables, is_command_name, is_executable

__all__ = [
    "COMMAND_PATTERN",
    "Command",
    "LifecycleRunner",
    "SetupMode",
    "commands",
    "find_executables",
    "is_command_name",
    "is_executable",
    "setup_scripts",
]
