"""Installed repositories and the git client they are managed with."""

from csr.repos.git_client import CommandResult, GitClient
from csr.repos.registry import RepositoryRegistry, name_from_url, validate_name
from csr.repos.repository import Repository

__all__ = [
    "CommandResult",
    "GitClient",
    "Repository",
    "RepositoryRegistry",
    "name_from_url",
    "validate_name",
]
