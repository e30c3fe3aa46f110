"""csr public API surface.

This package exposes the entry points needed by embedders and tests;
everything else should be considered internal and may change.
"""

from .config import CsrConfig, load_config
from .delegation import DelegationRouter
from .repos import RepositoryRegistry
from .sync import SyncEngine
from .version import __version__

__all__ = [
    "CsrConfig",
    "DelegationRouter",
    "RepositoryRegistry",
    "SyncEngine",
    "__version__",
    "load_config",
]
