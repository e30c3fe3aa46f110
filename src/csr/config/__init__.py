"""Configuration models, loading and defaults."""

from csr.config.models import PROGRAM_NAME, CsrConfig
from csr.config.loader import (
    deep_merge,
    export_config,
    get_default_config,
    load_config,
    load_dotenv_config,
    load_env_config,
    load_yaml_config,
    merge_config,
)

__all__ = [
    "CsrConfig",
    "PROGRAM_NAME",
    "deep_merge",
    "export_config",
    "get_default_config",
    "load_config",
    "load_dotenv_config",
    "load_env_config",
    "load_yaml_config",
    "merge_config",
]
