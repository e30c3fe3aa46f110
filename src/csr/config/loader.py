"""Configuration loading: environment, dotenv, YAML file and defaults."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional

import yaml
from dotenv import dotenv_values

from csr.utils.platform_utils import get_platform_env

from .models import DEFAULT_BIN_DIR, DEFAULT_LOCK_TIMEOUT, PROGRAM_NAME, CsrConfig

__all__ = [
    "deep_merge",
    "export_config",
    "get_default_config",
    "load_config",
    "load_dotenv_config",
    "load_env_config",
    "load_yaml_config",
    "merge_config",
    "resolve_home",
]

logger = logging.getLogger(__name__)

HOME_ENV = "CSR_HOME"
CONFIG_FILENAME = "config.yaml"
DOTENV_FILENAME = ".env"

_ENV_TO_CONFIG_KEY = {
    "CSR_REPOS_BASE": "repos_base",
    "CSR_BIN_DIR": "bin_dir",
    "CSR_BIN": "program",
    "CSR_DOC_VIEWER": "doc_viewer",
    "CSR_LOCK_TIMEOUT": "lock_timeout",
}
_FILE_KEYS = frozenset(_ENV_TO_CONFIG_KEY.values())


def merge_config(
    env_config: Dict[str, Any],
    dotenv_config: Dict[str, Any],
    file_config: Dict[str, Any],
    defaults: Dict[str, Any],
) -> Dict[str, Any]:
    """Merge configuration dictionaries honoring precedence order."""
    merged = defaults.copy()
    deep_merge(merged, file_config)
    deep_merge(merged, dotenv_config)
    deep_merge(merged, env_config)
    return merged


def deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> None:
    """Recursively merge ``overlay`` into ``base`` in place, skipping ``None``."""
    for key, value in overlay.items():
        if value is None:
            continue
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value


def resolve_home(environ: Mapping[str, str]) -> Path:
    """Return the csr data directory (``$CSR_HOME`` or ``~/.csr``)."""
    value = environ.get(HOME_ENV)
    if value:
        return Path(value).expanduser()
    return Path.home() / ".csr"


def get_default_config(home: Path) -> Dict[str, Any]:
    return {
        "repos_base": str(home / "repos"),
        "bin_dir": str(DEFAULT_BIN_DIR),
        "lock_timeout": DEFAULT_LOCK_TIMEOUT,
    }


def load_env_config(environ: Mapping[str, str]) -> Dict[str, Any]:
    """Extract csr settings from environment-style variables."""
    config: Dict[str, Any] = {}
    for env_key, config_key in _ENV_TO_CONFIG_KEY.items():
        value = environ.get(env_key)
        if value:
            config[config_key] = value
    return config


def load_dotenv_config(dotenv_path: Path) -> Dict[str, Any]:
    """Load csr settings from a ``.env`` file."""
    if not dotenv_path.exists():
        return {}
    values = dotenv_values(dotenv_path)
    return load_env_config({k: v for k, v in values.items() if v is not None})


def load_yaml_config(yaml_path: Path) -> Dict[str, Any]:
    """Load ``config.yaml`` or return an empty dict."""
    if not yaml_path.exists():
        return {}

    try:
        with yaml_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (yaml.YAMLError, OSError) as exc:
        logger.warning("Failed to load %s: %s", yaml_path, exc)
        return {}

    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a mapping", yaml_path)
        return {}
    unknown = sorted(str(key) for key in data if key not in _FILE_KEYS)
    if unknown:
        logger.warning("Unknown keys in %s: %s", yaml_path, ", ".join(unknown))
    return {key: value for key, value in data.items() if key in _FILE_KEYS}


def _coerce_timeout(value: Any) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid lock_timeout %r, using %s", value, DEFAULT_LOCK_TIMEOUT)
        return DEFAULT_LOCK_TIMEOUT
    return max(timeout, 0.0)


def load_config(environ: Optional[Mapping[str, str]] = None) -> CsrConfig:
    """Build the effective :class:`CsrConfig`.

    Precedence (highest first): process environment, ``$CSR_HOME/.env``,
    ``$CSR_HOME/config.yaml``, built-in defaults.
    """
    env = os.environ if environ is None else environ
    home = resolve_home(env)
    merged = merge_config(
        load_env_config(env),
        load_dotenv_config(home / DOTENV_FILENAME),
        load_yaml_config(home / CONFIG_FILENAME),
        get_default_config(home),
    )

    bin_dir = Path(str(merged["bin_dir"])).expanduser()
    program = merged.get("program")
    program_path = (
        Path(str(program)).expanduser() if program else bin_dir / PROGRAM_NAME
    )
    return CsrConfig(
        home=home,
        repos_base=Path(str(merged["repos_base"])).expanduser(),
        bin_dir=bin_dir,
        program_path=program_path,
        doc_viewer=merged.get("doc_viewer") or None,
        lock_timeout=_coerce_timeout(merged.get("lock_timeout")),
    )


def export_config(
    config: CsrConfig, environ: Optional[MutableMapping[str, str]] = None
) -> None:
    """Write computed locations back into the environment for child processes.

    Variables that are already set are left untouched; platform identifiers
    are always refreshed.
    """
    env = os.environ if environ is None else environ
    for key, value in (
        (HOME_ENV, config.home),
        ("CSR_REPOS_BASE", config.repos_base),
        ("CSR_BIN_DIR", config.bin_dir),
        ("CSR_BIN", config.program_path),
    ):
        if not env.get(key):
            env[key] = str(value)
    env.update(get_platform_env())
