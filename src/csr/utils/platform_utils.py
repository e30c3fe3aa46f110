"""Platform identifiers exported to scripts."""

from __future__ import annotations

import platform
from typing import Dict

__all__ = ["get_platform_env", "normalize_arch", "normalize_os"]

_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv6l": "arm",
    "armv7l": "arm",
}


def normalize_os(system: str) -> str:
    """Return the lowercase OS identifier (``linux``, ``darwin``, ``windows``)."""
    return (system or "unknown").lower()


def normalize_arch(machine: str) -> str:
    """Map ``platform.machine()`` values onto short architecture names."""
    key = (machine or "").lower()
    return _ARCH_ALIASES.get(key, key or "unknown")


def get_platform_env() -> Dict[str, str]:
    """Return ``CSR_OS``/``CSR_ARCH`` for the running host."""
    return {
        "CSR_OS": normalize_os(platform.system()),
        "CSR_ARCH": normalize_arch(platform.machine()),
    }
