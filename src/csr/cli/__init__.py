"""CLI layer for the csr command-line interface."""

__all__ = [
    "docs",
    "doctor",
    "handlers",
    "main",
    "parser",
]
