"""
Main entry point for csr.

This module allows csr to be run as:
    python -m csr

which always starts the administrative front end.
"""

from .cli.main import main

if __name__ == "__main__":
    main(admin=True)
