"""Aggregated shared helpers."""

from csr.shared.environment import suite_environment
from csr.shared.process import ProcessLauncher
from csr.shared.reporting import Reporter

__all__ = ["ProcessLauncher", "Reporter", "suite_environment"]
