"""Invocation-time routing of command names to repository scripts."""

from csr.delegation.router import (
    Candidate,
    DelegationOutcome,
    DelegationResult,
    DelegationRouter,
)

__all__ = ["Candidate", "DelegationOutcome", "DelegationResult", "DelegationRouter"]
