"""Link reconciliation and the administrative flows built on it."""

from csr.sync.bin_directory import BinDirectory
from csr.sync.engine import SyncEngine, SyncReport
from csr.sync.lock import AdminLock
from csr.sync.reconciler import (
    LinkAction,
    LinkChange,
    ReconcileReport,
    Reconciler,
    plan_links,
)

__all__ = [
    "AdminLock",
    "BinDirectory",
    "LinkAction",
    "LinkChange",
    "ReconcileReport",
    "Reconciler",
    "SyncEngine",
    "SyncReport",
    "plan_links",
]
