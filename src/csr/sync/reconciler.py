"""Merge-diff of desired command names against existing owned links."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from csr.exceptions import FilesystemFailure
from csr.shared.reporting import Reporter

from .bin_directory import BinDirectory

__all__ = ["LinkAction", "LinkChange", "ReconcileReport", "Reconciler", "plan_links"]

logger = logging.getLogger(__name__)


class LinkAction(str, Enum):
    CREATE = "+"
    REMOVE = "-"
    KEEP = "*"


@dataclass(frozen=True)
class LinkChange:
    action: LinkAction
    name: str


def plan_links(desired: Iterable[str], existing: Iterable[str]) -> List[LinkChange]:
    """Return one change per name in ascending name order.

    Both inputs are deduplicated and sorted first; the merge itself is a
    single two-cursor pass.
    """
    want = sorted(set(desired))
    have = sorted(set(existing))
    changes: List[LinkChange] = []
    i = j = 0
    while i < len(want) or j < len(have):
        if j >= len(have) or (i < len(want) and want[i] < have[j]):
            changes.append(LinkChange(LinkAction.CREATE, want[i]))
            i += 1
        elif i >= len(want) or want[i] > have[j]:
            changes.append(LinkChange(LinkAction.REMOVE, have[j]))
            j += 1
        else:
            changes.append(LinkChange(LinkAction.KEEP, want[i]))
            i += 1
            j += 1
    return changes


@dataclass
class ReconcileReport:
    created: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def mutations(self) -> int:
        return len(self.created) + len(self.removed)

    @property
    def ok(self) -> bool:
        return not self.failed


class Reconciler:
    """Applies a link plan to a :class:`BinDirectory`.

    Each decision is reported before its mutation runs; a failed mutation is
    recorded and the pass continues. Nothing is rolled back.
    """

    def __init__(
        self, bin_dir: BinDirectory, reporter: Optional[Reporter] = None
    ) -> None:
        self.bin_dir = bin_dir
        self._reporter = reporter or Reporter()

    def apply(self, desired: Iterable[str], existing: Iterable[str]) -> ReconcileReport:
        report = ReconcileReport()
        for change in plan_links(desired, existing):
            self._reporter.action(
                change.action.value, str(self.bin_dir.link_path(change.name))
            )
            if change.action is LinkAction.KEEP:
                report.unchanged.append(change.name)
                continue
            try:
                if change.action is LinkAction.CREATE:
                    self.bin_dir.create_link(change.name)
                    report.created.append(change.name)
                else:
                    self.bin_dir.remove_link(change.name)
                    report.removed.append(change.name)
            except FilesystemFailure as exc:
                self._reporter.error(str(exc))
                report.failed.append(change.name)
        logger.info(
            "reconcile_done created=%d removed=%d unchanged=%d failed=%d",
            len(report.created),
            len(report.removed),
            len(report.unchanged),
            len(report.failed),
        )
        return report

    def reconcile(self, desired: Iterable[str]) -> ReconcileReport:
        """Bring the owned links in line with ``desired``.

        Raises :class:`FilesystemFailure` when the bin directory cannot be
        created or listed.
        """
        existing = self.bin_dir.owned_links(create_missing=True)
        return self.apply(desired, existing)
