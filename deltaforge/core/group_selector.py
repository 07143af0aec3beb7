"""Selection of the groups that need reprocessing.

Groups are evaluated independently, in declaration order.  Within a group,
resources are checked in declaration order and evaluation stops at the
first changed resource.  The only state shared between group evaluations
is the fingerprint store, which is read-only during selection.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from deltaforge.core.change_detector import ChangeDetector
from deltaforge.models.config import TargetMatch
from deltaforge.models.fingerprints import ChangeStatus, GroupSelection, ResourceIssue
from deltaforge.models.resources import Group

logger = logging.getLogger(__name__)

ALL_GROUPS = "all"


class TargetFilter:
    """Predicate over group names built from a comma-separated filter.

    ``None``, an empty string, or ``"all"`` accept every group.

    Parameters
    ----------
    raw:
        Comma-separated group names.
    match:
        ``EXACT`` compares against the stripped names; ``SUBSTRING`` accepts
        a group whose name occurs anywhere in *raw*.

    Examples
    --------
    >>> TargetFilter("g1, g2").accepts("g2")
    True
    >>> TargetFilter("g10", TargetMatch.SUBSTRING).accepts("g1")
    True
    >>> TargetFilter(None).accepts("anything")
    True
    """

    def __init__(self, raw: str | None = None, match: TargetMatch = TargetMatch.EXACT) -> None:
        self.raw = (raw or "").strip()
        self.match = match
        self.names: list[str] = []
        if not self.accepts_all:
            for name in self.raw.split(","):
                name = name.strip()
                if name and name not in self.names:
                    self.names.append(name)

    @property
    def accepts_all(self) -> bool:
        return not self.raw or self.raw.lower() == ALL_GROUPS

    def accepts(self, group_name: str) -> bool:
        if self.accepts_all:
            return True
        if self.match is TargetMatch.SUBSTRING:
            return group_name in self.raw
        return group_name in self.names

    def __repr__(self) -> str:
        return f"TargetFilter({self.raw or ALL_GROUPS!r}, {self.match.value})"


def as_filter(target_filter: TargetFilter | str | None) -> TargetFilter:
    """Coerce a raw filter string (or ``None``) into a ``TargetFilter``."""
    if isinstance(target_filter, TargetFilter):
        return target_filter
    return TargetFilter(target_filter)


class GroupSelector:
    """Apply a ``ChangeDetector`` across groups.

    Parameters
    ----------
    detector:
        Per-resource change detector.
    unknown_as_changed:
        Whether a resource whose status is UNKNOWN selects its group.
        Defaults to the detector's own policy.
    """

    def __init__(
        self, detector: ChangeDetector, *, unknown_as_changed: bool | None = None
    ) -> None:
        self.detector = detector
        self.unknown_as_changed = (
            detector.unknown_as_changed if unknown_as_changed is None else unknown_as_changed
        )

    def select_changed_groups(
        self,
        groups: Iterable[Group],
        target_filter: TargetFilter | str | None = None,
    ) -> list[str]:
        """Return names of changed groups, in declaration order."""
        return self.select(groups, target_filter).changed

    def select(
        self,
        groups: Iterable[Group],
        target_filter: TargetFilter | str | None = None,
    ) -> GroupSelection:
        """Evaluate *groups* and return the full selection report."""
        flt = as_filter(target_filter)
        changed: list[str] = []
        evaluated: list[str] = []
        skipped: list[str] = []
        unknown: list[ResourceIssue] = []

        for group in groups:
            if not flt.accepts(group.name):
                skipped.append(group.name)
                continue
            evaluated.append(group.name)
            if self._group_changed(group, unknown):
                changed.append(group.name)

        logger.info(
            "Change detection: %d of %d evaluated group(s) changed",
            len(changed), len(evaluated),
        )
        return GroupSelection(
            changed=changed, evaluated=evaluated, skipped=skipped, unknown=unknown
        )

    def _group_changed(self, group: Group, unknown: list[ResourceIssue]) -> bool:
        for resource in group.resources:
            logger.debug("Checking delta for resource %s", resource.uri)
            status = self.detector.detect(resource)
            if status is ChangeStatus.CHANGED:
                logger.debug(
                    "Detected change for resource %s in group %s", resource.uri, group.name
                )
                return True
            if status is ChangeStatus.UNKNOWN:
                unknown.append(ResourceIssue(group=group.name, uri=resource.uri))
                if self.unknown_as_changed:
                    logger.warning(
                        "Group %s selected: status of %s is unknown",
                        group.name, resource.uri,
                    )
                    return True
                logger.warning(
                    "Status of %s in group %s is unknown; continuing",
                    resource.uri, group.name,
                )
        return False
