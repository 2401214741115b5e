"""
Projection of the visibility map into UI-ready FlatOrganization records.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Mapping, Optional, Sequence

import structlog

from .index import OrgIndex
from .navigator import TreeNavigator
from .schemas import Diagnostic, DiagnosticCode, FlatOrganization, VisibilityEntry

log = structlog.get_logger()

DEFAULT_PATH_DELIMITERS = (" / ", "→", "->")


def split_path(full_path: str, delimiters: Sequence[str] = DEFAULT_PATH_DELIMITERS) -> list[str]:
    """Split a precomputed path into trimmed, non-empty names."""
    # Longest delimiter first so "->" is not consumed as "-" + ">"
    ordered = sorted(delimiters, key=len, reverse=True)
    pattern = "|".join(re.escape(d) for d in ordered if d)
    parts = re.split(pattern, full_path) if pattern else [full_path]
    return [p.strip() for p in parts if p.strip()]


def count_children(index: OrgIndex, visible_ids: set[str]) -> Counter:
    """Direct child counts for the visible ids, in one pass over the index."""
    return Counter(
        node.parent_id for node in index if node.parent_id is not None and node.parent_id in visible_ids
    )


class ViewProjector:
    def __init__(
        self,
        index: OrgIndex,
        navigator: TreeNavigator,
        path_delimiters: Sequence[str] = DEFAULT_PATH_DELIMITERS,
    ):
        self._index = index
        self._navigator = navigator
        self._delimiters = tuple(path_delimiters)
        self.diagnostics: list[Diagnostic] = []

    def breadcrumb_for(self, org_id: str, entry: VisibilityEntry) -> list[str]:
        membership = entry.membership
        if membership is not None and membership.full_path:
            names = split_path(membership.full_path, self._delimiters)
            if names:
                return names

        names = [self._index.get(org_id).name]
        for ancestor_id in self._navigator.ancestors_of(org_id):
            names.append(self._index.get(ancestor_id).name)
        names.reverse()
        return names

    def project(
        self,
        visible: Mapping[str, VisibilityEntry],
        child_counts: Optional[Mapping[str, int]] = None,
    ) -> list[FlatOrganization]:
        if child_counts is None:
            child_counts = count_children(self._index, set(visible))

        projected: list[FlatOrganization] = []
        for org_id, entry in visible.items():
            node = self._index.get(org_id)
            if node is None:
                log.warning("projection.unknown_org", org_id=org_id)
                self.diagnostics.append(
                    Diagnostic(
                        code=DiagnosticCode.UNKNOWN_ORG,
                        org_id=org_id,
                        message=f"Organization {org_id} is visible but missing from the listing",
                    )
                )
                continue

            breadcrumb = self.breadcrumb_for(org_id, entry)
            projected.append(
                FlatOrganization(
                    id=node.id,
                    name=node.name,
                    type=node.type,
                    parent_id=node.parent_id,
                    depth=len(breadcrumb) - 1,
                    role=entry.role,
                    is_root=node.is_root,
                    breadcrumb=tuple(breadcrumb),
                    child_count=child_counts.get(org_id, 0),
                    created_at=node.created_at,
                    has_full_permission=entry.has_full_permission,
                    is_context_only=entry.is_context_only,
                )
            )
        return projected
