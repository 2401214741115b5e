"""
Visibility resolution: turns direct memberships into a per-organization
permission map.

Entries are ranked full permission > direct membership > context-only, and
every write goes through ``_merge`` so the final map does not depend on the
order memberships are processed in.
"""

from __future__ import annotations

from typing import Iterable, Optional

from .index import OrgIndex
from .navigator import TreeNavigator
from .schemas import Membership, OrgRole, VisibilityEntry

# Tie-break between two direct non-commander grants on the same org
_ROLE_STRENGTH = {OrgRole.VIEWER: 0, OrgRole.MEMBER: 1, OrgRole.COMMANDER: 2}

CONTEXT_ENTRY = VisibilityEntry(
    role=OrgRole.VIEWER, has_full_permission=False, is_context_only=True
)


def _rank(entry: VisibilityEntry) -> tuple[int, int, bool, str]:
    if entry.has_full_permission:
        tier = 2
    elif entry.is_context_only:
        tier = 0
    else:
        tier = 1
    path = (entry.membership.full_path or "") if entry.membership else ""
    return (tier, _ROLE_STRENGTH[entry.role], entry.membership is not None, path)


def _merge(current: Optional[VisibilityEntry], incoming: VisibilityEntry) -> VisibilityEntry:
    """Keep the stronger entry; the only promotion is upward."""
    if current is None:
        return incoming
    winner, loser = (incoming, current) if _rank(incoming) > _rank(current) else (current, incoming)
    if winner.membership is None and loser.membership is not None:
        return winner.model_copy(update={"membership": loser.membership})
    return winner


def _commander_entry(membership: Optional[Membership] = None) -> VisibilityEntry:
    return VisibilityEntry(
        role=OrgRole.COMMANDER,
        has_full_permission=True,
        is_context_only=False,
        membership=membership,
    )


def resolve_visibility(
    memberships: Iterable[Membership],
    index: OrgIndex,
    navigator: Optional[TreeNavigator] = None,
) -> dict[str, VisibilityEntry]:
    """Map each visible org id to the user's effective access on it."""
    navigator = navigator or TreeNavigator(index)
    visible: dict[str, VisibilityEntry] = {}

    def mark(org_id: str, entry: VisibilityEntry) -> None:
        visible[org_id] = _merge(visible.get(org_id), entry)

    for membership in memberships:
        org_id = membership.org_id
        root_id = navigator.root_of(org_id)

        if membership.role == OrgRole.COMMANDER:
            mark(org_id, _commander_entry(membership))
            for descendant_id in navigator.descendants_of(org_id):
                mark(descendant_id, _commander_entry())
            if root_id != org_id:
                mark(root_id, CONTEXT_ENTRY)
                for sibling_id in navigator.siblings_of(org_id):
                    mark(sibling_id, CONTEXT_ENTRY)
        else:
            mark(
                org_id,
                VisibilityEntry(
                    role=membership.role,
                    has_full_permission=False,
                    is_context_only=False,
                    membership=membership,
                ),
            )
            if root_id != org_id:
                mark(root_id, CONTEXT_ENTRY)

    return visible
