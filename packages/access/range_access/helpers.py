"""
Display helpers over a resolved, flattened organization list.

These only read FlatOrganization records; none of them change what a user
can see.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from .ordering import DEFAULT_SEPARATOR
from .schemas import FlatOrganization, OrgRole, OrgStats


def format_breadcrumb(
    breadcrumb: Iterable[str], max_length: int = 3, separator: str = DEFAULT_SEPARATOR
) -> str:
    """Join a breadcrumb, compressing long ones to ``Root → ⋯ → Current``."""
    names = list(breadcrumb)
    if len(names) <= max_length:
        return separator.join(names)
    return separator.join([names[0], "⋯", names[-1]])


def root_orgs(orgs: Iterable[FlatOrganization]) -> list[FlatOrganization]:
    return [o for o in orgs if o.is_root]


def group_by_parent(orgs: Iterable[FlatOrganization]) -> dict[str, list[FlatOrganization]]:
    """Non-root organizations keyed by their parent id, for tree rendering."""
    grouped: dict[str, list[FlatOrganization]] = defaultdict(list)
    for org in orgs:
        if not org.is_root and org.parent_id:
            grouped[org.parent_id].append(org)
    return dict(grouped)


def group_by_role(orgs: Iterable[FlatOrganization]) -> dict[str, list[FlatOrganization]]:
    orgs = list(orgs)
    return {
        "commands": [o for o in orgs if o.role == OrgRole.COMMANDER and not o.is_context_only],
        "memberships": [o for o in orgs if o.role == OrgRole.MEMBER and not o.is_context_only],
        "viewers": [o for o in orgs if o.role == OrgRole.VIEWER and not o.is_context_only],
        "context": [o for o in orgs if o.is_context_only],
    }


def group_by_tree(orgs: Iterable[FlatOrganization]) -> dict[str, dict]:
    """Group by the root named first in each breadcrumb.

    Trees whose root is not itself in the list are dropped.
    """
    orgs = list(orgs)
    roots = {o.name: o for o in orgs if o.is_root}
    trees: dict[str, dict] = {}
    for org in orgs:
        if not org.breadcrumb:
            continue
        root_name = org.breadcrumb[0]
        if root_name not in trees:
            root = roots.get(root_name)
            if root is None:
                continue
            trees[root_name] = {"root": root, "children": []}
        if not org.is_root:
            trees[root_name]["children"].append(org)
    return trees


def filter_orgs(orgs: Iterable[FlatOrganization], query: str) -> list[FlatOrganization]:
    """Case-insensitive search over names and breadcrumbs."""
    orgs = list(orgs)
    if not query.strip():
        return orgs
    needle = query.lower()
    return [
        o
        for o in orgs
        if needle in o.name.lower() or needle in " ".join(o.breadcrumb).lower()
    ]


def permission_label(org: FlatOrganization) -> str:
    if org.is_context_only:
        return "VIEW ONLY"
    if org.role == OrgRole.COMMANDER:
        return "ROOT ADMIN" if org.is_root else "COMMANDER"
    return org.role.value.upper()


def org_stats(orgs: Iterable[FlatOrganization]) -> OrgStats:
    orgs = list(orgs)
    return OrgStats(
        total=len(orgs),
        roots=sum(1 for o in orgs if o.is_root),
        commands=sum(1 for o in orgs if o.role == OrgRole.COMMANDER and not o.is_context_only),
        memberships=sum(1 for o in orgs if o.role == OrgRole.MEMBER),
        context_only=sum(1 for o in orgs if o.is_context_only),
        max_depth=max((o.depth for o in orgs), default=0),
    )
