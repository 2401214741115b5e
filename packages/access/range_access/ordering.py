"""Deterministic ordering of flattened organizations."""

from __future__ import annotations

from typing import Iterable

from .schemas import FlatOrganization

DEFAULT_SEPARATOR = " → "


def sort_key(org: FlatOrganization, separator: str = DEFAULT_SEPARATOR) -> tuple[bool, str, str]:
    # Roots sort first; id breaks ties between identical breadcrumbs.
    return (not org.is_root, separator.join(org.breadcrumb), org.id)


def sort_organizations(
    orgs: Iterable[FlatOrganization], separator: str = DEFAULT_SEPARATOR
) -> list[FlatOrganization]:
    return sorted(orgs, key=lambda org: sort_key(org, separator))
