"""
Access resolution pipeline.

memberships + org listing → OrgIndex → visibility map → projection → ordered
view. ``resolve_accessible_orgs`` is pure and synchronous; ``AccessResolver``
wraps it with the fetches from a snapshot source.
"""

from __future__ import annotations

import asyncio
from typing import Any, Iterable, Mapping, Optional, Protocol, runtime_checkable

import structlog

from .config import Settings, get_settings
from .index import OrgIndex
from .metrics import MetricsCollector
from .navigator import TreeNavigator
from .ordering import sort_organizations
from .projection import ViewProjector
from .schemas import AccessView, Diagnostic, Membership, OrganizationNode
from .visibility import resolve_visibility

log = structlog.get_logger()


@runtime_checkable
class OrgSnapshotSource(Protocol):
    """Where memberships and the organization listing come from."""

    async def fetch_user_memberships(self, user_id: str) -> list[Membership]: ...

    async def fetch_all_organizations(self, user_id: str) -> list[OrganizationNode]: ...


def _as_memberships(items: Iterable[Membership | Mapping[str, Any]]) -> list[Membership]:
    return [m if isinstance(m, Membership) else Membership.model_validate(m) for m in items]


def _as_nodes(items: Iterable[OrganizationNode | Mapping[str, Any]]) -> list[OrganizationNode]:
    return [n if isinstance(n, OrganizationNode) else OrganizationNode.model_validate(n) for n in items]


def resolve_accessible_orgs(
    memberships: Iterable[Membership | Mapping[str, Any]],
    organizations: Iterable[OrganizationNode | Mapping[str, Any]],
    *,
    child_counts: Optional[Mapping[str, int]] = None,
    settings: Optional[Settings] = None,
    metrics: Optional[MetricsCollector] = None,
) -> AccessView:
    """Resolve the organizations a user may see, ordered for display."""
    settings = settings or get_settings()
    memberships = _as_memberships(memberships)

    index = OrgIndex.build(_as_nodes(organizations))
    navigator = TreeNavigator(index, limit_factor=settings.traversal_limit_factor)
    visible = resolve_visibility(memberships, index, navigator)

    projector = ViewProjector(index, navigator, settings.path_delimiters)
    projected = projector.project(visible, child_counts)
    ordered = sort_organizations(projected, settings.breadcrumb_separator)

    diagnostics: list[Diagnostic] = [
        *index.diagnostics,
        *navigator.diagnostics,
        *projector.diagnostics,
    ]

    view = AccessView(organizations=ordered, diagnostics=diagnostics)
    if metrics is not None:
        metrics.record_resolution(view)

    log.info(
        "access.resolved",
        memberships=len(memberships),
        organizations=len(index),
        visible=len(ordered),
        diagnostics=len(diagnostics),
    )
    return view


class AccessResolver:
    """Fetches a user's snapshot from a source and resolves it."""

    def __init__(
        self,
        source: OrgSnapshotSource,
        settings: Optional[Settings] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self._source = source
        self._settings = settings or get_settings()
        self._metrics = metrics

    async def load(self, user_id: str) -> AccessView:
        # Fetch errors propagate as-is; there is nothing to resolve without a snapshot.
        memberships, organizations = await asyncio.gather(
            self._source.fetch_user_memberships(user_id),
            self._source.fetch_all_organizations(user_id),
        )

        child_counts = None
        fetch_counts = getattr(self._source, "fetch_child_counts", None)
        if self._settings.fetch_child_counts and fetch_counts is not None:
            organizations = _as_nodes(organizations)
            child_counts = await fetch_counts([node.id for node in organizations])

        return resolve_accessible_orgs(
            memberships,
            organizations,
            child_counts=child_counts,
            settings=self._settings,
            metrics=self._metrics,
        )
