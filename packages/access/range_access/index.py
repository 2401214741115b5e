"""
Lookup tables over a flat organization listing.

The tree is kept as an id-keyed table plus a parent → children adjacency map;
nodes never reference each other directly.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Iterator, Optional

import structlog

from .schemas import Diagnostic, DiagnosticCode, OrganizationNode

log = structlog.get_logger()


class OrgIndex:
    """id → node and parent_id → children lookups for one snapshot."""

    def __init__(self) -> None:
        self._nodes: dict[str, OrganizationNode] = {}
        self._children: dict[Optional[str], list[OrganizationNode]] = defaultdict(list)
        self.diagnostics: list[Diagnostic] = []

    @classmethod
    def build(cls, nodes: Iterable[OrganizationNode]) -> OrgIndex:
        nodes = list(nodes)
        index = cls()
        for node in nodes:
            if node.id in index._nodes:
                # Last write wins; the earlier record is reported, not merged.
                log.warning("index.duplicate_id", org_id=node.id)
                index.diagnostics.append(
                    Diagnostic(
                        code=DiagnosticCode.DUPLICATE_ORG_ID,
                        org_id=node.id,
                        message=f"Organization {node.id} appears more than once; keeping the later record",
                    )
                )
            index._nodes[node.id] = node

        # Children are collected from the surviving records so a duplicated id
        # never shows up twice under its parent.
        seen: set[str] = set()
        for node in nodes:
            if node.id in seen:
                continue
            seen.add(node.id)
            survivor = index._nodes[node.id]
            index._children[survivor.parent_id].append(survivor)

        for node in index._nodes.values():
            if node.parent_id is not None and node.parent_id not in index._nodes:
                log.warning("index.unknown_parent", org_id=node.id, parent_id=node.parent_id)
                index.diagnostics.append(
                    Diagnostic(
                        code=DiagnosticCode.UNKNOWN_PARENT,
                        org_id=node.id,
                        message=f"Parent {node.parent_id} of {node.id} is not in the listing",
                    )
                )
        return index

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[OrganizationNode]:
        return iter(self._nodes.values())

    def __contains__(self, org_id: object) -> bool:
        return org_id in self._nodes

    def get(self, org_id: str) -> Optional[OrganizationNode]:
        return self._nodes.get(org_id)

    def parent_of(self, org_id: str) -> Optional[str]:
        node = self._nodes.get(org_id)
        return node.parent_id if node else None

    def children_of(self, org_id: str) -> list[OrganizationNode]:
        """Direct children in listing order."""
        return list(self._children.get(org_id, ()))

    def child_count(self, org_id: str) -> int:
        return len(self._children.get(org_id, ()))

    def roots(self) -> list[OrganizationNode]:
        return list(self._children.get(None, ()))
