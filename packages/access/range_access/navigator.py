"""
Traversal helpers over an OrgIndex.

Every walk is bounded by the size of the index so a cyclic or otherwise
malformed listing yields a partial result plus a diagnostic instead of
looping forever.
"""

from __future__ import annotations

from collections import deque

import structlog

from .index import OrgIndex
from .schemas import Diagnostic, DiagnosticCode

log = structlog.get_logger()


class TreeNavigator:
    def __init__(self, index: OrgIndex, limit_factor: int = 1):
        self._index = index
        self._limit = max(len(index) * max(limit_factor, 1), 1)
        self.diagnostics: list[Diagnostic] = []
        self._reported: set[tuple[str, str]] = set()

    def _report_limit(self, walk: str, org_id: str) -> None:
        if (walk, org_id) in self._reported:
            return
        self._reported.add((walk, org_id))
        log.warning("navigator.traversal_limit", walk=walk, org_id=org_id, limit=self._limit)
        self.diagnostics.append(
            Diagnostic(
                code=DiagnosticCode.TRAVERSAL_LIMIT,
                org_id=org_id,
                message=f"{walk} from {org_id} stopped after {self._limit} steps",
            )
        )

    def ancestors_of(self, org_id: str) -> list[str]:
        """Parent chain of ``org_id``, nearest first. Stops at unknown parents."""
        chain: list[str] = []
        seen = {org_id}
        current = self._index.parent_of(org_id)
        while current is not None and current in self._index:
            if current in seen or len(chain) >= self._limit:
                self._report_limit("ancestors", org_id)
                break
            seen.add(current)
            chain.append(current)
            current = self._index.parent_of(current)
        return chain

    def root_of(self, org_id: str) -> str:
        """Topmost known ancestor; an unknown id or a root is its own root."""
        chain = self.ancestors_of(org_id)
        return chain[-1] if chain else org_id

    def is_ancestor_of(self, ancestor_id: str, org_id: str) -> bool:
        return ancestor_id in self.ancestors_of(org_id)

    def in_same_tree(self, first_id: str, second_id: str) -> bool:
        return self.root_of(first_id) == self.root_of(second_id)

    def _walk_down(self, walk: str, org_id: str) -> list[tuple[str, int]]:
        """Breadth-first ``(id, hops)`` pairs below ``org_id``, each id once.

        The ceiling counts discovered nodes only, so a start id that is
        missing from the index does not use up a step.
        """
        found: list[tuple[str, int]] = []
        visited = {org_id}
        queue = deque([(org_id, 0)])
        while queue:
            current, hops = queue.popleft()
            for child in self._index.children_of(current):
                if child.id in visited:
                    continue
                if len(found) >= self._limit:
                    self._report_limit(walk, org_id)
                    return found
                visited.add(child.id)
                found.append((child.id, hops + 1))
                queue.append((child.id, hops + 1))
        return found

    def descendants_of(self, org_id: str) -> list[str]:
        """All strict descendants in breadth-first order, each once."""
        return [child_id for child_id, _ in self._walk_down("descendants", org_id)]

    def count_descendants(self, org_id: str) -> int:
        return len(self.descendants_of(org_id))

    def has_children(self, org_id: str) -> bool:
        return self._index.child_count(org_id) > 0

    def max_depth(self, root_id: str) -> int:
        """Longest parent-to-child hop count below ``root_id``; 0 for a leaf."""
        return max((hops for _, hops in self._walk_down("max_depth", root_id)), default=0)

    def siblings_of(self, org_id: str) -> list[str]:
        parent_id = self._index.parent_of(org_id)
        if parent_id is None:
            return []
        return [c.id for c in self._index.children_of(parent_id) if c.id != org_id]

    def subtree(self, org_id: str) -> list[str]:
        """``org_id`` followed by its descendants."""
        return [org_id, *self.descendants_of(org_id)]
