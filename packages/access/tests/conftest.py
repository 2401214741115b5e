"""
Shared fixtures for access resolver tests.

The default forest is::

    A (root)
    ├── B
    │   └── C
    └── D
"""

from datetime import datetime, timezone

import pytest

from range_access.config import Settings
from range_access.schemas import Membership, OrganizationNode, OrgRole

CREATED = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _node(org_id, parent_id=None, name=None, org_type="unit"):
    return OrganizationNode(
        id=org_id,
        name=name or org_id,
        org_type=org_type,
        parent_id=parent_id,
        created_at=CREATED,
    )


@pytest.fixture
def make_node():
    return _node


@pytest.fixture
def make_membership():
    def _membership(org_id, role="member", full_path=None):
        return Membership(org_id=org_id, role=OrgRole(role), full_path=full_path)

    return _membership


@pytest.fixture
def forest():
    return [
        _node("A"),
        _node("B", "A"),
        _node("C", "B"),
        _node("D", "A"),
    ]


@pytest.fixture
def settings():
    return Settings(_env_file=None)
