"""Tests for display helpers over resolved organizations."""

import pytest

from range_access.helpers import (
    filter_orgs,
    format_breadcrumb,
    group_by_parent,
    group_by_role,
    group_by_tree,
    org_stats,
    permission_label,
    root_orgs,
)
from range_access.resolver import resolve_accessible_orgs


@pytest.fixture
def orgs(make_node, make_membership, settings):
    nodes = [
        make_node("r1", name="North Range"),
        make_node("u1", "r1", name="Alpha"),
        make_node("u2", "r1", name="Bravo"),
        make_node("s1", "u1", name="Squad 1"),
        make_node("r2", name="East Range"),
        make_node("u3", "r2", name="Charlie"),
    ]
    grants = [make_membership("u1", "commander"), make_membership("u3", "member")]
    return resolve_accessible_orgs(grants, nodes, settings=settings).organizations


def _by_id(orgs):
    return {o.id: o for o in orgs}


class TestFormatBreadcrumb:
    def test_short_path_joined(self):
        assert format_breadcrumb(["Range", "Alpha"]) == "Range → Alpha"

    def test_long_path_compressed(self):
        assert format_breadcrumb(["Range", "Alpha", "Squad", "Team"]) == "Range → ⋯ → Team"

    def test_custom_length(self):
        assert format_breadcrumb(["A", "B", "C"], max_length=2) == "A → ⋯ → C"


def test_root_orgs(orgs):
    assert [o.id for o in root_orgs(orgs)] == ["r2", "r1"]


def test_group_by_parent(orgs):
    grouped = group_by_parent(orgs)
    assert sorted(o.id for o in grouped["r1"]) == ["u1", "u2"]
    assert [o.id for o in grouped["u1"]] == ["s1"]
    assert None not in grouped


def test_group_by_role(orgs):
    grouped = group_by_role(orgs)
    assert sorted(o.id for o in grouped["commands"]) == ["s1", "u1"]
    assert [o.id for o in grouped["memberships"]] == ["u3"]
    assert grouped["viewers"] == []
    assert sorted(o.id for o in grouped["context"]) == ["r1", "r2", "u2"]


def test_group_by_tree(orgs):
    trees = group_by_tree(orgs)
    assert set(trees) == {"North Range", "East Range"}
    assert trees["North Range"]["root"].id == "r1"
    assert sorted(o.id for o in trees["North Range"]["children"]) == ["s1", "u1", "u2"]
    assert [o.id for o in trees["East Range"]["children"]] == ["u3"]


def test_filter_orgs(orgs):
    assert {o.id for o in filter_orgs(orgs, "squad")} == {"s1"}
    # breadcrumb match pulls in descendants of the named org
    assert {o.id for o in filter_orgs(orgs, "ALPHA")} == {"u1", "s1"}
    assert filter_orgs(orgs, "   ") == list(orgs)


def test_permission_labels(orgs, make_node, make_membership, settings):
    by_id = _by_id(orgs)
    assert permission_label(by_id["u1"]) == "COMMANDER"
    assert permission_label(by_id["u3"]) == "MEMBER"
    assert permission_label(by_id["r1"]) == "VIEW ONLY"

    root_view = resolve_accessible_orgs(
        [make_membership("solo", "commander")], [make_node("solo")], settings=settings
    )
    assert permission_label(root_view.organizations[0]) == "ROOT ADMIN"


def test_org_stats(orgs):
    stats = org_stats(orgs)
    assert stats.total == 6
    assert stats.roots == 2
    assert stats.commands == 2
    assert stats.memberships == 1
    assert stats.context_only == 3
    assert stats.max_depth == 2


def test_org_stats_empty():
    assert org_stats([]).max_depth == 0
