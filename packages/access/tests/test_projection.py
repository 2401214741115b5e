"""Tests for projecting the visibility map into flat records."""

import pytest

from range_access.index import OrgIndex
from range_access.navigator import TreeNavigator
from range_access.projection import ViewProjector, count_children, split_path
from range_access.schemas import DiagnosticCode, OrgRole
from range_access.visibility import resolve_visibility


@pytest.fixture
def index(forest):
    return OrgIndex.build(forest)


@pytest.fixture
def projector(index):
    return ViewProjector(index, TreeNavigator(index))


def _project(projector, index, memberships, child_counts=None):
    visible = resolve_visibility(memberships, index)
    return {org.id: org for org in projector.project(visible, child_counts)}


class TestSplitPath:
    def test_slash_delimited(self):
        assert split_path("Range HQ / Alpha / Squad 1") == ["Range HQ", "Alpha", "Squad 1"]

    def test_arrow_delimited_and_trimmed(self):
        assert split_path(" Range HQ → Alpha ->  Squad 1 ") == ["Range HQ", "Alpha", "Squad 1"]

    def test_periods_and_bare_slashes_stay_in_names(self):
        assert split_path("1st Bn. → Co. A") == ["1st Bn.", "Co. A"]
        assert split_path("HQ / A/B Company") == ["HQ", "A/B Company"]

    def test_drops_empty_segments(self):
        assert split_path("A /  / B / ") == ["A", "B"]
        assert split_path("  ") == []

    def test_custom_delimiters(self):
        assert split_path("A.B.C", ["."]) == ["A", "B", "C"]


def test_breadcrumb_from_parent_walk(projector, index, make_membership):
    orgs = _project(projector, index, [make_membership("B", "commander")])

    assert orgs["C"].breadcrumb == ("A", "B", "C")
    assert orgs["C"].depth == 2
    assert orgs["A"].breadcrumb == ("A",)
    assert orgs["A"].depth == 0
    assert orgs["A"].is_root
    assert not orgs["B"].is_root


def test_breadcrumb_from_membership_path(projector, index, make_membership):
    orgs = _project(projector, index, [make_membership("C", "member", full_path="Alpha / Bravo / Charlie")])

    assert orgs["C"].breadcrumb == ("Alpha", "Bravo", "Charlie")
    assert orgs["C"].depth == 2
    # context entries have no membership path and fall back to the walk
    assert orgs["A"].breadcrumb == ("A",)


def test_blank_membership_path_falls_back(projector, index, make_membership):
    orgs = _project(projector, index, [make_membership("C", "member", full_path=" / ")])
    assert orgs["C"].breadcrumb == ("A", "B", "C")


def test_depth_matches_breadcrumb(projector, index, make_membership):
    orgs = _project(projector, index, [make_membership("A", "commander")])
    for org in orgs.values():
        assert org.depth == len(org.breadcrumb) - 1


def test_child_counts(projector, index, make_membership):
    orgs = _project(projector, index, [make_membership("A", "commander")])
    assert {k: v.child_count for k, v in orgs.items()} == {"A": 2, "B": 1, "C": 0, "D": 0}


def test_child_counts_restricted_to_visible(index):
    counts = count_children(index, {"B"})
    assert dict(counts) == {"B": 1}


def test_supplied_child_counts_take_precedence(projector, index, make_membership):
    orgs = _project(projector, index, [make_membership("C", "member")], child_counts={"A": 7})
    assert orgs["A"].child_count == 7
    assert orgs["C"].child_count == 0


def test_record_fields(projector, index, make_membership):
    orgs = _project(projector, index, [make_membership("C", "member")])
    c = orgs["C"]
    assert c.name == "C"
    assert c.type == "unit"
    assert c.parent_id == "B"
    assert c.role == OrgRole.MEMBER
    assert c.created_at is not None
    assert not c.has_full_permission
    assert not c.is_context_only


def test_unknown_org_skipped_with_diagnostic(projector, index, make_membership):
    orgs = _project(projector, index, [make_membership("ghost", "member")])
    assert orgs == {}
    assert [(d.code, d.org_id) for d in projector.diagnostics] == [(DiagnosticCode.UNKNOWN_ORG, "ghost")]
