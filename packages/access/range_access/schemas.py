"""
Organization access schemas.

Covers: the raw snapshot records fetched from the backend (organizations and
memberships), the intermediate visibility entry, and the flattened,
permission-annotated organization handed to the UI layer.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class OrgRole(str, Enum):
    COMMANDER = "commander"
    MEMBER = "member"
    VIEWER = "viewer"


class DiagnosticCode(str, Enum):
    DUPLICATE_ORG_ID = "duplicate_org_id"
    UNKNOWN_PARENT = "unknown_parent"
    UNKNOWN_ORG = "unknown_org"
    TRAVERSAL_LIMIT = "traversal_limit"


# ---------------------------------------------------------------------------
# Snapshot records
# ---------------------------------------------------------------------------

class OrganizationNode(BaseModel):
    """One organization as returned by the backend's full org listing."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str
    type: str = Field(default="", alias="org_type", description="Free-form category tag")
    parent_id: Optional[str] = Field(default=None, description="None marks a root")
    created_at: Optional[datetime] = None

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


class Membership(BaseModel):
    """A direct role grant on a single organization."""

    model_config = ConfigDict(frozen=True)

    org_id: str
    role: OrgRole
    depth: Optional[int] = Field(default=None, ge=0)
    full_path: Optional[str] = Field(
        default=None,
        description="Precomputed breadcrumb from the path-aware query",
    )


# ---------------------------------------------------------------------------
# Resolution output
# ---------------------------------------------------------------------------

class VisibilityEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: OrgRole
    has_full_permission: bool = False
    is_context_only: bool = False
    membership: Optional[Membership] = None


class FlatOrganization(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    type: str
    parent_id: Optional[str] = None
    depth: int
    role: OrgRole
    is_root: bool
    breadcrumb: tuple[str, ...]
    child_count: int = 0
    created_at: Optional[datetime] = None
    has_full_permission: bool
    is_context_only: bool


class Diagnostic(BaseModel):
    """Non-fatal anomaly found in the snapshot while resolving."""

    model_config = ConfigDict(frozen=True)

    code: DiagnosticCode
    org_id: Optional[str] = None
    message: str


class AccessView(BaseModel):
    organizations: list[FlatOrganization] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)


class OrgStats(BaseModel):
    total: int = 0
    roots: int = 0
    commands: int = 0
    memberships: int = 0
    context_only: int = 0
    max_depth: int = 0
