"""
Range organization access resolver

Turns a user's direct organization memberships and the organization forest
into the permission-scoped, ordered list of organizations the user may see.
"""

from .resolver import AccessResolver, resolve_accessible_orgs
from .schemas import AccessView, FlatOrganization, Membership, OrganizationNode, OrgRole

__version__ = "0.1.0"

__all__ = [
    "AccessResolver",
    "AccessView",
    "FlatOrganization",
    "Membership",
    "OrgRole",
    "OrganizationNode",
    "resolve_accessible_orgs",
]
