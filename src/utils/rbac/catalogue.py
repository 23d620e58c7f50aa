"""
Catalogue of assignable capabilities.

The catalogue is the universe of identifiers an administrator may place in a
user's custom permissions, in the order the admin UI shows them. Every
capability a role grants must also appear here; the registry refuses to
build otherwise.
"""

from typing import Dict, List, Optional

from src.utils.rbac.permission_enum import Capability

# (value, label)
PERMISSION_CATALOGUE = (
    (Capability.Workspace.DASHBOARD, "Dashboard"),
    (Capability.Workspace.PROJECTS, "Projects"),
    (Capability.Workspace.CLIENTS, "Clients"),
    (Capability.Workspace.MEETINGS, "Meetings"),
    (Capability.Workspace.TEAM, "Team"),

    (Capability.Expenses.VIEW, "Expenses - View/Submit"),
    (Capability.Expenses.CREATE, "Expenses - Create"),
    (Capability.Expenses.REVIEW, "Expenses - Review"),
    (Capability.Expenses.MANAGE, "Expenses - Manage Categories"),
    (Capability.Expenses.SETTINGS, "Expenses - Settings"),
    (Capability.Expenses.REPORTS, "Expenses - Reports"),

    (Capability.Workspace.PROFILE, "Profile"),
    (Capability.Leave.MY_LEAVES, "My Leave"),
    (Capability.Leave.TEAM_LEAVE, "Team Leave"),
    (Capability.Leave.SETTINGS, "Leave Settings"),
    (Capability.Company.PROFILE, "Company Profile"),
    (Capability.Leave.ATTENDANCE, "Attendance"),
    (Capability.Company.EMPLOYEES, "Employees"),
    (Capability.Company.CATEGORIES, "Categories"),
    (Capability.Company.DEPARTMENT, "Department"),
    (Capability.Company.BRANCHES, "Branches"),
    (Capability.Leave.HOLIDAY, "Holiday"),
    (Capability.Company.BILLING, "Billing"),
)

_CATALOGUE_VALUES = frozenset(value for value, _ in PERMISSION_CATALOGUE)


def get_available_permissions() -> List[Dict[str, str]]:
    """Get the catalogue as ``{value, label}`` entries in display order."""
    return [{"value": value, "label": label} for value, label in PERMISSION_CATALOGUE]


def catalogue_values() -> frozenset:
    return _CATALOGUE_VALUES


def is_catalogued(capability: str) -> bool:
    """Check if a capability may be assigned as a custom permission."""
    return capability in _CATALOGUE_VALUES


def get_label(capability: str) -> Optional[str]:
    for value, label in PERMISSION_CATALOGUE:
        if value == capability:
            return label
    return None
