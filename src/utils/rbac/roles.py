"""
Built-in role table for Tikidan SaaS.

Each role maps to display metadata and the menu capabilities its holders
see. Insertion order is the order administrative UIs list roles in.
"""

from enum import Enum


class RoleLevel(str, Enum):
    """Seniority tier. Display and grouping only; never implies capabilities."""

    BASIC = "basic"
    STAFF = "staff"
    MANAGEMENT = "management"
    SENIOR_MANAGEMENT = "senior_management"
    EXECUTIVE = "executive"
    SYSTEM = "system"


_MANAGEMENT_MENU = [
    "dashboard", "projects", "clients", "team", "meetings",
    "expenses_view", "expenses_create", "expenses_review", "expenses_reports",
    "profile", "my_leaves",
]

DEFAULT_ROLES = {
    # Management roles
    "deputy_manager": {
        "display_name": "Deputy Manager",
        "department": "",
        "permissions": list(_MANAGEMENT_MENU),
        "level": "management",
    },
    "assistant_manager": {
        "display_name": "Assistant Manager",
        "department": "",
        "permissions": list(_MANAGEMENT_MENU),
        "level": "management",
    },
    "manager": {
        "display_name": "Manager",
        "department": "",
        "permissions": list(_MANAGEMENT_MENU),
        "level": "management",
    },
    "senior_manager": {
        "display_name": "Senior Manager",
        "department": "",
        "permissions": list(_MANAGEMENT_MENU),
        "level": "senior_management",
    },
    "sales_manager": {
        "display_name": "Sales Manager",
        "department": "",
        "permissions": list(_MANAGEMENT_MENU),
        "level": "management",
    },
    "president": {
        "display_name": "President",
        "department": "",
        "permissions": [
            "dashboard", "projects", "clients", "meetings", "team",
            "expenses_view", "expenses_create", "expenses_review", "expenses_reports",
            "company_profile", "profile", "my_leaves",
        ],
        "level": "executive",
    },
    "marketing_coordinator": {
        "display_name": "Marketing Coordinator",
        "department": "",
        "permissions": [
            "dashboard", "projects", "clients", "team",
            "expenses_view", "expenses_create", "profile", "my_leaves",
        ],
        "level": "executive",
    },
    "agm": {
        "display_name": "AGM",
        "department": "",
        "permissions": list(_MANAGEMENT_MENU),
        "level": "senior_management",
    },
    "accounts_executive": {
        "display_name": "Accounts Executive",
        "department": "",
        "permissions": [
            "dashboard",
            "expenses_view", "expenses_create", "expenses_review", "expenses_reports",
            "expenses_manage", "expenses_settings",
            "profile", "my_leaves",
        ],
        "level": "executive",
    },
    "zonal_manager": {
        "display_name": "Zonal Manager",
        "department": "",
        "permissions": list(_MANAGEMENT_MENU),
        "level": "management",
    },
    "technical_head": {
        "display_name": "Technical Head",
        "department": "",
        "permissions": [
            "dashboard", "projects", "clients", "team", "meetings",
            "expenses_view", "expenses_create", "profile", "my_leaves",
        ],
        "level": "management",
    },
    "tester": {
        "display_name": "Tester",
        "department": "",
        "permissions": [
            "dashboard", "projects", "team",
            "expenses_view", "expenses_create", "profile", "my_leaves",
        ],
        "level": "staff",
    },
    "territory_manager": {
        "display_name": "Territory Manager",
        "department": "",
        "permissions": [
            "dashboard", "projects", "clients", "team",
            "expenses_view", "expenses_create", "profile", "my_leaves",
        ],
        "level": "management",
    },
    "sr_general_manager": {
        "display_name": "Sr. General Manager",
        "department": "",
        "permissions": list(_MANAGEMENT_MENU),
        "level": "senior_management",
    },
    "business_head": {
        "display_name": "Business Head",
        "department": "",
        "permissions": list(_MANAGEMENT_MENU),
        "level": "executive",
    },

    # System roles
    "admin": {
        "display_name": "Administrator",
        "department": "",
        # Everything except meetings
        "permissions": [
            "dashboard", "projects", "clients", "team",
            "expenses_view", "expenses_create", "expenses_review", "expenses_reports",
            "expenses_manage", "expenses_settings",
            "profile", "my_leaves", "team_leave", "leave_settings",
            "company_profile", "attendance", "employees", "categories",
            "department", "branches", "holiday", "billing",
        ],
        "level": "system",
    },
    "user": {
        "display_name": "User",
        "department": "",
        "permissions": ["dashboard", "team", "expenses_view", "expenses_create", "profile", "my_leaves"],
        "level": "basic",
    },
}

DEFAULT_ROLE = "user"
ADMIN_ROLES = ("admin",)
