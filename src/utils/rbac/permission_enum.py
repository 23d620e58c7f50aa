"""
Capability names - authoritative list of menu/feature identifiers.

Capabilities are grouped into nested namespaces by area. Members are plain
strings so they compare and hash exactly like the identifiers stored on
roles and user records.

Usage:
    from src.utils.rbac.permission_enum import Capability

    if has_capability(user, Capability.Expenses.SETTINGS):
        ...
"""


class Capability:
    """Namespace for all capability identifiers, grouped by area."""

    # Grants every capability unconditionally
    WILDCARD = "*"

    # Least-privilege grant for unknown roles
    DEFAULT = "dashboard"

    class Workspace:
        DASHBOARD = "dashboard"
        PROJECTS = "projects"
        CLIENTS = "clients"
        MEETINGS = "meetings"
        TEAM = "team"
        PROFILE = "profile"

    class Expenses:
        VIEW = "expenses_view"
        CREATE = "expenses_create"
        REVIEW = "expenses_review"
        MANAGE = "expenses_manage"
        SETTINGS = "expenses_settings"
        REPORTS = "expenses_reports"

    class Leave:
        MY_LEAVES = "my_leaves"
        TEAM_LEAVE = "team_leave"
        SETTINGS = "leave_settings"
        ATTENDANCE = "attendance"
        HOLIDAY = "holiday"

    class Company:
        PROFILE = "company_profile"
        EMPLOYEES = "employees"
        CATEGORIES = "categories"
        DEPARTMENT = "department"
        BRANCHES = "branches"
        BILLING = "billing"
