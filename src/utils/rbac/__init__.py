"""
RBAC (Role-Based Access Control) Module for Tikidan

This module provides authorization functionality including:
- Role registry with the built-in role and department tables
- Effective permission resolution (custom permissions override role permissions)
- Route protection decorators (role gate and capability gate)
- Session token minting and verification

Usage:
    from src.utils.rbac import capability_required, has_capability, Capability

    @app.route('/api/expenses/settings')
    @capability_required(Capability.Expenses.SETTINGS)
    def expense_settings():
        ...
"""

from src.utils.rbac.permission_enum import Capability
from src.utils.rbac.catalogue import get_available_permissions
from src.utils.rbac.departments import DepartmentRegistry, department_label
from src.utils.rbac.errors import (
    RBACError,
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    UnknownRoleError,
    RBACConfigError,
    ValidationError,
    NotFoundError,
)
from src.utils.rbac.registry import (
    Role,
    RoleRegistry,
    get_registry,
    load_rbac_config,
    reset_registry,
)
from src.utils.rbac.roles import RoleLevel
from src.utils.rbac.users import (
    User,
    UserDirectory,
    InMemoryUserDirectory,
    direct_reports,
    reporting_chain,
)
from src.utils.rbac.permissions import (
    effective_permissions,
    has_capability,
    has_any_capability,
    has_all_capabilities,
    permissions_payload,
)
from src.utils.rbac.decorators import (
    AccessGate,
    require_authenticated,
    require_role,
    require_capability,
    authenticated,
    roles_required,
    capability_required,
    get_current_user,
)
from src.utils.rbac.jwt_parser import (
    issue_session_token,
    decode_session_token,
    extract_bearer_token,
)
from src.utils.rbac.validation import validate_access_update

__all__ = [
    # Capabilities
    'Capability',
    'get_available_permissions',
    # Registries
    'DepartmentRegistry',
    'department_label',
    'Role',
    'RoleLevel',
    'RoleRegistry',
    'get_registry',
    'load_rbac_config',
    'reset_registry',
    # Errors
    'RBACError',
    'AuthenticationError',
    'AuthorizationError',
    'ConfigurationError',
    'UnknownRoleError',
    'RBACConfigError',
    'ValidationError',
    'NotFoundError',
    # Users
    'User',
    'UserDirectory',
    'InMemoryUserDirectory',
    'direct_reports',
    'reporting_chain',
    # Permissions
    'effective_permissions',
    'has_capability',
    'has_any_capability',
    'has_all_capabilities',
    'permissions_payload',
    # Gate
    'AccessGate',
    'require_authenticated',
    'require_role',
    'require_capability',
    'authenticated',
    'roles_required',
    'capability_required',
    'get_current_user',
    # Tokens
    'issue_session_token',
    'decode_session_token',
    'extract_bearer_token',
    # Validation
    'validate_access_update',
]
