"""
Validation of administrative access changes.

Each validator rejects bad input with a ValidationError naming the field,
before any state is touched.
"""

from typing import Any, Dict, List, Mapping, Optional

from src.utils.rbac.catalogue import is_catalogued
from src.utils.rbac.errors import ValidationError
from src.utils.rbac.permission_enum import Capability
from src.utils.rbac.registry import RoleRegistry, get_registry


def validate_role_key(role: Any, registry: RoleRegistry) -> str:
    if not isinstance(role, str) or not role:
        raise ValidationError("role", "Role must be a non-empty string")
    if not registry.is_valid_role(role):
        raise ValidationError("role", f"Invalid role provided: '{role}'")
    return role


def validate_department(department: Any, registry: RoleRegistry) -> str:
    if department is None:
        return ""
    if not isinstance(department, str):
        raise ValidationError("department", "Department must be a string")
    if not registry.departments.is_known(department):
        raise ValidationError("department", f"Invalid department provided: '{department}'")
    return department


def validate_custom_permissions(permissions: Any) -> List[str]:
    """
    Validate a custom permission list.

    The wildcard is reserved for role definitions and cannot be granted
    per user. An empty list is valid and clears the override.

    Returns:
        The list with duplicates removed, input order kept
    """
    if permissions is None:
        return []
    if not isinstance(permissions, (list, tuple)):
        raise ValidationError("customPermissions", "Custom permissions must be a list")

    for permission in permissions:
        if not isinstance(permission, str):
            raise ValidationError("customPermissions", "Custom permissions must be strings")
        if permission == Capability.WILDCARD:
            raise ValidationError("customPermissions", "The '*' capability cannot be assigned to individual users")
        if not is_catalogued(permission):
            raise ValidationError("customPermissions", f"Unknown capability: '{permission}'")

    return list(dict.fromkeys(permissions))


def validate_access_update(payload: Any, registry: Optional[RoleRegistry] = None) -> Dict[str, Any]:
    """
    Validate an admin access-update payload.

    Args:
        payload: Request body with any of 'role', 'department',
                 'customPermissions'; other keys are ignored
        registry: Optional registry (defaults to the global one)

    Returns:
        Dict of snake_case User fields to apply

    Raises:
        ValidationError: On the first invalid field, or if nothing to update
    """
    registry = registry if registry is not None else get_registry()

    if not isinstance(payload, Mapping):
        raise ValidationError("body", "Request body must be a JSON object")

    changes: Dict[str, Any] = {}
    if "role" in payload:
        changes["role"] = validate_role_key(payload["role"], registry)
    if "department" in payload:
        changes["department"] = validate_department(payload["department"], registry)
    if "customPermissions" in payload:
        changes["custom_permissions"] = validate_custom_permissions(payload["customPermissions"])

    if not changes:
        raise ValidationError("body", "Provide at least one of: role, department, customPermissions")
    return changes
