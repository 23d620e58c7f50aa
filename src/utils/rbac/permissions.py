"""
RBAC Permissions - effective permission resolution

A user's effective permissions are their custom permissions when that list
is non-empty, otherwise their role's permission set. Custom permissions
replace the role set outright; they are never merged with it. Every
capability check in the application reduces to has_capability.

All functions here are pure: they read the user record and the immutable
registry and never cache between calls.
"""

from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from src.utils.rbac.catalogue import PERMISSION_CATALOGUE
from src.utils.rbac.permission_enum import Capability
from src.utils.rbac.registry import RoleRegistry, get_registry
from src.utils.rbac.users import User


def _registry(registry: Optional[RoleRegistry]) -> RoleRegistry:
    return registry if registry is not None else get_registry()


def effective_permissions(user: User, registry: Optional[RoleRegistry] = None) -> FrozenSet[str]:
    """
    Compute the capability set actually enforced for a user.

    Args:
        user: User record
        registry: Optional registry (defaults to the global one)

    Returns:
        Frozen set of capability strings
    """
    if user.custom_permissions:
        return frozenset(user.custom_permissions)
    return _registry(registry).permission_set(user.role)


def has_capability(user: User, capability: str, registry: Optional[RoleRegistry] = None) -> bool:
    """
    Check if a user holds a capability.

    The wildcard '*' in the effective set grants every capability.
    """
    perms = effective_permissions(user, registry)
    return Capability.WILDCARD in perms or capability in perms


def has_any_capability(user: User, capabilities: Iterable[str], registry: Optional[RoleRegistry] = None) -> bool:
    """
    Check if the user has ANY of the specified capabilities.

    Returns:
        True if at least one capability is granted
    """
    for capability in capabilities:
        if has_capability(user, capability, registry):
            return True
    return False


def has_all_capabilities(user: User, capabilities: Iterable[str], registry: Optional[RoleRegistry] = None) -> bool:
    for capability in capabilities:
        if not has_capability(user, capability, registry):
            return False
    return True


def ordered_permissions(user: User, registry: Optional[RoleRegistry] = None) -> List[str]:
    """
    Effective permissions as a list for API responses.

    Custom permissions keep their stored order (duplicates dropped); role
    permissions keep the role's authoring order.
    """
    if user.custom_permissions:
        return list(dict.fromkeys(user.custom_permissions))
    return _registry(registry).ordered_permissions(user.role)


def permissions_payload(user: User, registry: Optional[RoleRegistry] = None) -> Dict[str, Any]:
    """Body of the permissions-query endpoint for the current session."""
    reg = _registry(registry)
    return {
        'permissions': ordered_permissions(user, reg),
        'role': user.role,
        'displayName': reg.display_name(user.role),
    }


def get_menu_context(user: User, registry: Optional[RoleRegistry] = None) -> Dict[str, bool]:
    """
    Visibility flag for every catalogued menu item.

    Useful for clients that render navigation from a single response.
    """
    perms = effective_permissions(user, registry)
    wildcard = Capability.WILDCARD in perms
    return {value: wildcard or value in perms for value, _ in PERMISSION_CATALOGUE}
