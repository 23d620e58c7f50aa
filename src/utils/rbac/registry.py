"""
RBAC Registry - role table lookups

This module provides the process-wide role registry. Roles come from the
built-in table in roles.py or, when one is configured, from a standalone
roles YAML file. The registry is validated and frozen at construction and
is never mutated afterwards, so concurrent readers need no locking.
"""

import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterator, List, Mapping, Optional, Tuple

import yaml

from src.utils.logging import get_logger
from src.utils.rbac.catalogue import is_catalogued
from src.utils.rbac.departments import DEFAULT_DEPARTMENTS, DepartmentRegistry
from src.utils.rbac.errors import RBACConfigError, UnknownRoleError
from src.utils.rbac.permission_enum import Capability
from src.utils.rbac.roles import DEFAULT_ROLES, RoleLevel

logger = get_logger(__name__)

# Global registry instance (singleton pattern)
_registry: Optional['RoleRegistry'] = None

UNKNOWN_ROLE_PERMISSIONS: FrozenSet[str] = frozenset({Capability.DEFAULT})


@dataclass(frozen=True)
class Role:
    """A named bundle of capabilities plus display metadata."""

    key: str
    display_name: str
    permissions: Tuple[str, ...]
    level: RoleLevel
    department: str = ""

    @property
    def permission_set(self) -> FrozenSet[str]:
        return frozenset(self.permissions)

    @property
    def is_wildcard(self) -> bool:
        return Capability.WILDCARD in self.permissions


class RoleRegistry:
    """
    Central registry of role definitions.

    Manages:
    - Role definitions (display name, department, capabilities, level)
    - The department label table used for display composition
    - Configuration validation, including the catalogue invariant

    Built once per process and read-only afterwards.
    """

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize the registry from configuration.

        Args:
            config: Dictionary with a 'roles' mapping (insertion-ordered) and
                    an optional 'departments' code -> label mapping
        """
        raw_roles = config.get('roles') or {}
        raw_departments = config.get('departments') or DEFAULT_DEPARTMENTS

        if not isinstance(raw_roles, Mapping) or not raw_roles:
            raise RBACConfigError("No roles defined in configuration")
        if not isinstance(raw_departments, Mapping):
            raise RBACConfigError("'departments' must be a mapping of code to label")

        self._departments = DepartmentRegistry(
            {str(code): str(label) for code, label in raw_departments.items()}
        )

        roles: Dict[str, Role] = {}
        for key, role_config in raw_roles.items():
            roles[str(key)] = self._build_role(str(key), role_config)
        self._roles: Mapping[str, Role] = MappingProxyType(roles)

        logger.info(f"RBAC Registry initialized: {len(self._roles)} roles, {len(self._departments)} departments")

    def _build_role(self, key: str, role_config: Any) -> Role:
        """
        Validate one role definition and freeze it.

        Raises:
            RBACConfigError: If the definition is incomplete or references
                             unknown levels, departments or capabilities
        """
        if not isinstance(role_config, Mapping):
            raise RBACConfigError(f"Role '{key}' must be a mapping")

        display_name = role_config.get('display_name', role_config.get('displayName'))
        if not display_name:
            raise RBACConfigError(f"Role '{key}' has no display name")

        raw_level = role_config.get('level')
        try:
            level = RoleLevel(raw_level)
        except ValueError:
            valid = ', '.join(lvl.value for lvl in RoleLevel)
            raise RBACConfigError(f"Role '{key}' has invalid level '{raw_level}' (expected one of: {valid})")

        department = role_config.get('department') or ""
        if not self._departments.is_known(department):
            raise RBACConfigError(f"Role '{key}' references undefined department '{department}'")

        raw_permissions = role_config.get('permissions', role_config.get('menuAccess'))
        if not raw_permissions or not isinstance(raw_permissions, (list, tuple)):
            raise RBACConfigError(f"Role '{key}' must grant at least one capability")

        # Set semantics, authoring order kept for display
        permissions = tuple(dict.fromkeys(str(p) for p in raw_permissions))

        uncatalogued = [p for p in permissions if p != Capability.WILDCARD and not is_catalogued(p)]
        if uncatalogued:
            raise RBACConfigError(
                f"Role '{key}' grants capabilities missing from the permission catalogue: {uncatalogued}"
            )

        return Role(
            key=key,
            display_name=str(display_name),
            permissions=permissions,
            level=level,
            department=department,
        )

    @property
    def departments(self) -> DepartmentRegistry:
        return self._departments

    def lookup_role(self, key: str) -> Optional[Role]:
        return self._roles.get(key)

    def get_role(self, key: str) -> Role:
        """
        Strict lookup for callers that must not degrade.

        Raises:
            UnknownRoleError: If the role is not defined
        """
        role = self._roles.get(key)
        if role is None:
            raise UnknownRoleError(key)
        return role

    def is_valid_role(self, key: str) -> bool:
        return key in self._roles

    def role_keys(self) -> List[str]:
        return list(self._roles)

    def display_name(self, key: str) -> str:
        """Role display name, or the key unchanged if the role is unknown."""
        role = self._roles.get(key)
        return role.display_name if role else key

    def department(self, key: str) -> str:
        role = self._roles.get(key)
        return role.department if role else ""

    def permission_set(self, key: str) -> FrozenSet[str]:
        """
        Get the capabilities granted to a role.

        Unknown roles get least privilege ({'dashboard'}), not zero and not
        full privilege. The drift is logged so it can be followed up.

        Args:
            key: Role key

        Returns:
            Frozen set of capability strings
        """
        role = self._roles.get(key)
        if role is None:
            logger.warning(f"Unknown role '{key}' resolved to default permissions {sorted(UNKNOWN_ROLE_PERMISSIONS)}")
            return UNKNOWN_ROLE_PERMISSIONS
        return role.permission_set

    def ordered_permissions(self, key: str) -> List[str]:
        role = self._roles.get(key)
        if role is None:
            return list(self.permission_set(key))
        return list(role.permissions)

    def has_capability(self, key: str, capability: str) -> bool:
        perms = self.permission_set(key)
        return Capability.WILDCARD in perms or capability in perms

    def get_roles_with_capability(self, capability: str) -> List[str]:
        """
        Get all roles that grant a specific capability.

        Useful for error messages ("You need role X or Y to do this").
        """
        return [
            key for key, role in self._roles.items()
            if role.is_wildcard or capability in role.permission_set
        ]

    def list_all_roles(self) -> List[Dict[str, str]]:
        """All roles for administrative selection UIs, in registry order."""
        return [
            {
                'key': role.key,
                'displayName': role.display_name,
                'department': role.department,
                'departmentLabel': self._departments.label(role.department),
                'level': role.level.value,
            }
            for role in self._roles.values()
        ]

    def list_roles_by_department(self, code: str) -> List[Dict[str, str]]:
        """Roles whose department equals code exactly ('' matches only '')."""
        return [
            {
                'key': role.key,
                'displayName': role.display_name,
                'level': role.level.value,
            }
            for role in self._roles.values()
            if role.department == code
        ]

    def role_with_department(self, key: str, user_department: str = "") -> str:
        """
        Compose "<Role> - <Department>" for display.

        Args:
            key: Role key
            user_department: The user's department code (not the role's)

        Returns:
            The raw key if the role is unknown, the display name alone if no
            department is given, otherwise "Display Name - Department Label"
        """
        role = self._roles.get(key)
        if role is None:
            return key
        if not user_department:
            return role.display_name
        return f"{role.display_name} - {self._departments.label(user_department)}"

    def __contains__(self, key: object) -> bool:
        return key in self._roles

    def __iter__(self) -> Iterator[Role]:
        return iter(self._roles.values())

    def __len__(self) -> int:
        return len(self._roles)


def default_rbac_config() -> Dict[str, Any]:
    """The built-in role and department tables as a config dictionary."""
    return {
        'roles': DEFAULT_ROLES,
        'departments': dict(DEFAULT_DEPARTMENTS),
    }


def load_rbac_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load role configuration from a roles YAML file or the built-in tables.

    Priority order:
    1. Explicit config_path if provided
    2. RBAC_ROLES_CONFIG environment variable
    3. 'roles_file' from the service config (configs/access.yaml)
    4. Built-in tables from roles.py / departments.py

    Args:
        config_path: Optional path to a roles YAML file

    Returns:
        Configuration dictionary

    Raises:
        RBACConfigError: If a configured file is missing or malformed
    """
    path = config_path or os.environ.get('RBAC_ROLES_CONFIG')

    if not path:
        try:
            from src.utils.config_access import load_access_config
            path = load_access_config().get('roles_file')
        except RBACConfigError:
            raise
        except Exception as e:
            logger.debug(f"Could not read roles_file from service config: {e}")

    if not path:
        logger.debug("No roles file configured, using built-in role table")
        return default_rbac_config()

    if not os.path.isfile(path):
        raise RBACConfigError(f"Roles configuration file not found: {path}")

    logger.info(f"Loading RBAC configuration from: {path}")
    try:
        with open(path, 'r') as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise RBACConfigError(f"Could not parse roles configuration {path}: {e}")

    if not isinstance(config, dict):
        raise RBACConfigError(f"Roles configuration {path} must be a mapping")

    if 'departments' not in config:
        config['departments'] = dict(DEFAULT_DEPARTMENTS)
    return config


def get_registry(config_path: Optional[str] = None, force_reload: bool = False) -> RoleRegistry:
    """
    Get the global role registry instance (singleton).

    Args:
        config_path: Optional path to a roles YAML file
        force_reload: If True, rebuild the registry even if already loaded

    Returns:
        RoleRegistry instance
    """
    global _registry

    if _registry is None or force_reload:
        _registry = RoleRegistry(load_rbac_config(config_path))

    return _registry


def reset_registry() -> None:
    """
    Reset the global registry (for testing purposes).
    """
    global _registry
    _registry = None
