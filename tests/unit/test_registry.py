"""
Unit tests for the role and department registries.

Tests cover:
- Built-in role table invariants
- Unknown-role degradation
- Listing and display composition
- YAML loading and configuration validation
- Singleton behaviour of get_registry
"""
import logging

import pytest

from src.utils.rbac.catalogue import catalogue_values, get_available_permissions, get_label
from src.utils.rbac.departments import DEFAULT_DEPARTMENTS, DepartmentRegistry, department_label
from src.utils.rbac.errors import RBACConfigError, UnknownRoleError
from src.utils.rbac.registry import (
    RoleRegistry,
    default_rbac_config,
    get_registry,
    load_rbac_config,
    reset_registry,
)
from src.utils.rbac.roles import DEFAULT_ROLES, RoleLevel


# =============================================================================
# Built-in tables
# =============================================================================

class TestBuiltInRoles:
    """Tests for the built-in role table."""

    def test_every_role_has_non_empty_permissions(self, registry):
        for role in registry:
            assert role.permission_set, role.key

    def test_permission_set_is_deterministic(self, registry):
        for key in registry.role_keys():
            assert registry.permission_set(key) == registry.permission_set(key)

    def test_role_permissions_are_catalogued(self, registry):
        catalogue = catalogue_values()
        for role in registry:
            assert role.permission_set <= catalogue | {"*"}, role.key

    def test_registry_order_matches_table(self, registry):
        assert registry.role_keys() == list(DEFAULT_ROLES)
        assert registry.role_keys()[0] == "deputy_manager"
        assert registry.role_keys()[-2:] == ["admin", "user"]

    def test_admin_has_everything_but_meetings(self, registry):
        admin = registry.permission_set("admin")
        assert "meetings" not in admin
        assert admin == catalogue_values() - {"meetings"}

    def test_levels_are_parsed(self, registry):
        assert registry.get_role("admin").level is RoleLevel.SYSTEM
        assert registry.get_role("user").level is RoleLevel.BASIC
        assert registry.get_role("president").level is RoleLevel.EXECUTIVE

    def test_get_roles_with_capability(self, registry):
        roles = registry.get_roles_with_capability("expenses_settings")
        assert roles == ["accounts_executive", "admin"]


class TestUnknownRoles:
    """Tests for roles missing from the registry."""

    def test_unknown_role_gets_dashboard_only(self, registry):
        assert registry.permission_set("nonexistent_role") == {"dashboard"}

    def test_unknown_role_is_logged(self, registry, caplog):
        with caplog.at_level(logging.WARNING, logger="tikidan"):
            registry.permission_set("ghost")
        assert "Unknown role 'ghost'" in caplog.text

    def test_display_name_falls_back_to_key(self, registry):
        assert registry.display_name("nonexistent_role") == "nonexistent_role"

    def test_strict_lookup_raises(self, registry):
        with pytest.raises(UnknownRoleError) as exc:
            registry.get_role("ghost")
        assert exc.value.role == "ghost"

    def test_lookup_role_returns_none(self, registry):
        assert registry.lookup_role("ghost") is None
        assert not registry.is_valid_role("ghost")
        assert "ghost" not in registry

    def test_unknown_role_has_capability(self, registry):
        assert registry.has_capability("ghost", "dashboard")
        assert not registry.has_capability("ghost", "projects")


# =============================================================================
# Listings and display
# =============================================================================

class TestListings:
    """Tests for selection-UI listings."""

    def test_list_all_roles_shape(self, registry):
        roles = registry.list_all_roles()
        assert len(roles) == len(DEFAULT_ROLES)
        assert roles[0] == {
            "key": "deputy_manager",
            "displayName": "Deputy Manager",
            "department": "",
            "departmentLabel": "No Department",
            "level": "management",
        }

    def test_list_roles_by_empty_department_returns_all_in_order(self, registry):
        roles = registry.list_roles_by_department("")
        assert [r["key"] for r in roles] == list(DEFAULT_ROLES)

    def test_list_roles_by_department_matches_exactly(self):
        config = default_rbac_config()
        config["roles"] = {
            "sales_lead": {"display_name": "Sales Lead", "department": "sales",
                           "permissions": ["dashboard"], "level": "management"},
            "clerk": {"display_name": "Clerk", "permissions": ["dashboard"], "level": "basic"},
            "sales_rep": {"display_name": "Sales Rep", "department": "sales",
                          "permissions": ["dashboard"], "level": "staff"},
        }
        registry = RoleRegistry(config)

        assert [r["key"] for r in registry.list_roles_by_department("sales")] == ["sales_lead", "sales_rep"]
        assert [r["key"] for r in registry.list_roles_by_department("")] == ["clerk"]
        assert registry.list_roles_by_department("finance") == []

    def test_role_with_department(self, registry):
        assert registry.role_with_department("manager", "sales") == "Manager - Sales"
        assert registry.role_with_department("manager", "") == "Manager"
        assert registry.role_with_department("manager") == "Manager"

    def test_role_with_unknown_department_uses_raw_code(self, registry):
        assert registry.role_with_department("manager", "legal") == "Manager - legal"

    def test_role_with_department_for_unknown_role(self, registry):
        assert registry.role_with_department("ghost", "sales") == "ghost"


class TestDepartments:
    """Tests for the department registry."""

    def test_labels(self):
        departments = DepartmentRegistry()
        assert departments.label("hr") == "Human Resources"
        assert departments.label("") == "No Department"
        assert departments.label("legal") == "legal"

    def test_module_level_label(self):
        assert department_label("it") == "Information Technology"

    def test_no_department_always_present(self):
        departments = DepartmentRegistry({"sales": "Sales"})
        assert "" in departments
        assert len(departments) == 2

    def test_list_departments_order(self):
        listing = DepartmentRegistry().list_departments()
        assert listing[0] == {"code": "sales", "label": "Sales"}
        assert listing[-1] == {"code": "", "label": "No Department"}
        assert len(listing) == len(DEFAULT_DEPARTMENTS)


class TestCatalogue:
    """Tests for the assignable permission catalogue."""

    def test_catalogue_entries(self):
        entries = get_available_permissions()
        assert entries[0] == {"value": "dashboard", "label": "Dashboard"}
        assert {"value": "billing", "label": "Billing"} in entries

    def test_catalogue_values_are_unique(self):
        values = [entry["value"] for entry in get_available_permissions()]
        assert len(values) == len(set(values))

    def test_get_label(self):
        assert get_label("expenses_view") == "Expenses - View/Submit"
        assert get_label("unknown") is None


# =============================================================================
# Configuration
# =============================================================================

ROLES_YAML = """
roles:
  team_lead:
    display_name: Team Lead
    level: management
    department: operations
    permissions: [dashboard, team, team_leave]
  root:
    displayName: Root
    level: system
    menuAccess: ["*"]
"""


class TestConfigLoading:
    """Tests for load_rbac_config and registry validation."""

    def test_defaults_without_any_configuration(self):
        config = load_rbac_config()
        assert list(config["roles"]) == list(DEFAULT_ROLES)
        assert "" in config["departments"]

    def test_load_yaml_file(self, tmp_path):
        path = tmp_path / "roles.yaml"
        path.write_text(ROLES_YAML)

        registry = RoleRegistry(load_rbac_config(str(path)))

        assert registry.role_keys() == ["team_lead", "root"]
        assert registry.display_name("root") == "Root"
        assert registry.get_role("root").is_wildcard
        assert registry.department("team_lead") == "operations"
        assert registry.departments.label("operations") == "Operations"

    def test_env_var_selects_file(self, tmp_path, monkeypatch):
        path = tmp_path / "roles.yaml"
        path.write_text(ROLES_YAML)
        monkeypatch.setenv("RBAC_ROLES_CONFIG", str(path))

        assert list(load_rbac_config()["roles"]) == ["team_lead", "root"]

    def test_roles_file_from_service_config(self, tmp_path):
        roles_path = tmp_path / "roles.yaml"
        roles_path.write_text(ROLES_YAML)
        (tmp_path / "configs").mkdir()
        (tmp_path / "configs" / "access.yaml").write_text(f"roles_file: {roles_path}\n")

        assert list(load_rbac_config()["roles"]) == ["team_lead", "root"]

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(RBACConfigError, match="not found"):
            load_rbac_config(str(tmp_path / "missing.yaml"))

    def test_malformed_yaml_raises(self, tmp_path):
        path = tmp_path / "roles.yaml"
        path.write_text("roles: [unclosed")
        with pytest.raises(RBACConfigError, match="Could not parse"):
            load_rbac_config(str(path))

    @pytest.mark.parametrize("role_config, message", [
        ({"level": "basic", "permissions": ["dashboard"]}, "no display name"),
        ({"display_name": "X", "level": "godlike", "permissions": ["dashboard"]}, "invalid level"),
        ({"display_name": "X", "level": "basic", "permissions": []}, "at least one capability"),
        ({"display_name": "X", "level": "basic", "permissions": ["teleport"]}, "permission catalogue"),
        ({"display_name": "X", "level": "basic", "department": "legal", "permissions": ["dashboard"]},
         "undefined department"),
    ])
    def test_invalid_role_definitions(self, role_config, message):
        with pytest.raises(RBACConfigError, match=message):
            RoleRegistry({"roles": {"broken": role_config}})

    def test_empty_roles_rejected(self):
        with pytest.raises(RBACConfigError, match="No roles defined"):
            RoleRegistry({"roles": {}})

    def test_duplicate_permissions_collapse(self):
        registry = RoleRegistry({"roles": {
            "dup": {"display_name": "Dup", "level": "basic", "permissions": ["dashboard", "team", "dashboard"]},
        }})
        assert registry.ordered_permissions("dup") == ["dashboard", "team"]

    def test_registry_is_read_only(self, registry):
        with pytest.raises(TypeError):
            registry._roles["intruder"] = None


class TestRegistrySingleton:
    """Tests for the process-wide registry."""

    def test_singleton(self):
        assert get_registry() is get_registry()

    def test_force_reload(self):
        first = get_registry()
        assert get_registry(force_reload=True) is not first

    def test_reset(self):
        first = get_registry()
        reset_registry()
        assert get_registry() is not first
