from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from src.utils.config_access import load_access_config
from src.utils.env import read_secret
from src.utils.logging import get_logger
from src.utils.rbac.catalogue import get_available_permissions
from src.utils.rbac.decorators import (
    AccessGate,
    authenticated,
    get_current_user,
    roles_required,
)
from src.utils.rbac.errors import AuthenticationError, NotFoundError, RBACConfigError, RBACError
from src.utils.rbac.permissions import (
    get_menu_context,
    has_capability,
    ordered_permissions,
    permissions_payload,
)
from src.utils.rbac.registry import RoleRegistry, get_registry
from src.utils.rbac.roles import ADMIN_ROLES
from src.utils.rbac.users import (
    InMemoryUserDirectory,
    UserDirectory,
    direct_reports,
    load_users_file,
)
from src.utils.rbac.validation import validate_access_update

logger = get_logger(__name__)


class AccessAPIWrapper(object):

    def __init__(
        self,
        app: Flask,
        directory: UserDirectory,
        secret: str,
        registry: Optional[RoleRegistry] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        logger.info("Entering AccessAPIWrapper")
        self.app = app
        self.config = config or load_access_config()
        self.registry = registry if registry is not None else get_registry(self.config.get("roles_file"))
        self.directory = directory
        admin_roles = self.config.get("admin_roles") or ADMIN_ROLES
        if isinstance(admin_roles, str):
            admin_roles = [admin_roles]
        self.admin_roles = tuple(admin_roles)
        unknown = [role for role in self.admin_roles if not self.registry.is_valid_role(role)]
        if unknown:
            raise RBACConfigError(f"admin_roles references roles missing from the role registry: {unknown}")

        self.gate = AccessGate(directory, secret, self.registry)
        self.gate.init_app(self.app)

        CORS(self.app)
        self.app.register_error_handler(RBACError, self.handle_rbac_error)

        # Public endpoints
        self.add_endpoint('/api/health', 'health', self.health, methods=["GET"])

        # Session endpoints (any authenticated user)
        logger.info("Adding session permission API endpoints")
        self.add_endpoint('/api/auth/me', 'me', authenticated(self.me), methods=["GET"])
        self.add_endpoint('/api/auth/user-permissions', 'user_permissions', authenticated(self.user_permissions), methods=["GET"])
        self.add_endpoint('/api/auth/has-capability/<capability>', 'has_capability', authenticated(self.capability_check), methods=["GET"])
        self.add_endpoint('/api/auth/team-members', 'team_members', authenticated(self.team_members), methods=["GET"])

        # Role/department listings for selection UIs
        logger.info("Adding role listing API endpoints")
        self.add_endpoint('/api/auth/roles', 'list_roles', authenticated(self.list_roles), methods=["GET"])
        self.add_endpoint('/api/auth/roles/by-department', 'list_roles_by_department', authenticated(self.list_roles_by_department), methods=["GET"])
        self.add_endpoint('/api/auth/departments', 'list_departments', authenticated(self.list_departments), methods=["GET"])

        # Admin-only endpoints
        logger.info(f"Adding admin API endpoints (roles: {list(self.admin_roles)})")
        admin_only = roles_required(*self.admin_roles)
        self.add_endpoint('/api/auth/available-permissions', 'available_permissions', admin_only(self.available_permissions), methods=["GET"])
        self.add_endpoint('/api/auth/employees/<user_id>/access', 'update_employee_access', admin_only(self.update_employee_access), methods=["PUT"])

    def handle_rbac_error(self, exc: RBACError):
        response = jsonify(exc.to_dict())
        response.status_code = exc.status_code
        if isinstance(exc, AuthenticationError):
            response.headers['WWW-Authenticate'] = 'Bearer'
        return response

    def health(self):
        return jsonify({"status": "OK"}), 200

    def me(self):
        """Current user with effective permissions"""
        user = get_current_user()
        body = user.to_public_dict()
        body.update({
            'permissions': ordered_permissions(user, self.registry),
            'displayName': self.registry.display_name(user.role),
            'roleWithDepartment': self.registry.role_with_department(user.role, user.department),
            'menu': get_menu_context(user, self.registry),
        })
        return jsonify({'success': True, 'user': body})

    def user_permissions(self):
        user = get_current_user()
        return jsonify({'success': True, **permissions_payload(user, self.registry)})

    def capability_check(self, capability):
        user = get_current_user()
        return jsonify({
            'success': True,
            'capability': capability,
            'granted': has_capability(user, capability, self.registry),
        })

    def team_members(self):
        """Employees who report to the current user"""
        user = get_current_user()
        members = [member.dropdown_entry() for member in direct_reports(self.directory, user.id)]
        return jsonify({'success': True, 'count': len(members), 'teamMembers': members})

    def list_roles(self):
        return jsonify({'success': True, 'roles': self.registry.list_all_roles()})

    def list_roles_by_department(self):
        department = request.args.get('department', '')
        return jsonify({
            'success': True,
            'department': department,
            'roles': self.registry.list_roles_by_department(department),
        })

    def list_departments(self):
        return jsonify({'success': True, 'departments': self.registry.departments.list_departments()})

    def available_permissions(self):
        return jsonify({'success': True, 'permissions': get_available_permissions()})

    def update_employee_access(self, user_id):
        """
        Assign role, department and custom permissions to an employee.

        The whole payload is validated before the record is written.
        """
        target = self.directory.get_user(user_id)
        if target is None:
            raise NotFoundError("Employee not found")

        changes = validate_access_update(request.get_json(silent=True), self.registry)
        updated = self.directory.save_user(target.with_access(**changes))

        admin = get_current_user()
        logger.info(f"{admin.id} updated access for {updated.id}: {sorted(changes)}")

        return jsonify({
            'success': True,
            'message': 'Employee access updated successfully',
            'user': updated.to_public_dict(),
            'permissions': ordered_permissions(updated, self.registry),
        })

    def add_endpoint(self, endpoint=None, endpoint_name=None, handler=None, methods=['GET'], *args, **kwargs):
        self.app.add_url_rule(endpoint, endpoint_name, handler, methods=methods, *args, **kwargs)

    def run(self, **kwargs):
        self.app.run(**kwargs)


def create_app(
    directory: Optional[UserDirectory] = None,
    secret: Optional[str] = None,
    registry: Optional[RoleRegistry] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Flask:
    """
    Build the access API Flask app.

    Args:
        directory: User directory; defaults to one seeded from 'users_file'
                   in the service config, or an empty in-memory directory
        secret: Token signing secret; defaults to the JWT_SECRET secret
        registry: Role registry; defaults to the global one
        config: Service config; defaults to load_access_config()

    Returns:
        Configured Flask app
    """
    config = config or load_access_config()

    seeded = False
    if directory is None:
        users_file = config.get("users_file")
        if users_file:
            directory = load_users_file(users_file)
            seeded = True
        else:
            logger.warning("No users_file configured, starting with an empty user directory")
            directory = InMemoryUserDirectory()

    secret = secret or read_secret("JWT_SECRET")

    app = Flask(__name__)
    wrapper = AccessAPIWrapper(app, directory, secret, registry=registry, config=config)

    if seeded:
        for user in directory.list_users():
            if not wrapper.registry.is_valid_role(user.role):
                logger.warning(f"Seeded user '{user.id}' has unregistered role '{user.role}' and will only get default permissions")
    return app
