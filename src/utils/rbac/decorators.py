"""
RBAC Decorators - authorization gate for Flask endpoints

The gate has two independent checks:
- a role gate (require_role) for administrative endpoints, which looks only
  at the user's role key
- a capability gate (require_capability) for features, which looks only at
  the effective permission set

Neither is inferred from the other: an admin whose custom permissions drop
a capability fails the capability gate, and a user granted a capability
through custom permissions still fails a role gate.

Every request is evaluated from the (token, stored user record) pair; no
decision is remembered across requests.
"""

from functools import wraps
from typing import Callable, Iterable, Optional, Union

from flask import current_app, g, request

from src.utils.logging import get_logger
from src.utils.rbac.errors import AuthenticationError, AuthorizationError, RBACConfigError
from src.utils.rbac.jwt_parser import decode_session_token, extract_bearer_token
from src.utils.rbac.permissions import has_capability
from src.utils.rbac.registry import RoleRegistry, get_registry
from src.utils.rbac.users import User, UserDirectory

logger = get_logger(__name__)

GATE_EXTENSION_KEY = "access_gate"


def require_authenticated(token: Optional[str], directory: UserDirectory, secret: str) -> User:
    """
    Resolve a session token to the stored user record.

    Args:
        token: Encoded session token (None if the request carried none)
        directory: User directory to load the record from
        secret: Token signing secret

    Returns:
        The current User record

    Raises:
        AuthenticationError: If the token is missing, malformed, expired,
                             signature-invalid, or its user no longer exists
    """
    claims = decode_session_token(token, secret)
    user = directory.get_user(str(claims["id"]))
    if user is None:
        logger.info(f"Session token references unknown user '{claims['id']}'")
        raise AuthenticationError("User not found")
    return user


def require_role(user: User, allowed_roles: Union[str, Iterable[str]]) -> None:
    """
    Role gate: admit only if user.role is one of allowed_roles.

    A single role key may be passed as a plain string.

    Raises:
        AuthorizationError: Otherwise
    """
    if isinstance(allowed_roles, str):
        allowed_roles = [allowed_roles]
    allowed = set(allowed_roles)
    if user.role not in allowed:
        logger.warning(f"{user.id} | role '{user.role}' | DENIED | requires role in {sorted(allowed)}")
        raise AuthorizationError(
            "You do not have permission to perform this action",
            requirement=f"role:{'|'.join(sorted(allowed))}",
        )


def require_capability(user: User, capability: str, registry: Optional[RoleRegistry] = None) -> None:
    """
    Capability gate: admit only if the effective permission set grants it.

    Raises:
        AuthorizationError: Otherwise
    """
    if not has_capability(user, capability, registry):
        logger.warning(f"{user.id} | capability '{capability}' | DENIED | role '{user.role}'")
        raise AuthorizationError(
            f"You do not have access to '{capability}'",
            requirement=f"capability:{capability}",
        )


class AccessGate:
    """Request-time collaborators the Flask decorators need."""

    def __init__(self, directory: UserDirectory, secret: str, registry: Optional[RoleRegistry] = None):
        if not secret:
            raise RBACConfigError("JWT_SECRET is not configured")
        self.directory = directory
        self.secret = secret
        self.registry = registry if registry is not None else get_registry()

    def init_app(self, app) -> None:
        app.extensions[GATE_EXTENSION_KEY] = self

    def authenticate(self, authorization_header: Optional[str]) -> User:
        return require_authenticated(extract_bearer_token(authorization_header), self.directory, self.secret)


def get_gate() -> AccessGate:
    gate = current_app.extensions.get(GATE_EXTENSION_KEY)
    if gate is None:
        raise RBACConfigError("AccessGate is not registered on this Flask app")
    return gate


def get_current_user() -> Optional[User]:
    """User admitted for the current request, or None."""
    return g.get("current_user")


def _admit() -> User:
    user = get_gate().authenticate(request.headers.get("Authorization"))
    g.current_user = user
    return user


def authenticated(f: Callable) -> Callable:
    """
    Decorator that requires a valid session token.

    Does NOT check roles or capabilities. The admitted user is available
    through get_current_user() for the rest of the request.

    Usage:
        @authenticated
        def me():
            ...
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        _admit()
        return f(*args, **kwargs)

    return decorated_function


def roles_required(*roles: str) -> Callable:
    """
    Decorator that requires the user's role to be one of roles.

    Usage:
        @roles_required('admin')
        def list_employees():
            ...
    """
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = _admit()
            require_role(user, roles)
            return f(*args, **kwargs)

        return decorated_function

    return decorator


def capability_required(capability: str) -> Callable:
    """
    Decorator that requires a capability in the effective permission set.

    Usage:
        @capability_required('expenses_review')
        def review_queue():
            ...
    """
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = _admit()
            require_capability(user, capability, get_gate().registry)
            return f(*args, **kwargs)

        return decorated_function

    return decorator
