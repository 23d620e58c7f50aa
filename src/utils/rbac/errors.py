"""
RBAC error taxonomy.

Authentication and authorization failures must stay distinguishable to the
caller (401 vs 403) so clients can choose between re-login and "not
permitted". Every error carries the HTTP status the API layer renders.
"""

from typing import Any, Dict, Optional


class RBACError(Exception):
    """Base class for all access-control errors."""

    status_code = 500
    error = "rbac_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": self.error,
            "message": self.message,
        }


class AuthenticationError(RBACError):
    """Missing, malformed, expired or signature-invalid session credential."""

    status_code = 401
    error = "unauthenticated"


class AuthorizationError(RBACError):
    """Valid identity, insufficient role or capability."""

    status_code = 403
    error = "forbidden"

    def __init__(self, message: str, requirement: Optional[str] = None):
        super().__init__(message)
        self.requirement = requirement


class ConfigurationError(RBACError):
    """Registry or data drift detected at runtime."""

    error = "configuration_error"


class UnknownRoleError(ConfigurationError):
    """A role key is not defined in the role registry."""

    error = "unknown_role"

    def __init__(self, role: str):
        super().__init__(f"Role '{role}' is not defined in the role registry")
        self.role = role


class RBACConfigError(ConfigurationError):
    """Raised when RBAC configuration is invalid."""

    error = "invalid_configuration"


class ValidationError(RBACError):
    """Malformed input to an administrative mutation."""

    status_code = 400
    error = "validation_error"

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["field"] = self.field
        return payload


class NotFoundError(RBACError):
    status_code = 404
    error = "not_found"
