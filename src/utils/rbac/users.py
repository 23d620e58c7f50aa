"""
User records as seen by the access core, plus the directory interface.

The directory owns user records; the core only reads them. ``reports_to``
is a lookup key into the directory and may form cycles, so every walk over
it keeps a visited set.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from threading import Lock
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import yaml

from src.utils.logging import get_logger
from src.utils.rbac.roles import DEFAULT_ROLE

logger = get_logger(__name__)


@dataclass(frozen=True)
class User:
    id: str
    email: str = ""
    name: str = ""
    role: str = DEFAULT_ROLE
    department: str = ""
    custom_permissions: Tuple[str, ...] = field(default_factory=tuple)
    reports_to: Optional[str] = None
    first_name: str = ""
    last_name: str = ""
    employee_id: str = ""
    designation: str = ""

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "User":
        """
        Build a User from a directory document.

        Accepts camelCase keys (customPermissions, reportsTo, employeeId,
        firstName, lastName, _id) as stored by the directory, or their
        snake_case equivalents.
        """
        def pick(*keys, default=None):
            for key in keys:
                if key in record and record[key] is not None:
                    return record[key]
            return default

        user_id = pick("id", "_id")
        if user_id is None:
            raise ValueError("User record has no id")

        custom_permissions = pick("custom_permissions", "customPermissions", default=())
        if not isinstance(custom_permissions, (list, tuple)):
            raise ValueError(f"User '{user_id}' has customPermissions that is not a list: {custom_permissions!r}")

        reports_to = pick("reports_to", "reportsTo")
        return cls(
            id=str(user_id),
            email=pick("email", default=""),
            name=pick("name", default=""),
            role=pick("role", default=DEFAULT_ROLE),
            department=pick("department", default=""),
            custom_permissions=tuple(custom_permissions),
            reports_to=str(reports_to) if reports_to else None,
            first_name=pick("first_name", "firstName", default=""),
            last_name=pick("last_name", "lastName", default=""),
            employee_id=pick("employee_id", "employeeId", default=""),
            designation=pick("designation", default=""),
        )

    @property
    def display_name(self) -> str:
        full_name = f"{self.first_name} {self.last_name}".strip()
        return self.name or full_name or self.email

    def dropdown_entry(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "name": self.display_name,
            "email": self.email,
            "designation": self.designation,
            "role": self.role,
            "employeeId": self.employee_id,
        }

    def to_public_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.display_name,
            "email": self.email,
            "role": self.role,
            "department": self.department,
            "employeeId": self.employee_id,
            "designation": self.designation,
            "reportsTo": self.reports_to,
            "customPermissions": list(self.custom_permissions),
        }

    def with_access(self, **changes) -> "User":
        """Copy with updated role/department/custom_permissions."""
        if "custom_permissions" in changes:
            changes["custom_permissions"] = tuple(changes["custom_permissions"])
        return replace(self, **changes)


class UserDirectory(ABC):
    """Durable store of user records. Implementations own their locking."""

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    def list_users(self) -> List[User]:
        ...

    @abstractmethod
    def save_user(self, user: User) -> User:
        ...


class InMemoryUserDirectory(UserDirectory):
    """Dict-backed directory for development servers and tests."""

    def __init__(self, users: Iterable[User] = ()):
        self._lock = Lock()
        self._users: Dict[str, User] = {}
        for user in users:
            self._users[user.id] = user

    def get_user(self, user_id: str) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def list_users(self) -> List[User]:
        with self._lock:
            return list(self._users.values())

    def save_user(self, user: User) -> User:
        with self._lock:
            self._users[user.id] = user
        return user


def load_users_file(path: str) -> InMemoryUserDirectory:
    """
    Seed an in-memory directory from a YAML file.

    The file holds either a list of user records or a mapping with a
    'users' list. Records use the same keys User.from_record accepts.
    """
    with open(path, "r") as f:
        data = yaml.safe_load(f) or []

    records = data.get("users", []) if isinstance(data, dict) else data
    if not isinstance(records, list):
        raise ValueError(f"Users file {path} must contain a list of user records")

    users = [User.from_record(record) for record in records]
    logger.info(f"Loaded {len(users)} users from {path}")
    return InMemoryUserDirectory(users)


def direct_reports(directory: UserDirectory, manager_id: str) -> List[User]:
    """
    Users whose reports_to is manager_id, sorted by display name.

    Ordering is case-insensitive on display_name, not the raw name field,
    so users stored with only first/last names sort by those. A user whose
    reports_to is their own id is not listed as their own team member.
    """
    members = [u for u in directory.list_users() if u.reports_to == manager_id and u.id != manager_id]
    return sorted(members, key=lambda u: u.display_name.lower())


def reporting_chain(directory: UserDirectory, user: User) -> List[User]:
    """
    Walk reports_to upwards from user.

    Stops at a missing manager or the first id already seen, so cyclic
    reporting data terminates instead of looping.

    Returns:
        Managers from the immediate one upwards, excluding user itself
    """
    chain: List[User] = []
    seen = {user.id}
    current = user

    while current.reports_to:
        if current.reports_to in seen:
            logger.warning(f"Reporting cycle detected at user '{current.reports_to}'")
            break
        manager = directory.get_user(current.reports_to)
        if manager is None:
            break
        chain.append(manager)
        seen.add(manager.id)
        current = manager

    return chain
