import logging

import pytest

from src.utils.logging import ROOT_LOGGER_NAME
from src.utils.rbac.registry import RoleRegistry, default_rbac_config, reset_registry
from src.utils.rbac.users import InMemoryUserDirectory, User

# Long enough for HS256 without PyJWT key-length warnings
TEST_SECRET = "test-secret-for-tikidan-access-unit-tests"

_CONFIG_ENV_VARS = (
    "ACCESS_CONFIG",
    "RBAC_ROLES_CONFIG",
    "ACCESS_USERS_FILE",
    "JWT_EXPIRE",
    "JWT_SECRET",
    "JWT_SECRET_FILE",
    "ACCESS_API_HOST",
    "ACCESS_API_PORT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep the host environment and working directory out of every test."""
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_registry()
    yield
    reset_registry()

    # Drop handlers bound to this test's captured stderr
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        if getattr(handler, "_tikidan_handler", False):
            root.removeHandler(handler)
    root.setLevel(logging.NOTSET)


@pytest.fixture
def registry():
    return RoleRegistry(default_rbac_config())


@pytest.fixture
def users():
    return [
        User(id="u-admin", email="admin@tikidan.local", name="Asha Admin", role="admin"),
        User(id="u-gm", email="gm@tikidan.local", name="Ravi Menon", role="manager",
             department="sales", reports_to="u-admin"),
        User(id="u-exec", email="exec@tikidan.local", first_name="Neha", last_name="Kapoor",
             role="accounts_executive", department="accounts", reports_to="u-gm",
             designation="Accounts Executive", employee_id="EMP-0042"),
        User(id="u-analyst", email="analyst@tikidan.local", name="Imran Shah", role="user",
             custom_permissions=("dashboard", "billing"), reports_to="u-gm"),
    ]


@pytest.fixture
def directory(users):
    return InMemoryUserDirectory(users)


@pytest.fixture
def secret():
    return TEST_SECRET
