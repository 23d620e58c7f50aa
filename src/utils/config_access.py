"""
Config access helpers for the access service.

Reads the service YAML (configs/access.yaml by default), fills in defaults
and applies environment overrides. Secrets are never read from the YAML;
use read_secret for those.
"""

import os
from typing import Any, Dict, Optional

import yaml

from src.utils.logging import get_logger
from src.utils.rbac.errors import RBACConfigError
from src.utils.rbac.roles import ADMIN_ROLES

logger = get_logger(__name__)

DEFAULT_ACCESS_CONFIG: Dict[str, Any] = {
    "roles_file": None,
    "users_file": None,
    "jwt_expire": "7d",
    "host": "127.0.0.1",
    "port": 5000,
    "admin_roles": list(ADMIN_ROLES),
    "log_level": "INFO",
}

# env var -> config key
ENV_OVERRIDES = {
    "RBAC_ROLES_CONFIG": "roles_file",
    "ACCESS_USERS_FILE": "users_file",
    "JWT_EXPIRE": "jwt_expire",
    "ACCESS_API_HOST": "host",
    "ACCESS_API_PORT": "port",
    "LOG_LEVEL": "log_level",
}


def _find_config_file(config_path: Optional[str]) -> Optional[str]:
    search_paths = [
        config_path,
        os.environ.get("ACCESS_CONFIG"),
        os.path.join(os.getcwd(), "configs", "access.yaml"),
    ]
    for path in search_paths:
        if path and os.path.isfile(path):
            return path
    if config_path:
        raise RBACConfigError(f"Access configuration file not found: {config_path}")
    return None


def load_access_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the service configuration.

    Args:
        config_path: Optional explicit path to access.yaml

    Returns:
        Configuration dictionary with every key of DEFAULT_ACCESS_CONFIG set

    Raises:
        RBACConfigError: If an explicit file is missing or any file is malformed
    """
    config = dict(DEFAULT_ACCESS_CONFIG)

    config_file = _find_config_file(config_path)
    if config_file:
        logger.info(f"Loading access configuration from: {config_file}")
        try:
            with open(config_file, "r") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise RBACConfigError(f"Could not parse access configuration {config_file}: {e}")
        if not isinstance(loaded, dict):
            raise RBACConfigError(f"Access configuration {config_file} must be a mapping")
        config.update(loaded)

    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            config[key] = value

    try:
        config["port"] = int(config["port"])
    except (TypeError, ValueError):
        raise RBACConfigError(f"Invalid port in access configuration: {config['port']!r}")

    if isinstance(config.get("admin_roles"), str):
        config["admin_roles"] = [config["admin_roles"]]

    return config
