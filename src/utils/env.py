"""
Secret lookup from the environment or mounted secret files.
"""

import os
from typing import Optional

from src.utils.logging import get_logger

logger = get_logger(__name__)


def read_secret(name: str, default: Optional[str] = None) -> Optional[str]:
    """
    Read a secret by name.

    ``NAME_FILE`` (a path to a mounted secret) wins over ``NAME``, so
    container deployments never need the value in the environment.

    Args:
        name: Secret name, e.g. 'JWT_SECRET'
        default: Returned when neither source is set

    Returns:
        The secret value with surrounding whitespace stripped, or default
    """
    file_path = os.environ.get(f"{name}_FILE")
    if file_path:
        try:
            with open(file_path, "r") as f:
                return f.read().strip()
        except OSError as e:
            logger.warning(f"Could not read secret file for {name}: {e}")

    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip()
