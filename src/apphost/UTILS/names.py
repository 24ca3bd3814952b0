"""
Validation of resource and endpoint names.
"""
import re

from ..exceptions import DistributedApplicationError

MAX_NAME_LENGTH = 64

_NAME_PATTERN = re.compile(r'^[A-Za-z][A-Za-z0-9-]*$')


def validate_name(name: str, kind: str = "Resource") -> str:
    """
    Validates a model name.

    A valid name starts with an ASCII letter, contains only ASCII letters,
    digits and hyphens, has no consecutive hyphens, does not end with a
    hyphen and is at most 64 characters long.

    :param name: The name to check.
    :param kind: Used in error messages ("Resource", "Endpoint", ...).
    :return: The name.
    :raises DistributedApplicationError: If the name is invalid.
    """
    if not name:
        raise DistributedApplicationError(f"{kind} name cannot be empty.")
    if len(name) > MAX_NAME_LENGTH:
        raise DistributedApplicationError(
            f"{kind} name '{name}' is invalid. Name must be between 1 and {MAX_NAME_LENGTH} characters long."
        )
    if not _NAME_PATTERN.match(name):
        raise DistributedApplicationError(
            f"{kind} name '{name}' is invalid. Name must start with an ASCII letter "
            f"and contain only ASCII letters, digits, and hyphens."
        )
    if '--' in name:
        raise DistributedApplicationError(
            f"{kind} name '{name}' is invalid. Name cannot contain consecutive hyphens."
        )
    if name.endswith('-'):
        raise DistributedApplicationError(
            f"{kind} name '{name}' is invalid. Name cannot end with a hyphen."
        )
    return name
