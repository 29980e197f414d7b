"""
SQL identifier utilities for provisioning statements.

Postgres does not accept bind parameters for identifiers or for the password
in CREATE/ALTER ROLE, so role names, database names and passwords end up
interpolated into raw statement text. Project names are therefore restricted
to a small alphabet before any statement is built, and everything that is
interpolated is additionally quoted.
"""

import re

from provisioner.app.services.provisioning.base import InvalidProjectName

# "user-" + name and "db-" + name must fit Postgres' 63-byte identifier limit,
# "<name>-postgres" must fit the 63-character RDS instance identifier limit.
MAX_PROJECT_NAME_LENGTH = 54

PROJECT_NAME_PATTERN = re.compile(r"[a-z0-9](?:[a-z0-9-]*[a-z0-9])?")


def is_valid_project_name(name: str) -> bool:
    """Check if a project name is safe to derive identifiers from.

    Args:
        name: Candidate project name.

    Returns:
        True if the name only uses lowercase letters, digits and inner
        hyphens and is at most MAX_PROJECT_NAME_LENGTH characters long.
    """
    if not isinstance(name, str):
        return False
    if not 0 < len(name) <= MAX_PROJECT_NAME_LENGTH:
        return False
    return PROJECT_NAME_PATTERN.fullmatch(name) is not None


def sanitize_project_name(name: str) -> str:
    """Validate a project name before it is used in any identifier position.

    Args:
        name: Project name taken from the request.

    Returns:
        The validated project name, unchanged.

    Raises:
        InvalidProjectName: If the name contains anything outside the
            accepted alphabet (quotes, separators, whitespace, control or
            non-ASCII characters) or has an unusable length.
    """
    if not is_valid_project_name(name):
        raise InvalidProjectName(
            f"Invalid project name {name!r}: must be 1-{MAX_PROJECT_NAME_LENGTH} "
            "lowercase letters, digits or hyphens, starting and ending with a "
            "letter or digit"
        )
    return name


def quote_identifier(ident: str) -> str:
    """Quote a Postgres identifier safely.

    Example:
        >>> quote_identifier("user-my-app")
        '"user-my-app"'
        >>> quote_identifier('weird"name')
        '"weird""name"'
    """
    escaped = ident.replace('"', '""')
    return f'"{escaped}"'


def quote_literal(value: str) -> str:
    """Quote a Postgres string literal safely.

    Example:
        >>> quote_literal("it's")
        "'it''s'"
    """
    escaped = value.replace("'", "''")
    return f"'{escaped}'"


__all__ = [
    "MAX_PROJECT_NAME_LENGTH",
    "PROJECT_NAME_PATTERN",
    "is_valid_project_name",
    "quote_identifier",
    "quote_literal",
    "sanitize_project_name",
]
