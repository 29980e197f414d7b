"""
Credential generation for provisioned databases.

Passwords handed out by the provisioner only need to be unique per request
and unguessable in practice; they are not long-lived secrets. A short
alphanumeric password is used so it can be embedded in connection strings
and SQL literals without escaping.
"""

import secrets
import string

PASSWORD_LENGTH = 12
PASSWORD_ALPHABET = string.ascii_letters + string.digits


def generate_password(length: int = PASSWORD_LENGTH) -> str:
    """
    Generate a random alphanumeric password.

    Args:
        length: Password length in characters (default: 12)

    Returns:
        Random password drawn from ASCII letters and digits

    Raises:
        ValueError: If length is below 8 characters
    """
    if length < 8:
        raise ValueError("Password length must be at least 8 characters")

    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))
