"""
Credentials package for the provisioner.

Provides connection string rendering for the credentials handed out by
provisioning calls.
"""

from provisioner.app.services.credentials.password import build_connection_string

__all__ = [
    "build_connection_string",
]
