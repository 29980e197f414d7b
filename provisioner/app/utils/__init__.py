"""Utility modules for the provisioner application."""

from provisioner.app.utils.async_utils import async_retry
from provisioner.app.utils.identifiers import (
    is_valid_project_name,
    quote_identifier,
    quote_literal,
    sanitize_project_name,
)
from provisioner.app.utils.security import generate_password

__all__ = [
    "async_retry",
    "generate_password",
    "is_valid_project_name",
    "quote_identifier",
    "quote_literal",
    "sanitize_project_name",
]
