"""
Provisioning error taxonomy.

Every failure a provisioner can report derives from ProvisioningError. The
class-level ``retryable`` flag tells the RPC boundary whether the caller
should simply try again, so the three user-visible categories ("your input is
invalid", "try again", "the provider failed") fall out of the type alone.
"""

from typing import Optional


class ProvisioningError(Exception):
    """
    Base exception for provisioner errors.

    Attributes:
        message: Error message
        project: Project name the request was for, if known
        resource_id: Role, database or instance identifier if applicable
        original_error: Original exception if wrapped
    """

    retryable = False

    def __init__(
        self,
        message: str,
        project: Optional[str] = None,
        resource_id: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        self.message = message
        self.project = project
        self.resource_id = resource_id
        self.original_error = original_error
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.project:
            parts.append(f"Project: {self.project}")
        if self.resource_id:
            parts.append(f"Resource: {self.resource_id}")
        return " | ".join(parts)


class InvalidProjectName(ProvisioningError):
    """Project name cannot be used to derive SQL or RDS identifiers."""


class CreateRoleFailed(ProvisioningError):
    """Creating the shared role failed on the SQL server."""

    retryable = True


class UpdateRoleFailed(ProvisioningError):
    """Rotating the shared role's password failed on the SQL server."""

    retryable = True


class CreateDatabaseFailed(ProvisioningError):
    """Creating the shared database failed on the SQL server."""

    retryable = True


class DuplicateResourceConflict(ProvisioningError):
    """A concurrent request created the same role or database first."""

    retryable = True


class ProviderNotFound(ProvisioningError):
    """
    The managed instance does not exist yet.

    Used internally to choose between resetting and creating an instance;
    never surfaced to callers.
    """


class UnexpectedProviderError(ProvisioningError):
    """The cloud API returned an error that is not part of the normal flow."""


class InstanceFailed(ProvisioningError):
    """The managed instance entered a terminal failure status."""


class ProvisioningTimedOut(ProvisioningError):
    """The managed instance did not reach the awaited status in time."""

    retryable = True


class MalformedProviderResponse(ProvisioningError):
    """A successful cloud API response lacked a field the flow depends on."""
