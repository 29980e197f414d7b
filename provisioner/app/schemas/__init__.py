"""Request and response schemas for the provisioner."""

from provisioner.app.schemas.database import (
    ManagedKind,
    ProvisionRequest,
    ProvisionResult,
    ResourceKind,
    SharedKind,
)

__all__ = [
    "ManagedKind",
    "ProvisionRequest",
    "ProvisionResult",
    "ResourceKind",
    "SharedKind",
]
