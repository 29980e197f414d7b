"""
Provisioning services for project databases.

This package provides the two resource strategies and the dispatcher in
front of them:

- Shared: a role and database on the multi-tenant Postgres cluster
- Managed: a dedicated AWS RDS instance per project and engine

Only the error taxonomy is imported eagerly; the provisioners are imported
from their modules so that utility modules can depend on the errors without
pulling in the AWS and asyncpg stacks.
"""

from .base import (
    CreateDatabaseFailed,
    CreateRoleFailed,
    DuplicateResourceConflict,
    InstanceFailed,
    InvalidProjectName,
    MalformedProviderResponse,
    ProviderNotFound,
    ProvisioningError,
    ProvisioningTimedOut,
    UnexpectedProviderError,
    UpdateRoleFailed,
)

__all__ = [
    'CreateDatabaseFailed',
    'CreateRoleFailed',
    'DuplicateResourceConflict',
    'InstanceFailed',
    'InvalidProjectName',
    'MalformedProviderResponse',
    'ProviderNotFound',
    'ProvisioningError',
    'ProvisioningTimedOut',
    'UnexpectedProviderError',
    'UpdateRoleFailed',
]
