"""gRPC Provisioner Servicer Implementation

Implements the Provisioner service: decodes ProvisionDatabase requests,
hands them to the ProvisioningService and translates provisioning errors into
gRPC status codes.
"""

import logging
from typing import Dict, Type

import grpc
from pydantic import ValidationError

from provisioner.app.grpc.converters import (
    PROVISION_DATABASE,
    SERVICE_NAME,
    MessageConverter,
)
from provisioner.app.services.provisioning.base import (
    CreateDatabaseFailed,
    CreateRoleFailed,
    DuplicateResourceConflict,
    InstanceFailed,
    InvalidProjectName,
    MalformedProviderResponse,
    ProvisioningError,
    ProvisioningTimedOut,
    UnexpectedProviderError,
    UpdateRoleFailed,
)
from provisioner.app.services.provisioning.service import ProvisioningService

logger = logging.getLogger(__name__)

# Invalid input, try again, or provider failed.
ERROR_STATUS_CODES: Dict[Type[ProvisioningError], grpc.StatusCode] = {
    InvalidProjectName: grpc.StatusCode.INVALID_ARGUMENT,
    DuplicateResourceConflict: grpc.StatusCode.ABORTED,
    CreateRoleFailed: grpc.StatusCode.UNAVAILABLE,
    UpdateRoleFailed: grpc.StatusCode.UNAVAILABLE,
    CreateDatabaseFailed: grpc.StatusCode.UNAVAILABLE,
    ProvisioningTimedOut: grpc.StatusCode.DEADLINE_EXCEEDED,
    UnexpectedProviderError: grpc.StatusCode.INTERNAL,
    InstanceFailed: grpc.StatusCode.INTERNAL,
    MalformedProviderResponse: grpc.StatusCode.INTERNAL,
}


def status_code_for(error: ProvisioningError) -> grpc.StatusCode:
    """Pick the gRPC status for a provisioning error, walking its class hierarchy."""
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return grpc.StatusCode.INTERNAL


class ProvisionerServicer:
    """gRPC servicer implementing the Provisioner interface."""

    SERVICE_NAME = SERVICE_NAME

    def __init__(self, service: ProvisioningService):
        """Initialize ProvisionerServicer.

        Args:
            service: ProvisioningService handling decoded requests
        """
        self.service = service
        self.converter = MessageConverter()

    async def ProvisionDatabase(self, request: bytes, context: grpc.aio.ServicerContext) -> bytes:
        """Provision a shared or managed database.

        Args:
            request: JSON-encoded ProvisionRequest
            context: gRPC context

        Returns:
            JSON-encoded ProvisionResult
        """
        try:
            provision_request = self.converter.request_from_bytes(request)
        except ValidationError as e:
            logger.warning(f"Rejected malformed provisioning request: {e}")
            await context.abort(
                grpc.StatusCode.INVALID_ARGUMENT,
                f"Invalid request: {e.error_count()} validation error(s)",
                trailing_metadata=(("retryable", "false"),),
            )

        try:
            result = await self.service.provision_database(provision_request)
        except ProvisioningError as e:
            await context.abort(
                status_code_for(e),
                e.message,
                trailing_metadata=(("retryable", "true" if e.retryable else "false"),),
            )
        except Exception as e:
            logger.error(f"Error provisioning database: {e}", exc_info=True)
            await context.abort(
                grpc.StatusCode.INTERNAL,
                "Failed to provision database",
                trailing_metadata=(("retryable", "false"),),
            )

        return self.converter.result_to_bytes(result)

    def add_to_server(self, server: grpc.aio.Server) -> None:
        """Register the service's generic handlers on ``server``."""
        handler = grpc.method_handlers_generic_handler(
            self.SERVICE_NAME,
            {
                PROVISION_DATABASE: grpc.unary_unary_rpc_method_handler(
                    self.ProvisionDatabase,
                ),
            },
        )
        server.add_generic_rpc_handlers((handler,))
