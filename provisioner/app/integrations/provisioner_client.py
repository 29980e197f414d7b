"""
Provisioner gRPC client.

Used by deployers to request databases for a project. Requests travel as JSON
over the generic ProvisionDatabase method; transient failures reported by the
server (ABORTED on a concurrent duplicate, UNAVAILABLE on a SQL failure) are
retried with exponential backoff.
"""

import asyncio
import logging
from typing import Optional, Union

import grpc

from provisioner.app.grpc.converters import PROVISION_DATABASE_PATH, MessageConverter
from provisioner.app.models.enums import Engine
from provisioner.app.schemas.database import (
    ManagedKind,
    ProvisionRequest,
    ProvisionResult,
    SharedKind,
)
from provisioner.app.utils.async_utils import async_retry

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset(
    {grpc.StatusCode.ABORTED, grpc.StatusCode.UNAVAILABLE}
)


class ProvisionerClientError(Exception):
    """A ProvisionDatabase call finished with a non-OK status."""

    def __init__(self, code: grpc.StatusCode, details: Optional[str]):
        self.code = code
        self.details = details or ""
        self.retryable = code in RETRYABLE_STATUS_CODES
        super().__init__(f"{code.name}: {self.details}")


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, ProvisionerClientError) and error.retryable


class ProvisionerClient:
    """Client for the Provisioner gRPC service."""

    def __init__(
        self,
        address: str = "localhost:8000",
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: Optional[float] = None,
    ):
        """Initialize ProvisionerClient.

        Args:
            address: Provisioner gRPC server address (host:port)
            max_retries: Retries for calls failing with a retryable status
            retry_delay: Initial delay in seconds between retries
            timeout: Per-call deadline in seconds; managed instances can take
                many minutes to become available
        """
        self.address = address
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self._channel: Optional[grpc.aio.Channel] = None
        self._provision = None

    async def connect(self, ready_timeout: float = 10.0) -> bool:
        """Open the channel and wait for it to become ready.

        Returns:
            True if the server is reachable, False otherwise
        """
        self._channel = grpc.aio.insecure_channel(self.address)
        self._provision = self._channel.unary_unary(
            PROVISION_DATABASE_PATH,
            request_serializer=MessageConverter.request_to_bytes,
            response_deserializer=MessageConverter.result_from_bytes,
        )

        try:
            await asyncio.wait_for(self._channel.channel_ready(), timeout=ready_timeout)
        except asyncio.TimeoutError:
            logger.error(f"Provisioner at {self.address} not ready after {ready_timeout}s")
            await self.disconnect()
            return False

        logger.info(f"Connected to provisioner at {self.address}")
        return True

    async def disconnect(self) -> None:
        """Close the channel."""
        if self._channel:
            await self._channel.close()
            self._channel = None
            self._provision = None
            logger.info("Disconnected from provisioner")

    async def provision_database(
        self,
        project_name: str,
        engine: Optional[Union[Engine, str]] = None,
    ) -> ProvisionResult:
        """Request a database for ``project_name``.

        Args:
            project_name: Project the database belongs to
            engine: Managed engine to provision; ``None`` requests a database
                on the shared cluster

        Returns:
            Connection details for the database

        Raises:
            ProvisionerClientError: If the call fails with a non-retryable
                status, or retries are exhausted
            RuntimeError: If the client is not connected
        """
        if self._provision is None:
            raise RuntimeError("Not connected to provisioner")

        if engine is None:
            resource_kind = SharedKind()
        else:
            resource_kind = ManagedKind(engine=Engine(engine))

        request = ProvisionRequest(project_name=project_name, resource_kind=resource_kind)

        call = async_retry(
            max_retries=self.max_retries,
            delay=self.retry_delay,
            retry_if=_is_retryable,
        )(self._call_provision)
        return await call(request)

    async def _call_provision(self, request: ProvisionRequest) -> ProvisionResult:
        try:
            return await self._provision(request, timeout=self.timeout)
        except grpc.aio.AioRpcError as e:
            raise ProvisionerClientError(e.code(), e.details()) from e
