"""
gRPC server setup for the provisioner.

Serves the Provisioner service on an asyncio gRPC server so each request runs
as its own coroutine next to the shared connection pool and AWS session.
"""

import logging
import os
from typing import Any, List, Optional

import grpc

logger = logging.getLogger(__name__)


class GRPCServer:
    """Async gRPC server implementation for the provisioner."""

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 8000,
        max_concurrent_rpcs: Optional[int] = 100,
        max_message_length: int = 4 * 1024 * 1024,  # 4MB
        tls_cert_file: Optional[str] = None,
        tls_key_file: Optional[str] = None,
        tls_ca_file: Optional[str] = None,
    ):
        """
        Initialize gRPC server.

        Args:
            host: Host address to bind to
            port: Port number to bind to (0 picks a free port)
            max_concurrent_rpcs: Maximum number of RPCs served at once
            max_message_length: Maximum message size in bytes
            tls_cert_file: Server certificate chain (enables TLS with tls_key_file)
            tls_key_file: Server private key
            tls_ca_file: CA bundle; when set, clients must present certificates
        """
        self.host = host
        self.port = port
        self.max_concurrent_rpcs = max_concurrent_rpcs
        self.max_message_length = max_message_length
        self.tls_cert_file = tls_cert_file
        self.tls_key_file = tls_key_file
        self.tls_ca_file = tls_ca_file

        # gRPC server options
        self.options = [
            ("grpc.max_send_message_length", max_message_length),
            ("grpc.max_receive_message_length", max_message_length),
            ("grpc.keepalive_time_ms", 10000),
            ("grpc.keepalive_timeout_ms", 5000),
            ("grpc.keepalive_permit_without_calls", True),
            ("grpc.http2.max_pings_without_data", 0),
            ("grpc.http2.min_time_between_pings_ms", 10000),
            ("grpc.http2.min_ping_interval_without_data_ms", 5000),
        ]

        self.server: Optional[grpc.aio.Server] = None
        self.servicers: List[Any] = []
        self.service_names: List[str] = []
        self.bound_port: Optional[int] = None

    def add_servicer(self, servicer: Any) -> None:
        """
        Add a service implementation to the server.

        Args:
            servicer: Service implementation instance
        """
        self.servicers.append(servicer)

    def _setup_tls(self) -> Optional[grpc.ServerCredentials]:
        """
        Setup TLS credentials if configured.

        Returns:
            ServerCredentials if TLS is configured, None otherwise
        """
        if not self.tls_cert_file or not self.tls_key_file:
            return None

        with open(self.tls_key_file, "rb") as f:
            private_key = f.read()
        with open(self.tls_cert_file, "rb") as f:
            certificate_chain = f.read()

        root_certificates = None
        if self.tls_ca_file and os.path.exists(self.tls_ca_file):
            with open(self.tls_ca_file, "rb") as f:
                root_certificates = f.read()

        credentials = grpc.ssl_server_credentials(
            [(private_key, certificate_chain)],
            root_certificates=root_certificates,
            require_client_auth=root_certificates is not None,
        )

        logger.info("TLS configured for gRPC server")
        return credentials

    async def start(self) -> int:
        """Start the gRPC server.

        Returns:
            The port the server is listening on
        """
        if self.server is not None:
            logger.warning("gRPC server already started")
            return self.bound_port

        self.server = grpc.aio.server(
            options=self.options,
            maximum_concurrent_rpcs=self.max_concurrent_rpcs,
        )

        # Add all registered servicers
        for servicer in self.servicers:
            if hasattr(servicer, "add_to_server"):
                servicer.add_to_server(self.server)
                if hasattr(servicer, "SERVICE_NAME"):
                    self.service_names.append(servicer.SERVICE_NAME)
            else:
                logger.warning(
                    f"Servicer {servicer.__class__.__name__} "
                    f"does not have add_to_server method"
                )

        credentials = self._setup_tls()
        address = f"{self.host}:{self.port}"

        if credentials:
            self.bound_port = self.server.add_secure_port(address, credentials)
            logger.info(f"gRPC server listening on {self.host}:{self.bound_port} (TLS enabled)")
        else:
            self.bound_port = self.server.add_insecure_port(address)
            logger.info(f"gRPC server listening on {self.host}:{self.bound_port} (insecure)")

        await self.server.start()
        logger.info(
            f"gRPC server started with {len(self.servicers)} service(s): "
            f"{', '.join(self.service_names)}"
        )
        return self.bound_port

    async def stop(self, grace: Optional[float] = 5) -> None:
        """
        Stop the gRPC server gracefully.

        Args:
            grace: Grace period in seconds for ongoing RPCs to complete
        """
        if self.server is None:
            logger.warning("gRPC server not running")
            return

        logger.info(f"Stopping gRPC server (grace period: {grace}s)")
        await self.server.stop(grace)
        self.server = None
        logger.info("gRPC server stopped")

    async def wait_for_termination(self, timeout: Optional[float] = None) -> None:
        """
        Block until the server is terminated.

        Args:
            timeout: Maximum time to wait in seconds
        """
        if self.server is None:
            return

        await self.server.wait_for_termination(timeout=timeout)


def create_grpc_server(config: Any) -> GRPCServer:
    """
    Create a gRPC server from configuration.

    Args:
        config: Configuration class

    Returns:
        Configured GRPCServer instance (servicers still to be added)
    """
    tls_enabled = config.GRPC_TLS_ENABLED
    if tls_enabled and not (config.GRPC_TLS_CERT_FILE and config.GRPC_TLS_KEY_FILE):
        logger.warning(
            "GRPC_TLS_ENABLED is true but cert/key files not configured"
        )

    server = GRPCServer(
        host=config.GRPC_SERVER_HOST,
        port=config.GRPC_SERVER_PORT,
        max_concurrent_rpcs=config.GRPC_MAX_CONCURRENT_RPCS,
        tls_cert_file=config.GRPC_TLS_CERT_FILE if tls_enabled else None,
        tls_key_file=config.GRPC_TLS_KEY_FILE if tls_enabled else None,
        tls_ca_file=config.GRPC_TLS_CA_FILE if tls_enabled else None,
    )

    logger.info(
        f"gRPC server created: {config.GRPC_SERVER_HOST}:{config.GRPC_SERVER_PORT} "
        f"(max_concurrent_rpcs={config.GRPC_MAX_CONCURRENT_RPCS})"
    )

    return server
