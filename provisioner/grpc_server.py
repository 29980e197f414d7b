#!/usr/bin/env python3
"""
gRPC Server Launcher for the Provisioner

Builds the provisioning service and serves it until the process is stopped.
"""

import asyncio
import logging
import sys

from provisioner.app import create_app
from provisioner.app.config import get_config
from provisioner.app.grpc import create_grpc_server
from provisioner.app.grpc.servicers import ProvisionerServicer

logger = logging.getLogger(__name__)


async def serve(config_name=None) -> None:
    """Create the app, start the gRPC server and wait for termination."""
    app = await create_app(config_name)
    server = create_grpc_server(app.config)
    server.add_servicer(ProvisionerServicer(app.service))

    try:
        await server.start()
        await server.wait_for_termination()
    finally:
        await server.stop()
        await app.close()


def main():
    """Start the gRPC server"""
    config_class = get_config()
    logging.basicConfig(
        level=config_class.LOG_LEVEL,
        format=config_class.LOG_FORMAT,
    )

    try:
        logger.info("Starting provisioner gRPC server...")
        asyncio.run(serve())
    except KeyboardInterrupt:
        logger.info("Provisioner gRPC server interrupted")
    except Exception as e:
        logger.error(f"Failed to start gRPC server: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
