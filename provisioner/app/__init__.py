"""Provisioner Application Factory

This module builds the provisioning service and the clients it depends on.
The gRPC launcher (``provisioner.grpc_server``) calls ``create_app`` once per
process and serves the resulting service.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from provisioner.app.config import get_config
from provisioner.app.db.executor import AsyncpgExecutor
from provisioner.app.extensions import (
    create_aws_session,
    create_boto_config,
    create_pg_pool,
)
from provisioner.app.services.provisioning.aws import RDSProvisioner, RDSProvisionerConfig
from provisioner.app.services.provisioning.service import ProvisioningService
from provisioner.app.services.provisioning.shared import SharedClusterConfig, SharedProvisioner

logger = logging.getLogger(__name__)


@dataclass
class App:
    """
    A configured provisioner.

    Attributes:
        config: Configuration class the app was built from
        service: Provisioning service to serve
        executor: SQL executor owning the administrative pool
    """
    config: Any
    service: ProvisioningService
    executor: Optional[AsyncpgExecutor] = None

    async def close(self) -> None:
        """Release the administrative pool."""
        if self.executor is not None:
            await self.executor.close()
            self.executor = None


def build_service(config, executor, session) -> ProvisioningService:
    """
    Wire provisioners from configuration and already-created clients.

    Args:
        config: Configuration class
        executor: SQL executor for the shared cluster
        session: aioboto3 session (or compatible) for RDS

    Returns:
        ProvisioningService ready to handle requests
    """
    shared = SharedProvisioner(
        executor,
        SharedClusterConfig(
            private_host=config.SHARED_PG_PRIVATE_HOST,
            public_host=config.SHARED_PG_PUBLIC_HOST,
            port=config.SHARED_PG_PORT,
        ),
    )
    managed = RDSProvisioner(
        session,
        RDSProvisionerConfig(
            instance_class=config.RDS_INSTANCE_CLASS,
            allocated_storage=config.RDS_ALLOCATED_STORAGE,
            subnet_group=config.RDS_SUBNET_GROUP,
            master_username=config.RDS_MASTER_USERNAME,
            poll_interval=config.RDS_POLL_INTERVAL,
            poll_timeout=config.RDS_POLL_TIMEOUT,
            client_kwargs={
                "region_name": config.AWS_REGION,
                "config": create_boto_config(config),
            },
        ),
    )
    return ProvisioningService(shared, managed)


async def create_app(config_name=None) -> App:
    """
    Application factory function for the provisioner.

    Args:
        config_name: Configuration environment ('development', 'testing', 'production')

    Returns:
        Configured App instance
    """
    config_class = get_config(config_name)

    pool = await create_pg_pool(config_class)
    executor = AsyncpgExecutor(pool, command_timeout=config_class.DB_COMMAND_TIMEOUT)
    session = create_aws_session(config_class)

    service = build_service(config_class, executor, session)
    logger.info(f"Provisioner created with {config_class.__name__}")

    return App(config=config_class, service=service, executor=executor)
