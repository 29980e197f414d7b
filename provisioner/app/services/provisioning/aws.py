"""
AWS RDS provisioner for dedicated project databases.

Each project/engine pair maps to one RDS instance named
``<project>-<engine>``. A provisioning call first tries to reset the
instance's master password, since most calls target an instance that already
exists; if RDS reports the instance missing it is created instead. Either
way the instance is then polled until it is available again.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from provisioner.app.models.enums import Engine, engine_to_port
from provisioner.app.schemas.database import ProvisionResult
from provisioner.app.utils.identifiers import sanitize_project_name
from provisioner.app.utils.security import generate_password

from .base import (
    InstanceFailed,
    MalformedProviderResponse,
    ProviderNotFound,
    ProvisioningTimedOut,
    UnexpectedProviderError,
)

logger = logging.getLogger(__name__)


class InstanceStatus:
    """AWS RDS DB instance status values used by the provisioner."""
    AVAILABLE = "available"
    CREATING = "creating"
    RESETTING_MASTER_CREDENTIALS = "resetting-master-credentials"
    FAILED = "failed"


# Statuses from which the instance will not become available on its own.
FAILED_STATUSES = frozenset({
    InstanceStatus.FAILED,
    "deleting",
    "inaccessible-encryption-credentials",
    "incompatible-network",
    "incompatible-parameters",
    "incompatible-restore",
    "restore-error",
    "storage-full",
})

DB_INSTANCE_NOT_FOUND = "DBInstanceNotFound"


@dataclass
class RDSProvisionerConfig:
    """
    Configuration for managed RDS instances.

    Attributes:
        instance_class: DB instance class for new instances
        allocated_storage: Storage allocation in GB for new instances
        subnet_group: DB subnet group new instances are placed in
        master_username: Master username for new instances
        poll_interval: Seconds between status checks
        poll_timeout: Maximum seconds to wait for a status before giving up
        client_kwargs: Extra keyword arguments for the RDS client
            (region_name, botocore config)
    """
    instance_class: str = "db.t4g.micro"
    allocated_storage: int = 20
    subnet_group: str = "shuttle_rds"
    master_username: str = "master"
    poll_interval: float = 1.0
    poll_timeout: float = 1800.0
    client_kwargs: Optional[Dict[str, Any]] = None


def instance_identifier(project_name: str, engine: Engine) -> str:
    return f"{project_name}-{engine.value}"


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


class RDSProvisioner:
    """Provisions dedicated RDS instances and returns their master credentials."""

    def __init__(self, session: Any, config: RDSProvisionerConfig):
        """
        Initialize RDS provisioner.

        Args:
            session: aioboto3 session (or any object whose ``client('rds')``
                returns an async context manager yielding an RDS client)
            config: Instance and polling configuration
        """
        self.session = session
        self.config = config

    def _client(self):
        return self.session.client("rds", **(self.config.client_kwargs or {}))

    async def provision(self, project_name: str, engine: Engine) -> ProvisionResult:
        """
        Bring the project's instance to ``available`` with a fresh master password.

        Args:
            project_name: Validated or raw project name
            engine: Engine the instance runs

        Returns:
            ProvisionResult pointing at the instance endpoint

        Raises:
            InvalidProjectName: If the project name is unsafe
            UnexpectedProviderError: On any RDS error outside the normal flow
            InstanceFailed: If the instance enters a terminal failure status
            ProvisioningTimedOut: If an awaited status is not reached in time
            MalformedProviderResponse: If RDS omits status, endpoint,
                master username or database name
        """
        project_name = sanitize_project_name(project_name)
        instance_id = instance_identifier(project_name, engine)
        password = generate_password()

        deadline = time.monotonic() + self.config.poll_timeout

        async with self._client() as rds:
            try:
                await self._reset_master_password(rds, instance_id, password)
            except ProviderNotFound:
                await self._create_instance(rds, instance_id, engine, password)
                instance = await self._wait_for_instance(
                    rds, instance_id, (InstanceStatus.CREATING, InstanceStatus.AVAILABLE), deadline
                )
            else:
                instance = await self._wait_for_instance(
                    rds, instance_id, (InstanceStatus.RESETTING_MASTER_CREDENTIALS,), deadline
                )

            if instance['DBInstanceStatus'] != InstanceStatus.AVAILABLE:
                instance = await self._wait_for_instance(
                    rds, instance_id, (InstanceStatus.AVAILABLE,), deadline
                )

        return self._build_result(instance_id, engine, password, instance)

    async def _reset_master_password(self, rds: Any, instance_id: str, password: str) -> None:
        logger.debug(f"Trying to reset master password of RDS instance {instance_id}")
        try:
            await rds.modify_db_instance(
                DBInstanceIdentifier=instance_id,
                MasterUserPassword=password,
                ApplyImmediately=True,
            )
        except ClientError as e:
            if _error_code(e) == DB_INSTANCE_NOT_FOUND:
                raise ProviderNotFound(
                    f"RDS instance {instance_id} does not exist",
                    resource_id=instance_id,
                    original_error=e,
                ) from e
            raise UnexpectedProviderError(
                f"Got unexpected error from AWS RDS service: {str(e)}",
                resource_id=instance_id,
                original_error=e,
            ) from e
        except BotoCoreError as e:
            raise UnexpectedProviderError(
                f"Got unexpected error from AWS during API call: {str(e)}",
                resource_id=instance_id,
                original_error=e,
            ) from e
        logger.info(f"Resetting master credentials of RDS instance {instance_id}")

    async def _create_instance(
        self,
        rds: Any,
        instance_id: str,
        engine: Engine,
        password: str,
    ) -> None:
        logger.info(f"Creating new RDS instance {instance_id}")
        params = {
            'DBInstanceIdentifier': instance_id,
            'MasterUsername': self.config.master_username,
            'MasterUserPassword': password,
            'Engine': engine.value,
            'DBInstanceClass': self.config.instance_class,
            'AllocatedStorage': self.config.allocated_storage,
            'BackupRetentionPeriod': 0,
            'PubliclyAccessible': True,
            'DBName': engine.value,
            'DBSubnetGroupName': self.config.subnet_group,
        }
        try:
            response = await rds.create_db_instance(**params)
        except (BotoCoreError, ClientError) as e:
            raise UnexpectedProviderError(
                f"Failed to create RDS instance: {str(e)}",
                resource_id=instance_id,
                original_error=e,
            ) from e

        if not response.get('DBInstance'):
            raise MalformedProviderResponse(
                "CreateDBInstance response has no DBInstance",
                resource_id=instance_id,
            )

    async def _describe_instance(self, rds: Any, instance_id: str) -> Dict[str, Any]:
        try:
            response = await rds.describe_db_instances(DBInstanceIdentifier=instance_id)
        except (BotoCoreError, ClientError) as e:
            raise UnexpectedProviderError(
                f"Failed to check instance status: {str(e)}",
                resource_id=instance_id,
                original_error=e,
            ) from e

        instances = response.get('DBInstances') or []
        if not instances:
            raise MalformedProviderResponse(
                "DescribeDBInstances returned no instances",
                resource_id=instance_id,
            )
        return instances[0]

    async def _wait_for_instance(
        self,
        rds: Any,
        instance_id: str,
        wait_for: Tuple[str, ...],
        deadline: float,
    ) -> Dict[str, Any]:
        """
        Poll the instance until its status is one of ``wait_for``.

        The instance is described at least once. Waiting is done with
        asyncio.sleep, so cancelling the calling task stops the loop.

        Args:
            rds: RDS client
            instance_id: DB instance identifier
            wait_for: Acceptable target statuses
            deadline: time.monotonic() value shared by every wait of one
                provisioning call

        Returns:
            The DBInstance description that matched

        Raises:
            InstanceFailed: If a terminal failure status is reported
            ProvisioningTimedOut: If the deadline passes first
            MalformedProviderResponse: If a description has no status
        """
        logger.debug(f"Waiting for {instance_id} to enter {' or '.join(wait_for)} state")

        while True:
            instance = await self._describe_instance(rds, instance_id)
            status = instance.get('DBInstanceStatus')
            if not status:
                raise MalformedProviderResponse(
                    "DescribeDBInstances returned an instance without a status",
                    resource_id=instance_id,
                )

            logger.debug(f"RDS instance {instance_id} status: {status}")
            if status in wait_for:
                return instance

            if status in FAILED_STATUSES:
                raise InstanceFailed(
                    f"RDS instance entered terminal status '{status}'",
                    resource_id=instance_id,
                )

            if time.monotonic() >= deadline:
                raise ProvisioningTimedOut(
                    f"RDS instance did not reach {' or '.join(wait_for)} within "
                    f"{self.config.poll_timeout} seconds (last status '{status}')",
                    resource_id=instance_id,
                )

            await asyncio.sleep(self.config.poll_interval)

    def _build_result(
        self,
        instance_id: str,
        engine: Engine,
        password: str,
        instance: Dict[str, Any],
    ) -> ProvisionResult:
        address = (instance.get('Endpoint') or {}).get('Address')
        username = instance.get('MasterUsername')
        db_name = instance.get('DBName')

        missing = [
            name for name, value in (
                ('Endpoint.Address', address),
                ('MasterUsername', username),
                ('DBName', db_name),
            ) if not value
        ]
        if missing:
            raise MalformedProviderResponse(
                f"Available RDS instance is missing {', '.join(missing)}",
                resource_id=instance_id,
            )

        logger.info(f"RDS instance {instance_id} is available at {address}")

        # No private address can be looked up yet, so both point at the endpoint.
        return ProvisionResult(
            engine=engine.value,
            username=username,
            password=password,
            database_name=db_name,
            address_private=address,
            address_public=address,
            port=engine_to_port(engine),
        )
