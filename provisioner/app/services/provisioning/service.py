"""Entry point dispatching provisioning requests to the right provisioner."""

import logging

from provisioner.app.schemas.database import (
    ManagedKind,
    ProvisionRequest,
    ProvisionResult,
    SharedKind,
)
from provisioner.app.utils.identifiers import sanitize_project_name

from .aws import RDSProvisioner
from .base import ProvisioningError
from .shared import SharedProvisioner

logger = logging.getLogger(__name__)


class ProvisioningService:
    """
    Dispatches a request by resource kind and returns its connection details.

    Holds no per-request state; the provisioners it delegates to are shared
    across concurrent requests.
    """

    def __init__(self, shared: SharedProvisioner, managed: RDSProvisioner):
        self.shared = shared
        self.managed = managed

    async def provision_database(self, request: ProvisionRequest) -> ProvisionResult:
        """
        Provision the database described by ``request``.

        The project name is validated before anything reaches a provisioner.

        Raises:
            ProvisioningError: Any subclass, see services.provisioning.base
        """
        project_name = sanitize_project_name(request.project_name)
        kind = request.resource_kind

        try:
            if isinstance(kind, SharedKind):
                logger.info(f"Provisioning shared database for {project_name}")
                result = await self.shared.request_shared(project_name)
            elif isinstance(kind, ManagedKind):
                logger.info(
                    f"Provisioning managed {kind.engine.value} instance for {project_name}"
                )
                result = await self.managed.provision(project_name, kind.engine)
            else:
                raise TypeError(f"Unhandled resource kind: {type(kind).__name__}")
        except ProvisioningError as e:
            logger.error(f"Provisioning failed for {project_name}: {e}")
            raise

        logger.info(f"Provisioned {result.engine} database {result.database_name} for {project_name}")
        return result
