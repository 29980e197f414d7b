"""
Shared Postgres provisioner.

Gives each project its own login role and database on the multi-tenant
Postgres cluster. Both are created on first request and reused afterwards;
the role's password is rotated on every call.

Existence checks and creation are separate statements, so two concurrent
requests for a brand-new project can both decide to create. The loser gets a
duplicate-object error from the server, which is reported as a retryable
DuplicateResourceConflict; a retried request then finds the resource and
converges.
"""

import logging
from dataclasses import dataclass
from typing import Tuple, Type

from provisioner.app.db.executor import SqlExecutionError, SqlExecutor
from provisioner.app.models.enums import Engine
from provisioner.app.schemas.database import ProvisionResult
from provisioner.app.utils.identifiers import (
    quote_identifier,
    quote_literal,
    sanitize_project_name,
)
from provisioner.app.utils.security import generate_password

from .base import (
    CreateDatabaseFailed,
    CreateRoleFailed,
    DuplicateResourceConflict,
    ProvisioningError,
    UpdateRoleFailed,
)

logger = logging.getLogger(__name__)

# duplicate_object (CREATE ROLE), duplicate_database (CREATE DATABASE) and
# unique_violation on the catalog index when both CREATEs race in-flight.
DUPLICATE_SQLSTATES = frozenset({"42710", "42P04", "23505"})


@dataclass
class SharedClusterConfig:
    """
    Connection metadata handed out for the shared cluster.

    Attributes:
        private_host: Hostname reachable from inside the platform network
        public_host: Hostname reachable from the internet
        port: Listening port of the cluster
    """
    private_host: str = "provisioner"
    public_host: str = "pg.shuttle.rs"
    port: str = "5432"


def role_name(project_name: str) -> str:
    return f"user-{project_name}"


def database_name(project_name: str) -> str:
    return f"db-{project_name}"


class SharedProvisioner:
    """Provisions per-project roles and databases on the shared cluster."""

    def __init__(self, executor: SqlExecutor, cluster: SharedClusterConfig):
        """
        Initialize shared provisioner.

        Args:
            executor: SQL executor bound to an administrative role that may
                create roles and databases
            cluster: Hostnames and port returned to callers
        """
        self.executor = executor
        self.cluster = cluster

    async def request_shared(self, project_name: str) -> ProvisionResult:
        """
        Ensure the project's role and database exist and return credentials.

        Args:
            project_name: Validated or raw project name

        Returns:
            ProvisionResult for the shared cluster with a freshly rotated password

        Raises:
            InvalidProjectName: If the project name is unsafe
            CreateRoleFailed, UpdateRoleFailed, CreateDatabaseFailed: On SQL failures
            DuplicateResourceConflict: If a concurrent request won a creation race
        """
        username, password = await self.ensure_role(project_name)
        db_name = await self.ensure_database(project_name, username)

        return ProvisionResult(
            engine=Engine.POSTGRES.value,
            username=username,
            password=password,
            database_name=db_name,
            address_private=self.cluster.private_host,
            address_public=self.cluster.public_host,
            port=self.cluster.port,
        )

    async def ensure_role(self, project_name: str) -> Tuple[str, str]:
        """
        Create the project's login role, or rotate its password if it exists.

        Returns:
            Tuple of (username, password)
        """
        project_name = sanitize_project_name(project_name)
        username = role_name(project_name)
        password = generate_password()

        try:
            matching_role = await self.executor.fetch_optional(
                "SELECT rolname FROM pg_roles WHERE rolname = $1",
                username,
            )
        except SqlExecutionError as e:
            raise CreateRoleFailed(
                f"Failed to look up role: {e.message}",
                project=project_name,
                resource_id=username,
                original_error=e,
            ) from e

        # Binding does not work for identifiers or the role password
        if matching_role is None:
            logger.info(f"Creating role {username}")
            statement = (
                f"CREATE ROLE {quote_identifier(username)} "
                f"WITH LOGIN PASSWORD {quote_literal(password)}"
            )
            failure: Type[ProvisioningError] = CreateRoleFailed
        else:
            logger.info(f"Cycling password of role {username}")
            statement = (
                f"ALTER ROLE {quote_identifier(username)} "
                f"WITH LOGIN PASSWORD {quote_literal(password)}"
            )
            failure = UpdateRoleFailed

        try:
            await self.executor.execute(statement)
        except SqlExecutionError as e:
            raise self._classify(e, failure, project_name, username) from e

        return username, password

    async def ensure_database(self, project_name: str, owner: str) -> str:
        """
        Create the project's database owned by ``owner`` unless it exists.

        Existing databases are never recreated, dropped or re-owned.

        Returns:
            Database name
        """
        project_name = sanitize_project_name(project_name)
        db_name = database_name(project_name)

        try:
            matching_db = await self.executor.fetch_optional(
                "SELECT datname FROM pg_database WHERE datname = $1",
                db_name,
            )
        except SqlExecutionError as e:
            raise CreateDatabaseFailed(
                f"Failed to look up database: {e.message}",
                project=project_name,
                resource_id=db_name,
                original_error=e,
            ) from e

        if matching_db is not None:
            logger.debug(f"Database {db_name} already exists, not recreating")
            return db_name

        logger.info(f"Creating database {db_name} owned by {owner}")
        statement = (
            f"CREATE DATABASE {quote_identifier(db_name)} "
            f"OWNER {quote_identifier(owner)}"
        )
        try:
            await self.executor.execute(statement)
        except SqlExecutionError as e:
            raise self._classify(e, CreateDatabaseFailed, project_name, db_name) from e

        return db_name

    @staticmethod
    def _classify(
        error: SqlExecutionError,
        failure: Type[ProvisioningError],
        project_name: str,
        resource_id: str,
    ) -> ProvisioningError:
        """Map a SQL error to a duplicate conflict or the operation's failure."""
        if error.sqlstate in DUPLICATE_SQLSTATES:
            return DuplicateResourceConflict(
                f"{resource_id} was created concurrently, retry the request",
                project=project_name,
                resource_id=resource_id,
                original_error=error,
            )

        return failure(
            error.message,
            project=project_name,
            resource_id=resource_id,
            original_error=error,
        )
