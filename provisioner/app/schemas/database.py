"""Pydantic schemas for database provisioning requests and results."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from provisioner.app.models.enums import Engine
from provisioner.app.services.credentials.password import build_connection_string


class SharedKind(BaseModel):
    """Role and database on the shared multi-tenant Postgres cluster."""

    kind: Literal["shared"] = "shared"

    model_config = ConfigDict(frozen=True)


class ManagedKind(BaseModel):
    """Dedicated managed instance running the given engine."""

    kind: Literal["managed"] = "managed"
    engine: Engine = Field(..., description="Engine the instance runs")

    model_config = ConfigDict(frozen=True)


ResourceKind = Annotated[Union[SharedKind, ManagedKind], Field(discriminator="kind")]


class ProvisionRequest(BaseModel):
    """Schema for a database provisioning request."""

    project_name: str = Field(..., min_length=1, max_length=255, description="Project name")
    resource_kind: ResourceKind = Field(..., description="Shared or managed resource")

    model_config = ConfigDict(frozen=True)


class ProvisionResult(BaseModel):
    """Connection details for a provisioned database. All fields are plain strings."""

    engine: str = Field(..., description="Engine name (postgres, mysql, mariadb)")
    username: str = Field(..., description="Login role")
    password: str = Field(..., description="Login password")
    database_name: str = Field(..., description="Database to connect to")
    address_private: str = Field(..., description="Address reachable from inside the platform")
    address_public: str = Field(..., description="Address reachable from the internet")
    port: str = Field(..., description="Listening port")

    model_config = ConfigDict(frozen=True)

    def connection_string(self, public: bool = True) -> str:
        """Render the result as an engine-specific connection URL.

        Args:
            public: Use the public address (default) instead of the private one

        Returns:
            Connection URL with the password URL-encoded
        """
        host = self.address_public if public else self.address_private
        return build_connection_string(
            Engine(self.engine),
            host=host,
            port=self.port,
            username=self.username,
            password=self.password,
            database_name=self.database_name,
        )
