import json

import grpc
import pytest

from provisioner.app.grpc.converters import MessageConverter
from provisioner.app.grpc.servicers.provisioner_servicer import (
    ProvisionerServicer,
    status_code_for,
)
from provisioner.app.models.enums import Engine
from provisioner.app.schemas.database import (
    ManagedKind,
    ProvisionRequest,
    ProvisionResult,
    SharedKind,
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

from .fakes import FakeAbort, FakeServicerContext


class RaisingService:
    def __init__(self, error):
        self.error = error

    async def provision_database(self, request):
        raise self.error


def encode(project_name="my-app", resource_kind=None):
    request = ProvisionRequest(project_name=project_name, resource_kind=resource_kind or SharedKind())
    return MessageConverter.request_to_bytes(request)


@pytest.mark.parametrize(
    "error,code",
    [
        (InvalidProjectName("bad"), grpc.StatusCode.INVALID_ARGUMENT),
        (DuplicateResourceConflict("dup"), grpc.StatusCode.ABORTED),
        (CreateRoleFailed("x"), grpc.StatusCode.UNAVAILABLE),
        (UpdateRoleFailed("x"), grpc.StatusCode.UNAVAILABLE),
        (CreateDatabaseFailed("x"), grpc.StatusCode.UNAVAILABLE),
        (ProvisioningTimedOut("x"), grpc.StatusCode.DEADLINE_EXCEEDED),
        (UnexpectedProviderError("x"), grpc.StatusCode.INTERNAL),
        (InstanceFailed("x"), grpc.StatusCode.INTERNAL),
        (MalformedProviderResponse("x"), grpc.StatusCode.INTERNAL),
        (ProvisioningError("x"), grpc.StatusCode.INTERNAL),
    ],
)
def test_status_code_for(error, code):
    assert status_code_for(error) == code


@pytest.mark.asyncio
async def test_successful_shared_request(service):
    servicer = ProvisionerServicer(service)
    context = FakeServicerContext()

    response = await servicer.ProvisionDatabase(encode(), context)

    result = MessageConverter.result_from_bytes(response)
    assert result.username == "user-my-app"
    assert result.database_name == "db-my-app"
    assert context.code is None


@pytest.mark.asyncio
async def test_successful_managed_request(service):
    servicer = ProvisionerServicer(service)

    response = await servicer.ProvisionDatabase(
        encode(resource_kind=ManagedKind(engine=Engine.POSTGRES)),
        FakeServicerContext(),
    )

    payload = json.loads(response)
    assert payload["engine"] == "postgres"
    assert payload["port"] == "5432"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        b"not json",
        b"{}",
        b'{"project_name": "my-app"}',
        b'{"project_name": "my-app", "resource_kind": {"kind": "dedicated"}}',
        b'{"project_name": "my-app", "resource_kind": {"kind": "managed", "engine": "oracle"}}',
    ],
)
async def test_malformed_request_is_invalid_argument(service, executor, payload):
    servicer = ProvisionerServicer(service)
    context = FakeServicerContext()

    with pytest.raises(FakeAbort):
        await servicer.ProvisionDatabase(payload, context)

    assert context.code == grpc.StatusCode.INVALID_ARGUMENT
    assert context.trailing_metadata == (("retryable", "false"),)
    assert executor.statements == []


@pytest.mark.asyncio
async def test_invalid_project_name(service):
    servicer = ProvisionerServicer(service)
    context = FakeServicerContext()

    with pytest.raises(FakeAbort):
        await servicer.ProvisionDatabase(encode(project_name="My App"), context)

    assert context.code == grpc.StatusCode.INVALID_ARGUMENT
    assert "Invalid project name" in context.details


@pytest.mark.asyncio
async def test_retryable_error_metadata():
    servicer = ProvisionerServicer(RaisingService(DuplicateResourceConflict("role raced")))
    context = FakeServicerContext()

    with pytest.raises(FakeAbort):
        await servicer.ProvisionDatabase(encode(), context)

    assert context.code == grpc.StatusCode.ABORTED
    assert context.details == "role raced"
    assert context.trailing_metadata == (("retryable", "true"),)


@pytest.mark.asyncio
async def test_unexpected_exception_is_internal():
    servicer = ProvisionerServicer(RaisingService(RuntimeError("secret detail")))
    context = FakeServicerContext()

    with pytest.raises(FakeAbort):
        await servicer.ProvisionDatabase(encode(), context)

    assert context.code == grpc.StatusCode.INTERNAL
    assert "secret detail" not in context.details


def test_result_codec_keeps_fields():
    result = ProvisionResult(
        engine="postgres",
        username="user-a",
        password="pw",
        database_name="db-a",
        address_private="provisioner",
        address_public="pg.shuttle.rs",
        port="5432",
    )
    data = MessageConverter.result_to_bytes(result)
    assert json.loads(data) == result.model_dump()
