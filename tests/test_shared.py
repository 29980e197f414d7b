import pytest

from provisioner.app.services.provisioning.base import (
    CreateDatabaseFailed,
    CreateRoleFailed,
    DuplicateResourceConflict,
    InvalidProjectName,
    UpdateRoleFailed,
)
from provisioner.app.services.provisioning.shared import SharedClusterConfig, SharedProvisioner

from .fakes import FakeSqlExecutor


@pytest.mark.asyncio
async def test_first_request_creates_role_and_database(shared, executor):
    result = await shared.request_shared("my-app")

    assert result.engine == "postgres"
    assert result.username == "user-my-app"
    assert result.database_name == "db-my-app"
    assert result.address_private == "provisioner"
    assert result.address_public == "pg.shuttle.rs"
    assert result.port == "5432"

    assert executor.roles == {"user-my-app": result.password}
    assert executor.databases == {"db-my-app": "user-my-app"}
    assert executor.statements_starting_with("CREATE ROLE") == [
        f"CREATE ROLE \"user-my-app\" WITH LOGIN PASSWORD '{result.password}'"
    ]
    assert executor.statements_starting_with("CREATE DATABASE") == [
        'CREATE DATABASE "db-my-app" OWNER "user-my-app"'
    ]


@pytest.mark.asyncio
async def test_repeat_request_rotates_password_and_keeps_database(shared, executor):
    first = await shared.request_shared("my-app")
    second = await shared.request_shared("my-app")

    assert second.username == first.username
    assert second.database_name == first.database_name
    assert second.password != first.password
    assert executor.roles["user-my-app"] == second.password

    assert len(executor.statements_starting_with("CREATE ROLE")) == 1
    assert len(executor.statements_starting_with("ALTER ROLE")) == 1
    assert len(executor.statements_starting_with("CREATE DATABASE")) == 1
    assert len(executor.databases) == 1


@pytest.mark.asyncio
async def test_lookups_bind_the_name(shared, executor):
    await shared.request_shared("my-app")

    selects = executor.statements_starting_with("SELECT")
    assert selects == [
        "SELECT rolname FROM pg_roles WHERE rolname = $1",
        "SELECT datname FROM pg_database WHERE datname = $1",
    ]


@pytest.mark.asyncio
async def test_existing_database_is_not_recreated(shared, executor):
    executor.databases["db-my-app"] = "someone-else"

    await shared.request_shared("my-app")

    assert executor.statements_starting_with("CREATE DATABASE") == []
    assert executor.databases["db-my-app"] == "someone-else"


@pytest.mark.asyncio
async def test_invalid_name_issues_no_sql(shared, executor):
    with pytest.raises(InvalidProjectName):
        await shared.request_shared('x"; DROP ROLE postgres; --')
    assert executor.statements == []


@pytest.mark.asyncio
async def test_cluster_config_is_returned():
    provisioner = SharedProvisioner(
        FakeSqlExecutor(),
        SharedClusterConfig(private_host="pg.internal", public_host="pg.example.com", port="6432"),
    )
    result = await provisioner.request_shared("my-app")
    assert (result.address_private, result.address_public, result.port) == (
        "pg.internal",
        "pg.example.com",
        "6432",
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "prefix,sqlstate,error",
    [
        ("CREATE ROLE", "42710", DuplicateResourceConflict),
        ("CREATE DATABASE", "42P04", DuplicateResourceConflict),
        ("CREATE DATABASE", "23505", DuplicateResourceConflict),
        ("CREATE ROLE", "53300", CreateRoleFailed),
        ("CREATE DATABASE", None, CreateDatabaseFailed),
        ("SELECT rolname", "08006", CreateRoleFailed),
        ("SELECT datname", "08006", CreateDatabaseFailed),
    ],
)
async def test_sql_errors_are_classified(shared, executor, prefix, sqlstate, error):
    executor.inject_failure(prefix, sqlstate)

    with pytest.raises(error) as exc_info:
        await shared.request_shared("my-app")

    assert exc_info.value.retryable is True
    assert exc_info.value.project == "my-app"
    assert exc_info.value.original_error.sqlstate == sqlstate


@pytest.mark.asyncio
async def test_alter_role_failure(shared, executor):
    executor.roles["user-my-app"] = "old"
    executor.inject_failure("ALTER ROLE", "57014")

    with pytest.raises(UpdateRoleFailed) as exc_info:
        await shared.request_shared("my-app")

    assert exc_info.value.resource_id == "user-my-app"
    assert executor.roles["user-my-app"] == "old"
    assert executor.statements_starting_with("CREATE DATABASE") == []


@pytest.mark.asyncio
async def test_password_not_in_error_message(shared, executor):
    executor.inject_failure("CREATE ROLE", "53300")

    with pytest.raises(CreateRoleFailed) as exc_info:
        await shared.request_shared("my-app")

    statement = executor.statements_starting_with("CREATE ROLE")[0]
    password = statement.rsplit("'", 2)[1]
    assert password not in str(exc_info.value)
