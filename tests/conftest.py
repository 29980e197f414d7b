import pytest

from provisioner.app.services.provisioning.aws import RDSProvisioner, RDSProvisionerConfig
from provisioner.app.services.provisioning.service import ProvisioningService
from provisioner.app.services.provisioning.shared import SharedClusterConfig, SharedProvisioner

from .fakes import FakeRDSClient, FakeRDSSession, FakeSqlExecutor


@pytest.fixture
def executor():
    return FakeSqlExecutor()


@pytest.fixture
def shared(executor):
    return SharedProvisioner(executor, SharedClusterConfig())


@pytest.fixture
def rds_client():
    return FakeRDSClient()


@pytest.fixture
def rds_session(rds_client):
    return FakeRDSSession(rds_client)


@pytest.fixture
def rds_config():
    return RDSProvisionerConfig(
        poll_interval=0.0,
        poll_timeout=1.0,
        client_kwargs={"region_name": "eu-west-2"},
    )


@pytest.fixture
def managed(rds_session, rds_config):
    return RDSProvisioner(rds_session, rds_config)


@pytest.fixture
def service(shared, managed):
    return ProvisioningService(shared, managed)
