"""gRPC servicers for the provisioner."""

from .provisioner_servicer import ProvisionerServicer

__all__ = ["ProvisionerServicer"]
