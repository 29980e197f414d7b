"""
Integration clients for external services.

Includes clients for:
- Provisioner gRPC service
"""

from .provisioner_client import ProvisionerClient, ProvisionerClientError

__all__ = ["ProvisionerClient", "ProvisionerClientError"]
