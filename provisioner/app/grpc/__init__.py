"""gRPC server module for the provisioner."""

from .server import GRPCServer, create_grpc_server

__all__ = ["GRPCServer", "create_grpc_server"]
