"""Domain enumerations for the provisioner."""

from provisioner.app.models.enums import (
    ENGINE_PORTS,
    Engine,
    engine_to_port,
)

__all__ = [
    "ENGINE_PORTS",
    "Engine",
    "engine_to_port",
]
