"""Provisioner Enumeration Types"""

from enum import Enum


class Engine(Enum):
    """Database engines a managed instance can run"""
    POSTGRES = "postgres"
    MYSQL = "mysql"
    MARIADB = "mariadb"


# Every Engine member must appear here; tests assert the mapping is total.
ENGINE_PORTS = {
    Engine.POSTGRES: "5432",
    Engine.MYSQL: "3306",
    Engine.MARIADB: "3306",
}


def engine_to_port(engine: Engine) -> str:
    """Return the conventional listening port for an engine."""
    return ENGINE_PORTS[engine]
