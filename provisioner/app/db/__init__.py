"""SQL execution layer for the provisioner."""

from provisioner.app.db.executor import AsyncpgExecutor, SqlExecutionError, SqlExecutor

__all__ = ["AsyncpgExecutor", "SqlExecutionError", "SqlExecutor"]
