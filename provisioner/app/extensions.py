"""Shared client construction.

The administrative connection pool and the AWS session are created once per
process by the app factory and passed explicitly to the provisioners that use
them; nothing here is a module-level singleton.
"""

import logging

import aioboto3
import asyncpg
from botocore.config import Config as BotoConfig

logger = logging.getLogger(__name__)


async def create_pg_pool(config) -> asyncpg.Pool:
    """
    Create the asyncpg pool for the administrative Postgres role.

    Args:
        config: Configuration class

    Returns:
        Connected asyncpg pool
    """
    pool = await asyncpg.create_pool(
        dsn=config.get_database_url(),
        min_size=config.DB_POOL_MIN_SIZE,
        max_size=config.DB_POOL_MAX_SIZE,
        timeout=config.DB_CONNECT_TIMEOUT,
        server_settings={"application_name": "provisioner"},
    )
    logger.info(
        f"Administrative pool ready on {config.PG_HOST}:{config.PG_PORT} "
        f"(min={config.DB_POOL_MIN_SIZE}, max={config.DB_POOL_MAX_SIZE})"
    )
    return pool


def create_aws_session(config) -> aioboto3.Session:
    """Create the aioboto3 session used for RDS calls."""
    # Explicit keys only when both are configured; otherwise the default chain
    if config.AWS_ACCESS_KEY_ID and config.AWS_SECRET_ACCESS_KEY:
        return aioboto3.Session(
            aws_access_key_id=config.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=config.AWS_SECRET_ACCESS_KEY,
            region_name=config.AWS_REGION,
        )
    return aioboto3.Session(region_name=config.AWS_REGION)


def create_boto_config(config) -> BotoConfig:
    """Client config with call timeouts lowered from botocore's defaults."""
    return BotoConfig(
        connect_timeout=config.AWS_API_TIMEOUT,
        read_timeout=config.AWS_API_TIMEOUT,
        retries={"max_attempts": config.AWS_MAX_ATTEMPTS, "mode": "standard"},
    )
