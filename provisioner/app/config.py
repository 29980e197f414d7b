import os
from urllib.parse import quote_plus


class Config:
    """Base configuration class with common settings."""

    # Administrative Postgres connection (shared cluster)
    PG_HOST = os.getenv("PG_HOST", "localhost")
    PG_PORT = os.getenv("PG_PORT", "5432")
    PG_USER = os.getenv("PG_USER", "postgres")
    PG_PASSWORD = os.getenv("PG_PASSWORD", "")
    PG_DATABASE = os.getenv("PG_DATABASE", "postgres")

    DB_POOL_MIN_SIZE = int(os.getenv("DB_POOL_MIN_SIZE", "4"))
    DB_POOL_MAX_SIZE = int(os.getenv("DB_POOL_MAX_SIZE", "12"))
    DB_CONNECT_TIMEOUT = float(os.getenv("DB_CONNECT_TIMEOUT", "60"))
    DB_COMMAND_TIMEOUT = float(os.getenv("DB_COMMAND_TIMEOUT", "30"))

    @classmethod
    def get_database_url(cls):
        """Build the administrative database URL at runtime."""
        # DATABASE_URL wins when set (Kubernetes way)
        database_url = os.getenv("DATABASE_URL")
        if database_url:
            return database_url

        return (
            f"postgresql://{quote_plus(cls.PG_USER)}:{quote_plus(cls.PG_PASSWORD)}"
            f"@{cls.PG_HOST}:{cls.PG_PORT}/{cls.PG_DATABASE}"
        )

    # Connection metadata handed out for shared databases
    SHARED_PG_PRIVATE_HOST = os.getenv("SHARED_PG_PRIVATE_HOST", "provisioner")
    SHARED_PG_PUBLIC_HOST = os.getenv("SHARED_PG_PUBLIC_HOST", "pg.shuttle.rs")
    SHARED_PG_PORT = os.getenv("SHARED_PG_PORT", "5432")

    # AWS settings; credentials fall back to the default provider chain
    AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
    AWS_ACCESS_KEY_ID = os.getenv("AWS_ACCESS_KEY_ID")
    AWS_SECRET_ACCESS_KEY = os.getenv("AWS_SECRET_ACCESS_KEY")
    AWS_API_TIMEOUT = int(os.getenv("AWS_API_TIMEOUT", "120"))
    AWS_MAX_ATTEMPTS = int(os.getenv("AWS_MAX_ATTEMPTS", "3"))

    # Managed RDS instances
    RDS_INSTANCE_CLASS = os.getenv("RDS_INSTANCE_CLASS", "db.t4g.micro")
    RDS_ALLOCATED_STORAGE = int(os.getenv("RDS_ALLOCATED_STORAGE", "20"))
    RDS_SUBNET_GROUP = os.getenv("RDS_SUBNET_GROUP", "shuttle_rds")
    RDS_MASTER_USERNAME = os.getenv("RDS_MASTER_USERNAME", "master")
    RDS_POLL_INTERVAL = float(os.getenv("RDS_POLL_INTERVAL", "1"))
    RDS_POLL_TIMEOUT = float(os.getenv("RDS_POLL_TIMEOUT", "1800"))

    # gRPC server settings
    GRPC_SERVER_HOST = os.getenv("GRPC_SERVER_HOST", "0.0.0.0")
    GRPC_SERVER_PORT = int(os.getenv("GRPC_SERVER_PORT", "8000"))
    GRPC_MAX_CONCURRENT_RPCS = int(os.getenv("GRPC_MAX_CONCURRENT_RPCS", "100"))
    GRPC_TLS_ENABLED = os.getenv("GRPC_TLS_ENABLED", "false").lower() == "true"
    GRPC_TLS_CERT_FILE = os.getenv("GRPC_TLS_CERT_FILE")
    GRPC_TLS_KEY_FILE = os.getenv("GRPC_TLS_KEY_FILE")
    GRPC_TLS_CA_FILE = os.getenv("GRPC_TLS_CA_FILE")

    # Logging settings
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT = os.getenv(
        "LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


class DevelopmentConfig(Config):
    """Development configuration."""

    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


class TestingConfig(Config):
    """Testing configuration."""

    PG_HOST = "localhost"
    DB_POOL_MIN_SIZE = 1
    DB_POOL_MAX_SIZE = 2

    # Poll fast and give up quickly against fake providers
    RDS_POLL_INTERVAL = 0.0
    RDS_POLL_TIMEOUT = 1.0

    GRPC_SERVER_HOST = "127.0.0.1"
    GRPC_SERVER_PORT = 0


class ProductionConfig(Config):
    """Production configuration."""

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


# Configuration dictionary for easy selection
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(config_name=None):
    """Get configuration class based on environment.

    Args:
        config_name: Configuration name ('development', 'testing', 'production').
                    If None, uses PROVISIONER_ENV environment variable or defaults to 'development'.

    Returns:
        Configuration class.
    """
    if config_name is None:
        config_name = os.getenv("PROVISIONER_ENV", "development")

    config_class = config.get(config_name, DevelopmentConfig)
    return config_class
