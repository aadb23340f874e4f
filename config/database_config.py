"""
PostgreSQL Database Configuration.

Provides configuration for the asset store. Password authentication only;
a complete POSTGRESQL_CONNECTION_STRING overrides the individual settings.

Exports:
    DatabaseConfig: Asset store configuration
    get_postgres_connection_string: Connection string factory
"""

import os
from typing import Optional
from pydantic import BaseModel, Field

from exceptions import ConfigurationError
from .defaults import DatabaseDefaults


# ============================================================================
# DATABASE CONFIGURATION
# ============================================================================

class DatabaseConfig(BaseModel):
    """
    PostgreSQL configuration for the video asset store.
    """

    host: Optional[str] = Field(
        default=None,
        description="PostgreSQL server hostname (unused when connection_string_override is set)"
    )

    port: int = Field(
        default=DatabaseDefaults.PORT,
        ge=1,
        le=65535,
        description="PostgreSQL server port number"
    )

    user: Optional[str] = Field(
        default=None,
        description="PostgreSQL username"
    )

    password: Optional[str] = Field(
        default=None,
        repr=False,
        description="PostgreSQL password from POSTGIS_PASSWORD environment variable"
    )

    database: Optional[str] = Field(
        default=None,
        description="PostgreSQL database name"
    )

    app_schema: str = Field(
        default=DatabaseDefaults.APP_SCHEMA,
        description="Schema holding the video_assets table"
    )

    video_asset_table: str = Field(
        default=DatabaseDefaults.VIDEO_ASSET_TABLE,
        description="Table name for video assets"
    )

    connection_timeout_seconds: int = Field(
        default=DatabaseDefaults.CONNECTION_TIMEOUT_SECONDS,
        ge=1,
        description="Seconds to wait for a connection before failing"
    )

    connection_string_override: Optional[str] = Field(
        default=None,
        repr=False,
        description="Complete connection string (POSTGRESQL_CONNECTION_STRING)"
    )

    @property
    def connection_string(self) -> str:
        """
        Build the libpq connection string.

        Raises:
            ConfigurationError: If neither an override nor host/database are set
        """
        if self.connection_string_override:
            return self.connection_string_override

        if not self.host or not self.database:
            raise ConfigurationError(
                "POSTGIS_HOST and POSTGIS_DATABASE are required "
                "(or set POSTGRESQL_CONNECTION_STRING)"
            )

        parts = [f"host={self.host}", f"port={self.port}", f"dbname={self.database}"]
        if self.user:
            parts.append(f"user={self.user}")
        if self.password:
            parts.append(f"password={self.password}")
        parts.append(f"connect_timeout={self.connection_timeout_seconds}")
        return " ".join(parts)

    def debug_dict(self) -> dict:
        """Debug-friendly representation with the password masked."""
        return {
            'host': self.host,
            'port': self.port,
            'user': self.user,
            'password': '***MASKED***' if self.password else None,
            'database': self.database,
            'app_schema': self.app_schema,
            'video_asset_table': self.video_asset_table,
            'connection_timeout_seconds': self.connection_timeout_seconds,
            'connection_string_override': '***MASKED***' if self.connection_string_override else None,
        }

    @classmethod
    def from_environment(cls) -> "DatabaseConfig":
        """Load from environment variables."""
        try:
            return cls(
                host=os.environ.get("POSTGIS_HOST"),
                port=int(os.environ.get("POSTGIS_PORT", str(DatabaseDefaults.PORT))),
                user=os.environ.get("POSTGIS_USER"),
                password=os.environ.get("POSTGIS_PASSWORD"),
                database=os.environ.get("POSTGIS_DATABASE"),
                app_schema=os.environ.get("APP_SCHEMA", DatabaseDefaults.APP_SCHEMA),
                video_asset_table=os.environ.get("VIDEO_ASSET_TABLE", DatabaseDefaults.VIDEO_ASSET_TABLE),
                connection_timeout_seconds=int(os.environ.get(
                    "DB_CONNECTION_TIMEOUT", str(DatabaseDefaults.CONNECTION_TIMEOUT_SECONDS)
                )),
                connection_string_override=os.environ.get("POSTGRESQL_CONNECTION_STRING"),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid database configuration: {e}") from e


def get_postgres_connection_string(config: Optional[DatabaseConfig] = None) -> str:
    """
    Get the asset store connection string.

    Args:
        config: Optional DatabaseConfig (loaded from environment if not provided)

    Returns:
        libpq connection string
    """
    if config is None:
        config = DatabaseConfig.from_environment()
    return config.connection_string
