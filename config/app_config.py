"""
Main Application Configuration.

Composes domain-specific configuration modules:
    - DatabaseConfig (asset store)
    - EncodingConfig (MediaConvert account, output bucket layout)
    - TranscodeConfig (batching, pacing, polling)

Exports:
    AppConfig: Main configuration class

Pattern:
    Composition over inheritance - domain configs are composed, not inherited.
"""

import os
from pydantic import BaseModel, Field

from exceptions import ConfigurationError
from .database_config import DatabaseConfig
from .encoding_config import EncodingConfig
from .transcode_config import TranscodeConfig
from .defaults import AppDefaults


# ============================================================================
# APPLICATION CONFIGURATION
# ============================================================================

class AppConfig(BaseModel):
    """
    Application configuration - composition of domain configs.

    Usage:
        config = AppConfig.from_environment()
        config.transcode.max_batch_size
        config.encoding.output_bucket
        config.database.app_schema
    """

    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig,
        description="Asset store configuration"
    )

    encoding: EncodingConfig = Field(
        default_factory=EncodingConfig,
        description="MediaConvert and output layout configuration"
    )

    transcode: TranscodeConfig = Field(
        default_factory=TranscodeConfig,
        description="Orchestration tuning values"
    )

    environment: str = Field(
        default=AppDefaults.ENVIRONMENT,
        description="Deployment environment name (dev, qa, prod)"
    )

    debug_mode: bool = Field(
        default=AppDefaults.DEBUG_MODE,
        description="Enables verbose diagnostics"
    )

    log_level: str = Field(
        default=AppDefaults.LOG_LEVEL,
        description="Root log level"
    )

    # ========================================================================
    # Convenience accessors used by the repositories
    # ========================================================================

    @property
    def postgis_connection_string(self) -> str:
        return self.database.connection_string

    @property
    def app_schema(self) -> str:
        return self.database.app_schema

    @classmethod
    def from_environment(cls) -> "AppConfig":
        """
        Load all domain configs from environment variables.

        Raises:
            ConfigurationError: If any domain config is invalid
        """
        try:
            return cls(
                database=DatabaseConfig.from_environment(),
                encoding=EncodingConfig.from_environment(),
                transcode=TranscodeConfig.from_environment(),
                environment=os.environ.get("ENVIRONMENT", AppDefaults.ENVIRONMENT),
                debug_mode=os.environ.get("DEBUG_MODE", "false").lower() == "true",
                log_level=os.environ.get("LOG_LEVEL", AppDefaults.LOG_LEVEL).upper(),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid application configuration: {e}") from e
