"""
Repository Factory.

Central creation point for the asset store and the transcoding service,
so entry points never construct infrastructure directly.

Exports:
    RepositoryFactory: Static factory methods
"""

from typing import Any, Dict, Optional

from config import AppConfig, get_config
from util_logger import LoggerFactory, ComponentType
from .asset_repository import VideoAssetRepository
from .mediaconvert import MediaConvertEncodingService

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "RepositoryFactory")


# ============================================================================
# REPOSITORY FACTORY - Central creation point
# ============================================================================

class RepositoryFactory:
    """
    Factory for creating infrastructure instances.

    Example:
        deps = RepositoryFactory.create_transcode_dependencies()
        repo = deps['asset_repo']
        encoder = deps['encoding_service']
    """

    @staticmethod
    def create_asset_repository(
        connection_string: Optional[str] = None,
        schema_name: Optional[str] = None,
        config: Optional[AppConfig] = None
    ) -> VideoAssetRepository:
        """Create the PostgreSQL asset store."""
        return VideoAssetRepository(connection_string, schema_name, config)

    @staticmethod
    def create_encoding_service(config: Optional[AppConfig] = None) -> MediaConvertEncodingService:
        """Create the MediaConvert transcoding service with the configured request timeout."""
        config = config or get_config()
        return MediaConvertEncodingService(
            config.encoding,
            request_timeout=config.transcode.request_timeout,
        )

    @staticmethod
    def create_transcode_dependencies(config: Optional[AppConfig] = None) -> Dict[str, Any]:
        """
        Create everything the transcode orchestrator talks to.

        Returns:
            Dictionary with asset_repo and encoding_service
        """
        config = config or get_config()
        logger.debug("🏭 Creating transcode dependencies")
        return {
            'asset_repo': RepositoryFactory.create_asset_repository(config=config),
            'encoding_service': RepositoryFactory.create_encoding_service(config),
        }
