"""
Infrastructure Package - Lazy Loading Implementation.

Provides the asset store and transcoding service implementations with lazy
loading to prevent premature initialization of configuration and clients.

Azure Functions imports function_app.py on every cold start, before the
runtime guarantees that application settings are available. Importing this
package must therefore not read the environment, open connections or
build boto3 clients; the actual import happens when a name is first used.

Exports:
    RepositoryFactory: Central creation point
    VideoAssetRepository: Asset store on PostgreSQL
    MediaConvertEncodingService: Transcoding service on MediaConvert
    PostgreSQLRepository, BaseRepository: Repository bases
    IAssetRepository, IEncodingService: Contracts
    VideoAssetSchemaDeployer: DDL deployment
"""

from typing import TYPE_CHECKING

# For type checking only - doesn't actually import at runtime
if TYPE_CHECKING:
    from .factory import RepositoryFactory as _RepositoryFactory
    from .asset_repository import VideoAssetRepository as _VideoAssetRepository
    from .mediaconvert import MediaConvertEncodingService as _MediaConvertEncodingService
    from .postgresql import PostgreSQLRepository as _PostgreSQLRepository
    from .base import BaseRepository as _BaseRepository
    from .interface_repository import (
        IAssetRepository as _IAssetRepository,
        IEncodingService as _IEncodingService,
    )
    from .video_asset_schema import VideoAssetSchemaDeployer as _VideoAssetSchemaDeployer


def __getattr__(name: str):
    """
    Lazy import mechanism - only imports when actually accessed.
    This prevents module-level code execution until needed.
    """
    if name == "RepositoryFactory":
        from .factory import RepositoryFactory
        return RepositoryFactory

    # Asset store
    elif name == "VideoAssetRepository":
        from .asset_repository import VideoAssetRepository
        return VideoAssetRepository
    elif name == "PostgreSQLRepository":
        from .postgresql import PostgreSQLRepository
        return PostgreSQLRepository
    elif name == "BaseRepository":
        from .base import BaseRepository
        return BaseRepository
    elif name == "VideoAssetSchemaDeployer":
        from .video_asset_schema import VideoAssetSchemaDeployer
        return VideoAssetSchemaDeployer

    # Transcoding service
    elif name == "MediaConvertEncodingService":
        from .mediaconvert import MediaConvertEncodingService
        return MediaConvertEncodingService

    # Interfaces
    elif name == "IAssetRepository":
        from .interface_repository import IAssetRepository
        return IAssetRepository
    elif name == "IEncodingService":
        from .interface_repository import IEncodingService
        return IEncodingService

    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    'RepositoryFactory',
    'VideoAssetRepository',
    'PostgreSQLRepository',
    'BaseRepository',
    'VideoAssetSchemaDeployer',
    'MediaConvertEncodingService',
    'IAssetRepository',
    'IEncodingService',
]
