"""RepositoryFactory wiring. Nothing here opens a connection or builds a boto3 client."""

import pytest

from config import AppConfig, get_config
from config.database_config import DatabaseConfig
from config.transcode_config import TranscodeConfig
from exceptions import ConfigurationError
from infrastructure import RepositoryFactory, VideoAssetRepository, MediaConvertEncodingService


def test_dependencies_from_environment():
    deps = RepositoryFactory.create_transcode_dependencies()

    assert isinstance(deps['asset_repo'], VideoAssetRepository)
    assert isinstance(deps['encoding_service'], MediaConvertEncodingService)
    assert deps['asset_repo'].schema_name == get_config().app_schema
    assert "host=localhost" in deps['asset_repo'].conn_string


def test_request_timeout_comes_from_transcode_config():
    config = AppConfig(transcode=TranscodeConfig(request_timeout=12))
    service = RepositoryFactory.create_encoding_service(config)
    assert service.request_timeout == 12


def test_explicit_connection_string_and_schema_win():
    repo = RepositoryFactory.create_asset_repository(
        connection_string="postgresql://svc@db/media", schema_name="media", config=AppConfig()
    )
    assert repo.conn_string == "postgresql://svc@db/media"
    assert repo.schema_name == "media"


def test_missing_database_settings_fail_fast():
    config = AppConfig(database=DatabaseConfig(host=None, database=None))
    with pytest.raises(ConfigurationError, match="POSTGIS_HOST"):
        RepositoryFactory.create_asset_repository(config=config)
