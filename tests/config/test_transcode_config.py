"""
Configuration loading tests.

Defaults, environment overrides, bounds and the ConfigurationError
raised for unusable values.
"""

import pytest
from pydantic import ValidationError

from config import AppConfig, TranscodeConfig, debug_config, get_config, reset_config
from config.database_config import DatabaseConfig, get_postgres_connection_string
from config.defaults import TranscodeDefaults
from config.encoding_config import EncodingConfig
from exceptions import ConfigurationError


class TestTranscodeConfig:

    def test_defaults(self, clean_env):
        config = TranscodeConfig.from_environment()
        assert config.enabled is True
        assert config.max_batch_size == TranscodeDefaults.MAX_BATCH_SIZE == 20
        assert config.max_concurrent_submissions == 3
        assert config.stuck_threshold == 900
        assert config.submission_grace == 0
        assert config.target_resolution == 480

    def test_environment_overrides(self, clean_env):
        clean_env.setenv("TRANSCODE_MAX_BATCH_SIZE", "50")
        clean_env.setenv("TRANSCODE_MAX_CONCURRENT_SUBMISSIONS", "5")
        clean_env.setenv("TRANSCODE_SUBMIT_DELAY", "1.5")
        clean_env.setenv("TRANSCODE_STUCK_THRESHOLD", "600")
        clean_env.setenv("TRANSCODE_TARGET_RESOLUTION", "720")
        clean_env.setenv("TRANSCODE_ENABLED", "FALSE")

        config = TranscodeConfig.from_environment()
        assert config.max_batch_size == 50
        assert config.max_concurrent_submissions == 5
        assert config.submit_delay == 1.5
        assert config.stuck_threshold == 600
        assert config.target_resolution == 720
        assert config.enabled is False

    @pytest.mark.parametrize("var,value", [
        ("TRANSCODE_MAX_BATCH_SIZE", "twenty"),
        ("TRANSCODE_MAX_BATCH_SIZE", "0"),
        ("TRANSCODE_SUBMIT_DELAY", "-1"),
        ("TRANSCODE_STUCK_THRESHOLD", "0"),
        ("TRANSCODE_TARGET_RESOLUTION", "99999"),
        ("TRANSCODE_MAX_POLL_ATTEMPTS", "0"),
    ])
    def test_bad_values_raise_configuration_error(self, clean_env, var, value):
        clean_env.setenv(var, value)
        with pytest.raises(ConfigurationError):
            TranscodeConfig.from_environment()

    def test_window_cannot_exceed_batch(self, clean_env):
        clean_env.setenv("TRANSCODE_MAX_BATCH_SIZE", "2")
        clean_env.setenv("TRANSCODE_MAX_CONCURRENT_SUBMISSIONS", "3")
        with pytest.raises(ConfigurationError, match="max_concurrent_submissions"):
            TranscodeConfig.from_environment()

    def test_frozen_for_the_invocation(self):
        config = TranscodeConfig()
        with pytest.raises(ValidationError):
            config.max_batch_size = 99


class TestEncodingConfig:

    def test_s3_region_defaults_to_aws_region(self, clean_env):
        clean_env.setenv("AWS_REGION", "eu-central-1")
        config = EncodingConfig.from_environment()
        assert config.region == "eu-central-1"
        assert config.s3_region == "eu-central-1"

    def test_prefix_slashes_stripped(self, clean_env):
        clean_env.setenv("TRANSCODE_OUTPUT_PREFIX", "/videos/out/")
        assert EncodingConfig.from_environment().output_prefix == "videos/out"

    def test_missing_role_fails_fast(self, clean_env):
        config = EncodingConfig.from_environment()
        assert config.role_arn is None
        with pytest.raises(ConfigurationError, match="AWS_MEDIACONVERT_ROLE"):
            config.require_role_arn()

    def test_role_present(self, clean_env):
        clean_env.setenv("AWS_MEDIACONVERT_ROLE", "arn:aws:iam::1:role/mc")
        assert EncodingConfig.from_environment().require_role_arn() == "arn:aws:iam::1:role/mc"

    def test_blank_endpoint_means_discovery(self, clean_env):
        clean_env.setenv("AWS_MEDIACONVERT_ENDPOINT", "")
        assert EncodingConfig.from_environment().endpoint_url is None


class TestDatabaseConfig:

    def test_connection_string_from_parts(self, clean_env):
        clean_env.setenv("POSTGIS_HOST", "db.internal")
        clean_env.setenv("POSTGIS_DATABASE", "media")
        clean_env.setenv("POSTGIS_USER", "svc")
        clean_env.setenv("POSTGIS_PASSWORD", "s3cret")

        conn = DatabaseConfig.from_environment().connection_string
        assert "host=db.internal" in conn
        assert "dbname=media" in conn
        assert "user=svc" in conn
        assert "password=s3cret" in conn

    def test_override_wins(self, clean_env):
        clean_env.setenv("POSTGRESQL_CONNECTION_STRING", "postgresql://u:p@h/d")
        clean_env.setenv("POSTGIS_HOST", "ignored")
        assert get_postgres_connection_string() == "postgresql://u:p@h/d"

    def test_missing_host_raises(self, clean_env):
        with pytest.raises(ConfigurationError):
            DatabaseConfig.from_environment().connection_string

    def test_bad_port_raises(self, clean_env):
        clean_env.setenv("POSTGIS_PORT", "not-a-port")
        with pytest.raises(ConfigurationError):
            DatabaseConfig.from_environment()

    def test_password_masked_in_debug_dict(self, clean_env):
        clean_env.setenv("POSTGIS_PASSWORD", "s3cret")
        assert DatabaseConfig.from_environment().debug_dict()["password"] == "***MASKED***"


class TestAppConfig:

    def test_singleton_until_reset(self, clean_env):
        first = get_config()
        assert get_config() is first
        reset_config()
        assert get_config() is not first

    def test_composes_domain_configs(self, clean_env):
        clean_env.setenv("APP_SCHEMA", "media")
        clean_env.setenv("LOG_LEVEL", "debug")
        config = AppConfig.from_environment()
        assert config.app_schema == "media"
        assert config.log_level == "DEBUG"
        assert isinstance(config.transcode, TranscodeConfig)

    def test_invalid_domain_config_propagates(self, clean_env):
        clean_env.setenv("TRANSCODE_POLL_DELAY", "soon")
        with pytest.raises(ConfigurationError):
            AppConfig.from_environment()

    def test_debug_config_hides_secrets(self, clean_env):
        clean_env.setenv("POSTGIS_PASSWORD", "s3cret")
        clean_env.setenv("AWS_MEDIACONVERT_ROLE", "arn:aws:iam::1:role/mc")
        info = debug_config()
        assert "s3cret" not in str(info)
        assert info["encoding"]["role_arn_set"] is True
        assert info["transcode"]["max_batch_size"] == 20

    def test_debug_config_reports_errors(self, clean_env):
        clean_env.setenv("TRANSCODE_MAX_BATCH_SIZE", "lots")
        assert "error" in debug_config()
