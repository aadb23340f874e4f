"""
Config test fixtures: clean environment via monkeypatch.
"""

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all env vars that config modules might read, for isolation."""
    env_vars_to_clear = [
        "POSTGIS_HOST", "POSTGIS_PORT", "POSTGIS_USER", "POSTGIS_PASSWORD",
        "POSTGIS_DATABASE", "APP_SCHEMA", "VIDEO_ASSET_TABLE",
        "DB_CONNECTION_TIMEOUT", "POSTGRESQL_CONNECTION_STRING",
        "AWS_REGION", "AWS_S3_REGION", "AWS_S3_OUTPUT_BUCKET",
        "AWS_MEDIACONVERT_ROLE", "AWS_MEDIACONVERT_ENDPOINT", "AWS_MEDIACONVERT_QUEUE",
        "TRANSCODE_OUTPUT_PREFIX", "TRANSCODE_UNSCOPED_SEGMENT",
        "TRANSCODE_ENABLED", "TRANSCODE_MAX_BATCH_SIZE", "TRANSCODE_MAX_CONCURRENT_SUBMISSIONS",
        "TRANSCODE_SUBMIT_DELAY", "TRANSCODE_SUBMIT_JITTER", "TRANSCODE_BATCH_COOLDOWN",
        "TRANSCODE_POLL_INTERVAL", "TRANSCODE_POLL_DELAY", "TRANSCODE_MAX_POLL_ATTEMPTS",
        "TRANSCODE_STUCK_THRESHOLD", "TRANSCODE_RATE_LIMIT_BACKOFF", "TRANSCODE_REQUEST_TIMEOUT",
        "TRANSCODE_MAX_PASS_DURATION", "TRANSCODE_SUBMISSION_GRACE", "TRANSCODE_TARGET_RESOLUTION",
        "ENVIRONMENT", "DEBUG_MODE", "LOG_LEVEL",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
