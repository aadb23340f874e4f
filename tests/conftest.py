"""
Root conftest.py: sys.path, env vars, shared fixtures.

Sets up the test environment so all production code can be imported
without a database or AWS credentials.
"""

import os
import sys
from datetime import datetime, timezone

import pytest

# Add project root to sys.path so 'core', 'config', 'services', etc. are importable
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest.fixture(autouse=True, scope="session")
def set_minimal_env_vars():
    """
    Set minimal environment variables to prevent import crashes.

    Nothing connects during tests; these only let config objects build.
    """
    defaults = {
        "POSTGIS_HOST": "localhost",
        "POSTGIS_DATABASE": "testdb",
        "APP_SCHEMA": "app",
        "AWS_REGION": "us-east-1",
        "AWS_S3_OUTPUT_BUCKET": "test-transcoded",
        "AWS_MEDIACONVERT_ROLE": "arn:aws:iam::123456789012:role/test-mediaconvert",
        "AWS_MEDIACONVERT_ENDPOINT": "https://test.mediaconvert.us-east-1.amazonaws.com",
        "AWS_ACCESS_KEY_ID": "testing",
        "AWS_SECRET_ACCESS_KEY": "testing",
        "ENVIRONMENT": "dev",
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


@pytest.fixture(autouse=True)
def fresh_config():
    """Each test sees the environment as it is now, not a cached singleton."""
    from config import reset_config
    reset_config()
    yield
    reset_config()


@pytest.fixture
def epoch():
    """Fixed 'now' for clock-driven tests."""
    return datetime(2026, 3, 2, 12, 0, 0, tzinfo=timezone.utc)
