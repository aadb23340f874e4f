"""
Unit test fixtures: factory-built models.
"""

import pytest

from tests.factories.model_factories import make_video_asset, make_processing_asset


@pytest.fixture
def candidate_asset():
    """Return a randomized ready asset that needs transcoding."""
    return make_video_asset()


@pytest.fixture
def processing_asset(epoch):
    """Return a randomized processing asset submitted two minutes before epoch."""
    from datetime import timedelta
    return make_processing_asset(submitted_at=epoch - timedelta(minutes=2))
