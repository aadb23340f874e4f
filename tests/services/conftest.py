"""
Service test fixtures: in-memory store, scripted transcoding service,
coupled fake clocks and an orchestrator wired to all three.
"""

import random

import pytest

from config import AppConfig
from config.encoding_config import EncodingConfig
from config.transcode_config import TranscodeConfig
from core.logic.output_resolver import OutputResolver
from tests.fakes import FakeAssetRepository, FakeEncodingService, FakeTime

ROLE_ARN = "arn:aws:iam::123456789012:role/test-mediaconvert"


@pytest.fixture
def fake_time():
    return FakeTime()


@pytest.fixture
def repo():
    return FakeAssetRepository()


@pytest.fixture
def encoder():
    return FakeEncodingService()


@pytest.fixture
def encoding_config():
    return EncodingConfig(
        region="us-east-1",
        s3_region="us-east-1",
        output_bucket="test-transcoded",
        output_prefix="transcoded/pool",
        role_arn=ROLE_ARN,
    )


@pytest.fixture
def resolver(encoding_config):
    return OutputResolver.from_config(encoding_config)


@pytest.fixture
def make_transcode_config():
    """Factory: TranscodeConfig with zero delays unless overridden."""
    def _make(**overrides) -> TranscodeConfig:
        values = {
            "submit_delay": 0.0,
            "submit_jitter": 0.0,
            "batch_cooldown": 0.0,
            "poll_interval": 0.0,
            "poll_delay": 0.0,
            "rate_limit_backoff": 0.0,
        }
        values.update(overrides)
        return TranscodeConfig(**values)
    return _make


@pytest.fixture
def make_orchestrator(repo, encoder, encoding_config, fake_time, make_transcode_config):
    """Factory: TranscodeOrchestrator over the fakes, with TranscodeConfig overrides."""
    from services.transcode_orchestrator import TranscodeOrchestrator

    def _make(**overrides):
        config = AppConfig(encoding=encoding_config, transcode=make_transcode_config(**overrides))
        return TranscodeOrchestrator(
            config=config,
            repository=repo,
            encoder=encoder,
            sleep=fake_time.sleep,
            clock=fake_time.clock,
            monotonic=fake_time.monotonic,
            rng=random.Random(3),
        )
    return _make
