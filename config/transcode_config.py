"""
Transcode Orchestration Configuration.

Batch sizes, pacing, polling and stuck-job thresholds for the transcode
orchestrator. The model is frozen: one instance is built per invocation
and passed to every component, so a pass never sees settings change
under it.

All durations are in seconds.

Environment Variables:
    TRANSCODE_ENABLED: Master switch (default true)
    TRANSCODE_MAX_BATCH_SIZE: Candidates considered per pass (default 20)
    TRANSCODE_MAX_CONCURRENT_SUBMISSIONS: Submissions per window (default 3)
    TRANSCODE_SUBMIT_DELAY: Delay between submissions (default 0.5)
    TRANSCODE_SUBMIT_JITTER: Random extra delay upper bound (default 0.5)
    TRANSCODE_BATCH_COOLDOWN: Delay between submission windows (default 5)
    TRANSCODE_POLL_INTERVAL: Delay between monitor rounds (default 30)
    TRANSCODE_POLL_DELAY: Delay between status checks (default 0.5)
    TRANSCODE_MAX_POLL_ATTEMPTS: Monitor rounds before giving up (default 40)
    TRANSCODE_STUCK_THRESHOLD: Age after which a job is flagged (default 900)
    TRANSCODE_RATE_LIMIT_BACKOFF: Wait after throttling (default 10)
    TRANSCODE_REQUEST_TIMEOUT: Per-call timeout (default 30)
    TRANSCODE_MAX_PASS_DURATION: Ceiling for one pass (default 480)
    TRANSCODE_SUBMISSION_GRACE: Age before a job-less claim is failed (default 0)
    TRANSCODE_TARGET_RESOLUTION: Output height (default 480)

Exports:
    TranscodeConfig: Orchestration configuration
"""

import os
from pydantic import BaseModel, ConfigDict, Field, model_validator

from exceptions import ConfigurationError
from .defaults import TranscodeDefaults


class TranscodeConfig(BaseModel):
    """
    Orchestrator tuning values.

    Defaults mirror the values the transcoding account tolerates without
    sustained throttling.
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(
        default=True,
        description="Master switch; disabled passes return an empty summary"
    )

    max_batch_size: int = Field(
        default=TranscodeDefaults.MAX_BATCH_SIZE,
        ge=1,
        le=500,
        description="Maximum candidates considered in one processing pass"
    )

    max_concurrent_submissions: int = Field(
        default=TranscodeDefaults.MAX_CONCURRENT_SUBMISSIONS,
        ge=1,
        le=50,
        description="Submissions per window before a batch cooldown"
    )

    submit_delay: float = Field(
        default=TranscodeDefaults.SUBMIT_DELAY,
        ge=0,
        description="Delay between consecutive submissions"
    )

    submit_jitter: float = Field(
        default=TranscodeDefaults.SUBMIT_JITTER,
        ge=0,
        description="Upper bound of the random delay added to submit_delay"
    )

    batch_cooldown: float = Field(
        default=TranscodeDefaults.BATCH_COOLDOWN,
        ge=0,
        description="Delay between submission windows"
    )

    poll_interval: float = Field(
        default=TranscodeDefaults.POLL_INTERVAL,
        ge=0,
        description="Delay between rounds of synchronous monitoring"
    )

    poll_delay: float = Field(
        default=TranscodeDefaults.POLL_DELAY,
        ge=0,
        description="Delay between consecutive status checks in a pass"
    )

    max_poll_attempts: int = Field(
        default=TranscodeDefaults.MAX_POLL_ATTEMPTS,
        ge=1,
        description="Rounds of synchronous monitoring before giving up"
    )

    stuck_threshold: float = Field(
        default=TranscodeDefaults.STUCK_THRESHOLD,
        gt=0,
        description="Seconds since submission after which a job is flagged possibly stuck"
    )

    rate_limit_backoff: float = Field(
        default=TranscodeDefaults.RATE_LIMIT_BACKOFF,
        ge=0,
        description="Wait after the transcoding service throttles a call"
    )

    request_timeout: float = Field(
        default=TranscodeDefaults.REQUEST_TIMEOUT,
        gt=0,
        description="Timeout applied to each transcoding service call"
    )

    max_pass_duration: float = Field(
        default=TranscodeDefaults.MAX_PASS_DURATION,
        gt=0,
        description="Ceiling on one pass; assets not reached are deferred"
    )

    submission_grace: float = Field(
        default=TranscodeDefaults.SUBMISSION_GRACE,
        ge=0,
        description="Age a processing asset without a job id may reach before it is failed"
    )

    target_resolution: int = Field(
        default=TranscodeDefaults.TARGET_RESOLUTION,
        ge=144,
        le=2160,
        description="Output height in pixels"
    )

    @model_validator(mode='after')
    def check_window(self) -> "TranscodeConfig":
        if self.max_concurrent_submissions > self.max_batch_size:
            raise ValueError(
                f"max_concurrent_submissions ({self.max_concurrent_submissions}) "
                f"cannot exceed max_batch_size ({self.max_batch_size})"
            )
        return self

    def debug_dict(self) -> dict:
        """Debug-friendly representation."""
        return self.model_dump()

    @classmethod
    def from_environment(cls) -> "TranscodeConfig":
        """
        Load configuration from environment variables.

        Raises:
            ConfigurationError: If a value is not numeric or out of bounds
        """
        env = os.environ
        try:
            return cls(
                enabled=env.get("TRANSCODE_ENABLED", "true").lower() == "true",
                max_batch_size=int(env.get(
                    "TRANSCODE_MAX_BATCH_SIZE", str(TranscodeDefaults.MAX_BATCH_SIZE))),
                max_concurrent_submissions=int(env.get(
                    "TRANSCODE_MAX_CONCURRENT_SUBMISSIONS", str(TranscodeDefaults.MAX_CONCURRENT_SUBMISSIONS))),
                submit_delay=float(env.get(
                    "TRANSCODE_SUBMIT_DELAY", str(TranscodeDefaults.SUBMIT_DELAY))),
                submit_jitter=float(env.get(
                    "TRANSCODE_SUBMIT_JITTER", str(TranscodeDefaults.SUBMIT_JITTER))),
                batch_cooldown=float(env.get(
                    "TRANSCODE_BATCH_COOLDOWN", str(TranscodeDefaults.BATCH_COOLDOWN))),
                poll_interval=float(env.get(
                    "TRANSCODE_POLL_INTERVAL", str(TranscodeDefaults.POLL_INTERVAL))),
                poll_delay=float(env.get(
                    "TRANSCODE_POLL_DELAY", str(TranscodeDefaults.POLL_DELAY))),
                max_poll_attempts=int(env.get(
                    "TRANSCODE_MAX_POLL_ATTEMPTS", str(TranscodeDefaults.MAX_POLL_ATTEMPTS))),
                stuck_threshold=float(env.get(
                    "TRANSCODE_STUCK_THRESHOLD", str(TranscodeDefaults.STUCK_THRESHOLD))),
                rate_limit_backoff=float(env.get(
                    "TRANSCODE_RATE_LIMIT_BACKOFF", str(TranscodeDefaults.RATE_LIMIT_BACKOFF))),
                request_timeout=float(env.get(
                    "TRANSCODE_REQUEST_TIMEOUT", str(TranscodeDefaults.REQUEST_TIMEOUT))),
                max_pass_duration=float(env.get(
                    "TRANSCODE_MAX_PASS_DURATION", str(TranscodeDefaults.MAX_PASS_DURATION))),
                submission_grace=float(env.get(
                    "TRANSCODE_SUBMISSION_GRACE", str(TranscodeDefaults.SUBMISSION_GRACE))),
                target_resolution=int(env.get(
                    "TRANSCODE_TARGET_RESOLUTION", str(TranscodeDefaults.TARGET_RESOLUTION))),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid transcode configuration: {e}") from e
