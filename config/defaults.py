"""
Configuration Defaults - Single source of truth for all default values.

Organization:
    - DatabaseDefaults: Asset store connection and table names
    - EncodingDefaults: MediaConvert account, bucket and output layout
    - ProfileDefaults: Encoding parameters of the 480p web profile
    - TranscodeDefaults: Batch sizes, pacing and polling limits
    - AppDefaults: Application-level settings

Usage:
    from config.defaults import TranscodeDefaults

    # In Pydantic Field definitions:
    max_batch_size: int = Field(default=TranscodeDefaults.MAX_BATCH_SIZE, ...)

All durations are in seconds.
"""


# =============================================================================
# DATABASE DEFAULTS
# =============================================================================

class DatabaseDefaults:
    """
    Asset store connection defaults.

    The video asset table lives in the application schema next to the
    other application tables.
    """

    PORT = 5432
    APP_SCHEMA = "app"
    VIDEO_ASSET_TABLE = "video_assets"
    CONNECTION_TIMEOUT_SECONDS = 30


# =============================================================================
# ENCODING SERVICE DEFAULTS
# =============================================================================

class EncodingDefaults:
    """
    AWS Elemental MediaConvert defaults.

    AWS_MEDIACONVERT_ROLE has no default: job submission fails fast with
    ConfigurationError when it is not set.
    """

    REGION = "us-east-1"
    OUTPUT_BUCKET = "video-analysis-transcoded"
    OUTPUT_PREFIX = "transcoded/pool"

    # Scope segment used for assets that have no project
    UNSCOPED_SEGMENT = "unscoped"

    STATUS_UPDATE_INTERVAL = "SECONDS_10"
    JOB_PRIORITY = 0

    # Error codes MediaConvert and the AWS SDK use for throttling
    RATE_LIMIT_ERROR_CODES = (
        "TooManyRequestsException",
        "ThrottlingException",
        "Throttling",
        "RequestLimitExceeded",
    )


# =============================================================================
# ENCODING PROFILE DEFAULTS
# =============================================================================

class ProfileDefaults:
    """H.264/AAC MP4 profile for browser playback."""

    TARGET_HEIGHT = 480
    ASPECT_WIDTH = 16
    ASPECT_HEIGHT = 9
    VIDEO_MAX_BITRATE = 2_000_000
    VIDEO_MAX_BITRATE_HD = 3_000_000  # 720p and above
    QVBR_QUALITY_LEVEL = 5
    GOP_SIZE_FRAMES = 60
    AUDIO_BITRATE = 96_000
    AUDIO_SAMPLE_RATE = 48_000
    CONTAINER = "mp4"
    CODEC = "h264"


# =============================================================================
# TRANSCODE ORCHESTRATION DEFAULTS
# =============================================================================

class TranscodeDefaults:
    """
    Batch and pacing defaults for the transcode orchestrator.

    The transcoding service throttles aggressively; submissions go out a
    few at a time with delays, and the reconciler polls one job at a time.
    """

    MAX_BATCH_SIZE = 20
    MAX_CONCURRENT_SUBMISSIONS = 3

    SUBMIT_DELAY = 0.5
    SUBMIT_JITTER = 0.5
    BATCH_COOLDOWN = 5.0

    POLL_INTERVAL = 30.0
    POLL_DELAY = 0.5
    MAX_POLL_ATTEMPTS = 40

    STUCK_THRESHOLD = 15 * 60
    RATE_LIMIT_BACKOFF = 10.0
    REQUEST_TIMEOUT = 30.0

    # Keeps one pass inside the Functions execution limit
    MAX_PASS_DURATION = 8 * 60

    # 0 = a processing asset without a job id is failed immediately
    SUBMISSION_GRACE = 0.0

    TARGET_RESOLUTION = ProfileDefaults.TARGET_HEIGHT

    # Window for "recently completed" in the status report
    RECENT_COMPLETION_WINDOW = 5 * 60


# =============================================================================
# APPLICATION DEFAULTS
# =============================================================================

class AppDefaults:
    """Application-level settings."""

    ENVIRONMENT = "dev"
    LOG_LEVEL = "INFO"
    DEBUG_MODE = False
