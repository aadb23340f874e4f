"""
AWS Elemental MediaConvert Encoding Service.

IEncodingService implementation on boto3. Builds single-output MP4 jobs
from a TargetProfile and reads job status back as RemoteJob snapshots.

Endpoint discovery:
    MediaConvert historically requires an account-specific endpoint.
    AWS_MEDIACONVERT_ENDPOINT wins when set; otherwise describe_endpoints
    is called once per region and cached for the life of the worker.

Timeouts and retries:
    Each call is bounded by the request timeout (botocore connect/read
    timeouts). SDK retries are disabled so that the orchestrator's own
    pacing and rate-limit backoff govern the call rate.

Error mapping:
    TooManyRequests / Throttling / HTTP 429   -> RateLimitError
    BadRequest / Forbidden / Conflict / 404   -> SubmissionRejectedError (create only)
    Any other ClientError / BotoCoreError     -> EncodingServiceError
    Missing job id or unknown status          -> MalformedResponseError

Exports:
    MediaConvertEncodingService: IEncodingService on MediaConvert
    build_job_settings: Pure CreateJob request builder
"""

import threading
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from config.defaults import EncodingDefaults, TranscodeDefaults
from config.encoding_config import EncodingConfig
from core.models import RemoteJob, RemoteJobStatus, TargetProfile
from exceptions import (
    EncodingServiceError,
    MalformedResponseError,
    RateLimitError,
    SubmissionRejectedError,
)
from util_logger import LoggerFactory, ComponentType
from .interface_repository import IEncodingService

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "MediaConvertEncodingService")

AUDIO_SELECTOR = "Audio Selector 1"

# Rejections that will not succeed on resubmission
_REJECTION_CODES = (
    "BadRequestException",
    "ForbiddenException",
    "ConflictException",
    "NotFoundException",
)
_REJECTION_HTTP_STATUSES = (400, 403, 404, 409)

# Discovered account endpoints, keyed by region
_endpoint_cache: Dict[str, str] = {}
_endpoint_lock = threading.Lock()


# ============================================================================
# JOB SETTINGS
# ============================================================================

def build_job_settings(
    source_location: str,
    destination: str,
    profile: TargetProfile,
    role_arn: str,
    correlation: Dict[str, str],
    queue: Optional[str] = None
) -> Dict[str, Any]:
    """
    Build CreateJob keyword arguments for one asset.

    The service names its output {destination}{NameModifier}.mp4, so with
    the resolver's destination base the object lands exactly where the
    reconciler will later point media_location.

    Args:
        source_location: S3 URI of the original upload
        destination: S3 URI base (no extension) from the OutputResolver
        profile: Target encoding parameters
        role_arn: IAM role MediaConvert assumes
        correlation: String payload echoed back on status checks
        queue: Optional queue ARN

    Returns:
        Dict of keyword arguments for client.create_job()
    """
    output = {
        "NameModifier": profile.name_modifier,
        "Extension": profile.container,
        "ContainerSettings": {
            "Container": "MP4",
            "Mp4Settings": {
                "CslgAtom": "INCLUDE",
                "FreeSpaceBox": "EXCLUDE",
                "MoovPlacement": "PROGRESSIVE_DOWNLOAD",
            },
        },
        "VideoDescription": {
            "Width": profile.width,
            "Height": profile.height,
            "ScalingBehavior": "DEFAULT",
            "CodecSettings": {
                "Codec": "H_264",
                "H264Settings": {
                    "RateControlMode": "QVBR",
                    "QvbrSettings": {"QvbrQualityLevel": profile.qvbr_quality_level},
                    "MaxBitrate": profile.video_max_bitrate,
                    "GopSize": float(profile.gop_size_frames),
                    "GopSizeUnits": "FRAMES",
                    "CodecProfile": "MAIN",
                    "CodecLevel": "AUTO",
                    "QualityTuningLevel": "SINGLE_PASS_HQ",
                },
            },
        },
        "AudioDescriptions": [
            {
                "AudioSourceName": AUDIO_SELECTOR,
                "CodecSettings": {
                    "Codec": "AAC",
                    "AacSettings": {
                        "Bitrate": profile.audio_bitrate,
                        "CodingMode": "CODING_MODE_2_0",
                        "SampleRate": profile.audio_sample_rate,
                        "RateControlMode": "CBR",
                        "CodecProfile": "LC",
                        "RawFormat": "NONE",
                        "Specification": "MPEG4",
                    },
                },
            }
        ],
    }

    input_settings = {
        "FileInput": source_location,
        "AudioSelectors": {AUDIO_SELECTOR: {"DefaultSelection": "DEFAULT"}},
        "VideoSelector": {"ColorSpace": "FOLLOW", "Rotate": "AUTO"},
        "TimecodeSource": "ZEROBASED",
    }

    create_kwargs: Dict[str, Any] = {
        "Role": role_arn,
        "Settings": {
            "Inputs": [input_settings],
            "OutputGroups": [
                {
                    "Name": "File Group",
                    "OutputGroupSettings": {
                        "Type": "FILE_GROUP_SETTINGS",
                        "FileGroupSettings": {"Destination": destination},
                    },
                    "Outputs": [output],
                }
            ],
        },
        "AccelerationSettings": {"Mode": "PREFERRED"},
        "StatusUpdateInterval": EncodingDefaults.STATUS_UPDATE_INTERVAL,
        "Priority": EncodingDefaults.JOB_PRIORITY,
        "UserMetadata": {k: str(v) for k, v in correlation.items() if v is not None},
    }
    if queue:
        create_kwargs["Queue"] = queue

    return create_kwargs


# ============================================================================
# SERVICE
# ============================================================================

class MediaConvertEncodingService(IEncodingService):
    """
    Transcoding service backed by AWS Elemental MediaConvert.

    Thread-safe: the boto3 client is created once under a lock and boto3
    clients may be shared between threads.
    """

    def __init__(
        self,
        config: EncodingConfig,
        request_timeout: float = TranscodeDefaults.REQUEST_TIMEOUT,
        client: Optional[Any] = None
    ):
        """
        Args:
            config: MediaConvert account and output settings
            request_timeout: Seconds allowed per call
            client: Pre-built mediaconvert client (tests pass a stubbed one)
        """
        self.config = config
        self.request_timeout = request_timeout
        self._client = client
        self._client_lock = threading.Lock()
        self._boto_config = BotoConfig(
            connect_timeout=request_timeout,
            read_timeout=request_timeout,
            retries={"total_max_attempts": 1, "mode": "standard"},
        )

    # ========================================================================
    # CLIENT
    # ========================================================================

    def _get_client(self):
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    endpoint = self._resolve_endpoint()
                    self._client = boto3.client(
                        "mediaconvert",
                        region_name=self.config.region,
                        endpoint_url=endpoint,
                        config=self._boto_config,
                    )
                    logger.info(f"🎬 MediaConvert client ready: {endpoint}")
        return self._client

    def _resolve_endpoint(self) -> str:
        """Configured endpoint, else the cached or discovered account endpoint."""
        if self.config.endpoint_url:
            return self.config.endpoint_url

        region = self.config.region
        with _endpoint_lock:
            cached = _endpoint_cache.get(region)
            if cached:
                return cached

            probe = boto3.client("mediaconvert", region_name=region, config=self._boto_config)
            try:
                resp = probe.describe_endpoints(MaxResults=1)
            except (BotoCoreError, ClientError) as e:
                raise self._map_error(e, "endpoint discovery") from e

            endpoints = resp.get("Endpoints") or []
            url = endpoints[0].get("Url") if endpoints else None
            if not url:
                raise MalformedResponseError(
                    "Could not discover MediaConvert endpoint; set AWS_MEDIACONVERT_ENDPOINT"
                )
            _endpoint_cache[region] = url
            logger.info(f"🔎 Discovered MediaConvert endpoint for {region}: {url}")
            return url

    # ========================================================================
    # IEncodingService
    # ========================================================================

    def create_job(
        self,
        source_location: str,
        destination: str,
        profile: TargetProfile,
        correlation: Dict[str, str]
    ) -> str:
        """
        Submit a transcoding job.

        Returns:
            MediaConvert job id

        Raises:
            ConfigurationError: If no MediaConvert role is configured
            RateLimitError, SubmissionRejectedError, EncodingServiceError,
            MalformedResponseError: See module docstring
        """
        create_kwargs = build_job_settings(
            source_location=source_location,
            destination=destination,
            profile=profile,
            role_arn=self.config.require_role_arn(),
            correlation=correlation,
            queue=self.config.queue,
        )

        try:
            resp = self._get_client().create_job(**create_kwargs)
        except ClientError as e:
            raise self._map_error(e, "create_job", rejectable=True) from e
        except BotoCoreError as e:
            raise self._map_error(e, "create_job") from e

        job_id = (resp.get("Job") or {}).get("Id")
        if not job_id:
            raise MalformedResponseError("MediaConvert create_job response has no Job.Id")

        logger.debug(f"📤 MediaConvert job {job_id} created for {destination}")
        return str(job_id)

    def get_job(self, job_id: str) -> RemoteJob:
        """
        Current state of a MediaConvert job.

        Raises:
            RateLimitError, EncodingServiceError, MalformedResponseError
        """
        try:
            resp = self._get_client().get_job(Id=job_id)
        except (BotoCoreError, ClientError) as e:
            raise self._map_error(e, "get_job") from e

        job = resp.get("Job") or {}
        raw_status = str(job.get("Status") or "").strip().upper()
        try:
            status = RemoteJobStatus(raw_status)
        except ValueError as e:
            raise MalformedResponseError(
                f"MediaConvert job {job_id} has unknown status {raw_status!r}"
            ) from e

        try:
            return RemoteJob(
                job_id=str(job.get("Id") or job_id),
                status=status,
                percent_complete=job.get("JobPercentComplete"),
                error_message=job.get("ErrorMessage"),
                error_code=job.get("ErrorCode"),
                user_metadata=job.get("UserMetadata") or {},
            )
        except ValidationError as e:
            raise MalformedResponseError(
                f"MediaConvert job {job_id} returned unusable fields: {e.error_count()} validation error(s)"
            ) from e

    # ========================================================================
    # ERROR MAPPING
    # ========================================================================

    @staticmethod
    def _map_error(error: Exception, operation: str, rejectable: bool = False) -> EncodingServiceError:
        if isinstance(error, ClientError):
            code = error.response.get("Error", {}).get("Code", "")
            message = error.response.get("Error", {}).get("Message", str(error))
            http_status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")

            if code in EncodingDefaults.RATE_LIMIT_ERROR_CODES or http_status == 429:
                logger.warning(f"⏳ MediaConvert throttled {operation}: {code}")
                return RateLimitError(f"MediaConvert {operation} throttled: {message}")

            if rejectable and (code in _REJECTION_CODES or http_status in _REJECTION_HTTP_STATUSES):
                return SubmissionRejectedError(f"MediaConvert rejected job: {message}")

            return EncodingServiceError(f"MediaConvert {operation} failed ({code or http_status}): {message}")

        return EncodingServiceError(f"MediaConvert {operation} failed: {type(error).__name__}: {error}")


__all__ = [
    'MediaConvertEncodingService',
    'build_job_settings',
]
