"""
Repository Abstract Base Classes - Single Point of Truth.

Enforces exact method signatures across all asset store and transcoding
service implementations (PostgreSQL, MediaConvert, and the in-memory
fakes used by the test suite).

Philosophy: "Define once, enforce everywhere"

Exports:
    IAssetRepository: Asset store interface
    IEncodingService: Transcoding service interface
    ParamNames: Canonical correlation payload keys
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Final

from core.models import VideoAsset, TargetProfile, RemoteJob, TranscodingStats


# ============================================================================
# CANONICAL PARAMETER NAMES - Single source of truth
# ============================================================================

class ParamNames:
    """
    Keys of the correlation payload attached to every transcoding job.

    The service echoes this payload back on status checks, so a job found
    in the service console can be traced to its asset.
    """

    ASSET_ID: Final[str] = "asset_id"
    PROJECT_ID: Final[str] = "project_id"
    TARGET_HEIGHT: Final[str] = "target_height"
    ORIGINAL_FILENAME: Final[str] = "original_filename"


# ============================================================================
# ABSTRACT BASE CLASSES - Enforce exact signatures
# ============================================================================

class IAssetRepository(ABC):
    """
    Asset store interface with EXACT method signatures.

    Every mutating method is a conditional update: it returns False (or
    None) when the asset is no longer in the state the caller expected,
    which is how concurrent passes avoid double writes.
    """

    @abstractmethod
    def select_candidates(self, scope_id: Optional[str], limit: int) -> List[VideoAsset]:
        """Ready, needs transcoding, unassigned; oldest first, at most `limit`."""
        pass

    @abstractmethod
    def list_processing(
        self,
        scope_id: Optional[str] = None,
        asset_ids: Optional[List[str]] = None
    ) -> List[VideoAsset]:
        """Assets currently in processing, optionally narrowed by scope or ids."""
        pass

    @abstractmethod
    def get(self, asset_id: str) -> Optional[VideoAsset]:
        """Get asset by ID - parameter MUST be named 'asset_id'"""
        pass

    @abstractmethod
    def claim_for_processing(
        self,
        asset_id: str,
        target_resolution: int,
        expected_output_location: Optional[str],
        now: datetime
    ) -> Optional[VideoAsset]:
        """
        Conditional ready -> processing.

        Returns the claimed asset, or None when the asset no longer
        qualifies (another pass claimed it first).
        expected_output_location is None when the asset is claimed only
        to be failed.
        """
        pass

    @abstractmethod
    def record_job_submission(self, asset_id: str, job_id: str) -> bool:
        """Attach the job id to a processing asset that has none yet."""
        pass

    @abstractmethod
    def mark_ready(
        self,
        asset_id: str,
        job_id: str,
        media_location: str,
        original_filename: Optional[str],
        profile: TargetProfile,
        transcoded_at: datetime
    ) -> bool:
        """Conditional processing -> ready for the given job."""
        pass

    @abstractmethod
    def mark_error(
        self,
        asset_id: str,
        error_message: str,
        failed_at: datetime,
        expected_job_id: Optional[str] = None,
        final_job_status: Optional[str] = None
    ) -> bool:
        """
        Conditional processing -> error.

        With expected_job_id None the asset must have no job id.
        """
        pass

    @abstractmethod
    def flag_possibly_stuck(
        self,
        asset_id: str,
        job_id: str,
        detected_at: datetime,
        processing_minutes: float,
        progress: Optional[int] = None
    ) -> bool:
        """Set the advisory stuck flag; the first detection time is kept."""
        pass

    @abstractmethod
    def record_progress(self, asset_id: str, job_id: str, progress: int) -> bool:
        """Store the last reported percent complete."""
        pass

    @abstractmethod
    def count_by_status(self, scope_id: Optional[str], recent_since: datetime) -> TranscodingStats:
        """Counts per status, needs-transcoding, stuck and recent completions."""
        pass


class IEncodingService(ABC):
    """
    Transcoding service interface.

    Errors are reported with the EncodingServiceError family from
    exceptions.py; RateLimitError must stay distinguishable.
    """

    @abstractmethod
    def create_job(
        self,
        source_location: str,
        destination: str,
        profile: TargetProfile,
        correlation: Dict[str, str]
    ) -> str:
        """Submit a job and return its identifier."""
        pass

    @abstractmethod
    def get_job(self, job_id: str) -> RemoteJob:
        """Current state of a job."""
        pass
