"""
Video Asset Models.

Pydantic models for the video_assets table. A VideoAsset is one uploaded
inspection video; its job_metadata carries everything the orchestrator
knows about the transcoding job currently or last attached to it.

Exports:
    JobMetadata: Transcoding job bookkeeping stored as JSONB
    VideoAsset: Database representation of a video asset
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from .enums import AssetStatus


class JobMetadata(BaseModel):
    """
    Job bookkeeping stored in the job_metadata JSONB column.

    Unknown keys written by other tools are preserved.
    """

    model_config = ConfigDict(extra='allow')

    job_id: Optional[str] = Field(default=None, description="Transcoding service job identifier")
    submitted_at: Optional[datetime] = Field(default=None, description="When the asset was claimed")
    target_resolution: Optional[int] = Field(default=None, description="Requested output height")
    expected_output_location: Optional[str] = Field(
        default=None,
        description="Where the transcoded media will appear"
    )
    attempts: int = Field(default=0, ge=0, description="Number of claims made on this asset")
    last_error: Optional[str] = Field(default=None, description="Human-readable failure reason")

    possibly_stuck: bool = Field(default=False, description="Advisory stale-job flag")
    stuck_detected_at: Optional[datetime] = Field(default=None, description="First time the job was flagged")
    processing_minutes: Optional[float] = Field(
        default=None,
        description="Job age in minutes at the last stuck detection"
    )

    last_progress: Optional[int] = Field(default=None, ge=0, le=100, description="Last reported percent")
    transcoded_at: Optional[datetime] = Field(default=None, description="When the completion was recorded")
    failed_at: Optional[datetime] = Field(default=None, description="When the failure was recorded")
    final_job_status: Optional[str] = Field(default=None, description="Remote status that ended the job")

    @field_serializer('submitted_at', 'stuck_detected_at', 'transcoded_at', 'failed_at')
    def serialize_datetime(self, v: Optional[datetime]) -> Optional[str]:
        return v.isoformat() if v else None


class VideoAsset(BaseModel):
    """
    Database representation of a video asset.

    Fields:
    - id: Opaque identifier, stable for the asset's lifetime
    - project_id: Scope identifier (None for unscoped assets)
    - source_location: URI of the original upload, never rewritten
    - media_location: URI of the currently playable media
    - status: ready | processing | error
    - needs_transcoding: Set at ingestion, cleared by a successful transcode
    - assigned_target: Downstream entity using the asset; excludes it from candidacy
    - job_metadata: Transcoding job bookkeeping
    """

    model_config = ConfigDict()

    @field_serializer('created_at', 'updated_at')
    def serialize_timestamps(self, v: Optional[datetime]) -> Optional[str]:
        return v.isoformat() if v else None

    id: str = Field(..., min_length=1, description="Asset identifier")
    project_id: Optional[str] = Field(default=None, description="Owning project (scope)")

    source_location: str = Field(..., min_length=1, description="Original upload URI")
    media_location: str = Field(..., min_length=1, description="Currently playable media URI")
    original_filename: Optional[str] = Field(default=None, description="Display filename")

    status: AssetStatus = Field(default=AssetStatus.READY, description="Lifecycle state")
    needs_transcoding: bool = Field(default=False, description="Encoding unsuitable for browsers")
    assigned_target: Optional[str] = Field(default=None, description="Downstream entity reference")

    job_metadata: JobMetadata = Field(default_factory=JobMetadata)

    # Last-known media characteristics
    format: Optional[str] = Field(default=None)
    codec: Optional[str] = Field(default=None)
    width: Optional[int] = Field(default=None, ge=0)
    height: Optional[int] = Field(default=None, ge=0)
    file_size: Optional[int] = Field(default=None, ge=0)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def job_id(self) -> Optional[str]:
        return self.job_metadata.job_id

    def summary(self) -> Dict[str, Any]:
        """Short dict for log lines and API responses."""
        return {
            'id': self.id,
            'project_id': self.project_id,
            'status': self.status.value,
            'needs_transcoding': self.needs_transcoding,
            'job_id': self.job_metadata.job_id,
            'possibly_stuck': self.job_metadata.possibly_stuck,
        }


# Module exports
__all__ = [
    'JobMetadata',
    'VideoAsset',
]
