"""
Remote Job Model.

Snapshot of a transcoding service job as returned by a status check.

Exports:
    RemoteJob: Transcoding job snapshot
"""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import RemoteJobStatus


class RemoteJob(BaseModel):
    """Transcoding job state at the time of the status check."""

    model_config = ConfigDict(frozen=True)

    job_id: str = Field(..., min_length=1)
    status: RemoteJobStatus
    percent_complete: Optional[int] = Field(default=None, ge=0, le=100)
    error_message: Optional[str] = Field(default=None)
    error_code: Optional[int] = Field(default=None)
    user_metadata: Dict[str, str] = Field(
        default_factory=dict,
        description="Correlation payload echoed back by the service"
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in (
            RemoteJobStatus.COMPLETE,
            RemoteJobStatus.ERROR,
            RemoteJobStatus.CANCELED,
        )


__all__ = ['RemoteJob']
