"""
Reconciliation Logic.

Pure transition function for processing assets: given the asset, the
remote job snapshot and the current time, decide what the reconciler
should write. No I/O here; the StatusReconciler applies the decision
with conditional updates.

Rules:
    - No job id                 -> FAIL ("missing job identifier"), unless
                                   the claim is younger than the grace window
    - Remote COMPLETE           -> COMPLETE
    - Remote ERROR / CANCELED   -> FAIL with the service's message
    - In flight, older than the stuck threshold -> FLAG_STUCK (advisory)
    - In flight, percent known  -> RECORD_PROGRESS
    - Otherwise                 -> NO_CHANGE

Exports:
    ReconcileDecision: What to write for one asset
    decide_transition: The transition function
    transcoded_filename: Display filename after transcoding
    MISSING_JOB_ID_ERROR: Error recorded for job-less processing assets
    DEFAULT_FAILURE_MESSAGE: Error recorded when the service gives none
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from exceptions import ContractViolationError
from ..models.enums import AssetStatus, ReconcileAction, RemoteJobStatus
from ..models.remote_job import RemoteJob
from ..models.video_asset import VideoAsset


MISSING_JOB_ID_ERROR = "missing job identifier"
DEFAULT_FAILURE_MESSAGE = "Transcode job failed"


@dataclass(frozen=True)
class ReconcileDecision:
    """Outcome of decide_transition()."""

    action: ReconcileAction
    reason: str
    error_message: Optional[str] = None
    final_job_status: Optional[str] = None
    processing_minutes: Optional[float] = None
    progress: Optional[int] = None


def _age_seconds(asset: VideoAsset, now: datetime) -> Optional[float]:
    submitted_at = asset.job_metadata.submitted_at
    if submitted_at is None:
        return None
    return (now - submitted_at).total_seconds()


def decide_transition(
    asset: VideoAsset,
    remote_job: Optional[RemoteJob],
    now: datetime,
    stuck_threshold: float,
    submission_grace: float = 0.0
) -> ReconcileDecision:
    """
    Decide the next state of a processing asset.

    Args:
        asset: Asset as last read from the store
        remote_job: Status snapshot, None when the asset has no job id
        now: Current time (timezone-aware)
        stuck_threshold: Seconds after submission at which a job is flagged
        submission_grace: Seconds a job-less claim is tolerated

    Returns:
        ReconcileDecision

    Raises:
        ContractViolationError: If a remote job is missing for an asset
            with a job id, or belongs to a different job
    """
    if asset.status != AssetStatus.PROCESSING:
        return ReconcileDecision(
            action=ReconcileAction.NO_CHANGE,
            reason=f"asset is {asset.status.value}, not processing"
        )

    job_id = asset.job_metadata.job_id
    if not job_id:
        age = _age_seconds(asset, now)
        if submission_grace > 0 and age is not None and age < submission_grace:
            return ReconcileDecision(
                action=ReconcileAction.NO_CHANGE,
                reason=f"claim is {age:.0f}s old, inside {submission_grace:.0f}s grace"
            )
        return ReconcileDecision(
            action=ReconcileAction.FAIL,
            reason="processing without job id",
            error_message=MISSING_JOB_ID_ERROR
        )

    if remote_job is None:
        raise ContractViolationError(f"Asset {asset.id} has job {job_id} but no remote job was supplied")
    if remote_job.job_id != job_id:
        raise ContractViolationError(
            f"Remote job {remote_job.job_id} does not belong to asset {asset.id} (job {job_id})"
        )

    if remote_job.status == RemoteJobStatus.COMPLETE:
        return ReconcileDecision(
            action=ReconcileAction.COMPLETE,
            reason="remote job complete",
            final_job_status=remote_job.status.value
        )

    if remote_job.status in (RemoteJobStatus.ERROR, RemoteJobStatus.CANCELED):
        return ReconcileDecision(
            action=ReconcileAction.FAIL,
            reason=f"remote job {remote_job.status.value}",
            error_message=remote_job.error_message or DEFAULT_FAILURE_MESSAGE,
            final_job_status=remote_job.status.value
        )

    age = _age_seconds(asset, now)
    if age is not None and age > stuck_threshold:
        return ReconcileDecision(
            action=ReconcileAction.FLAG_STUCK,
            reason=f"job in {remote_job.status.value} for {age / 60:.1f} min",
            processing_minutes=round(age / 60, 1),
            progress=remote_job.percent_complete
        )

    if remote_job.percent_complete is not None:
        return ReconcileDecision(
            action=ReconcileAction.RECORD_PROGRESS,
            reason=f"job in {remote_job.status.value} at {remote_job.percent_complete}%",
            progress=remote_job.percent_complete
        )

    return ReconcileDecision(
        action=ReconcileAction.NO_CHANGE,
        reason=f"job in {remote_job.status.value}"
    )


def transcoded_filename(original_filename: Optional[str], container: str = "mp4") -> Optional[str]:
    """
    Display filename after transcoding: the extension becomes the container's.

    "inspection 12.MOV" -> "inspection 12.mp4", "clip" -> "clip.mp4".
    """
    if not original_filename:
        return original_filename
    stem, dot, extension = original_filename.rpartition('.')
    if dot and stem and '/' not in extension:
        return f"{stem}.{container}"
    return f"{original_filename}.{container}"
