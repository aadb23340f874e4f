"""
Pure Enumeration Types for the Transcode Orchestrator.

Defines valid states for video assets, remote transcoding jobs and the
per-asset outcomes reported by each pass.
No business logic - pure type definitions only.

Exports:
    AssetStatus: Video asset lifecycle state
    RemoteJobStatus: Transcoding service job state
    ReconcileAction: Decision produced by the reconciliation logic
    SubmissionStatus: Per-asset outcome of a processing pass
    ReconcileStatus: Per-asset outcome of a reconciliation pass
"""

from enum import Enum


class AssetStatus(Enum):
    """
    Valid status values for video assets.

    State transitions:
    - READY -> PROCESSING (conditional claim, needs transcoding)
    - PROCESSING -> READY (remote job complete)
    - PROCESSING -> ERROR (submission failure, remote failure, missing job id)

    ERROR is terminal for this system; retrying is an operator decision.
    """

    READY = "ready"
    PROCESSING = "processing"
    ERROR = "error"


class RemoteJobStatus(Enum):
    """
    Job states reported by the transcoding service.

    Values match MediaConvert's Job.Status strings.
    """

    SUBMITTED = "SUBMITTED"
    PROGRESSING = "PROGRESSING"
    COMPLETE = "COMPLETE"
    ERROR = "ERROR"
    CANCELED = "CANCELED"


class ReconcileAction(Enum):
    """What the reconciler should do with a processing asset."""

    COMPLETE = "complete"
    FAIL = "fail"
    FLAG_STUCK = "flag_stuck"
    RECORD_PROGRESS = "record_progress"
    NO_CHANGE = "no_change"


class SubmissionStatus(Enum):
    """Per-asset outcome of a processing pass."""

    SUBMITTED = "submitted"
    SKIPPED = "skipped"    # Claim lost to a concurrent pass
    FAILED = "failed"      # Asset moved to error (or left for self-healing)
    DEFERRED = "deferred"  # Not reached before the pass ceiling


class ReconcileStatus(Enum):
    """Per-asset outcome of a reconciliation pass."""

    COMPLETED = "completed"
    FAILED = "failed"
    FLAGGED_STUCK = "flagged_stuck"
    IN_PROGRESS = "in_progress"
    ALREADY_RECONCILED = "already_reconciled"  # Conditional write matched nothing
    SKIPPED = "skipped"                        # Asset not in processing
    RATE_LIMITED = "rate_limited"
    CHECK_FAILED = "check_failed"
    WRITE_FAILED = "write_failed"
    DEFERRED = "deferred"
