"""
Pass Result Data Models.

Structured summaries returned by the orchestrator entry points. Each pass
records one outcome per asset it touched; per-asset failures live here
instead of propagating.

Exports:
    SubmissionOutcome: Result of submitting one asset
    ReconcileOutcome: Result of reconciling one asset
    ProcessCandidatesSummary: Result of a processing pass
    ReconcileSummary: Result of a reconciliation pass
    TranscodingStats: Counts per status for a scope
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .enums import ReconcileStatus, SubmissionStatus


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# PER-ASSET OUTCOMES
# ============================================================================

@dataclass
class SubmissionOutcome:
    """Result of submitting one asset."""

    asset_id: str
    status: SubmissionStatus
    job_id: Optional[str] = None
    expected_output_location: Optional[str] = None
    error: Optional[str] = None
    rate_limited: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asset_id": self.asset_id,
            "status": self.status.value,
            "job_id": self.job_id,
            "expected_output_location": self.expected_output_location,
            "error": self.error,
            "rate_limited": self.rate_limited,
        }


@dataclass
class ReconcileOutcome:
    """Result of reconciling one asset."""

    asset_id: str
    status: ReconcileStatus
    job_id: Optional[str] = None
    remote_status: Optional[str] = None
    media_location: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        """True once the asset has left processing (or was never in it)."""
        return self.status in (
            ReconcileStatus.COMPLETED,
            ReconcileStatus.FAILED,
            ReconcileStatus.ALREADY_RECONCILED,
            ReconcileStatus.SKIPPED,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asset_id": self.asset_id,
            "status": self.status.value,
            "job_id": self.job_id,
            "remote_status": self.remote_status,
            "media_location": self.media_location,
            "error": self.error,
        }


# ============================================================================
# PASS SUMMARIES
# ============================================================================

@dataclass
class _PassSummary:
    """Timing and completion shared by both pass summaries."""

    scope_id: Optional[str] = None
    success: bool = False
    started_at: datetime = field(default_factory=_utc_now)
    completed_at: Optional[datetime] = None
    error: Optional[str] = None
    run_id: Optional[str] = None

    def complete(self, success: bool = True, error: Optional[str] = None):
        """Mark the pass as complete."""
        self.completed_at = _utc_now()
        self.success = success
        self.error = error

    @property
    def duration_ms(self) -> int:
        """Get pass duration in milliseconds."""
        if self.completed_at:
            return int((self.completed_at - self.started_at).total_seconds() * 1000)
        return 0

    def _base_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "scope_id": self.scope_id,
            "success": self.success,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_ms": self.duration_ms,
            "error": self.error,
        }


@dataclass
class ProcessCandidatesSummary(_PassSummary):
    """Result of a processing pass (select, claim, submit)."""

    selected: int = 0
    enabled: bool = True
    outcomes: List[SubmissionOutcome] = field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        tally = Counter(o.status.value for o in self.outcomes)
        return {status.value: tally.get(status.value, 0) for status in SubmissionStatus}

    @property
    def submitted(self) -> int:
        return self.counts()[SubmissionStatus.SUBMITTED.value]

    @property
    def failed(self) -> int:
        return self.counts()[SubmissionStatus.FAILED.value]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        result = self._base_dict()
        result.update({
            "enabled": self.enabled,
            "selected": self.selected,
            "counts": self.counts(),
            "outcomes": [o.to_dict() for o in self.outcomes],
        })
        return result


@dataclass
class ReconcileSummary(_PassSummary):
    """Result of a reconciliation pass."""

    checked: int = 0
    enabled: bool = True
    outcomes: List[ReconcileOutcome] = field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        tally = Counter(o.status.value for o in self.outcomes)
        return {status.value: tally.get(status.value, 0) for status in ReconcileStatus}

    @property
    def completed(self) -> int:
        return self.counts()[ReconcileStatus.COMPLETED.value]

    @property
    def failed(self) -> int:
        return self.counts()[ReconcileStatus.FAILED.value]

    @property
    def unresolved(self) -> List[str]:
        return [o.asset_id for o in self.outcomes if not o.is_resolved]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        result = self._base_dict()
        result.update({
            "enabled": self.enabled,
            "checked": self.checked,
            "counts": self.counts(),
            "outcomes": [o.to_dict() for o in self.outcomes],
        })
        return result


# ============================================================================
# STATUS REPORT
# ============================================================================

@dataclass
class TranscodingStats:
    """Asset counts for one scope (or all scopes when scope_id is None)."""

    scope_id: Optional[str] = None
    total: int = 0
    ready: int = 0
    processing: int = 0
    error: int = 0
    needs_transcoding: int = 0
    possibly_stuck: int = 0
    recently_completed: int = 0
    generated_at: datetime = field(default_factory=_utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scope_id": self.scope_id,
            "total": self.total,
            "ready": self.ready,
            "processing": self.processing,
            "error": self.error,
            "needs_transcoding": self.needs_transcoding,
            "possibly_stuck": self.possibly_stuck,
            "recently_completed": self.recently_completed,
            "generated_at": self.generated_at.isoformat(),
        }


__all__ = [
    'SubmissionOutcome',
    'ReconcileOutcome',
    'ProcessCandidatesSummary',
    'ReconcileSummary',
    'TranscodingStats',
]
