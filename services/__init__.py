"""
Transcode Services.

Business logic between the triggers and the infrastructure layer. Services
depend on the IAssetRepository / IEncodingService contracts only; the
concrete PostgreSQL and MediaConvert implementations are created by the
orchestrator through RepositoryFactory when none are injected.

Exports:
    TranscodeOrchestrator: Timer and HTTP entry points
    CandidateSelector: Bounded candidate query
    JobSubmitter: Claim-and-submit for one asset
    StatusReconciler: Remote status to asset state
    RequestPacer: Delay-plus-jitter pacing
"""

from .rate_limit import RequestPacer
from .candidate_selector import CandidateSelector
from .job_submitter import JobSubmitter
from .status_reconciler import StatusReconciler
from .transcode_orchestrator import TranscodeOrchestrator

__all__ = [
    'TranscodeOrchestrator',
    'CandidateSelector',
    'JobSubmitter',
    'StatusReconciler',
    'RequestPacer',
]
