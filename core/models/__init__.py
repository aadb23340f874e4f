"""
Core Data Models Package.

Contains pure data structures without business logic.
All business logic is in the core.logic package.

Exports:
    VideoAsset, JobMetadata: Database models
    AssetStatus, RemoteJobStatus: Lifecycle enums
    ReconcileAction, SubmissionStatus, ReconcileStatus: Outcome enums
    TargetProfile: Output encoding parameters
    RemoteJob: Transcoding service job snapshot
    SubmissionOutcome, ReconcileOutcome: Per-asset results
    ProcessCandidatesSummary, ReconcileSummary, TranscodingStats: Pass results
"""

# Enums
from .enums import (
    AssetStatus,
    RemoteJobStatus,
    ReconcileAction,
    SubmissionStatus,
    ReconcileStatus
)

# Asset models
from .video_asset import VideoAsset, JobMetadata

# Encoding models
from .profile import TargetProfile
from .remote_job import RemoteJob

# Results
from .results import (
    SubmissionOutcome,
    ReconcileOutcome,
    ProcessCandidatesSummary,
    ReconcileSummary,
    TranscodingStats
)

__all__ = [
    # Enums
    'AssetStatus',
    'RemoteJobStatus',
    'ReconcileAction',
    'SubmissionStatus',
    'ReconcileStatus',

    # Asset models
    'VideoAsset',
    'JobMetadata',

    # Encoding models
    'TargetProfile',
    'RemoteJob',

    # Results
    'SubmissionOutcome',
    'ReconcileOutcome',
    'ProcessCandidatesSummary',
    'ReconcileSummary',
    'TranscodingStats',
]
