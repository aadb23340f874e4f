"""
Core Business Logic Package.

Contains business logic that operates on pure data models.
Separated from models to maintain clean architecture.

Exports:
    State transitions: can_asset_transition, is_asset_terminal, is_transcode_candidate
    Reconciliation: decide_transition, ReconcileDecision, transcoded_filename
    Output locations: OutputResolver
"""

# State transitions
from .transitions import (
    can_asset_transition,
    get_asset_terminal_states,
    get_asset_active_states,
    is_asset_terminal,
    is_remote_job_terminal,
    is_transcode_candidate
)

# Reconciliation
from .reconciliation import (
    ReconcileDecision,
    decide_transition,
    transcoded_filename,
    MISSING_JOB_ID_ERROR,
    DEFAULT_FAILURE_MESSAGE
)

# Output locations
from .output_resolver import OutputResolver

__all__ = [
    # State transitions
    'can_asset_transition',
    'get_asset_terminal_states',
    'get_asset_active_states',
    'is_asset_terminal',
    'is_remote_job_terminal',
    'is_transcode_candidate',

    # Reconciliation
    'ReconcileDecision',
    'decide_transition',
    'transcoded_filename',
    'MISSING_JOB_ID_ERROR',
    'DEFAULT_FAILURE_MESSAGE',

    # Output locations
    'OutputResolver',
]
