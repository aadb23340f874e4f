"""
Transcode Triggers.

Timer handlers for the scheduled passes and HTTP handlers for manual runs.

Exports:
    process_candidates_timer_handler: Processing pass timer handler
    reconcile_processing_timer_handler: Reconciliation pass timer handler
    transcode_process_handler: POST /api/transcode/process
    transcode_reconcile_handler: POST /api/transcode/reconcile
    transcode_status_handler: GET /api/transcode/status
"""

from .process_candidates import ProcessCandidatesTimerHandler, process_candidates_timer_handler
from .reconcile_processing import ReconcileProcessingTimerHandler, reconcile_processing_timer_handler
from .http_triggers import (
    transcode_process_handler,
    transcode_reconcile_handler,
    transcode_status_handler,
)

__all__ = [
    'ProcessCandidatesTimerHandler',
    'process_candidates_timer_handler',
    'ReconcileProcessingTimerHandler',
    'reconcile_processing_timer_handler',
    'transcode_process_handler',
    'transcode_reconcile_handler',
    'transcode_status_handler',
]
