"""
Triggers Package.

Azure Functions HTTP and Timer trigger implementations.

HTTP Endpoints:
    /api/transcode/process: Manual processing pass
    /api/transcode/reconcile: Manual reconciliation pass or monitoring
    /api/transcode/status: Asset counts per status

Exports:
    PassTimerHandler: Base class for the transcode pass timers
"""

# Only import the base class to avoid initialization at import time
# Handler instances should be imported directly from their modules
from .timer_base import PassTimerHandler

__all__ = [
    'PassTimerHandler',
]
