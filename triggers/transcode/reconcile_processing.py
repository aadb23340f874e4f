"""
Reconcile Processing Timer Handler.

Runs one reconciliation pass over every asset in processing. A pass that
fails assets, flags stuck jobs or cannot reach the transcoding service is
reported as ISSUES_DETECTED so it stands out in the logs.

Exports:
    ReconcileProcessingTimerHandler: Timer handler class
    reconcile_processing_timer_handler: Singleton instance
"""

from triggers.timer_base import PassTimerHandler


class ReconcileProcessingTimerHandler(PassTimerHandler):
    """Timer handler for the transcode reconciliation pass."""

    name = "TranscodeReconcileProcessing"
    size_field = "checked"
    issue_statuses = ("failed", "flagged_stuck", "check_failed", "write_failed")

    def run_pass(self, orchestrator):
        return orchestrator.reconcile_processing()


reconcile_processing_timer_handler = ReconcileProcessingTimerHandler()

__all__ = ['ReconcileProcessingTimerHandler', 'reconcile_processing_timer_handler']
