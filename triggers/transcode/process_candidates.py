"""
Process Candidates Timer Handler.

Runs one processing pass: selects ready assets that need transcoding and
submits their jobs in bounded windows. Any failed submission marks the
pass ISSUES_DETECTED.

Exports:
    ProcessCandidatesTimerHandler: Timer handler class
    process_candidates_timer_handler: Singleton instance
"""

from triggers.timer_base import PassTimerHandler


class ProcessCandidatesTimerHandler(PassTimerHandler):
    """Timer handler for the transcode processing pass."""

    name = "TranscodeProcessCandidates"
    size_field = "selected"
    issue_statuses = ("failed",)

    def run_pass(self, orchestrator):
        return orchestrator.process_candidates()


# Singleton instance for use in function_app.py
process_candidates_timer_handler = ProcessCandidatesTimerHandler()

__all__ = ['ProcessCandidatesTimerHandler', 'process_candidates_timer_handler']
