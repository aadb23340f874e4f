"""
Transcode Pass Timer Base.

Shared flow for the timers that run one orchestrator pass: build the
orchestrator, run the pass, grade the pass summary and log it under the
pass's run id.

Result shape (the pass summary's to_dict() plus):
    health_status: HEALTHY, ISSUES_DETECTED or DISABLED
    summary: enabled, the pass size field and every non-zero outcome count
    duration_seconds: Wall time including orchestrator construction

A pass that raises comes back as success=False with error, error_type and
traceback. handle() never raises into the Functions host.

Usage:
    class NightlyPassTimer(PassTimerHandler):
        name = "NightlyPass"
        size_field = "selected"
        issue_statuses = ("failed",)

        def run_pass(self, orchestrator):
            return orchestrator.process_candidates()

Exports:
    PassTimerHandler: Base class for the transcode pass timers
"""

import time
import traceback
from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple, Union

import azure.functions as func

from core.models import ProcessCandidatesSummary, ReconcileSummary
from util_logger import LoggerFactory, ComponentType

PassSummary = Union[ProcessCandidatesSummary, ReconcileSummary]


class PassTimerHandler(ABC):
    """
    Runs one orchestrator pass per timer tick.

    Subclasses set:
        name: Logger and log-line name
        size_field: Summary attribute holding the pass size
        issue_statuses: Outcome statuses that make the pass ISSUES_DETECTED
    """

    name: str = "TranscodePass"
    size_field: str = "selected"
    issue_statuses: Tuple[str, ...] = ()

    def __init__(self):
        self._logger = None

    @property
    def logger(self):
        """Lazy-load logger to avoid import issues at module load."""
        if self._logger is None:
            self._logger = LoggerFactory.create_logger(ComponentType.TRIGGER, self.name)
        return self._logger

    @abstractmethod
    def run_pass(self, orchestrator) -> PassSummary:
        """Run this timer's pass on a freshly built orchestrator."""
        raise NotImplementedError

    def handle(self, timer: func.TimerRequest) -> Dict[str, Any]:
        if timer.past_due:
            self.logger.warning(f"⏰ {self.name}: past due, running now")

        started = time.monotonic()
        try:
            # Resolved per call so configuration is read at run time
            from services.transcode_orchestrator import TranscodeOrchestrator
            summary = self.run_pass(TranscodeOrchestrator())
        except Exception as e:
            self.logger.error(
                f"❌ {self.name}: pass raised {type(e).__name__}: {e}",
                exc_info=True,
                extra={'custom_dimensions': {'error_type': type(e).__name__}}
            )
            return {
                "success": False,
                "error": str(e),
                "error_type": type(e).__name__,
                "traceback": traceback.format_exc(),
                "duration_seconds": round(time.monotonic() - started, 2),
            }

        result = self.grade(summary)
        result["duration_seconds"] = round(time.monotonic() - started, 2)
        self._log_result(result)
        return result

    def grade(self, summary: PassSummary) -> Dict[str, Any]:
        """Attach health_status and the compact summary to the pass dict."""
        counts = summary.counts()
        issues = sum(counts.get(status, 0) for status in self.issue_statuses)

        if not summary.enabled:
            health_status = "DISABLED"
        elif issues:
            health_status = "ISSUES_DETECTED"
        else:
            health_status = "HEALTHY"

        result = summary.to_dict()
        result["health_status"] = health_status
        result["summary"] = {
            "enabled": summary.enabled,
            self.size_field: getattr(summary, self.size_field),
            **{status: count for status, count in counts.items() if count},
        }
        return result

    def _log_result(self, result: Dict[str, Any]) -> None:
        compact = result["summary"]
        dims = {'run_id': result.get("run_id"), 'health_status': result["health_status"], **compact}
        line = ", ".join(f"{key}={value}" for key, value in compact.items())
        message = f"{self.name}: {result['health_status']} ({result['duration_seconds']}s) | {line}"

        if result["health_status"] == "ISSUES_DETECTED":
            self.logger.warning(f"⚠️ {message}", extra={'custom_dimensions': dims})
        else:
            self.logger.info(f"✅ {message}", extra={'custom_dimensions': dims})


__all__ = ['PassTimerHandler']
