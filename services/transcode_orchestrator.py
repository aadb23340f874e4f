"""
Transcode Orchestrator.

Entry points invoked by the scheduler surface (timer and HTTP triggers):

    process_candidates(scope_id)     select -> claim -> submit, in windows
    reconcile_processing(scope_id)   poll every processing asset once
    monitor(asset_ids)               poll given assets until resolved
    get_transcoding_status(scope_id) counts per status

Each pass returns a structured summary. Per-asset failures are recorded
as outcomes in the summary; failures that are not per-asset (the
candidate or processing query itself) propagate to the trigger.

Submission windows:
    Candidates are split into windows of max_concurrent_submissions.
    Within a window, submissions are dispatched on worker threads with
    submit_delay + jitter between starts, so at most one window is in
    flight at a time. Windows are separated by batch_cooldown, plus
    rate_limit_backoff when the window was throttled.

Exports:
    TranscodeOrchestrator: Entry points
"""

import random
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional

from config import AppConfig, get_config
from config.defaults import TranscodeDefaults
from core.logic.output_resolver import OutputResolver
from core.models import (
    ProcessCandidatesSummary,
    ReconcileSummary,
    SubmissionOutcome,
    SubmissionStatus,
    TargetProfile,
    TranscodingStats,
)
from infrastructure.interface_repository import IAssetRepository, IEncodingService
from util_logger import LogContext, LoggerFactory, ComponentType, log_exceptions
from .candidate_selector import CandidateSelector
from .job_submitter import JobSubmitter
from .rate_limit import RequestPacer
from .status_reconciler import StatusReconciler

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "TranscodeOrchestrator")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_run_id() -> str:
    return uuid.uuid4().hex[:12]


class TranscodeOrchestrator:
    """
    Batch transcode orchestration.

    Usage:
        orchestrator = TranscodeOrchestrator()

        # From timer trigger
        summary = orchestrator.process_candidates()
        print(f"Submitted {summary.submitted} of {summary.selected}")

    Configuration is read once at construction and is immutable for the
    life of the instance.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        repository: Optional[IAssetRepository] = None,
        encoder: Optional[IEncodingService] = None,
        resolver: Optional[OutputResolver] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = _utc_now,
        monotonic: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize orchestrator.

        Args:
            config: Application configuration (global config if not provided)
            repository: Asset store (PostgreSQL if not provided)
            encoder: Transcoding service (MediaConvert if not provided)
            resolver: Output location calculator (built from config if not provided)
            sleep, clock, monotonic, rng: Time and randomness sources
        """
        self.config = config or get_config()
        self.transcode = self.config.transcode

        if repository is None or encoder is None:
            from infrastructure.factory import RepositoryFactory
            repository = repository or RepositoryFactory.create_asset_repository(config=self.config)
            encoder = encoder or RepositoryFactory.create_encoding_service(self.config)

        self.repo = repository
        self.encoder = encoder
        self.resolver = resolver or OutputResolver.from_config(self.config.encoding)
        self.profile = TargetProfile.for_resolution(self.transcode.target_resolution)

        self._sleep = sleep
        self._clock = clock
        self._monotonic = monotonic
        self._rng = rng or random.Random()

        self.selector = CandidateSelector(self.repo)
        self.submitter = JobSubmitter(self.repo, self.encoder, self.resolver, clock=clock)
        self.reconciler = StatusReconciler(
            self.repo,
            self.encoder,
            self.resolver,
            self.transcode,
            clock=clock,
            monotonic=monotonic,
            sleep=sleep,
        )

        logger.debug(
            f"TranscodeOrchestrator initialized: enabled={self.transcode.enabled}, "
            f"batch={self.transcode.max_batch_size}, window={self.transcode.max_concurrent_submissions}, "
            f"target={self.profile.resolution_label}"
        )

    # ========================================================================
    # PROCESS CANDIDATES
    # ========================================================================

    @log_exceptions(ComponentType.SERVICE, "TranscodeOrchestrator")
    def process_candidates(self, scope_id: Optional[str] = None) -> ProcessCandidatesSummary:
        """
        Select candidates and submit their transcoding jobs.

        Args:
            scope_id: Project to restrict to, None for all projects

        Returns:
            ProcessCandidatesSummary with one outcome per selected asset

        Raises:
            DatabaseError: If the candidate query fails
        """
        summary = ProcessCandidatesSummary(scope_id=scope_id, run_id=_new_run_id())
        ctx = LogContext(run_id=summary.run_id, scope_id=scope_id)

        if not self.transcode.enabled:
            logger.info("[TRANSCODE] Disabled via configuration - skipping processing pass")
            summary.enabled = False
            summary.complete(success=True)
            return summary

        candidates = self.selector.select(scope_id, self.transcode.max_batch_size)
        summary.selected = len(candidates)

        if not candidates:
            logger.info("[TRANSCODE] No candidates - nothing to submit", extra=ctx.extra())
            summary.complete(success=True)
            return summary

        windows = CandidateSelector.partition(candidates, self.transcode.max_concurrent_submissions)
        logger.info(
            f"[TRANSCODE] Submitting {len(candidates)} asset(s) in {len(windows)} window(s)",
            extra=ctx.extra()
        )

        pacer = RequestPacer(
            delay=self.transcode.submit_delay,
            jitter=self.transcode.submit_jitter,
            sleep=self._sleep,
            rng=self._rng,
        )
        started = self._monotonic()
        dispatched = 0

        for window_index, window in enumerate(windows):
            if window_index > 0:
                pacer.wait(self.transcode.batch_cooldown)

            outcomes = self._submit_window(window, pacer, started)
            summary.outcomes.extend(outcomes)
            dispatched += len(window)

            if any(o.status == SubmissionStatus.DEFERRED for o in outcomes):
                break
            if any(o.rate_limited for o in outcomes):
                pacer.backoff(self.transcode.rate_limit_backoff)

        # Windows never started because the pass ran out of time
        summary.outcomes.extend(
            SubmissionOutcome(asset_id=a.id, status=SubmissionStatus.DEFERRED)
            for a in candidates[dispatched:]
        )

        summary.complete(success=True)
        counts = summary.counts()
        logger.info(f"[TRANSCODE] Processing pass done: {counts}", extra=ctx.extra(**counts))
        return summary

    def _submit_window(self, window, pacer: RequestPacer, started: float) -> List[SubmissionOutcome]:
        """
        Dispatch one window on worker threads with paced starts.

        Assets not started before max_pass_duration are DEFERRED.
        """
        futures: List[Future] = []
        deferred: List[SubmissionOutcome] = []

        with ThreadPoolExecutor(max_workers=len(window), thread_name_prefix="transcode-submit") as executor:
            for index, asset in enumerate(window):
                if index > 0:
                    pacer.pause()
                if self._monotonic() - started >= self.transcode.max_pass_duration:
                    logger.warning(f"⏱️ Pass ceiling reached; deferring {len(window) - index} asset(s)")
                    deferred = [
                        SubmissionOutcome(asset_id=a.id, status=SubmissionStatus.DEFERRED)
                        for a in window[index:]
                    ]
                    break
                futures.append(executor.submit(self.submitter.submit, asset, self.profile))

            # result() re-raises configuration errors from the workers
            outcomes = [future.result() for future in futures]

        return outcomes + deferred

    # ========================================================================
    # RECONCILE PROCESSING
    # ========================================================================

    @log_exceptions(ComponentType.SERVICE, "TranscodeOrchestrator")
    def reconcile_processing(self, scope_id: Optional[str] = None) -> ReconcileSummary:
        """
        Reconcile every processing asset once.

        Args:
            scope_id: Project to restrict to, None for all projects

        Returns:
            ReconcileSummary with one outcome per processing asset

        Raises:
            DatabaseError: If the processing query fails
        """
        summary = ReconcileSummary(scope_id=scope_id, run_id=_new_run_id())
        ctx = LogContext(run_id=summary.run_id, scope_id=scope_id)

        if not self.transcode.enabled:
            logger.info("[TRANSCODE] Disabled via configuration - skipping reconciliation pass")
            summary.enabled = False
            summary.complete(success=True)
            return summary

        assets = self.repo.list_processing(scope_id=scope_id)
        summary.checked = len(assets)

        if assets:
            summary.outcomes = self.reconciler.run_pass(assets)

        summary.complete(success=True)
        logger.info(
            f"[TRANSCODE] Reconciliation pass over {summary.checked} asset(s): {summary.counts()}",
            extra=ctx.extra()
        )
        return summary

    @log_exceptions(ComponentType.SERVICE, "TranscodeOrchestrator")
    def monitor(self, asset_ids: Iterable[str]) -> ReconcileSummary:
        """
        Poll the given assets until resolved or max_poll_attempts is reached.

        Unresolved assets stay processing for the periodic reconciler.
        """
        summary = ReconcileSummary(run_id=_new_run_id())
        outcomes = self.reconciler.monitor(asset_ids)
        summary.checked = len(outcomes)
        summary.outcomes = outcomes
        summary.complete(success=True)

        if summary.unresolved:
            logger.warning(f"[TRANSCODE] Monitoring ended with {len(summary.unresolved)} unresolved asset(s)")
        return summary

    # ========================================================================
    # STATUS REPORT
    # ========================================================================

    @log_exceptions(ComponentType.SERVICE, "TranscodeOrchestrator")
    def get_transcoding_status(self, scope_id: Optional[str] = None) -> TranscodingStats:
        """Counts per status, plus stuck and recently completed assets."""
        recent_since = self._clock() - timedelta(seconds=TranscodeDefaults.RECENT_COMPLETION_WINDOW)
        return self.repo.count_by_status(scope_id, recent_since)
