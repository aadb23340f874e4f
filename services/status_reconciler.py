"""
Status Reconciler.

Polls the transcoding service for assets in processing and applies the
decision from core.logic.reconciliation.decide_transition.

Guarantees:
    - Every write is conditional on status='processing' and the asset's
      job id, so a duplicate completion or a concurrent pass finds no
      matching row and is reported ALREADY_RECONCILED
    - Assets not in processing are skipped without a remote call
    - A throttled status check backs off and the pass moves on
    - Other status-check failures, including unusable or mismatched job
      snapshots, leave the asset unchanged and are counted
    - A pass stops at max_pass_duration; unreached assets are DEFERRED

Exports:
    StatusReconciler: Reconciliation passes and synchronous monitoring
"""

import time
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from pydantic import ValidationError

from config.transcode_config import TranscodeConfig
from core.logic.output_resolver import OutputResolver
from core.logic.reconciliation import ReconcileDecision, decide_transition, transcoded_filename
from core.models import (
    AssetStatus,
    ReconcileAction,
    ReconcileOutcome,
    ReconcileStatus,
    RemoteJob,
    TargetProfile,
    VideoAsset,
)
from exceptions import ContractViolationError, DatabaseError, EncodingServiceError, RateLimitError
from infrastructure.interface_repository import IAssetRepository, IEncodingService
from util_logger import LogContext, LoggerFactory, ComponentType
from .rate_limit import RequestPacer

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "StatusReconciler")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StatusReconciler:
    """
    Applies remote job state to processing assets.

    Usage:
        reconciler = StatusReconciler(repo, encoder, resolver, config.transcode)
        outcomes = reconciler.run_pass(repo.list_processing())
    """

    def __init__(
        self,
        repository: IAssetRepository,
        encoder: IEncodingService,
        resolver: OutputResolver,
        config: TranscodeConfig,
        clock: Callable[[], datetime] = _utc_now,
        monotonic: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.repo = repository
        self.encoder = encoder
        self.resolver = resolver
        self.config = config
        self._clock = clock
        self._monotonic = monotonic
        self._sleep = sleep
        self.pacer = RequestPacer(delay=config.poll_delay, sleep=sleep)

    # ========================================================================
    # SINGLE ASSET
    # ========================================================================

    def reconcile_asset(self, asset: VideoAsset) -> ReconcileOutcome:
        """
        Check one asset's job and apply the resulting transition.

        Never raises for per-asset failures; they come back as outcomes.
        """
        if asset.status != AssetStatus.PROCESSING:
            return ReconcileOutcome(asset_id=asset.id, status=ReconcileStatus.SKIPPED, job_id=asset.job_id)

        job_id = asset.job_id
        ctx = LogContext(scope_id=asset.project_id, asset_id=asset.id, job_id=job_id)

        remote: Optional[RemoteJob] = None
        if job_id:
            try:
                remote = self.encoder.get_job(job_id)
            except RateLimitError as e:
                logger.warning(f"⏳ Status check throttled for {asset.id}: {e}", extra=ctx.extra())
                return ReconcileOutcome(
                    asset_id=asset.id, status=ReconcileStatus.RATE_LIMITED, job_id=job_id, error=str(e)
                )
            except (EncodingServiceError, ValidationError) as e:
                logger.error(f"❌ Status check failed for {asset.id}: {e}", extra=ctx.extra())
                return ReconcileOutcome(
                    asset_id=asset.id, status=ReconcileStatus.CHECK_FAILED, job_id=job_id, error=str(e)
                )

        now = self._clock()
        try:
            decision = decide_transition(
                asset,
                remote,
                now,
                stuck_threshold=self.config.stuck_threshold,
                submission_grace=self.config.submission_grace,
            )
        except ContractViolationError as e:
            # Status check answered for a different job
            logger.error(f"❌ Unusable status for {asset.id}: {e}", extra=ctx.extra())
            return ReconcileOutcome(
                asset_id=asset.id, status=ReconcileStatus.CHECK_FAILED, job_id=job_id, error=str(e)
            )
        logger.debug(f"🧭 {asset.id}: {decision.action.value} ({decision.reason})", extra=ctx.extra())

        remote_status = remote.status.value if remote else None
        try:
            return self._apply(asset, decision, now, remote_status)
        except DatabaseError as e:
            logger.error(f"❌ Could not apply {decision.action.value} to {asset.id}: {e}", extra=ctx.extra())
            return ReconcileOutcome(
                asset_id=asset.id,
                status=ReconcileStatus.WRITE_FAILED,
                job_id=job_id,
                remote_status=remote_status,
                error=str(e),
            )

    def _apply(
        self,
        asset: VideoAsset,
        decision: ReconcileDecision,
        now: datetime,
        remote_status: Optional[str]
    ) -> ReconcileOutcome:
        job_id = asset.job_id
        outcome = ReconcileOutcome(
            asset_id=asset.id,
            status=ReconcileStatus.IN_PROGRESS,
            job_id=job_id,
            remote_status=remote_status,
        )

        if decision.action == ReconcileAction.COMPLETE:
            resolution = asset.job_metadata.target_resolution or self.config.target_resolution
            profile = TargetProfile.for_resolution(resolution)
            media_location = self.resolver.resolve(asset.id, asset.project_id, resolution)

            recorded = asset.job_metadata.expected_output_location
            if recorded and recorded != media_location:
                logger.warning(f"⚠️ {asset.id}: recorded output {recorded} differs from {media_location}")

            written = self.repo.mark_ready(
                asset.id,
                job_id,
                media_location,
                transcoded_filename(asset.original_filename, profile.container),
                profile,
                transcoded_at=now,
            )
            if written:
                logger.info(f"✅ {asset.id} transcoded -> {media_location}")
                outcome.status = ReconcileStatus.COMPLETED
                outcome.media_location = media_location
            else:
                outcome.status = ReconcileStatus.ALREADY_RECONCILED

        elif decision.action == ReconcileAction.FAIL:
            written = self.repo.mark_error(
                asset.id,
                decision.error_message,
                failed_at=now,
                expected_job_id=job_id,
                final_job_status=decision.final_job_status,
            )
            if written:
                logger.warning(f"⚠️ {asset.id} failed: {decision.error_message}")
                outcome.status = ReconcileStatus.FAILED
                outcome.error = decision.error_message
            else:
                outcome.status = ReconcileStatus.ALREADY_RECONCILED

        elif decision.action == ReconcileAction.FLAG_STUCK:
            written = self.repo.flag_possibly_stuck(
                asset.id,
                job_id,
                detected_at=now,
                processing_minutes=decision.processing_minutes,
                progress=decision.progress,
            )
            if written:
                logger.warning(f"🐢 {asset.id} possibly stuck: {decision.reason}")
                outcome.status = ReconcileStatus.FLAGGED_STUCK
            else:
                outcome.status = ReconcileStatus.ALREADY_RECONCILED

        elif decision.action == ReconcileAction.RECORD_PROGRESS:
            if not self.repo.record_progress(asset.id, job_id, decision.progress):
                outcome.status = ReconcileStatus.ALREADY_RECONCILED

        return outcome

    # ========================================================================
    # PASSES
    # ========================================================================

    def run_pass(self, assets: List[VideoAsset]) -> List[ReconcileOutcome]:
        """
        Reconcile assets one at a time, oldest first.

        Waits poll_delay between assets and rate_limit_backoff after a
        throttled check. Assets not reached within max_pass_duration are
        reported DEFERRED and left for the next pass.
        """
        outcomes: List[ReconcileOutcome] = []
        started = self._monotonic()

        for index, asset in enumerate(assets):
            if index > 0:
                self.pacer.pause()

            if self._monotonic() - started >= self.config.max_pass_duration:
                deferred = assets[index:]
                logger.warning(f"⏱️ Pass ceiling reached; deferring {len(deferred)} asset(s)")
                outcomes.extend(
                    ReconcileOutcome(asset_id=a.id, status=ReconcileStatus.DEFERRED, job_id=a.job_id)
                    for a in deferred
                )
                break

            outcome = self.reconcile_asset(asset)
            outcomes.append(outcome)

            if outcome.status == ReconcileStatus.RATE_LIMITED:
                self.pacer.backoff(self.config.rate_limit_backoff)

        return outcomes

    def monitor(self, asset_ids: Iterable[str]) -> List[ReconcileOutcome]:
        """
        Poll the given assets until all are resolved or max_poll_attempts is hit.

        Rounds are poll_interval apart. Assets still in flight at the end
        remain processing and are reported with their last outcome.

        Returns:
            One outcome per distinct asset id, in the order given
        """
        ordered = list(dict.fromkeys(asset_ids))
        final: Dict[str, ReconcileOutcome] = {}
        pending = list(ordered)
        if not pending:
            return []

        for attempt in range(1, self.config.max_poll_attempts + 1):
            assets = self.repo.list_processing(asset_ids=pending)
            in_processing = {a.id for a in assets}

            for asset_id in pending:
                if asset_id not in in_processing:
                    final[asset_id] = ReconcileOutcome(asset_id=asset_id, status=ReconcileStatus.SKIPPED)

            for outcome in self.run_pass(assets):
                final[outcome.asset_id] = outcome

            pending = [a for a in pending if not final[a].is_resolved]
            logger.info(
                f"🔁 Monitor round {attempt}/{self.config.max_poll_attempts}: "
                f"{len(ordered) - len(pending)} resolved, {len(pending)} pending"
            )
            if not pending:
                break
            if attempt < self.config.max_poll_attempts:
                self._sleep(self.config.poll_interval)

        return [final[a] for a in ordered]
