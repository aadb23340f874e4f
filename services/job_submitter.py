"""
Job Submitter.

Claims one candidate asset and submits its transcoding job.

Sequence per asset:
    1. Resolve the expected output location (pure); an asset whose
       identifiers cannot form one is claimed and failed without a
       remote call, so it leaves the candidate set
    2. Conditional claim ready -> processing; a lost claim is SKIPPED
       and no remote call is made
    3. create_job on the transcoding service
    4. Persist the job id

Any failure after a successful claim moves the asset to error with a
readable last_error, so a processing asset never sits without a job id
while the store is writable. If even that write fails, the next
reconciliation pass finds the job-less asset and fails it.

Exports:
    JobSubmitter: Claim-and-submit for one asset
"""

from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from core.logic.output_resolver import OutputResolver
from core.models import SubmissionOutcome, SubmissionStatus, TargetProfile, VideoAsset
from exceptions import ContractViolationError, DatabaseError, EncodingServiceError, RateLimitError
from infrastructure.interface_repository import IAssetRepository, IEncodingService, ParamNames
from util_logger import LogContext, LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "JobSubmitter")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class JobSubmitter:
    """
    Claim-and-submit for one asset at a time.

    Thread-safe as long as the repository and encoding service are: the
    submitter itself keeps no per-call state.
    """

    def __init__(
        self,
        repository: IAssetRepository,
        encoder: IEncodingService,
        resolver: OutputResolver,
        clock: Callable[[], datetime] = _utc_now
    ):
        self.repo = repository
        self.encoder = encoder
        self.resolver = resolver
        self._clock = clock

    def submit(self, asset: VideoAsset, profile: TargetProfile) -> SubmissionOutcome:
        """
        Claim the asset and submit its job.

        Returns:
            SubmissionOutcome: SUBMITTED, SKIPPED (claim lost) or FAILED

        Raises:
            ConfigurationError: If the transcoding service is not configured
                (the claimed asset is failed first)
        """
        ctx = LogContext(scope_id=asset.project_id, asset_id=asset.id)
        try:
            expected_output = self.resolver.resolve(asset.id, asset.project_id, profile.height)
        except ContractViolationError as e:
            return self._reject(asset, profile, str(e))

        try:
            claimed = self.repo.claim_for_processing(
                asset.id, profile.height, expected_output, self._clock()
            )
        except DatabaseError as e:
            logger.error(f"❌ Claim failed for {asset.id}: {e}", extra=ctx.extra())
            return SubmissionOutcome(asset_id=asset.id, status=SubmissionStatus.FAILED, error=str(e))

        if claimed is None:
            logger.info(f"⏭️ {asset.id} already claimed elsewhere, skipping", extra=ctx.extra())
            return SubmissionOutcome(asset_id=asset.id, status=SubmissionStatus.SKIPPED)

        correlation: Dict[str, str] = {
            ParamNames.ASSET_ID: claimed.id,
            ParamNames.PROJECT_ID: claimed.project_id,
            ParamNames.TARGET_HEIGHT: str(profile.height),
            ParamNames.ORIGINAL_FILENAME: claimed.original_filename,
        }

        try:
            job_id = self.encoder.create_job(
                claimed.source_location,
                self.resolver.destination(claimed.id, claimed.project_id),
                profile,
                {k: v for k, v in correlation.items() if v is not None},
            )
        except RateLimitError as e:
            return self._fail(claimed.id, f"Transcode submission rate limited: {e}", expected_output, rate_limited=True)
        except EncodingServiceError as e:
            return self._fail(claimed.id, f"Transcode submission failed: {e}", expected_output)
        except Exception as e:
            self._fail(claimed.id, f"Transcode submission failed: {type(e).__name__}: {e}", expected_output)
            raise

        try:
            recorded = self.repo.record_job_submission(claimed.id, job_id)
        except DatabaseError as e:
            logger.error(
                f"❌ Job {job_id} created but its id could not be stored for {claimed.id}: {e}",
                extra=ctx.with_job(job_id).extra()
            )
            outcome = self._fail(claimed.id, f"Could not record transcode job {job_id}: {e}", expected_output)
            outcome.job_id = job_id
            return outcome

        if not recorded:
            # Asset left processing between claim and record (reconciled as job-less)
            logger.warning(
                f"⚠️ {claimed.id} changed state before job {job_id} was recorded; remote job orphaned",
                extra=ctx.with_job(job_id).extra()
            )
            return SubmissionOutcome(
                asset_id=claimed.id,
                status=SubmissionStatus.FAILED,
                job_id=job_id,
                expected_output_location=expected_output,
                error="asset changed state before the job id was recorded",
            )

        logger.info(
            f"📤 Submitted {claimed.id} as job {job_id} -> {expected_output}",
            extra=ctx.with_job(job_id).extra()
        )
        return SubmissionOutcome(
            asset_id=claimed.id,
            status=SubmissionStatus.SUBMITTED,
            job_id=job_id,
            expected_output_location=expected_output,
        )

    def _reject(self, asset: VideoAsset, profile: TargetProfile, reason: str) -> SubmissionOutcome:
        """Claim an asset with unusable identifiers and fail it without submitting."""
        logger.error(
            f"❌ {asset.id} cannot be transcoded: {reason}",
            extra=LogContext(scope_id=asset.project_id, asset_id=asset.id).extra()
        )
        try:
            claimed = self.repo.claim_for_processing(asset.id, profile.height, None, self._clock())
        except DatabaseError as e:
            return SubmissionOutcome(asset_id=asset.id, status=SubmissionStatus.FAILED, error=f"{reason}; {e}")

        if claimed is None:
            return SubmissionOutcome(asset_id=asset.id, status=SubmissionStatus.SKIPPED)
        return self._fail(asset.id, f"Unusable asset identifiers: {reason}", None)

    def _fail(
        self,
        asset_id: str,
        message: str,
        expected_output: Optional[str],
        rate_limited: bool = False
    ) -> SubmissionOutcome:
        """Move a claimed, job-less asset to error and report the failure."""
        logger.warning(f"⚠️ {message} ({asset_id})", extra=LogContext(asset_id=asset_id).extra())
        try:
            moved = self.repo.mark_error(asset_id, message, failed_at=self._clock())
            if not moved:
                logger.warning(f"⚠️ {asset_id} was no longer processing without a job id; error not recorded")
        except DatabaseError as e:
            # Left processing without a job id; the reconciler fails it on its next pass
            logger.error(f"❌ Could not record failure for {asset_id}: {e}")

        return SubmissionOutcome(
            asset_id=asset_id,
            status=SubmissionStatus.FAILED,
            expected_output_location=expected_output,
            error=message,
            rate_limited=rate_limited,
        )
