"""
Reconciliation tests: completion, failure, idempotence, self-healing,
the advisory stuck flag, throttling and pass ceilings.
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from core.models import AssetStatus, ReconcileStatus, RemoteJob, RemoteJobStatus
from exceptions import EncodingServiceError, RateLimitError
from services.status_reconciler import StatusReconciler
from tests.factories.model_factories import (
    make_processing_asset,
    make_remote_job,
    make_video_asset,
)


@pytest.fixture
def make_reconciler(repo, encoder, resolver, fake_time, make_transcode_config):
    def _make(**overrides):
        return StatusReconciler(
            repo,
            encoder,
            resolver,
            make_transcode_config(**overrides),
            clock=fake_time.clock,
            monotonic=fake_time.monotonic,
            sleep=fake_time.sleep,
        )
    return _make


@pytest.fixture
def reconciler(make_reconciler):
    return make_reconciler()


def _claimed(repo, resolver, fake_time, minutes_ago=2, **kwargs):
    """Processing asset as the submitter leaves it, stored in repo."""
    asset = make_processing_asset(submitted_at=fake_time.now - timedelta(minutes=minutes_ago), **kwargs)
    metadata = asset.job_metadata.model_copy(update={
        "expected_output_location": resolver.resolve(asset.id, asset.project_id, 480),
    })
    asset = asset.model_copy(update={"job_metadata": metadata})
    repo.add(asset)
    return asset


class TestCompletion:

    def test_complete_job_makes_asset_ready(self, repo, encoder, resolver, fake_time, reconciler):
        asset = _claimed(repo, resolver, fake_time)
        encoder.set_job(asset.job_id, RemoteJobStatus.COMPLETE, percent_complete=100)

        outcome = reconciler.reconcile_asset(asset)

        assert outcome.status == ReconcileStatus.COMPLETED
        stored = repo.get(asset.id)
        assert stored.status == AssetStatus.READY
        assert stored.needs_transcoding is False
        assert stored.height == 480
        assert stored.width == 854
        assert stored.format == "mp4"
        assert stored.codec == "h264"
        assert stored.media_location == resolver.resolve(asset.id, asset.project_id, 480)
        assert stored.media_location == asset.job_metadata.expected_output_location
        assert stored.source_location == asset.source_location
        assert stored.original_filename.endswith(".mp4")
        assert stored.job_metadata.transcoded_at == fake_time.now
        assert stored.job_metadata.final_job_status == "COMPLETE"
        assert outcome.media_location == stored.media_location

    def test_completion_is_idempotent(self, repo, encoder, resolver, fake_time, reconciler):
        asset = _claimed(repo, resolver, fake_time)
        encoder.set_job(asset.job_id, RemoteJobStatus.COMPLETE)

        first = reconciler.reconcile_asset(asset)
        after_first = repo.get(asset.id)
        fake_time.advance(60)
        second = reconciler.reconcile_asset(asset)

        assert first.status == ReconcileStatus.COMPLETED
        assert second.status == ReconcileStatus.ALREADY_RECONCILED
        assert repo.get(asset.id) == after_first

    def test_completion_uses_recorded_resolution(self, repo, encoder, resolver, fake_time, reconciler):
        asset = _claimed(repo, resolver, fake_time, target_resolution=720)
        encoder.set_job(asset.job_id, RemoteJobStatus.COMPLETE)

        reconciler.reconcile_asset(asset)

        stored = repo.get(asset.id)
        assert stored.height == 720
        assert stored.media_location.endswith(f"/{asset.id}-720p.mp4")

    def test_stuck_flag_cleared_on_completion(self, repo, encoder, resolver, fake_time, reconciler):
        asset = _claimed(repo, resolver, fake_time, minutes_ago=30)
        encoder.set_job(asset.job_id, RemoteJobStatus.PROGRESSING)
        reconciler.reconcile_asset(asset)
        assert repo.get(asset.id).job_metadata.possibly_stuck is True

        encoder.set_job(asset.job_id, RemoteJobStatus.COMPLETE)
        outcome = reconciler.reconcile_asset(repo.get(asset.id))

        assert outcome.status == ReconcileStatus.COMPLETED
        stored = repo.get(asset.id)
        assert stored.job_metadata.possibly_stuck is False
        assert stored.job_metadata.stuck_detected_at is None


class TestFailure:

    def test_remote_error_fails_asset(self, repo, encoder, resolver, fake_time, reconciler):
        asset = _claimed(repo, resolver, fake_time)
        encoder.set_job(asset.job_id, RemoteJobStatus.ERROR, error_message="Invalid input codec")

        outcome = reconciler.reconcile_asset(asset)

        assert outcome.status == ReconcileStatus.FAILED
        stored = repo.get(asset.id)
        assert stored.status == AssetStatus.ERROR
        assert stored.job_metadata.last_error == "Invalid input codec"
        assert stored.job_metadata.final_job_status == "ERROR"
        assert stored.media_location == asset.media_location

    def test_missing_job_id_self_heals_without_remote_call(self, repo, encoder, resolver, fake_time, reconciler):
        asset = _claimed(repo, resolver, fake_time, job_id=None)

        outcome = reconciler.reconcile_asset(asset)

        assert outcome.status == ReconcileStatus.FAILED
        assert encoder.get_calls == []
        stored = repo.get(asset.id)
        assert stored.status == AssetStatus.ERROR
        assert stored.job_metadata.last_error == "missing job identifier"

    def test_grace_window_spares_fresh_claim(self, repo, resolver, fake_time, make_reconciler):
        asset = _claimed(repo, resolver, fake_time, minutes_ago=0, job_id=None)
        reconciler = make_reconciler(submission_grace=120)

        outcome = reconciler.reconcile_asset(asset)

        assert outcome.status == ReconcileStatus.IN_PROGRESS
        assert repo.get(asset.id).status == AssetStatus.PROCESSING


class TestStuckJobs:

    def test_old_job_is_flagged_but_stays_processing(self, repo, encoder, resolver, fake_time, reconciler):
        asset = _claimed(repo, resolver, fake_time, minutes_ago=20)
        encoder.set_job(asset.job_id, RemoteJobStatus.PROGRESSING, percent_complete=12)

        outcome = reconciler.reconcile_asset(asset)

        assert outcome.status == ReconcileStatus.FLAGGED_STUCK
        stored = repo.get(asset.id)
        assert stored.status == AssetStatus.PROCESSING
        assert stored.job_metadata.possibly_stuck is True
        assert stored.job_metadata.processing_minutes == 20.0
        assert stored.job_metadata.stuck_detected_at == fake_time.now
        assert stored.job_metadata.last_progress == 12

    def test_first_detection_time_is_kept(self, repo, encoder, resolver, fake_time, reconciler):
        asset = _claimed(repo, resolver, fake_time, minutes_ago=20)
        encoder.set_job(asset.job_id, RemoteJobStatus.PROGRESSING)
        reconciler.reconcile_asset(asset)
        first_detection = fake_time.now

        fake_time.advance(300)
        reconciler.reconcile_asset(repo.get(asset.id))

        stored = repo.get(asset.id)
        assert stored.job_metadata.stuck_detected_at == first_detection
        assert stored.job_metadata.processing_minutes == 25.0


class TestInFlight:

    def test_progress_recorded(self, repo, encoder, resolver, fake_time, reconciler):
        asset = _claimed(repo, resolver, fake_time)
        encoder.set_job(asset.job_id, RemoteJobStatus.PROGRESSING, percent_complete=55)

        outcome = reconciler.reconcile_asset(asset)

        assert outcome.status == ReconcileStatus.IN_PROGRESS
        assert repo.get(asset.id).job_metadata.last_progress == 55

    def test_asset_not_processing_is_skipped(self, repo, encoder, reconciler):
        asset = make_video_asset()
        repo.add(asset)

        outcome = reconciler.reconcile_asset(asset)

        assert outcome.status == ReconcileStatus.SKIPPED
        assert encoder.get_calls == []

    def test_status_check_failure_leaves_asset_unchanged(self, repo, encoder, resolver, fake_time, reconciler):
        asset = _claimed(repo, resolver, fake_time)
        encoder.jobs[asset.job_id] = EncodingServiceError("read timeout")
        before = repo.get(asset.id)

        outcome = reconciler.reconcile_asset(asset)

        assert outcome.status == ReconcileStatus.CHECK_FAILED
        assert repo.get(asset.id) == before

    def test_unusable_snapshot_is_a_failed_check(self, repo, encoder, resolver, fake_time, reconciler):
        asset = _claimed(repo, resolver, fake_time)
        with pytest.raises(ValidationError) as exc_info:
            RemoteJob(job_id=asset.job_id, status=RemoteJobStatus.PROGRESSING, percent_complete=140)
        encoder.jobs[asset.job_id] = exc_info.value
        before = repo.get(asset.id)

        outcome = reconciler.reconcile_asset(asset)

        assert outcome.status == ReconcileStatus.CHECK_FAILED
        assert repo.get(asset.id) == before

    def test_snapshot_for_another_job_is_a_failed_check(self, repo, encoder, resolver, fake_time, reconciler):
        asset = _claimed(repo, resolver, fake_time)
        encoder.jobs[asset.job_id] = make_remote_job(job_id="job-elsewhere", status=RemoteJobStatus.COMPLETE)
        before = repo.get(asset.id)

        outcome = reconciler.reconcile_asset(asset)

        assert outcome.status == ReconcileStatus.CHECK_FAILED
        assert "job-elsewhere" in outcome.error
        assert repo.get(asset.id) == before

    def test_bad_snapshot_does_not_abort_the_pass(self, repo, encoder, resolver, fake_time, reconciler):
        broken = _claimed(repo, resolver, fake_time)
        healthy = _claimed(repo, resolver, fake_time)
        encoder.jobs[broken.job_id] = make_remote_job(job_id="job-elsewhere", status=RemoteJobStatus.COMPLETE)
        encoder.set_job(healthy.job_id, RemoteJobStatus.COMPLETE)

        outcomes = reconciler.run_pass([broken, healthy])

        assert [o.status for o in outcomes] == [ReconcileStatus.CHECK_FAILED, ReconcileStatus.COMPLETED]
        assert repo.get(healthy.id).status == AssetStatus.READY

    def test_write_failure_is_reported(self, repo, encoder, resolver, fake_time, reconciler):
        asset = _claimed(repo, resolver, fake_time)
        encoder.set_job(asset.job_id, RemoteJobStatus.COMPLETE)
        repo.fail("mark_ready")

        outcome = reconciler.reconcile_asset(asset)

        assert outcome.status == ReconcileStatus.WRITE_FAILED
        assert repo.get(asset.id).status == AssetStatus.PROCESSING


class TestPasses:

    def test_rate_limit_backs_off_and_continues(self, repo, encoder, resolver, fake_time, make_reconciler):
        throttled = _claimed(repo, resolver, fake_time, minutes_ago=3)
        done = _claimed(repo, resolver, fake_time, minutes_ago=2)
        encoder.jobs[throttled.job_id] = RateLimitError("TooManyRequestsException")
        encoder.set_job(done.job_id, RemoteJobStatus.COMPLETE)
        reconciler = make_reconciler(rate_limit_backoff=10.0, poll_delay=0.5)

        outcomes = reconciler.run_pass([throttled, done])

        assert [o.status for o in outcomes] == [ReconcileStatus.RATE_LIMITED, ReconcileStatus.COMPLETED]
        assert repo.get(throttled.id).status == AssetStatus.PROCESSING
        assert fake_time.sleeps == [10.0, 0.5]

    def test_poll_delay_between_checks(self, repo, encoder, resolver, fake_time, make_reconciler):
        assets = [_claimed(repo, resolver, fake_time) for _ in range(4)]
        reconciler = make_reconciler(poll_delay=0.5)

        reconciler.run_pass(assets)

        assert fake_time.sleeps == [0.5, 0.5, 0.5]
        assert len(encoder.get_calls) == 4

    def test_pass_ceiling_defers_remaining_assets(self, repo, encoder, resolver, fake_time, make_reconciler):
        assets = [_claimed(repo, resolver, fake_time) for _ in range(5)]
        reconciler = make_reconciler(poll_delay=0.6, max_pass_duration=1.0)

        outcomes = reconciler.run_pass(assets)

        assert [o.status for o in outcomes] == [
            ReconcileStatus.IN_PROGRESS,
            ReconcileStatus.IN_PROGRESS,
            ReconcileStatus.DEFERRED,
            ReconcileStatus.DEFERRED,
            ReconcileStatus.DEFERRED,
        ]
        assert len(encoder.get_calls) == 2


class TestMonitor:

    def test_polls_until_resolved(self, repo, encoder, resolver, fake_time, make_reconciler):
        asset = _claimed(repo, resolver, fake_time)
        encoder.jobs[asset.job_id] = [
            make_remote_job(asset.job_id, RemoteJobStatus.PROGRESSING, percent_complete=30),
            make_remote_job(asset.job_id, RemoteJobStatus.PROGRESSING, percent_complete=80),
            make_remote_job(asset.job_id, RemoteJobStatus.COMPLETE),
        ]
        reconciler = make_reconciler(poll_interval=30.0, max_poll_attempts=10)

        outcomes = reconciler.monitor([asset.id])

        assert [o.status for o in outcomes] == [ReconcileStatus.COMPLETED]
        assert fake_time.sleeps == [30.0, 30.0]

    def test_gives_up_after_max_attempts(self, repo, encoder, resolver, fake_time, make_reconciler):
        asset = _claimed(repo, resolver, fake_time)
        reconciler = make_reconciler(poll_interval=5.0, max_poll_attempts=3)

        outcomes = reconciler.monitor([asset.id])

        assert outcomes[0].status == ReconcileStatus.IN_PROGRESS
        assert len(encoder.get_calls) == 3
        assert fake_time.sleeps == [5.0, 5.0]
        assert repo.get(asset.id).status == AssetStatus.PROCESSING

    def test_unknown_and_duplicate_ids(self, repo, encoder, resolver, fake_time, reconciler):
        asset = _claimed(repo, resolver, fake_time)
        encoder.set_job(asset.job_id, RemoteJobStatus.COMPLETE)

        outcomes = reconciler.monitor([asset.id, "no-such-asset", asset.id])

        assert [(o.asset_id, o.status) for o in outcomes] == [
            (asset.id, ReconcileStatus.COMPLETED),
            ("no-such-asset", ReconcileStatus.SKIPPED),
        ]

    def test_empty(self, reconciler):
        assert reconciler.monitor([]) == []
