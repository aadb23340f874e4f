"""
Transcode trigger tests.

The orchestrator is replaced with a stub so these tests only cover
request parsing, response shape and timer result interpretation.
"""

import json
from types import SimpleNamespace

import azure.functions as func
import pytest

import services.transcode_orchestrator as orchestrator_module
import triggers.transcode.http_triggers as http_triggers
from core.models import (
    ProcessCandidatesSummary,
    ReconcileOutcome,
    ReconcileStatus,
    ReconcileSummary,
    SubmissionOutcome,
    SubmissionStatus,
    TranscodingStats,
)
from exceptions import DatabaseError
from triggers.transcode import (
    ProcessCandidatesTimerHandler,
    ReconcileProcessingTimerHandler,
    transcode_process_handler,
    transcode_reconcile_handler,
    transcode_status_handler,
)


class StubOrchestrator:
    """Records calls; returns canned summaries or raises `error`."""

    calls = []
    error = None
    process_summary = None
    reconcile_summary = None

    def _record(self, name, *args):
        StubOrchestrator.calls.append((name,) + args)
        if StubOrchestrator.error:
            raise StubOrchestrator.error

    def process_candidates(self, scope_id=None):
        self._record("process_candidates", scope_id)
        return StubOrchestrator.process_summary or ProcessCandidatesSummary(scope_id=scope_id, success=True)

    def reconcile_processing(self, scope_id=None):
        self._record("reconcile_processing", scope_id)
        return StubOrchestrator.reconcile_summary or ReconcileSummary(scope_id=scope_id, success=True)

    def monitor(self, asset_ids):
        self._record("monitor", list(asset_ids))
        return ReconcileSummary(success=True, checked=len(asset_ids))

    def get_transcoding_status(self, scope_id=None):
        self._record("get_transcoding_status", scope_id)
        return TranscodingStats(scope_id=scope_id, total=3, ready=2, processing=1)


@pytest.fixture(autouse=True)
def stub_orchestrator(monkeypatch):
    StubOrchestrator.calls = []
    StubOrchestrator.error = None
    StubOrchestrator.process_summary = None
    StubOrchestrator.reconcile_summary = None
    monkeypatch.setattr(http_triggers, "TranscodeOrchestrator", StubOrchestrator)
    monkeypatch.setattr(orchestrator_module, "TranscodeOrchestrator", StubOrchestrator)
    return StubOrchestrator


def _request(method="POST", route="transcode/process", params=None, body=b""):
    return func.HttpRequest(method=method, url=f"/api/{route}", params=params or {}, body=body)


def _json(response):
    return json.loads(response.get_body())


# ============================================================================
# HTTP
# ============================================================================

class TestProcessEndpoint:

    def test_runs_pass_for_scope(self, stub_orchestrator):
        response = transcode_process_handler(_request(params={"project_id": " proj-1 "}))

        assert response.status_code == 200
        body = _json(response)
        assert body["scope_id"] == "proj-1"
        assert body["triggered_by"] == "http_manual"
        assert stub_orchestrator.calls == [("process_candidates", "proj-1")]

    def test_blank_scope_means_all_projects(self, stub_orchestrator):
        transcode_process_handler(_request(params={"project_id": "  "}))
        assert stub_orchestrator.calls == [("process_candidates", None)]

    def test_failure_returns_500(self, stub_orchestrator):
        stub_orchestrator.error = DatabaseError("candidate selection failed: connection refused")

        response = transcode_process_handler(_request())

        assert response.status_code == 500
        body = _json(response)
        assert body["success"] is False
        assert body["error_type"] == "DatabaseError"
        assert body["operation"] == "process"


class TestReconcileEndpoint:

    def test_empty_body_runs_reconciliation(self, stub_orchestrator):
        response = transcode_reconcile_handler(_request(route="transcode/reconcile"))

        assert response.status_code == 200
        assert stub_orchestrator.calls == [("reconcile_processing", None)]

    def test_asset_ids_run_monitor(self, stub_orchestrator):
        body = json.dumps({"asset_ids": ["a-1", "a-2"]}).encode()

        response = transcode_reconcile_handler(_request(route="transcode/reconcile", body=body))

        assert response.status_code == 200
        assert _json(response)["checked"] == 2
        assert stub_orchestrator.calls == [("monitor", ["a-1", "a-2"])]

    def test_body_without_asset_ids_runs_reconciliation(self, stub_orchestrator):
        body = json.dumps({"note": "manual"}).encode()
        transcode_reconcile_handler(_request(route="transcode/reconcile", body=body, params={"project_id": "p"}))
        assert stub_orchestrator.calls == [("reconcile_processing", "p")]

    @pytest.mark.parametrize("body", [
        b"{not json",
        b"\x80\x81 not utf-8",
        json.dumps({"asset_ids": "a-1"}).encode(),
        json.dumps({"asset_ids": ["a-1", ""]}).encode(),
        json.dumps({"asset_ids": [1, 2]}).encode(),
    ])
    def test_malformed_body_returns_400(self, stub_orchestrator, body):
        response = transcode_reconcile_handler(_request(route="transcode/reconcile", body=body))

        assert response.status_code == 400
        assert _json(response)["error_type"] == "ValidationError"
        assert stub_orchestrator.calls == []

    def test_failure_returns_500(self, stub_orchestrator):
        stub_orchestrator.error = DatabaseError("processing listing failed")
        response = transcode_reconcile_handler(_request(route="transcode/reconcile"))
        assert response.status_code == 500
        assert _json(response)["operation"] == "reconcile"


class TestStatusEndpoint:

    def test_returns_counts(self, stub_orchestrator):
        response = transcode_status_handler(_request(method="GET", route="transcode/status",
                                                     params={"project_id": "proj-2"}))

        assert response.status_code == 200
        assert response.mimetype == "application/json"
        body = _json(response)
        assert body["success"] is True
        assert body["scope_id"] == "proj-2"
        assert (body["total"], body["ready"], body["processing"]) == (3, 2, 1)


# ============================================================================
# TIMERS
# ============================================================================

class TestTimerHandlers:

    def test_process_healthy(self, stub_orchestrator):
        summary = ProcessCandidatesSummary(success=True, selected=2, outcomes=[
            SubmissionOutcome(asset_id="a-1", status=SubmissionStatus.SUBMITTED, job_id="job-1"),
            SubmissionOutcome(asset_id="a-2", status=SubmissionStatus.SKIPPED),
        ])
        stub_orchestrator.process_summary = summary

        result = ProcessCandidatesTimerHandler().handle(SimpleNamespace(past_due=False))

        assert result["success"] is True
        assert result["health_status"] == "HEALTHY"
        assert result["summary"]["selected"] == 2
        assert result["summary"]["submitted"] == 1
        assert "duration_seconds" in result

    def test_process_failures_flag_issues(self, stub_orchestrator):
        stub_orchestrator.process_summary = ProcessCandidatesSummary(success=True, selected=1, outcomes=[
            SubmissionOutcome(asset_id="a-1", status=SubmissionStatus.FAILED, error="rate limited"),
        ])

        result = ProcessCandidatesTimerHandler().handle(SimpleNamespace(past_due=True))

        assert result["health_status"] == "ISSUES_DETECTED"

    @pytest.mark.parametrize("status,expected", [
        (ReconcileStatus.COMPLETED, "HEALTHY"),
        (ReconcileStatus.IN_PROGRESS, "HEALTHY"),
        (ReconcileStatus.FLAGGED_STUCK, "ISSUES_DETECTED"),
        (ReconcileStatus.CHECK_FAILED, "ISSUES_DETECTED"),
    ])
    def test_reconcile_health(self, stub_orchestrator, status, expected):
        stub_orchestrator.reconcile_summary = ReconcileSummary(
            success=True, checked=1, outcomes=[ReconcileOutcome(asset_id="a-1", status=status)]
        )

        result = ReconcileProcessingTimerHandler().handle(SimpleNamespace(past_due=False))

        assert result["health_status"] == expected
        assert result["summary"]["checked"] == 1

    def test_disabled_pass(self, stub_orchestrator):
        stub_orchestrator.process_summary = ProcessCandidatesSummary(success=True, enabled=False)

        result = ProcessCandidatesTimerHandler().handle(SimpleNamespace(past_due=False))

        assert result["health_status"] == "DISABLED"
        assert result["summary"] == {"enabled": False, "selected": 0}

    def test_result_carries_run_id_and_only_nonzero_counts(self, stub_orchestrator):
        stub_orchestrator.reconcile_summary = ReconcileSummary(
            success=True, run_id="run-7f3a", checked=2, outcomes=[
                ReconcileOutcome(asset_id="a-1", status=ReconcileStatus.COMPLETED),
                ReconcileOutcome(asset_id="a-2", status=ReconcileStatus.COMPLETED),
            ]
        )

        result = ReconcileProcessingTimerHandler().handle(SimpleNamespace(past_due=False))

        assert result["run_id"] == "run-7f3a"
        assert result["summary"] == {"enabled": True, "checked": 2, "completed": 2}
        assert result["counts"]["failed"] == 0

    def test_exception_is_reported_not_raised(self, stub_orchestrator):
        stub_orchestrator.error = DatabaseError("candidate selection failed")

        result = ProcessCandidatesTimerHandler().handle(SimpleNamespace(past_due=False))

        assert result["success"] is False
        assert result["error_type"] == "DatabaseError"
        assert "traceback" in result
