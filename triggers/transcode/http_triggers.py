"""
Transcode HTTP Triggers.

HTTP endpoints for manual transcode passes and status reporting.

Exports:
    transcode_process_handler: HTTP trigger for POST /api/transcode/process
    transcode_reconcile_handler: HTTP trigger for POST /api/transcode/reconcile
    transcode_status_handler: HTTP trigger for GET /api/transcode/status
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import azure.functions as func

from services.transcode_orchestrator import TranscodeOrchestrator
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "TranscodeHTTP")


def _json_response(payload: Dict[str, Any], status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(payload, default=str),
        status_code=status_code,
        mimetype="application/json"
    )


def _error_response(error: Exception, operation: str) -> func.HttpResponse:
    logger.error(f"Transcode {operation} failed: {type(error).__name__}: {error}")
    return _json_response({
        "success": False,
        "error": str(error),
        "error_type": type(error).__name__,
        "operation": operation,
    }, status_code=500)


def _scope_param(req: func.HttpRequest) -> Optional[str]:
    project_id = req.params.get('project_id', '').strip()
    return project_id or None


def _asset_ids_from_body(req: func.HttpRequest) -> Optional[List[str]]:
    """
    Read an optional {"asset_ids": [...]} body.

    Returns None when the body is empty; raises ValueError when it is
    present but malformed.
    """
    raw = req.get_body()
    if not raw:
        return None

    try:
        body = json.loads(raw)
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError
        raise ValueError(f"Request body is not valid JSON: {e}") from e

    asset_ids = body.get('asset_ids') if isinstance(body, dict) else None
    if asset_ids is None:
        return None
    if not isinstance(asset_ids, list) or not all(isinstance(a, str) and a for a in asset_ids):
        raise ValueError("asset_ids must be a list of non-empty strings")
    return asset_ids


def transcode_process_handler(req: func.HttpRequest) -> func.HttpResponse:
    """
    Run one processing pass now.

    POST /api/transcode/process?project_id={project_id}

    Query Parameters:
        project_id: Restrict the pass to one project (optional)

    Returns:
        JSON ProcessCandidatesSummary
    """
    scope_id = _scope_param(req)
    logger.info(f"Manual transcode processing requested: project_id={scope_id}")

    try:
        summary = TranscodeOrchestrator().process_candidates(scope_id)
    except Exception as e:
        return _error_response(e, "process")

    response = summary.to_dict()
    response["triggered_at"] = datetime.now(timezone.utc).isoformat()
    response["triggered_by"] = "http_manual"
    return _json_response(response)


def transcode_reconcile_handler(req: func.HttpRequest) -> func.HttpResponse:
    """
    Run one reconciliation pass, or monitor specific assets.

    POST /api/transcode/reconcile?project_id={project_id}

    Body (optional):
        {"asset_ids": ["a1", "a2"]}  poll these assets until resolved or
                                     TRANSCODE_MAX_POLL_ATTEMPTS is reached

    Returns:
        JSON ReconcileSummary
    """
    try:
        asset_ids = _asset_ids_from_body(req)
    except ValueError as e:
        return _json_response({
            "success": False,
            "error": str(e),
            "error_type": "ValidationError",
            "usage": 'POST /api/transcode/reconcile with optional body {"asset_ids": ["..."]}'
        }, status_code=400)

    scope_id = _scope_param(req)

    try:
        orchestrator = TranscodeOrchestrator()
        if asset_ids is not None:
            logger.info(f"Manual transcode monitoring requested for {len(asset_ids)} asset(s)")
            summary = orchestrator.monitor(asset_ids)
        else:
            logger.info(f"Manual transcode reconciliation requested: project_id={scope_id}")
            summary = orchestrator.reconcile_processing(scope_id)
    except Exception as e:
        return _error_response(e, "reconcile")

    response = summary.to_dict()
    response["triggered_at"] = datetime.now(timezone.utc).isoformat()
    response["triggered_by"] = "http_manual"
    return _json_response(response)


def transcode_status_handler(req: func.HttpRequest) -> func.HttpResponse:
    """
    Asset counts per transcode status.

    GET /api/transcode/status?project_id={project_id}
    """
    scope_id = _scope_param(req)

    try:
        stats = TranscodeOrchestrator().get_transcoding_status(scope_id)
    except Exception as e:
        return _error_response(e, "status")

    response = {"success": True}
    response.update(stats.to_dict())
    return _json_response(response)


__all__ = [
    'transcode_process_handler',
    'transcode_reconcile_handler',
    'transcode_status_handler',
]
