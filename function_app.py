"""
Azure Functions entry point for the batch video transcode orchestrator.

Video assets that need transcoding are selected from PostgreSQL, claimed
and submitted to AWS Elemental MediaConvert in bounded windows; a second
timer reconciles the remote job state back onto the assets.

Architecture:
    Timer / HTTP -> TranscodeOrchestrator -> CandidateSelector -> JobSubmitter
                                          |                          |
                                          +-> StatusReconciler   MediaConvert
                                                     |
                                              video_assets (PostgreSQL)

Exports:
    app: Azure Function App instance

Endpoints:
    POST /api/transcode/process?project_id={id}   - Run a processing pass
    POST /api/transcode/reconcile?project_id={id} - Run a reconciliation pass
                                                    (body {"asset_ids": [...]} monitors those assets)
    GET  /api/transcode/status?project_id={id}    - Asset counts per status

Timers:
    transcode_process_candidates   - Every 10 minutes
    transcode_reconcile_processing - Every 2 minutes

Environment Variables:
    POSTGIS_HOST, POSTGIS_DATABASE, POSTGIS_USER, POSTGIS_PASSWORD: Asset store
    AWS_REGION, AWS_S3_OUTPUT_BUCKET, AWS_MEDIACONVERT_ROLE: Transcoding service
    TRANSCODE_*: Pass tuning (see config/transcode_config.py)
"""

# ========================================================================
# IMPORTS - Categorized by source for maintainability
# ========================================================================

# Native Python modules
import logging

# Azure SDK modules (3rd party - Microsoft)
import azure.functions as func

# Suppress AWS SDK request logging
logging.getLogger("botocore").setLevel(logging.WARNING)
logging.getLogger("boto3").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)

# Application modules (our code)
from util_logger import LoggerFactory, ComponentType
from triggers.transcode import (
    process_candidates_timer_handler,
    reconcile_processing_timer_handler,
    transcode_process_handler,
    transcode_reconcile_handler,
    transcode_status_handler,
)

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "FunctionApp")

# Initialize function app with HTTP auth level
app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)


# ============================================================================
# TRANSCODE HTTP ENDPOINTS
# ============================================================================

@app.route(route="transcode/process", methods=["POST"])
def transcode_process(req: func.HttpRequest) -> func.HttpResponse:
    """Run a processing pass now: POST /api/transcode/process"""
    return transcode_process_handler(req)


@app.route(route="transcode/reconcile", methods=["POST"])
def transcode_reconcile(req: func.HttpRequest) -> func.HttpResponse:
    """Run a reconciliation pass now: POST /api/transcode/reconcile"""
    return transcode_reconcile_handler(req)


@app.route(route="transcode/status", methods=["GET"])
def transcode_status(req: func.HttpRequest) -> func.HttpResponse:
    """Asset counts per status: GET /api/transcode/status"""
    return transcode_status_handler(req)


# ============================================================================
# TRANSCODE TIMERS
# ============================================================================

@app.timer_trigger(
    schedule="0 */10 * * * *",  # Every 10 minutes
    arg_name="timer",
    run_on_startup=False
)
def transcode_process_candidates(timer: func.TimerRequest) -> None:
    """
    Select ready assets that need transcoding and submit their jobs.

    At most TRANSCODE_MAX_BATCH_SIZE assets per run, submitted in windows of
    TRANSCODE_MAX_CONCURRENT_SUBMISSIONS.
    """
    process_candidates_timer_handler.handle(timer)


@app.timer_trigger(
    schedule="0 */2 * * * *",  # Every 2 minutes
    arg_name="timer",
    run_on_startup=False
)
def transcode_reconcile_processing(timer: func.TimerRequest) -> None:
    """
    Apply remote job state to every processing asset.

    Completed jobs become ready with their output location; failed jobs
    become error; long-running jobs are flagged possibly_stuck.
    """
    reconcile_processing_timer_handler.handle(timer)


logger.info("✅ Transcode functions registered: 3 HTTP routes, 2 timers")
