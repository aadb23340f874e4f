"""
Video Asset Repository.

Database operations for the video_assets table. Every state change is a
single conditional UPDATE so that concurrent processing and reconciliation
passes cannot double-submit or double-complete an asset: the WHERE clause
carries the expected state, and a write that matches no row is reported
back to the caller as False (or None for the claim).

Job bookkeeping lives in the job_metadata JSONB column and is merged with
the || operator, so keys written by other tools survive.

Exports:
    VideoAssetRepository: IAssetRepository on PostgreSQL
"""

import json
from datetime import datetime
from typing import Optional, List, Dict, Any

from psycopg import sql

from config import AppConfig
from core.models import (
    AssetStatus,
    JobMetadata,
    RemoteJobStatus,
    TargetProfile,
    TranscodingStats,
    VideoAsset,
)
from util_logger import LoggerFactory, ComponentType
from .interface_repository import IAssetRepository
from .postgresql import PostgreSQLRepository

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "VideoAssetRepository")

# Keys reset when an asset is claimed for a new job
_CLAIM_CLEARED_KEYS = (
    'job_id', 'last_error', 'possibly_stuck', 'stuck_detected_at',
    'processing_minutes', 'last_progress', 'failed_at', 'final_job_status',
)


class VideoAssetRepository(PostgreSQLRepository, IAssetRepository):
    """
    Repository for video asset lifecycle operations.

    Table: {app_schema}.video_assets
    """

    def __init__(self, connection_string: Optional[str] = None,
                 schema_name: Optional[str] = None,
                 config: Optional[AppConfig] = None):
        super().__init__(connection_string=connection_string, schema_name=schema_name, config=config)
        self.table = self.config.database.video_asset_table

    def _table_ref(self) -> sql.Composed:
        return sql.SQL("{}.{}").format(sql.Identifier(self.schema_name), sql.Identifier(self.table))

    # =========================================================================
    # READ
    # =========================================================================

    def select_candidates(self, scope_id: Optional[str], limit: int) -> List[VideoAsset]:
        """
        Assets eligible for a new transcoding job.

        Ready, flagged for transcoding and not assigned downstream, oldest
        first with id as tie-breaker so repeated calls see the same order.

        Args:
            scope_id: Project to restrict to, None for all projects
            limit: Maximum number of assets to return

        Returns:
            List of VideoAsset (possibly empty)
        """
        with self._error_context("candidate selection", scope_id):
            conditions = [
                sql.SQL("status = %s"),
                sql.SQL("needs_transcoding"),
                sql.SQL("assigned_target IS NULL"),
            ]
            params: List[Any] = [AssetStatus.READY.value]
            if scope_id is not None:
                conditions.append(sql.SQL("project_id = %s"))
                params.append(scope_id)
            params.append(limit)

            query = sql.SQL("""
                SELECT * FROM {table}
                WHERE {conditions}
                ORDER BY created_at ASC, id ASC
                LIMIT %s
            """).format(
                table=self._table_ref(),
                conditions=sql.SQL(" AND ").join(conditions)
            )

            rows = self._execute_query(query, tuple(params), fetch='all')
            logger.debug(f"🔎 {len(rows)} candidate(s) for scope {scope_id or '*'}")
            return [self._row_to_model(row) for row in rows]

    def list_processing(
        self,
        scope_id: Optional[str] = None,
        asset_ids: Optional[List[str]] = None
    ) -> List[VideoAsset]:
        """
        Assets currently in processing.

        Args:
            scope_id: Project to restrict to, None for all projects
            asset_ids: Restrict to these ids (used by synchronous monitoring)
        """
        with self._error_context("processing listing", scope_id):
            conditions = [sql.SQL("status = %s")]
            params: List[Any] = [AssetStatus.PROCESSING.value]
            if scope_id is not None:
                conditions.append(sql.SQL("project_id = %s"))
                params.append(scope_id)
            if asset_ids is not None:
                conditions.append(sql.SQL("id = ANY(%s)"))
                params.append(list(asset_ids))

            query = sql.SQL("""
                SELECT * FROM {table}
                WHERE {conditions}
                ORDER BY created_at ASC, id ASC
            """).format(
                table=self._table_ref(),
                conditions=sql.SQL(" AND ").join(conditions)
            )

            rows = self._execute_query(query, tuple(params), fetch='all')
            return [self._row_to_model(row) for row in rows]

    def get(self, asset_id: str) -> Optional[VideoAsset]:
        """
        Get an asset by primary key.

        Returns:
            VideoAsset if found, None otherwise
        """
        with self._error_context("asset retrieval", asset_id):
            query = sql.SQL("SELECT * FROM {table} WHERE id = %s").format(table=self._table_ref())
            row = self._execute_query(query, (asset_id,), fetch='one')
            if not row:
                return None
            return self._row_to_model(row)

    # =========================================================================
    # SUBMISSION WRITES
    # =========================================================================

    def claim_for_processing(
        self,
        asset_id: str,
        target_resolution: int,
        expected_output_location: Optional[str],
        now: datetime
    ) -> Optional[VideoAsset]:
        """
        Conditional ready -> processing.

        Stamps submitted_at, records the target resolution and expected
        output, increments attempts and clears everything left over from a
        previous job. The WHERE clause repeats the candidate predicate, so
        of two concurrent claims exactly one gets a row back.

        Returns:
            Claimed VideoAsset, or None if the asset no longer qualifies
        """
        with self._error_context("claim", asset_id):
            cleared = sql.SQL(" - ").join(sql.Literal(key) for key in _CLAIM_CLEARED_KEYS)
            query = sql.SQL("""
                UPDATE {table}
                SET status = %s,
                    job_metadata = (COALESCE(job_metadata, '{{}}'::jsonb) - {cleared})
                        || jsonb_build_object(
                            'submitted_at', %s::text,
                            'target_resolution', %s::int,
                            'expected_output_location', %s::text,
                            'attempts', COALESCE((job_metadata->>'attempts')::int, 0) + 1,
                            'possibly_stuck', false
                        ),
                    updated_at = %s
                WHERE id = %s
                  AND status = %s
                  AND needs_transcoding
                  AND assigned_target IS NULL
                RETURNING *
            """).format(table=self._table_ref(), cleared=cleared)

            row = self._execute_query(
                query,
                (
                    AssetStatus.PROCESSING.value,
                    now.isoformat(),
                    target_resolution,
                    expected_output_location,
                    now,
                    asset_id,
                    AssetStatus.READY.value,
                ),
                fetch='one'
            )

            if not row:
                self._log_operation_result(False, "Claim", asset_id, {"reason": "no longer a candidate"})
                return None

            self._log_operation_result(True, "Claimed", asset_id, {"target_resolution": target_resolution})
            return self._row_to_model(row)

    def record_job_submission(self, asset_id: str, job_id: str) -> bool:
        """Attach the job id to a processing asset that has none yet."""
        with self._error_context("job id recording", asset_id):
            query = sql.SQL("""
                UPDATE {table}
                SET job_metadata = job_metadata || jsonb_build_object('job_id', %s::text),
                    updated_at = now()
                WHERE id = %s
                  AND status = %s
                  AND (job_metadata->>'job_id') IS NULL
                RETURNING id
            """).format(table=self._table_ref())

            row = self._execute_query(
                query,
                (job_id, asset_id, AssetStatus.PROCESSING.value),
                fetch='one'
            )
            return row is not None

    # =========================================================================
    # RECONCILIATION WRITES
    # =========================================================================

    def mark_ready(
        self,
        asset_id: str,
        job_id: str,
        media_location: str,
        original_filename: Optional[str],
        profile: TargetProfile,
        transcoded_at: datetime
    ) -> bool:
        """
        Conditional processing -> ready for the given job.

        Points media_location at the transcoded output, clears
        needs_transcoding and the stuck flag, and overwrites the media
        characteristics with the profile's. source_location is untouched.
        """
        with self._error_context("mark ready", asset_id):
            patch = {
                'possibly_stuck': False,
                'transcoded_at': transcoded_at.isoformat(),
                'final_job_status': RemoteJobStatus.COMPLETE.value,
                'last_progress': 100,
            }
            query = sql.SQL("""
                UPDATE {table}
                SET status = %s,
                    needs_transcoding = false,
                    media_location = %s,
                    original_filename = %s,
                    width = %s,
                    height = %s,
                    format = %s,
                    codec = %s,
                    job_metadata = (job_metadata - 'stuck_detected_at' - 'processing_minutes') || %s::jsonb,
                    updated_at = %s
                WHERE id = %s
                  AND status = %s
                  AND job_metadata->>'job_id' = %s
                RETURNING id
            """).format(table=self._table_ref())

            row = self._execute_query(
                query,
                (
                    AssetStatus.READY.value,
                    media_location,
                    original_filename,
                    profile.width,
                    profile.height,
                    profile.container,
                    profile.codec,
                    json.dumps(patch),
                    transcoded_at,
                    asset_id,
                    AssetStatus.PROCESSING.value,
                    job_id,
                ),
                fetch='one'
            )
            return row is not None

    def mark_error(
        self,
        asset_id: str,
        error_message: str,
        failed_at: datetime,
        expected_job_id: Optional[str] = None,
        final_job_status: Optional[str] = None
    ) -> bool:
        """
        Conditional processing -> error.

        With expected_job_id None the row must have no job id (submission
        failures and job-less processing assets); otherwise the job id
        must match.
        """
        with self._error_context("mark error", asset_id):
            patch: Dict[str, Any] = {
                'last_error': error_message,
                'failed_at': failed_at.isoformat(),
            }
            if final_job_status is not None:
                patch['final_job_status'] = final_job_status

            params: List[Any] = [
                AssetStatus.ERROR.value,
                json.dumps(patch),
                failed_at,
                asset_id,
                AssetStatus.PROCESSING.value,
            ]
            if expected_job_id is None:
                job_condition = sql.SQL("(job_metadata->>'job_id') IS NULL")
            else:
                job_condition = sql.SQL("job_metadata->>'job_id' = %s")
                params.append(expected_job_id)

            query = sql.SQL("""
                UPDATE {table}
                SET status = %s,
                    job_metadata = job_metadata || %s::jsonb,
                    updated_at = %s
                WHERE id = %s
                  AND status = %s
                  AND {job_condition}
                RETURNING id
            """).format(table=self._table_ref(), job_condition=job_condition)

            row = self._execute_query(query, tuple(params), fetch='one')
            return row is not None

    def flag_possibly_stuck(
        self,
        asset_id: str,
        job_id: str,
        detected_at: datetime,
        processing_minutes: float,
        progress: Optional[int] = None
    ) -> bool:
        """
        Set the advisory stuck flag. Status stays processing.

        stuck_detected_at keeps the first detection; processing_minutes is
        refreshed on every pass.
        """
        with self._error_context("stuck flag", asset_id):
            patch: Dict[str, Any] = {
                'possibly_stuck': True,
                'processing_minutes': processing_minutes,
            }
            if progress is not None:
                patch['last_progress'] = progress

            query = sql.SQL("""
                UPDATE {table}
                SET job_metadata = job_metadata || %s::jsonb || jsonb_build_object(
                        'stuck_detected_at',
                        COALESCE(NULLIF(job_metadata->'stuck_detected_at', 'null'::jsonb), to_jsonb(%s::text))
                    ),
                    updated_at = now()
                WHERE id = %s
                  AND status = %s
                  AND job_metadata->>'job_id' = %s
                RETURNING id
            """).format(table=self._table_ref())

            row = self._execute_query(
                query,
                (json.dumps(patch), detected_at.isoformat(), asset_id, AssetStatus.PROCESSING.value, job_id),
                fetch='one'
            )
            return row is not None

    def record_progress(self, asset_id: str, job_id: str, progress: int) -> bool:
        """Store the last reported percent complete."""
        with self._error_context("progress recording", asset_id):
            query = sql.SQL("""
                UPDATE {table}
                SET job_metadata = job_metadata || jsonb_build_object('last_progress', %s::int),
                    updated_at = now()
                WHERE id = %s
                  AND status = %s
                  AND job_metadata->>'job_id' = %s
                RETURNING id
            """).format(table=self._table_ref())

            row = self._execute_query(
                query,
                (progress, asset_id, AssetStatus.PROCESSING.value, job_id),
                fetch='one'
            )
            return row is not None

    # =========================================================================
    # STATUS REPORT
    # =========================================================================

    def count_by_status(self, scope_id: Optional[str], recent_since: datetime) -> TranscodingStats:
        """
        Counts per status for one project (or all when scope_id is None).

        needs_transcoding only counts ready assets still waiting for a job;
        recently_completed counts completions recorded since recent_since.
        """
        with self._error_context("status counts", scope_id):
            params: List[Any] = [
                AssetStatus.READY.value,
                AssetStatus.PROCESSING.value,
                AssetStatus.ERROR.value,
                AssetStatus.READY.value,
                AssetStatus.PROCESSING.value,
                AssetStatus.READY.value,
                recent_since,
            ]
            where = sql.SQL("")
            if scope_id is not None:
                where = sql.SQL("WHERE project_id = %s")
                params.append(scope_id)

            query = sql.SQL("""
                SELECT
                    COUNT(*) AS total,
                    COUNT(*) FILTER (WHERE status = %s) AS ready,
                    COUNT(*) FILTER (WHERE status = %s) AS processing,
                    COUNT(*) FILTER (WHERE status = %s) AS error,
                    COUNT(*) FILTER (WHERE status = %s AND needs_transcoding) AS needs_transcoding,
                    COUNT(*) FILTER (
                        WHERE status = %s
                          AND (job_metadata->>'possibly_stuck')::boolean IS TRUE
                    ) AS possibly_stuck,
                    COUNT(*) FILTER (
                        WHERE status = %s
                          AND (job_metadata->>'transcoded_at')::timestamptz >= %s
                    ) AS recently_completed
                FROM {table}
                {where}
            """).format(table=self._table_ref(), where=where)

            row = self._execute_query(query, tuple(params), fetch='one') or {}
            return TranscodingStats(
                scope_id=scope_id,
                total=row.get('total', 0),
                ready=row.get('ready', 0),
                processing=row.get('processing', 0),
                error=row.get('error', 0),
                needs_transcoding=row.get('needs_transcoding', 0),
                possibly_stuck=row.get('possibly_stuck', 0),
                recently_completed=row.get('recently_completed', 0),
            )

    # =========================================================================
    # ROW MAPPING
    # =========================================================================

    def _row_to_model(self, row: Dict[str, Any]) -> VideoAsset:
        """
        Convert a database row dict to a VideoAsset model.

        psycopg3 deserializes JSONB to dicts; older rows written as text
        are parsed here.
        """
        metadata = row.get('job_metadata') or {}
        if isinstance(metadata, str):
            metadata = json.loads(metadata)

        return VideoAsset(
            id=row['id'],
            project_id=row.get('project_id'),
            source_location=row['source_location'],
            media_location=row.get('media_location') or row['source_location'],
            original_filename=row.get('original_filename'),
            status=AssetStatus(row['status']),
            needs_transcoding=bool(row.get('needs_transcoding')),
            assigned_target=row.get('assigned_target'),
            job_metadata=JobMetadata.model_validate(metadata),
            format=row.get('format'),
            codec=row.get('codec'),
            width=row.get('width'),
            height=row.get('height'),
            file_size=row.get('file_size'),
            created_at=row['created_at'],
            updated_at=row['updated_at'],
        )
