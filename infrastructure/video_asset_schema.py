"""
Video Asset Schema Deployment.

DDL for the asset store. The ingestion pipeline owns row creation; this
module only guarantees the table and the indexes the orchestrator's
queries rely on:

- Partial index on candidates (ready + needs_transcoding + unassigned),
  ordered like the selector's ORDER BY
- Partial index on processing assets for reconciliation passes
- Project index for the status report

Usage:
    from infrastructure.video_asset_schema import VideoAssetSchemaDeployer

    deployer = VideoAssetSchemaDeployer()
    result = deployer.deploy_all()
"""

from typing import Dict, Any, Optional
from datetime import datetime, timezone
from psycopg import sql

from infrastructure.postgresql import PostgreSQLRepository
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SCHEMA, "video_asset_schema")


# ============================================================================
# VIDEO ASSET SCHEMA DEPLOYER
# ============================================================================

class VideoAssetSchemaDeployer:
    """
    Deploy the video_assets table using psycopg SQL composition.

    Every statement is idempotent (IF NOT EXISTS), so deploy_all() may be
    re-run against an existing database.
    """

    def __init__(self, repo: Optional[PostgreSQLRepository] = None):
        """Initialize deployer with PostgreSQL repository."""
        self.repo = repo or PostgreSQLRepository()
        self.schema_name = self.repo.schema_name
        self.table_name = self.repo.config.database.video_asset_table
        logger.info(f"VideoAssetSchemaDeployer initialized for {self.schema_name}.{self.table_name}")

    def deploy_all(self) -> Dict[str, Any]:
        """
        Deploy the asset store schema.

        Executes in order:
        1. Create schema (if not exists)
        2. Create video_assets table
        3. Create indexes

        Returns:
            Dict with deployment results and any errors
        """
        results = {
            "schema": self.schema_name,
            "table": self.table_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "steps": [],
            "success": False,
            "errors": []
        }

        steps = [
            ("create_schema", self._deploy_schema),
            ("create_video_assets", self._deploy_table),
            ("create_indexes", self._deploy_indexes),
        ]

        for step_name, step_func in steps:
            try:
                with self.repo._get_connection() as conn:
                    step_func(conn, results)
                    conn.commit()
                    logger.info(f"✅ Step '{step_name}' committed successfully")
            except Exception as e:
                logger.error(f"❌ Step '{step_name}' failed: {e}")
                results["errors"].append({"step": step_name, "error": str(e)})
                # Later steps depend on earlier ones
                break

        results["success"] = len(results["errors"]) == 0
        logger.info(f"Video asset schema deployment complete (errors: {len(results['errors'])})")

        return results

    # ========================================================================
    # STEPS
    # ========================================================================

    def _deploy_schema(self, conn, results: Dict):
        """Create the application schema if not exists."""
        step = {"name": "create_schema", "status": "pending"}

        try:
            with conn.cursor() as cur:
                cur.execute(sql.SQL("CREATE SCHEMA IF NOT EXISTS {}").format(
                    sql.Identifier(self.schema_name)
                ))
            step["status"] = "success"
        except Exception as e:
            step["status"] = "failed"
            step["error"] = str(e)
            raise
        finally:
            results["steps"].append(step)

    def _deploy_table(self, conn, results: Dict):
        """
        Create the video_assets table.

        Columns:
            id TEXT PRIMARY KEY - Opaque asset identifier
            project_id TEXT - Scope (NULL for unscoped assets)
            source_location / media_location TEXT - Original and playable URIs
            status TEXT - ready | processing | error
            needs_transcoding BOOLEAN - Set by ingestion
            assigned_target TEXT - Downstream reference, excludes candidacy
            job_metadata JSONB - Transcoding job bookkeeping
        """
        step = {"name": "create_video_assets", "status": "pending"}

        try:
            with conn.cursor() as cur:
                cur.execute(sql.SQL("""
                    CREATE TABLE IF NOT EXISTS {schema}.{table} (
                        id TEXT PRIMARY KEY,
                        project_id TEXT,

                        source_location TEXT NOT NULL,
                        media_location TEXT NOT NULL,
                        original_filename TEXT,

                        status TEXT NOT NULL DEFAULT 'ready'
                            CONSTRAINT video_assets_status_check
                            CHECK (status IN ('ready', 'processing', 'error')),
                        needs_transcoding BOOLEAN NOT NULL DEFAULT false,
                        assigned_target TEXT,

                        job_metadata JSONB NOT NULL DEFAULT '{{}}'::jsonb,

                        format TEXT,
                        codec TEXT,
                        width INTEGER,
                        height INTEGER,
                        file_size BIGINT,

                        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
                    )
                """).format(
                    schema=sql.Identifier(self.schema_name),
                    table=sql.Identifier(self.table_name)
                ))

            step["status"] = "success"
            logger.info(f"Table {self.schema_name}.{self.table_name} created/verified")

        except Exception as e:
            step["status"] = "failed"
            step["error"] = str(e)
            raise
        finally:
            results["steps"].append(step)

    def _deploy_indexes(self, conn, results: Dict):
        """Indexes backing candidate selection, reconciliation and the status report."""
        step = {"name": "create_indexes", "status": "pending"}

        indexes = [
            ("idx_video_assets_candidates", """
                CREATE INDEX IF NOT EXISTS {index} ON {schema}.{table}(created_at, id)
                WHERE status = 'ready' AND needs_transcoding AND assigned_target IS NULL
            """),
            ("idx_video_assets_processing", """
                CREATE INDEX IF NOT EXISTS {index} ON {schema}.{table}(project_id)
                WHERE status = 'processing'
            """),
            ("idx_video_assets_project_status", """
                CREATE INDEX IF NOT EXISTS {index} ON {schema}.{table}(project_id, status)
            """),
        ]

        try:
            with conn.cursor() as cur:
                for index_name, ddl in indexes:
                    cur.execute(sql.SQL(ddl).format(
                        index=sql.Identifier(index_name),
                        schema=sql.Identifier(self.schema_name),
                        table=sql.Identifier(self.table_name)
                    ))
            step["status"] = "success"
            step["indexes"] = [name for name, _ in indexes]
        except Exception as e:
            step["status"] = "failed"
            step["error"] = str(e)
            raise
        finally:
            results["steps"].append(step)


# ============================================================================
# CONVENIENCE FUNCTION
# ============================================================================

def deploy_video_asset_schema() -> Dict[str, Any]:
    """Deploy the asset store schema with the global configuration."""
    deployer = VideoAssetSchemaDeployer()
    return deployer.deploy_all()


__all__ = [
    'VideoAssetSchemaDeployer',
    'deploy_video_asset_schema'
]
