"""
PostgreSQL Repository Base.

PostgreSQL-specific base for the asset store. Inherits from the pure
BaseRepository and adds connection management and safe query execution
with psycopg3 and psycopg.sql composition.

Exports:
    PostgreSQLRepository: Base class for PostgreSQL-backed repositories
"""

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from typing import Any, Optional, Tuple
from contextlib import contextmanager

from config import AppConfig, get_config
from util_logger import LoggerFactory, ComponentType
from .base import BaseRepository

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "PostgreSQLRepository")


# ============================================================================
# POSTGRESQL BASE REPOSITORY
# ============================================================================

class PostgreSQLRepository(BaseRepository):
    """
    PostgreSQL-specific repository base class with connection management.

    Connection Management:
    ---------------------
    - One connection per operation, closed on exit
    - Connection string from AppConfig (or explicit override)
    - dict_row row factory so rows come back as dicts

    Thread Safety:
    -------------
    Each operation creates its own connection, making this class
    thread-safe for concurrent submitters.
    """

    def __init__(self, connection_string: Optional[str] = None,
                 schema_name: Optional[str] = None,
                 config: Optional[AppConfig] = None):
        """
        Initialize PostgreSQL repository with configuration.

        Priority:
            1. Explicit parameters (connection_string, schema_name)
            2. Provided AppConfig object
            3. Global configuration from get_config()

        Raises:
            ConfigurationError: If no connection string can be built
        """
        super().__init__()

        self.config = config or get_config()
        self.schema_name = schema_name or self.config.app_schema

        if connection_string:
            self.conn_string = connection_string
        else:
            self.conn_string = self.config.postgis_connection_string

        logger.debug(f"✅ {self.__class__.__name__} initialized with schema: {self.schema_name}")

    @contextmanager
    def _get_connection(self):
        """
        Context manager for PostgreSQL database connections.

        Rolls back on error and always closes the connection.
        """
        conn = None
        try:
            conn = psycopg.connect(self.conn_string, row_factory=dict_row)
            yield conn

        except psycopg.Error as e:
            logger.error(f"❌ PostgreSQL connection error: {type(e).__name__}: {e}")
            if conn:
                conn.rollback()
            raise

        finally:
            if conn:
                conn.close()

    def _execute_query(self, query: sql.Composed, params: Optional[Tuple] = None,
                       fetch: Optional[str] = None) -> Optional[Any]:
        """
        Execute a query, ALWAYS commit, and fail loud.

        Parameters:
        ----------
        query : sql.Composed
            SQL built with psycopg.sql composition.

        params : Optional[Tuple]
            Values for %s placeholders.

        fetch : Optional[str]
            None | 'one' | 'all'

        Returns:
        -------
        - fetch='one': one row dict or None
        - fetch='all': list of row dicts
        - no fetch: affected row count

        Raises:
        ------
        TypeError
            If query is not sql.Composed

        ValueError
            If fetch mode is invalid

        RuntimeError
            For any database failure (wraps psycopg errors)
        """
        if not isinstance(query, sql.Composed):
            raise TypeError(f"❌ SECURITY: Query must be sql.Composed, got {type(query)}")

        if fetch and fetch not in ('one', 'all'):
            raise ValueError(f"❌ INVALID FETCH MODE: {fetch}")

        with self._get_connection() as conn:
            try:
                with conn.cursor() as cursor:
                    try:
                        cursor.execute(query, params)
                    except psycopg.Error as e:
                        logger.error(f"❌ QUERY EXECUTION FAILED: {e}")
                        logger.error(f"   SQL State: {getattr(e, 'sqlstate', 'unknown')}")
                        raise RuntimeError(f"Query execution failed: {e}") from e

                    result = None
                    if fetch == 'one':
                        result = cursor.fetchone()
                    elif fetch == 'all':
                        result = cursor.fetchall()

                    try:
                        conn.commit()
                    except psycopg.errors.SerializationFailure as e:
                        logger.error(f"❌ SERIALIZATION FAILURE: {e}")
                        raise RuntimeError("Concurrent transaction conflict") from e
                    except psycopg.OperationalError as e:
                        logger.error(f"❌ CONNECTION LOST DURING COMMIT: {e}")
                        raise RuntimeError("Database connection lost during commit") from e
                    except psycopg.Error as e:
                        logger.error(f"❌ COMMIT FAILED: {e}")
                        raise RuntimeError(f"Transaction commit failed: {e}") from e

                    if fetch:
                        return result
                    return cursor.rowcount

            except Exception:
                try:
                    conn.rollback()
                    logger.info("🔄 Transaction rolled back due to error")
                except Exception as rollback_error:
                    logger.error(f"❌ ROLLBACK ALSO FAILED: {rollback_error}")
                raise
