"""
Base Repository - Pure Abstract Class.

Abstract base repository class that all storage-specific repositories inherit from.
Contains NO storage implementation details, only common error handling patterns, and logging infrastructure.

Architecture:
    BaseRepository (this file - pure abstract)
        |
    Storage-specific bases (PostgreSQLRepository)
        |
    Domain-specific repositories (VideoAssetRepository)

Exports:
    BaseRepository: Abstract base class for repositories
"""

from abc import ABC
from contextlib import contextmanager
from typing import Optional, Dict, Any
import logging

from exceptions import BusinessLogicError, ContractViolationError, DatabaseError
from util_logger import LoggerFactory, ComponentType


# ============================================================================
# PURE BASE REPOSITORY - No storage dependencies
# ============================================================================

class BaseRepository(ABC):
    """
    Pure abstract base repository with common error handling.

    Responsibilities:
    ----------------
    - Error handling with consistent patterns
    - Logging setup and configuration

    NOT Responsible For:
    -------------------
    - Connection management (handled by storage-specific subclasses)
    - Query execution (handled by storage-specific subclasses)

    Thread Safety:
    -------------
    Holds no connection state. Each operation opens its own connection in
    the storage-specific subclass, so one instance may be shared by
    worker threads.
    """

    def __init__(self):
        """
        Initialize base repository with logging.

        Subclasses MUST call super().__init__() before any storage setup.
        """
        self.logger = self._setup_logger()
        self.logger.debug(f"🏛️ {self.__class__.__name__} base initialized")

    def _setup_logger(self) -> logging.Logger:
        """Component-specific logger from the application's LoggerFactory."""
        return LoggerFactory.create_logger(
            ComponentType.REPOSITORY,
            self.__class__.__name__
        )

    @contextmanager
    def _error_context(self, operation: str, entity_id: Optional[str] = None):
        """
        Context manager for consistent error handling across all operations.

        Parameters:
        ----------
        operation : str
            Human-readable description of the operation being performed.
            Examples: "candidate selection", "claim", "mark ready"

        entity_id : Optional[str]
            The ID of the asset being operated on.

        Raises:
        ------
        ContractViolationError, BusinessLogicError
            Re-raised unchanged after logging. These are caller problems,
            not storage problems.

        DatabaseError
            Any other failure, chained to the original exception.
        """
        try:
            yield

        except (ContractViolationError, BusinessLogicError) as e:
            self.logger.error(f"❌ {operation} rejected: {e}")
            raise

        except DatabaseError:
            raise

        except Exception as e:
            error_msg = f"❌ {operation} failed"
            if entity_id:
                error_msg += f" for {entity_id}"
            error_msg += f": {e}"
            self.logger.error(error_msg)
            raise DatabaseError(f"{operation} failed: {e}") from e

    def _log_operation_result(
        self,
        success: bool,
        operation: str,
        entity_id: str,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log operation results with consistent formatting.

        Log Format:
        ----------
        Success: "✅ {operation}: {entity_id} | {details}"
        Failure: "⚠️ {operation} failed: {entity_id} | {details}"
        """
        if success:
            msg = f"✅ {operation}: {entity_id}"
        else:
            msg = f"⚠️ {operation} failed: {entity_id}"

        if details:
            msg += f" | {details}"

        if success:
            self.logger.info(msg)
        else:
            self.logger.warning(msg)
