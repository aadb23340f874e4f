"""
Unified Logger System.

JSON-only structured logging for Azure Functions with Application Insights.
Every record carries customDimensions: the component that logged it plus
whatever correlation the caller attached (run, scope, asset, job).

Levels:
    REPOSITORY and SCHEMA loggers always log at DEBUG to track SQL.
    Everything else uses LOG_LEVEL (default INFO); DEBUG_LOGGING=true
    forces DEBUG.

Exports:
    ComponentType: Enum for component types
    LogLevel: Enum for log levels
    LogContext: Correlation identifiers rendered as custom dimensions
    JSONFormatter: Formatter emitting one JSON object per record
    LoggerFactory: Factory for creating loggers
    log_exceptions: Exception logging decorator

Dependencies:
    Standard library only (logging, enum, dataclasses, json)
"""

from enum import Enum
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from dataclasses import dataclass, replace
import logging
import sys
import os
import json
import traceback
from functools import wraps


# ============================================================================
# COMPONENT TYPES
# ============================================================================

class ComponentType(Enum):
    """Layer a logger belongs to; becomes the logger name prefix."""
    SERVICE = "service"        # Orchestration and business logic
    REPOSITORY = "repository"  # Asset store access
    SCHEMA = "schema"          # DDL deployment
    TRIGGER = "trigger"        # Azure Functions entry points
    ADAPTER = "adapter"        # Transcoding service integration


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_python_level(self) -> int:
        return getattr(logging, self.value)

    @classmethod
    def from_string(cls, level: str) -> 'LogLevel':
        """Create from string, case-insensitive."""
        return cls[level.strip().upper()]


# ============================================================================
# LOG CONTEXT - Correlation identifiers
# ============================================================================

@dataclass(frozen=True)
class LogContext:
    """
    Correlation identifiers for one unit of work.

    A run (one timer or HTTP invocation) touches many assets; asset and
    job identifiers let a single asset's history be filtered out of
    Application Insights.

    Usage:
        ctx = LogContext(asset_id=asset.id, scope_id=asset.project_id)
        logger.info("claimed", extra=ctx.extra())
        logger.info("submitted", extra=ctx.with_job(job_id).extra())
    """
    run_id: Optional[str] = None
    scope_id: Optional[str] = None
    asset_id: Optional[str] = None
    job_id: Optional[str] = None

    def with_job(self, job_id: Optional[str]) -> 'LogContext':
        return replace(self, job_id=job_id)

    def to_dict(self) -> Dict[str, Any]:
        """Non-empty identifiers only."""
        return {
            key: value for key, value in (
                ('run_id', self.run_id),
                ('scope_id', self.scope_id),
                ('asset_id', self.asset_id),
                ('job_id', self.job_id),
            ) if value is not None
        }

    def extra(self, **dimensions: Any) -> Dict[str, Dict[str, Any]]:
        """`extra=` argument for a logging call, with optional added dimensions."""
        return {'custom_dimensions': {**self.to_dict(), **dimensions}}


# ============================================================================
# JSON FORMATTER
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    One JSON object per record, in the shape Application Insights parses.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name,
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if hasattr(record, 'custom_dimensions'):
            log_obj['customDimensions'] = record.custom_dimensions

        if record.exc_info:
            log_obj['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': self.formatException(record.exc_info)
            }

        return json.dumps(log_obj, default=str)


class _ComponentFilter(logging.Filter):
    """Merges the component identity under the caller's custom dimensions."""

    def __init__(self, component_type: ComponentType, name: str):
        super().__init__()
        self.component = {'component_type': component_type.value, 'component_name': name}

    def filter(self, record: logging.LogRecord) -> bool:
        record.custom_dimensions = {**self.component, **(getattr(record, 'custom_dimensions', None) or {})}
        return True


# ============================================================================
# LOGGER FACTORY
# ============================================================================

def _default_level() -> LogLevel:
    if os.getenv('DEBUG_LOGGING', '').lower() == 'true':
        return LogLevel.DEBUG
    try:
        return LogLevel.from_string(os.getenv('LOG_LEVEL', 'INFO'))
    except KeyError:
        return LogLevel.INFO


class LoggerFactory:
    """
    Factory for component loggers named "<component_type>.<name>".

    Example:
        logger = LoggerFactory.create_logger(ComponentType.SERVICE, "StatusReconciler")
        logger.info("Reconciling processing assets")
    """

    ALWAYS_DEBUG = (ComponentType.REPOSITORY, ComponentType.SCHEMA)

    @classmethod
    def create_logger(
        cls,
        component_type: ComponentType,
        name: str,
        level: Optional[LogLevel] = None
    ) -> logging.Logger:
        """
        Create (or fetch) a component logger.

        Repeated calls for the same component return the same logger with
        a single JSON handler and a single component filter.
        """
        if level is None:
            level = LogLevel.DEBUG if component_type in cls.ALWAYS_DEBUG else _default_level()

        logger = logging.getLogger(f"{component_type.value}.{name}")
        logger.setLevel(level.to_python_level())

        if not any(isinstance(h.formatter, JSONFormatter) for h in logger.handlers):
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(JSONFormatter())
            logger.addHandler(handler)

        if not any(isinstance(f, _ComponentFilter) for f in logger.filters):
            logger.addFilter(_ComponentFilter(component_type, name))

        # Allow propagation to Azure's root logger for Application Insights
        logger.propagate = True
        return logger


# ============================================================================
# EXCEPTION DECORATOR
# ============================================================================

def log_exceptions(component_type: Optional[ComponentType] = None,
                   component_name: Optional[str] = None,
                   logger: Optional[logging.Logger] = None):
    """
    Log any exception escaping the wrapped function, then re-raise it.

    Example:
        @log_exceptions(ComponentType.SERVICE, "TranscodeOrchestrator")
        def process_candidates(self, scope_id=None):
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                log = logger or LoggerFactory.create_logger(
                    component_type or ComponentType.SERVICE,
                    component_name or func.__module__
                )
                log.error(
                    f"Exception in {func.__name__}",
                    exc_info=True,
                    extra={
                        'custom_dimensions': {
                            'function_name': func.__name__,
                            'function_module': func.__module__,
                            'exception_type': type(e).__name__,
                            'exception_message': str(e),
                            'function_kwargs': str(kwargs)[:500],
                            'traceback': traceback.format_exc()
                        }
                    }
                )
                raise
        return wrapper
    return decorator
