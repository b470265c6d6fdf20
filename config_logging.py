#!/usr/bin/env python3
"""
HTML Compare Configuration & Logging Module
===========================================
Centralized configuration, structured logging, and the comparison
error taxonomy.

Version: 1.0.0
"""

import os
import sys
import json
import logging
import uuid
import time
import functools
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Callable, Tuple, List
from pathlib import Path
from dataclasses import dataclass, field, replace
from contextlib import contextmanager
import threading

# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================
DEFAULT_SIMILARITY_THRESHOLD = 0.5    # Min similarity for a MODIFIED pairing
DEFAULT_DIFF_TIMEOUT = 0.0            # diff-match-patch timeout, 0 = unlimited
DEFAULT_DIFF_EDIT_COST = 4            # diff-match-patch efficiency cleanup cost
DEFAULT_LARGE_DOCUMENT_PAIRS = 250_000  # Unit pairs before warning about O(L*R)
DEFAULT_MAX_MARKUP_MB = 5             # Max markup size accepted over HTTP
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024  # 5MB max per log file
LOG_BACKUP_COUNT = 5                  # Number of log backup files to keep

DEFAULT_MAX_MARKUP_BYTES = DEFAULT_MAX_MARKUP_MB * 1024 * 1024

VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
VALID_LOG_FORMATS = ('json', 'text')

__version__ = "1.0.0"
VERSION = __version__
APP_NAME = "HtmlCompare"


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == 'true'


# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================

@dataclass
class CompareConfig:
    """Comparison engine and logging configuration."""

    # Alignment
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    large_document_pairs: int = DEFAULT_LARGE_DOCUMENT_PAIRS

    # Character diff primitive
    diff_timeout: float = DEFAULT_DIFF_TIMEOUT
    diff_edit_cost: int = DEFAULT_DIFF_EDIT_COST

    # HTTP surface
    max_markup_bytes: int = DEFAULT_MAX_MARKUP_BYTES

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"  # Options: json, text
    log_to_file: bool = False
    log_to_console: bool = True
    log_dir: Path = field(default_factory=lambda: Path.cwd() / 'logs')

    def __post_init__(self):
        self.log_dir = Path(self.log_dir)
        if self.log_to_file:
            self.log_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_env(cls) -> 'CompareConfig':
        """Load configuration from environment variables."""
        return cls(
            similarity_threshold=float(os.environ.get(
                'HC_SIMILARITY_THRESHOLD', str(DEFAULT_SIMILARITY_THRESHOLD))),
            large_document_pairs=int(os.environ.get(
                'HC_LARGE_DOCUMENT_PAIRS', str(DEFAULT_LARGE_DOCUMENT_PAIRS))),
            diff_timeout=float(os.environ.get('HC_DIFF_TIMEOUT', str(DEFAULT_DIFF_TIMEOUT))),
            diff_edit_cost=int(os.environ.get('HC_DIFF_EDIT_COST', str(DEFAULT_DIFF_EDIT_COST))),
            max_markup_bytes=int(os.environ.get('HC_MAX_MARKUP_BYTES', str(DEFAULT_MAX_MARKUP_BYTES))),
            log_level=os.environ.get('HC_LOG_LEVEL', 'INFO'),
            log_format=os.environ.get('HC_LOG_FORMAT', 'text'),
            log_to_file=_env_bool('HC_LOG_FILE', 'false'),
            log_to_console=_env_bool('HC_LOG_CONSOLE', 'true'),
            log_dir=Path(os.environ.get('HC_LOG_DIR', str(Path.cwd() / 'logs'))),
        )

    def with_overrides(self, **overrides) -> 'CompareConfig':
        """Return a copy with the given fields replaced (None values ignored)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        unknown = [k for k in changes if k not in self.__dataclass_fields__]
        if unknown:
            raise ValidationError(f"Unknown configuration field(s): {', '.join(sorted(unknown))}",
                                  field=unknown[0])
        return replace(self, **changes)

    def validate(self) -> Tuple[bool, List[str]]:
        """Validate configuration and return (is_valid, errors)."""
        errors = []

        if not 0.0 <= self.similarity_threshold < 1.0:
            errors.append("similarity_threshold must be in the range [0, 1)")

        if self.diff_timeout < 0:
            errors.append("diff_timeout cannot be negative")

        if self.diff_edit_cost < 1:
            errors.append("diff_edit_cost must be at least 1")

        if self.large_document_pairs < 1:
            errors.append("large_document_pairs must be at least 1")

        if self.max_markup_bytes < 1:
            errors.append("max_markup_bytes must be at least 1")

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(f"Invalid log_level: {self.log_level}")

        if self.log_format not in VALID_LOG_FORMATS:
            errors.append(f"Invalid log_format: {self.log_format}. Must be 'json' or 'text'")

        return (len(errors) == 0, errors)


# Global config instance
_config: Optional[CompareConfig] = None

def get_config() -> CompareConfig:
    """Get or create the global configuration."""
    global _config
    if _config is None:
        _config = CompareConfig.from_env()
    return _config


def reset_config():
    """Reset the global configuration (for testing)."""
    global _config
    _config = None


# =============================================================================
# STRUCTURED LOGGING
# =============================================================================

class StructuredLogger:
    """Thread-safe structured logger with correlation IDs."""

    _local = threading.local()

    def __init__(self, name: str, config: Optional[CompareConfig] = None):
        self.name = name
        self.config = config or get_config()
        self._setup_logger()

    def _setup_logger(self):
        """Configure the underlying Python logger."""
        self.logger = logging.getLogger(self.name)
        self.logger.setLevel(getattr(logging, self.config.log_level.upper()))
        self.logger.handlers.clear()

        if self.config.log_format == 'json':
            formatter = JsonFormatter()
        else:
            formatter = logging.Formatter(
                '%(asctime)s [%(levelname)s] %(name)s - %(message)s'
            )

        if self.config.log_to_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        # Rotating file handler keeps log size bounded
        if self.config.log_to_file:
            from logging.handlers import RotatingFileHandler
            log_file = self.config.log_dir / f"{self.name.lower()}.log"
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    @classmethod
    def set_correlation_id(cls, correlation_id: str):
        """Set correlation ID for current thread."""
        cls._local.correlation_id = correlation_id

    @classmethod
    def get_correlation_id(cls) -> str:
        """Get correlation ID for current thread."""
        return getattr(cls._local, 'correlation_id', None) or str(uuid.uuid4())[:8]

    @classmethod
    def new_correlation_id(cls) -> str:
        """Generate and set a new correlation ID."""
        correlation_id = str(uuid.uuid4())[:12]
        cls.set_correlation_id(correlation_id)
        return correlation_id

    def _build_log_record(self, level: str, message: str, **kwargs) -> Dict[str, Any]:
        """Build a structured log record."""
        return {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': level,
            'logger': self.name,
            'correlation_id': self.get_correlation_id(),
            'message': message,
            **kwargs
        }

    def _render(self, level: str, message: str, **kwargs) -> str:
        if self.config.log_format == 'json':
            return json.dumps(self._build_log_record(level, message, **kwargs), default=str)
        return message

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self.logger.debug(self._render('DEBUG', message, **kwargs), extra=kwargs)

    def info(self, message: str, **kwargs):
        """Log info message."""
        self.logger.info(self._render('INFO', message, **kwargs), extra=kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self.logger.warning(self._render('WARNING', message, **kwargs), extra=kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs):
        """Log error message with optional exception info."""
        record = self._build_log_record('ERROR', message, **kwargs)
        if exc_info:
            import traceback
            record['traceback'] = traceback.format_exc()
        rendered = json.dumps(record, default=str) if self.config.log_format == 'json' else message
        self.logger.error(rendered, exc_info=exc_info, extra=kwargs)

    def exception(self, message: str, **kwargs):
        """Log exception with full traceback."""
        self.error(message, exc_info=True, **kwargs)

    @contextmanager
    def log_operation(self, operation: str, **context):
        """Context manager for logging operation start/end with timing."""
        start_time = time.time()
        self.debug(f"{operation} started", operation=operation, status='started', **context)
        try:
            yield
            duration_ms = (time.time() - start_time) * 1000
            self.info(f"{operation} completed", operation=operation, status='completed',
                      duration_ms=round(duration_ms, 2), **context)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self.error(f"{operation} failed: {e}", operation=operation, status='failed',
                       duration_ms=round(duration_ms, 2), exc_info=True, **context)
            raise


class JsonFormatter(logging.Formatter):
    """JSON log formatter."""

    _RESERVED = frozenset((
        'name', 'msg', 'args', 'created', 'filename', 'funcName',
        'levelname', 'levelno', 'lineno', 'module', 'msecs',
        'pathname', 'process', 'processName', 'relativeCreated',
        'stack_info', 'thread', 'threadName', 'exc_info', 'exc_text',
        'message', 'taskName'
    ))

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if record.exc_info:
            log_data['traceback'] = self.formatException(record.exc_info)

        # Add extra fields
        for key, value in record.__dict__.items():
            if key not in self._RESERVED:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(name, get_config())


# =============================================================================
# ERROR HANDLING
# =============================================================================

class CompareError(Exception):
    """Base exception for HtmlCompare."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR",
                 status_code: int = 500, details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to API response dict."""
        return {
            'success': False,
            'error': {
                'code': self.code,
                'message': self.message,
                'details': self.details
            }
        }


class ValidationError(CompareError):
    """Input validation error."""
    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, code="VALIDATION_ERROR", status_code=400,
                         details={'field': field, **kwargs})


class ParseFailure(CompareError):
    """Markup could not be parsed into a document tree."""
    def __init__(self, message: str, side: Optional[str] = None, **kwargs):
        super().__init__(message, code="PARSE_FAILURE", status_code=422,
                         details={'side': side, **kwargs})


class ExtractionFailure(CompareError):
    """Parsed tree had a shape the unit extractor could not handle."""
    def __init__(self, message: str, side: Optional[str] = None, **kwargs):
        super().__init__(message, code="EXTRACTION_FAILURE", status_code=500,
                         details={'side': side, **kwargs})


class ComparisonFailure(CompareError):
    """Fault during alignment, diffing, report assembly or annotation."""
    def __init__(self, message: str, stage: Optional[str] = None, **kwargs):
        super().__init__(message, code="COMPARISON_FAILURE", status_code=500,
                         details={'stage': stage, **kwargs})


def wrap_stage(stage: str):
    """Decorator converting unexpected exceptions into ComparisonFailure."""
    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except CompareError:
                raise  # Re-raise our custom errors
            except Exception as e:
                raise ComparisonFailure(
                    f"{stage} failed: {type(e).__name__}: {e}", stage=stage
                ) from e
        return wrapper
    return decorator
