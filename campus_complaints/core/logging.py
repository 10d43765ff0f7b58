"""
Logging Configuration and Utilities

Structured logging for the complaint service: structlog processors for
request context and secret redaction, JSON or plain-text console output,
and an optional rotating log file.
"""

import sys
import logging
import logging.handlers
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from pathlib import Path
from contextvars import ContextVar

import structlog
from pythonjsonlogger import jsonlogger

from .config import settings

# Context variables for request tracking
request_id: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
user_id: ContextVar[Optional[str]] = ContextVar('user_id', default=None)

_SENSITIVE_KEYS = (
    'password', 'token', 'secret', 'credentials', 'authorization', 'cookie',
)


class RequestContextProcessor:
    """Add request context to log records"""

    def __call__(self, logger, method_name, event_dict):
        req_id = request_id.get()
        if req_id:
            event_dict['request_id'] = req_id

        uid = user_id.get()
        if uid:
            event_dict['user_id'] = uid

        event_dict['timestamp'] = datetime.now(timezone.utc).isoformat()
        event_dict['service'] = 'campus-complaints'
        event_dict['environment'] = settings.ENVIRONMENT

        return event_dict


class SecurityLogProcessor:
    """Mask credentials before they reach a log sink"""

    def __call__(self, logger, method_name, event_dict):
        text = event_dict.get('event') or event_dict.get('message') or ''
        if any(keyword in str(text).lower()
               for keyword in ['auth', 'login', 'permission', 'authorized']):
            event_dict['security_event'] = True

        _sanitize(event_dict)
        return event_dict


def _sanitize(data: Dict[str, Any]) -> None:
    for key in list(data.keys()):
        if any(sensitive in key.lower() for sensitive in _SENSITIVE_KEYS):
            data[key] = '[REDACTED]'
        elif isinstance(data[key], dict):
            _sanitize(data[key])


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter for structured logging"""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['function'] = record.funcName
        log_record['line'] = record.lineno

        # Records wrapped by structlog carry their logger in extras
        log_record.pop('_logger', None)
        log_record.pop('_name', None)

        method_name = record.levelname.lower()
        for processor in _CONTEXT_PROCESSORS:
            processor(None, method_name, log_record)


_CONTEXT_PROCESSORS = (RequestContextProcessor(), SecurityLogProcessor())


class LoggingConfig:
    """Centralized logging configuration"""

    @staticmethod
    def build_formatter(log_format: str) -> logging.Formatter:
        """
        Handler formatter for ``log_format`` ("json" or "text").

        Both run the request-context and redaction processors over every
        record, whether it came from ``get_logger()`` or from structlog.
        """
        if log_format == "json":
            return CustomJsonFormatter(
                '%(asctime)s %(name)s %(levelname)s %(message)s'
            )

        return structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=[
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.ExtraAdder(),
                *_CONTEXT_PROCESSORS,
            ],
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                structlog.processors.KeyValueRenderer(
                    key_order=['timestamp', 'level', 'logger', 'event'],
                ),
            ],
        )

    @staticmethod
    def configure_structured_logging():
        """Configure structured logging with structlog"""

        # Rendering happens in the handler formatter
        processors = [
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            *_CONTEXT_PROCESSORS,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ]

        structlog.configure(
            processors=processors,
            wrapper_class=structlog.stdlib.BoundLogger,
            logger_factory=structlog.stdlib.LoggerFactory(),
            context_class=dict,
            cache_logger_on_first_use=True,
        )

    @staticmethod
    def configure_standard_logging():
        """Configure standard Python logging for the package logger"""

        level = getattr(logging, settings.logging.LOG_LEVEL)
        package_logger = logging.getLogger("campus_complaints")
        package_logger.setLevel(level)

        # Replace handlers installed by an earlier call
        for handler in list(package_logger.handlers):
            if getattr(handler, "_campus_complaints", False):
                package_logger.removeHandler(handler)

        formatter = LoggingConfig.build_formatter(settings.logging.LOG_FORMAT)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        console_handler._campus_complaints = True
        package_logger.addHandler(console_handler)

        if settings.logging.LOG_FILE:
            log_path = Path(settings.logging.LOG_FILE)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            if settings.logging.LOG_ROTATION == "size":
                file_handler = logging.handlers.RotatingFileHandler(
                    log_path,
                    maxBytes=10*1024*1024,  # 10MB
                    backupCount=5
                )
            else:
                file_handler = logging.handlers.TimedRotatingFileHandler(
                    log_path,
                    when='midnight',
                    interval=1,
                    backupCount=settings.logging.LOG_RETENTION
                )

            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            file_handler._campus_complaints = True
            package_logger.addHandler(file_handler)

        LoggingConfig._configure_library_loggers()

    @staticmethod
    def _configure_library_loggers():
        """Configure logging for external libraries"""

        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

        if settings.database.DB_ECHO:
            logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
        else:
            logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

        logging.getLogger("aiosqlite").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)


class LoggerAdapter:
    """Enhanced logger adapter with context management"""

    def __init__(self, logger: logging.Logger, **context):
        self.logger = logger
        self._context = dict(context)

    def bind(self, **kwargs) -> "LoggerAdapter":
        """New adapter whose records also carry ``kwargs``"""
        return LoggerAdapter(self.logger, **{**self._context, **kwargs})

    def _log(self, level: int, message: str, *args, **kwargs):
        extra = dict(kwargs.get('extra') or {})
        extra.update(self._context)
        kwargs['extra'] = extra
        # Report the caller of debug()/info()/... rather than this adapter
        kwargs.setdefault('stacklevel', 3)

        self.logger.log(level, message, *args, **kwargs)

    def debug(self, message: str, *args, **kwargs):
        self._log(logging.DEBUG, message, *args, **kwargs)

    def info(self, message: str, *args, **kwargs):
        self._log(logging.INFO, message, *args, **kwargs)

    def warning(self, message: str, *args, **kwargs):
        self._log(logging.WARNING, message, *args, **kwargs)

    def error(self, message: str, *args, **kwargs):
        self._log(logging.ERROR, message, *args, **kwargs)

    def critical(self, message: str, *args, **kwargs):
        self._log(logging.CRITICAL, message, *args, **kwargs)


def get_logger(name: Optional[str] = None) -> LoggerAdapter:
    """
    Get configured logger instance.

    Args:
        name: Logger name (defaults to the package logger)

    Returns:
        Enhanced logger adapter
    """
    return LoggerAdapter(logging.getLogger(name or "campus_complaints"))


def setup_logging():
    """Initialize logging configuration"""
    try:
        if settings.logging.ENABLE_STRUCTURED_LOGGING:
            LoggingConfig.configure_structured_logging()

        LoggingConfig.configure_standard_logging()

        logger = get_logger(__name__)
        logger.info("Logging system initialized", extra={
            'log_level': settings.logging.LOG_LEVEL,
            'log_format': settings.logging.LOG_FORMAT,
            'structured_logging': settings.logging.ENABLE_STRUCTURED_LOGGING
        })

    except (OSError, ValueError) as e:
        print(f"Failed to initialize logging: {e}", file=sys.stderr)
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )


__all__ = [
    'get_logger',
    'setup_logging',
    'LoggerAdapter',
    'LoggingConfig',
    'request_id',
    'user_id'
]
