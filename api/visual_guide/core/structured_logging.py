"""Structured JSON logging with secret redaction.

Every module obtains its logger through ``LoggerFactory.get_logger`` so that
log lines share one JSON shape: timestamp, level, module, service info, the
current request id and any keyword extras passed to the logging call.
"""

import logging
import os
import re
import sys
import traceback
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pythonjsonlogger import jsonlogger

from .config import settings

request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
session_id_var: ContextVar[Optional[str]] = ContextVar('session_id', default=None)


def _is_production() -> bool:
    return settings.service_env in ["prod", "production"]


class SecuritySanitizer:
    """Redact credentials and image payloads from log output."""

    SENSITIVE_PATTERNS = {
        'api_key': re.compile(r'(api[_-]?key["\s:=]+["\']?)([a-zA-Z0-9_-]{20,})', re.IGNORECASE),
        'bearer_token': re.compile(r'(bearer\s+)([a-zA-Z0-9_.-]{20,})', re.IGNORECASE),
        'secret': re.compile(r'(secret["\s:=]+["\']?)([a-zA-Z0-9_.-]{20,})', re.IGNORECASE),
        'authorization': re.compile(r'(authorization["\s:=]+["\']?)([a-zA-Z0-9_.-]{20,})', re.IGNORECASE),
        # base64 image payloads are large and useless in logs
        'data_url': re.compile(r'(data:image/[a-z0-9.+-]+;base64,)([A-Za-z0-9+/=]{16,})', re.IGNORECASE),
    }

    @classmethod
    def sanitize_string(cls, text: str) -> str:
        if not isinstance(text, str):
            return str(text)

        sanitized = text
        for pattern in cls.SENSITIVE_PATTERNS.values():
            sanitized = pattern.sub(r'\1***REDACTED***', sanitized)
        return sanitized

    @classmethod
    def sanitize_dict(cls, data: Dict[str, Any], max_depth: int = 3) -> Dict[str, Any]:
        """Recursively sanitize a dictionary."""
        if max_depth <= 0:
            return {"...": "max_depth_reached"}

        sanitized = {}
        for key, value in data.items():
            key_lower = key.lower()
            if any(sensitive in key_lower for sensitive in ['password', 'secret', 'token', 'api_key', 'auth']):
                sanitized[key] = "***REDACTED***"
            elif isinstance(value, dict):
                sanitized[key] = cls.sanitize_dict(value, max_depth - 1)
            elif isinstance(value, list):
                sanitized[key] = cls.sanitize_list(value, max_depth - 1)
            elif isinstance(value, str):
                sanitized[key] = cls.sanitize_string(value)
            else:
                sanitized[key] = value
        return sanitized

    @classmethod
    def sanitize_list(cls, data: List[Any], max_depth: int = 3) -> List[Any]:
        if max_depth <= 0:
            return ["...max_depth_reached"]

        sanitized = []
        for item in data[:10]:  # Limit list length in logs
            if isinstance(item, dict):
                sanitized.append(cls.sanitize_dict(item, max_depth - 1))
            elif isinstance(item, list):
                sanitized.append(cls.sanitize_list(item, max_depth - 1))
            elif isinstance(item, str):
                sanitized.append(cls.sanitize_string(item))
            else:
                sanitized.append(item)

        if len(data) > 10:
            sanitized.append(f"...and {len(data) - 10} more items")
        return sanitized


class StructuredFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding service and request context to every record."""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]):
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['module'] = record.module
        log_record['function'] = record.funcName
        log_record['line'] = record.lineno
        log_record['service'] = settings.service_name
        log_record['environment'] = settings.service_env

        if request_id := request_id_var.get():
            log_record['request_id'] = request_id
        if session_id := session_id_var.get():
            log_record['session_id'] = session_id

        if record.exc_info:
            exception_info = {
                'type': record.exc_info[0].__name__,
                'message': SecuritySanitizer.sanitize_string(str(record.exc_info[1])),
            }
            # Tracebacks stay out of production logs
            if not _is_production():
                exception_info['traceback'] = traceback.format_exception(*record.exc_info)
            log_record['exception'] = exception_info


class StructuredLogger:
    """Thin wrapper turning keyword arguments into structured extras."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self._setup_structured_logging()

    def _setup_structured_logging(self):
        self.logger.handlers = []

        handler = logging.StreamHandler(sys.stdout)
        formatter = StructuredFormatter(
            '%(timestamp)s %(level)s %(name)s %(message)s',
            datefmt='%Y-%m-%dT%H:%M:%S'
        )
        handler.setFormatter(formatter)
        self.logger.addHandler(handler)

        log_level = os.environ.get('LOG_LEVEL', settings.log_level)
        self.logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    def with_context(self, **kwargs) -> 'StructuredLogger':
        """Bind request-scoped context for subsequent log lines."""
        for key, value in kwargs.items():
            if key == 'request_id':
                request_id_var.set(value)
            elif key == 'session_id':
                session_id_var.set(value)
        return self

    def _log(self, level: int, message: str, exc_info: Any = False, **kwargs):
        if _is_production():
            message = SecuritySanitizer.sanitize_string(message)
            kwargs = SecuritySanitizer.sanitize_dict(kwargs)
        self.logger.log(level, message, exc_info=exc_info, extra=kwargs)

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, **kwargs)

    def exception(self, message: str, exc_info: Any = True, **kwargs):
        """Log at error level with the active (or given) exception attached."""
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)


class LoggerFactory:
    """Factory for creating structured loggers."""

    _loggers: Dict[str, StructuredLogger] = {}

    @classmethod
    def get_logger(cls, name: str) -> StructuredLogger:
        if name not in cls._loggers:
            cls._loggers[name] = StructuredLogger(name)
        return cls._loggers[name]


def log_external_call(logger: StructuredLogger, service: str, operation: str, **kwargs):
    """Log an outbound call to a third-party service."""
    logger.info(
        f"External call to {service}: {operation}",
        external_service=service,
        operation=operation,
        event_type="external_call",
        **kwargs
    )


def log_business_event(logger: StructuredLogger, event: str, **kwargs):
    logger.info(
        f"Business event: {event}",
        business_event=event,
        event_type="business",
        **kwargs
    )
