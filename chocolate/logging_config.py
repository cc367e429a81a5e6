"""
Logging configuration for the Chocolate registry.

Provides structured JSON logging for audit trails and debugging.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import List, Optional

# Context variable for per-invocation tracking
request_id_var: ContextVar[str] = ContextVar('request_id', default='')


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    One JSON object per line, suitable for log aggregation systems.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = request_id_var.get()
        if request_id:
            log_data["request_id"] = request_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


class AuditLogger:
    """
    Logger for registry audit events.

    One method per state change the registry commits or rejects.
    """

    def __init__(self, name: str = "chocolate.audit"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, event_type: str, **kwargs) -> None:
        extra = {
            "event_type": event_type,
            "request_id": request_id_var.get(),
            **kwargs
        }

        record = self._logger.makeRecord(
            self._logger.name,
            level,
            "",
            0,
            f"{event_type}: {kwargs.get('message', '')}",
            (),
            None
        )
        record.extra_fields = extra
        self._logger.handle(record)

    def project_added(self, project_id: int, owner: str) -> None:
        self._log(
            logging.INFO,
            "PROJECT_ADDED",
            project_id=project_id,
            owner=owner,
            message=f"Project {project_id} added by {owner}"
        )

    def review_added(self, project_id: int, reviewer: str, review_id: int, rating: int) -> None:
        self._log(
            logging.INFO,
            "REVIEW_ADDED",
            project_id=project_id,
            reviewer=reviewer,
            review_id=review_id,
            rating=rating,
            message=f"Review {review_id} added to project {project_id}"
        )

    def review_rejected(self, project_id: int, reviewer: str, code: str) -> None:
        self._log(
            logging.WARNING,
            "REVIEW_REJECTED",
            project_id=project_id,
            reviewer=reviewer,
            code=code,
            message=f"Review rejected: {code}"
        )

    def authorizer_added(self, account: str, added_by: str) -> None:
        self._log(
            logging.INFO,
            "AUTHORIZER_ADDED",
            account=account,
            added_by=added_by,
            message=f"Authorizer {account} added"
        )

    def verification_initiated(self, account: str, index: int, reissued: bool) -> None:
        self._log(
            logging.INFO,
            "VERIFICATION_INITIATED",
            account=account,
            index=index,
            reissued=reissued,
            message=f"Verification challenge {index} for {account}"
        )

    def verification_finalized(self, account: str, authorizer: str) -> None:
        self._log(
            logging.INFO,
            "VERIFICATION_FINALIZED",
            account=account,
            authorizer=authorizer,
            message=f"Account {account} verified"
        )

    def verification_rejected(self, account: str, authorizer: str, code: str) -> None:
        self._log(
            logging.WARNING,
            "VERIFICATION_REJECTED",
            account=account,
            authorizer=authorizer,
            code=code,
            message=f"Verification rejected: {code}"
        )

    def security_event(
        self,
        event: str,
        severity: str = "medium",
        **details
    ) -> None:
        """Log a security-relevant event."""
        level = {
            "low": logging.INFO,
            "medium": logging.WARNING,
            "high": logging.ERROR,
            "critical": logging.CRITICAL
        }.get(severity, logging.WARNING)

        self._log(
            level,
            "SECURITY_EVENT",
            security_event=event,
            severity=severity,
            **details,
            message=f"Security event: {event}"
        )


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: Optional[str] = None
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatting (recommended for production)
        log_file: Optional file path for log output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if json_format:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Set the request ID for the current context.

    Returns:
        The request ID that was set (generated when None is given)
    """
    if request_id is None:
        request_id = str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


def get_request_id() -> str:
    return request_id_var.get()


# Global audit logger instance
audit_log = AuditLogger()
