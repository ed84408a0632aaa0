"""
Structured JSON logging.

Provides event-specific logging functions with mandatory fields:
- timestamp (ISO8601)
- level
- service
- event

Optional fields (included when applicable):
- object_key
- content_type
- status_code
- duration_ms

Usage:
    from imgdrop.utils.logging import configure_logging, log_credential_issued

    configure_logging('imgdrop-api', 'INFO')
    log_credential_issued(logger, object_key='1700000000000-photo.png', content_type='image/png')
"""
import logging
import sys
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger


class StructuredLogger:
    """Structured JSON logger with mandatory fields."""

    _service_name = None
    _configured = False

    @classmethod
    def configure(cls, service_name: str, log_level: str = "INFO"):
        """
        Configure structured JSON logging for the application.

        Args:
            service_name: Service identifier (imgdrop-api or imgdrop-client)
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        if cls._configured:
            return  # Already configured

        cls._service_name = service_name

        # Remove default handlers
        root_logger = logging.getLogger()
        root_logger.handlers = []

        formatter = jsonlogger.JsonFormatter(
            '%(timestamp)s %(level)s %(name)s %(message)s',
            timestamp=True,
            json_ensure_ascii=False
        )

        # Console handler (container logs)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)

        root_logger.addHandler(handler)
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        # Add service name to all log records via filter
        class ServiceFilter(logging.Filter):
            def filter(self, record):
                record.service = cls._service_name
                return True

        handler.addFilter(ServiceFilter())
        cls._configured = True


def _build_log_extra(
    event: str,
    object_key: Optional[str] = None,
    content_type: Optional[str] = None,
    status_code: Optional[int] = None,
    duration_ms: Optional[float] = None,
    **kwargs
) -> Dict[str, Any]:
    """
    Build extra fields for structured logging.

    Args:
        event: Event name (mandatory)
        object_key: Optional object key
        content_type: Optional declared MIME type
        status_code: Optional HTTP status
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields

    Returns:
        Dictionary of extra fields
    """
    extra = {
        "event": event,
        **kwargs
    }

    if object_key:
        extra["object_key"] = object_key
    if content_type:
        extra["content_type"] = content_type
    if status_code is not None:
        extra["status_code"] = status_code
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)

    return extra


# Credential issuance events

def log_credential_issued(
    logger: logging.Logger,
    object_key: str,
    content_type: str,
    duration_ms: Optional[float] = None,
    **kwargs
):
    """Log a successfully issued upload credential."""
    extra = _build_log_extra(
        event="credential_issued",
        object_key=object_key,
        content_type=content_type,
        duration_ms=duration_ms,
        **kwargs
    )
    logger.info(f"Upload credential issued: {object_key}", extra=extra)


def log_credential_failed(
    logger: logging.Logger,
    file_name: str,
    error: str,
    content_type: Optional[str] = None,
    include_traceback: bool = True,
    **kwargs
):
    """
    Log a failed credential issuance.

    Args:
        logger: Logger instance
        file_name: Name the client asked for (required)
        error: Error message (required)
        content_type: Optional declared MIME type
        include_traceback: Attach the active exception, if any
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="credential_failed",
        content_type=content_type,
        file_name=file_name,
        error=str(error),
        **kwargs
    )

    message = f"Error generating presigned URL for {file_name} - {error}"

    exc_info = sys.exc_info() if include_traceback else None
    if exc_info and exc_info[0] is not None:
        logger.error(message, extra=extra, exc_info=exc_info)
    else:
        logger.error(message, extra=extra)


# Client-side upload events

def log_upload_completed(
    logger: logging.Logger,
    object_key: str,
    size_bytes: int,
    duration_ms: Optional[float] = None,
    **kwargs
):
    """Log a transfer the store acknowledged."""
    extra = _build_log_extra(
        event="upload_completed",
        object_key=object_key,
        duration_ms=duration_ms,
        size_bytes=size_bytes,
        **kwargs
    )
    logger.info(f"Upload completed: {object_key}", extra=extra)


def log_upload_failed(
    logger: logging.Logger,
    error_class: str,
    error: str,
    status_code: Optional[int] = None,
    response_body: Optional[str] = None,
    **kwargs
):
    """
    Log a failed upload attempt.

    Args:
        logger: Logger instance
        error_class: Name of the error class (CredentialIssuanceError, TransferError)
        error: Error message
        status_code: HTTP status, when one was received
        response_body: Store response body, for diagnostics
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="upload_failed",
        status_code=status_code,
        error_class=error_class,
        error=str(error),
        **kwargs
    )
    if response_body:
        extra["response_body"] = response_body

    logger.error(f"Upload failed: {error_class} - {error}", extra=extra)


def configure_logging(service_name: str, log_level: str = "INFO"):
    """Configure logging (alias for StructuredLogger.configure)."""
    StructuredLogger.configure(service_name, log_level)
