"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, TextIO

from pythonjsonlogger import jsonlogger

from fundability_engine.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """Configure structured JSON logging (stdout unless another stream is given)"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_assessment(
    request_id: str,
    email: str,
    score: int,
    tier: int,
    duration_ms: float,
) -> None:
    """Log structured assessment outcome for analysis"""
    logging.info(
        "Fundability assessment completed",
        extra={
            "request_id": request_id,
            "event": "fundability_assessment",
            "email": email,
            "score": score,
            "tier": tier,
            "duration_ms": duration_ms,
        },
    )


def log_assessment_error(request_id: str, error: BaseException) -> None:
    """Log an unexpected assessment failure with its traceback"""
    logging.error(
        f"Fundability assessment failed: {error}",
        exc_info=error,
        extra={
            "request_id": request_id,
            "event": "fundability_assessment_error",
        },
    )
