"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from rto_validity.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str | None = None) -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level or settings.log_level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_renewal(
    record_id: str,
    part: str,
    identifier_number: str,
    valid_from: str,
    valid_to: str,
    fees: int,
    duration_ms: float,
) -> None:
    """Log structured renewal outcome for the audit trail"""
    logging.info(
        "Renewal completed",
        extra={
            "record_id": record_id,
            "step": "renewal_complete",
            "part": part,
            "identifier_number": identifier_number,
            "valid_from": valid_from,
            "valid_to": valid_to,
            "fees": fees,
            "duration_ms": duration_ms,
        },
    )
