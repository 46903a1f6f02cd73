"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger
from boleto_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def log_lifecycle_event(
    operation: str,
    nosso_numero: Optional[str],
    outcome: str,
    duration_ms: float,
    request_id: Optional[str] = None,
    **fields: Any,
) -> None:
    """Log one structured line per lifecycle operation (issue, inquire, amend, ...)"""
    logging.info(
        "Boleto %s %s",
        operation,
        outcome,
        extra={
            "request_id": request_id,
            "step": operation,
            "nosso_numero": nosso_numero,
            "outcome": outcome,
            "duration_ms": round(duration_ms, 2),
            **fields,
        },
    )
