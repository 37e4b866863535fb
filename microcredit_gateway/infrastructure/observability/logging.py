"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from microcredit_gateway.config import settings


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

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_score_computed(
    request_id: str,
    user_id: str,
    strategy: str,
    score: int,
    category: str,
    duration_ms: float,
) -> None:
    """Log structured score outcome for analysis"""
    logging.info(
        "Score calculated",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "score_complete",
            "strategy": strategy,
            "score": score,
            "category": category,
            "duration_ms": duration_ms,
        },
    )


def log_verification(request_id: str, user_id: str, document: str, score: int | None) -> None:
    """Log a document verification and the resulting score, if one is held"""
    logging.info(
        "Document verified",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "verification_complete",
            "document": document,
            "score": score,
        },
    )
