"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from moneywise.config import settings


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


def log_transfer(
    request_id: str,
    user_id: str,
    target_goal_id: str,
    converted_amount: float,
    applied_amount: float,
    target_completed: bool,
    duration_ms: float,
) -> None:
    """Log structured transfer outcome for auditing"""
    logging.info(
        "Goal funded",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "transfer_complete",
            "target_goal_id": target_goal_id,
            "converted_amount": converted_amount,
            "applied_amount": applied_amount,
            "target_completed": target_completed,
            "duration_ms": duration_ms,
        },
    )
