import logging
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Iterator, Optional

from pythonjsonlogger import jsonlogger

from chatstore.config import get_settings
from chatstore.metrics import record_store_operation


# Context variable to store operation_id for the current store operation
operation_id_ctx: ContextVar[Optional[str]] = ContextVar("operation_id", default=None)


def get_operation_id() -> Optional[str]:
    """Get the current operation ID from context."""
    return operation_id_ctx.get()


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter to ensure ISO-8601 timestamps and operation_id."""

    def add_fields(self, log_record, record, message_dict):
        super(CustomJsonFormatter, self).add_fields(log_record, record, message_dict)
        # Ensure timestamp is in ISO-8601 format with Z suffix
        if not log_record.get('ts'):
            log_record['ts'] = datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z'
        log_record['level'] = record.levelname

        # Add operation_id from context if available and not already present
        if 'operation_id' not in log_record:
            op_id = operation_id_ctx.get()
            if op_id:
                log_record['operation_id'] = op_id


def setup_logging(log_level: Optional[str] = None):
    """
    Setup structured JSON logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL),
            LOG_LEVEL from settings when None
    """
    if log_level is None:
        log_level = get_settings().LOG_LEVEL

    logger = logging.getLogger()
    logger.setLevel(log_level.upper())

    # Remove existing handlers
    logger.handlers = []

    json_handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        '%(ts)s %(level)s %(name)s %(message)s'
    )
    json_handler.setFormatter(formatter)

    logger.addHandler(json_handler)

    return logger


class OperationOutcome:
    """
    Mutable outcome of one store operation.

    The operation body sets result (and optionally extra log fields) before
    the context exits; the default result is "ok".
    """

    def __init__(self, operation: str, operation_id: str):
        self.operation = operation
        self.operation_id = operation_id
        self.result = "ok"
        self.log_data: dict = {}


@contextmanager
def operation_context(operation: str) -> Iterator[OperationOutcome]:
    """
    Log and time one store operation in structured JSON format.

    Log keys:
    - ts: time (ISO-8601)
    - level: log level
    - operation_id: unique per operation
    - operation: load or save
    - result: ok, first_run, io_error, parse_error, or error when the body raised
    - latency_ms: processing time in milliseconds

    Plus any fields the operation puts in outcome.log_data.
    """
    operation_id = str(uuid.uuid4())
    token = operation_id_ctx.set(operation_id)
    outcome = OperationOutcome(operation, operation_id)

    start_time = time.perf_counter()

    try:
        yield outcome
    except Exception:
        outcome.result = "error"
        raise
    finally:
        latency_seconds = time.perf_counter() - start_time
        record_store_operation(
            operation=operation,
            result=outcome.result,
            latency_seconds=latency_seconds
        )

        log_data = {
            "operation": operation,
            "result": outcome.result,
            "latency_ms": round(latency_seconds * 1000, 2),
        }
        log_data.update(outcome.log_data)

        logger = logging.getLogger("chatstore.operations")

        if outcome.result == "error":
            logger.error("Store operation failed", extra=log_data)
        elif outcome.result in ("io_error", "parse_error"):
            logger.warning("Store operation completed", extra=log_data)
        else:
            logger.info("Store operation completed", extra=log_data)

        operation_id_ctx.reset(token)
