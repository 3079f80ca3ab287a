"""JSON log output shared by the API, the agents and the tool layer"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List
from pythonjsonlogger import jsonlogger

# Libraries that log every outbound request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Stamps every record with UTC time, level name and service"""

    def __init__(self, *args: Any, service_name: str = "icarus-finance", **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = self.service_name
        log_record.pop("name", None)


def setup_logging(level: str = "INFO", service_name: str = "icarus-finance") -> None:
    root = logging.getLogger()
    root.setLevel(level)
    for existing in list(root.handlers):
        root.removeHandler(existing)

    stream = logging.StreamHandler(sys.stdout)
    stream.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(message)s", service_name=service_name))
    root.addHandler(stream)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_agent_run(
    request_id: str,
    empresa_id: str,
    outcome: str,
    tools: List[str],
    duration_ms: float,
) -> None:
    """One line per finance agent request, keyed by request id"""
    logging.getLogger("icarus_finance.agent").info(
        "Finance agent completed",
        extra={
            "request_id": request_id,
            "empresa_id": empresa_id,
            "outcome": outcome,
            "tools": tools,
            "tool_count": len(tools),
            "duration_ms": round(duration_ms, 2),
        },
    )


def log_tool_call(tool: str, success: bool, duration_ms: float, error: str | None = None) -> None:
    payload: Dict[str, Any] = {"tool": tool, "success": success, "duration_ms": round(duration_ms, 2)}
    if error:
        payload["error"] = error
    logger = logging.getLogger("icarus_finance.tools")
    if success:
        logger.info("Tool executed", extra=payload)
    else:
        logger.warning("Tool failed", extra=payload)
