# User value: This file keeps run logs searchable so failed files are easy to find and retry.
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from logtail import LogtailHandler


# Attributes every LogRecord carries; anything else came in through extra=.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


# User value: This step keeps log payloads JSON-safe whatever callers pass in extra=.
def _json_safe(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple, set)):
        return [_json_safe(v) for v in value]
    return str(value)


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: _json_safe(value)
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and value is not None
    }


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, service, logger, message, then extra= fields."""

    def __init__(self, service: str):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        payload = _extra_fields(record)
        payload.update(
            ts=datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            level=record.levelname,
            service=self.service,
            logger=record.name,
            message=record.getMessage(),
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


# User value: ships the same log lines to Better Stack when a source token is configured.
def build_sink_handler(source_token: str, host: Optional[str] = None) -> logging.Handler:
    if host:
        return LogtailHandler(source_token=source_token, host=host)
    return LogtailHandler(source_token=source_token)


def configure_json_logging(
    service: str,
    level: int,
    *,
    sink_token: Optional[str] = None,
    sink_host: Optional[str] = None,
) -> None:
    root = logging.getLogger()
    handler = logging.StreamHandler()
    handler.setFormatter(JsonLogFormatter(service=service))
    handlers = [handler]
    if sink_token:
        handlers.append(build_sink_handler(sink_token, sink_host))
    root.handlers = handlers
    root.setLevel(level)
