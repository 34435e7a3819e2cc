"""
=============================================================================
ACCESS LOG
=============================================================================

One record per terminal response, written to the ``fileserver.access``
logger so it can be routed separately from the diagnostic loggers:

    logging.getLogger("fileserver.access").addHandler(file_handler)

Two formats are supported:

    text  127.0.0.1 - - [2026-10-19T12:00:00+00:00] "GET /docs" 200 512 1.42ms
    json  {"client_ip": "127.0.0.1", "method": "GET", "path": "/docs", ...}

=============================================================================
"""

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Optional


logger = logging.getLogger("fileserver.access")


@dataclass
class RequestLog:
    """Structured access log entry."""

    connection_id: str
    client_ip: str
    method: str
    path: Optional[str]
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        """Apache-like single line."""
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.path or "-"}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


def log_request(entry: RequestLog, log_format: str = "text") -> None:
    """
    Emit an access record.

    Error statuses are logged at WARNING so they stand out at the default
    INFO level; everything else is INFO.
    """
    level = logging.WARNING if entry.status_code >= 400 else logging.INFO
    if not logger.isEnabledFor(level):
        return

    if log_format == "json":
        message = json.dumps(entry.to_dict())
    else:
        message = entry.to_text()
    logger.log(level, message)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")
