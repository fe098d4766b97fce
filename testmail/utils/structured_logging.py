"""
Structured Logging Module
JSON-formatted log records for message construction and config resolution
"""

import json
import logging
from typing import Any


class JSONFormatter(logging.Formatter):
    """
    Formatter that renders log records as one JSON object per line.

    Context is attached with ``logger.debug("msg", extra={"extra_fields": {...}})``.
    Config resolution logs property keys such as ``testmail.smtp.password``
    this way, so any extra field whose key mentions a credential is replaced
    by ``[REDACTED]``.
    """

    SENSITIVE_FIELDS = {
        'password', 'username', 'secret', 'token', 'credential'
    }

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            log_data.update({
                k: self._sanitize_value(k, v)
                for k, v in record.extra_fields.items()
            })

        return json.dumps(log_data, default=str)

    def _sanitize_value(self, key: str, value: Any) -> Any:
        """Return "[REDACTED]" for credential-like keys, the value otherwise"""
        key_lower = key.lower()
        if any(sensitive in key_lower for sensitive in self.SENSITIVE_FIELDS):
            return "[REDACTED]"
        return value
