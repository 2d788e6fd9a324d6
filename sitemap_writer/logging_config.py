"""
Structured logging configuration for the sitemap writer.
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import json

# Sitemap context passed through ``extra=``, in display order
CONTEXT_FIELDS = ("url", "path", "entries", "bytes", "namespaces")

# Console values longer than this are shortened
MAX_CONSOLE_VALUE = 60


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Sitemap context attached to a log record."""
    return {
        name: getattr(record, name)
        for name in CONTEXT_FIELDS
        if hasattr(record, name)
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""
    
    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **record_context(record),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


class ReadableFormatter(logging.Formatter):
    """Coloured single-line console output with sitemap context."""
    
    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"
    
    @staticmethod
    def _shorten(value: Any) -> str:
        if isinstance(value, (list, tuple)):
            value = ",".join(str(item) for item in value)
        text = str(value)
        if len(text) > MAX_CONSOLE_VALUE:
            text = text[:MAX_CONSOLE_VALUE - 3] + "..."
        return text
    
    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname, "")
        stamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = f"{color}{stamp} {record.levelname[0]}{self.RESET} {record.name}: {record.getMessage()}"
        
        context = record_context(record)
        if context:
            line += " | " + " ".join(f"{k}={self._shorten(v)}" for k, v in context.items())
        
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line

def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure logging for the sitemap writer.
    
    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatter for machine parsing
        log_file: Optional file path for log output
    
    Returns:
        Root logger instance
    """
    root_logger = logging.getLogger("sitemap_writer")
    root_logger.setLevel(getattr(logging, level.upper()))
    
    # Clear existing handlers
    root_logger.handlers.clear()
    
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG)
    
    if json_format:
        console_handler.setFormatter(JsonFormatter())
    else:
        console_handler.setFormatter(ReadableFormatter())
    
    root_logger.addHandler(console_handler)
    
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JsonFormatter())
        root_logger.addHandler(file_handler)
    
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(f"sitemap_writer.{name}")
