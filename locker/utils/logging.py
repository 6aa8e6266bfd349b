import json
import logging
import re
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

# Share tokens and passwords travel in URLs and form bodies; never write them out whole
_SECRET_PATTERNS = [
    (re.compile(r"(/shared/)([A-Za-z0-9_\-]{6})[A-Za-z0-9_\-]+"), r"\1\2..."),
    (re.compile(r"(password[\"']?\s*[:=]\s*[\"']?)[^\s,\"'&}]+", re.IGNORECASE), r"\1***"),
    (re.compile(r"(Bearer\s+)[A-Za-z0-9_\-.]+"), r"\1***"),
]

_CONTEXT_FIELDS = ("user_id", "path", "share_id", "marker_id")

_LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
_RESET = "\033[0m"


def redact(message: str) -> str:
    for pattern, replacement in _SECRET_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


class RedactingFilter(logging.Filter):
    """Masks share tokens, passwords and bearer tokens before any handler sees the record."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg, record.args = cleaned, None
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value:
                entry[field] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


class ColoredFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        # Work on a copy so the file handler still gets plain level names
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{_LEVEL_COLORS.get(record.levelname, _RESET)}{record.levelname}{_RESET}"
        return super().format(colored)


def setup_logging(
    level: str = "INFO",
    app_name: str = "Document Locker",
    enable_json: bool = False,
    log_file: Optional[str] = None,
) -> None:
    """
    Configure root logging for the service

    Args:
        level: Logging level name
        app_name: Name of the application logger
        enable_json: JSON lines on stdout instead of colored text
        log_file: Optional file path, always written as JSON
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(numeric_level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        JSONFormatter() if enable_json else ColoredFormatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    handlers = [console_handler]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(JSONFormatter())
        handlers.append(file_handler)

    redacting = RedactingFilter()
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.addFilter(redacting)
        root_logger.addHandler(handler)

    _quiet_dependencies()
    logging.getLogger(app_name).info(f"Logging configured - level: {level}, json: {enable_json}")


def _quiet_dependencies() -> None:
    for name in ("uvicorn.access", "uvicorn.error", "fastapi"):
        logging.getLogger(name).setLevel(logging.INFO)
    # Storage and AI clients log every request at INFO/DEBUG
    for name in ("pymongo", "motor", "minio", "urllib3", "openai", "httpx", "sentry_sdk"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
