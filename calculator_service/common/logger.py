"""Package logger and logging setup."""
from datetime import datetime, timezone
import json
import logging
from pathlib import Path
from typing import Optional, Union


LOGGER_NAME = "calculator_service"

# Extra attributes surfaced in JSON log lines when present on the record
EXTRA_FIELDS = ("operation", "method", "path", "a", "b", "result", "error")

logger: logging.Logger = logging.getLogger(LOGGER_NAME)


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            value = record.__dict__.get(key)
            if value is not None:
                entry[key] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        # Non-finite floats are written as Infinity/NaN tokens
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(
    level: Union[str, int] = "INFO",
    log_file: Optional[Path] = None,
    log_format: str = "json",
) -> logging.Logger:
    """
    Configure the package logger.

    A human-readable stream handler is always installed. When ``log_file`` is given,
    records are also appended to that file, as JSON lines unless ``log_format`` is "text".
    Calling it again replaces the handlers installed by a previous call.

    :param level: Logging level name or number
    :param Path log_file: Optional path of the log file
    :param str log_format: "json" or "text", format of the file handler

    :return: The configured package logger
    :rtype: logging.Logger
    """
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    )
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_path = Path(log_file)
        if log_path.parent != Path("."):
            log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        if log_format == "json":
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
            )
        logger.addHandler(file_handler)

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(level)
    return logger
