import logging
import sys

LOGGER_NAME = "playlist_builder"

_logger = logging.getLogger(LOGGER_NAME)


class _LevelFormatter(logging.Formatter):
    """Plain messages for INFO, level-prefixed for everything else."""

    PREFIXES = {
        logging.DEBUG: "[debug] ",
        logging.WARNING: "⚠️  ",
        logging.ERROR: "❌ ",
        logging.CRITICAL: "❌ ",
    }

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if getattr(record, "success", False):
            return f"✅ {message}"
        return f"{self.PREFIXES.get(record.levelno, '')}{message}"


class _MaxLevelFilter(logging.Filter):
    def __init__(self, max_level: int):
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.max_level


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure console logging: info to stdout, warnings and errors to stderr.

    Safe to call more than once; handlers are replaced, not stacked.
    """
    level = logging.DEBUG if verbose else logging.INFO

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_playlist_builder", False):
            root.removeHandler(handler)

    formatter = _LevelFormatter("%(message)s")

    out_handler = logging.StreamHandler(sys.stdout)
    out_handler.setLevel(level)
    out_handler.addFilter(_MaxLevelFilter(logging.WARNING))
    out_handler.setFormatter(formatter)
    out_handler._playlist_builder = True

    err_handler = logging.StreamHandler(sys.stderr)
    err_handler.setLevel(logging.WARNING)
    err_handler.setFormatter(formatter)
    err_handler._playlist_builder = True

    root.addHandler(out_handler)
    root.addHandler(err_handler)
    root.setLevel(level)

    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return _logger


def log_info(message: str) -> None:
    _logger.info(message)


def log_success(message: str) -> None:
    _logger.info(message, extra={"success": True})


def log_warning(message: str) -> None:
    _logger.warning(message)


def log_error(message: str) -> None:
    _logger.error(message)
