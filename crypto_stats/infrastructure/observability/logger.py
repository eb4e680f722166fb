import logging
import sys

LOGGER_NAME = "crypto_stats"

# ---------------------------------------------------
# Formatting
# ---------------------------------------------------
console_format = logging.Formatter(
    "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    "%Y-%m-%d %H:%M:%S"
)


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a stdout handler to the package logger once and set its level.

    Every module logs through logging.getLogger(__name__), so all of them end
    up as children of this logger.
    """
    log = logging.getLogger(LOGGER_NAME)
    log.setLevel(level.upper())
    if not log.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(console_format)
        log.addHandler(console_handler)
    return log
