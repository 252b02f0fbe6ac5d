"""
ChatDesk Logging Configuration - Color-Coded Console Logs

Provides:
- ColorFormatter: ANSI color-coded log output
- Helper functions: log_message_in, log_message_out, log_dispatch, log_failure
- setup_logging(): Configure application logging

Usage:
    from logging_config import setup_logging, log_message_in
    setup_logging()
    logger = logging.getLogger(__name__)
    log_message_in(logger, "User question", session="session_ab12")
"""

import logging
import sys

# ANSI color codes
COLORS = {
    "RESET": "\033[0m",
    "BOLD": "\033[1m",
    "DIM": "\033[2m",
    # Event colors
    "MSG_IN": "\033[96m",  # Cyan - outgoing user message
    "MSG_OUT": "\033[92m",  # Green - assistant reply
    "SIMULATED": "\033[95m",  # Magenta - simulated reply
    "DISPATCH": "\033[94m",  # Blue - backend calls
    "ERROR": "\033[91m",  # Red - errors
    "WARN": "\033[33m",  # Orange/Yellow - warnings
    "DEBUG": "\033[90m",  # Gray - debug info
}


class ColorFormatter(logging.Formatter):
    """Custom formatter with colors for different log levels."""

    LEVEL_COLORS = {
        logging.DEBUG: COLORS["DEBUG"],
        logging.INFO: COLORS["RESET"],
        logging.WARNING: COLORS["WARN"],
        logging.ERROR: COLORS["ERROR"],
        logging.CRITICAL: COLORS["ERROR"] + COLORS["BOLD"],
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, COLORS["RESET"])

        # Format: timestamp [LEVEL] message
        timestamp = self.formatTime(record, "%H:%M:%S")
        level = record.levelname[:4]

        formatted = (
            f"{COLORS['DIM']}{timestamp}{COLORS['RESET']} "
            f"[{color}{level}{COLORS['RESET']}] "
            f"{record.getMessage()}"
        )

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


def setup_logging(level: int = logging.INFO) -> None:
    """Configure colored logging for the application."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ColorFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


# =============================================================================
# COLORED LOG HELPER FUNCTIONS
# =============================================================================


def log_message_in(logger: logging.Logger, message: str, **context) -> None:
    """Log a user message entering the send cycle.

    Args:
        logger: Logger instance
        message: User message text
        **context: Additional context (session, simulated, etc.)
    """
    preview = message[:80] + "..." if len(message) > 80 else message
    ctx = " ".join(f"{k}={v}" for k, v in context.items())
    logger.info(f"{COLORS['MSG_IN']}>>> MESSAGE{COLORS['RESET']} {preview} [{ctx}]")


def log_message_out(
    logger: logging.Logger,
    segments: int = 0,
    action_groups: int = 0,
    simulated: bool = False,
) -> None:
    """Log an assistant reply appended to history.

    Args:
        logger: Logger instance
        segments: Number of display segments
        action_groups: Number of action groups attached
        simulated: Whether the reply was generated locally
    """
    if simulated:
        label = f"{COLORS['SIMULATED']}<<< SIMULATED{COLORS['RESET']}"
    else:
        label = f"{COLORS['MSG_OUT']}<<< RESPONSE{COLORS['RESET']}"
    logger.info(f"{label} segments={segments} actions={action_groups}")


def log_dispatch(
    logger: logging.Logger,
    state: str,
    endpoint: str = "",
    duration: float = 0,
) -> None:
    """Log a backend call.

    Args:
        logger: Logger instance
        state: 'start' or 'end'
        endpoint: Method and path being called
        duration: Call duration in seconds (for end state)
    """
    if state == "start":
        logger.debug(f"{COLORS['DISPATCH']}>>> DISPATCH{COLORS['RESET']} {endpoint}")
    else:
        logger.debug(f"{COLORS['DISPATCH']}<<< DISPATCH{COLORS['RESET']} " f"{endpoint} completed in {duration:.2f}s")


def log_failure(logger: logging.Logger, category: str, status_code=None, simulated: bool = False) -> None:
    """Log a dispatch failure that is being turned into a chat turn.

    Args:
        logger: Logger instance
        category: Failure category value
        status_code: HTTP status if one was received
        simulated: Whether simulated mode replaced the error reply
    """
    fallback = "simulated reply" if simulated else "error reply"
    logger.warning(
        f"{COLORS['ERROR']}!!! FAILURE{COLORS['RESET']} "
        f"category={category} status={status_code} -> {fallback}"
    )
