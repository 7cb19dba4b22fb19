"""Structured colored logging for the family pipeline and fetch job."""

import logging
import sys
from datetime import datetime

GREEN = "\x1b[32m"
RED = "\x1b[31m"
YELLOW = "\x1b[33m"
DIM = "\x1b[2m"
BOLD = "\x1b[1m"
RESET = "\x1b[0m"


class PipelineFormatter(logging.Formatter):
    LEVEL_COLORS = {
        logging.DEBUG: DIM,
        logging.INFO: "",
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: RED + BOLD,
    }

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.now().strftime("%H:%M:%S")
        color = self.LEVEL_COLORS.get(record.levelno, "")
        return f"{DIM}[{ts}]{RESET} {color}{record.getMessage()}{RESET}"


def get_logger(name: str = "product_families", level: str | None = None) -> logging.Logger:
    """Return the shared pipeline logger, attaching the colored handler once.

    The level defaults to ``settings.log_level`` so every module picks up
    LOG_LEVEL from the environment without passing it around.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(PipelineFormatter())
        logger.addHandler(handler)
    if level is None:
        from product_families.config import settings

        level = settings.log_level
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger


def format_progress(processed: int, total: int, errors: int, elapsed: float) -> str:
    """One-line progress summary: count, percent, rate, ETA and error count."""
    percent = (processed / total * 100) if total else 100.0
    rate = processed / elapsed if elapsed > 0 else 0.0
    eta_min = ((total - processed) / rate / 60) if rate > 0 else 0.0
    return (
        f"{processed}/{total} ({percent:.2f}%) | {rate:.1f} products/sec | "
        f"ETA: {eta_min:.1f} min | Errors: {errors}"
    )
