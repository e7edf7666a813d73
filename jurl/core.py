"""
FILE DESCRIPTION: Foundational module for global configuration and logging.
KEY FUNCTIONS/CLASSES: setup_logger, CompanyFormatter, configuration constants
"""

import logging
import math
import os
import sys
from datetime import datetime
from pathlib import Path
from dotenv import load_dotenv

# === CONFIGURATION SECTION ===

# Load .env from the working directory; real environment variables win
load_dotenv(Path.cwd() / '.env', override=False)

_config_warnings = []


def _env_float(name, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        _config_warnings.append(f"{name}={raw!r} is not a number, using {default}")
        return default
    if not math.isfinite(value) or value <= 0:
        _config_warnings.append(f"{name}={raw!r} must be a finite positive number, using {default}")
        return default
    return value


def _env_viewport(name, default):
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        width, height = (int(part) for part in raw.lower().split("x", 1))
    except ValueError:
        _config_warnings.append(f"{name}={raw!r} is not WIDTHxHEIGHT, using {default[0]}x{default[1]}")
        return default
    return width, height


# Overall pipeline timeout (seconds)
DEFAULT_TIMEOUT = _env_float("JURL_TIMEOUT", 30.0)

# Selector polling interval (seconds)
POLL_INTERVAL = _env_float("JURL_POLL_INTERVAL", 0.25)

# Redirect hop limit when -L is given
MAX_REDIRECTS = int(_env_float("JURL_MAX_REDIRECTS", 20))

# Playwright engine settings
BROWSER_TYPE = os.getenv("JURL_BROWSER", "chromium").lower()
HEADLESS = os.getenv("JURL_HEADLESS", "1").lower() not in ("0", "false", "no")
VIEWPORT = _env_viewport("JURL_VIEWPORT", (1920, 1080))
WAIT_UNTIL = os.getenv("JURL_WAIT_UNTIL", "load")
CHROMIUM_ARGS = ["--disable-gpu", "--no-sandbox", "--disable-dev-shm-usage"]

# None = engine default user agent
USER_AGENT = os.getenv("JURL_USER_AGENT") or None

BROWSER_TYPES = ("chromium", "firefox", "webkit")
WAIT_UNTIL_EVENTS = ("load", "domcontentloaded", "networkidle", "commit")


# === LOGGING SECTION ===

class CompanyFormatter(logging.Formatter):
    """
    FLOW: Receives a log record -> Extracts timestamp -> Formats as
    [ Tue Jan 06 05:32:41 AM UTC 2026 ] -> Prepends level and context -> Returns final string.
    """
    def format(self, record):
        dt = datetime.fromtimestamp(record.created)
        timestamp = dt.strftime("%a %b %d %I:%M:%S %p UTC %Y")
        context = getattr(record, 'context', record.name)
        return f"[ {timestamp} ] : {record.levelname} : {context} : {record.getMessage()}"


def setup_logger(name="jurl", log_file=None, level=logging.WARNING, stream=None):
    """
    FLOW: Initializes/Retrieves logger -> Resets level on repeat calls ->
    Sets propagation for child loggers -> Attaches stderr and optional File handlers with CompanyFormatter.

    Handlers write to stderr: stdout belongs to page content.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if name != "jurl":
        logger.propagate = True
        setup_logger("jurl", log_file=log_file, level=level, stream=stream)
        return logger

    formatter = CompanyFormatter()

    if not any(getattr(h, "_jurl_console", False) for h in logger.handlers):
        console_handler = logging.StreamHandler(stream or sys.stderr)
        console_handler.setFormatter(formatter)
        console_handler._jurl_console = True
        logger.addHandler(console_handler)

    if log_file and not any(
        isinstance(h, logging.FileHandler) and h.baseFilename == os.path.abspath(log_file)
        for h in logger.handlers
    ):
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


# Global logger instance
logger = setup_logger()

for _warning in _config_warnings:
    logger.warning(f"[CONFIG] {_warning}")
