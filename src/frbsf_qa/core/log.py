"""
Logging setup and structured log helpers.

Every module logs through ``logging.getLogger(__name__)``; this module only
installs the sinks (console plus rotating files under ``reports/``) and keeps
the line shapes used for page actions, assertions and timings consistent.
"""

import logging
from logging.handlers import RotatingFileHandler
from typing import Optional

from .config import EnvironmentConfig

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
CONSOLE_DATE_FORMAT = "%H:%M:%S"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_BYTES = 5 * 1024 * 1024

# Marks handlers installed here so reconfiguring replaces only ours
_HANDLER_FLAG = "_frbsf_qa_handler"

logger = logging.getLogger("frbsf_qa")


def configure_logging(config: EnvironmentConfig) -> logging.Logger:
    """Install console and file sinks on the root logger."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            root.removeHandler(handler)
            handler.close()

    level = logging.DEBUG if config.debug else logging.INFO
    root.setLevel(level)

    handlers = []
    if config.verbose or not config.ci:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(LOG_FORMAT, CONSOLE_DATE_FORMAT))
        handlers.append(console)

    config.report_dir.mkdir(parents=True, exist_ok=True)
    execution_log = RotatingFileHandler(
        config.report_dir / "test-execution.log",
        maxBytes=MAX_LOG_BYTES,
        backupCount=5,
        encoding="utf-8",
    )
    execution_log.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    handlers.append(execution_log)

    error_log = RotatingFileHandler(
        config.report_dir / "error.log",
        maxBytes=MAX_LOG_BYTES,
        backupCount=3,
        encoding="utf-8",
    )
    error_log.setLevel(logging.ERROR)
    error_log.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    handlers.append(error_log)

    for handler in handlers:
        setattr(handler, _HANDLER_FLAG, True)
        root.addHandler(handler)
    return logger


def log_step(step_name: str, action: str, log: Optional[logging.Logger] = None):
    (log or logger).info("STEP: %s - %s", step_name, action)


def log_page_action(
    owner: str, action: str, element: Optional[str] = None, log: Optional[logging.Logger] = None
):
    element_info = f" on element: {element}" if element else ""
    (log or logger).info("PAGE ACTION: %s - %s%s", owner, action, element_info)


def log_assertion(description: str, passed: bool, log: Optional[logging.Logger] = None):
    status = "PASSED" if passed else "FAILED"
    (log or logger).info("ASSERTION [%s]: %s", status, description)


def log_performance(action: str, duration_ms: float, log: Optional[logging.Logger] = None):
    (log or logger).info("PERFORMANCE: %s took %dms", action, duration_ms)


def log_screenshot(path: str, log: Optional[logging.Logger] = None):
    (log or logger).info("SCREENSHOT: Captured at %s", path)


def log_scenario(
    name: str, action: str, status: Optional[str] = None, log: Optional[logging.Logger] = None
):
    if action == "START":
        (log or logger).info("SCENARIO START: %s", name)
    else:
        (log or logger).info("SCENARIO END: %s - %s", name, status or "COMPLETED")
