"""Core module for the FRBSF E2E Automation Framework."""

from .browser import BrowserManager
from .config import (
    BrowserType,
    EnvironmentConfig,
    Settings,
    ViewportType,
    get_settings,
    resolve_environment,
)
from .errors import (
    CaptureError,
    ConfigurationError,
    FrameworkError,
    LaunchError,
    NavigationError,
    NoContextError,
    PageAssertionError,
    UnsupportedConfigurationError,
    WaitTimeoutError,
)
from .reporter import RunReporter, RunStatistics, ScenarioResult, ScenarioStatus

__all__ = [
    "BrowserManager",
    "BrowserType",
    "CaptureError",
    "ConfigurationError",
    "EnvironmentConfig",
    "FrameworkError",
    "LaunchError",
    "NavigationError",
    "NoContextError",
    "PageAssertionError",
    "RunReporter",
    "RunStatistics",
    "ScenarioResult",
    "ScenarioStatus",
    "Settings",
    "UnsupportedConfigurationError",
    "ViewportType",
    "WaitTimeoutError",
    "get_settings",
    "resolve_environment",
]
