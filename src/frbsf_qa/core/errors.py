"""Exception hierarchy for the FRBSF E2E Automation Framework."""

from typing import Optional


class FrameworkError(Exception):
    """Base class for all framework errors."""


class ConfigurationError(FrameworkError):
    """The requested environment or settings combination cannot be resolved."""


class LaunchError(FrameworkError):
    """The browser process could not be started. Fatal to the whole run."""


class NavigationError(FrameworkError):
    """A navigation did not complete."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        super().__init__(f"Navigation to {url} failed{': ' + reason if reason else ''}")


class WaitTimeoutError(FrameworkError, TimeoutError):
    """A bounded wait expired before its condition was met."""

    def __init__(self, target: str, timeout_ms: Optional[int], condition: str = "condition"):
        self.target = target
        self.timeout_ms = timeout_ms
        self.condition = condition
        super().__init__(f"Timed out after {timeout_ms}ms waiting for {condition}: {target}")


class NoContextError(FrameworkError):
    """An operation needed an active browser context and none exists."""


class CaptureError(FrameworkError):
    """A screenshot or trace could not be captured."""


class PageAssertionError(FrameworkError, AssertionError):
    """A content or state assertion on the page failed."""

    def __init__(self, description: str, expected=None, actual=None):
        self.description = description
        self.expected = expected
        self.actual = actual
        message = description
        if expected is not None or actual is not None:
            message = f"{description} (expected: {expected!r}, actual: {actual!r})"
        super().__init__(message)


class UnsupportedConfigurationError(FrameworkError):
    """A scenario tag requires a browser engine or environment that is not active."""
