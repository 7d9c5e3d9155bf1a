"""
Custom Exception Classes for the tracking runtime

These are raised at the point an external input turns out to be unusable and
caught by the entry point that owns that input. None of them are allowed to
escape into the host page.
"""

from typing import Any


class TrackingException(Exception):
    """Base exception class for all tracking-related exceptions"""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigurationError(TrackingException):
    """Raised when the inline tracking configuration is missing pieces or malformed"""

    def __init__(self, message: str = "Invalid tracking configuration", details: dict[str, Any] | None = None):
        super().__init__(message=message, details=details)


# ============================================================================
# Selector Exceptions
# ============================================================================


class SelectorError(TrackingException):
    """Raised when a configured CSS selector cannot be compiled"""

    def __init__(self, selector: str, slug: str | None = None, reason: str | None = None):
        message = f"Invalid CSS selector '{selector}'"
        if slug:
            message = f"Invalid CSS selector '{selector}' for tracked event '{slug}'"
        super().__init__(message=message, details={"selector": selector, "slug": slug, "reason": reason})


# ============================================================================
# Third-party Integration Exceptions
# ============================================================================


class IntegrationError(TrackingException):
    """Raised when a third-party callback payload or DOM structure is not what we expect"""

    def __init__(self, integration: str, message: str, details: dict[str, Any] | None = None):
        details = {"integration": integration, **(details or {})}
        super().__init__(message=f"{integration}: {message}", details=details)
