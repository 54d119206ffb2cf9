"""
Error Handling Module for the Daily Problem Scraper

This module provides the exception hierarchy, error classification utilities and
error reporting used by the scraping engine. Every exception raised on purpose
by the engine derives from ScraperError and carries an ErrorInfo record with
enough context (selector, attempt count, URL) to be actionable by the caller.

Exceptions are split in two families:
- transient errors (missing elements, navigation timeouts, challenge pages)
  which are retried locally with backoff before being surfaced
- structural and configuration errors (markup mismatch, bad URL, missing
  browser binary) which are raised immediately since retrying cannot help
"""

import logging
from typing import Dict, Any, Optional, List
from enum import Enum
from dataclasses import dataclass, field
from datetime import datetime

from selenium.common.exceptions import (
    WebDriverException, TimeoutException, NoSuchElementException,
    StaleElementReferenceException, SessionNotCreatedException,
    InvalidSessionIdException
)

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Error severity levels"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification"""
    CONFIGURATION = "configuration"
    BROWSER = "browser"
    NAVIGATION = "navigation"
    ELEMENT = "element"
    STRUCTURE = "structure"
    CAPTCHA = "captcha"
    PROVIDER = "provider"
    AUTHENTICATION = "authentication"
    UNKNOWN = "unknown"


@dataclass
class ErrorInfo:
    """Structured error information"""
    message: str
    category: ErrorCategory
    severity: ErrorSeverity
    original_exception: Optional[Exception] = None
    context: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)
    recovery_suggestions: List[str] = field(default_factory=list)


# =============================================================================
# Custom Exception Classes
# =============================================================================

class ScraperError(Exception):
    """Base exception for all scraping engine errors"""

    retryable = False

    def __init__(self, message: str, error_info: Optional[ErrorInfo] = None):
        super().__init__(message)
        self.error_info = error_info or ErrorInfo(
            message=message,
            category=ErrorCategory.UNKNOWN,
            severity=ErrorSeverity.MEDIUM
        )


class ExecutableNotResolved(ScraperError):
    """No browser executable could be determined for this environment"""

    def __init__(self, message: str, os_family: Optional[str] = None,
                 example_path: Optional[str] = None,
                 original_exception: Optional[Exception] = None):
        suggestions = ["Set CHROME_EXECUTABLE_PATH to the Chrome binary"]
        if example_path:
            suggestions.append(f'Example: CHROME_EXECUTABLE_PATH="{example_path}"')
        error_info = ErrorInfo(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.CRITICAL,
            original_exception=original_exception,
            context={"os_family": os_family, "example_path": example_path},
            recovery_suggestions=suggestions
        )
        super().__init__(message, error_info)


class BrowserLaunchFailed(ScraperError):
    """The browser process could not be started or did not connect"""

    def __init__(self, message: str, executable_path: Optional[str] = None,
                 original_exception: Optional[Exception] = None,
                 remediation: Optional[str] = None):
        suggestions = [
            "Verify the browser executable exists and is runnable",
            "Check that the installed chromedriver matches the browser version",
        ]
        if remediation:
            suggestions.insert(0, remediation)
        error_info = ErrorInfo(
            message=message,
            category=ErrorCategory.BROWSER,
            severity=ErrorSeverity.CRITICAL,
            original_exception=original_exception,
            context={"executable_path": executable_path},
            recovery_suggestions=suggestions
        )
        super().__init__(message, error_info)


class PageCreationFailed(ScraperError):
    """A new page could not be opened in the browser"""

    def __init__(self, message: str, stale: bool = False,
                 original_exception: Optional[Exception] = None):
        self.stale = stale
        error_info = ErrorInfo(
            message=message,
            category=ErrorCategory.BROWSER,
            severity=ErrorSeverity.HIGH,
            original_exception=original_exception,
            context={"stale_browser": stale},
            recovery_suggestions=(
                ["Close the browser and retry; a fresh process will be launched"]
                if stale else []
            )
        )
        super().__init__(message, error_info)


class SessionNotReady(ScraperError):
    """A page operation was attempted without a live page"""

    def __init__(self, message: str = "Page not initialized or closed"):
        error_info = ErrorInfo(
            message=message,
            category=ErrorCategory.BROWSER,
            severity=ErrorSeverity.HIGH
        )
        super().__init__(message, error_info)


class RetryExhaustedError(ScraperError):
    """Every attempt of a retried operation failed"""

    def __init__(self, operation: str, errors: List[Exception]):
        self.operation = operation
        self.errors = list(errors)
        self.attempts = len(self.errors)
        details = "; ".join(
            f"Attempt {index}: {error}" for index, error in enumerate(self.errors, start=1)
        )
        message = f"{operation} failed after {self.attempts} attempts. Errors: {details}"
        error_info = ErrorInfo(
            message=message,
            category=ErrorCategory.NAVIGATION,
            severity=ErrorSeverity.HIGH,
            original_exception=self.errors[-1] if self.errors else None,
            context={"operation": operation, "attempts": self.attempts}
        )
        super().__init__(message, error_info)


class ElementNotFound(ScraperError):
    """A selector never matched within the allowed attempts"""

    retryable = True

    def __init__(self, selector: str, attempts: int, details: Optional[str] = None,
                 url: Optional[str] = None):
        self.selector = selector
        self.attempts = attempts
        message = f'Element not found: "{selector}" after {attempts} attempts'
        if details:
            message = f"{message}. {details}"
        error_info = ErrorInfo(
            message=message,
            category=ErrorCategory.ELEMENT,
            severity=ErrorSeverity.MEDIUM,
            context={"selector": selector, "attempts": attempts, "url": url},
            recovery_suggestions=[
                "The page may still be loading; increase the element timeout",
                "The provider markup may have changed; update the adapter selectors"
            ]
        )
        super().__init__(message, error_info)


class NavigationFailed(ScraperError):
    """Navigation did not complete"""

    retryable = True

    def __init__(self, message: str, url: Optional[str] = None,
                 original_exception: Optional[Exception] = None):
        self.url = url
        error_info = ErrorInfo(
            message=message,
            category=ErrorCategory.NAVIGATION,
            severity=ErrorSeverity.HIGH,
            original_exception=original_exception,
            context={"url": url},
            recovery_suggestions=[
                "Check internet connection",
                "Verify the provider site is reachable",
                "Try again after a few minutes"
            ]
        )
        super().__init__(message, error_info)


class CaptchaDetectedError(ScraperError):
    """An anti-automation challenge page was served instead of content"""

    retryable = True

    def __init__(self, message: str, url: Optional[str] = None):
        error_info = ErrorInfo(
            message=message,
            category=ErrorCategory.CAPTCHA,
            severity=ErrorSeverity.HIGH,
            context={"url": url} if url else {},
            recovery_suggestions=[
                "Wait for some time before retrying",
                "Reduce scraping frequency"
            ]
        )
        super().__init__(message, error_info)


class URLValidationError(ScraperError):
    """A URL is malformed and cannot be resolved"""

    def __init__(self, message: str, url: Optional[str] = None):
        error_info = ErrorInfo(
            message=message,
            category=ErrorCategory.STRUCTURE,
            severity=ErrorSeverity.MEDIUM,
            context={"url": url} if url else {},
            recovery_suggestions=["Check the URL format"]
        )
        super().__init__(message, error_info)


class InvalidProblemUrl(ScraperError):
    """A problem URL does not match any known pattern for its provider"""

    def __init__(self, url: str, provider: Optional[str] = None):
        self.url = url
        label = f"{provider} " if provider else ""
        message = f"Invalid {label}problem URL: {url}"
        error_info = ErrorInfo(
            message=message,
            category=ErrorCategory.STRUCTURE,
            severity=ErrorSeverity.MEDIUM,
            context={"url": url, "provider": provider},
            recovery_suggestions=["The provider URL scheme may have changed; update the URL patterns"]
        )
        super().__init__(message, error_info)


class RequiredTextMissing(ScraperError):
    """A required element is absent or has no text"""

    def __init__(self, selector: str, reason: Optional[str] = None):
        self.selector = selector
        message = f'Failed to extract required text from "{selector}"'
        if reason:
            message = f"{message}: {reason}"
        error_info = ErrorInfo(
            message=message,
            category=ErrorCategory.STRUCTURE,
            severity=ErrorSeverity.MEDIUM,
            context={"selector": selector}
        )
        super().__init__(message, error_info)


class InsufficientElements(ScraperError):
    """Fewer elements matched than the caller requires"""

    def __init__(self, selector: str, expected: int, found: int):
        self.selector = selector
        self.expected = expected
        self.found = found
        message = (f'Expected at least {expected} elements for "{selector}", '
                   f'but found {found}')
        error_info = ErrorInfo(
            message=message,
            category=ErrorCategory.STRUCTURE,
            severity=ErrorSeverity.MEDIUM,
            context={"selector": selector, "expected": expected, "found": found}
        )
        super().__init__(message, error_info)


class UnsupportedProvider(ScraperError):
    """The requested provider has no adapter"""

    def __init__(self, provider: str, supported: Optional[List[str]] = None):
        self.provider = provider
        message = f"Unsupported provider: {provider}"
        error_info = ErrorInfo(
            message=message,
            category=ErrorCategory.PROVIDER,
            severity=ErrorSeverity.LOW,
            context={"provider": provider, "supported": supported or []},
            recovery_suggestions=(
                [f"Use one of: {', '.join(supported)}"] if supported else []
            )
        )
        super().__init__(message, error_info)


class LoginError(ScraperError):
    """Login failed for a reason other than rejected credentials"""

    def __init__(self, message: str, provider: Optional[str] = None,
                 original_exception: Optional[Exception] = None):
        error_info = ErrorInfo(
            message=message,
            category=ErrorCategory.AUTHENTICATION,
            severity=ErrorSeverity.HIGH,
            original_exception=original_exception,
            context={"provider": provider}
        )
        super().__init__(message, error_info)


class ScrapeError(ScraperError):
    """Scraping failed on an untyped error (usually a WebDriver fault)"""

    def __init__(self, message: str, provider: Optional[str] = None,
                 original_exception: Optional[Exception] = None):
        error_info = ErrorInfo(
            message=message,
            category=ErrorCategory.PROVIDER,
            severity=ErrorSeverity.HIGH,
            original_exception=original_exception,
            context={"provider": provider}
        )
        super().__init__(message, error_info)


# =============================================================================
# Error Detection Utilities
# =============================================================================

class ErrorDetector:
    """Utilities for detecting specific types of errors"""

    CHALLENGE_TITLE_INDICATORS = (
        'just a moment', 'attention required', 'verify you are human',
        'captcha', 'security check'
    )

    @staticmethod
    def is_selenium_error(exception: Exception) -> bool:
        """Check if exception is a Selenium-related error"""
        selenium_exceptions = (
            WebDriverException, TimeoutException, NoSuchElementException,
            StaleElementReferenceException, SessionNotCreatedException,
            InvalidSessionIdException
        )
        return isinstance(exception, selenium_exceptions)

    @staticmethod
    def is_retryable(exception: Exception) -> bool:
        """Engine errors declare retryability; foreign errors are treated as transient"""
        if isinstance(exception, ScraperError):
            return exception.retryable
        return True

    @classmethod
    def is_challenge_title(cls, title: Optional[str]) -> bool:
        """Detect an anti-bot interstitial from the page title"""
        if not title:
            return False
        title_lower = title.lower()
        return any(indicator in title_lower for indicator in cls.CHALLENGE_TITLE_INDICATORS)


# =============================================================================
# Error Reporting
# =============================================================================

class ErrorReporter:
    """Centralized error reporting and logging"""

    def __init__(self):
        self.error_history: List[ErrorInfo] = []

    def report_error(self, error_info: ErrorInfo, context: Optional[Dict[str, Any]] = None):
        """Report an error with full context"""
        self.error_history.append(error_info)

        if error_info.severity == ErrorSeverity.CRITICAL:
            logger.critical(f"CRITICAL ERROR: {error_info.message}")
        elif error_info.severity == ErrorSeverity.HIGH:
            logger.error(f"ERROR: {error_info.message}")
        elif error_info.severity == ErrorSeverity.MEDIUM:
            logger.warning(f"WARNING: {error_info.message}")
        else:
            logger.info(f"INFO: {error_info.message}")

        if error_info.context:
            logger.debug(f"Context: {error_info.context}")

        if context:
            logger.debug(f"Additional context: {context}")

        for suggestion in error_info.recovery_suggestions:
            logger.info(f"Suggestion: {suggestion}")

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of all reported errors"""
        if not self.error_history:
            return {"total_errors": 0, "categories": {}, "severity_counts": {}}

        categories = {}
        severity_counts = {}

        for error in self.error_history:
            cat = error.category.value
            categories[cat] = categories.get(cat, 0) + 1

            sev = error.severity.value
            severity_counts[sev] = severity_counts.get(sev, 0) + 1

        return {
            "total_errors": len(self.error_history),
            "categories": categories,
            "severity_counts": severity_counts,
            "recent_errors": [
                {
                    "message": e.message,
                    "category": e.category.value,
                    "severity": e.severity.value,
                    "timestamp": e.timestamp.isoformat()
                }
                for e in self.error_history[-10:]
            ]
        }


# Global error reporter instance
error_reporter = ErrorReporter()
