"""
Exception Definitions - Custom exceptions for Rule Responder
============================================================

This module defines all custom exceptions used throughout the application,
providing clear error handling and meaningful error messages.
"""


class ResponderError(Exception):
    """
    Base exception for all Rule Responder errors.

    All custom exceptions in this application inherit from this base class,
    allowing for easy catching of all application-specific errors.

    Attributes:
        message (str): Human-readable error description
        details (dict): Additional error details for debugging
    """

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            details: Optional dictionary with additional error context
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return formatted error message with details if present."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigError(ResponderError):
    """
    Configuration-related errors.

    Raised when there are issues with:
    - Invalid configuration values
    - Environment variable issues
    - Configuration parsing errors
    """
    pass


class RuleLoadError(ResponderError):
    """
    Rule document errors.

    Raised when a rule record or document is malformed. The file
    source catches these per document and keeps loading the rest.
    """
    pass


class IndexBuildError(ResponderError):
    """
    Decision index construction errors.

    Raised when a match phrase cannot be compiled into a pattern.
    This is a startup failure, never a per-query condition.
    """
    pass


class PlaceholderError(ResponderError):
    """Invalid or duplicate placeholder registration."""
    pass
