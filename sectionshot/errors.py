# sectionshot/errors.py
"""Error types raised by the access gate and the capture engine."""


class ServiceError(Exception):
    """Base error carrying the message and HTTP status shown to the caller."""

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class MissingInputError(ServiceError):
    status_code = 400


class InvalidInputError(ServiceError):
    status_code = 400


class AuthError(ServiceError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized: Invalid or missing API key"):
        super().__init__(message)


class BrowserError(ServiceError):
    """
    The browser could not be started or a capture step failed.

    `detail` is kept for the logs; callers only ever see the generic message.
    """

    status_code = 500
    public_message = "Failed to capture screenshot"

    def __init__(self, detail: str = ""):
        super().__init__(self.public_message)
        self.detail = detail

    def __str__(self):
        return self.detail or self.message


class NavigationError(BrowserError):
    """The target page could not be loaded."""
