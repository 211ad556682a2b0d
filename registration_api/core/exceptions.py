"""
Error taxonomy for the registration core.

Every error carries a human-readable message and the HTTP status the
boundary layer should answer with. Services raise these; the handlers
registered in main.py turn them into the {success: false, error} envelope.
"""

from typing import Optional

from fastapi import status


class RegistrationError(Exception):
    """Base error with a user-safe message and an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(RegistrationError):
    """Malformed or missing input. Client-correctable."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "invalid input"


class DuplicateError(RegistrationError):
    """Email or phone already present in the registration set."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "already registered"


class CapacityError(RegistrationError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "event full"


class StorageError(RegistrationError):
    """
    Key-value store read or write failed.
    The user-facing message stays generic; `detail` carries the backend specifics for logs.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "server error, please try again later"

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__()
        self.detail = detail

    def __str__(self) -> str:
        return self.detail or self.message


class UpstreamError(RegistrationError):
    """
    Mailing-list provider call failed.
    Never surfaced as a registration failure; only the standalone
    subscribe endpoint lets it through.
    """

    default_message = "newsletter provider error"

    def __init__(self, message: Optional[str] = None, status_code: int = status.HTTP_502_BAD_GATEWAY) -> None:
        super().__init__(message)
        self.status_code = status_code


class NewsletterNotConfiguredError(RegistrationError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "server configuration error"
