"""Custom exception classes for CardSheet.

This module defines custom exception classes for consistent error handling
across the loader and the API. All exceptions inherit from CardSheetException
which provides a base error code and message structure.

Only the transport boundary and request validation raise. The grid parser and
the resolution engine degrade by omission instead.
"""

from typing import Optional


class CardSheetException(Exception):
    """Base exception class for CardSheet errors.

    All custom exceptions should inherit from this class.
    Provides error code and message structure.
    """

    def __init__(self, message: str, error_code: Optional[str] = None):
        """Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        super().__init__(self.message)


class FetchFailure(CardSheetException):
    """Exception raised when the sheet URL answers with a non-2xx status."""

    def __init__(self, status_code: int, message: Optional[str] = None):
        super().__init__(
            message=message or f"Failed to fetch CSV data (HTTP {status_code})",
            error_code="FETCH_FAILURE"
        )
        self.status_code = status_code


class TransportException(CardSheetException):
    """Exception raised on network, DNS or timeout failures during a fetch."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="TRANSPORT_ERROR")


class SnapshotNotReadyError(CardSheetException):
    """Exception raised when data is requested before a successful load.

    The message is the load error verbatim when the last fetch failed.
    """

    def __init__(self, message: str = "Configuration sheet is still loading", status: str = "loading"):
        super().__init__(message=message, error_code="SNAPSHOT_NOT_READY")
        self.status = status


class ConfigNotFoundError(CardSheetException):
    """Exception raised when a card configuration is not found."""

    def __init__(self, config_id: str):
        super().__init__(
            message=f"Card configuration not found: {config_id}",
            error_code="CONFIG_NOT_FOUND"
        )
        self.config_id = config_id


class InvalidInputError(CardSheetException):
    """Exception raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        error_code = f"INVALID_INPUT_{field.upper()}" if field else "INVALID_INPUT"
        super().__init__(message=message, error_code=error_code)
        self.field = field
