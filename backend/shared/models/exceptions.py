"""Custom exceptions for the embodied suffering scoring system."""

from typing import Optional


class EmbodiedSufferingException(Exception):
    """
    Base exception for the embodied suffering scoring system.

    Expected data-quality problems (missing countries, mismatched lists, empty
    catalogs) are reported as diagnostics on a result, never raised. These
    exceptions cover configuration faults and callers that opt into raising.

    Attributes:
        message: Human-readable description of the error.
        error_code: Machine-readable code identifying the error type.
    """
    error_code: str = "unknown_error"

    def __init__(self, message: Optional[str] = None):
        # Use the class docstring as a default message if none provided
        default_msg = self.__class__.__doc__.strip().splitlines()[0] if self.__class__.__doc__ else ""
        self.message = message or default_msg
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class DatasetNotFoundException(EmbodiedSufferingException):
    "Raised when the dataset library root does not exist."
    error_code = "dataset_not_found"


class DatasetFormatException(EmbodiedSufferingException):
    "Raised when a dataset file cannot be read or parsed."
    error_code = "dataset_format_error"


class ScoringException(EmbodiedSufferingException):
    "Raised when a failed scoring result is unwrapped."
    error_code = "scoring_error"


# Public API
__all__ = [
    "EmbodiedSufferingException",
    "DatasetNotFoundException",
    "DatasetFormatException",
    "ScoringException",
]
