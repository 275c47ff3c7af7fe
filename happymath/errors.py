"""
Error types for happymath.

Malformed values are recovered by exclusion and degenerate distributions
by substitution, so the only runtime failure the engine reports to callers
is insufficient data. Precondition violations raise ValueError.
"""

from typing import Any, Dict, Optional


class HappyMathError(Exception):
    """Base class for happymath errors."""


class InvalidInputError(HappyMathError, ValueError):
    """Raised when an input row cannot be turned into a record at all."""


class InsufficientDataError(HappyMathError):
    """
    Raised when there are fewer usable records than an operation needs.
    """

    def __init__(self, message: str, required: int, available: int):
        super().__init__(message)
        self.message = message
        self.required = required
        self.available = available

    def to_dict(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Convert the error to a failure result.

        Args:
            extra: Additional keys to include in the result

        Returns:
            Failure result dictionary
        """
        result = {
            'status': 'error',
            'error': 'insufficient_data',
            'message': self.message,
            'required': self.required,
            'available': self.available
        }
        if extra:
            result.update(extra)
        return result
