"""
Exception hierarchy for visacuity.

Every error raised by the library derives from VisualAcuityError, and each
concrete class also derives from the closest built-in so callers may catch
ValueError / LookupError / RuntimeError as they normally would.
"""

from __future__ import annotations

from typing import List, Optional


class VisualAcuityError(Exception):
    """Base class for all visacuity errors."""


class NotConfiguredError(VisualAcuityError, RuntimeError):
    """Raised when a gateway operation runs before a FHIR server is set."""


class InvalidArgumentError(VisualAcuityError, ValueError):
    """Raised for unusable input (zero denominator, unknown unit system, ...)."""


class LogMARNotFoundError(VisualAcuityError, LookupError):
    """Raised when a LogMAR value has no exact match in a scale chart."""


class TransportFailureError(VisualAcuityError, RuntimeError):
    """
    Raised when talking to the FHIR server fails.

    Attributes:
        diagnostics: Diagnostic strings pulled from an OperationOutcome, if any.
        status_code: HTTP status of the last response, if one was received.
    """

    def __init__(
        self,
        message: str,
        diagnostics: Optional[List[str]] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.diagnostics = list(diagnostics or [])
        self.status_code = status_code
