"""
Conversions between Snellen fractions and LogMAR.

Two directions are supported:
- LogMAR -> Snellen display string, by exact lookup in a scale chart.
- Snellen ratio -> LogMAR, by the closed-form formula

      LogMAR = log10(denominator / numerator) - correction * 0.02

  where `correction` is the optotypes-read correction (default -2, i.e. +0.04),
  rounded to one decimal place, half away from zero.

The rounded values line up with the chart values, so the output of
snellen_to_logmar() can be fed straight back into logmar_to_display().
"""

from __future__ import annotations

import math
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Tuple, Union

from .errors import InvalidArgumentError, LogMARNotFoundError
from .scales import UnitSystem, scales_for

DEFAULT_OPTOTYPES_READ_CORRECTION = -2
LOGMAR_PER_OPTOTYPE = 0.02

_SNELLEN_PATTERN = re.compile(
    r"^\s*(?P<num>\d+(?:\.\d+)?)\s*/\s*(?P<den>\d+(?:\.\d+)?)\s*$"
)


def round_logmar(value: float) -> float:
    """Round to one decimal place, half away from zero; never returns -0.0."""
    rounded = Decimal(repr(float(value))).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return float(rounded) + 0.0


def logmar_to_display(logmar: float, unit_system: Union[str, UnitSystem]) -> str:
    """
    Return the Snellen fraction whose chart LogMAR equals `logmar` exactly.

    Raises
    ------
    LogMARNotFoundError
        If no chart line has that exact LogMAR value. Callers must pass one of
        the discrete chart values; no rounding is attempted here.
    """
    for entry in scales_for(unit_system):
        if entry.logmar == logmar:
            return entry.display
    raise LogMARNotFoundError(
        f"LogMAR {logmar!r} not found in the {UnitSystem.from_label(unit_system).value} chart"
    )


def snellen_to_logmar(
    numerator: float,
    denominator: float,
    optotypes_read_correction: int = DEFAULT_OPTOTYPES_READ_CORRECTION,
) -> float:
    """
    Convert a Snellen ratio to a LogMAR value.

    Parameters
    ----------
    numerator : float
        Testing distance (20 for a foot chart, 6 for a metre chart).
    denominator : float
        Distance at which a normal eye reads the same line.
    optotypes_read_correction : int, optional
        Optotypes read beyond (negative: short of) the best complete line.
        Each optotype is worth 0.02 LogMAR. Defaults to -2.

    Returns
    -------
    float
        LogMAR rounded to one decimal place.

    Raises
    ------
    InvalidArgumentError
        If the denominator is zero, or either term is not a positive number.
    """
    if denominator == 0:
        raise InvalidArgumentError("Snellen denominator must not be zero")
    if not (math.isfinite(numerator) and math.isfinite(denominator)):
        raise InvalidArgumentError(
            f"Snellen terms must be finite, got {numerator!r}/{denominator!r}"
        )
    if numerator <= 0 or denominator < 0:
        raise InvalidArgumentError(
            f"Snellen terms must be positive, got {numerator!r}/{denominator!r}"
        )
    raw = math.log10(denominator / numerator) - optotypes_read_correction * LOGMAR_PER_OPTOTYPE
    return round_logmar(raw)


def parse_snellen(text: str) -> Tuple[float, float]:
    """Parse a fraction such as '20/40' or '6/9.5' into (numerator, denominator)."""
    match = _SNELLEN_PATTERN.match(text or "")
    if not match:
        raise InvalidArgumentError(f"Invalid Snellen fraction: {text!r}")
    return float(match.group("num")), float(match.group("den"))
