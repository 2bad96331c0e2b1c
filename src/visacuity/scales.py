"""
Visual acuity scale charts.

Defines the ScaleEntry dataclass, the UnitSystem enum and the two standard
Snellen charts (20 ft and 6 m testing distance) with their LogMAR values.
The charts are module-level immutable data shared by every caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple, Union

from .errors import InvalidArgumentError


class UnitSystem(str, Enum):
    """Testing distance unit of a Snellen chart."""

    FOOT = "foot"
    METRE = "metre"

    @classmethod
    def from_label(cls, label: Union[str, "UnitSystem"]) -> "UnitSystem":
        """
        Convert a human-readable label into the corresponding enum.
        Accepts the canonical values plus common spellings ('feet', 'ft',
        'meter', 'm', ...), case-insensitively.
        """
        if isinstance(label, cls):
            return label
        key = str(label).strip().lower()
        mapping = {
            "foot": cls.FOOT,
            "feet": cls.FOOT,
            "ft": cls.FOOT,
            "imperial": cls.FOOT,
            "metre": cls.METRE,
            "metres": cls.METRE,
            "meter": cls.METRE,
            "meters": cls.METRE,
            "m": cls.METRE,
            "metric": cls.METRE,
        }
        try:
            return mapping[key]
        except KeyError:
            raise InvalidArgumentError(f"Unsupported unit system: {label!r}")


@dataclass(frozen=True)
class ScaleEntry:
    """
    One line of a Snellen chart.

    Attributes:
        display: Canonical fraction string (e.g. '20/40' or '6/12').
        numerator: Testing distance.
        denominator: Distance at which a normal eye reads the same line.
        logmar: LogMAR value of the line, one decimal place.
    """

    display: str
    numerator: float
    denominator: float
    logmar: float


def _chart(numerator: float, rows: Tuple[Tuple[float, float], ...]) -> Tuple[ScaleEntry, ...]:
    return tuple(
        ScaleEntry(
            display=f"{numerator:g}/{denominator:g}",
            numerator=float(numerator),
            denominator=float(denominator),
            logmar=logmar,
        )
        for denominator, logmar in rows
    )


# (denominator, LogMAR), worst acuity first
_FOOT_ROWS = (
    (200, 1.0),
    (160, 0.9),
    (125, 0.8),
    (100, 0.7),
    (80, 0.6),
    (63, 0.5),
    (50, 0.4),
    (40, 0.3),
    (32, 0.2),
    (25, 0.1),
    (20, 0.0),
    (16, -0.1),
    (12.5, -0.2),
    (10, -0.3),
)

_METRE_ROWS = (
    (60, 1.0),
    (48, 0.9),
    (38, 0.8),
    (30, 0.7),
    (24, 0.6),
    (18, 0.5),
    (15, 0.4),
    (12, 0.3),
    (9.5, 0.2),
    (7.5, 0.1),
    (6, 0.0),
    (4.8, -0.1),
    (3.8, -0.2),
    (3, -0.3),
)

VISUAL_ACUITY_SCALES: Mapping[UnitSystem, Tuple[ScaleEntry, ...]] = MappingProxyType(
    {
        UnitSystem.FOOT: _chart(20, _FOOT_ROWS),
        UnitSystem.METRE: _chart(6, _METRE_ROWS),
    }
)


def scales_for(unit_system: Union[str, UnitSystem]) -> Tuple[ScaleEntry, ...]:
    """Return the chart for a unit system, worst acuity (LogMAR 1.0) first."""
    return VISUAL_ACUITY_SCALES[UnitSystem.from_label(unit_system)]


# Public name used by the gateway-facing API
get_scales = scales_for
