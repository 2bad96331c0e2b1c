"""
Observation -> VisualAcuityReading normalizers.

Fields are read positionally (first coding of code and bodySite) and missing
pieces degrade to empty strings rather than errors, so a sparse resource
still yields a reading. Keep the public shape stable even if servers vary.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

from .codes import LEFT_EYE_STRUCTURE_CODE
from .reading import BodySite, VisualAcuityReading
from .scales import UnitSystem, scales_for

LOGGER = logging.getLogger(__name__)


# ------------------------------------------------------------------------------
# Small utilities
# ------------------------------------------------------------------------------


def _first_coding(element: Any) -> Dict[str, Any]:
    """Return element['coding'][0], or {} when any level is missing."""
    if not isinstance(element, dict):
        return {}
    codings = element.get("coding")
    if isinstance(codings, list) and codings and isinstance(codings[0], dict):
        return codings[0]
    return {}


def _body_site(record: Dict[str, Any]) -> BodySite:
    # Binary: anything that is not the left-eye structure code is the right eye
    code = _first_coding(record.get("bodySite")).get("code")
    return BodySite.LEFT_EYE if code == LEFT_EYE_STRUCTURE_CODE else BodySite.RIGHT_EYE


def _quantity_display(value: Any, unit: Optional[str]) -> str:
    if value is None or not unit:
        return ""
    return f"{value} {unit}"


def _scale_display(unit_system: UnitSystem, value: Any) -> Optional[str]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    for entry in scales_for(unit_system):
        if entry.logmar == value:
            return entry.display
    return None


def _build(record: Dict[str, Any], display: str) -> VisualAcuityReading:
    code = _first_coding(record.get("code"))
    subject = record.get("subject") or {}
    quantity = record.get("valueQuantity") or {}
    return VisualAcuityReading(
        id=record.get("id") or "",
        subject_reference=subject.get("reference") or "",
        code=code.get("code") or "",
        code_name=code.get("display"),
        body_site=_body_site(record),
        effective_date_time=record.get("effectiveDateTime") or "",
        display=display,
        result=quantity.get("value"),
        unit=quantity.get("unit"),
    )


# ------------------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------------------


def normalize(record: Dict[str, Any]) -> VisualAcuityReading:
    """
    Flatten an Observation into a VisualAcuityReading.

    `display` is '<value> <unit>' when the resource carries both a quantity
    value and unit, otherwise ''.
    """
    quantity = record.get("valueQuantity") or {}
    return _build(record, _quantity_display(quantity.get("value"), quantity.get("unit")))


def normalize_with_scale(
    unit_system: Union[str, UnitSystem], record: Dict[str, Any]
) -> VisualAcuityReading:
    """
    Like normalize(), but resolve the quantity value to a Snellen fraction.

    A value that exactly matches a chart LogMAR gets the chart's display
    (e.g. 0.3 -> '20/40'); anything else falls back to '<value> <unit>'.
    Unlike logmar_to_display(), a miss never raises.
    """
    unit_system = UnitSystem.from_label(unit_system)
    quantity = record.get("valueQuantity") or {}
    value, unit = quantity.get("value"), quantity.get("unit")

    display = _scale_display(unit_system, value)
    if display is None:
        LOGGER.debug(
            "No %s chart line for value %r on Observation %r; using raw quantity",
            unit_system.value,
            value,
            record.get("id"),
        )
        display = _quantity_display(value, unit)
    return _build(record, display)
