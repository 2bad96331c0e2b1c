"""
Visual acuity reading domain model.

Defines the BodySite enum and the VisualAcuityReading dataclass, the uniform
value object every Observation is normalized into.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from .errors import InvalidArgumentError


class BodySite(str, Enum):
    """Eye a reading was taken on."""

    LEFT_EYE = "left-eye"
    RIGHT_EYE = "right-eye"

    @classmethod
    def from_label(cls, label: Union[str, "BodySite"]) -> "BodySite":
        """
        Convert a human-readable label into the corresponding enum.
        Accepts 'left-eye', 'left', 'OS', 'right-eye', 'right', 'OD' and the
        snake_case variants, case-insensitively.
        """
        if isinstance(label, cls):
            return label
        key = str(label).strip().lower().replace("_", "-").replace(" ", "-")
        mapping = {
            "left-eye": cls.LEFT_EYE,
            "left": cls.LEFT_EYE,
            "os": cls.LEFT_EYE,
            "right-eye": cls.RIGHT_EYE,
            "right": cls.RIGHT_EYE,
            "od": cls.RIGHT_EYE,
        }
        try:
            return mapping[key]
        except KeyError:
            raise InvalidArgumentError(f"Unknown body site: {label!r}")


@dataclass(frozen=True)
class VisualAcuityReading:
    """
    A single visual acuity result, flattened out of a FHIR Observation.

    Attributes:
        id: Server-assigned Observation id ('' if the resource had none).
        subject_reference: Reference to the patient, e.g. 'Patient/123'.
        code: LogMAR method code (left or right eye).
        code_name: Display of the method code, if the server sent one.
        body_site: Eye the reading belongs to.
        effective_date_time: ISO-8601 timestamp ('' if absent).
        display: Snellen fraction, or '<value> <unit>' fallback, or ''.
        result: Raw quantity value.
        unit: Raw quantity unit.
    """

    id: str
    subject_reference: str
    code: str
    code_name: Optional[str]
    body_site: BodySite
    effective_date_time: str
    display: str
    result: Any
    unit: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready mapping with FHIR-style camelCase keys."""
        return {
            "id": self.id,
            "subjectReference": self.subject_reference,
            "code": self.code,
            "codeName": self.code_name,
            "bodySite": self.body_site.value,
            "effectiveDateTime": self.effective_date_time,
            "display": self.display,
            "result": self.result,
            "unit": self.unit,
        }
