"""
FHIR Observation payload for a visual acuity measurement.

High level
----------
Every reading is recorded as a `final` Observation in the `exam` category,
coded with the LogMAR method for the eye it was taken on, carrying the LogMAR
value as a quantity with unit 'LogMAR'.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

from .codes import (
    BODY_SITE_CODINGS,
    EXAM_CATEGORY_CODE,
    EXAM_CATEGORY_DISPLAY,
    LOGMAR_METHOD_CODINGS,
    LOGMAR_UNIT,
    OBSERVATION_CATEGORY_SYSTEM,
)
from .reading import BodySite


def build_observation(
    subject_ref: str,
    body_site: Union[str, BodySite],
    logmar: float,
    encounter_ref: Optional[str] = None,
    effective_date_time: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build the Observation resource for one eye's LogMAR reading.

    Parameters
    ----------
    subject_ref : str
        Patient reference, e.g. 'Patient/123'.
    body_site : str or BodySite
        'left-eye' or 'right-eye' (see BodySite.from_label for aliases).
    logmar : float
        LogMAR value to record.
    encounter_ref : str, optional
        Encounter reference; omitted from the resource when None.
    effective_date_time : str, optional
        ISO-8601 timestamp; omitted from the resource when None.

    Returns
    -------
    dict
        JSON-ready Observation resource.
    """
    site = BodySite.from_label(body_site)

    observation: Dict[str, Any] = {
        "resourceType": "Observation",
        "status": "final",
        "category": [
            {
                "coding": [
                    {
                        "system": OBSERVATION_CATEGORY_SYSTEM,
                        "code": EXAM_CATEGORY_CODE,
                        "display": EXAM_CATEGORY_DISPLAY,
                    }
                ]
            }
        ],
        "code": {"coding": [dict(LOGMAR_METHOD_CODINGS[site])]},
        "subject": {"reference": subject_ref},
    }
    if encounter_ref is not None:
        observation["encounter"] = {"reference": encounter_ref}
    if effective_date_time is not None:
        observation["effectiveDateTime"] = effective_date_time
    observation["bodySite"] = {"coding": [dict(BODY_SITE_CODINGS[site])]}
    observation["valueQuantity"] = {"value": logmar, "unit": LOGMAR_UNIT}
    return observation
