"""
Fixed FHIR coding systems and codes used for visual acuity Observations.
"""

from __future__ import annotations

from typing import Dict

from .reading import BodySite

OBSERVATION_CATEGORY_SYSTEM = "http://terminology.hl7.org/CodeSystem/observation-category"
SNOMED_SYSTEM = "http://snomed.info/sct"

EXAM_CATEGORY_CODE = "exam"
EXAM_CATEGORY_DISPLAY = "Exam"

LOGMAR_UNIT = "LogMAR"

# SNOMED CT body structures
LEFT_EYE_STRUCTURE_CODE = "8966001"
RIGHT_EYE_STRUCTURE_CODE = "18944008"

BODY_SITE_CODINGS: Dict[BodySite, Dict[str, str]] = {
    BodySite.LEFT_EYE: {
        "system": SNOMED_SYSTEM,
        "code": LEFT_EYE_STRUCTURE_CODE,
        "display": "Left eye structure",
    },
    BodySite.RIGHT_EYE: {
        "system": SNOMED_SYSTEM,
        "code": RIGHT_EYE_STRUCTURE_CODE,
        "display": "Right eye structure",
    },
}

# SNOMED CT observables for LogMAR visual acuity, one per eye
LOGMAR_METHOD_CODINGS: Dict[BodySite, Dict[str, str]] = {
    BodySite.LEFT_EYE: {
        "system": SNOMED_SYSTEM,
        "code": "413077008",
        "display": "LogMAR visual acuity left eye",
    },
    BodySite.RIGHT_EYE: {
        "system": SNOMED_SYSTEM,
        "code": "413078003",
        "display": "LogMAR visual acuity right eye",
    },
}


def token(system: str, code: str) -> str:
    """Format a FHIR search token parameter ('system|code')."""
    return f"{system}|{code}"


EXAM_CATEGORY_TOKEN = token(OBSERVATION_CATEGORY_SYSTEM, EXAM_CATEGORY_CODE)


def method_token(body_site: BodySite) -> str:
    coding = LOGMAR_METHOD_CODINGS[body_site]
    return token(coding["system"], coding["code"])
