import copy

import pytest


_LEFT_EYE_OBSERVATION = {
    "resourceType": "Observation",
    "id": "obs-1",
    "status": "final",
    "category": [
        {
            "coding": [
                {
                    "system": "http://terminology.hl7.org/CodeSystem/observation-category",
                    "code": "exam",
                }
            ]
        }
    ],
    "code": {
        "coding": [
            {
                "system": "http://snomed.info/sct",
                "code": "413077008",
                "display": "LogMAR visual acuity left eye",
            }
        ]
    },
    "subject": {"reference": "Patient/123"},
    "effectiveDateTime": "2024-04-08T10:15:00Z",
    "bodySite": {"coding": [{"system": "http://snomed.info/sct", "code": "8966001"}]},
    "valueQuantity": {"value": 0.3, "unit": "LogMAR"},
}


@pytest.fixture
def observation() -> dict:
    """
    A left-eye LogMAR Observation as a FHIR server would return it.
    """
    return copy.deepcopy(_LEFT_EYE_OBSERVATION)


@pytest.fixture
def bundle(observation: dict) -> dict:
    """
    A searchset Bundle with three Observations and one entry without a resource.
    """
    second = copy.deepcopy(observation)
    second["id"] = "obs-2"
    second["valueQuantity"] = {"value": 0.15, "unit": "LogMAR"}
    third = copy.deepcopy(observation)
    third["id"] = "obs-3"
    third["valueQuantity"] = {"value": -0.1, "unit": "LogMAR"}
    return {
        "resourceType": "Bundle",
        "type": "searchset",
        "entry": [
            {"fullUrl": "Observation/obs-1", "resource": observation},
            {"fullUrl": "Observation/missing"},
            {"fullUrl": "Observation/obs-2", "resource": second},
            {"fullUrl": "Observation/obs-3", "resource": third},
        ],
    }
