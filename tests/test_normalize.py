import pytest
from visacuity.normalize import normalize, normalize_with_scale
from visacuity.reading import BodySite, VisualAcuityReading


def test_normalize_full_record(observation):
    reading = normalize(observation)
    assert isinstance(reading, VisualAcuityReading)
    assert reading.id == "obs-1"
    assert reading.subject_reference == "Patient/123"
    assert reading.code == "413077008"
    assert reading.code_name == "LogMAR visual acuity left eye"
    assert reading.body_site is BodySite.LEFT_EYE
    assert reading.effective_date_time == "2024-04-08T10:15:00Z"
    assert reading.result == 0.3
    assert reading.unit == "LogMAR"
    assert reading.display == "0.3 LogMAR"


def test_normalize_sparse_record_defaults():
    """Missing pieces degrade to '' / None and the eye falls back to right."""
    reading = normalize({"resourceType": "Observation"})
    assert reading.id == ""
    assert reading.subject_reference == ""
    assert reading.code == ""
    assert reading.code_name is None
    assert reading.body_site is BodySite.RIGHT_EYE
    assert reading.effective_date_time == ""
    assert reading.display == ""
    assert reading.result is None
    assert reading.unit is None


def test_display_needs_value_and_unit(observation):
    observation["valueQuantity"] = {"value": 0.3}
    assert normalize(observation).display == ""
    observation["valueQuantity"] = {"unit": "LogMAR"}
    assert normalize(observation).display == ""
    observation["valueQuantity"] = {"value": 0, "unit": "LogMAR"}
    assert normalize(observation).display == "0 LogMAR"


@pytest.mark.parametrize(
    "body_site,expected",
    [
        ({"coding": [{"code": "8966001"}]}, BodySite.LEFT_EYE),
        ({"coding": [{"code": "18944008"}]}, BodySite.RIGHT_EYE),
        ({"coding": [{"code": "something-else"}]}, BodySite.RIGHT_EYE),
        ({"coding": []}, BodySite.RIGHT_EYE),
        (None, BodySite.RIGHT_EYE),
    ],
)
def test_body_site_is_binary(observation, body_site, expected):
    if body_site is None:
        del observation["bodySite"]
    else:
        observation["bodySite"] = body_site
    assert normalize(observation).body_site is expected


def test_normalize_with_scale_resolves_chart_value(observation):
    assert normalize_with_scale("foot", observation).display == "20/40"
    assert normalize_with_scale("metre", observation).display == "6/12"


def test_normalize_with_scale_falls_back(observation):
    """Off-chart values keep the raw '<value> <unit>' display instead of raising."""
    observation["valueQuantity"] = {"value": 0.15, "unit": "LogMAR"}
    reading = normalize_with_scale("foot", observation)
    assert reading.display == "0.15 LogMAR"
    assert reading.result == 0.15


def test_normalize_with_scale_ignores_string_values(observation):
    observation["valueQuantity"] = {"value": "0.3", "unit": "LogMAR"}
    assert normalize_with_scale("foot", observation).display == "0.3 LogMAR"


def test_reading_to_dict(observation):
    data = normalize_with_scale("foot", observation).to_dict()
    assert data == {
        "id": "obs-1",
        "subjectReference": "Patient/123",
        "code": "413077008",
        "codeName": "LogMAR visual acuity left eye",
        "bodySite": "left-eye",
        "effectiveDateTime": "2024-04-08T10:15:00Z",
        "display": "20/40",
        "result": 0.3,
        "unit": "LogMAR",
    }


def test_body_site_labels():
    assert BodySite.from_label("left") is BodySite.LEFT_EYE
    assert BodySite.from_label("OD") is BodySite.RIGHT_EYE
    assert BodySite.from_label("right_eye") is BodySite.RIGHT_EYE
    with pytest.raises(ValueError):
        BodySite.from_label("both")
