from datetime import date
from types import SimpleNamespace

from clinidash.services import lab_trends


def _r(test_name, value, d, risk="Normal", unit="mg/dL"):
    return SimpleNamespace(test_name=test_name, value=value, date=d, risk_level=risk, unit=unit)


RESULTS = [
    _r("Glucose", 110, date(2024, 3, 4), "High"),
    _r("Hemoglobin", 13.0, date(2024, 1, 2), unit="g/dL"),
    _r("Glucose", 95, date(2024, 1, 2)),
    _r("LDL-C", 150, date(2024, 2, 9), "High"),
]


def test_available_tests_first_seen_order():
    assert lab_trends.available_tests(RESULTS) == ["Glucose", "Hemoglobin", "LDL-C"]


def test_date_label_has_no_zero_padding():
    assert lab_trends.date_label(date(2024, 3, 4)) == "Mar 4"


def test_trend_series_is_chronological_with_reference():
    series = lab_trends.trend_series(RESULTS, "Glucose")
    assert [p["value"] for p in series["points"]] == [95, 110]
    assert series["points"][1]["date_label"] == "Mar 4"
    assert series["points"][1]["risk_level"] == "High"
    assert series["reference"] == {"min": 70.0, "max": 99.0, "standard_unit": "mg/dL"}


def test_trend_series_unknown_test_has_no_reference():
    series = lab_trends.trend_series([_r("Ferritin", 50, date(2024, 1, 1))], "Ferritin")
    assert len(series["points"]) == 1
    assert series["reference"] is None


def test_latest_per_test_newest_first():
    latest = lab_trends.latest_per_test(RESULTS)
    assert [(r.test_name, r.value) for r in latest] == [("Glucose", 110), ("LDL-C", 150), ("Hemoglobin", 13.0)]
    assert len(lab_trends.latest_per_test(RESULTS, limit=1)) == 1


def test_recent_results_limit():
    recent = lab_trends.recent_results(RESULTS, limit=2)
    assert [r.date for r in recent] == [date(2024, 3, 4), date(2024, 2, 9)]


def test_high_risk_results():
    assert {r.test_name for r in lab_trends.high_risk_results(RESULTS)} == {"Glucose", "LDL-C"}


def test_concerning_imaging_keywords():
    studies = [
        SimpleNamespace(report_summary="Suspicious mass in left lobe"),
        SimpleNamespace(report_summary="Unremarkable study"),
        SimpleNamespace(report_summary=None),
    ]
    assert lab_trends.concerning_imaging(studies) == [studies[0]]
