from datetime import date

import pytest

from clinidash.services import lab_intake


def test_review_converts_and_classifies():
    row = lab_intake.review_extracted_lab(
        {"test_name": " Glucose ", "value": 5.5, "unit": "mmol/L", "date": date(2024, 1, 2)}
    )
    assert row["test_name"] == "Glucose"
    assert row["value"] == pytest.approx(99.10)
    assert row["unit"] == "mg/dL"
    assert row["risk_level"] == "High"
    assert row["is_converted"] is True
    assert row["original_value"] == 5.5
    assert row["original_unit"] == "mmol/L"
    assert row["recognized"] is True
    assert row["unit_mismatch"] is False


def test_review_flags_unit_without_conversion():
    row = lab_intake.review_extracted_lab({"test_name": "Glucose", "value": 1.0, "unit": "g/L"})
    assert row["value"] == 1.0
    assert row["unit"] == "g/L"
    assert row["is_converted"] is False
    assert row["unit_mismatch"] is True


def test_review_unknown_test_not_flagged():
    row = lab_intake.review_extracted_lab({"test_name": "Ferritin", "value": 5, "unit": "ng/mL"})
    assert row["recognized"] is False
    assert row["unit_mismatch"] is False
    assert row["risk_level"] == "Normal"


def test_review_many_logs_mismatches(caplog):
    with caplog.at_level("WARNING", logger="clinidash"):
        rows = lab_intake.review_extracted_labs(
            [
                {"test_name": "Glucose", "value": 90, "unit": "mg/dL"},
                {"test_name": "Creatinine", "value": 1, "unit": "mmol/L"},
            ]
        )
    assert [r["unit_mismatch"] for r in rows] == [False, True]
    assert any("review_extracted_labs" in str(rec.msg) for rec in caplog.records)


def test_accept_persists_with_fresh_risk_level(db, patient):
    saved = lab_intake.accept_reviewed_labs(
        db,
        patient,
        [
            {"test_name": "HDL-C", "value": 30, "unit": "mg/dL", "date": date(2024, 1, 2), "risk_level": "Normal"},
            {"test_name": "Sodium", "value": 140, "unit": "", "date": date(2024, 1, 2)},
        ],
    )
    assert [s.risk_level for s in saved] == ["High", "Normal"]
    assert saved[1].unit == "mEq/L"
    db.refresh(patient)
    assert len(patient.lab_results) == 2
