from datetime import date

import pytest
from sqlalchemy import text

from clinidash.models.patient import LabResult, Patient
from clinidash.services import records
from clinidash.utils.exceptions import RecordNotFound


def _lab(**overrides):
    data = {"test_name": "Glucose", "value": 90.0, "unit": "mg/dL", "date": date(2024, 1, 10)}
    data.update(overrides)
    return data


def test_create_and_get_patient(db, patient):
    loaded = records.get_patient(db, patient.id)
    assert loaded.name == "Jane Doe"
    assert loaded.gender == "Female"
    assert loaded.lab_results == []


def test_get_missing_patient_raises(db):
    with pytest.raises(RecordNotFound) as exc:
        records.get_patient(db, "nope")
    assert exc.value.kind == "Patient"
    assert exc.value.record_id == "nope"


def test_list_patients_sorted_by_name(db):
    for name in ("Zed", "Amy", "Mo"):
        records.create_patient(db, {"name": name, "dob": date(1990, 1, 1), "gender": "Other"})
    assert [p.name for p in records.list_patients(db)] == ["Amy", "Mo", "Zed"]


def test_add_lab_classifies_on_write(db, patient):
    lab = records.add_lab_result(db, patient, _lab(value=140.0))
    assert lab.risk_level == "High"
    low = records.add_lab_result(db, patient, _lab(test_name="Hemoglobin", value=10.0, unit="g/dL"))
    assert low.risk_level == "High"


def test_add_lab_converts_to_standard_unit(db, patient):
    lab = records.add_lab_result(db, patient, _lab(value=5.5, unit="mmol/L"))
    assert lab.value == pytest.approx(99.10)
    assert lab.unit == "mg/dL"
    assert lab.risk_level == "High"


def test_add_lab_fills_missing_unit_from_catalog(db, patient):
    lab = records.add_lab_result(db, patient, _lab(unit=""))
    assert lab.unit == "mg/dL"


def test_add_lab_unknown_test_passes_through(db, patient):
    lab = records.add_lab_result(db, patient, _lab(test_name="Ferritin", value=5.0, unit="ng/mL"))
    assert lab.value == 5.0
    assert lab.unit == "ng/mL"
    assert lab.risk_level == "Normal"


def test_update_lab_reclassifies(db, patient):
    lab = records.add_lab_result(db, patient, _lab(value=90.0))
    assert lab.risk_level == "Normal"
    lab = records.update_lab_result(db, lab, {"value": 150.0})
    assert lab.risk_level == "High"
    lab = records.update_lab_result(db, lab, {"test_name": "Triglycerides"})
    assert lab.risk_level == "Normal"


def test_update_lab_date_only_keeps_value(db, patient):
    lab = records.add_lab_result(db, patient, _lab(value=5.5, unit="mmol/L"))
    lab = records.update_lab_result(db, lab, {"date": date(2024, 2, 1)})
    assert lab.value == pytest.approx(99.10)
    assert lab.date == date(2024, 2, 1)


def test_get_lab_result_scoped_to_patient(db, patient):
    other = records.create_patient(db, {"name": "Other", "dob": date(1970, 1, 1), "gender": "Male"})
    lab = records.add_lab_result(db, other, _lab())
    with pytest.raises(RecordNotFound):
        records.get_lab_result(db, patient, lab.id)
    assert records.get_lab_result(db, other, lab.id).id == lab.id


def test_reclassify_counts_changed_rows(db, patient):
    lab = records.add_lab_result(db, patient, _lab(value=140.0))
    records.add_lab_result(db, patient, _lab(value=90.0))
    # Simulate a stale persisted level
    lab.risk_level = "Normal"
    db.commit()
    db.refresh(patient)
    assert records.reclassify_patient_labs(db, patient) == 1
    assert records.reclassify_patient_labs(db, patient) == 0
    db.refresh(lab)
    assert lab.risk_level == "High"


def test_delete_patient_cascades(db, patient):
    records.add_lab_result(db, patient, _lab())
    records.add_diagnosis(db, patient, {"condition": "Hypertension", "date": date(2024, 1, 1)})
    records.delete_patient(db, patient)
    assert db.query(Patient).count() == 0
    assert db.query(LabResult).count() == 0


def test_clinical_note_is_encrypted_at_rest(db, patient):
    records.set_clinical_note(db, patient, "Stable on current regimen")
    raw = db.execute(text("SELECT clinical_note FROM patients WHERE id = :id"), {"id": patient.id}).scalar_one()
    assert "Stable" not in raw
    db.expire_all()
    assert records.get_patient(db, patient.id).clinical_note == "Stable on current regimen"


def test_save_ai_summary_round_trips_json(db, patient):
    summary = {"summary": "Well controlled", "risks": ["HTN"], "recommendations": []}
    row = records.save_ai_summary(db, patient, summary)
    assert row.summary_data == summary
    assert row.date_generated is not None
    db.refresh(patient)
    assert len(patient.saved_ai_summaries) == 1


def test_child_records_ordered_by_date(db, patient):
    records.add_symptom(db, patient, {"name": "Headache", "severity": 4, "date": date(2024, 3, 1)})
    records.add_symptom(db, patient, {"name": "Fatigue", "severity": 6, "date": date(2024, 1, 1)})
    db.refresh(patient)
    assert [s.name for s in patient.symptoms] == ["Fatigue", "Headache"]
