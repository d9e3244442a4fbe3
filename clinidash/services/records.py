"""Patient record store: CRUD over patients and their clinical sub-records.

Lab results are always classified here; callers never supply a risk level.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from clinidash.models.patient import (
    Complaint,
    Diagnosis,
    ImagingStudy,
    LabResult,
    Patient,
    SavedAISummary,
    Symptom,
    Treatment,
)
from clinidash.services.lab_reference import (
    auto_convert_lab_value,
    calculate_risk_level,
    find_lab_test,
)
from clinidash.utils.exceptions import RecordNotFound

logger = logging.getLogger("clinidash")

_PATIENT_FIELDS = ("name", "dob", "gender", "chief_complaint", "clinical_note")
_LAB_FIELDS = ("test_name", "value", "unit", "date", "interpretation", "reference_range_min", "reference_range_max")


def _commit(db: Session, obj: Any) -> Any:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(obj)
    return obj


# ---------------- Patients ----------------
def create_patient(db: Session, data: Dict[str, Any]) -> Patient:
    patient = Patient(**{k: data.get(k) for k in _PATIENT_FIELDS if k in data})
    db.add(patient)
    _commit(db, patient)
    logger.info({"function": "create_patient", "patient_id": patient.id})
    return patient


def list_patients(db: Session) -> List[Patient]:
    return db.query(Patient).order_by(Patient.name).all()


def get_patient(db: Session, patient_id: str) -> Patient:
    patient = db.get(Patient, patient_id)
    if patient is None:
        raise RecordNotFound("Patient", patient_id)
    return patient


def update_patient(db: Session, patient: Patient, data: Dict[str, Any]) -> Patient:
    for key in _PATIENT_FIELDS:
        if key in data:
            setattr(patient, key, data[key])
    return _commit(db, patient)


def delete_patient(db: Session, patient: Patient) -> None:
    patient_id = patient.id
    db.delete(patient)
    db.commit()
    logger.info({"function": "delete_patient", "patient_id": patient_id})


def set_clinical_note(db: Session, patient: Patient, note: Optional[str]) -> Patient:
    patient.clinical_note = note
    return _commit(db, patient)


# ---------------- Lab results ----------------
def _normalize_lab(values: Dict[str, Any]) -> Dict[str, Any]:
    """Convert to the catalog's standard unit where a factor exists."""
    test_name = values.get("test_name") or ""
    unit = values.get("unit") or ""
    converted, is_converted = auto_convert_lab_value(test_name, values["value"], unit)
    if is_converted:
        values["value"] = converted
        values["unit"] = find_lab_test(test_name).standard_unit
    elif not unit:
        ref = find_lab_test(test_name)
        if ref is not None:
            values["unit"] = ref.standard_unit
    return values


def add_lab_result(db: Session, patient: Patient, data: Dict[str, Any]) -> LabResult:
    values = _normalize_lab({k: data.get(k) for k in _LAB_FIELDS if k in data})
    values["risk_level"] = calculate_risk_level(values["test_name"], values["value"]).value
    lab = LabResult(patient_id=patient.id, **values)
    db.add(lab)
    _commit(db, lab)
    logger.info({
        "function": "add_lab_result",
        "patient_id": patient.id,
        "test_name": lab.test_name,
        "risk_level": lab.risk_level,
    })
    return lab


def get_lab_result(db: Session, patient: Patient, lab_id: str) -> LabResult:
    lab = db.get(LabResult, lab_id)
    if lab is None or lab.patient_id != patient.id:
        raise RecordNotFound("LabResult", lab_id)
    return lab


def update_lab_result(db: Session, lab: LabResult, data: Dict[str, Any]) -> LabResult:
    changed = {k: data[k] for k in _LAB_FIELDS if k in data}
    if "value" in changed or "unit" in changed or "test_name" in changed:
        merged = {
            "test_name": changed.get("test_name", lab.test_name),
            "value": changed.get("value", lab.value),
            "unit": changed.get("unit", lab.unit),
        }
        changed.update(_normalize_lab(merged))
    for key, value in changed.items():
        setattr(lab, key, value)
    lab.risk_level = calculate_risk_level(lab.test_name, lab.value).value
    return _commit(db, lab)


def delete_lab_result(db: Session, lab: LabResult) -> None:
    db.delete(lab)
    db.commit()


def reclassify_patient_labs(db: Session, patient: Patient) -> int:
    """Recompute every stored risk level; returns how many rows changed."""
    changed = 0
    for lab in patient.lab_results:
        level = calculate_risk_level(lab.test_name, lab.value).value
        if level != lab.risk_level:
            lab.risk_level = level
            changed += 1
    if changed:
        db.commit()
    logger.info({"function": "reclassify_patient_labs", "patient_id": patient.id, "changed": changed})
    return changed


# ---------------- Other clinical records ----------------
def _add_child(db: Session, patient: Patient, model: type, data: Dict[str, Any]) -> Any:
    row = model(patient_id=patient.id, **data)
    db.add(row)
    return _commit(db, row)


def add_treatment(db: Session, patient: Patient, data: Dict[str, Any]) -> Treatment:
    return _add_child(db, patient, Treatment, data)


def add_diagnosis(db: Session, patient: Patient, data: Dict[str, Any]) -> Diagnosis:
    return _add_child(db, patient, Diagnosis, data)


def add_symptom(db: Session, patient: Patient, data: Dict[str, Any]) -> Symptom:
    return _add_child(db, patient, Symptom, data)


def add_complaint(db: Session, patient: Patient, data: Dict[str, Any]) -> Complaint:
    return _add_child(db, patient, Complaint, data)


def add_imaging_study(db: Session, patient: Patient, data: Dict[str, Any]) -> ImagingStudy:
    return _add_child(db, patient, ImagingStudy, data)


def save_ai_summary(db: Session, patient: Patient, summary: Dict[str, Any]) -> SavedAISummary:
    row = _add_child(db, patient, SavedAISummary, {"summary_data": summary})
    logger.info({"function": "save_ai_summary", "patient_id": patient.id, "summary_id": row.id})
    return row


__all__ = [
    "add_complaint",
    "add_diagnosis",
    "add_imaging_study",
    "add_lab_result",
    "add_symptom",
    "add_treatment",
    "create_patient",
    "delete_lab_result",
    "delete_patient",
    "get_lab_result",
    "get_patient",
    "list_patients",
    "reclassify_patient_labs",
    "save_ai_summary",
    "set_clinical_note",
    "update_lab_result",
    "update_patient",
]
