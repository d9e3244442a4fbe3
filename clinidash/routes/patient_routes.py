# clinidash/routes/patient_routes.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from clinidash.db.session import get_db
from clinidash.models.patient import Patient
from clinidash.schemas.patient import (
    ClinicalNoteIn,
    ComplaintIn,
    ComplaintOut,
    DiagnosisIn,
    DiagnosisOut,
    ImagingStudyIn,
    ImagingStudyOut,
    LabResultIn,
    LabResultOut,
    LabResultUpdate,
    PatientIn,
    PatientOut,
    PatientSummaryOut,
    PatientUpdate,
    SavedAISummaryOut,
    SymptomIn,
    SymptomOut,
    TreatmentIn,
    TreatmentOut,
)
from clinidash.schemas.ai import AISummary
from clinidash.services import lab_trends, records
from clinidash.services.export import export_patient_labs_csv
from clinidash.utils.exceptions import NoLabResults

router = APIRouter(prefix="/api/patients", tags=["patients"])


def patient_dep(patient_id: str, db: Session = Depends(get_db)) -> Patient:
    return records.get_patient(db, patient_id)


# ---------------- Patients ----------------
@router.get("", response_model=List[PatientSummaryOut])
def list_patients(db: Session = Depends(get_db)):
    return records.list_patients(db)


@router.post("", response_model=PatientOut, status_code=status.HTTP_201_CREATED)
def create_patient(payload: PatientIn, db: Session = Depends(get_db)):
    return records.create_patient(db, payload.model_dump())


@router.get("/{patient_id}", response_model=PatientOut)
def get_patient(patient: Patient = Depends(patient_dep)):
    return patient


@router.patch("/{patient_id}", response_model=PatientOut)
def update_patient(payload: PatientUpdate, patient: Patient = Depends(patient_dep), db: Session = Depends(get_db)):
    return records.update_patient(db, patient, payload.model_dump(exclude_unset=True))


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_patient(patient: Patient = Depends(patient_dep), db: Session = Depends(get_db)):
    records.delete_patient(db, patient)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{patient_id}/clinical-note", response_model=PatientOut)
def set_clinical_note(payload: ClinicalNoteIn, patient: Patient = Depends(patient_dep), db: Session = Depends(get_db)):
    return records.set_clinical_note(db, patient, payload.clinical_note)


# ---------------- Labs ----------------
@router.get("/{patient_id}/labs", response_model=List[LabResultOut])
def list_labs(patient: Patient = Depends(patient_dep)):
    return patient.lab_results


@router.post("/{patient_id}/labs", response_model=LabResultOut, status_code=status.HTTP_201_CREATED)
def add_lab(payload: LabResultIn, patient: Patient = Depends(patient_dep), db: Session = Depends(get_db)):
    return records.add_lab_result(db, patient, payload.model_dump())


@router.patch("/{patient_id}/labs/{lab_id}", response_model=LabResultOut)
def update_lab(
    lab_id: str,
    payload: LabResultUpdate,
    patient: Patient = Depends(patient_dep),
    db: Session = Depends(get_db),
):
    lab = records.get_lab_result(db, patient, lab_id)
    return records.update_lab_result(db, lab, payload.model_dump(exclude_unset=True))


@router.delete("/{patient_id}/labs/{lab_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_lab(lab_id: str, patient: Patient = Depends(patient_dep), db: Session = Depends(get_db)):
    records.delete_lab_result(db, records.get_lab_result(db, patient, lab_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{patient_id}/labs/reclassify")
def reclassify_labs(patient: Patient = Depends(patient_dep), db: Session = Depends(get_db)) -> Dict[str, int]:
    return {"changed": records.reclassify_patient_labs(db, patient)}


@router.get("/{patient_id}/labs/tests", response_model=List[str])
def lab_tests(patient: Patient = Depends(patient_dep)):
    return lab_trends.available_tests(patient.lab_results)


@router.get("/{patient_id}/labs/trends/{test_name}")
def lab_trend(test_name: str, patient: Patient = Depends(patient_dep)) -> Dict[str, Any]:
    series = lab_trends.trend_series(patient.lab_results, test_name)
    if not series["points"]:
        raise HTTPException(status_code=404, detail=f"No results for {test_name}")
    return series


@router.get("/{patient_id}/labs/latest", response_model=List[LabResultOut])
def latest_labs(limit: int = 6, patient: Patient = Depends(patient_dep)):
    return lab_trends.latest_per_test(patient.lab_results, limit=limit)


@router.get("/{patient_id}/labs/recent", response_model=List[LabResultOut])
def recent_labs(limit: int = 4, patient: Patient = Depends(patient_dep)):
    return lab_trends.recent_results(patient.lab_results, limit=limit)


@router.get("/{patient_id}/labs/high-risk", response_model=List[LabResultOut])
def high_risk_labs(patient: Patient = Depends(patient_dep)):
    return lab_trends.high_risk_results(patient.lab_results)


@router.get("/{patient_id}/labs/export.csv")
def export_labs(patient: Patient = Depends(patient_dep)):
    try:
        filename, content = export_patient_labs_csv(patient.name, patient.lab_results)
    except NoLabResults as e:
        raise HTTPException(status_code=400, detail=str(e))
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ---------------- Other clinical records ----------------
@router.post("/{patient_id}/treatments", response_model=TreatmentOut, status_code=status.HTTP_201_CREATED)
def add_treatment(payload: TreatmentIn, patient: Patient = Depends(patient_dep), db: Session = Depends(get_db)):
    return records.add_treatment(db, patient, payload.model_dump())


@router.post("/{patient_id}/diagnoses", response_model=DiagnosisOut, status_code=status.HTTP_201_CREATED)
def add_diagnosis(payload: DiagnosisIn, patient: Patient = Depends(patient_dep), db: Session = Depends(get_db)):
    return records.add_diagnosis(db, patient, payload.model_dump())


@router.post("/{patient_id}/symptoms", response_model=SymptomOut, status_code=status.HTTP_201_CREATED)
def add_symptom(payload: SymptomIn, patient: Patient = Depends(patient_dep), db: Session = Depends(get_db)):
    return records.add_symptom(db, patient, payload.model_dump())


@router.post("/{patient_id}/complaints", response_model=ComplaintOut, status_code=status.HTTP_201_CREATED)
def add_complaint(payload: ComplaintIn, patient: Patient = Depends(patient_dep), db: Session = Depends(get_db)):
    return records.add_complaint(db, patient, payload.model_dump())


@router.post("/{patient_id}/imaging", response_model=ImagingStudyOut, status_code=status.HTTP_201_CREATED)
def add_imaging(payload: ImagingStudyIn, patient: Patient = Depends(patient_dep), db: Session = Depends(get_db)):
    return records.add_imaging_study(db, patient, payload.model_dump())


@router.get("/{patient_id}/imaging/concerning", response_model=List[ImagingStudyOut])
def concerning_imaging(patient: Patient = Depends(patient_dep)):
    return lab_trends.concerning_imaging(patient.imaging_studies)


@router.post("/{patient_id}/summaries", response_model=SavedAISummaryOut, status_code=status.HTTP_201_CREATED)
def save_summary(payload: AISummary, patient: Patient = Depends(patient_dep), db: Session = Depends(get_db)):
    return records.save_ai_summary(db, patient, payload.model_dump())
