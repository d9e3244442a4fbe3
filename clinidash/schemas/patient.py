# clinidash/schemas/patient.py
import datetime as dt
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from clinidash.services.lab_reference import RiskLevel

Gender = Literal["Male", "Female", "Other"]
ImagingType = Literal["MRI", "Ultrasound", "X-Ray", "CT Scan", "Other"]


class _ORM(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ---------- Lab results ----------
class LabResultIn(BaseModel):
    test_name: str = Field(..., min_length=1, max_length=120)
    value: float
    unit: str = Field("", max_length=40)
    date: dt.date
    interpretation: Optional[str] = None
    reference_range_min: Optional[float] = None
    reference_range_max: Optional[float] = None


class LabResultUpdate(BaseModel):
    test_name: Optional[str] = Field(None, min_length=1, max_length=120)
    value: Optional[float] = None
    unit: Optional[str] = Field(None, max_length=40)
    date: Optional[dt.date] = None
    interpretation: Optional[str] = None
    reference_range_min: Optional[float] = None
    reference_range_max: Optional[float] = None

    @field_validator("test_name", "value", "unit", "date")
    @classmethod
    def _not_null(cls, v):
        # Omit a field to leave it unchanged; these columns are NOT NULL
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class LabResultOut(_ORM):
    id: str
    test_name: str
    value: float
    unit: str
    date: dt.date
    risk_level: RiskLevel
    interpretation: Optional[str] = None
    reference_range_min: Optional[float] = None
    reference_range_max: Optional[float] = None


# ---------- Other clinical records ----------
class TreatmentIn(BaseModel):
    medication: str = Field(..., min_length=1, max_length=255)
    dosage: str = Field("", max_length=255)
    start_date: dt.date
    end_date: Optional[dt.date] = None


class TreatmentOut(_ORM, TreatmentIn):
    id: str


class DiagnosisIn(BaseModel):
    condition: str = Field(..., min_length=1, max_length=255)
    date: dt.date


class DiagnosisOut(_ORM, DiagnosisIn):
    id: str


class SymptomIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    severity: int = Field(..., ge=1, le=10)
    date: dt.date


class SymptomOut(_ORM, SymptomIn):
    id: str


class ComplaintIn(BaseModel):
    text: str = Field(..., min_length=1, max_length=2000)
    date: dt.date


class ComplaintOut(_ORM, ComplaintIn):
    id: str


class ImagingStudyIn(BaseModel):
    type: ImagingType
    date: dt.date
    report_summary: Optional[str] = None
    patient_complaint: Optional[str] = None
    image_url: Optional[str] = None


class ImagingStudyOut(_ORM, ImagingStudyIn):
    id: str


class SavedAISummaryOut(_ORM):
    id: str
    date_generated: dt.datetime
    summary_data: Optional[Dict[str, Any]] = None


class ClinicalNoteIn(BaseModel):
    clinical_note: Optional[str] = Field(None, max_length=20000)


# ---------- Patient ----------
class PatientIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    dob: dt.date
    gender: Gender
    chief_complaint: Optional[str] = None
    clinical_note: Optional[str] = None


class PatientUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    dob: Optional[dt.date] = None
    gender: Optional[Gender] = None
    chief_complaint: Optional[str] = None
    clinical_note: Optional[str] = None

    @field_validator("name", "dob", "gender")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class PatientSummaryOut(_ORM):
    id: str
    name: str
    dob: dt.date
    gender: str
    chief_complaint: Optional[str] = None


class PatientOut(PatientSummaryOut):
    clinical_note: Optional[str] = None
    complaints: List[ComplaintOut] = []
    symptoms: List[SymptomOut] = []
    lab_results: List[LabResultOut] = []
    diagnoses: List[DiagnosisOut] = []
    treatments: List[TreatmentOut] = []
    imaging_studies: List[ImagingStudyOut] = []
    saved_ai_summaries: List[SavedAISummaryOut] = []
