# clinidash/routes/ai_routes.py
"""Generative-language endpoints. Everything here calls out to Gemini."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from clinidash.db.session import get_db
from clinidash.schemas.ai import (
    AISummary,
    DifferentialDiagnosis,
    DifferentialIn,
    DocumentCategory,
    DocumentIn,
    DrugInteractionReport,
    DrugNameIn,
    DrugNormalization,
    ExtractedMedication,
    InteractionCounts,
    LabAnalysisResult,
    MetricsSummary,
    NarrativeOut,
)
from clinidash.schemas.reference import ReviewedLabOut
from clinidash.services import analytics, gemini, lab_intake, records
from clinidash.utils.app import AI_RATE_LIMIT, limiter

router = APIRouter(prefix="/api/ai", tags=["ai"])


# ---------------- Documents ----------------
@router.post("/documents/classify", response_model=DocumentCategory)
@limiter.limit(AI_RATE_LIMIT)
async def classify_document(request: Request, payload: DocumentIn):
    return DocumentCategory(category=await gemini.classify_document(payload.document))


@router.post("/documents/labs", response_model=List[ReviewedLabOut])
@limiter.limit(AI_RATE_LIMIT)
async def extract_labs(request: Request, payload: DocumentIn):
    """Extract lab rows from a scanned report, already normalized for review."""
    extracted = await gemini.extract_labs_from_document(payload.document)
    return lab_intake.review_extracted_labs(e.model_dump() for e in extracted)


@router.post("/documents/medications", response_model=List[ExtractedMedication])
@limiter.limit(AI_RATE_LIMIT)
async def extract_medications(request: Request, payload: DocumentIn):
    return await gemini.extract_medications_from_document(payload.document)


@router.post("/documents/imaging-report", response_model=NarrativeOut)
@limiter.limit(AI_RATE_LIMIT)
async def imaging_report(request: Request, payload: DocumentIn):
    return NarrativeOut(text=await gemini.generate_imaging_report_from_document(payload.document))


@router.post("/documents/imaging-analysis", response_model=NarrativeOut)
@limiter.limit(AI_RATE_LIMIT)
async def imaging_analysis(request: Request, payload: DocumentIn):
    return NarrativeOut(text=await gemini.analyze_imaging_image(payload.document))


@router.post("/drugs/normalize", response_model=DrugNormalization)
@limiter.limit(AI_RATE_LIMIT)
async def normalize_drug(request: Request, payload: DrugNameIn):
    return await gemini.normalize_drug_name(payload.name)


# ---------------- Patient narratives ----------------
@router.post("/patients/{patient_id}/summary", response_model=AISummary)
@limiter.limit(AI_RATE_LIMIT)
async def patient_summary(request: Request, patient_id: str, db: Session = Depends(get_db)):
    return await gemini.generate_patient_summary(records.get_patient(db, patient_id))


@router.post("/patients/{patient_id}/interactions", response_model=DrugInteractionReport)
@limiter.limit(AI_RATE_LIMIT)
async def drug_interactions(request: Request, patient_id: str, db: Session = Depends(get_db)):
    patient = records.get_patient(db, patient_id)
    medications = [t.medication for t in patient.treatments]
    if len(medications) < 2:
        raise HTTPException(status_code=400, detail="Multiple medications required to perform a drug interaction scan.")
    result = await gemini.analyze_drug_interactions(medications)
    counts = analytics.interaction_counts(result.model_dump())
    return DrugInteractionReport(**result.model_dump(), counts=InteractionCounts(**counts))


@router.post("/patients/{patient_id}/metrics", response_model=MetricsSummary)
@limiter.limit(AI_RATE_LIMIT)
async def metrics_summary(request: Request, patient_id: str, db: Session = Depends(get_db)):
    patient = records.get_patient(db, patient_id)
    if not patient.lab_results:
        raise HTTPException(status_code=400, detail="No lab results to analyze.")
    return await gemini.generate_metrics_summary(patient)


@router.post("/patients/{patient_id}/differential", response_model=List[DifferentialDiagnosis])
@limiter.limit(AI_RATE_LIMIT)
async def differential(request: Request, patient_id: str, payload: DifferentialIn, db: Session = Depends(get_db)):
    patient = records.get_patient(db, patient_id)
    return await gemini.generate_differential_diagnoses(patient, payload.symptoms, payload.findings, payload.history)


@router.post("/patients/{patient_id}/lab-analysis", response_model=LabAnalysisResult)
@limiter.limit(AI_RATE_LIMIT)
async def lab_analysis(request: Request, patient_id: str, db: Session = Depends(get_db)):
    patient = records.get_patient(db, patient_id)
    if not patient.lab_results:
        raise HTTPException(status_code=400, detail="No lab results to analyze.")
    return await gemini.analyze_full_lab_panel(patient)
