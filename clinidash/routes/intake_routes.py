# clinidash/routes/intake_routes.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from clinidash.db.session import get_db
from clinidash.schemas.patient import LabResultOut
from clinidash.schemas.reference import AcceptLabsIn, LabReviewIn, ReviewedLabOut
from clinidash.services import lab_intake, records

router = APIRouter(prefix="/api/intake", tags=["intake"])


@router.post("/labs/review", response_model=List[ReviewedLabOut])
def review_labs(payload: LabReviewIn):
    """Normalize and classify extracted rows without touching the record."""
    return lab_intake.review_extracted_labs(item.model_dump() for item in payload.items)


@router.post(
    "/patients/{patient_id}/labs/accept",
    response_model=List[LabResultOut],
    status_code=status.HTTP_201_CREATED,
)
def accept_labs(patient_id: str, payload: AcceptLabsIn, db: Session = Depends(get_db)):
    patient = records.get_patient(db, patient_id)
    return lab_intake.accept_reviewed_labs(db, patient, [item.model_dump() for item in payload.items])
