# clinidash/routes/analytics_routes.py
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clinidash.db.session import get_db
from clinidash.services import analytics, records

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/diagnoses/search")
def search_by_diagnosis(q: str = "", db: Session = Depends(get_db)) -> Dict[str, Any]:
    matches: Optional[List[str]] = analytics.search_patients_by_diagnosis(records.list_patients(db), q)
    return {"query": q, "patients": matches}


@router.get("/diagnoses/distribution")
def distribution(db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    return analytics.diagnosis_distribution(records.list_patients(db))
