# clinidash/schemas/reference.py
import datetime as dt
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from clinidash.services.lab_reference import RiskLevel


class NormalRangeOut(BaseModel):
    min: float
    max: float


class LabTestReferenceOut(BaseModel):
    name: str
    category: str
    unit: str
    standard_unit: str
    normal_range: NormalRangeOut
    low_is_risky: bool
    conversions: Dict[str, float] = {}


class ClassifyIn(BaseModel):
    test_name: str
    # Raw form input; unparseable strings classify as Normal
    value: Union[float, str, None] = None


class ClassifyOut(BaseModel):
    test_name: str
    risk_level: RiskLevel


class ConvertIn(BaseModel):
    test_name: str
    value: float
    from_unit: str = ""


class ConvertOut(BaseModel):
    test_name: str
    converted_value: float
    is_converted: bool
    unit: str


class PickersOut(BaseModel):
    lab_tests: Dict[str, List[str]]
    drugs: List[str]
    diagnoses: List[str]
    complaints: List[str]


# ---------- Intake review ----------
class ExtractedLabIn(BaseModel):
    test_name: str = Field(..., min_length=1)
    value: float
    unit: str = ""
    date: Optional[dt.date] = None


class LabReviewIn(BaseModel):
    items: List[ExtractedLabIn]


class ReviewedLabOut(BaseModel):
    test_name: str
    value: float
    unit: str
    date: Optional[dt.date] = None
    risk_level: RiskLevel
    is_converted: bool
    original_value: float
    original_unit: str
    recognized: bool
    unit_mismatch: bool


class ReviewedLabIn(BaseModel):
    test_name: str = Field(..., min_length=1)
    value: float
    unit: str = ""
    date: dt.date


class AcceptLabsIn(BaseModel):
    items: List[ReviewedLabIn]
