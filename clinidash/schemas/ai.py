# clinidash/schemas/ai.py
"""Request and response shapes for the generative-language endpoints.

Model output uses camelCase keys; the aliases let us validate it directly
and FastAPI serves the same camelCase shape back by alias.
"""
import datetime as dt
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _ModelOutput(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AISummary(_ModelOutput):
    summary: str
    risks: List[str] = []
    recommendations: List[str] = []


class DrugInteraction(_ModelOutput):
    involved_drugs: List[str]
    severity: Literal["Mild", "Moderate", "Severe", "None"]
    description: str
    action_required: str


class DrugInteractionResult(_ModelOutput):
    interactions: List[DrugInteraction] = []
    disclaimer: str


class InteractionCounts(BaseModel):
    severe: int
    moderate: int
    mild: int


class DrugInteractionReport(DrugInteractionResult):
    counts: InteractionCounts


class MetricsSummary(_ModelOutput):
    stability_score: float = Field(..., ge=0, le=100)
    trend_analysis: str
    top_concerns: List[str] = []
    improvement_advice: str


class DrugNormalization(BaseModel):
    generic: str
    brand: str
    drug_class: str
    status: Literal["validated", "unvalidated"]


class DocumentCategory(BaseModel):
    category: Literal["LAB", "IMAGING", "PRESCRIPTION"]


class ExtractedLab(_ModelOutput):
    test_name: str
    value: float
    unit: str = ""
    date: Optional[dt.date] = None


class ExtractedMedication(_ModelOutput):
    medication: str
    dosage: str = ""
    start_date: Optional[dt.date] = None


class DifferentialDiagnosis(BaseModel):
    diagnosis: str
    reasoning: str
    confidence: Literal["High", "Medium", "Low"]


class BiomarkerAnalysis(_ModelOutput):
    test_name: str
    unit: str = ""
    value: float
    clinical_status: Literal["Low", "Normal", "High"]
    functional_status: Literal["Low", "Normal", "High", "N/A"] = "N/A"
    interpretation: str = ""
    concern: Literal["Priority to Address", "Monitor", "Stable", "Optimal"] = "Stable"


class LabAnalysisResult(_ModelOutput):
    analysis_by_system: Dict[str, List[BiomarkerAnalysis]] = {}
    prioritized_insights: List[str] = []
    recommendations: List[str] = []
    follow_up_tests: List[str] = []


# ---------- Requests ----------
class DocumentIn(BaseModel):
    """A document as a data URL: data:<mime>;base64,<payload>."""

    document: str = Field(..., min_length=1)


class DrugNameIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class DifferentialIn(BaseModel):
    symptoms: str = Field("", max_length=5000)
    findings: str = Field("", max_length=5000)
    history: str = Field("", max_length=5000)


class NarrativeOut(BaseModel):
    text: str
