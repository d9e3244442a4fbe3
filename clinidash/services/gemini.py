"""Thin async wrapper around the Gemini generateContent REST endpoint.

Every clinical narrative (summaries, interaction checks, differentials,
document extraction) is delegated here. Responses requested in JSON mode are
validated with the pydantic models in clinidash.schemas.ai.
"""
from __future__ import annotations

import json
import logging
import os
import re
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import TypeAdapter, ValidationError

from clinidash.schemas.ai import (
    AISummary,
    DifferentialDiagnosis,
    DocumentCategory,
    DrugInteractionResult,
    DrugNormalization,
    ExtractedLab,
    ExtractedMedication,
    LabAnalysisResult,
    MetricsSummary,
)
from clinidash.utils.exceptions import GeminiError, GeminiNotConfigured, InvalidDocument

logger = logging.getLogger("clinidash")

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (ValueError, TypeError):
        return default


def _api_key() -> str:
    return (os.getenv("GEMINI_API_KEY", "") or "").strip()


def _model(pro: bool = False) -> str:
    if pro:
        return (os.getenv("GEMINI_PRO_MODEL") or "gemini-2.5-pro").strip()
    return (os.getenv("GEMINI_MODEL") or "gemini-2.5-flash").strip()


def _response_text(data: Dict[str, Any]) -> str:
    return (
        (data.get("candidates") or [{}])[0]
        .get("content", {})
        .get("parts", [{}])[0]
        .get("text", "")
        or ""
    ).strip()


async def generate_content(parts: List[Dict[str, Any]], *, json_mode: bool = False, pro: bool = False) -> str:
    """POST one user turn and return the first candidate's text."""
    key = _api_key()
    if not key:
        raise GeminiNotConfigured("No GEMINI_API_KEY set")
    model = _model(pro)
    body: Dict[str, Any] = {"contents": [{"role": "user", "parts": parts}]}
    if json_mode:
        body["generationConfig"] = {"responseMimeType": "application/json"}

    logger.info({"function": "gemini_generate", "model": model, "stage": "start", "json_mode": json_mode})
    try:
        async with httpx.AsyncClient(timeout=_env_int("GEMINI_TIMEOUT_S", 30)) as client:
            r = await client.post(
                f"{GEMINI_BASE_URL}/{model}:generateContent",
                params={"key": key},
                headers={"Content-Type": "application/json"},
                json=body,
            )
            r.raise_for_status()
            data = r.json()
    except httpx.TimeoutException as e:
        logger.warning({"function": "gemini_generate", "model": model, "stage": "timeout"})
        raise GeminiError("Gemini request timed out") from e
    except httpx.HTTPStatusError as e:
        logger.error({"function": "gemini_generate", "model": model, "status": e.response.status_code})
        raise GeminiError(f"Gemini returned HTTP {e.response.status_code}") from e
    except (httpx.HTTPError, ValueError) as e:
        raise GeminiError(f"Gemini request failed: {e}") from e

    text = _response_text(data)
    logger.info({"function": "gemini_generate", "model": model, "stage": "done", "chars": len(text)})
    if not text:
        raise GeminiError("Gemini returned an empty response")
    return text


def _strip_fences(text: str) -> str:
    m = re.match(r"^```(?:json)?\s*(.*?)\s*```$", text.strip(), re.DOTALL)
    return m.group(1) if m else text


async def _generate_json(prompt: str, adapter: TypeAdapter, *, document: Optional[str] = None, pro: bool = False) -> Any:
    parts: List[Dict[str, Any]] = []
    if document is not None:
        parts.append(document_part(document))
    parts.append({"text": prompt})
    text = await generate_content(parts, json_mode=True, pro=pro)
    try:
        return adapter.validate_python(json.loads(_strip_fences(text)))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.error({"function": "gemini_json", "error": str(e)[:300]})
        raise GeminiError("Gemini returned malformed JSON") from e


def document_part(data_url: str) -> Dict[str, Any]:
    """Turn a data URL into an inlineData part; mime defaults to image/jpeg."""
    if "," not in (data_url or ""):
        raise InvalidDocument("Invalid document format.")
    header, payload = data_url.split(",", 1)
    m = re.search(r":(.*?);", header)
    mime_type = m.group(1) if m else "image/jpeg"
    return {"inlineData": {"mimeType": mime_type, "data": payload}}


def _age(dob: date) -> int:
    return date.today().year - dob.year


def _dump(items: Sequence[Any], fields: Sequence[str]) -> str:
    rows = [{f: getattr(i, f, None) for f in fields} for i in items or []]
    return json.dumps(rows, default=str, ensure_ascii=False)


def _labs_json(patient: Any) -> str:
    return _dump(patient.lab_results, ("test_name", "value", "unit", "date", "risk_level"))


# ---------------- Documents ----------------
async def classify_document(document: str) -> str:
    prompt = (
        "Analyze this medical document. Categorize it as either a 'LAB' report (blood tests), "
        "an 'IMAGING' scan report (MRI, X-Ray, etc.), or a 'PRESCRIPTION' (list of medications). "
        'Return JSON: {"category": "LAB"|"IMAGING"|"PRESCRIPTION"}.'
    )
    result = await _generate_json(prompt, TypeAdapter(DocumentCategory), document=document)
    return result.category


async def extract_labs_from_document(document: str) -> List[ExtractedLab]:
    prompt = (
        "Extract all lab test results from this medical document. Identify test name, value (number), "
        "unit, and date (YYYY-MM-DD). Return a JSON array of objects with keys testName, value, unit, date."
    )
    return await _generate_json(prompt, TypeAdapter(List[ExtractedLab]), document=document)


async def extract_medications_from_document(document: str) -> List[ExtractedMedication]:
    prompt = (
        "Extract all medications or treatments from this document. Identify medication name, "
        "dosage/frequency, and start date (YYYY-MM-DD). Return a JSON array of objects with keys "
        "medication, dosage, startDate."
    )
    return await _generate_json(prompt, TypeAdapter(List[ExtractedMedication]), document=document)


async def generate_imaging_report_from_document(document: str) -> str:
    prompt = "Act as an expert radiologist. Analyze this imaging scan or report. Provide detailed findings in markdown format."
    return await generate_content([document_part(document), {"text": prompt}])


async def analyze_imaging_image(document: str) -> str:
    prompt = (
        "Analyze this medical imaging photo. Describe visible anatomical structures and any abnormalities. "
        'Provide a "Patient-Friendly Summary" at the end.'
    )
    return await generate_content([document_part(document), {"text": prompt}])


# ---------------- Patient narratives ----------------
async def generate_patient_summary(patient: Any) -> AISummary:
    prompt = (
        f"Act as an expert clinical lead. Generate a comprehensive clinical summary for {patient.name}.\n"
        f"Age: {_age(patient.dob)}.\n"
        f"Chief Complaints: {_dump(patient.complaints, ('text', 'date'))}.\n"
        f"Symptoms: {_dump(patient.symptoms, ('name', 'severity', 'date'))}.\n"
        f"Labs: {_labs_json(patient)}.\n"
        f"Imaging: {_dump(patient.imaging_studies, ('type', 'date', 'report_summary'))}.\n"
        f"Medications: {_dump(patient.treatments, ('medication', 'dosage', 'start_date', 'end_date'))}.\n"
        "Provide a professional narrative summary, identified risks, and specific clinical recommendations. "
        "Use a clinical tone. Return strictly JSON with keys: summary, risks, recommendations."
    )
    return await _generate_json(prompt, TypeAdapter(AISummary))


async def analyze_drug_interactions(medications: Sequence[str]) -> DrugInteractionResult:
    prompt = (
        f"Analyze potential drug-drug interactions for the following medications: {', '.join(medications)}.\n"
        "Rules:\n"
        "- Identify potential interactions between pairs or groups of drugs.\n"
        "- Classify severity: Mild, Moderate, Severe, or None.\n"
        "- Provide clear action step.\n"
        "- Always include a medical disclaimer.\n"
        "Return JSON with keys interactions (array of {involvedDrugs, severity, description, actionRequired}) "
        "and disclaimer."
    )
    return await _generate_json(prompt, TypeAdapter(DrugInteractionResult))


async def generate_metrics_summary(patient: Any) -> MetricsSummary:
    prompt = (
        f"Analyze the laboratory trends for {patient.name}. Labs: {_labs_json(patient)}.\n"
        "Evaluate health stability. Return JSON with stabilityScore (0-100), trendAnalysis, "
        "topConcerns (array), and improvementAdvice."
    )
    return await _generate_json(prompt, TypeAdapter(MetricsSummary))


async def normalize_drug_name(name: str) -> DrugNormalization:
    prompt = (
        f'Verify the following medication name: "{name}". Map brand names to generic equivalents. '
        'Return JSON with keys generic, brand, drug_class, status ("validated" or "unvalidated").'
    )
    return await _generate_json(prompt, TypeAdapter(DrugNormalization))


async def generate_differential_diagnoses(patient: Any, symptoms: str, findings: str, history: str) -> List[DifferentialDiagnosis]:
    prompt = (
        f"Generate differential diagnoses for {patient.name} based on: symptoms: {symptoms}, "
        f"findings: {findings}, history: {history}. Return a JSON array of objects with keys "
        "diagnosis, reasoning, confidence (High|Medium|Low)."
    )
    return await _generate_json(prompt, TypeAdapter(List[DifferentialDiagnosis]), pro=True)


async def analyze_full_lab_panel(patient: Any) -> LabAnalysisResult:
    prompt = (
        f"Analyze the full lab panel for {patient.name}. Labs: {_labs_json(patient)}.\n"
        "Provide a functional medicine and longevity analysis. Return JSON with keys analysisBySystem "
        "(object of system -> array of {testName, unit, value, clinicalStatus, functionalStatus, "
        "interpretation, concern}), prioritizedInsights, recommendations, followUpTests."
    )
    return await _generate_json(prompt, TypeAdapter(LabAnalysisResult), pro=True)


__all__ = [
    "analyze_drug_interactions",
    "analyze_full_lab_panel",
    "analyze_imaging_image",
    "classify_document",
    "document_part",
    "extract_labs_from_document",
    "extract_medications_from_document",
    "generate_content",
    "generate_differential_diagnoses",
    "generate_imaging_report_from_document",
    "generate_metrics_summary",
    "generate_patient_summary",
    "normalize_drug_name",
]
