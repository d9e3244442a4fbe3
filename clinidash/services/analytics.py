"""Cross-patient analytics for the provider dashboard."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional


def search_patients_by_diagnosis(patients: Iterable[Any], query: str) -> Optional[List[str]]:
    """Names of patients with a diagnosis containing `query`; None for a blank query."""
    q = (query or "").strip().lower()
    if not q:
        return None
    return [p.name for p in patients if any(q in (d.condition or "").lower() for d in p.diagnoses)]


def diagnosis_distribution(patients: Iterable[Any]) -> List[Dict[str, Any]]:
    counts: Dict[str, int] = {}
    for p in patients:
        for d in p.diagnoses:
            counts[d.condition] = counts.get(d.condition, 0) + 1
    return [{"name": name, "value": value} for name, value in counts.items()]


def interaction_counts(result: Dict[str, Any]) -> Dict[str, int]:
    interactions = result.get("interactions") or []
    counts = {"severe": 0, "moderate": 0, "mild": 0}
    for i in interactions:
        key = str(i.get("severity") or "").lower()
        if key in counts:
            counts[key] += 1
    return counts


__all__ = ["diagnosis_distribution", "interaction_counts", "search_patients_by_diagnosis"]
