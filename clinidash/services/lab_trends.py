"""Derived views over a patient's lab history for trend charts and the hub list."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Sequence

from clinidash.services.lab_reference import RiskLevel, reference_lines

CONCERN_KEYWORDS = (
    "mass", "fracture", "malignancy", "hemorrhage", "suspicious",
    "urgent", "abnormal", "radiculopathy", "compression", "weakness",
)


def _risk_value(result: Any) -> str:
    level = getattr(result, "risk_level", None)
    return level.value if isinstance(level, RiskLevel) else str(level or "")


def available_tests(results: Iterable[Any]) -> List[str]:
    seen: Dict[str, None] = {}
    for r in results:
        seen.setdefault(r.test_name, None)
    return list(seen)


def date_label(d) -> str:
    # "Mar 4" style, without a zero-padded day
    return f"{d.strftime('%b')} {d.day}"


def trend_series(results: Iterable[Any], test_name: str) -> Dict[str, Any]:
    """Chronological points for one test plus its reference thresholds."""
    matching = sorted((r for r in results if r.test_name == test_name), key=lambda r: r.date)
    points = [
        {
            "date": r.date,
            "date_label": date_label(r.date),
            "value": r.value,
            "unit": r.unit,
            "risk_level": _risk_value(r),
        }
        for r in matching
    ]
    return {"test_name": test_name, "points": points, "reference": reference_lines(test_name)}


def latest_per_test(results: Iterable[Any], limit: int = 6) -> List[Any]:
    latest: Dict[str, Any] = {}
    for r in results:
        existing = latest.get(r.test_name)
        if existing is None or r.date > existing.date:
            latest[r.test_name] = r
    ordered = sorted(latest.values(), key=lambda r: r.date, reverse=True)
    return ordered[:limit]


def recent_results(results: Sequence[Any], limit: int = 4) -> List[Any]:
    return sorted(results, key=lambda r: r.date, reverse=True)[:limit]


def high_risk_results(results: Iterable[Any]) -> List[Any]:
    return [r for r in results if _risk_value(r) == RiskLevel.High.value]


def concerning_imaging(studies: Iterable[Any]) -> List[Any]:
    out = []
    for s in studies:
        summary = (getattr(s, "report_summary", None) or "").lower()
        if any(k in summary for k in CONCERN_KEYWORDS):
            out.append(s)
    return out


__all__ = [
    "CONCERN_KEYWORDS",
    "available_tests",
    "concerning_imaging",
    "date_label",
    "high_risk_results",
    "latest_per_test",
    "recent_results",
    "trend_series",
]
