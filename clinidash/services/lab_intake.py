"""Review step for lab values extracted from scanned documents.

Extracted rows are normalized and classified before a provider accepts them
into the patient record.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List

from sqlalchemy.orm import Session

from clinidash.models.patient import LabResult, Patient
from clinidash.services import records
from clinidash.services.lab_reference import (
    auto_convert_lab_value,
    calculate_risk_level,
    find_lab_test,
)

logger = logging.getLogger("clinidash")


def review_extracted_lab(item: Dict[str, Any]) -> Dict[str, Any]:
    test_name = (item.get("test_name") or "").strip()
    unit = (item.get("unit") or "").strip()
    value = item.get("value")
    ref = find_lab_test(test_name)

    converted, is_converted = auto_convert_lab_value(test_name, value, unit)
    final_unit = ref.standard_unit if (ref is not None and is_converted) else unit
    return {
        "test_name": test_name,
        "value": converted,
        "unit": final_unit,
        "date": item.get("date"),
        "risk_level": calculate_risk_level(test_name, converted).value,
        "is_converted": is_converted,
        "original_value": value,
        "original_unit": unit,
        "recognized": ref is not None,
        # Known test reported in a unit we have no factor for
        "unit_mismatch": bool(ref is not None and unit and unit != ref.standard_unit and not is_converted),
    }


def review_extracted_labs(items: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    reviewed = [review_extracted_lab(i) for i in items]
    mismatches = sum(1 for r in reviewed if r["unit_mismatch"])
    if mismatches:
        logger.warning({"function": "review_extracted_labs", "unit_mismatch": mismatches, "total": len(reviewed)})
    return reviewed


def accept_reviewed_labs(db: Session, patient: Patient, reviewed: Iterable[Dict[str, Any]]) -> List[LabResult]:
    """Persist reviewed rows; the record store re-derives the risk level."""
    saved = []
    for row in reviewed:
        saved.append(
            records.add_lab_result(
                db,
                patient,
                {
                    "test_name": row["test_name"],
                    "value": row["value"],
                    "unit": row.get("unit") or "",
                    "date": row["date"],
                },
            )
        )
    logger.info({"function": "accept_reviewed_labs", "patient_id": patient.id, "count": len(saved)})
    return saved


__all__ = ["accept_reviewed_labs", "review_extracted_lab", "review_extracted_labs"]
