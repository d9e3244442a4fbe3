"""Pivot a patient's lab history into a test-by-date CSV."""
from __future__ import annotations

import csv
import io
import re
from typing import Any, Sequence, Tuple

from clinidash.utils.exceptions import NoLabResults


def _format_value(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def export_filename(patient_name: str) -> str:
    stem = re.sub(r"\s+", "_", patient_name or "")
    return f"{stem}_Lab_Data.csv"


def export_patient_labs_csv(patient_name: str, results: Sequence[Any]) -> Tuple[str, str]:
    """Return (filename, csv_text); one row per test, one column per date."""
    if not results:
        raise NoLabResults("No lab results to export.")

    dates = sorted({r.date for r in results})
    test_names = sorted({r.test_name for r in results})

    buf = io.StringIO()
    header = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    header.writerow(["Test Name", "Unit", *[d.isoformat() for d in dates]])

    rows = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for name in test_names:
        test_results = [r for r in results if r.test_name == name]
        by_date = {}
        for r in test_results:
            by_date.setdefault(r.date, r)
        row = [name, test_results[0].unit or ""]
        for d in dates:
            hit = by_date.get(d)
            row.append(_format_value(hit.value) if hit is not None else "")
        rows.writerow(row)

    return export_filename(patient_name), buf.getvalue().rstrip("\n")


__all__ = ["export_filename", "export_patient_labs_csv"]
