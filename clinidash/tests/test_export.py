from datetime import date
from types import SimpleNamespace

import pytest

from clinidash.services.export import export_filename, export_patient_labs_csv
from clinidash.utils.exceptions import NoLabResults


def _r(test_name, value, d, unit):
    return SimpleNamespace(test_name=test_name, value=value, date=d, unit=unit)


def test_filename_replaces_whitespace():
    assert export_filename("Jane  Q Doe") == "Jane_Q_Doe_Lab_Data.csv"


def test_empty_history_raises():
    with pytest.raises(NoLabResults):
        export_patient_labs_csv("Jane Doe", [])


def test_pivot_one_row_per_test_one_column_per_date():
    results = [
        _r("Glucose", 95.0, date(2024, 1, 2), "mg/dL"),
        _r("Glucose", 110.5, date(2024, 3, 4), "mg/dL"),
        _r("Hemoglobin", 13.0, date(2024, 3, 4), "g/dL"),
    ]
    filename, content = export_patient_labs_csv("Jane Doe", results)
    assert filename == "Jane_Doe_Lab_Data.csv"
    assert content.splitlines() == [
        "Test Name,Unit,2024-01-02,2024-03-04",
        '"Glucose","mg/dL","95","110.5"',
        '"Hemoglobin","g/dL","","13"',
    ]
    assert not content.endswith("\n")
