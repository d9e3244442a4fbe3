"""Standard adult reference ranges, unit conversion and risk classification for labs.

Ranges follow the Medscape / eMedicine adult reference tables
(https://emedicine.medscape.com/article/2172316-overview).
"""
from __future__ import annotations

import enum
import math
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, NamedTuple, Optional


class RiskLevel(str, enum.Enum):
    Low = "Low"
    Normal = "Normal"
    High = "High"


class LabCategory(str, enum.Enum):
    CBC = "CBC"
    METABOLIC = "Metabolic Panel"
    LIPID = "Lipid Panel"
    LIVER = "Liver Function"
    NUTRITIONAL = "Nutritional"
    HORMONAL = "Hormonal"
    CARDIAC = "Cardiac & Vascular"
    KIDNEY = "Kidney Function"
    INFLAMMATION = "Inflammation & Immune"
    BONE_MUSCLE = "Bone & Muscle"
    ELECTROLYTES = "Electrolytes"
    OTHER = "Other"


@dataclass(frozen=True)
class NormalRange:
    min: float
    max: float


@dataclass(frozen=True)
class LabTestReference:
    name: str
    category: LabCategory
    unit: str
    standard_unit: str
    normal_range: NormalRange
    # A value below the range is the dangerous direction (e.g. anemia markers).
    low_is_risky: bool = False


class ConversionResult(NamedTuple):
    converted_value: float
    is_converted: bool


def _ref(name: str, category: LabCategory, unit: str, lo: float, hi: float, low_is_risky: bool = False) -> LabTestReference:
    return LabTestReference(
        name=name,
        category=category,
        unit=unit,
        standard_unit=unit,
        normal_range=NormalRange(float(lo), float(hi)),
        low_is_risky=low_is_risky,
    )


_C = LabCategory

COMMON_LAB_TESTS = (
    # Complete Blood Count
    _ref("WBC", _C.CBC, "x10^3/µL", 4.5, 11.0),
    _ref("RBC", _C.CBC, "x10^6/µL", 4.1, 5.9, low_is_risky=True),
    _ref("Hemoglobin", _C.CBC, "g/dL", 12.3, 17.5, low_is_risky=True),
    _ref("Hematocrit", _C.CBC, "%", 35.9, 50.4, low_is_risky=True),
    _ref("MCV", _C.CBC, "fL", 80, 96),
    _ref("MCH", _C.CBC, "pg", 27, 33),
    _ref("MCHC", _C.CBC, "g/dL", 33, 36),
    _ref("Platelet Count", _C.CBC, "x10^3/µL", 150, 450),
    # Electrolytes
    _ref("Sodium", _C.ELECTROLYTES, "mEq/L", 136, 145),
    _ref("Potassium", _C.ELECTROLYTES, "mEq/L", 3.5, 5.1),
    _ref("Chloride", _C.ELECTROLYTES, "mEq/L", 98, 107),
    _ref("CO2 (Bicarbonate)", _C.ELECTROLYTES, "mEq/L", 22, 28),
    _ref("Calcium", _C.METABOLIC, "mg/dL", 8.5, 10.5, low_is_risky=True),
    _ref("Magnesium", _C.ELECTROLYTES, "mg/dL", 1.8, 2.6),
    # Kidney function
    _ref("BUN", _C.KIDNEY, "mg/dL", 7, 20),
    _ref("Creatinine", _C.KIDNEY, "mg/dL", 0.6, 1.2),
    _ref("eGFR", _C.KIDNEY, "mL/min/1.73m²", 60, 120, low_is_risky=True),
    _ref("Uric Acid", _C.KIDNEY, "mg/dL", 2.4, 7.2),
    # Liver function panel
    _ref("ALT (SGPT)", _C.LIVER, "U/L", 7, 56),
    _ref("AST (SGOT)", _C.LIVER, "U/L", 10, 40),
    _ref("ALP", _C.LIVER, "U/L", 44, 147),
    _ref("Albumin", _C.LIVER, "g/dL", 3.5, 5.0, low_is_risky=True),
    _ref("Bilirubin, Total", _C.LIVER, "mg/dL", 0.3, 1.9),
    _ref("Total Protein", _C.LIVER, "g/dL", 6.0, 8.3),
    # Lipid panel
    _ref("Total Cholesterol", _C.LIPID, "mg/dL", 125, 200),
    _ref("HDL-C", _C.LIPID, "mg/dL", 40, 100, low_is_risky=True),
    _ref("LDL-C", _C.LIPID, "mg/dL", 0, 100),
    _ref("Triglycerides", _C.LIPID, "mg/dL", 0, 150),
    # Metabolic
    _ref("Glucose", _C.METABOLIC, "mg/dL", 70, 99),
    _ref("HbA1c", _C.METABOLIC, "%", 4.0, 5.6),
    # Hormonal
    _ref("TSH", _C.HORMONAL, "µIU/mL", 0.45, 4.5),
    # Inflammation
    _ref("CRP", _C.INFLAMMATION, "mg/L", 0, 10),
)

_names = [t.name for t in COMMON_LAB_TESTS]
if len(_names) != len(set(_names)):
    raise RuntimeError("duplicate lab test names in COMMON_LAB_TESTS")
del _names

LOW_IS_RISKY_TESTS = frozenset(t.name for t in COMMON_LAB_TESTS if t.low_is_risky)

# Multiplicative factors from an alternate unit to the test's standard unit.
UNIT_CONVERSIONS: Mapping[str, Mapping[str, float]] = MappingProxyType({
    "Glucose": MappingProxyType({"mmol/L": 18.0182, "mg/dL": 1}),
    "Total Cholesterol": MappingProxyType({"mmol/L": 38.67, "mg/dL": 1}),
    "HDL-C": MappingProxyType({"mmol/L": 38.67, "mg/dL": 1}),
    "LDL-C": MappingProxyType({"mmol/L": 38.67, "mg/dL": 1}),
    "Triglycerides": MappingProxyType({"mmol/L": 88.57, "mg/dL": 1}),
    "Creatinine": MappingProxyType({"µmol/L": 0.0113, "mg/dL": 1}),
    "Uric Acid": MappingProxyType({"µmol/L": 0.0168, "mg/dL": 1}),
})

POPULAR_DRUGS = (
    "Lipitor (Atorvastatin)", "Norvasc (Amlodipine)", "Zestril (Lisinopril)", "Cozaar (Losartan)",
    "Glucophage (Metformin)", "Synthroid (Levothyroxine)", "Ventolin (Albuterol)", "Advair",
    "Tylenol (Acetaminophen)", "Advil (Ibuprofen)", "Prilosec (Omeprazole)", "Nexium",
    "Zoloft (Sertraline)", "Lexapro (Escitalopram)", "Xanax (Alprazolam)", "Augmentin",
    "Controloc (Pantoprazole)", "Antinal (Nifuroxazide)", "Panadol (Paracetamol)", "Brufen (Ibuprofen)",
)

COMMON_DIAGNOSES = (
    "Hypertension", "Type 2 Diabetes", "Hyperlipidemia", "Asthma", "COPD", "GERD",
    "Anxiety Disorder", "Hypothyroidism", "Iron Deficiency Anemia", "Osteoarthritis",
    "Lumbar Radiculopathy", "Rheumatoid Arthritis", "Chronic Kidney Disease",
)

COMMON_COMPLAINTS = (
    "Fatigue", "Chest Pain", "Shortness of Breath", "Back Pain", "Headache", "Dizziness",
    "Nausea", "Abdominal Pain", "Joint Pain", "Muscle Weakness", "Cough", "Fever",
    "Weight Loss", "Blurry Vision", "Palpitations", "Tingling / Numbness",
)

_LEADING_NUMBER = re.compile(r"^[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _parse_number(value: Any) -> Optional[float]:
    """Parse like a lenient form field: leading numeric prefix, else None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        try:
            num = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        m = _LEADING_NUMBER.match(value.strip())
        if not m:
            return None
        num = float(m.group(0))
    else:
        return None
    if math.isnan(num):
        return None
    return num


def find_lab_test(name: str) -> Optional[LabTestReference]:
    for test in COMMON_LAB_TESTS:
        if test.name == name:
            return test
    return None


def lab_tests_by_category() -> Dict[str, List[LabTestReference]]:
    grouped: Dict[str, List[LabTestReference]] = {}
    for category in LabCategory:
        tests = [t for t in COMMON_LAB_TESTS if t.category is category]
        if tests:
            grouped[category.value] = tests
    return grouped


def reference_lines(name: str) -> Optional[Dict[str, Any]]:
    """Threshold lines for a trend chart, or None for uncatalogued tests."""
    test = find_lab_test(name)
    if test is None:
        return None
    return {
        "min": test.normal_range.min,
        "max": test.normal_range.max,
        "standard_unit": test.standard_unit,
    }


def auto_convert_lab_value(test_name: str, value: Any, from_unit: str) -> ConversionResult:
    test = find_lab_test(test_name)
    if test is None or from_unit == test.standard_unit:
        return ConversionResult(value, False)

    factor = UNIT_CONVERSIONS.get(test_name, {}).get(from_unit)
    num = _parse_number(value)
    if factor and num is not None:
        product = num * factor
        if not math.isfinite(product):
            return ConversionResult(product, True)
        converted = Decimal(repr(product)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        return ConversionResult(float(converted), True)

    return ConversionResult(value, False)


def calculate_risk_level(test_name: str, value: Any) -> RiskLevel:
    test = find_lab_test(test_name)
    if test is None:
        return RiskLevel.Normal

    num = _parse_number(value)
    if num is None:
        return RiskLevel.Normal

    if num < test.normal_range.min:
        return RiskLevel.High if test.low_is_risky else RiskLevel.Low
    if num > test.normal_range.max:
        return RiskLevel.High
    return RiskLevel.Normal


__all__ = [
    "COMMON_COMPLAINTS",
    "COMMON_DIAGNOSES",
    "COMMON_LAB_TESTS",
    "ConversionResult",
    "LOW_IS_RISKY_TESTS",
    "LabCategory",
    "LabTestReference",
    "NormalRange",
    "POPULAR_DRUGS",
    "RiskLevel",
    "UNIT_CONVERSIONS",
    "auto_convert_lab_value",
    "calculate_risk_level",
    "find_lab_test",
    "lab_tests_by_category",
    "reference_lines",
]
