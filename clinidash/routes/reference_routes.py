# clinidash/routes/reference_routes.py
from typing import Dict, List

from fastapi import APIRouter, HTTPException

from clinidash.schemas.reference import (
    ClassifyIn,
    ClassifyOut,
    ConvertIn,
    ConvertOut,
    LabTestReferenceOut,
    NormalRangeOut,
    PickersOut,
)
from clinidash.services.lab_reference import (
    COMMON_COMPLAINTS,
    COMMON_DIAGNOSES,
    POPULAR_DRUGS,
    UNIT_CONVERSIONS,
    LabTestReference,
    auto_convert_lab_value,
    calculate_risk_level,
    find_lab_test,
    lab_tests_by_category,
)

router = APIRouter(prefix="/api/reference", tags=["reference"])


def _to_out(test: LabTestReference) -> LabTestReferenceOut:
    return LabTestReferenceOut(
        name=test.name,
        category=test.category.value,
        unit=test.unit,
        standard_unit=test.standard_unit,
        normal_range=NormalRangeOut(min=test.normal_range.min, max=test.normal_range.max),
        low_is_risky=test.low_is_risky,
        conversions=dict(UNIT_CONVERSIONS.get(test.name, {})),
    )


@router.get("/labs", response_model=Dict[str, List[LabTestReferenceOut]])
def list_lab_tests():
    return {category: [_to_out(t) for t in tests] for category, tests in lab_tests_by_category().items()}


@router.get("/labs/{name}", response_model=LabTestReferenceOut)
def get_lab_test(name: str):
    test = find_lab_test(name)
    if test is None:
        raise HTTPException(status_code=404, detail="Lab test not in catalog")
    return _to_out(test)


@router.post("/classify", response_model=ClassifyOut)
def classify(payload: ClassifyIn):
    return ClassifyOut(test_name=payload.test_name, risk_level=calculate_risk_level(payload.test_name, payload.value))


@router.post("/convert", response_model=ConvertOut)
def convert(payload: ConvertIn):
    converted, is_converted = auto_convert_lab_value(payload.test_name, payload.value, payload.from_unit)
    test = find_lab_test(payload.test_name)
    unit = test.standard_unit if (test is not None and is_converted) else payload.from_unit
    return ConvertOut(test_name=payload.test_name, converted_value=converted, is_converted=is_converted, unit=unit)


@router.get("/pickers", response_model=PickersOut)
def pickers():
    return PickersOut(
        lab_tests={c: [t.name for t in tests] for c, tests in lab_tests_by_category().items()},
        drugs=list(POPULAR_DRUGS),
        diagnoses=list(COMMON_DIAGNOSES),
        complaints=list(COMMON_COMPLAINTS),
    )
