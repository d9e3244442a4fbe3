from types import SimpleNamespace

from clinidash.services import analytics


def _p(name, *conditions):
    return SimpleNamespace(name=name, diagnoses=[SimpleNamespace(condition=c) for c in conditions])


PATIENTS = [
    _p("Amy", "Type 2 Diabetes", "Hypertension"),
    _p("Bo", "Hypertension"),
    _p("Cy"),
]


def test_search_blank_query_returns_none():
    assert analytics.search_patients_by_diagnosis(PATIENTS, "  ") is None


def test_search_is_case_insensitive_substring():
    assert analytics.search_patients_by_diagnosis(PATIENTS, "TENSION") == ["Amy", "Bo"]
    assert analytics.search_patients_by_diagnosis(PATIENTS, "asthma") == []


def test_distribution_counts_conditions():
    dist = analytics.diagnosis_distribution(PATIENTS)
    assert {d["name"]: d["value"] for d in dist} == {"Type 2 Diabetes": 1, "Hypertension": 2}


def test_interaction_counts_by_severity():
    result = {
        "interactions": [
            {"severity": "Severe"},
            {"severity": "Moderate"},
            {"severity": "Moderate"},
            {"severity": "None"},
        ]
    }
    assert analytics.interaction_counts(result) == {"severe": 1, "moderate": 2, "mild": 0}
    assert analytics.interaction_counts({}) == {"severe": 0, "moderate": 0, "mild": 0}
