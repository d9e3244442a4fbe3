import json

DOC = "data:image/png;base64,AAAA"


def _patient(client):
    return client.post("/api/patients", json={"name": "Jane Doe", "dob": "1980-05-17", "gender": "Female"}).json()["id"]


def test_classify_document(client, mock_gemini):
    mock_gemini.replies.append(json.dumps({"category": "PRESCRIPTION"}))
    r = client.post("/api/ai/documents/classify", json={"document": DOC})
    assert r.status_code == 200
    assert r.json() == {"category": "PRESCRIPTION"}


def test_extracted_labs_come_back_reviewed(client, mock_gemini):
    mock_gemini.replies.append(
        json.dumps([{"testName": "Glucose", "value": 5.5, "unit": "mmol/L", "date": "2024-01-02"}])
    )
    r = client.post("/api/ai/documents/labs", json={"document": DOC})
    row = r.json()[0]
    assert row["value"] == 99.1
    assert row["is_converted"] is True
    assert row["risk_level"] == "High"


def test_imaging_report_is_plain_text(client, mock_gemini):
    mock_gemini.replies.append("## Findings\nNo acute abnormality.")
    r = client.post("/api/ai/documents/imaging-report", json={"document": DOC})
    assert r.json()["text"].startswith("## Findings")


def test_interactions_need_two_medications(client, mock_gemini):
    pid = _patient(client)
    client.post(f"/api/patients/{pid}/treatments", json={"medication": "Metformin", "start_date": "2024-01-01"})
    r = client.post(f"/api/ai/patients/{pid}/interactions")
    assert r.status_code == 400
    assert mock_gemini.calls == []


def test_interactions_report_counts(client, mock_gemini):
    pid = _patient(client)
    for med in ("Warfarin", "Ibuprofen"):
        client.post(f"/api/patients/{pid}/treatments", json={"medication": med, "start_date": "2024-01-01"})
    mock_gemini.replies.append(
        json.dumps(
            {
                "interactions": [
                    {
                        "involvedDrugs": ["Warfarin", "Ibuprofen"],
                        "severity": "Severe",
                        "description": "Bleeding risk",
                        "actionRequired": "Avoid combination",
                    }
                ],
                "disclaimer": "Not medical advice.",
            }
        )
    )
    r = client.post(f"/api/ai/patients/{pid}/interactions")
    assert r.status_code == 200
    body = r.json()
    assert body["interactions"][0]["involvedDrugs"] == ["Warfarin", "Ibuprofen"]
    assert body["counts"] == {"severe": 1, "moderate": 0, "mild": 0}


def test_metrics_require_labs(client, mock_gemini):
    pid = _patient(client)
    r = client.post(f"/api/ai/patients/{pid}/metrics")
    assert r.status_code == 400
    assert r.json()["message"] == "No lab results to analyze."


def test_metrics_summary(client, mock_gemini):
    pid = _patient(client)
    client.post(f"/api/patients/{pid}/labs", json={"test_name": "Glucose", "value": 140, "date": "2024-01-02"})
    mock_gemini.replies.append(
        json.dumps({"stabilityScore": 72, "trendAnalysis": "Rising glucose", "topConcerns": ["Glucose"], "improvementAdvice": "Diet"})
    )
    r = client.post(f"/api/ai/patients/{pid}/metrics")
    assert r.json()["stabilityScore"] == 72
    prompt = mock_gemini.calls[0]["parts"][-1]["text"]
    assert "Glucose" in prompt and "High" in prompt


def test_patient_summary(client, mock_gemini):
    pid = _patient(client)
    mock_gemini.replies.append(json.dumps({"summary": "Stable", "risks": [], "recommendations": ["Recheck A1c"]}))
    r = client.post(f"/api/ai/patients/{pid}/summary")
    assert r.json()["recommendations"] == ["Recheck A1c"]


def test_ai_unavailable_without_key(client, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "")
    r = client.post("/api/ai/drugs/normalize", json={"name": "Lipitor"})
    assert r.status_code == 400
    assert r.json()["message"] == "No GEMINI_API_KEY set"


def test_malformed_model_output_is_bad_gateway(client, mock_gemini):
    mock_gemini.replies.append("{oops")
    r = client.post("/api/ai/drugs/normalize", json={"name": "Lipitor"})
    assert r.status_code == 502
    assert r.json()["code"] == "BAD_GATEWAY"


def test_invalid_document_is_bad_request(client, mock_gemini):
    r = client.post("/api/ai/documents/classify", json={"document": "not-a-data-url"})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid document format."
