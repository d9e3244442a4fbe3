def test_review_then_accept(client):
    r = client.post(
        "/api/intake/labs/review",
        json={
            "items": [
                {"test_name": "Glucose", "value": 5.5, "unit": "mmol/L", "date": "2024-01-02"},
                {"test_name": "Creatinine", "value": 1.0, "unit": "mmol/L", "date": "2024-01-02"},
            ]
        },
    )
    assert r.status_code == 200
    reviewed = r.json()
    assert reviewed[0]["value"] == 99.1
    assert reviewed[0]["risk_level"] == "High"
    assert reviewed[1]["unit_mismatch"] is True

    pid = client.post("/api/patients", json={"name": "Jane Doe", "dob": "1980-05-17", "gender": "Female"}).json()["id"]
    r = client.post(f"/api/intake/patients/{pid}/labs/accept", json={"items": [reviewed[0]]})
    assert r.status_code == 201
    assert r.json()[0]["risk_level"] == "High"
    assert len(client.get(f"/api/patients/{pid}/labs").json()) == 1


def test_accept_requires_date(client):
    pid = client.post("/api/patients", json={"name": "Jane Doe", "dob": "1980-05-17", "gender": "Female"}).json()["id"]
    r = client.post(f"/api/intake/patients/{pid}/labs/accept", json={"items": [{"test_name": "Glucose", "value": 90}]})
    assert r.status_code == 422


def test_accept_unknown_patient(client):
    r = client.post(
        "/api/intake/patients/missing/labs/accept",
        json={"items": [{"test_name": "Glucose", "value": 90, "date": "2024-01-02"}]},
    )
    assert r.status_code == 404
