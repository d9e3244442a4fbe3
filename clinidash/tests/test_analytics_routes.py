def _patient_with(client, name, condition):
    pid = client.post("/api/patients", json={"name": name, "dob": "1970-01-01", "gender": "Male"}).json()["id"]
    client.post(f"/api/patients/{pid}/diagnoses", json={"condition": condition, "date": "2024-01-01"})


def test_search_and_distribution(client):
    _patient_with(client, "Amy", "Hypertension")
    _patient_with(client, "Bo", "Asthma")

    r = client.get("/api/analytics/diagnoses/search", params={"q": "hyper"})
    assert r.json() == {"query": "hyper", "patients": ["Amy"]}

    r = client.get("/api/analytics/diagnoses/search")
    assert r.json()["patients"] is None

    dist = client.get("/api/analytics/diagnoses/distribution").json()
    assert sorted(d["name"] for d in dist) == ["Asthma", "Hypertension"]
