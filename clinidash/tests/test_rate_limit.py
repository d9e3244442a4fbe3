import json

from clinidash.app import app
from clinidash.utils.app import AI_RATE_LIMIT


def test_ai_endpoints_are_rate_limited(client, mock_gemini):
    app.state.limiter.reset()
    allowed = int(AI_RATE_LIMIT.split("/")[0])
    for _ in range(allowed):
        mock_gemini.replies.append(json.dumps({"generic": "atorvastatin", "brand": "Lipitor", "drug_class": "Statin", "status": "validated"}))
        r = client.post("/api/ai/drugs/normalize", json={"name": "Lipitor"})
        assert r.status_code == 200
    r = client.post("/api/ai/drugs/normalize", json={"name": "Lipitor"})
    assert r.status_code == 429
    j = r.json()
    assert j["code"] == "TOO_MANY_REQUESTS"
    assert "trace_id" in j
    assert "Retry-After" in r.headers


def test_reference_endpoints_are_not_limited(client):
    for _ in range(30):
        assert client.post("/api/reference/classify", json={"test_name": "Glucose", "value": 90}).status_code == 200
