"""
API tests for the prioritization microservice, using FastAPI's TestClient.
"""
import json
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'repurposing-service-python'))

import pytest
from fastapi.testclient import TestClient

from main import create_app

DATA_DIR = os.path.join(os.path.dirname(__file__), '..', 'data')
SAMPLE_PATH = os.path.join(DATA_DIR, 'sample_pairs.json')
COLUMNS_PATH = os.path.join(DATA_DIR, 'score_columns.csv')


@pytest.fixture(scope="module")
def client():
    return TestClient(create_app(dataset_path=SAMPLE_PATH, score_columns_path=COLUMNS_PATH))


@pytest.fixture
def sample_document():
    with open(SAMPLE_PATH, encoding="utf-8") as fh:
        return json.load(fh)


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["dataset_valid"] is True

def test_default_weights(client):
    body = client.get("/default-weights").json()
    assert len(body) == 7
    assert set(body.values()) == {1.0}
    assert "clinicalRisk" in body

def test_score_columns(client):
    body = client.get("/score-columns").json()
    assert len(body["score_columns"]) == 7
    assert body["inverted"] == ["clinicalRisk"]

# ─── /validate ────────────────────────────────────────────────────────────────

def test_validate_valid_document(client, sample_document):
    body = client.post("/validate", json=sample_document).json()
    assert body["valid"] is True
    assert body["errors"] == []
    assert body["report"] == "No errors found."

def test_validate_reports_errors(client, sample_document):
    sample_document["drugDiseasePairs"][0]["drugNdcCode"] = "INVALID-NDC"
    sample_document["drugDiseasePairs"][1]["extraField"] = "x"
    resp = client.post("/validate", json=sample_document)
    assert resp.status_code == 200
    body = resp.json()
    assert body["valid"] is False
    assert [e["kind"] for e in body["errors"]] == ["pattern-mismatch", "unexpected-property"]
    assert body["report"].startswith("Data validation failed:")

def test_validate_non_object(client):
    body = client.post("/validate", json=[1, 2]).json()
    assert body["valid"] is False
    assert body["errors"][0]["message"] == "Expected type object, got array"

def test_validate_malformed_json(client):
    resp = client.post("/validate", content=b"{oops", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_json"

# ─── /pairs ───────────────────────────────────────────────────────────────────

def test_pairs_ranked_with_default_weights(client):
    body = client.get("/pairs").json()
    assert body["count"] == 5
    assert body["total"] == 5
    assert [p["id"] for p in body["pairs"]] == ["2", "1", "4", "3", "5"]
    assert body["pairs"][0]["priorityBand"] == "medium"
    assert body["pairs"][-1]["compositePrioritizationScore"] == 0

def test_pairs_filtered(client):
    body = client.get("/pairs", params={"drug": "sil", "disease": "PULMONARY"}).json()
    assert body["count"] == 1
    assert body["pairs"][0]["drugName"] == "Sildenafil"

def test_pairs_with_custom_weights(client):
    body = client.get("/pairs", params={"clinicalRisk": 0, "economicSuitability": 0.5}).json()
    assert body["weights"]["clinicalRisk"] == 0
    assert body["weights"]["economicSuitability"] == 0.5
    thalidomide = [p for p in body["pairs"] if p["id"] == "3"][0]
    # (6.0 * 0.5 + 5.5) / 1.5; clinical risk carries no weight
    assert thalidomide["compositePrioritizationScore"] == pytest.approx(8.5 / 1.5)

def test_pairs_rejects_weight_out_of_range(client):
    resp = client.get("/pairs", params={"marketSize": 1.5})
    assert resp.status_code == 422
    body = resp.json()
    assert body["error"] == "invalid_weights"
    assert body["errors"][0]["kind"] == "above-maximum"
    assert body["errors"][0]["path"] == "/marketSize"

def test_pairs_unavailable_when_dataset_invalid(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"drugDiseasePairs": [{"id": "1"}]}), encoding="utf-8")
    broken = TestClient(create_app(dataset_path=str(path), score_columns_path=COLUMNS_PATH))

    assert broken.get("/health").json()["dataset_valid"] is False
    resp = broken.get("/pairs")
    assert resp.status_code == 503
    body = resp.json()
    assert body["error"] == "dataset_invalid"
    assert {e["kind"] for e in body["errors"]} == {"missing-required"}

# ─── /score ───────────────────────────────────────────────────────────────────

def test_score_uploaded_document(client, sample_document):
    resp = client.post("/score", json={"data": sample_document})
    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 5
    assert body["pairs"][0]["id"] == "2"

def test_score_overwrites_input_composite(client, sample_document):
    sample_document["drugDiseasePairs"] = [sample_document["drugDiseasePairs"][4]]
    sample_document["drugDiseasePairs"][0]["compositePrioritizationScore"] = 9.9
    body = client.post("/score", json={"data": sample_document}).json()
    assert body["pairs"][0]["compositePrioritizationScore"] == 0

def test_score_with_weights(client, sample_document):
    weights = {"economicSuitability": 0.8, "regulatoryFeasibility": 0.2}
    body = client.post("/score", json={"data": sample_document, "weights": weights}).json()
    assert body["weights"]["economicSuitability"] == 0.8
    assert body["weights"]["marketSize"] == 1.0

def test_score_rejects_invalid_document(client, sample_document):
    sample_document["drugDiseasePairs"][0]["marketSize"] = 15.0
    resp = client.post("/score", json={"data": sample_document})
    assert resp.status_code == 422
    body = resp.json()
    assert body["error"] == "invalid_document"
    assert body["errors"][0]["path"] == "/drugDiseasePairs/0/marketSize"
    assert "Value must be <= 10" in body["detail"]

def test_score_rejects_invalid_weights(client, sample_document):
    resp = client.post("/score", json={"data": sample_document, "weights": {"marketSize": 1.5}})
    assert resp.status_code == 422
    assert resp.json()["error"] == "invalid_weights"

def test_score_missing_data(client):
    resp = client.post("/score", json={})
    assert resp.status_code == 422
    assert resp.json()["errors"][0]["message"] == "Expected type object, got null"


# ─── Malformed requests ───────────────────────────────────────────────────────

def test_pairs_non_numeric_weight(client):
    resp = client.get("/pairs", params={"marketSize": "abc"})
    assert resp.status_code == 422
    body = resp.json()
    assert set(body) == {"error", "detail", "errors", "timestamp"}
    assert body["error"] == "invalid_request"
    assert body["errors"][0]["path"] == "/marketSize"
    assert body["errors"][0]["kind"] == "wrong-type"
    assert body["errors"][0]["message"] == "Expected type number, got string"
    assert "1. Path: /marketSize" in body["detail"]

def test_score_body_not_an_object(client):
    resp = client.post("/score", json=[1])
    assert resp.status_code == 422
    body = resp.json()
    assert set(body) == {"error", "detail", "errors", "timestamp"}
    assert body["error"] == "invalid_request"
    assert body["errors"][0]["path"] == "root"
    assert body["errors"][0]["message"] == "Expected type object, got array"


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
