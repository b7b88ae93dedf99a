"""Tests for the FastAPI REST endpoints."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app import create_app
from isqrt import Algorithm


@pytest.fixture
def client():
    app = create_app(verify_samples=8)
    return TestClient(app)


# ---------------------------------------------------------------------------
# GET /sqrt/{x}
# ---------------------------------------------------------------------------

class TestComputeEndpoint:

    @pytest.mark.parametrize("x,expected", [
        (0, 0), (1, 1), (3, 1), (4, 2), (24, 4), (2_147_483_647, 46_340),
    ])
    def test_known_values(self, client, x, expected):
        resp = client.get(f"/sqrt/{x}")
        assert resp.status_code == 200
        assert resp.json()["result"] == expected

    def test_response_shape(self, client):
        body = client.get("/sqrt/24").json()
        assert body == {
            "x": 24,
            "result": 4,
            "algorithm": "binary",
            "contract": {
                "nonnegative": True,
                "lower_bound": True,
                "upper_bound": True,
            },
        }

    @pytest.mark.parametrize("algorithm", ["linear", "binary", "newton"])
    def test_algorithm_query(self, client, algorithm):
        resp = client.get("/sqrt/99", params={"algorithm": algorithm})
        assert resp.status_code == 200
        assert resp.json()["algorithm"] == algorithm
        assert resp.json()["result"] == 9

    def test_unknown_algorithm_rejected(self, client):
        resp = client.get("/sqrt/9", params={"algorithm": "guess"})
        assert resp.status_code == 422

    def test_negative_input_422(self, client):
        resp = client.get("/sqrt/-1")
        assert resp.status_code == 422
        assert "invalid argument" in resp.json()["detail"]

    def test_above_int32_422(self, client):
        resp = client.get("/sqrt/2147483648")
        assert resp.status_code == 422
        assert "outside bounds" in resp.json()["detail"]

    def test_non_integer_path_422(self, client):
        resp = client.get("/sqrt/abc")
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# POST /sqrt/batch
# ---------------------------------------------------------------------------

class TestBatchEndpoint:

    def test_batch_results_in_order(self, client):
        resp = client.post("/sqrt/batch", json={"values": [0, 1, 3, 4, 24]})
        assert resp.status_code == 200
        body = resp.json()
        assert body["total"] == 5
        assert [item["result"] for item in body["items"]] == [0, 1, 1, 2, 4]

    def test_batch_with_algorithm(self, client):
        resp = client.post(
            "/sqrt/batch", json={"values": [15, 16], "algorithm": "newton"}
        )
        assert resp.status_code == 200
        items = resp.json()["items"]
        assert all(item["algorithm"] == "newton" for item in items)
        assert [item["result"] for item in items] == [3, 4]

    def test_batch_rejects_any_negative(self, client):
        resp = client.post("/sqrt/batch", json={"values": [4, -9, 16]})
        assert resp.status_code == 422
        assert "-9" in resp.json()["detail"]

    def test_batch_rejects_floats(self, client):
        resp = client.post("/sqrt/batch", json={"values": [4.0]})
        assert resp.status_code == 422

    def test_batch_rejects_empty(self, client):
        resp = client.post("/sqrt/batch", json={"values": []})
        assert resp.status_code == 422

    def test_batch_rejects_oversized(self, client):
        resp = client.post("/sqrt/batch", json={"values": list(range(1001))})
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# GET /sqrt/algorithms
# ---------------------------------------------------------------------------

class TestAlgorithmsEndpoint:

    def test_lists_every_algorithm(self, client):
        body = client.get("/sqrt/algorithms").json()
        assert sorted(a["name"] for a in body) == ["binary", "linear", "newton"]

    def test_only_default_verified_at_startup(self, client):
        body = {a["name"]: a for a in client.get("/sqrt/algorithms").json()}
        assert body["binary"]["verified"] is True
        assert body["binary"]["default"] is True
        assert body["linear"]["verified"] is False
        assert body["newton"]["verified"] is False

    def test_default_algorithm_configurable(self):
        client = TestClient(create_app(Algorithm.NEWTON, verify_samples=8))
        assert client.get("/sqrt/10").json()["algorithm"] == "newton"
        body = {a["name"]: a for a in client.get("/sqrt/algorithms").json()}
        assert body["newton"]["default"] is True


# ---------------------------------------------------------------------------
# POST /sqrt/verify
# ---------------------------------------------------------------------------

class TestVerifyEndpoint:

    def test_verify_marks_algorithm_verified(self, client):
        resp = client.post("/sqrt/verify", json={"algorithm": "newton", "samples": 8})
        assert resp.status_code == 200
        body = resp.json()
        assert body["passed"] is True
        assert body["exhaustive"] is False
        assert body["tests_run"] > 0
        names = [c["name"] for c in body["checks"]]
        assert names[:2] == ["postconditions", "error_conditions"]
        flags = {c["name"]: c["exhaustive"] for c in body["checks"]}
        assert flags["postconditions"] is False
        assert flags["error_conditions"] is None

        listing = {a["name"]: a for a in client.get("/sqrt/algorithms").json()}
        assert listing["newton"]["verified"] is True

    def test_verify_linear_edges_only(self, client):
        resp = client.post("/sqrt/verify", json={"algorithm": "linear", "samples": 0})
        assert resp.status_code == 200
        assert resp.json()["passed"] is True

    def test_verify_rejects_too_many_samples(self, client):
        resp = client.post("/sqrt/verify", json={"algorithm": "binary", "samples": 10_000})
        assert resp.status_code == 422

    def test_verify_caps_linear_samples(self, client):
        resp = client.post("/sqrt/verify", json={"algorithm": "linear", "samples": 65})
        assert resp.status_code == 422
        assert "limited to 64 samples" in resp.text

    def test_verify_allows_more_samples_for_fast_algorithms(self, client):
        resp = client.post("/sqrt/verify", json={"algorithm": "binary", "samples": 65})
        assert resp.status_code == 200

    def test_verify_description_documents_cost(self, client):
        schema = client.get("/openapi.json").json()
        description = schema["paths"]["/sqrt/verify"]["post"]["description"]
        assert "capped at 64 samples" in description

    def test_verify_reports_broken_algorithm(self, client, monkeypatch):
        import isqrt

        monkeypatch.setitem(isqrt.ALGORITHMS, Algorithm.NEWTON, lambda x: x)
        resp = client.post("/sqrt/verify", json={"algorithm": "newton", "samples": 4})
        assert resp.status_code == 200
        body = resp.json()
        assert body["passed"] is False
        failed = [c for c in body["checks"] if not c["passed"]]
        assert failed[0]["name"] == "postconditions"
        assert failed[0]["counterexample"] == [2]
