"""
Tests for the calculation API routes.
"""

import pytest

from web.routers.calculations import get_calculator, router


GOLDEN_FAMILY = {"spouse_exists": True, "children_count": 2}


class TestRouterSetup:

    def test_router_prefix(self):
        assert router.prefix == "/api/calculation"


class TestHeirsEndpoint:

    def test_success(self, client):
        response = client.post("/api/calculation/heirs", json={"family_structure": GOLDEN_FAMILY})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        heirs = body["result"]["legal_heirs"]
        assert [h["id"] for h in heirs] == ["spouse", "child_1", "child_2"]
        assert heirs[0]["inheritance_share"] == 0.5
        assert heirs[1]["inheritance_share_fraction"] == "1/4"

    def test_no_heirs_is_400(self, client):
        response = client.post("/api/calculation/heirs", json={"family_structure": {}})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Validation failed"
        assert body["validation_errors"][0]["code"] == "NO_HEIRS"
        assert body["validation_warnings"] == []

    def test_malformed_body_is_422(self, client):
        response = client.post(
            "/api/calculation/heirs",
            json={"family_structure": {"children_count": "several"}},
        )

        assert response.status_code == 422
        body = response.json()
        assert body["error"] is True
        assert body["code"] == "VALIDATION_ERROR"
        assert "timestamp" in body
        assert any("children_count" in e for e in body["details"]["validation_errors"])


class TestTaxAmountEndpoint:

    def test_golden_scenario(self, client):
        response = client.post(
            "/api/calculation/tax-amount",
            json={"taxable_amount": 100_000_000, "family_structure": GOLDEN_FAMILY},
        )

        assert response.status_code == 200
        result = response.json()["result"]
        assert result["basic_deduction"] == 48_000_000
        assert result["taxable_estate"] == 52_000_000
        assert result["total_tax_amount"] == 6_300_000
        assert [d["tax_before_addition"] for d in result["heir_tax_details"]] == [
            3_400_000, 1_450_000, 1_450_000,
        ]

    def test_inconsistent_family(self, client):
        response = client.post(
            "/api/calculation/tax-amount",
            json={
                "taxable_amount": 100_000_000,
                "family_structure": {"children_count": 1, "adopted_children_count": 2},
            },
        )

        assert response.status_code == 400
        codes = [e["code"] for e in response.json()["validation_errors"]]
        assert codes == ["ADOPTED_EXCEEDS_CHILDREN"]

    def test_missing_taxable_amount_is_422(self, client):
        response = client.post("/api/calculation/tax-amount", json={"family_structure": GOLDEN_FAMILY})
        assert response.status_code == 422


class TestActualDivisionEndpoint:

    def _heirs(self, client):
        response = client.post("/api/calculation/heirs", json={"family_structure": GOLDEN_FAMILY})
        return response.json()["result"]["legal_heirs"]

    def test_round_trip_from_heirs_endpoint(self, client):
        payload = {
            "heirs": self._heirs(client),
            "total_amount": 100_000_000,
            "total_tax_amount": 6_300_000,
            "mode": "amount",
            "amounts": {"spouse": 80_000_000, "child_1": 10_000_000, "child_2": 10_000_000},
        }
        response = client.post("/api/calculation/actual-division", json=payload)

        assert response.status_code == 200
        body = response.json()
        details = {d["heir_id"]: d for d in body["result"]["division_details"]}
        assert details["spouse"]["final_tax_amount"] == 1_890_000
        assert details["child_1"]["final_tax_amount"] == 630_000
        assert body["result"]["total_final_tax_amount"] == 3_150_000
        assert body["validation_warnings"] == []

    def test_percentage_mode(self, client):
        payload = {
            "heirs": self._heirs(client),
            "total_amount": 100_000_001,
            "total_tax_amount": 6_300_000,
            "mode": "percentage",
            "percentages": {"spouse": 33.33, "child_1": 33.33, "child_2": 33.34},
            "rounding_method": "floor",
        }
        response = client.post("/api/calculation/actual-division", json=payload)

        assert response.status_code == 200
        details = response.json()["result"]["division_details"]
        assert sum(d["acquired_amount"] for d in details) == 100_000_001

    def test_fraction_string_shares_accepted(self, client):
        payload = {
            "heirs": [
                {"id": "spouse", "heir_type": "spouse", "inheritance_share": "1/2"},
                {"id": "child_1", "heir_type": "child", "inheritance_share": "1/2"},
            ],
            "total_amount": 10_000_000,
            "total_tax_amount": 1_000_000,
            "amounts": {"spouse": 5_000_000, "child_1": 5_000_000},
        }
        response = client.post("/api/calculation/actual-division", json=payload)

        assert response.status_code == 200
        assert response.json()["result"]["total_final_tax_amount"] == 500_000

    def test_sum_mismatch_is_400(self, client):
        payload = {
            "heirs": self._heirs(client),
            "total_amount": 100_000_000,
            "total_tax_amount": 6_300_000,
            "amounts": {"spouse": 1, "child_1": 1, "child_2": 1, "stranger": 5},
        }
        response = client.post("/api/calculation/actual-division", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert [e["code"] for e in body["validation_errors"]] == ["INVALID_SUM"]
        assert [w["code"] for w in body["validation_warnings"]] == ["UNKNOWN_HEIR"]

    def test_unknown_mode_is_400(self, client):
        payload = {
            "heirs": self._heirs(client),
            "total_amount": 0,
            "total_tax_amount": 0,
            "mode": "shares",
        }
        response = client.post("/api/calculation/actual-division", json=payload)

        assert response.status_code == 400
        assert response.json()["validation_errors"][0]["code"] == "INVALID_MODE"

    @pytest.mark.parametrize("share", ["abc", 1.5, "3/2"])
    def test_bad_share_is_422(self, client, share):
        payload = {
            "heirs": [{"id": "child_1", "heir_type": "child", "inheritance_share": share}],
            "total_amount": 0,
            "total_tax_amount": 0,
            "amounts": {"child_1": 0},
        }
        response = client.post("/api/calculation/actual-division", json=payload)
        assert response.status_code == 422

    def test_empty_heirs_is_422(self, client):
        payload = {"heirs": [], "total_amount": 0, "total_tax_amount": 0, "amounts": {}}
        response = client.post("/api/calculation/actual-division", json=payload)
        assert response.status_code == 422


class TestTaxTableEndpoint:

    def test_returns_table(self, client):
        response = client.get("/api/calculation/tax-table")

        assert response.status_code == 200
        config = response.json()["config"]
        assert len(config["tax_table"]) == 8
        assert config["basic_deduction_base"] == 30_000_000


class _FailingCalculator:
    def __init__(self, exc):
        self.exc = exc

    def determine_heirs(self, structure):
        raise self.exc


class TestErrorEnvelopes:

    def test_arithmetic_failure_is_calculation_error(self, client):
        from web.app import app
        app.dependency_overrides[get_calculator] = lambda: _FailingCalculator(ZeroDivisionError("boom"))

        response = client.post("/api/calculation/heirs", json={"family_structure": GOLDEN_FAMILY})

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "CALCULATION_ERROR"
        assert body["details"] == {"operation": "heirs"}

    def test_unexpected_failure_is_internal_error(self):
        from fastapi.testclient import TestClient
        from web.app import app

        app.dependency_overrides[get_calculator] = lambda: _FailingCalculator(RuntimeError("boom"))
        try:
            with TestClient(app, raise_server_exceptions=False) as client:
                response = client.post("/api/calculation/heirs", json={"family_structure": GOLDEN_FAMILY})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "INTERNAL_ERROR"
        assert body["details"] == {"type": "RuntimeError"}

    def test_unknown_route_uses_envelope(self, client):
        response = client.get("/api/calculation/nothing-here")

        assert response.status_code == 404
        assert response.json()["error"] is True
