"""Pricing API 엔드포인트 테스트"""

import pytest
from fastapi.testclient import TestClient


class TestQuote:
    def test_deterministic_quote(self, client: TestClient) -> None:
        body = {"base_price": 100, "item_tags": ["supplies"], "location_type": "outpost"}
        data = client.post("/pricing/quote", json=body).json()
        assert data["final_price"] == 130
        assert [a["modifier_id"] for a in data["applied"]] == ["remote_scarcity"]
        assert data["applied"][0]["multiplier"] == pytest.approx(1.3)

    def test_seeded_quote_in_range(self, client: TestClient) -> None:
        body = {"base_price": 100, "item_tags": ["supplies"], "location_type": "outpost", "seed": 4}
        data = client.post("/pricing/quote", json=body).json()
        assert 120 <= data["final_price"] <= 140

    def test_negative_price_rejected(self, client: TestClient) -> None:
        assert client.post("/pricing/quote", json={"base_price": -1}).status_code == 422
