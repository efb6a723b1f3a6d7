"""Tests for the lawn engine HTTP endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from greenquote.main import app

SPRINGFIELD = {"lat": 39.7817, "lng": -89.6501}

# ~100 ft x 100 ft square
SQUARE = [
    {"lat": 39.78156, "lng": -89.65028},
    {"lat": 39.78156, "lng": -89.64992},
    {"lat": 39.78184, "lng": -89.64992},
    {"lat": 39.78184, "lng": -89.65028},
]


@pytest.fixture(scope="module")
def client():
    return TestClient(app)


class TestHealth:
    def test_health(self, client):
        assert client.get("/api/v1/health").json() == {"status": "ok"}


class TestAreaEndpoint:
    def test_measure(self, client):
        resp = client.post("/api/v1/area", json={"polygons": [SQUARE]})
        assert resp.status_code == 200
        body = resp.json()
        assert body["polygon_count"] == 1
        assert body["total_sqft"] > 0
        assert body["breakdown"][0]["vertex_count"] == 4

    def test_too_few_points(self, client):
        resp = client.post("/api/v1/area", json={"polygons": [SQUARE[:2]]})
        assert resp.status_code == 400

    def test_no_polygons(self, client):
        resp = client.post("/api/v1/area", json={"polygons": []})
        assert resp.json()["total_sqft"] == 0


class TestEstimateEndpoint:
    def test_residential(self, client):
        resp = client.post("/api/v1/estimate", json={
            "location": SPRINGFIELD,
            "property_type": "residential",
            "address_components": [{"long_name": "North Grand Avenue", "types": ["route"]}],
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body["polygon_count"] == 2
        assert body["strategy"] == "front_back"
        assert body["road_bearing"] == 0
        assert body["total_sqft"] == pytest.approx(8_000, rel=0.01)

    def test_commercial(self, client):
        resp = client.post("/api/v1/estimate", json={
            "location": SPRINGFIELD,
            "property_type": "commercial",
        })
        assert resp.json()["polygon_count"] == 1

    def test_missing_location(self, client):
        resp = client.post("/api/v1/estimate", json={"property_type": "residential"})
        assert resp.status_code == 400

    def test_lot_on_the_antimeridian(self, client):
        resp = client.post("/api/v1/estimate", json={
            "location": {"lat": -16.5, "lng": 179.9999},
            "property_type": "residential",
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body["polygon_count"] == 2
        assert all(-180 <= p["lng"] < 180 for poly in body["polygons"] for p in poly)

    def test_formatted_address_sets_bearing(self, client):
        resp = client.post("/api/v1/estimate", json={
            "location": SPRINGFIELD,
            "formatted_address": "1200 West Monroe Street, Springfield, IL",
        })
        assert resp.json()["road_bearing"] == 270


class TestPriceEndpoint:
    def test_default_tiers(self, client):
        resp = client.post("/api/v1/price", json={"area_sqft": 25_000})
        assert resp.status_code == 200
        body = resp.json()
        assert body["pricing_mode"] == "tiered"
        assert body["base_price"] == pytest.approx(205.0)
        assert len(body["breakdown"]) == 3
        assert len(body["pricing_tiers_snapshot"]) == 3

    def test_minimum(self, client):
        resp = client.post("/api/v1/price", json={"area_sqft": 3_000, "min_price_per_visit": 50})
        body = resp.json()
        assert body["base_price"] == pytest.approx(50.0)
        assert body["minimum_applied"] is True

    def test_flat(self, client):
        resp = client.post("/api/v1/price", json={
            "area_sqft": 10_000,
            "use_tiered_pricing": False,
            "flat_rate": 0.01,
        })
        body = resp.json()
        assert body["pricing_mode"] == "flat"
        assert body["base_price"] == pytest.approx(100.0)

    def test_invalid_tiers(self, client):
        resp = client.post("/api/v1/price", json={
            "area_sqft": 10_000,
            "tiers": [
                {"up_to_sqft": 5_000, "rate_per_sqft": 0.01},
                {"up_to_sqft": 20_000, "rate_per_sqft": 0.008},
            ],
        })
        assert resp.status_code == 400
        assert resp.json()["detail"]["errors"]

    def test_negative_area_rejected(self, client):
        resp = client.post("/api/v1/price", json={"area_sqft": -1})
        assert resp.status_code == 422

    def test_compare(self, client):
        resp = client.post("/api/v1/price/compare", json={"area_sqft": 25_000, "flat_rate": 0.01})
        body = resp.json()
        assert body["savings"] == pytest.approx(45.0)
        assert body["savings_percent"] == pytest.approx(18.0)


class TestTierEndpoints:
    def test_validate_valid(self, client):
        resp = client.post("/api/v1/tiers/validate", json={"tiers": [
            {"up_to_sqft": 5_000, "rate_per_sqft": 0.012},
            {"up_to_sqft": None, "rate_per_sqft": 0.005},
        ]})
        body = resp.json()
        assert body["valid"] is True
        assert body["labels"] == ["0-5,000 sq ft", "5,000+ sq ft"]

    def test_validate_invalid(self, client):
        resp = client.post("/api/v1/tiers/validate", json={"tiers": [
            {"up_to_sqft": None, "rate_per_sqft": "free"},
        ]})
        body = resp.json()
        assert body["valid"] is False
        assert body["errors"] == ["Tier 1: Rate must be a positive number"]
        assert body["labels"] == []

    def test_defaults(self, client):
        body = client.get("/api/v1/tiers/default").json()
        assert [t["up_to_sqft"] for t in body] == [5_000, 20_000, None]


class TestQuoteEndpoint:
    def test_weekly_with_addon(self, client):
        resp = client.post("/api/v1/quote", json={
            "area_sqft": 25_000,
            "frequency": "weekly",
            "addons": [{"name": "Edging", "price_per_visit": 20}],
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body["per_visit"] == 191
        assert body["monthly"] == 764
        assert body["pricing"]["base_price"] == pytest.approx(205.0)
