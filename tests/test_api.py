"""Tests for the HTTP API layer.

Covers:
  - Health / root / catalog endpoints
  - Battery parameter lookup and validation errors
  - Single-tick endpoint with default and explicit state
  - Full simulation endpoint with partial config overrides
  - Deep merge / config builder helpers
"""

from __future__ import annotations

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from vpd_simulator.api.server import _build_config, _deep_merge, app
from vpd_simulator.config import SUBSYSTEMS, BodyType, Powertrain


client = TestClient(app)


# ═══════════════════════════════════════════════════════════════════════════
# Discovery endpoints
# ═══════════════════════════════════════════════════════════════════════════

class TestDiscovery:

    def test_health(self):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_root(self):
        data = client.get("/").json()
        assert "POST /tick" in data["endpoints"]

    def test_subsystem_catalog(self):
        data = client.get("/catalog/subsystems").json()
        assert len(data) == len(SUBSYSTEMS)
        ecu = next(s for s in data if s["id"] == "ecu")
        assert ecu["priority"] == 5
        assert ecu["is_constant"] is True

    def test_vehicle_catalog(self):
        data = client.get("/catalog/vehicles").json()
        assert data["body_types"]["Truck"] == ["Light", "Heavy", "Semi", "Electric"]
        assert "Flex-Fuel" in data["powertrains"]
        assert data["voltage_systems"] == ["12V", "48V"]

    def test_defaults(self):
        data = client.get("/defaults").json()
        assert data["motion"]["is_ignition_cycle"] is True
        assert data["metrics"]["battery_charge"] == 100.0
        assert data["vehicle"]["sub_type"] == "Compact"
        assert data["simulation"]["tick_seconds"] == 1.5


# ═══════════════════════════════════════════════════════════════════════════
# Battery lookup
# ═══════════════════════════════════════════════════════════════════════════

class TestBattery:

    def test_default_pack(self):
        data = client.get("/battery").json()
        assert data["nominal_voltage"] == 12.6

    def test_ev_pack(self):
        data = client.get("/battery", params={"body_type": "SUV", "powertrain": "EV"}).json()
        assert data["nominal_voltage"] == 400.0
        assert data["capacity_wh"] == pytest.approx(90_000.0)

    def test_invalid_sub_type_is_422(self):
        resp = client.get("/battery", params={"body_type": "Bus", "sub_type": "Compact"})
        assert resp.status_code == 422

    def test_unknown_powertrain_is_422(self):
        resp = client.get("/battery", params={"powertrain": "Steam"})
        assert resp.status_code == 422


# ═══════════════════════════════════════════════════════════════════════════
# Tick endpoint
# ═══════════════════════════════════════════════════════════════════════════

class TestTick:

    def test_default_tick_cranks_engine(self):
        resp = client.post("/tick", json={})
        assert resp.status_code == 200
        data = resp.json()
        assert data["distribution"]["starter_motor"] == 1_500
        assert data["motion"]["is_ignition_cycle"] is False

    def test_chained_tick(self):
        first = client.post("/tick", json={}).json()
        second = client.post("/tick", json={
            "motion": first["motion"],
            "metrics": first["metrics"],
            "recent_alerts": first["alerts"],
            "now": 1.5,
        }).json()
        assert second["distribution"]["starter_motor"] == 0

    def test_ev_accelerating(self):
        data = client.post("/tick", json={
            "vehicle": {"body_type": "Hatchback", "powertrain": "EV"},
            "motion": {"speed": 40, "action": "Accelerating"},
        }).json()
        assert data["distribution"]["traction_motor"] == pytest.approx(150_000.0)
        assert data["charge_effect"] < 0

    def test_negative_speed_is_422(self):
        resp = client.post("/tick", json={"motion": {"speed": -5}})
        assert resp.status_code == 422

    def test_invalid_sub_type_is_422(self):
        resp = client.post("/tick", json={"vehicle": {"body_type": "Sedan", "sub_type": "Semi"}})
        assert resp.status_code == 422


# ═══════════════════════════════════════════════════════════════════════════
# Simulation endpoint
# ═══════════════════════════════════════════════════════════════════════════

class TestSimulate:

    def test_partial_config(self):
        resp = client.post("/simulate", json={
            "config": {"vehicle": {"powertrain": "EV"}, "virtual_duration_s": 15, "random_seed": 1},
        })
        assert resp.status_code == 200
        result = resp.json()["result"]
        assert result["summary"]["ticks"] == 10
        assert result["config"]["vehicle"]["powertrain"] == "EV"

    def test_invalid_override_is_422(self):
        resp = client.post("/simulate", json={"config": {"tick_seconds": 0}})
        assert resp.status_code == 422


# ═══════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════

class TestHelpers:

    def test_deep_merge_nested(self):
        base = {"vehicle": {"body_type": "Sedan", "powertrain": "ICE"}, "random_seed": None}
        _deep_merge(base, {"vehicle": {"powertrain": "EV"}, "random_seed": 4})
        assert base == {"vehicle": {"body_type": "Sedan", "powertrain": "EV"}, "random_seed": 4}

    def test_build_config_resets_sub_type_on_body_change(self):
        cfg = _build_config({"vehicle": {"body_type": "Truck"}})
        assert cfg.vehicle.body_type == BodyType.TRUCK
        assert cfg.vehicle.sub_type == "Light"

    def test_build_config_keeps_explicit_sub_type(self):
        cfg = _build_config({"vehicle": {"body_type": "Truck", "sub_type": "Semi", "powertrain": "FCEV"}})
        assert cfg.vehicle.sub_type == "Semi"
        assert cfg.vehicle.powertrain == Powertrain.FCEV

    def test_build_config_invalid_raises_422(self):
        with pytest.raises(HTTPException) as exc:
            _build_config({"vehicle": {"sub_type": "Semi"}})
        assert exc.value.status_code == 422
