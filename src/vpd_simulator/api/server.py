"""FastAPI server — HTTP access to the vehicle power distribution engine.

Run with:
    uvicorn vpd_simulator.api.server:app --reload --port 8000

Or:
    python -m vpd_simulator.api.server

Endpoints:
    GET  /health              — liveness probe
    GET  /                    — welcome message + endpoint list
    GET  /catalog/subsystems  — the subsystem registry
    GET  /catalog/vehicles    — body types, sub-types, powertrains, voltages
    GET  /battery             — battery parameters for one vehicle configuration
    GET  /defaults            — default vehicle, scenario, motion and metrics
    POST /tick                — run a single tick from explicit state
    POST /simulate            — run a full simulation (partial or full SimulationConfig)
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, ValidationError

from vpd_simulator.config.battery import BatteryParameters, get_battery_parameters
from vpd_simulator.config.motion import CarAction, CarMotionState, DrivingStyle
from vpd_simulator.config.scenario import Scenario, SimulationConfig
from vpd_simulator.config.subsystems import SUBSYSTEMS
from vpd_simulator.config.vehicle import SUB_TYPES, BodyType, Powertrain, VehicleConfig, VoltageSystem
from vpd_simulator.engine.alerts import DEFAULT_WINDOW_S
from vpd_simulator.engine.battery_model import DEFAULT_DT_S
from vpd_simulator.engine.defaults import (
    default_metrics,
    default_motion_state,
    default_scenario,
    default_vehicle_config,
)
from vpd_simulator.engine.orchestrator import run_simulation
from vpd_simulator.engine.tick import run_tick
from vpd_simulator.models.results import Alert, SystemMetrics, TickResult


# ═══════════════════════════════════════════════════════════════════════════
# App setup
# ═══════════════════════════════════════════════════════════════════════════

app = FastAPI(
    title="Vehicle Power Distribution Simulator API",
    version="1.0",
    description=(
        "Per-tick simulation of a vehicle's electrical power distribution: "
        "powertrain and auxiliary demand, priority load shedding, an "
        "electro-thermal battery model and de-duplicated alerts."
    ),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# ═══════════════════════════════════════════════════════════════════════════
# Request / response models
# ═══════════════════════════════════════════════════════════════════════════

class TickRequest(BaseModel):
    """Request body for /tick.  Omitted state falls back to the defaults."""
    vehicle: VehicleConfig = Field(default_factory=default_vehicle_config)
    motion: CarMotionState = Field(default_factory=default_motion_state)
    metrics: SystemMetrics | None = Field(
        default=None,
        description="Previous tick's metrics. Omit to start from a full, healthy pack.",
    )
    scenario: Scenario = Field(default_factory=default_scenario)
    recent_alerts: list[Alert] = Field(default_factory=list)
    now: float = Field(default=0.0, ge=0, description="Simulated seconds since run start")
    dt_seconds: float = Field(default=DEFAULT_DT_S, gt=0, description="Battery integration step (s)")
    window_seconds: float = Field(default=DEFAULT_WINDOW_S, ge=0)


class SimulateRequest(BaseModel):
    """Request body for /simulate. All fields optional — defaults used for missing."""
    config: dict[str, Any] = Field(
        default_factory=dict,
        description="Partial or full SimulationConfig JSON. Missing fields use defaults. "
                    "Example: {'vehicle': {'powertrain': 'EV'}, 'random_seed': 7}",
    )


class SimulateResponse(BaseModel):
    """Response from /simulate."""
    result: dict[str, Any]


# ═══════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════

def _deep_merge(base: dict, overrides: dict) -> dict:
    """Recursively merge overrides into base dict."""
    for key, val in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(val, dict):
            _deep_merge(base[key], val)
        else:
            base[key] = val
    return base


def _unprocessable(exc: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail=exc.errors(include_url=False, include_context=False, include_input=False),
    )


def _build_config(overrides: dict[str, Any]) -> SimulationConfig:
    """Build a SimulationConfig from partial overrides merged onto defaults.

    A changed ``body_type`` without an explicit ``sub_type`` resets the
    sub-type to the new body type's first one.
    """
    defaults = SimulationConfig().model_dump(mode="json")
    vehicle_overrides = overrides.get("vehicle")
    if isinstance(vehicle_overrides, dict) and "body_type" in vehicle_overrides:
        defaults["vehicle"]["sub_type"] = None
    _deep_merge(defaults, overrides)
    try:
        return SimulationConfig(**defaults)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc


# ═══════════════════════════════════════════════════════════════════════════
# Endpoints
# ═══════════════════════════════════════════════════════════════════════════

@app.get("/health")
def health_check():
    """Simple health check."""
    return {"status": "ok"}


@app.get("/")
def root():
    """API root — returns a welcome message and the endpoint list."""
    return {
        "name": "Vehicle Power Distribution Simulator API",
        "version": "1.0",
        "endpoints": [
            "GET /health",
            "GET /catalog/subsystems",
            "GET /catalog/vehicles",
            "GET /battery",
            "GET /defaults",
            "POST /tick",
            "POST /simulate",
        ],
    }


@app.get("/catalog/subsystems")
def get_subsystems():
    """Every subsystem with its priority and power envelope."""
    return [s.model_dump(mode="json") for s in SUBSYSTEMS]


@app.get("/catalog/vehicles")
def get_vehicle_catalog():
    """Valid values for each VehicleConfig field."""
    return {
        "body_types": {bt.value: list(subs) for bt, subs in SUB_TYPES.items()},
        "powertrains": [p.value for p in Powertrain],
        "voltage_systems": [v.value for v in VoltageSystem],
        "driving_styles": [s.value for s in DrivingStyle],
        "actions": [a.value for a in CarAction],
    }


@app.get("/battery", response_model=BatteryParameters)
def get_battery(
    body_type: BodyType = Query(default=BodyType.SEDAN),
    sub_type: str | None = Query(default=None),
    powertrain: Powertrain = Query(default=Powertrain.ICE),
    voltage_system: VoltageSystem = Query(default=VoltageSystem.V12),
):
    """Battery pack parameters for one vehicle configuration."""
    try:
        config = VehicleConfig(
            body_type=body_type,
            sub_type=sub_type,
            powertrain=powertrain,
            voltage_system=voltage_system,
        )
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    return get_battery_parameters(config)


@app.get("/defaults")
def get_defaults():
    """Default starting state. Use as a template for /tick requests."""
    vehicle = default_vehicle_config()
    return {
        "vehicle": vehicle.model_dump(mode="json"),
        "scenario": default_scenario().model_dump(mode="json"),
        "motion": default_motion_state().model_dump(mode="json"),
        "metrics": default_metrics(vehicle).model_dump(mode="json"),
        "simulation": SimulationConfig().model_dump(mode="json"),
    }


@app.post("/tick", response_model=TickResult)
def tick(req: TickRequest):
    """Run one tick from explicit state.

    Feed the returned ``motion``, ``metrics`` and ``alerts`` back in to
    chain ticks.
    """
    metrics = req.metrics if req.metrics is not None else default_metrics(req.vehicle)
    return run_tick(
        req.vehicle,
        req.motion,
        metrics,
        req.scenario,
        recent_alerts=req.recent_alerts,
        now=req.now,
        dt_seconds=req.dt_seconds,
        window_seconds=req.window_seconds,
    )


@app.post("/simulate", response_model=SimulateResponse)
def simulate(req: SimulateRequest):
    """Run a full simulation.

    Send a partial SimulationConfig (only the fields you want to change).

    Example minimal request:
    ```json
    {"config": {"vehicle": {"body_type": "SUV", "powertrain": "EV"}, "random_seed": 42}}
    ```
    """
    config = _build_config(req.config)
    result = run_simulation(config)
    return SimulateResponse(result=result.model_dump(mode="json"))


# ═══════════════════════════════════════════════════════════════════════════
# CLI entry point
# ═══════════════════════════════════════════════════════════════════════════

def main():
    """Run the API server."""
    import uvicorn
    uvicorn.run(
        "vpd_simulator.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )


if __name__ == "__main__":
    main()
