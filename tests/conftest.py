"""Shared test fixtures — vehicles, motion states and metrics used across suites."""

from __future__ import annotations

import numpy as np
import pytest

from vpd_simulator.config import (
    SUBSYSTEMS,
    BodyType,
    CarAction,
    CarMotionState,
    Powertrain,
    Scenario,
    VehicleConfig,
)
from vpd_simulator.engine.defaults import default_metrics
from vpd_simulator.models.results import SystemMetrics


@pytest.fixture
def specs():
    return SUBSYSTEMS


@pytest.fixture
def ice_sedan() -> VehicleConfig:
    """Compact ICE sedan — resolves to the plain combustion calculator."""
    return VehicleConfig(body_type=BodyType.SEDAN, sub_type="Compact", powertrain=Powertrain.ICE)


@pytest.fixture
def ev_hatchback() -> VehicleConfig:
    """Battery-electric hatchback — resolves to the plain electric calculator."""
    return VehicleConfig(body_type=BodyType.HATCHBACK, powertrain=Powertrain.EV)


@pytest.fixture
def scenario() -> Scenario:
    return Scenario()


@pytest.fixture
def idle() -> CarMotionState:
    return CarMotionState(speed=0.0, action=CarAction.IDLE)


@pytest.fixture
def cruising() -> CarMotionState:
    return CarMotionState(speed=60.0, action=CarAction.CRUISING)


@pytest.fixture
def accelerating() -> CarMotionState:
    return CarMotionState(speed=40.0, action=CarAction.ACCELERATING)


@pytest.fixture
def braking() -> CarMotionState:
    return CarMotionState(speed=60.0, action=CarAction.BRAKING)


@pytest.fixture
def ice_metrics(ice_sedan: VehicleConfig) -> SystemMetrics:
    return default_metrics(ice_sedan)


@pytest.fixture
def ev_metrics(ev_hatchback: VehicleConfig) -> SystemMetrics:
    return default_metrics(ev_hatchback)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)
