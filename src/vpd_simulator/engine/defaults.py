"""Default state factory — the single source of starting values.

The tick function, the simulation runner and the API all seed their
state from here so the defaults cannot drift apart.
"""

from __future__ import annotations

from vpd_simulator.config.battery import get_battery_parameters
from vpd_simulator.config.motion import CarMotionState
from vpd_simulator.config.scenario import Scenario
from vpd_simulator.config.vehicle import VehicleConfig
from vpd_simulator.engine.battery_model import REFERENCE_TEMP_C, compute_available_power
from vpd_simulator.models.results import SystemMetrics


def default_vehicle_config() -> VehicleConfig:
    """Compact ICE sedan on a 12 V system."""
    return VehicleConfig()


def default_scenario() -> Scenario:
    return Scenario()


def default_motion_state() -> CarMotionState:
    """Parked, engine about to be cranked."""
    return CarMotionState(is_ignition_cycle=True)


def default_metrics(config: VehicleConfig | None = None) -> SystemMetrics:
    """Full, healthy pack at rest, with available power derived from the pack."""
    config = config or default_vehicle_config()
    params = get_battery_parameters(config)
    return SystemMetrics(
        battery_charge=100.0,
        battery_soh=100.0,
        battery_voltage=params.nominal_voltage,
        battery_current=0.0,
        system_temp=REFERENCE_TEMP_C,
        total_power_draw=0.0,
        available_power=compute_available_power(
            params, 100.0, 100.0, REFERENCE_TEMP_C, params.nominal_voltage,
        ),
    )
