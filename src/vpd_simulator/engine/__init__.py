"""Engine — per-tick power distribution chain + caller-side simulation loop."""

from vpd_simulator.engine.powertrains import DemandResult, DemandCalculator
from vpd_simulator.engine.dispatch import select_calculator
from vpd_simulator.engine.auxiliary import apply_auxiliary_demand, apply_radiator_fan
from vpd_simulator.engine.shedding import SheddingResult, resolve_load
from vpd_simulator.engine.battery_model import advance_battery, compute_available_power
from vpd_simulator.engine.alerts import evaluate_alerts
from vpd_simulator.engine.defaults import (
    default_metrics,
    default_motion_state,
    default_scenario,
    default_vehicle_config,
)
from vpd_simulator.engine.tick import run_tick
from vpd_simulator.engine.orchestrator import SimulationRunner, run_simulation

__all__ = [
    "DemandResult",
    "DemandCalculator",
    "select_calculator",
    "apply_auxiliary_demand",
    "apply_radiator_fan",
    "SheddingResult",
    "resolve_load",
    "advance_battery",
    "compute_available_power",
    "evaluate_alerts",
    "default_metrics",
    "default_motion_state",
    "default_scenario",
    "default_vehicle_config",
    "run_tick",
    # Simulation loop
    "SimulationRunner",
    "run_simulation",
]
