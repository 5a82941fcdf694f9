"""Body / sub-type specialisations of the powertrain calculators.

A variant wraps a family calculator and applies multiplicative adjustments
to selected demand entries and to the charge effect.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from vpd_simulator.config.motion import CarMotionState
from vpd_simulator.config.scenario import Scenario
from vpd_simulator.config.subsystems import SubsystemSpec
from vpd_simulator.config.vehicle import VehicleConfig
from vpd_simulator.engine.powertrains import (
    DemandCalculator,
    DemandResult,
    combustion_demand,
    electric_demand,
    make_hybrid_calculator,
)
from vpd_simulator.models.results import SystemMetrics


def scaled_calculator(
    base: DemandCalculator,
    demand_scale: Mapping[str, float] | None = None,
    charge_scale: float = 1.0,
) -> DemandCalculator:
    """Wrap ``base`` so selected demand entries and the charge effect are scaled."""
    scales = dict(demand_scale or {})

    def calculate(
        config: VehicleConfig,
        motion: CarMotionState,
        metrics: SystemMetrics,
        scenario: Scenario,
        subsystems: Sequence[SubsystemSpec],
    ) -> DemandResult:
        result = base(config, motion, metrics, scenario, subsystems)
        return result.with_changes(
            demand={sid: result.demand[sid] * k for sid, k in scales.items() if sid in result.demand},
            charge_effect=result.charge_effect * charge_scale,
        )

    return calculate


# Sedans are efficient; slightly better alternator performance.
sedan_mid_size_ice = scaled_calculator(combustion_demand, charge_scale=1.05)

# Compact hybrids stay electric longer and recover a little more when braking.
sedan_compact_hybrid = make_hybrid_calculator(ev_mode_max_speed=50.0, ice_regen_bonus_w=400.0)

# Heavier SUVs recover less through regen.
suv_full_size_ev = scaled_calculator(electric_demand, charge_scale=0.8)

# CNG engine management costs ECU power and alternator efficiency.
pickup_light_duty_cng = scaled_calculator(
    combustion_demand, demand_scale={"ecu": 1.1}, charge_scale=0.95,
)

# Heavy trucks: bigger ECU/fuel system loads and a bigger alternator.
truck_heavy_ice = scaled_calculator(
    combustion_demand, demand_scale={"ecu": 1.5, "fuel_pump": 1.8}, charge_scale=1.2,
)

# Emergency vehicles run high-output alternators.
special_emergency_ice = scaled_calculator(combustion_demand, charge_scale=2.5)
