"""Powertrain demand calculators — one per drivetrain family.

Each calculator turns (vehicle, motion, metrics, scenario, subsystems) into:
  - ``demand``: subsystem id → watts, seeded from the registry (constant
    loads at base power, variable loads at zero) plus the drivetrain's own
    draws (starter, fuel pump, ECU, traction motor);
  - ``charge_effect``: signed watts flowing into the battery from the
    propulsion side alone (alternator, regen, fuel cell, engine charging,
    motor assist).  Auxiliary loads are added afterwards and are not part
    of it.

Charge-effect conventions per family:
  combustion   alternator output (gross generation)
  electric     regen − total demand (including traction)
  hybrid       EV mode as electric; ICE mode engine charge + regen − assist
  fuel cell    fuel-cell output + regen − total demand
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from vpd_simulator.config.motion import CarAction, CarMotionState
from vpd_simulator.config.scenario import Scenario, Terrain
from vpd_simulator.config.subsystems import SubsystemSpec
from vpd_simulator.config.vehicle import BodyType, VehicleConfig
from vpd_simulator.models.results import SystemMetrics

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Result type + calculator signature
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DemandResult:
    """Immutable output of one demand calculation."""

    demand: dict[str, float] = field(default_factory=dict)
    """Subsystem id → requested watts (before auxiliary rules and shedding)."""

    charge_effect: float = 0.0
    """Signed watts into the battery from the propulsion system (positive = charging)."""

    @property
    def total(self) -> float:
        return sum(self.demand.values())

    def with_changes(
        self,
        demand: dict[str, float] | None = None,
        charge_effect: float | None = None,
    ) -> DemandResult:
        """Return a copy with some demand entries and/or the charge effect replaced."""
        merged = dict(self.demand)
        if demand:
            merged.update(demand)
        return DemandResult(
            demand=merged,
            charge_effect=self.charge_effect if charge_effect is None else charge_effect,
        )


DemandCalculator = Callable[
    [VehicleConfig, CarMotionState, SystemMetrics, Scenario, Sequence[SubsystemSpec]],
    DemandResult,
]
"""Signature every powertrain calculator and variant wrapper implements."""


# ═══════════════════════════════════════════════════════════════════════════
# Constants
# ═══════════════════════════════════════════════════════════════════════════

COMBUSTION_UPHILL_FACTOR = 1.5
ACCEL_ECU_EXTRA_W = 20.0
ACCEL_FUEL_PUMP_EXTRA_W = 80.0
ALTERNATOR_CAPACITY_W = 2_000.0
ALTERNATOR_CAPACITY_SPECIAL_W = 5_000.0
ALTERNATOR_CHARGE_MARGIN_W = 500.0
ALTERNATOR_MIN_SPEED = 5.0

EV_INVERTER_ECU_W = 75.0
EV_ACCEL_TRACTION_W = 150_000.0
EV_CRUISE_TRACTION_W = 15_000.0
EV_UPHILL_FACTOR = 2.5
EV_DOWNHILL_FACTOR = 0.2
EV_MAX_REGEN_W = 60_000.0
REGEN_REFERENCE_SPEED = 120.0
REGEN_BRAKING_BOOST = 1.5
REGEN_DOWNHILL_BOOST = 1.2
REGEN_MIN_SPEED = 5.0

HYBRID_EV_MODE_MAX_SPEED = 40.0
HYBRID_EV_MODE_MIN_SOC = 20.0
HYBRID_CONTROLLER_ECU_W = 50.0
HYBRID_EV_CRUISE_TRACTION_W = 5_000.0
HYBRID_MAX_REGEN_W = 25_000.0
HYBRID_ENGINE_CHARGE_LOW_W = 5_000.0
HYBRID_ENGINE_CHARGE_MAINTAIN_W = 2_000.0
HYBRID_MOTOR_ASSIST_W = 10_000.0

FCEV_CONTROLLER_ECU_W = 150.0
FUEL_CELL_MAX_W = 90_000.0
FUEL_CELL_CHARGE_MARGIN_W = 2_000.0
FUEL_CELL_IDLE_W = 5_000.0
FUEL_CELL_IDLE_THRESHOLD_W = 100.0
FCEV_MAX_REGEN_W = 50_000.0


# ═══════════════════════════════════════════════════════════════════════════
# Shared helpers
# ═══════════════════════════════════════════════════════════════════════════

def initialize_demand(subsystems: Sequence[SubsystemSpec]) -> dict[str, float]:
    """Constant loads at base power, variable loads at zero."""
    return {s.id: (s.base_power if s.is_constant else 0.0) for s in subsystems}


def find_subsystem(subsystems: Sequence[SubsystemSpec], subsystem_id: str) -> SubsystemSpec:
    for spec in subsystems:
        if spec.id == subsystem_id:
            return spec
    raise KeyError(subsystem_id)


def _is_regen(motion: CarMotionState, scenario: Scenario) -> bool:
    return motion.action == CarAction.BRAKING or (
        scenario.terrain == Terrain.DOWNHILL and motion.speed > REGEN_MIN_SPEED
    )


def _traction_power(motion: CarMotionState, scenario: Scenario) -> float:
    """Battery-electric traction draw for the current action."""
    if scenario.terrain == Terrain.UPHILL:
        terrain = EV_UPHILL_FACTOR
    elif scenario.terrain == Terrain.DOWNHILL:
        terrain = EV_DOWNHILL_FACTOR
    else:
        terrain = 1.0

    if motion.action == CarAction.ACCELERATING:
        return EV_ACCEL_TRACTION_W * terrain
    if motion.action in (CarAction.CRUISING, CarAction.TURNING):
        # Holding speed costs more the faster we go.
        return EV_CRUISE_TRACTION_W * (1.0 + motion.speed / 100.0) * terrain
    return 0.0


def _scaled_regen(motion: CarMotionState, scenario: Scenario, ceiling_w: float) -> float:
    if not _is_regen(motion, scenario):
        return 0.0
    regen = ceiling_w * (motion.speed / REGEN_REFERENCE_SPEED)
    if motion.action == CarAction.BRAKING:
        regen *= REGEN_BRAKING_BOOST
    if scenario.terrain == Terrain.DOWNHILL:
        regen *= REGEN_DOWNHILL_BOOST
    return min(ceiling_w, regen)


# ═══════════════════════════════════════════════════════════════════════════
# Combustion (ICE, CNG, LPG, Flex-Fuel)
# ═══════════════════════════════════════════════════════════════════════════

def combustion_demand(
    config: VehicleConfig,
    motion: CarMotionState,
    metrics: SystemMetrics,
    scenario: Scenario,
    subsystems: Sequence[SubsystemSpec],
) -> DemandResult:
    """Starter, fuel pump and alternator for an engine-driven vehicle.

    ``charge_effect`` is the raw alternator output; the battery model nets
    the resolved draw against it.
    """
    demand = initialize_demand(subsystems)
    terrain = COMBUSTION_UPHILL_FACTOR if scenario.terrain == Terrain.UPHILL else 1.0

    if motion.is_ignition_cycle:
        demand["starter_motor"] = find_subsystem(subsystems, "starter_motor").max_power

    if motion.speed > 0 or motion.action == CarAction.IDLE:
        demand["fuel_pump"] = find_subsystem(subsystems, "fuel_pump").base_power * terrain
    if motion.action == CarAction.ACCELERATING:
        demand["ecu"] += ACCEL_ECU_EXTRA_W * terrain
        demand["fuel_pump"] += ACCEL_FUEL_PUMP_EXTRA_W * terrain

    alternator = 0.0
    engine_running = motion.speed > ALTERNATOR_MIN_SPEED or motion.action == CarAction.IDLE
    if not motion.is_ignition_cycle and engine_running:
        capacity = (
            ALTERNATOR_CAPACITY_SPECIAL_W if config.body_type == BodyType.SPECIAL
            else ALTERNATOR_CAPACITY_W
        )
        alternator = min(capacity, sum(demand.values()) + ALTERNATOR_CHARGE_MARGIN_W)

    return DemandResult(demand=demand, charge_effect=alternator)


# ═══════════════════════════════════════════════════════════════════════════
# Battery electric
# ═══════════════════════════════════════════════════════════════════════════

def electric_demand(
    config: VehicleConfig,
    motion: CarMotionState,
    metrics: SystemMetrics,
    scenario: Scenario,
    subsystems: Sequence[SubsystemSpec],
) -> DemandResult:
    """Traction motor plus regenerative braking for a battery-electric vehicle."""
    demand = initialize_demand(subsystems)
    demand["fuel_pump"] = 0.0
    demand["starter_motor"] = 0.0
    demand["ecu"] += EV_INVERTER_ECU_W
    demand["traction_motor"] = _traction_power(motion, scenario)

    total = sum(demand.values())
    regen = _scaled_regen(motion, scenario, EV_MAX_REGEN_W)
    return DemandResult(demand=demand, charge_effect=regen - total)


# ═══════════════════════════════════════════════════════════════════════════
# Hybrid
# ═══════════════════════════════════════════════════════════════════════════

def _hybrid_regen(motion: CarMotionState, scenario: Scenario) -> float:
    if not _is_regen(motion, scenario):
        return 0.0
    return HYBRID_MAX_REGEN_W * (motion.speed / 100.0)


def _hybrid_ev_mode(
    motion: CarMotionState,
    scenario: Scenario,
    subsystems: Sequence[SubsystemSpec],
) -> DemandResult:
    demand = initialize_demand(subsystems)
    demand["fuel_pump"] = 0.0
    demand["starter_motor"] = 0.0
    demand["ecu"] = find_subsystem(subsystems, "ecu").base_power + HYBRID_CONTROLLER_ECU_W

    traction = 0.0
    if motion.action in (CarAction.CRUISING, CarAction.TURNING):
        traction = HYBRID_EV_CRUISE_TRACTION_W * (1.0 + motion.speed / 80.0)
    demand["traction_motor"] = traction

    total = sum(demand.values())
    return DemandResult(demand=demand, charge_effect=_hybrid_regen(motion, scenario) - total)


def _hybrid_ice_mode(
    config: VehicleConfig,
    motion: CarMotionState,
    metrics: SystemMetrics,
    scenario: Scenario,
    subsystems: Sequence[SubsystemSpec],
    regen_bonus_w: float,
) -> DemandResult:
    ice = combustion_demand(config, motion, metrics, scenario, subsystems)

    # The engine tops up the high-voltage pack when it runs low.
    if metrics.battery_charge < 40:
        engine_charge = HYBRID_ENGINE_CHARGE_LOW_W
    elif metrics.battery_charge < 80:
        engine_charge = HYBRID_ENGINE_CHARGE_MAINTAIN_W
    else:
        engine_charge = 0.0

    regen = _hybrid_regen(motion, scenario)
    if regen_bonus_w and (motion.action == CarAction.BRAKING or scenario.terrain == Terrain.DOWNHILL):
        regen += regen_bonus_w

    assist = HYBRID_MOTOR_ASSIST_W if motion.action == CarAction.ACCELERATING else 0.0

    # Alternator output is not part of the HV balance in this mode.
    return ice.with_changes(
        demand={"traction_motor": assist},
        charge_effect=engine_charge + regen - assist,
    )


def make_hybrid_calculator(
    ev_mode_max_speed: float = HYBRID_EV_MODE_MAX_SPEED,
    ice_regen_bonus_w: float = 0.0,
) -> DemandCalculator:
    """Build a hybrid calculator with its own EV-mode speed threshold.

    EV mode is used below ``ev_mode_max_speed`` when not accelerating and
    SoC is above 20 %; otherwise the engine runs.  ``ice_regen_bonus_w`` is
    extra recovered power while braking or descending in engine mode.
    """

    def hybrid_demand(
        config: VehicleConfig,
        motion: CarMotionState,
        metrics: SystemMetrics,
        scenario: Scenario,
        subsystems: Sequence[SubsystemSpec],
    ) -> DemandResult:
        ev_mode = (
            motion.speed < ev_mode_max_speed
            and motion.action != CarAction.ACCELERATING
            and metrics.battery_charge > HYBRID_EV_MODE_MIN_SOC
        )
        logger.debug("hybrid mode=%s speed=%.1f soc=%.1f",
                     "EV" if ev_mode else "ICE", motion.speed, metrics.battery_charge)
        if ev_mode:
            return _hybrid_ev_mode(motion, scenario, subsystems)
        return _hybrid_ice_mode(config, motion, metrics, scenario, subsystems, ice_regen_bonus_w)

    return hybrid_demand


hybrid_demand = make_hybrid_calculator()


# ═══════════════════════════════════════════════════════════════════════════
# Fuel cell
# ═══════════════════════════════════════════════════════════════════════════

def fuel_cell_demand(
    config: VehicleConfig,
    motion: CarMotionState,
    metrics: SystemMetrics,
    scenario: Scenario,
    subsystems: Sequence[SubsystemSpec],
) -> DemandResult:
    """Electric drive fed by a fuel cell that tracks demand plus a charging margin.

    The buffer battery only covers what the stack cannot deliver.
    """
    demand = initialize_demand(subsystems)
    demand["fuel_pump"] = 0.0
    demand["starter_motor"] = 0.0
    demand["ecu"] += FCEV_CONTROLLER_ECU_W
    demand["traction_motor"] = _traction_power(motion, scenario)

    total = sum(demand.values())
    if total > FUEL_CELL_IDLE_THRESHOLD_W:
        fuel_cell = min(FUEL_CELL_MAX_W, total + FUEL_CELL_CHARGE_MARGIN_W)
    else:
        fuel_cell = FUEL_CELL_IDLE_W

    regen = _scaled_regen(motion, scenario, FCEV_MAX_REGEN_W)
    return DemandResult(demand=demand, charge_effect=fuel_cell + regen - total)
