"""Result types — the contract between engine, runner and API.

``SystemMetrics`` is the battery/electrical state threaded tick to tick;
the battery model is the only component that produces new instances.
Everything else here is an output snapshot.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from vpd_simulator.config.motion import CarMotionState
from vpd_simulator.config.scenario import Scenario, SimulationConfig


PowerDistribution = dict[str, float]
"""Subsystem id → allocated watts for one tick."""


# ═══════════════════════════════════════════════════════════════════════════
# Per-tick state
# ═══════════════════════════════════════════════════════════════════════════

class SystemMetrics(BaseModel):
    """Battery and electrical-bus state after a tick."""

    battery_charge: float = Field(default=100.0, ge=0, le=100, description="State of charge (%)")
    battery_soh: float = Field(default=100.0, ge=0, le=100, description="State of health (%)")
    battery_voltage: float = Field(default=12.6, gt=0, description="Terminal voltage (V)")
    battery_current: float = Field(
        default=0.0,
        description="Pack current (A); positive = discharging",
    )
    system_temp: float = Field(default=25.0, description="Pack / system temperature (°C)")
    total_power_draw: float = Field(default=0.0, ge=0, description="Sum of the resolved distribution (W)")
    available_power: float = Field(default=0.0, ge=0, description="Power the bus can deliver this tick (W)")


class Alert(BaseModel):
    """One user-facing alert.

    ``id`` is ``"<prefix>-<timestamp>"`` with the timestamp in fixed-point
    notation; the prefix identifies the alert category for de-duplication.
    """

    id: str
    subsystem: str = "system"
    message: str
    timestamp: float = Field(ge=0, description="Simulated seconds since run start")

    @property
    def prefix(self) -> str:
        return self.id.rsplit("-", 1)[0]


class TickResult(BaseModel):
    """Everything one call to the tick function produces."""

    motion: CarMotionState
    metrics: SystemMetrics
    distribution: PowerDistribution
    alerts: list[Alert] = Field(default_factory=list)
    scenario: Scenario
    charge_effect: float = Field(
        description="Net watts contributed to the battery by the propulsion system",
    )


# ═══════════════════════════════════════════════════════════════════════════
# Run outputs
# ═══════════════════════════════════════════════════════════════════════════

class HistoryEntry(BaseModel):
    """One row of the rolling history buffer."""

    timestamp: float
    total_power_draw: float
    battery_charge: float
    system_temp: float
    hvac_compressor: float
    radiator_fan: float
    power_steering: float


class SimulationSnapshot(BaseModel):
    """Full state captured at a run-progress mark."""

    elapsed_time: float
    motion: CarMotionState
    metrics: SystemMetrics
    scenario: Scenario


class SimulationSummary(BaseModel):
    """Aggregates over a whole run."""

    duration: float
    """Virtual seconds simulated."""

    ticks: int

    avg_power_draw: float
    """Mean resolved draw across every tick (W)."""

    peak_power_draw: float
    overload_events: int
    """Integrity-breach alerts issued."""

    temp_warnings: int
    final_battery: float
    final_soh: float
    energy_totals_wh: dict[str, float] = Field(default_factory=dict)
    """Cumulative energy per subsystem over actual simulated time (Wh)."""


class SimulationResult(BaseModel):
    """Top-level output of one simulation run."""

    config: SimulationConfig
    summary: SimulationSummary
    history: list[HistoryEntry] = Field(default_factory=list)
    snapshots: list[SimulationSnapshot] = Field(default_factory=list)
    alerts: list[Alert] = Field(default_factory=list)
    """Recent alerts at the end of the run, newest first."""

    final_motion: CarMotionState
    final_metrics: SystemMetrics
    final_scenario: Scenario
    final_distribution: PowerDistribution = Field(default_factory=dict)
