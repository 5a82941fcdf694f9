"""Tick function — one simulation step of the power distribution engine.

Each call runs this chain:
  dispatcher → powertrain calculator → auxiliary rules → radiator fan
  → load shedding → battery model → alert evaluation

and returns the next state.  The function is pure: no randomness, no I/O
and no mutation of its inputs.  Rolling buffers, timers and the driving
generator are the caller's concern (see ``orchestrator``).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from vpd_simulator.config.motion import CarMotionState
from vpd_simulator.config.scenario import Scenario
from vpd_simulator.config.subsystems import SUBSYSTEMS, SubsystemSpec
from vpd_simulator.config.vehicle import VehicleConfig
from vpd_simulator.engine.alerts import DEFAULT_WINDOW_S, evaluate_alerts
from vpd_simulator.engine.auxiliary import apply_auxiliary_demand, apply_radiator_fan
from vpd_simulator.engine.battery_model import DEFAULT_DT_S, advance_battery
from vpd_simulator.engine.dispatch import select_calculator
from vpd_simulator.engine.shedding import resolve_load
from vpd_simulator.models.results import Alert, SystemMetrics, TickResult

logger = logging.getLogger(__name__)


def run_tick(
    config: VehicleConfig,
    motion: CarMotionState,
    metrics: SystemMetrics,
    scenario: Scenario,
    specs: Sequence[SubsystemSpec] = SUBSYSTEMS,
    recent_alerts: Iterable[Alert] = (),
    now: float = 0.0,
    dt_seconds: float = DEFAULT_DT_S,
    window_seconds: float = DEFAULT_WINDOW_S,
) -> TickResult:
    """Advance the electrical system by one tick.

    Args:
        config: Vehicle configuration (fixed for a run).
        motion: Motion state for this tick, as produced by the caller.
        metrics: Metrics from the previous tick.
        scenario: Operating scenario for this tick; returned unchanged.
        specs: Subsystem registry.
        recent_alerts: Alerts already issued, used for de-duplication.
        now: Simulated seconds since run start; stamps new alerts.
        dt_seconds: Simulated seconds the battery model integrates over.
        window_seconds: De-duplication window for repeat alerts.

    Returns:
        ``TickResult`` with the next motion (ignition flag cleared), new
        metrics, the resolved distribution, new alerts (integrity first),
        the scenario and the calculator's charge effect.
    """
    # ── 1. Powertrain demand ────────────────────────────────────────────
    calculator = select_calculator(config)
    result = calculator(config, motion, metrics, scenario, specs)

    # ── 2. Auxiliary loads ──────────────────────────────────────────────
    demand = apply_auxiliary_demand(result.demand, config, motion, scenario, specs)
    demand = apply_radiator_fan(demand, metrics, scenario)

    # ── 3. Integrity check / shedding ───────────────────────────────────
    shedding = resolve_load(demand, metrics, specs, timestamp=now)

    # ── 4. Battery ──────────────────────────────────────────────────────
    next_metrics = advance_battery(
        metrics,
        shedding.final_distribution,
        result.charge_effect,
        config,
        scenario,
        dt_seconds,
    )

    # ── 5. Alerts ───────────────────────────────────────────────────────
    history = list(shedding.alerts) + list(recent_alerts)
    alerts = shedding.alerts + evaluate_alerts(next_metrics, history, now, window_seconds)

    logger.debug("tick t=%.1f draw=%.0fW avail=%.0fW alerts=%d",
                 now, next_metrics.total_power_draw, next_metrics.available_power, len(alerts))

    return TickResult(
        motion=motion.model_copy(update={"is_ignition_cycle": False}),
        metrics=next_metrics,
        distribution=shedding.final_distribution,
        alerts=alerts,
        scenario=scenario,
        charge_effect=result.charge_effect,
    )
