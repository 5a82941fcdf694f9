"""Simulation runner — the multi-tick loop around ``run_tick``.

The tick function owns the physics; the runner owns everything that
persists between ticks:
  - the random generator driving behaviour and scenario changes
  - the bounded recent-alert list (newest first) used for de-duplication
  - a rolling history buffer and progress snapshots
  - cumulative per-subsystem energy and alert counters

Each tick follows this sequence:
  scenario drift → motion update → auto-managed switches
  → run_tick → accumulate

Entry point: ``run_simulation(config)``.
"""

from __future__ import annotations

import logging

import numpy as np

from vpd_simulator.config.scenario import Scenario, SimulationConfig
from vpd_simulator.config.subsystems import SUBSYSTEMS
from vpd_simulator.engine.alerts import INTEGRITY, OVER_TEMPERATURE
from vpd_simulator.engine.behavior import (
    auto_manage_systems,
    force_scenario,
    update_car_state,
    update_scenario,
)
from vpd_simulator.engine.defaults import default_metrics, default_motion_state
from vpd_simulator.engine.tick import run_tick
from vpd_simulator.models.results import (
    Alert,
    HistoryEntry,
    PowerDistribution,
    SimulationResult,
    SimulationSnapshot,
    SimulationSummary,
    TickResult,
)

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3_600.0


class SimulationRunner:
    """Stateful driver for one simulation run.

    Usage::

        runner = SimulationRunner(config)
        while not runner.finished:
            runner.step()
        result = runner.result()

    or simply ``SimulationRunner(config).run()``.
    """

    def __init__(self, config: SimulationConfig) -> None:
        self.config = config
        self.rng = np.random.default_rng(config.random_seed)
        self.specs = SUBSYSTEMS

        self.motion = default_motion_state()
        self.metrics = default_metrics(config.vehicle)
        self.scenario = config.scenario
        self.distribution: PowerDistribution = {s.id: 0.0 for s in self.specs}

        self.ticks = 0
        self.alerts: list[Alert] = []
        self.history: list[HistoryEntry] = []
        self.snapshots: list[SimulationSnapshot] = []
        self.pattern_changes: list[float] = []
        self.energy_totals_wh: dict[str, float] = {s.id: 0.0 for s in self.specs}

        self.overload_events = 0
        self.temp_warnings = 0
        self._draw_sum = 0.0
        self._peak_draw = 0.0
        self._marks_taken: set[float] = set()

    # ── Clocks ──────────────────────────────────────────────────────────

    @property
    def virtual_elapsed(self) -> float:
        return self.ticks * self.config.tick_seconds

    @property
    def actual_elapsed(self) -> float:
        return self.ticks * self.config.dt_seconds

    @property
    def finished(self) -> bool:
        return self.virtual_elapsed >= self.config.virtual_duration_s

    # ── Loop ────────────────────────────────────────────────────────────

    def step(self) -> TickResult:
        """Advance one tick and fold the result into the run state."""
        cfg = self.config
        now = (self.ticks + 1) * cfg.tick_seconds

        # ── 1. Caller-side inputs ───────────────────────────────────────
        scenario = update_scenario(self.scenario, self.rng) if cfg.auto_scenario else self.scenario
        motion = update_car_state(self.motion, scenario.region, cfg.driving_style, scenario.terrain, self.rng)
        motion = auto_manage_systems(motion, self.motion, scenario, self.rng)

        # ── 2. Physics ──────────────────────────────────────────────────
        result = run_tick(
            cfg.vehicle,
            motion,
            self.metrics,
            scenario,
            self.specs,
            recent_alerts=self.alerts,
            now=now,
            dt_seconds=cfg.dt_seconds,
            window_seconds=cfg.alert_window_seconds,
        )

        # ── 3. Accumulate ───────────────────────────────────────────────
        self.ticks += 1
        self.motion = result.motion
        self.metrics = result.metrics
        self.scenario = result.scenario
        self.distribution = result.distribution

        hours = cfg.dt_seconds / SECONDS_PER_HOUR
        for sid, watts in result.distribution.items():
            self.energy_totals_wh[sid] = self.energy_totals_wh.get(sid, 0.0) + watts * hours

        if result.alerts:
            self.alerts = (result.alerts + self.alerts)[: cfg.alert_history_limit]
            for alert in result.alerts:
                if alert.prefix == INTEGRITY:
                    self.overload_events += 1
                elif alert.prefix == OVER_TEMPERATURE:
                    self.temp_warnings += 1

        draw = result.metrics.total_power_draw
        self._draw_sum += draw
        self._peak_draw = max(self._peak_draw, draw)

        self.history.append(HistoryEntry(
            timestamp=now,
            total_power_draw=draw,
            battery_charge=result.metrics.battery_charge,
            system_temp=result.metrics.system_temp,
            hvac_compressor=result.distribution.get("hvac_compressor", 0.0),
            radiator_fan=result.distribution.get("radiator_fan", 0.0),
            power_steering=result.distribution.get("power_steering", 0.0),
        ))
        if len(self.history) > cfg.history_limit:
            self.history = self.history[-cfg.history_limit:]

        # One snapshot per tick at most; a skipped mark is caught next tick.
        progress = now / cfg.virtual_duration_s
        for mark in cfg.snapshot_marks:
            if progress >= mark and mark not in self._marks_taken:
                self._marks_taken.add(mark)
                self.snapshots.append(SimulationSnapshot(
                    elapsed_time=round(now),
                    motion=self.motion,
                    metrics=self.metrics,
                    scenario=self.scenario,
                ))
                break

        return result

    def force_pattern_change(self) -> Scenario:
        """Replace the scenario with a freshly drawn one.

        No-op when the scenario is pinned (``auto_scenario`` is off).
        """
        if not self.config.auto_scenario:
            return self.scenario
        self.scenario = force_scenario(self.rng)
        self.pattern_changes.append(self.virtual_elapsed)
        logger.debug("pattern change at t=%.1f: %s/%s/%s", self.virtual_elapsed,
                     self.scenario.region.value, self.scenario.weather.value,
                     self.scenario.terrain.value)
        return self.scenario

    def summary(self) -> SimulationSummary:
        return SimulationSummary(
            duration=self.virtual_elapsed,
            ticks=self.ticks,
            avg_power_draw=self._draw_sum / self.ticks if self.ticks else 0.0,
            peak_power_draw=self._peak_draw,
            overload_events=self.overload_events,
            temp_warnings=self.temp_warnings,
            final_battery=self.metrics.battery_charge,
            final_soh=self.metrics.battery_soh,
            energy_totals_wh=dict(self.energy_totals_wh),
        )

    def result(self) -> SimulationResult:
        return SimulationResult(
            config=self.config,
            summary=self.summary(),
            history=list(self.history),
            snapshots=list(self.snapshots),
            alerts=list(self.alerts),
            final_motion=self.motion,
            final_metrics=self.metrics,
            final_scenario=self.scenario,
            final_distribution=dict(self.distribution),
        )

    def run(self) -> SimulationResult:
        """Step until the virtual duration elapses and return the result."""
        while not self.finished:
            self.step()
        summary = self.summary()
        logger.info("simulation complete: %d ticks, avg=%.0fW peak=%.0fW battery=%.1f%% soh=%.3f%%",
                    summary.ticks, summary.avg_power_draw, summary.peak_power_draw,
                    summary.final_battery, summary.final_soh)
        return self.result()


# ═══════════════════════════════════════════════════════════════════════════
# Public entry point
# ═══════════════════════════════════════════════════════════════════════════

def run_simulation(config: SimulationConfig | None = None) -> SimulationResult:
    """Run a full simulation and return its result."""
    return SimulationRunner(config or SimulationConfig()).run()
