"""Load integrity check and priority-ordered load shedding.

When total demand exceeds available power:
  1. raise one integrity alert naming the deficit;
  2. walk subsystems in ascending priority (lowest shed first, ties in
     registry order) and cut each toward its floor — 0 W for variable
     loads, half of base power for constant loads — until the deficit is
     covered or the list is exhausted.

Every allocation is then clamped to [0, max_power].  This is a greedy
single pass: if the reducible headroom cannot cover the deficit the
result still exceeds available power, which is accepted.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from vpd_simulator.config.subsystems import SubsystemSpec
from vpd_simulator.engine.alerts import INTEGRITY, make_alert
from vpd_simulator.models.results import Alert, SystemMetrics

logger = logging.getLogger(__name__)

CONSTANT_LOAD_FLOOR_SHARE = 0.5


@dataclass(frozen=True)
class SheddingResult:
    """Immutable output of one resolution pass."""

    final_distribution: dict[str, float]
    alerts: list[Alert] = field(default_factory=list)
    total_demand: float = 0.0
    """Sum of demand before shedding (W)."""

    deficit: float = 0.0
    """Demand in excess of available power before shedding (W); 0 when within budget."""

    shed_watts: float = 0.0
    """Power actually removed by shedding (W)."""


def shedding_floor(spec: SubsystemSpec) -> float:
    return spec.base_power * CONSTANT_LOAD_FLOOR_SHARE if spec.is_constant else 0.0


def resolve_load(
    demand: Mapping[str, float],
    metrics: SystemMetrics,
    subsystems: Sequence[SubsystemSpec],
    timestamp: float = 0.0,
) -> SheddingResult:
    """Shed load by priority if needed, then clamp every allocation."""
    final = dict(demand)
    alerts: list[Alert] = []
    total = sum(final.values())
    deficit = max(0.0, total - metrics.available_power)
    shed = 0.0

    if deficit > 0:
        alerts.append(make_alert(
            INTEGRITY,
            f"Power integrity breach: Demand of {total:.0f}W exceeds available "
            f"{metrics.available_power:.0f}W. Initiating load shedding.",
            timestamp,
        ))

        remaining = deficit
        for spec in sorted(subsystems, key=lambda s: s.priority):
            if remaining <= 0:
                break
            reducible = final.get(spec.id, 0.0) - shedding_floor(spec)
            if reducible > 0:
                cut = min(remaining, reducible)
                final[spec.id] -= cut
                remaining -= cut
                shed += cut

        logger.info("load shed: demand=%.0fW available=%.0fW shed=%.0fW unresolved=%.0fW",
                    total, metrics.available_power, shed, max(0.0, remaining))

    for spec in subsystems:
        if spec.id in final:
            final[spec.id] = min(spec.max_power, max(0.0, final[spec.id]))

    return SheddingResult(
        final_distribution=final,
        alerts=alerts,
        total_demand=total,
        deficit=deficit,
        shed_watts=shed,
    )
