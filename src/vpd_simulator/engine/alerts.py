"""Alert evaluation with de-duplication against recent history.

Categories (id prefixes):
  sys-overload   draw above 90 % of available power (but not above 100 %)
  sys-temp       system temperature above 80 °C
  sys-battery    state of charge below 15 %
  sys-health     state of health below 90 %

Integrity breaches (draw above 100 %) are raised by the shedding resolver
under ``sys-integrity``.  A category is suppressed when an alert with the
same prefix appears in ``recent_alerts`` within the de-duplication window.
"""

from __future__ import annotations

from collections.abc import Iterable

from vpd_simulator.models.results import Alert, SystemMetrics

OVERLOAD = "sys-overload"
OVER_TEMPERATURE = "sys-temp"
LOW_BATTERY = "sys-battery"
DEGRADED_HEALTH = "sys-health"
INTEGRITY = "sys-integrity"

HIGH_LOAD_FRACTION = 0.9
OVER_TEMPERATURE_C = 80.0
LOW_CHARGE_PCT = 15.0
DEGRADED_SOH_PCT = 90.0
DEFAULT_WINDOW_S = 10.0


def make_alert(prefix: str, message: str, timestamp: float, subsystem: str = "system") -> Alert:
    return Alert(id=f"{prefix}-{timestamp:.3f}", subsystem=subsystem, message=message, timestamp=timestamp)


def is_recent(
    prefix: str,
    recent_alerts: Iterable[Alert],
    now: float,
    window_seconds: float = DEFAULT_WINDOW_S,
) -> bool:
    """True if an alert of this category was issued less than ``window_seconds`` ago."""
    return any(
        a.prefix == prefix and (now - a.timestamp) < window_seconds
        for a in recent_alerts
    )


def evaluate_alerts(
    metrics: SystemMetrics,
    recent_alerts: Iterable[Alert] = (),
    now: float = 0.0,
    window_seconds: float = DEFAULT_WINDOW_S,
) -> list[Alert]:
    """New alerts for ``metrics`` that are not duplicates of recent ones."""
    recent = list(recent_alerts)
    candidates: list[tuple[str, str]] = []

    draw, available = metrics.total_power_draw, metrics.available_power
    if available * HIGH_LOAD_FRACTION < draw <= available:
        candidates.append((OVERLOAD, f"High Load: {draw:.0f}W draw nearing capacity."))
    if metrics.system_temp > OVER_TEMPERATURE_C:
        candidates.append((OVER_TEMPERATURE, f"High Temperature: {metrics.system_temp:.1f}°C."))
    if metrics.battery_charge < LOW_CHARGE_PCT:
        candidates.append((LOW_BATTERY, f"Low Battery: {metrics.battery_charge:.1f}%."))
    if metrics.battery_soh < DEGRADED_SOH_PCT:
        candidates.append((DEGRADED_HEALTH, f"Battery Health Degraded: {metrics.battery_soh:.1f}% SoH."))

    return [
        make_alert(prefix, message, now)
        for prefix, message in candidates
        if not is_recent(prefix, recent, now, window_seconds)
    ]
