"""Electro-thermal battery model — advances SystemMetrics by one tick.

A lumped, single-node model.  Per tick, in order:

  1. total draw        P_draw = Σ resolved distribution
  2. degradation       ΔSoH = base × f(C-rate) × f(temperature) × f(SoC); fixed self-drain
  3. net power         P_net = charge_effect − P_draw            (positive charges)
  4. current           I = −P_net / V_prev                        (positive discharges)
  5. temperature       R_eff = R × f(cold) × f(ageing)
                       ΔT = (I²·R_eff − h·(T − T_out)⁺) · dt / (m · c_p)
  6. voltage           V = OCV(SoC_prev) − I · R_eff
  7. state of charge   ΔSoC = P_net · dt / 3600 / (C_Wh · SoH) × 100 − self-drain
  8. available power   3C × derated Ah × V, scaled for low SoC, sub-zero
                       temperature and SoH, plus any positive charge effect

Every division is guarded (the dependent update is skipped) and every
field is clamped into its physical band.  SoH never increases.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from vpd_simulator.config.battery import BatteryParameters, get_battery_parameters
from vpd_simulator.config.scenario import Scenario
from vpd_simulator.config.vehicle import VehicleConfig
from vpd_simulator.models.results import SystemMetrics

logger = logging.getLogger(__name__)

DEFAULT_DT_S = 1.5
SECONDS_PER_HOUR = 3_600.0
EPSILON = 1e-9

# ── Degradation ──────────────────────────────────────────────────────────
BASE_SOH_LOSS_PCT = 0.0002
"""SoH lost per tick under benign conditions (%)."""

SELF_DRAIN_PCT = 0.0001
"""SoC lost per tick to self-discharge and parasitic loads (%)."""

HIGH_C_RATE = 2.0
HIGH_C_RATE_FACTOR = 3.0
ELEVATED_C_RATE = 1.0
ELEVATED_C_RATE_FACTOR = 1.5
HOT_TEMP_C = 70.0
HOT_TEMP_FACTOR = 4.0
WARM_TEMP_C = 50.0
WARM_TEMP_FACTOR = 2.0
COLD_TEMP_C = 5.0
COLD_TEMP_FACTOR = 1.2
LOW_SOC_STRESS_PCT = 20.0
HIGH_SOC_STRESS_PCT = 95.0
SOC_STRESS_FACTOR = 1.5

# ── Thermal ──────────────────────────────────────────────────────────────
REFERENCE_TEMP_C = 25.0
COLD_RESISTANCE_PER_C = 0.02
AGEING_RESISTANCE_FACTOR = 1.5
COOLING_W_PER_C_PER_KG = 0.5
MIN_TEMP_C = -10.0
MAX_TEMP_C = 90.0

# ── Voltage ──────────────────────────────────────────────────────────────
OCV_EMPTY_RATIO = 0.90
OCV_FULL_RATIO = 1.05
MIN_VOLTAGE_RATIO = 0.5

# ── Available power ──────────────────────────────────────────────────────
MAX_DISCHARGE_C_RATE = 3.0
LOW_SOC_POWER_PCT = 10.0
SUB_ZERO_POWER_PER_C = 1.0 / 40.0
MIN_COLD_POWER_FACTOR = 0.5


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# ═══════════════════════════════════════════════════════════════════════════
# Building blocks
# ═══════════════════════════════════════════════════════════════════════════

def c_rate(current_a: float, params: BatteryParameters) -> float:
    """Absolute current as a multiple of rated Ah capacity."""
    capacity_ah = params.capacity_ah
    return abs(current_a) / capacity_ah if capacity_ah > EPSILON else 0.0


def soh_decrement(metrics: SystemMetrics, params: BatteryParameters) -> float:
    """SoH loss (%) for one tick given the stress the pack was under."""
    loss = BASE_SOH_LOSS_PCT

    rate = c_rate(metrics.battery_current, params)
    if rate > HIGH_C_RATE:
        loss *= HIGH_C_RATE_FACTOR
    elif rate > ELEVATED_C_RATE:
        loss *= ELEVATED_C_RATE_FACTOR

    temp = metrics.system_temp
    if temp > HOT_TEMP_C:
        loss *= HOT_TEMP_FACTOR
    elif temp > WARM_TEMP_C:
        loss *= WARM_TEMP_FACTOR
    elif temp < COLD_TEMP_C:
        loss *= COLD_TEMP_FACTOR

    if metrics.battery_charge < LOW_SOC_STRESS_PCT or metrics.battery_charge > HIGH_SOC_STRESS_PCT:
        loss *= SOC_STRESS_FACTOR

    return loss


def effective_resistance(params: BatteryParameters, temp_c: float, soh_pct: float) -> float:
    """Internal resistance raised by cold and by capacity fade."""
    resistance = params.internal_resistance_ohms
    if temp_c < REFERENCE_TEMP_C:
        resistance *= 1.0 + COLD_RESISTANCE_PER_C * (REFERENCE_TEMP_C - temp_c)
    resistance *= 1.0 + AGEING_RESISTANCE_FACTOR * (100.0 - soh_pct) / 100.0
    return resistance


def open_circuit_voltage(params: BatteryParameters, soc_pct: float) -> float:
    """Linear OCV curve between the empty and full ratios of nominal voltage."""
    ratio = OCV_EMPTY_RATIO + (OCV_FULL_RATIO - OCV_EMPTY_RATIO) * _clamp(soc_pct, 0.0, 100.0) / 100.0
    return params.nominal_voltage * ratio


def compute_available_power(
    params: BatteryParameters,
    soc_pct: float,
    soh_pct: float,
    temp_c: float,
    voltage: float,
    charge_effect: float = 0.0,
) -> float:
    """Power the bus can deliver: battery discharge ceiling plus live generation."""
    derated_ah = params.capacity_ah * soh_pct / 100.0
    power = MAX_DISCHARGE_C_RATE * derated_ah * voltage

    if soc_pct < LOW_SOC_POWER_PCT:
        power *= soc_pct / LOW_SOC_POWER_PCT
    if temp_c < 0:
        power *= max(MIN_COLD_POWER_FACTOR, 1.0 + temp_c * SUB_ZERO_POWER_PER_C)
    power *= soh_pct / 100.0

    return max(0.0, power) + max(0.0, charge_effect)


# ═══════════════════════════════════════════════════════════════════════════
# One tick
# ═══════════════════════════════════════════════════════════════════════════

def advance_battery(
    prev: SystemMetrics,
    final_distribution: Mapping[str, float],
    charge_effect: float,
    config: VehicleConfig,
    scenario: Scenario,
    dt_seconds: float = DEFAULT_DT_S,
    params: BatteryParameters | None = None,
) -> SystemMetrics:
    """Return the metrics after one tick.  ``prev`` is not modified."""
    params = params or get_battery_parameters(config)

    # ── 1. Total draw ───────────────────────────────────────────────────
    total_draw = sum(final_distribution.values())

    # ── 2. Degradation ──────────────────────────────────────────────────
    soh = _clamp(prev.battery_soh - soh_decrement(prev, params), 0.0, 100.0)
    soh = min(soh, prev.battery_soh)

    # ── 3. Net battery power ────────────────────────────────────────────
    net_power = charge_effect - total_draw

    # ── 4. Current ──────────────────────────────────────────────────────
    current = -net_power / prev.battery_voltage if prev.battery_voltage > EPSILON else 0.0

    # ── 5. Temperature ──────────────────────────────────────────────────
    resistance = effective_resistance(params, prev.system_temp, soh)
    heating = current * current * resistance
    cooling = 0.0
    if prev.system_temp > scenario.outside_temp:
        cooling = COOLING_W_PER_C_PER_KG * params.mass_kg * (prev.system_temp - scenario.outside_temp)
    temp = prev.system_temp
    heat_capacity = params.mass_kg * params.specific_heat_capacity
    if heat_capacity > EPSILON:
        temp += (heating - cooling) * dt_seconds / heat_capacity
    temp = _clamp(temp, MIN_TEMP_C, MAX_TEMP_C)

    # ── 6. Voltage ──────────────────────────────────────────────────────
    voltage = open_circuit_voltage(params, prev.battery_charge) - current * resistance
    voltage = max(voltage, params.nominal_voltage * MIN_VOLTAGE_RATIO)

    # ── 7. State of charge ──────────────────────────────────────────────
    soc = prev.battery_charge
    effective_capacity_wh = params.capacity_wh * soh / 100.0
    if effective_capacity_wh > EPSILON:
        energy_wh = net_power * dt_seconds / SECONDS_PER_HOUR
        soc += energy_wh / effective_capacity_wh * 100.0
    soc = _clamp(soc - SELF_DRAIN_PCT, 0.0, 100.0)

    # ── 8. Available power ──────────────────────────────────────────────
    available = compute_available_power(params, soc, soh, temp, voltage, charge_effect)

    logger.debug("battery: net=%.0fW I=%.1fA V=%.2f T=%.2f SoC=%.3f SoH=%.5f avail=%.0fW",
                 net_power, current, voltage, temp, soc, soh, available)

    return SystemMetrics(
        battery_charge=soc,
        battery_soh=soh,
        battery_voltage=voltage,
        battery_current=current,
        system_temp=temp,
        total_power_draw=total_draw,
        available_power=available,
    )
