"""Common auxiliary demand rules — applied after every powertrain calculator.

Lighting, climate, wipers, chassis assists, infotainment and body-specific
equipment draw the same way regardless of drivetrain.  Both functions
return a new demand map; the input is never modified.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from vpd_simulator.config.motion import CarAction, CarMotionState
from vpd_simulator.config.scenario import RoadCondition, Scenario, Terrain, TimeOfDay
from vpd_simulator.config.subsystems import SubsystemSpec
from vpd_simulator.config.vehicle import BodyType, VehicleConfig
from vpd_simulator.engine.powertrains import find_subsystem
from vpd_simulator.models.results import SystemMetrics

COMFORT_TARGET_C = 21.0
COMPRESSOR_ON_ABOVE_C = 24.0
HVAC_BLOWER_BASE_W = 50.0
HVAC_BLOWER_W_PER_C = 15.0
HVAC_COMPRESSOR_W_PER_C = 50.0

ABS_BRAKING_W = 100.0
ABS_ROAD_FACTOR: dict[RoadCondition, float] = {
    RoadCondition.DRY: 1.0,
    RoadCondition.WET: 1.2,
    RoadCondition.ICY: 1.5,
}
STEERING_TURN_W = 400.0
STEERING_LOW_SPEED = 30.0

HEADLIGHTS_W = 110.0
TAIL_LIGHTS_W = 20.0
CLUSTER_NIGHT_EXTRA_W = 20.0
FOG_LIGHTS_W = 80.0

WIPER_FAST_W = 100.0
WIPER_SLOW_W = 50.0

AUDIO_MIN_SPEED = 5.0
AUDIO_LOUD_SPEED = 20.0
AUDIO_LOUD_EXTRA_W = 50.0
SPEAKER_SHARE = 0.5

AIR_BRAKE_MAINTAIN_W = 150.0
EMERGENCY_RESPONSE_SPEED = 60.0

RADIATOR_FAN_ON_ABOVE_C = 60.0
RADIATOR_FAN_W_PER_C = 10.0
RADIATOR_FAN_UPHILL_FACTOR = 1.2

AIR_BRAKE_BODIES = frozenset({BodyType.TRUCK, BodyType.BUS})


def apply_auxiliary_demand(
    demand: Mapping[str, float],
    config: VehicleConfig,
    motion: CarMotionState,
    scenario: Scenario,
    subsystems: Sequence[SubsystemSpec],
) -> dict[str, float]:
    """Add lighting, climate, chassis, infotainment and body-specific loads."""
    out = dict(demand)
    braking = motion.action == CarAction.BRAKING

    # ── Chassis & safety ────────────────────────────────────────────────
    if braking:
        out["abs_module"] += ABS_BRAKING_W * ABS_ROAD_FACTOR[scenario.road_condition]
    if motion.action == CarAction.TURNING:
        out["power_steering"] += STEERING_TURN_W * (1.0 if motion.speed < STEERING_LOW_SPEED else 0.5)

    # ── Lighting ────────────────────────────────────────────────────────
    if motion.lights_on:
        out["headlights"] = HEADLIGHTS_W
        out["tail_lights"] = TAIL_LIGHTS_W
        out["instrument_cluster"] += CLUSTER_NIGHT_EXTRA_W
        if scenario.has_precipitation:
            out["fog_lights"] = FOG_LIGHTS_W
    else:
        out["daytime_running_lights"] = find_subsystem(subsystems, "daytime_running_lights").base_power
    if braking and motion.speed > 0:
        out["brake_lights"] = find_subsystem(subsystems, "brake_lights").max_power

    # ── Climate ─────────────────────────────────────────────────────────
    if motion.hvac_on:
        gap = abs(scenario.outside_temp - COMFORT_TARGET_C)
        out["hvac_blower"] = min(
            find_subsystem(subsystems, "hvac_blower").max_power,
            HVAC_BLOWER_BASE_W + gap * HVAC_BLOWER_W_PER_C,
        )
        if scenario.outside_temp > COMPRESSOR_ON_ABOVE_C:
            out["hvac_compressor"] = min(
                find_subsystem(subsystems, "hvac_compressor").max_power,
                gap * HVAC_COMPRESSOR_W_PER_C,
            )
    if motion.seat_heaters_on:
        out["seat_heaters"] = find_subsystem(subsystems, "seat_heaters").max_power

    # ── Wipers ──────────────────────────────────────────────────────────
    if motion.wipers_on:
        out["wipers"] = WIPER_FAST_W if scenario.has_precipitation else WIPER_SLOW_W

    # ── Infotainment & interior ─────────────────────────────────────────
    if motion.speed > AUDIO_MIN_SPEED:
        audio = find_subsystem(subsystems, "audio_system").base_power
        if motion.speed > AUDIO_LOUD_SPEED:
            audio += AUDIO_LOUD_EXTRA_W
        out["audio_system"] = audio
        out["speakers"] = audio * SPEAKER_SHARE
    if scenario.time_of_day == TimeOfDay.NIGHT:
        out["dome_light"] = find_subsystem(subsystems, "dome_light").base_power

    # ── Body-specific equipment ─────────────────────────────────────────
    if config.body_type in AIR_BRAKE_BODIES:
        if braking:
            out["air_brake_compressor"] = find_subsystem(subsystems, "air_brake_compressor").max_power
        elif motion.speed > 0:
            out["air_brake_compressor"] = AIR_BRAKE_MAINTAIN_W
    if (
        config.body_type == BodyType.SPECIAL
        and config.sub_type == "Emergency"
        and motion.speed > EMERGENCY_RESPONSE_SPEED
    ):
        out["siren"] = find_subsystem(subsystems, "siren").max_power
        out["strobe_lights"] = find_subsystem(subsystems, "strobe_lights").max_power

    return out


def apply_radiator_fan(
    demand: Mapping[str, float],
    metrics: SystemMetrics,
    scenario: Scenario,
) -> dict[str, float]:
    """Radiator fan ramps with the previous tick's temperature above 60 °C."""
    out = dict(demand)
    excess = max(0.0, metrics.system_temp - RADIATOR_FAN_ON_ABOVE_C)
    factor = RADIATOR_FAN_UPHILL_FACTOR if scenario.terrain == Terrain.UPHILL else 1.0
    out["radiator_fan"] = excess * RADIATOR_FAN_W_PER_C * factor
    return out
