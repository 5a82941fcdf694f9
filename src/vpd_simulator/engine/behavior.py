"""Driving behaviour and scenario generator — the caller-side random input.

The tick function is deterministic; this module produces the motion state
and scenario it consumes.  Every function takes a caller-supplied
``np.random.Generator`` so a seeded runner is fully reproducible.

Action selection:
  P(action) ∝ region base probability × driving-style multiplier

Speed response (km/h per tick):
  accelerating   +15 × style factor + terrain effect, capped at 180
  braking        −20 × style factor + terrain effect, floored at 0
  cruising       ±2.5 jitter + terrain effect, clamped to [20, limit × style]
  idle           −10 + terrain effect
  turning        −5 + terrain effect, capped at 40

Terrain effect is −5 uphill, +5 downhill.
"""

from __future__ import annotations

import numpy as np

from vpd_simulator.config.motion import CarAction, CarMotionState, DrivingStyle
from vpd_simulator.config.scenario import (
    PRECIPITATION,
    Region,
    RoadCondition,
    Scenario,
    Terrain,
    TimeOfDay,
    TrafficDensity,
    Weather,
)


# ═══════════════════════════════════════════════════════════════════════════
# Tables
# ═══════════════════════════════════════════════════════════════════════════

ACTION_ORDER: tuple[CarAction, ...] = (
    CarAction.ACCELERATING,
    CarAction.BRAKING,
    CarAction.CRUISING,
    CarAction.IDLE,
    CarAction.TURNING,
)

REGION_ACTION_PROBS: dict[Region, dict[CarAction, float]] = {
    Region.CITY: {
        CarAction.ACCELERATING: 0.3, CarAction.BRAKING: 0.4, CarAction.IDLE: 0.2,
        CarAction.CRUISING: 0.1, CarAction.TURNING: 0.1,
    },
    Region.SUBURBAN: {
        CarAction.ACCELERATING: 0.25, CarAction.BRAKING: 0.2, CarAction.IDLE: 0.1,
        CarAction.CRUISING: 0.45, CarAction.TURNING: 0.08,
    },
    Region.HIGHWAY: {
        CarAction.ACCELERATING: 0.1, CarAction.BRAKING: 0.05, CarAction.IDLE: 0.05,
        CarAction.CRUISING: 0.8, CarAction.TURNING: 0.02,
    },
    Region.OFFROAD: {
        CarAction.ACCELERATING: 0.4, CarAction.BRAKING: 0.3, CarAction.IDLE: 0.1,
        CarAction.CRUISING: 0.2, CarAction.TURNING: 0.1,
    },
}
"""Un-normalised base probability of each action per region."""

STYLE_ACTION_MULTIPLIERS: dict[DrivingStyle, dict[CarAction, float]] = {
    DrivingStyle.ECO: {
        CarAction.ACCELERATING: 0.5, CarAction.BRAKING: 1.0, CarAction.CRUISING: 1.5,
        CarAction.IDLE: 1.2, CarAction.TURNING: 1.0,
    },
    DrivingStyle.COMFORT: {
        CarAction.ACCELERATING: 0.8, CarAction.BRAKING: 1.0, CarAction.CRUISING: 1.2,
        CarAction.IDLE: 1.1, CarAction.TURNING: 1.0,
    },
    DrivingStyle.NORMAL: {
        CarAction.ACCELERATING: 1.0, CarAction.BRAKING: 1.0, CarAction.CRUISING: 1.0,
        CarAction.IDLE: 1.0, CarAction.TURNING: 1.0,
    },
    DrivingStyle.SPORT: {
        CarAction.ACCELERATING: 1.5, CarAction.BRAKING: 1.2, CarAction.CRUISING: 0.7,
        CarAction.IDLE: 0.8, CarAction.TURNING: 1.0,
    },
    DrivingStyle.AGGRESSIVE: {
        CarAction.ACCELERATING: 2.0, CarAction.BRAKING: 1.5, CarAction.CRUISING: 0.5,
        CarAction.IDLE: 0.5, CarAction.TURNING: 1.0,
    },
}

STYLE_SPEED_FACTOR: dict[DrivingStyle, float] = {
    DrivingStyle.ECO: 0.7,
    DrivingStyle.COMFORT: 0.9,
    DrivingStyle.NORMAL: 1.0,
    DrivingStyle.SPORT: 1.2,
    DrivingStyle.AGGRESSIVE: 1.5,
}

WEATHER_TEMPERATURE_C: dict[Weather, float] = {
    Weather.SUNNY: 28.0,
    Weather.CLOUDY: 18.0,
    Weather.RAINY: 12.0,
    Weather.SNOWY: -2.0,
}

ACCEL_STEP = 15.0
BRAKE_STEP = 20.0
IDLE_STEP = 10.0
TURN_STEP = 5.0
CRUISE_JITTER = 5.0
CRUISE_MIN_SPEED = 20.0
CRUISE_LIMIT = 80.0
CRUISE_LIMIT_HIGHWAY = 130.0
TURN_MAX_SPEED = 40.0
MAX_SPEED = 180.0
TERRAIN_SPEED_EFFECT = 5.0

SEAT_HEATER_BELOW_C = 5.0
HVAC_HOT_ABOVE_C = 25.0
HVAC_COLD_BELOW_C = 15.0
HVAC_TOGGLE_PROBABILITY = 0.5

REGION_CHANGE_P = 0.10
WEATHER_CHANGE_P = 0.05
TIME_CHANGE_P = 0.05
TRAFFIC_CHANGE_P = 0.05
TERRAIN_CHANGE_P = 0.05


def road_condition_for(weather: Weather) -> RoadCondition:
    if weather == Weather.RAINY:
        return RoadCondition.WET
    if weather == Weather.SNOWY:
        return RoadCondition.ICY
    return RoadCondition.DRY


def _pick(options, rng: np.random.Generator):
    options = list(options)
    return options[int(rng.integers(len(options)))]


# ═══════════════════════════════════════════════════════════════════════════
# Motion
# ═══════════════════════════════════════════════════════════════════════════

def action_probabilities(region: Region, style: DrivingStyle) -> np.ndarray:
    """Normalised probabilities aligned with ``ACTION_ORDER``."""
    base = REGION_ACTION_PROBS[region]
    mult = STYLE_ACTION_MULTIPLIERS[style]
    weights = np.array([base[a] * mult[a] for a in ACTION_ORDER], dtype=float)
    return weights / weights.sum()


def next_action(region: Region, style: DrivingStyle, rng: np.random.Generator) -> CarAction:
    probs = action_probabilities(region, style)
    return ACTION_ORDER[int(rng.choice(len(ACTION_ORDER), p=probs))]


def update_car_state(
    prev: CarMotionState,
    region: Region,
    style: DrivingStyle,
    terrain: Terrain,
    rng: np.random.Generator,
) -> CarMotionState:
    """Draw the next action and move speed accordingly.  Switches are carried over."""
    action = next_action(region, style, rng)
    factor = STYLE_SPEED_FACTOR[style]
    if terrain == Terrain.UPHILL:
        terrain_effect = -TERRAIN_SPEED_EFFECT
    elif terrain == Terrain.DOWNHILL:
        terrain_effect = TERRAIN_SPEED_EFFECT
    else:
        terrain_effect = 0.0

    speed = prev.speed
    if action == CarAction.ACCELERATING:
        speed = min(MAX_SPEED, speed + ACCEL_STEP * factor + terrain_effect)
    elif action == CarAction.BRAKING:
        speed = speed - BRAKE_STEP * factor + terrain_effect
    elif action == CarAction.CRUISING:
        speed += (rng.random() - 0.5) * CRUISE_JITTER + terrain_effect
        limit = CRUISE_LIMIT_HIGHWAY if region == Region.HIGHWAY else CRUISE_LIMIT
        speed = max(CRUISE_MIN_SPEED, min(limit * factor, speed))
    elif action == CarAction.IDLE:
        speed = speed - IDLE_STEP + terrain_effect
    else:
        speed = min(TURN_MAX_SPEED, speed - TURN_STEP + terrain_effect)

    return prev.model_copy(update={
        "action": action,
        "speed": float(max(0.0, min(MAX_SPEED, speed))),
    })


def auto_manage_systems(
    next_state: CarMotionState,
    prev_state: CarMotionState,
    scenario: Scenario,
    rng: np.random.Generator,
) -> CarMotionState:
    """Set lights, wipers, seat heaters and (sometimes) HVAC from the scenario.

    HVAC only follows the comfort trigger half of the time, mimicking a
    driver who does not react immediately.
    """
    wet = scenario.weather in PRECIPITATION
    update = {
        "lights_on": scenario.time_of_day != TimeOfDay.DAY or wet,
        "wipers_on": wet,
        "seat_heaters_on": scenario.outside_temp < SEAT_HEATER_BELOW_C,
    }
    comfort_trigger = scenario.outside_temp > HVAC_HOT_ABOVE_C or scenario.outside_temp < HVAC_COLD_BELOW_C
    if prev_state.hvac_on != comfort_trigger and rng.random() < HVAC_TOGGLE_PROBABILITY:
        update["hvac_on"] = comfort_trigger
    return next_state.model_copy(update=update)


# ═══════════════════════════════════════════════════════════════════════════
# Scenario
# ═══════════════════════════════════════════════════════════════════════════

def update_scenario(prev: Scenario, rng: np.random.Generator) -> Scenario:
    """At most one scenario field changes per tick."""
    r = rng.random()

    if r < REGION_CHANGE_P:
        return prev.model_copy(update={"region": _pick(Region, rng)})

    r -= REGION_CHANGE_P
    if r < WEATHER_CHANGE_P:
        weather = _pick(Weather, rng)
        if weather == prev.weather:
            return prev
        return prev.model_copy(update={
            "weather": weather,
            "road_condition": road_condition_for(weather),
            "outside_temp": WEATHER_TEMPERATURE_C[weather],
        })

    r -= WEATHER_CHANGE_P
    if r < TIME_CHANGE_P:
        times = list(TimeOfDay)
        nxt = times[(times.index(prev.time_of_day) + 1) % len(times)]
        return prev.model_copy(update={"time_of_day": nxt})

    r -= TIME_CHANGE_P
    if r < TRAFFIC_CHANGE_P:
        return prev.model_copy(update={"traffic": _pick(TrafficDensity, rng)})

    r -= TRAFFIC_CHANGE_P
    if r < TERRAIN_CHANGE_P:
        return prev.model_copy(update={"terrain": _pick(Terrain, rng)})

    return prev


def force_scenario(rng: np.random.Generator) -> Scenario:
    """A fully re-drawn scenario (pattern change)."""
    weather = _pick(Weather, rng)
    return Scenario(
        time_of_day=_pick(TimeOfDay, rng),
        weather=weather,
        region=_pick(Region, rng),
        traffic=_pick(TrafficDensity, rng),
        road_condition=road_condition_for(weather),
        outside_temp=WEATHER_TEMPERATURE_C[weather],
        terrain=_pick(Terrain, rng),
    )
