"""Car motion state — what the vehicle is doing during one tick."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class CarAction(str, Enum):
    IDLE = "Idle"
    ACCELERATING = "Accelerating"
    BRAKING = "Braking"
    CRUISING = "Cruising"
    TURNING = "Turning"


class DrivingStyle(str, Enum):
    """Driver temperament used by the behaviour generator only."""

    ECO = "Eco"
    COMFORT = "Comfort"
    NORMAL = "Normal"
    SPORT = "Sport"
    AGGRESSIVE = "Aggressive"


class CarMotionState(BaseModel):
    """Motion and cabin switches for one tick."""

    speed: float = Field(default=0.0, ge=0, description="Vehicle speed (km/h)")
    action: CarAction = Field(default=CarAction.IDLE, description="Current driving action")
    hvac_on: bool = Field(default=False, description="Climate control requested")
    lights_on: bool = Field(default=False, description="Headlights / tail lights on")
    wipers_on: bool = Field(default=False, description="Windscreen wipers running")
    seat_heaters_on: bool = Field(default=False, description="Seat heaters active")
    is_ignition_cycle: bool = Field(
        default=False,
        description="True only for the tick the engine is cranked. "
                    "Cleared by the tick function once consumed.",
    )
