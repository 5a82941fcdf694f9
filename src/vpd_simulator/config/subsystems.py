"""Subsystem registry — the static catalogue of electrical loads.

Every subsystem has a shedding ``priority`` (lower is shed first), a floor
``base_power`` and a hard ``max_power`` ceiling.  Constant loads draw their
base power whenever the vehicle is powered; variable loads start at zero
and are switched on by the demand rules.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SubsystemCategory(str, Enum):
    POWERTRAIN = "Powertrain"
    CHASSIS = "Chassis"
    LIGHTING = "Lighting"
    CLIMATE = "Climate"
    INTERIOR = "Interior"
    INFOTAINMENT = "Infotainment"
    SPECIAL = "Special"


class SubsystemSpec(BaseModel):
    """One electrical subsystem.  Immutable."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Stable identifier used as the power-distribution key")
    name: str = Field(description="Human label")
    category: SubsystemCategory
    priority: int = Field(ge=0, description="Shedding priority — lower values are shed first")
    base_power: float = Field(ge=0, description="Floor draw for constant loads (W)")
    max_power: float = Field(ge=0, description="Hard ceiling (W)")
    is_constant: bool = Field(description="Draws base_power whenever active")

    @model_validator(mode="after")
    def _check_power_range(self) -> SubsystemSpec:
        if self.base_power > self.max_power:
            raise ValueError(
                f"{self.id}: base_power {self.base_power} exceeds max_power {self.max_power}"
            )
        return self


def _spec(id: str, name: str, category: SubsystemCategory, priority: int,
          base: float, max_: float, constant: bool) -> SubsystemSpec:
    return SubsystemSpec(
        id=id, name=name, category=category, priority=priority,
        base_power=base, max_power=max_, is_constant=constant,
    )


_P = SubsystemCategory.POWERTRAIN
_C = SubsystemCategory.CHASSIS
_L = SubsystemCategory.LIGHTING
_K = SubsystemCategory.CLIMATE
_I = SubsystemCategory.INTERIOR
_F = SubsystemCategory.INFOTAINMENT
_S = SubsystemCategory.SPECIAL

SUBSYSTEMS: tuple[SubsystemSpec, ...] = (
    # Engine bay / drivetrain
    _spec("ecu", "ECU", _P, 5, 25, 50, True),
    _spec("fuel_pump", "Fuel Pump", _P, 5, 50, 150, False),
    _spec("radiator_fan", "Radiator Fan", _P, 4, 0, 400, False),
    _spec("starter_motor", "Starter", _P, 5, 0, 1_500, False),
    _spec("traction_motor", "Traction Motor", _P, 5, 0, 300_000, False),

    # Chassis & safety
    _spec("abs_module", "ABS", _C, 5, 15, 200, True),
    _spec("power_steering", "Pwr Steering", _C, 4, 20, 800, True),
    _spec("airbags", "Airbags", _C, 5, 5, 10, True),

    # Exterior lighting
    _spec("headlights", "Headlights", _L, 3, 0, 120, False),
    _spec("tail_lights", "Tail Lights", _L, 3, 0, 20, False),
    _spec("brake_lights", "Brake Lights", _L, 4, 0, 40, False),
    _spec("fog_lights", "Fog Lights", _L, 2, 0, 80, False),
    _spec("daytime_running_lights", "DRL", _L, 2, 15, 40, False),

    # Climate
    _spec("hvac_blower", "HVAC Blower", _K, 2, 0, 300, False),
    _spec("hvac_compressor", "AC Compressor", _K, 1, 0, 1_000, False),

    # Infotainment
    _spec("infotainment", "Infotainment", _F, 2, 20, 80, True),
    _spec("audio_system", "Audio System", _F, 1, 10, 400, False),
    _spec("speakers", "Speakers", _F, 1, 0, 100, False),

    # Interior
    _spec("dome_light", "Dome Light", _I, 1, 5, 15, False),
    _spec("instrument_cluster", "Instrument Cluster", _I, 4, 15, 50, True),
    _spec("window_motors", "Window Motors", _I, 1, 0, 150, False),
    _spec("seat_heaters", "Seat Heaters", _I, 1, 0, 200, False),
    _spec("wipers", "Wipers", _I, 3, 0, 150, False),

    # Body-specific equipment
    _spec("air_brake_compressor", "Air Brake Compressor", _S, 5, 0, 600, False),
    _spec("siren", "Siren", _S, 3, 0, 100, False),
    _spec("strobe_lights", "Strobe Lights", _S, 3, 0, 150, False),
)

_BY_ID: dict[str, SubsystemSpec] = {s.id: s for s in SUBSYSTEMS}


def get_subsystem(subsystem_id: str) -> SubsystemSpec:
    """Look up a registered subsystem.  Unknown ids raise ``KeyError``."""
    return _BY_ID[subsystem_id]


def subsystem_ids() -> list[str]:
    """Registry ids in catalogue order."""
    return [s.id for s in SUBSYSTEMS]
