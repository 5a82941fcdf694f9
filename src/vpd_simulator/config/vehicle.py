"""Vehicle configuration — body type, sub-type, powertrain and bus voltage."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class BodyType(str, Enum):
    SEDAN = "Sedan"
    SUV = "SUV"
    HATCHBACK = "Hatchback"
    PICKUP = "Pickup"
    COUPE = "Coupe"
    CONVERTIBLE = "Convertible"
    MINIVAN = "Minivan"
    BUS = "Bus"
    TRUCK = "Truck"
    SPECIAL = "Special"


class Powertrain(str, Enum):
    ICE = "ICE"
    EV = "EV"
    HYBRID = "Hybrid"
    FCEV = "FCEV"
    CNG = "CNG"
    LPG = "LPG"
    FLEX_FUEL = "Flex-Fuel"


class VoltageSystem(str, Enum):
    V12 = "12V"
    V48 = "48V"


SUB_TYPES: dict[BodyType, tuple[str, ...]] = {
    BodyType.SEDAN: ("Compact", "Mid-Size", "Full-Size"),
    BodyType.SUV: ("Compact", "Mid-Size", "Full-Size"),
    BodyType.HATCHBACK: ("Subcompact", "Compact"),
    BodyType.PICKUP: ("Light-Duty", "Heavy-Duty"),
    BodyType.COUPE: ("Sports", "Grand Tourer"),
    BodyType.CONVERTIBLE: ("Roadster", "4-Seater"),
    BodyType.MINIVAN: ("Standard", "Extended Wheelbase"),
    BodyType.BUS: ("City", "Long-Distance", "Electric"),
    BodyType.TRUCK: ("Light", "Heavy", "Semi", "Electric"),
    BodyType.SPECIAL: ("Emergency", "Construction", "Agricultural"),
}
"""Ordered valid sub-types per body type.  The first entry is the default."""

COMBUSTION_FAMILY: frozenset[Powertrain] = frozenset({
    Powertrain.ICE, Powertrain.CNG, Powertrain.LPG, Powertrain.FLEX_FUEL,
})
"""Powertrains that burn fuel in an engine and charge through an alternator."""


class VehicleConfig(BaseModel):
    """One vehicle configuration, fixed for a simulation run.

    ``sub_type`` is optional on input and resolves to the first valid
    sub-type of ``body_type``.  A sub-type that does not belong to the body
    type is a caller bug and is rejected at construction.
    """

    body_type: BodyType = Field(default=BodyType.SEDAN, description="Vehicle body style")
    sub_type: str | None = Field(
        default=None,
        description="Body sub-type; must be one of SUB_TYPES[body_type]. "
                    "Omit to use the body type's first sub-type.",
    )
    powertrain: Powertrain = Field(default=Powertrain.ICE, description="Drivetrain family")
    voltage_system: VoltageSystem = Field(
        default=VoltageSystem.V12,
        description="Nominal low-voltage bus (12V or 48V)",
    )

    @model_validator(mode="after")
    def _check_sub_type(self) -> VehicleConfig:
        valid = SUB_TYPES[self.body_type]
        if self.sub_type is None:
            self.sub_type = valid[0]
        elif self.sub_type not in valid:
            raise ValueError(
                f"sub_type {self.sub_type!r} is not valid for body_type "
                f"{self.body_type.value!r}; expected one of {list(valid)}"
            )
        return self

    @property
    def is_combustion(self) -> bool:
        return self.powertrain in COMBUSTION_FAMILY

    def with_body_type(self, body_type: BodyType) -> VehicleConfig:
        """Return a copy with a new body type and its first valid sub-type."""
        return VehicleConfig(
            body_type=body_type,
            sub_type=SUB_TYPES[body_type][0],
            powertrain=self.powertrain,
            voltage_system=self.voltage_system,
        )
