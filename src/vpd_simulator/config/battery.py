"""Battery parameter table — physical pack properties per vehicle configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from vpd_simulator.config.vehicle import BodyType, Powertrain, VehicleConfig, VoltageSystem


class BatteryParameters(BaseModel):
    """Physical parameters of the pack the electrical model integrates against."""

    model_config = ConfigDict(frozen=True)

    capacity_wh: float = Field(gt=0, description="Rated energy capacity (Wh)")
    nominal_voltage: float = Field(gt=0, description="Nominal pack voltage (V)")
    internal_resistance_ohms: float = Field(gt=0, description="DC internal resistance at 25 °C (Ω)")
    mass_kg: float = Field(gt=0, description="Pack mass for the lumped thermal model (kg)")
    specific_heat_capacity: float = Field(gt=0, description="Specific heat (J/(kg·°C))")

    @property
    def capacity_ah(self) -> float:
        """Rated charge capacity (Ah)."""
        return self.capacity_wh / self.nominal_voltage


# (capacity_wh, nominal_voltage, resistance_ohms, mass_kg, specific_heat)
_Row = tuple[float, float, float, float, float]

_STARTER_12V: _Row = (720.0, 12.6, 0.010, 18.0, 900.0)        # 60 Ah flooded lead-acid
_STARTER_48V: _Row = (480.0, 48.0, 0.030, 9.0, 1_000.0)       # 10 Ah Li-ion mild-hybrid pack

_BASE_PACKS: dict[Powertrain, _Row] = {
    Powertrain.EV: (75_000.0, 400.0, 0.10, 450.0, 1_000.0),
    Powertrain.HYBRID: (1_500.0, 200.0, 0.30, 40.0, 1_000.0),
    Powertrain.FCEV: (1_600.0, 300.0, 0.25, 45.0, 1_000.0),
}
"""High-voltage packs.  Combustion variants use the starter battery instead."""

BODY_SIZE_FACTOR: dict[BodyType, float] = {
    BodyType.SEDAN: 1.0,
    BodyType.SUV: 1.2,
    BodyType.HATCHBACK: 0.85,
    BodyType.PICKUP: 1.3,
    BodyType.COUPE: 0.9,
    BodyType.CONVERTIBLE: 0.9,
    BodyType.MINIVAN: 1.1,
    BodyType.BUS: 2.0,
    BodyType.TRUCK: 2.0,
    BodyType.SPECIAL: 1.5,
}
"""Pack size relative to a sedan.  Scales capacity and mass; resistance scales inversely
(more cells in parallel)."""


def get_battery_parameters(config: VehicleConfig) -> BatteryParameters:
    """Return the pack parameters for ``config``.

    Combustion powertrains carry a starter battery sized by the bus voltage;
    electrified powertrains carry their high-voltage pack.  Either is then
    sized for the body type.
    """
    if config.is_combustion:
        row = _STARTER_48V if config.voltage_system == VoltageSystem.V48 else _STARTER_12V
    else:
        row = _BASE_PACKS[config.powertrain]

    capacity_wh, voltage, resistance, mass, cp = row
    factor = BODY_SIZE_FACTOR[config.body_type]
    return BatteryParameters(
        capacity_wh=capacity_wh * factor,
        nominal_voltage=voltage,
        internal_resistance_ohms=resistance / factor,
        mass_kg=mass * factor,
        specific_heat_capacity=cp,
    )
