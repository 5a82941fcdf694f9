"""Vehicle demand dispatcher — picks the calculator for a vehicle configuration.

Two-level lookup:
  1. ``BEHAVIORS`` keyed by (body type, sub-type, powertrain) for variants
     with their own behaviour;
  2. ``POWERTRAIN_DEFAULTS`` keyed by powertrain alone.

Every ``Powertrain`` member must have a default.  ``check_defaults`` runs at
import so an incomplete table fails immediately instead of mid-simulation.
"""

from __future__ import annotations

import logging

from vpd_simulator.config.vehicle import BodyType, Powertrain, VehicleConfig
from vpd_simulator.engine.powertrains import (
    DemandCalculator,
    combustion_demand,
    electric_demand,
    fuel_cell_demand,
    hybrid_demand,
)
from vpd_simulator.engine.variants import (
    pickup_light_duty_cng,
    sedan_compact_hybrid,
    sedan_mid_size_ice,
    special_emergency_ice,
    suv_full_size_ev,
    truck_heavy_ice,
)

logger = logging.getLogger(__name__)

BehaviorKey = tuple[BodyType, str, Powertrain]

BEHAVIORS: dict[BehaviorKey, DemandCalculator] = {
    (BodyType.SEDAN, "Compact", Powertrain.HYBRID): sedan_compact_hybrid,
    (BodyType.SEDAN, "Mid-Size", Powertrain.ICE): sedan_mid_size_ice,
    (BodyType.SEDAN, "Full-Size", Powertrain.FCEV): fuel_cell_demand,
    (BodyType.BUS, "City", Powertrain.FCEV): fuel_cell_demand,
    (BodyType.TRUCK, "Semi", Powertrain.FCEV): fuel_cell_demand,
    (BodyType.SUV, "Full-Size", Powertrain.EV): suv_full_size_ev,
    (BodyType.PICKUP, "Light-Duty", Powertrain.CNG): pickup_light_duty_cng,
    (BodyType.TRUCK, "Heavy", Powertrain.ICE): truck_heavy_ice,
    (BodyType.SPECIAL, "Emergency", Powertrain.ICE): special_emergency_ice,
}

POWERTRAIN_DEFAULTS: dict[Powertrain, DemandCalculator] = {
    Powertrain.ICE: combustion_demand,
    Powertrain.EV: electric_demand,
    Powertrain.HYBRID: hybrid_demand,
    Powertrain.FCEV: electric_demand,
    Powertrain.CNG: combustion_demand,
    Powertrain.LPG: combustion_demand,
    Powertrain.FLEX_FUEL: combustion_demand,
}


def check_defaults(defaults: dict[Powertrain, DemandCalculator] = POWERTRAIN_DEFAULTS) -> None:
    """Raise ``RuntimeError`` if any powertrain lacks a default calculator."""
    missing = [p.value for p in Powertrain if p not in defaults]
    if missing:
        raise RuntimeError(f"No default demand calculator registered for powertrain(s): {missing}")


check_defaults()


def select_calculator(config: VehicleConfig) -> DemandCalculator:
    """Return the demand calculator for ``config``.  Always succeeds."""
    key = (config.body_type, config.sub_type, config.powertrain)
    calculator = BEHAVIORS.get(key)
    if calculator is not None:
        return calculator
    logger.debug("no variant for %s/%s/%s, using %s default",
                 config.body_type.value, config.sub_type, config.powertrain.value,
                 config.powertrain.value)
    return POWERTRAIN_DEFAULTS[config.powertrain]
