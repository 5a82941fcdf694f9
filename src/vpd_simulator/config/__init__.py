"""Configuration models — vehicle, motion, scenario and static tables."""

from vpd_simulator.config.vehicle import BodyType, Powertrain, VoltageSystem, VehicleConfig, SUB_TYPES
from vpd_simulator.config.motion import CarAction, CarMotionState, DrivingStyle
from vpd_simulator.config.scenario import (
    Region,
    RoadCondition,
    Scenario,
    SimulationConfig,
    Terrain,
    TimeOfDay,
    TrafficDensity,
    Weather,
)
from vpd_simulator.config.subsystems import SUBSYSTEMS, SubsystemCategory, SubsystemSpec, get_subsystem
from vpd_simulator.config.battery import BatteryParameters, get_battery_parameters

__all__ = [
    "BodyType",
    "Powertrain",
    "VoltageSystem",
    "VehicleConfig",
    "SUB_TYPES",
    "CarAction",
    "CarMotionState",
    "DrivingStyle",
    "Region",
    "RoadCondition",
    "Scenario",
    "SimulationConfig",
    "Terrain",
    "TimeOfDay",
    "TrafficDensity",
    "Weather",
    "SUBSYSTEMS",
    "SubsystemCategory",
    "SubsystemSpec",
    "get_subsystem",
    "BatteryParameters",
    "get_battery_parameters",
]
