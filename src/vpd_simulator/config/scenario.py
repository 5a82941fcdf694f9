"""Operating scenario and run-level simulation settings."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from vpd_simulator.config.motion import DrivingStyle
from vpd_simulator.config.vehicle import VehicleConfig


class TimeOfDay(str, Enum):
    DAY = "Day"
    DUSK = "Dusk"
    NIGHT = "Night"


class Weather(str, Enum):
    SUNNY = "Sunny"
    CLOUDY = "Cloudy"
    RAINY = "Rainy"
    SNOWY = "Snowy"


class Region(str, Enum):
    CITY = "City"
    SUBURBAN = "Suburban"
    HIGHWAY = "Highway"
    OFFROAD = "Off-road"


class TrafficDensity(str, Enum):
    LIGHT = "Light"
    MEDIUM = "Medium"
    HEAVY = "Heavy"


class RoadCondition(str, Enum):
    DRY = "Dry"
    WET = "Wet"
    ICY = "Icy"


class Terrain(str, Enum):
    FLAT = "Flat"
    UPHILL = "Uphill"
    DOWNHILL = "Downhill"


PRECIPITATION: frozenset[Weather] = frozenset({Weather.RAINY, Weather.SNOWY})


class Scenario(BaseModel):
    """Environment the vehicle is operating in for one tick.

    ``road_condition`` is normally derived from ``weather`` by the behaviour
    generator (rain → wet, snow → icy) but the engine only reads it.
    """

    time_of_day: TimeOfDay = Field(default=TimeOfDay.DAY)
    weather: Weather = Field(default=Weather.SUNNY)
    region: Region = Field(default=Region.SUBURBAN)
    traffic: TrafficDensity = Field(default=TrafficDensity.MEDIUM)
    road_condition: RoadCondition = Field(default=RoadCondition.DRY)
    outside_temp: float = Field(default=22.0, description="Ambient temperature (°C)")
    terrain: Terrain = Field(default=Terrain.FLAT)

    @property
    def has_precipitation(self) -> bool:
        return self.weather in PRECIPITATION


class SimulationConfig(BaseModel):
    """Run-level settings for the multi-tick simulation runner.

    Two clocks are tracked, as in the interactive simulator:
      - *virtual* time advances ``tick_seconds`` per tick and decides when the
        run ends (``virtual_duration_s``);
      - *actual* simulated time is virtual time stretched by
        ``actual_duration_s / virtual_duration_s`` and is what the battery
        model integrates over.
    """

    vehicle: VehicleConfig = Field(default_factory=VehicleConfig)
    scenario: Scenario = Field(default_factory=Scenario, description="Initial scenario")
    driving_style: DrivingStyle = Field(default=DrivingStyle.NORMAL)
    auto_scenario: bool = Field(
        default=True,
        description="Let the behaviour generator evolve the scenario between ticks.",
    )

    tick_seconds: float = Field(default=1.5, gt=0, description="Virtual seconds per tick")
    virtual_duration_s: float = Field(default=300.0, gt=0, description="Virtual run length (s)")
    actual_duration_s: float = Field(
        default=3_600.0, gt=0,
        description="Simulated vehicle time represented by the whole run (s)",
    )
    random_seed: int | None = Field(
        default=None,
        description="Optional RNG seed for reproducible runs. None = non-deterministic.",
    )

    alert_window_seconds: float = Field(
        default=10.0, ge=0,
        description="Repeat alerts of one category are suppressed inside this window.",
    )
    alert_history_limit: int = Field(default=10, ge=1, description="Recent alerts retained")
    history_limit: int = Field(default=100, ge=1, description="Rolling history entries retained")
    snapshot_marks: list[float] = Field(
        default_factory=lambda: [0.2, 0.4, 0.6, 0.8, 1.0],
        description="Run-progress fractions at which a state snapshot is captured",
    )

    @model_validator(mode="after")
    def _check_marks(self) -> SimulationConfig:
        if any(not (0.0 < m <= 1.0) for m in self.snapshot_marks):
            raise ValueError("snapshot_marks must lie in (0, 1]")
        self.snapshot_marks = sorted(self.snapshot_marks)
        return self

    @property
    def time_scale(self) -> float:
        """Actual simulated seconds per virtual second."""
        return self.actual_duration_s / self.virtual_duration_s

    @property
    def dt_seconds(self) -> float:
        """Simulated seconds integrated by the battery model per tick."""
        return self.tick_seconds * self.time_scale
