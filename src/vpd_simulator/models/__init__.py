"""Result models — tick and simulation output contracts."""

from vpd_simulator.models.results import (
    Alert,
    HistoryEntry,
    PowerDistribution,
    SimulationResult,
    SimulationSnapshot,
    SimulationSummary,
    SystemMetrics,
    TickResult,
)

__all__ = [
    "Alert",
    "HistoryEntry",
    "PowerDistribution",
    "SimulationResult",
    "SimulationSnapshot",
    "SimulationSummary",
    "SystemMetrics",
    "TickResult",
]
