"""Tests for engine/dispatch.py, engine/powertrains.py and engine/variants.py.

Covers:
  - Dispatcher: exact variant match, powertrain fallback, completeness check
  - Combustion: starter on ignition, fuel pump, alternator
  - Electric: traction by action and terrain, regenerative braking
  - Hybrid: EV/ICE mode switching, engine charging, motor assist
  - Fuel cell: stack output tracking demand
  - Variants: multiplicative adjustments over the family calculators
"""

from __future__ import annotations

import pytest

from vpd_simulator.config import (
    SUB_TYPES,
    BodyType,
    CarAction,
    CarMotionState,
    Powertrain,
    Scenario,
    VehicleConfig,
)
from vpd_simulator.config.scenario import Terrain
from vpd_simulator.engine.dispatch import (
    BEHAVIORS,
    POWERTRAIN_DEFAULTS,
    check_defaults,
    select_calculator,
)
from vpd_simulator.engine.powertrains import (
    DemandResult,
    combustion_demand,
    electric_demand,
    find_subsystem,
    fuel_cell_demand,
    hybrid_demand,
    initialize_demand,
)
from vpd_simulator.engine.variants import (
    sedan_compact_hybrid,
    special_emergency_ice,
    suv_full_size_ev,
    truck_heavy_ice,
)
from vpd_simulator.models.results import SystemMetrics


# ═══════════════════════════════════════════════════════════════════════════
# Dispatcher
# ═══════════════════════════════════════════════════════════════════════════

class TestDispatch:

    def test_exact_variant_match(self):
        cfg = VehicleConfig(body_type=BodyType.TRUCK, sub_type="Heavy", powertrain=Powertrain.ICE)
        assert select_calculator(cfg) is truck_heavy_ice

    def test_fallback_to_powertrain_default(self):
        cfg = VehicleConfig(body_type=BodyType.HATCHBACK, powertrain=Powertrain.EV)
        assert select_calculator(cfg) is electric_demand

    @pytest.mark.parametrize("powertrain", [Powertrain.CNG, Powertrain.LPG, Powertrain.FLEX_FUEL])
    def test_gas_and_flex_fuel_use_combustion(self, powertrain: Powertrain):
        cfg = VehicleConfig(body_type=BodyType.COUPE, powertrain=powertrain)
        assert select_calculator(cfg) is combustion_demand

    def test_fcev_defaults_to_electric(self):
        cfg = VehicleConfig(body_type=BodyType.SEDAN, sub_type="Compact", powertrain=Powertrain.FCEV)
        assert select_calculator(cfg) is electric_demand

    def test_full_size_fcev_sedan_uses_fuel_cell(self):
        cfg = VehicleConfig(body_type=BodyType.SEDAN, sub_type="Full-Size", powertrain=Powertrain.FCEV)
        assert select_calculator(cfg) is fuel_cell_demand

    def test_every_configuration_resolves(self):
        for body_type, subs in SUB_TYPES.items():
            for sub_type in subs:
                for powertrain in Powertrain:
                    cfg = VehicleConfig(body_type=body_type, sub_type=sub_type, powertrain=powertrain)
                    assert callable(select_calculator(cfg))

    def test_variant_keys_are_valid_configurations(self):
        for body_type, sub_type, _ in BEHAVIORS:
            assert sub_type in SUB_TYPES[body_type]

    def test_every_powertrain_has_default(self):
        assert set(POWERTRAIN_DEFAULTS) == set(Powertrain)
        check_defaults()

    def test_missing_default_raises(self):
        partial = {p: c for p, c in POWERTRAIN_DEFAULTS.items() if p != Powertrain.LPG}
        with pytest.raises(RuntimeError, match="LPG"):
            check_defaults(partial)


# ═══════════════════════════════════════════════════════════════════════════
# Shared helpers
# ═══════════════════════════════════════════════════════════════════════════

class TestHelpers:

    def test_initialize_demand(self, specs):
        demand = initialize_demand(specs)
        assert demand["ecu"] == 25
        assert demand["abs_module"] == 15
        assert demand["starter_motor"] == 0
        assert demand["daytime_running_lights"] == 0
        assert set(demand) == {s.id for s in specs}

    def test_find_subsystem_unknown(self, specs):
        with pytest.raises(KeyError):
            find_subsystem(specs, "nope")

    def test_with_changes_is_a_copy(self):
        original = DemandResult(demand={"ecu": 25.0}, charge_effect=10.0)
        changed = original.with_changes(demand={"ecu": 50.0}, charge_effect=0.0)
        assert original.demand["ecu"] == 25.0
        assert original.charge_effect == 10.0
        assert changed.demand["ecu"] == 50.0
        assert changed.charge_effect == 0.0
        assert changed.total == 50.0


# ═══════════════════════════════════════════════════════════════════════════
# Combustion
# ═══════════════════════════════════════════════════════════════════════════

class TestCombustion:

    def test_idle_demand_and_alternator(self, ice_sedan, idle, ice_metrics, scenario, specs):
        r = combustion_demand(ice_sedan, idle, ice_metrics, scenario, specs)
        assert r.demand["fuel_pump"] == 50
        assert r.demand["starter_motor"] == 0
        assert r.total == pytest.approx(150.0)
        # min(2000, 150 + 500)
        assert r.charge_effect == pytest.approx(650.0)

    def test_starter_on_ignition_tick(self, ice_sedan, ice_metrics, scenario, specs):
        motion = CarMotionState(is_ignition_cycle=True)
        r = combustion_demand(ice_sedan, motion, ice_metrics, scenario, specs)
        assert r.demand["starter_motor"] == 1_500
        assert r.charge_effect == 0.0

    def test_accelerating_adds_ecu_and_fuel(self, ice_sedan, accelerating, ice_metrics, scenario, specs):
        r = combustion_demand(ice_sedan, accelerating, ice_metrics, scenario, specs)
        assert r.demand["ecu"] == pytest.approx(45.0)
        assert r.demand["fuel_pump"] == pytest.approx(130.0)

    def test_uphill_multiplies_engine_loads(self, ice_sedan, accelerating, ice_metrics, specs):
        r = combustion_demand(ice_sedan, accelerating, ice_metrics, Scenario(terrain=Terrain.UPHILL), specs)
        assert r.demand["ecu"] == pytest.approx(25 + 20 * 1.5)
        assert r.demand["fuel_pump"] == pytest.approx((50 + 80) * 1.5)

    def test_alternator_capped(self, ice_sedan, ice_metrics, scenario, specs):
        motion = CarMotionState(speed=50, action=CarAction.CRUISING)
        r = combustion_demand(ice_sedan, motion, ice_metrics, scenario, specs)
        assert r.charge_effect <= 2_000

    def test_no_alternator_when_coasting_slowly(self, ice_sedan, ice_metrics, scenario, specs):
        motion = CarMotionState(speed=3, action=CarAction.BRAKING)
        r = combustion_demand(ice_sedan, motion, ice_metrics, scenario, specs)
        assert r.charge_effect == 0.0


# ═══════════════════════════════════════════════════════════════════════════
# Electric
# ═══════════════════════════════════════════════════════════════════════════

class TestElectric:

    def test_idle_has_no_engine_loads(self, ev_hatchback, ev_metrics, scenario, specs):
        motion = CarMotionState(is_ignition_cycle=True)
        r = electric_demand(ev_hatchback, motion, ev_metrics, scenario, specs)
        assert r.demand["starter_motor"] == 0
        assert r.demand["fuel_pump"] == 0
        assert r.demand["traction_motor"] == 0
        assert r.demand["ecu"] == pytest.approx(100.0)
        assert r.charge_effect == pytest.approx(-r.total)

    def test_accelerating_traction(self, ev_hatchback, accelerating, ev_metrics, scenario, specs):
        r = electric_demand(ev_hatchback, accelerating, ev_metrics, scenario, specs)
        assert r.demand["traction_motor"] == pytest.approx(150_000.0)

    def test_uphill_traction_is_two_and_a_half_times_flat(self, ev_hatchback, accelerating, ev_metrics, specs):
        flat = electric_demand(ev_hatchback, accelerating, ev_metrics, Scenario(terrain=Terrain.FLAT), specs)
        up = electric_demand(ev_hatchback, accelerating, ev_metrics, Scenario(terrain=Terrain.UPHILL), specs)
        assert up.demand["traction_motor"] == pytest.approx(2.5 * flat.demand["traction_motor"])

    def test_cruising_traction_rises_with_speed(self, ev_hatchback, ev_metrics, scenario, specs):
        slow = electric_demand(ev_hatchback, CarMotionState(speed=30, action=CarAction.CRUISING),
                               ev_metrics, scenario, specs)
        fast = electric_demand(ev_hatchback, CarMotionState(speed=100, action=CarAction.CRUISING),
                               ev_metrics, scenario, specs)
        assert slow.demand["traction_motor"] == pytest.approx(15_000 * 1.3)
        assert fast.demand["traction_motor"] > slow.demand["traction_motor"]

    def test_regen_while_braking(self, ev_hatchback, braking, ev_metrics, scenario, specs):
        r = electric_demand(ev_hatchback, braking, ev_metrics, scenario, specs)
        # 60 kW × 60/120 × 1.5
        assert r.charge_effect == pytest.approx(45_000.0 - r.total)
        assert r.charge_effect > 0

    def test_regen_capped(self, ev_hatchback, ev_metrics, scenario, specs):
        motion = CarMotionState(speed=150, action=CarAction.BRAKING)
        r = electric_demand(ev_hatchback, motion, ev_metrics, scenario, specs)
        assert r.charge_effect == pytest.approx(60_000.0 - r.total)

    def test_downhill_regen_without_braking(self, ev_hatchback, ev_metrics, specs):
        motion = CarMotionState(speed=60, action=CarAction.IDLE)
        r = electric_demand(ev_hatchback, motion, ev_metrics, Scenario(terrain=Terrain.DOWNHILL), specs)
        assert r.charge_effect == pytest.approx(60_000 * 0.5 * 1.2 - r.total)


# ═══════════════════════════════════════════════════════════════════════════
# Hybrid
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def hybrid() -> VehicleConfig:
    return VehicleConfig(body_type=BodyType.SUV, powertrain=Powertrain.HYBRID)


class TestHybrid:

    def test_ev_mode_at_low_speed(self, hybrid, scenario, specs):
        motion = CarMotionState(speed=30, action=CarAction.CRUISING)
        r = hybrid_demand(hybrid, motion, SystemMetrics(), scenario, specs)
        assert r.demand["fuel_pump"] == 0
        assert r.demand["ecu"] == pytest.approx(75.0)
        assert r.demand["traction_motor"] == pytest.approx(5_000 * (1 + 30 / 80))
        assert r.charge_effect == pytest.approx(-r.total)

    def test_ice_mode_at_speed(self, hybrid, scenario, specs):
        motion = CarMotionState(speed=60, action=CarAction.CRUISING)
        r = hybrid_demand(hybrid, motion, SystemMetrics(battery_charge=100), scenario, specs)
        assert r.demand["fuel_pump"] == 50
        assert r.demand["traction_motor"] == 0
        assert r.charge_effect == 0.0

    def test_low_soc_forces_engine_and_charges(self, hybrid, scenario, specs):
        motion = CarMotionState(speed=20, action=CarAction.CRUISING)
        r = hybrid_demand(hybrid, motion, SystemMetrics(battery_charge=15), scenario, specs)
        assert r.demand["fuel_pump"] == 50
        assert r.charge_effect == pytest.approx(5_000.0)

    def test_maintenance_charge(self, hybrid, scenario, specs):
        motion = CarMotionState(speed=60, action=CarAction.CRUISING)
        r = hybrid_demand(hybrid, motion, SystemMetrics(battery_charge=60), scenario, specs)
        assert r.charge_effect == pytest.approx(2_000.0)

    def test_motor_assist_when_accelerating(self, hybrid, scenario, specs):
        motion = CarMotionState(speed=20, action=CarAction.ACCELERATING)
        r = hybrid_demand(hybrid, motion, SystemMetrics(battery_charge=100), scenario, specs)
        assert r.demand["traction_motor"] == pytest.approx(10_000.0)
        assert r.charge_effect == pytest.approx(-10_000.0)

    def test_compact_sedan_stays_electric_longer(self, scenario, specs):
        cfg = VehicleConfig(body_type=BodyType.SEDAN, sub_type="Compact", powertrain=Powertrain.HYBRID)
        motion = CarMotionState(speed=45, action=CarAction.CRUISING)
        default = hybrid_demand(cfg, motion, SystemMetrics(), scenario, specs)
        compact = sedan_compact_hybrid(cfg, motion, SystemMetrics(), scenario, specs)
        assert default.demand["fuel_pump"] == 50
        assert compact.demand["fuel_pump"] == 0

    def test_compact_sedan_regen_bonus(self, scenario, specs):
        cfg = VehicleConfig(body_type=BodyType.SEDAN, sub_type="Compact", powertrain=Powertrain.HYBRID)
        motion = CarMotionState(speed=60, action=CarAction.BRAKING)
        default = hybrid_demand(cfg, motion, SystemMetrics(), scenario, specs)
        compact = sedan_compact_hybrid(cfg, motion, SystemMetrics(), scenario, specs)
        assert default.charge_effect == pytest.approx(15_000.0)
        assert compact.charge_effect == pytest.approx(15_400.0)


# ═══════════════════════════════════════════════════════════════════════════
# Fuel cell
# ═══════════════════════════════════════════════════════════════════════════

class TestFuelCell:

    def test_stack_covers_demand_plus_margin(self, scenario, specs):
        cfg = VehicleConfig(body_type=BodyType.SEDAN, sub_type="Full-Size", powertrain=Powertrain.FCEV)
        motion = CarMotionState(speed=60, action=CarAction.CRUISING)
        r = fuel_cell_demand(cfg, motion, SystemMetrics(), scenario, specs)
        assert r.demand["ecu"] == pytest.approx(175.0)
        assert r.charge_effect == pytest.approx(2_000.0)

    def test_stack_output_capped(self, specs):
        cfg = VehicleConfig(body_type=BodyType.BUS, sub_type="City", powertrain=Powertrain.FCEV)
        motion = CarMotionState(speed=40, action=CarAction.ACCELERATING)
        r = fuel_cell_demand(cfg, motion, SystemMetrics(), Scenario(terrain=Terrain.UPHILL), specs)
        assert r.charge_effect == pytest.approx(90_000.0 - r.total)
        assert r.charge_effect < 0


# ═══════════════════════════════════════════════════════════════════════════
# Variants
# ═══════════════════════════════════════════════════════════════════════════

class TestVariants:

    def test_heavy_truck_scaling(self, idle, scenario, specs):
        cfg = VehicleConfig(body_type=BodyType.TRUCK, sub_type="Heavy", powertrain=Powertrain.ICE)
        base = combustion_demand(cfg, idle, SystemMetrics(), scenario, specs)
        truck = truck_heavy_ice(cfg, idle, SystemMetrics(), scenario, specs)
        assert truck.demand["ecu"] == pytest.approx(base.demand["ecu"] * 1.5)
        assert truck.demand["fuel_pump"] == pytest.approx(base.demand["fuel_pump"] * 1.8)
        assert truck.charge_effect == pytest.approx(base.charge_effect * 1.2)

    def test_emergency_alternator(self, idle, scenario, specs):
        cfg = VehicleConfig(body_type=BodyType.SPECIAL, sub_type="Emergency", powertrain=Powertrain.ICE)
        base = combustion_demand(cfg, idle, SystemMetrics(), scenario, specs)
        emergency = special_emergency_ice(cfg, idle, SystemMetrics(), scenario, specs)
        assert emergency.charge_effect == pytest.approx(base.charge_effect * 2.5)

    def test_full_size_suv_regen_reduced(self, braking, scenario, specs):
        cfg = VehicleConfig(body_type=BodyType.SUV, sub_type="Full-Size", powertrain=Powertrain.EV)
        base = electric_demand(cfg, braking, SystemMetrics(), scenario, specs)
        suv = suv_full_size_ev(cfg, braking, SystemMetrics(), scenario, specs)
        assert suv.charge_effect == pytest.approx(base.charge_effect * 0.8)
        assert suv.demand == base.demand
