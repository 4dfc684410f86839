"""
Tests for the cage metrics engine:
- Survival / mortality / remaining population
- Growth rate between weighings
- Feed conversion ratio
- Biomass and cost per kg
- Performance classification
- Full snapshot (idempotence, noisy data)
"""

import math
from datetime import date, datetime

import pytest

from aquafarm.schemas.metrics import MetricStatus, PerformanceTier
from aquafarm.services.metrics import (
    UnitEvents,
    classify_performance,
    compute_biomass,
    compute_cost_per_kg,
    compute_fcr,
    compute_growth_rate,
    compute_mortality_rate,
    compute_remaining_population,
    compute_single_metric,
    compute_snapshot,
    compute_survival_rate,
    feed_conversion_ratio,
    total_feed_kg,
)


def weighing(day, avg):
    return {"date": day, "average_sample_weight_kg": avg}


# =============================================================================
# SURVIVAL
# =============================================================================

class TestSurvivalRate:
    """Tests for survival and mortality rates."""

    def test_basic_survival(self):
        result = compute_survival_rate(1000, [{"count_dead": 30}, {"count_dead": 20}])
        assert result.value == pytest.approx(95.0)
        assert result.status == MetricStatus.OK

    def test_no_deaths_is_full_survival(self):
        assert compute_survival_rate(500, []).value == 100.0

    @pytest.mark.parametrize("deaths", [[1000], [600, 600], [5000], [999, 1, 1]])
    def test_over_reported_deaths_clamp_to_zero(self, deaths):
        result = compute_survival_rate(1000, [{"count_dead": d} for d in deaths])
        assert 0.0 <= result.value <= 100.0
        assert result.value == 0.0

    def test_zero_initial_population_is_undefined(self):
        result = compute_survival_rate(0, [{"count_dead": 3}])
        assert result.value == 0.0
        assert result.status == MetricStatus.UNDEFINED

    def test_malformed_counts_are_ignored(self):
        deaths = [{"count_dead": "abc"}, {"count_dead": -40}, {"count_dead": None}, {"count_dead": 10}]
        assert compute_survival_rate(100, deaths).value == pytest.approx(90.0)

    def test_mortality_rate_complements_survival(self):
        result = compute_mortality_rate(200, [{"count_dead": 30}])
        assert result.value == pytest.approx(15.0)

    def test_remaining_population_never_negative(self):
        assert compute_remaining_population(100, [{"count_dead": 70}]) == 30
        assert compute_remaining_population(100, [{"count_dead": 170}]) == 0


# =============================================================================
# GROWTH
# =============================================================================

class TestGrowthRate:
    """Tests for week-over-week growth."""

    def test_no_weighings(self):
        result = compute_growth_rate([])
        assert result.value == 0
        assert result.status == MetricStatus.INSUFFICIENT_DATA

    def test_single_weighing(self):
        result = compute_growth_rate([weighing(date(2025, 3, 1), 100)])
        assert result.value == 0
        assert result.status == MetricStatus.INSUFFICIENT_DATA

    def test_two_weighings(self):
        result = compute_growth_rate([
            weighing(date(2025, 3, 1), 100),
            weighing(date(2025, 3, 8), 120),
        ])
        assert result.value == pytest.approx(20.0)
        assert result.status == MetricStatus.OK

    def test_uses_only_latest_two(self):
        result = compute_growth_rate([
            weighing(date(2025, 3, 1), 50),
            weighing(date(2025, 3, 8), 100),
            weighing(date(2025, 3, 15), 90),
        ])
        assert result.value == pytest.approx(-10.0)

    def test_unsorted_input_is_sorted(self):
        result = compute_growth_rate([
            weighing(date(2025, 3, 8), 120),
            weighing(date(2025, 3, 1), 100),
        ])
        assert result.value == pytest.approx(20.0)

    def test_same_date_latest_recorded_wins(self):
        result = compute_growth_rate([
            weighing(date(2025, 3, 1), 50),
            weighing(date(2025, 3, 8), 100),
            weighing(date(2025, 3, 8), 110),
        ])
        assert result.value == pytest.approx(10.0)

    def test_zero_previous_weight_is_undefined(self):
        result = compute_growth_rate([
            weighing(date(2025, 3, 1), 0),
            weighing(date(2025, 3, 8), 120),
        ])
        assert result.value == 0.0
        assert result.status == MetricStatus.UNDEFINED


# =============================================================================
# FCR
# =============================================================================

class TestFeedConversionRatio:
    """Tests for FCR calculation."""

    def test_ratio(self):
        result = feed_conversion_ratio(500, 250)
        assert result.value == 2.0
        assert result.status == MetricStatus.OK

    @pytest.mark.parametrize("gain", [0, -10, -0.5])
    def test_non_positive_gain_is_undefined(self, gain):
        result = feed_conversion_ratio(500, gain)
        assert result.value == 0
        assert result.status == MetricStatus.UNDEFINED

    def test_from_unit_history(self, unit):
        feeding = [{"timestamp": datetime(2025, 3, 2), "quantity_kg": 600}]
        weighings = [weighing(date(2025, 3, 8), 0.4)]
        # biomasa 1000 × 0.4 − 1000 × 0.1 = 300 kg de ganancia
        result = compute_fcr(unit, feeding, weighings)
        assert result.value == pytest.approx(2.0)

    def test_mortality_reduces_current_biomass(self, unit):
        feeding = [{"timestamp": datetime(2025, 3, 2), "quantity_kg": 550}]
        weighings = [weighing(date(2025, 3, 8), 0.4)]
        mortality = [{"date": date(2025, 3, 5), "count_dead": 125}]
        # 875 × 0.4 − 100 = 250
        result = compute_fcr(unit, feeding, weighings, mortality)
        assert result.value == pytest.approx(2.2)

    def test_feed_before_introduction_is_ignored(self, unit):
        feeding = [
            {"timestamp": datetime(2025, 2, 20), "quantity_kg": 1000},
            {"timestamp": datetime(2025, 3, 1, 7), "quantity_kg": 300},
        ]
        assert total_feed_kg(feeding, since=unit["introduction_date"]) == 300

    def test_no_weight_gain_is_undefined(self, unit):
        feeding = [{"timestamp": datetime(2025, 3, 2), "quantity_kg": 100}]
        result = compute_fcr(unit, feeding, [])
        assert result.value == 0
        assert result.status == MetricStatus.UNDEFINED


# =============================================================================
# BIOMASS AND COST
# =============================================================================

class TestBiomassAndCost:
    """Tests for biomass and cost per kg."""

    def test_biomass(self):
        assert compute_biomass(1000, 0.8) == pytest.approx(800.0)

    def test_biomass_with_bad_input(self):
        assert compute_biomass(-5, 0.8) == 0.0
        assert compute_biomass(100, "n/a") == 0.0

    def test_cost_per_kg(self):
        costs = [{"amount": 300}, {"amount": 100}]
        result = compute_cost_per_kg(costs, 200)
        assert result.value == pytest.approx(2.0)

    def test_cost_per_kg_without_biomass(self):
        result = compute_cost_per_kg([{"amount": 300}], 0)
        assert result.value == 0
        assert result.status == MetricStatus.UNDEFINED


# =============================================================================
# CLASSIFICATION
# =============================================================================

class TestClassifyPerformance:
    """Tests for performance tiers."""

    @pytest.mark.parametrize(
        "fcr, survival, expected",
        [
            (1.4, 96, PerformanceTier.EXCELLENT),
            (1.5, 95, PerformanceTier.EXCELLENT),
            (1.6, 96, PerformanceTier.GOOD),
            (1.4, 92, PerformanceTier.GOOD),
            (2.4, 99, PerformanceTier.AVERAGE),
            (1.2, 86, PerformanceTier.AVERAGE),
            (2.6, 99, PerformanceTier.CRITICAL),
            (1.4, 80, PerformanceTier.CRITICAL),
        ],
    )
    def test_tiers(self, fcr, survival, expected):
        assert classify_performance(fcr, survival) == expected


# =============================================================================
# SNAPSHOT
# =============================================================================

class TestSnapshot:
    """Tests for the full metrics snapshot."""

    def test_full_snapshot(self, unit, events):
        snapshot = compute_snapshot(unit, events)

        assert snapshot.cage_id == "C1"
        assert snapshot.remaining_population == 950
        assert snapshot.survival_rate == pytest.approx(95.0)
        assert snapshot.mortality_rate == pytest.approx(5.0)
        assert snapshot.current_average_weight_kg == 0.5
        assert snapshot.biomass_kg == pytest.approx(475.0)
        assert snapshot.total_feed_kg == pytest.approx(600.0)
        assert snapshot.feed_conversion_ratio == pytest.approx(1.6)
        assert snapshot.growth_rate == pytest.approx(66.6667, rel=1e-4)
        assert snapshot.cost_per_kg == pytest.approx(375.0 / 475.0)
        assert snapshot.total_sold_kg == 40.0
        assert snapshot.total_revenue == pytest.approx(120.0)
        assert snapshot.unsold_biomass_kg == pytest.approx(435.0)
        assert snapshot.performance == PerformanceTier.GOOD
        assert snapshot.low_confidence is False

    def test_idempotent(self, unit, events):
        first = compute_snapshot(unit, events)
        second = compute_snapshot(unit, events)
        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_accepts_unit_events(self, unit, events):
        assert compute_snapshot(unit, UnitEvents.from_mapping(events)) == compute_snapshot(unit, events)

    def test_empty_history_renders(self, unit):
        snapshot = compute_snapshot(unit, {})

        assert snapshot.survival_rate == 100.0
        assert snapshot.growth_status == MetricStatus.INSUFFICIENT_DATA
        assert snapshot.fcr_status == MetricStatus.UNDEFINED
        assert snapshot.performance is None
        assert snapshot.low_confidence is True

    def test_overflowing_counts_never_raise(self):
        # cada valor es finito, pero la suma desborda
        deaths = [{"count_dead": 1.7e308}, {"count_dead": 1.7e308}]

        survival = compute_survival_rate(1000, deaths)
        assert survival.value == 0.0
        assert survival.status == MetricStatus.OK
        assert compute_remaining_population(1000, deaths) == 0

    def test_huge_integers_never_raise(self):
        assert compute_biomass(10**400, 1) == 0.0
        assert compute_survival_rate(10**400, []).status == MetricStatus.UNDEFINED
        assert math.isfinite(compute_biomass(1e200, 1e200))

    def test_overflowing_feed_total_is_not_reported_as_zero(self, unit):
        feeding = [
            {"timestamp": datetime(2025, 3, 2), "quantity_kg": 1.7e308},
            {"timestamp": datetime(2025, 3, 3), "quantity_kg": 1.7e308},
        ]
        weighings = [weighing(date(2025, 3, 8), 0.5)]

        result = compute_fcr(unit, feeding, weighings)

        assert math.isfinite(result.value)
        assert result.value > 0
        assert classify_performance(result.value, 100) == PerformanceTier.CRITICAL

    def test_overflowing_history_still_renders(self, unit):
        events = {
            "feeding": [{"timestamp": datetime(2025, 3, 2), "quantity_kg": 1.7e308}] * 2,
            "mortality": [{"date": date(2025, 3, 3), "count_dead": 10**400}],
            "weighings": [weighing(date(2025, 3, 1), 1e-300), weighing(date(2025, 3, 8), 1e300)],
            "sales": [{"quantity_kg": 1e200, "price_per_kg": 1e200}],
            "costs": [{"amount": 1.7e308}, {"amount": 1.7e308}],
        }
        snapshot = compute_snapshot(unit, events)

        assert snapshot.growth_status == MetricStatus.UNDEFINED
        for value in (
            snapshot.feed_conversion_ratio,
            snapshot.biomass_kg,
            snapshot.total_revenue,
            snapshot.total_costs,
            snapshot.cost_per_kg,
        ):
            assert math.isfinite(value)

    def test_noisy_data_never_raises(self):
        unit = {"cage_id": "X", "initial_population": "mil", "initial_average_weight_kg": None}
        events = {
            "feeding": [{"timestamp": "ayer", "quantity_kg": "mucho"}, {"quantity_kg": float("nan")}],
            "mortality": [{"date": None, "count_dead": float("inf")}],
            "weighings": [{"date": "2025-13-01", "average_sample_weight_kg": -3}],
            "sales": [{"quantity_kg": None, "price_per_kg": "3"}],
            "costs": [{"amount": object()}],
        }
        snapshot = compute_snapshot(unit, events)

        assert snapshot.remaining_population == 0
        assert snapshot.biomass_kg == 0.0
        assert snapshot.low_confidence is True

    def test_single_metric_matches_snapshot(self, unit, events):
        snapshot = compute_snapshot(unit, events)
        unit_events = UnitEvents.from_mapping(events)

        assert compute_single_metric("fcr", unit, unit_events).value == snapshot.feed_conversion_ratio
        assert compute_single_metric("biomass", unit, unit_events).value == snapshot.biomass_kg
        assert compute_single_metric("remaining_population", unit, unit_events).value == 950.0

    def test_unknown_single_metric(self, unit):
        with pytest.raises(KeyError):
            compute_single_metric("profit", unit, UnitEvents())
