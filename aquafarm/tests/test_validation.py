"""
Tests for strict data-entry validation.
"""

from datetime import date, datetime

import pytest

from aquafarm.core.errors import EventValidationError
from aquafarm.services.validation import (
    validate_cost,
    validate_feeding,
    validate_mortality,
    validate_sale,
    validate_weighing,
)


class TestFeedingValidation:
    """Tests for feeding entries."""

    def test_valid_feeding(self):
        validate_feeding({"timestamp": datetime(2025, 3, 1, 8), "quantity_kg": 12.5})

    @pytest.mark.parametrize("quantity", [-1, "12", True, float("nan"), float("inf"), None])
    def test_rejects_bad_quantity(self, quantity):
        with pytest.raises(EventValidationError) as exc_info:
            validate_feeding({"timestamp": datetime(2025, 3, 1), "quantity_kg": quantity})
        assert exc_info.value.field == "quantity_kg"

    def test_requires_timestamp(self):
        with pytest.raises(EventValidationError) as exc_info:
            validate_feeding({"quantity_kg": 3})
        assert exc_info.value.field == "timestamp"


class TestMortalityValidation:
    """Tests for mortality observations."""

    def test_valid_mortality(self):
        validate_mortality({"date": date(2025, 3, 1), "count_dead": 5}, remaining_population=100)

    def test_rejects_count_above_remaining(self):
        with pytest.raises(EventValidationError) as exc_info:
            validate_mortality({"date": date(2025, 3, 1), "count_dead": 101}, remaining_population=100)
        assert exc_info.value.field == "count_dead"
        assert "100" in exc_info.value.message

    def test_accepts_count_equal_to_remaining(self):
        validate_mortality({"date": date(2025, 3, 1), "count_dead": 100}, remaining_population=100)

    @pytest.mark.parametrize("count", [-3, 2.5, "4"])
    def test_rejects_bad_count(self, count):
        with pytest.raises(EventValidationError) as exc_info:
            validate_mortality({"date": date(2025, 3, 1), "count_dead": count})
        assert exc_info.value.field == "count_dead"

    def test_rejects_unknown_status(self):
        with pytest.raises(EventValidationError) as exc_info:
            validate_mortality({"date": date(2025, 3, 1), "count_dead": 1, "status": "panic"})
        assert exc_info.value.field == "status"


class TestOtherEvents:
    """Tests for weighings, sales and costs."""

    def test_weighing_requires_positive_sample(self):
        with pytest.raises(EventValidationError) as exc_info:
            validate_weighing({"date": date(2025, 3, 1), "sample_size": 0, "average_sample_weight_kg": 0.2})
        assert exc_info.value.field == "sample_size"

    def test_weighing_rejects_negative_weight(self):
        with pytest.raises(EventValidationError) as exc_info:
            validate_weighing({"date": date(2025, 3, 1), "sample_size": 30, "average_sample_weight_kg": -0.2})
        assert exc_info.value.field == "average_sample_weight_kg"

    def test_sale_total_price_is_optional(self):
        validate_sale({"date": date(2025, 3, 1), "quantity_kg": 40, "price_per_kg": 3.2})

    def test_sale_rejects_negative_price(self):
        with pytest.raises(EventValidationError) as exc_info:
            validate_sale({"date": date(2025, 3, 1), "quantity_kg": 40, "price_per_kg": -3.2})
        assert exc_info.value.field == "price_per_kg"

    def test_cost_requires_category(self):
        with pytest.raises(EventValidationError) as exc_info:
            validate_cost({"date": date(2025, 3, 1), "category": "  ", "amount": 10})
        assert exc_info.value.field == "category"

    def test_error_payload(self):
        error = EventValidationError("amount", "must not be negative")
        assert error.to_dict() == {"field": "amount", "message": "must not be negative"}
