"""
Validación estricta para la entrada de datos.

Al contrario que `metrics.py` (que convierte lo raro en 0), aquí cualquier
valor no numérico, negativo o incoherente se rechaza con un
`EventValidationError` que nombra el campo.
"""
from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Optional

from aquafarm.core.errors import EventValidationError
from aquafarm.models.events import MORTALITY_STATUSES


def _get(payload: Any, name: str) -> Any:
    if isinstance(payload, Mapping):
        return payload.get(name)
    return getattr(payload, name, None)


def _require_number(
    payload: Any,
    name: str,
    *,
    integer: bool = False,
    positive: bool = False,
    required: bool = True,
) -> Optional[float]:
    value = _get(payload, name)
    if value is None:
        if required:
            raise EventValidationError(name, "is required")
        return None

    # bool es subclase de int, pero no es una cantidad
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise EventValidationError(name, "must be a number")
    if not math.isfinite(value):
        raise EventValidationError(name, "must be a finite number")
    if integer and int(value) != value:
        raise EventValidationError(name, "must be a whole number")
    if value < 0:
        raise EventValidationError(name, "must not be negative")
    if positive and value == 0:
        raise EventValidationError(name, "must be greater than zero")
    return value


def _require_present(payload: Any, name: str) -> Any:
    value = _get(payload, name)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise EventValidationError(name, "is required")
    return value


def validate_feeding(payload: Any) -> None:
    _require_present(payload, "timestamp")
    _require_number(payload, "quantity_kg")


def validate_mortality(payload: Any, remaining_population: Optional[int] = None) -> None:
    """
    `remaining_population` es la población viva antes de esta observación;
    no se pueden registrar más bajas que peces quedan en la jaula.
    """
    _require_present(payload, "date")
    count = _require_number(payload, "count_dead", integer=True)

    if remaining_population is not None and count > remaining_population:
        raise EventValidationError(
            "count_dead",
            f"exceeds remaining population ({remaining_population})",
        )

    status = _get(payload, "status")
    if status is not None and status not in MORTALITY_STATUSES:
        raise EventValidationError("status", f"must be one of {', '.join(MORTALITY_STATUSES)}")


def validate_weighing(payload: Any) -> None:
    _require_present(payload, "date")
    _require_number(payload, "sample_size", integer=True, positive=True)
    _require_number(payload, "average_sample_weight_kg", positive=True)


def validate_sale(payload: Any) -> None:
    _require_present(payload, "date")
    _require_number(payload, "quantity_kg")
    _require_number(payload, "price_per_kg")
    _require_number(payload, "total_price", required=False)


def validate_cost(payload: Any) -> None:
    _require_present(payload, "date")
    _require_present(payload, "category")
    _require_number(payload, "amount")
