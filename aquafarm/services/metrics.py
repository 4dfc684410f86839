"""
Motor de métricas derivadas de una jaula.

Funciones puras sobre las colecciones de eventos (alimentación, mortalidad,
pesajes, ventas y costes). No guardan estado ni escriben nada: el mismo
input produce siempre el mismo snapshot.

Los eventos pueden ser filas ORM, schemas pydantic o simples dicts; los
campos numéricos mal formados (texto, NaN, negativos) cuentan como 0 para
que el dashboard siempre tenga algo que pintar. La validación estricta vive
en `validation.py` y se aplica antes de guardar.
"""
from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from aquafarm.schemas.metrics import MetricsSnapshot, MetricStatus, PerformanceTier

EVENT_CATEGORIES = ("feeding", "mortality", "weighings", "sales", "costs")

# (tier, fcr máximo, supervivencia mínima) en orden de prioridad
PERFORMANCE_TIERS = (
    (PerformanceTier.EXCELLENT, 1.5, 95.0),
    (PerformanceTier.GOOD, 2.0, 90.0),
    (PerformanceTier.AVERAGE, 2.5, 85.0),
)

_EARLIEST = datetime.min


@dataclass(frozen=True)
class MetricResult:
    value: float
    status: MetricStatus = MetricStatus.OK

    @property
    def is_defined(self) -> bool:
        return self.status == MetricStatus.OK


@dataclass(frozen=True)
class UnitEvents:
    """Historial completo de eventos de una jaula, por categoría."""
    feeding: Sequence[Any] = ()
    mortality: Sequence[Any] = ()
    weighings: Sequence[Any] = ()
    sales: Sequence[Any] = ()
    costs: Sequence[Any] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Iterable[Any]]) -> "UnitEvents":
        return cls(**{name: tuple(data.get(name) or ()) for name in EVENT_CATEGORIES})


# ---------- helpers internos ----------

def _field(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _as_float(value: Any) -> float:
    """Número finito (puede ser negativo); cualquier otra cosa es 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def _capped(value: float) -> float:
    # sumas o productos de números finitos pueden desbordar a inf; se topan al máximo
    return value if math.isfinite(value) else sys.float_info.max


def _capped_sum(values: Iterable[float]) -> float:
    return _capped(sum(values, 0.0))


def _ratio(numerator: float, denominator: float) -> MetricResult:
    """Cociente ya validado (denominador > 0); si desborda, `undefined`."""
    value = numerator / denominator
    if not math.isfinite(value):
        return MetricResult(0.0, MetricStatus.UNDEFINED)
    return MetricResult(value)


def _as_number(value: Any) -> float:
    """Como `_as_float` pero los negativos también cuentan como 0."""
    return max(_as_float(value), 0.0)


def _as_moment(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        try:
            return _as_moment(datetime.fromisoformat(value))
        except ValueError:
            return None
    return None


def event_moment(event: Any) -> datetime:
    """Fecha del evento (`timestamp` o `date`); sin fecha va al principio."""
    value = _field(event, "timestamp")
    if value is None:
        value = _field(event, "date")
    return _as_moment(value) or _EARLIEST


def chronological(events: Iterable[Any]) -> List[Any]:
    # sorted() es estable: con la misma fecha se respeta el orden de registro
    return sorted(events, key=event_moment)


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


# ---------- totales ----------

def total_deaths(mortality_events: Iterable[Any]) -> int:
    return int(_capped_sum(_as_number(_field(e, "count_dead")) for e in mortality_events))


def total_feed_kg(feeding_events: Iterable[Any], since: Any = None) -> float:
    """Pienso total; si hay `since` solo cuenta lo registrado desde ese día."""
    start = _as_moment(since)
    return _capped_sum(
        _as_number(_field(event, "quantity_kg"))
        for event in feeding_events
        if start is None or event_moment(event) >= start
    )


def total_costs(cost_entries: Iterable[Any]) -> float:
    return _capped_sum(_as_number(_field(e, "amount")) for e in cost_entries)


def total_sold_kg(sales: Iterable[Any]) -> float:
    return _capped_sum(_as_number(_field(s, "quantity_kg")) for s in sales)


def sale_total_price(sale: Any) -> float:
    total = _field(sale, "total_price")
    if total is not None:
        return _as_number(total)
    return _capped(_as_number(_field(sale, "quantity_kg")) * _as_number(_field(sale, "price_per_kg")))


def total_revenue(sales: Iterable[Any]) -> float:
    return _capped_sum(sale_total_price(s) for s in sales)


# ---------- métricas ----------

def compute_remaining_population(initial_population: Any, mortality_events: Iterable[Any]) -> int:
    initial = int(_as_number(initial_population))
    return max(initial - total_deaths(mortality_events), 0)


def compute_survival_rate(initial_population: Any, mortality_events: Iterable[Any]) -> MetricResult:
    """
    100 × (1 − muertes / población inicial), siempre dentro de [0, 100].
    Con población inicial 0 devuelve 0 marcado como `undefined`.
    """
    initial = _as_number(initial_population)
    if initial <= 0:
        return MetricResult(0.0, MetricStatus.UNDEFINED)

    rate = 100.0 * (1.0 - total_deaths(mortality_events) / initial)
    return MetricResult(_clamp(rate, 0.0, 100.0))


def compute_mortality_rate(initial_population: Any, mortality_events: Iterable[Any]) -> MetricResult:
    survival = compute_survival_rate(initial_population, mortality_events)
    if not survival.is_defined:
        return survival
    return MetricResult(100.0 - survival.value)


def compute_growth_rate(weighings: Iterable[Any]) -> MetricResult:
    """
    Crecimiento (%) del último pesaje respecto al anterior.
    Con menos de 2 pesajes: 0 e `insufficient_data`.
    """
    ordered = chronological(weighings)
    if len(ordered) < 2:
        return MetricResult(0.0, MetricStatus.INSUFFICIENT_DATA)

    previous = _as_number(_field(ordered[-2], "average_sample_weight_kg"))
    latest = _as_number(_field(ordered[-1], "average_sample_weight_kg"))
    if previous <= 0:
        return MetricResult(0.0, MetricStatus.UNDEFINED)

    return _ratio((latest - previous) * 100.0, previous)


def compute_biomass(remaining_population: Any, current_average_weight: Any) -> float:
    return _capped(_as_number(remaining_population) * _as_number(current_average_weight))


def current_average_weight(unit: Any, weighings: Iterable[Any] = ()) -> float:
    """Peso medio del último pesaje; sin pesajes, el guardado en la jaula."""
    ordered = chronological(weighings)
    if ordered:
        return _as_number(_field(ordered[-1], "average_sample_weight_kg"))
    return _as_number(_field(unit, "current_average_weight_kg"))


def feed_conversion_ratio(total_feed: Any, weight_gain: Any) -> MetricResult:
    """Pienso / ganancia de peso. Ganancia <= 0 → 0 marcado como `undefined`."""
    gain = _as_float(weight_gain)
    if gain <= 0:
        return MetricResult(0.0, MetricStatus.UNDEFINED)
    return _ratio(_as_number(total_feed), gain)


def compute_fcr(
    unit: Any,
    feeding_events: Iterable[Any],
    weighings: Iterable[Any],
    mortality_events: Iterable[Any] = (),
) -> MetricResult:
    """
    FCR acumulado desde la fecha de introducción:
    pienso total / (biomasa actual − biomasa inicial).

    La biomasa actual usa la población restante (si se pasan los eventos de
    mortalidad) y el peso medio del último pesaje.
    """
    initial_population = _field(unit, "initial_population")
    remaining = compute_remaining_population(initial_population, mortality_events)
    current = compute_biomass(remaining, current_average_weight(unit, weighings))
    initial = compute_biomass(initial_population, _field(unit, "initial_average_weight_kg"))

    feed = total_feed_kg(feeding_events, since=_field(unit, "introduction_date"))
    return feed_conversion_ratio(feed, current - initial)


def compute_cost_per_kg(cost_entries: Iterable[Any], current_biomass: Any) -> MetricResult:
    biomass = _as_number(current_biomass)
    if biomass <= 0:
        return MetricResult(0.0, MetricStatus.UNDEFINED)
    return _ratio(total_costs(cost_entries), biomass)


def classify_performance(fcr: Any, survival_rate: Any) -> PerformanceTier:
    """Primer tier cuyo FCR máximo y supervivencia mínima se cumplen a la vez."""
    fcr_value = _as_number(fcr)
    survival = _as_number(survival_rate)
    for tier, max_fcr, min_survival in PERFORMANCE_TIERS:
        if fcr_value <= max_fcr and survival >= min_survival:
            return tier
    return PerformanceTier.CRITICAL


# ---------- snapshot completo ----------

def compute_snapshot(unit: Any, events: Union[UnitEvents, Mapping[str, Iterable[Any]]]) -> MetricsSnapshot:
    if not isinstance(events, UnitEvents):
        events = UnitEvents.from_mapping(events)

    initial_population = _field(unit, "initial_population")

    survival = compute_survival_rate(initial_population, events.mortality)
    mortality = compute_mortality_rate(initial_population, events.mortality)
    growth = compute_growth_rate(events.weighings)
    fcr = compute_fcr(unit, events.feeding, events.weighings, events.mortality)

    remaining = compute_remaining_population(initial_population, events.mortality)
    avg_weight = current_average_weight(unit, events.weighings)
    biomass = compute_biomass(remaining, avg_weight)
    cost_per_kg = compute_cost_per_kg(events.costs, biomass)

    sold_kg = total_sold_kg(events.sales)

    performance = None
    if fcr.is_defined and survival.is_defined:
        performance = classify_performance(fcr.value, survival.value)

    statuses = (survival.status, growth.status, fcr.status, cost_per_kg.status)

    return MetricsSnapshot(
        cage_id=str(_field(unit, "cage_id", "")),
        feed_conversion_ratio=fcr.value,
        fcr_status=fcr.status,
        survival_rate=survival.value,
        survival_status=survival.status,
        mortality_rate=mortality.value,
        growth_rate=growth.value,
        growth_status=growth.status,
        cost_per_kg=cost_per_kg.value,
        cost_per_kg_status=cost_per_kg.status,
        remaining_population=remaining,
        current_average_weight_kg=avg_weight,
        biomass_kg=biomass,
        total_feed_kg=total_feed_kg(events.feeding, since=_field(unit, "introduction_date")),
        total_costs=total_costs(events.costs),
        total_sold_kg=sold_kg,
        total_revenue=total_revenue(events.sales),
        unsold_biomass_kg=max(biomass - sold_kg, 0.0),
        performance=performance,
        low_confidence=any(status != MetricStatus.OK for status in statuses),
    )


# Nombre → función de una sola métrica (para la API)
def compute_single_metric(name: str, unit: Any, events: UnitEvents) -> MetricResult:
    initial_population = _field(unit, "initial_population")
    remaining = compute_remaining_population(initial_population, events.mortality)
    biomass = compute_biomass(remaining, current_average_weight(unit, events.weighings))

    if name == "fcr":
        return compute_fcr(unit, events.feeding, events.weighings, events.mortality)
    if name == "survival_rate":
        return compute_survival_rate(initial_population, events.mortality)
    if name == "mortality_rate":
        return compute_mortality_rate(initial_population, events.mortality)
    if name == "growth_rate":
        return compute_growth_rate(events.weighings)
    if name == "cost_per_kg":
        return compute_cost_per_kg(events.costs, biomass)
    if name == "biomass":
        return MetricResult(biomass)
    if name == "remaining_population":
        return MetricResult(float(remaining))
    raise KeyError(name)


SINGLE_METRICS = (
    "fcr",
    "survival_rate",
    "mortality_rate",
    "growth_rate",
    "cost_per_kg",
    "biomass",
    "remaining_population",
)
