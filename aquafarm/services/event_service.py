from typing import List, Optional, Type

from sqlalchemy.orm import Session

from aquafarm.core.logging import get_logger
from aquafarm.models.base import Base
from aquafarm.models.cage import Cage
from aquafarm.models.events import CostEntry, FeedingEvent, MortalityObservation, Sale, Weighing
from aquafarm.schemas.events import (
    CostCreate,
    FeedingCreate,
    MortalityCreate,
    SaleCreate,
    WeighingCreate,
)
from aquafarm.services import validation
from aquafarm.services.metrics import (
    UnitEvents,
    chronological,
    compute_biomass,
    compute_growth_rate,
    compute_remaining_population,
)
from aquafarm.services.metrics_cache import MetricsCache

logger = get_logger(module="event_service")

EVENT_MODELS = (FeedingEvent, MortalityObservation, Weighing, Sale, CostEntry)


# ---------- lectura ----------

def list_events(db: Session, model: Type[Base], cage_id: str) -> List[Base]:
    order = model.timestamp if model is FeedingEvent else model.date
    return (
        db.query(model)
        .filter(model.cage_id == cage_id)
        .order_by(order.asc(), model.event_id.asc())
        .all()
    )


def fetch_events_for_unit(db: Session, cage_id: str) -> UnitEvents:
    """Todo el historial de la jaula, cada categoría en orden cronológico."""
    return UnitEvents(
        feeding=tuple(list_events(db, FeedingEvent, cage_id)),
        mortality=tuple(list_events(db, MortalityObservation, cage_id)),
        weighings=tuple(list_events(db, Weighing, cage_id)),
        sales=tuple(list_events(db, Sale, cage_id)),
        costs=tuple(list_events(db, CostEntry, cage_id)),
    )


def delete_events_for_unit(db: Session, cage_id: str) -> int:
    deleted = 0
    for model in EVENT_MODELS:
        deleted += (
            db.query(model)
            .filter(model.cage_id == cage_id)
            .delete(synchronize_session=False)
        )
    return deleted


# ---------- escritura ----------

def _store(db: Session, db_obj: Base, cache: Optional[MetricsCache]) -> Base:
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)

    # Cualquier evento nuevo deja obsoleto el snapshot de la jaula
    if cache is not None:
        cache.invalidate(db_obj.cage_id)
    return db_obj


def record_feeding(
    db: Session,
    cage: Cage,
    feeding_in: FeedingCreate,
    cache: Optional[MetricsCache] = None,
) -> FeedingEvent:
    validation.validate_feeding(feeding_in)

    db_obj = _store(db, FeedingEvent(cage_id=cage.cage_id, **feeding_in.model_dump()), cache)
    logger.info(
        "Alimentación registrada",
        cage_id=cage.cage_id,
        quantity_kg=db_obj.quantity_kg,
    )
    return db_obj


def record_mortality(
    db: Session,
    cage: Cage,
    mortality_in: MortalityCreate,
    cache: Optional[MetricsCache] = None,
) -> MortalityObservation:
    previous = list_events(db, MortalityObservation, cage.cage_id)
    remaining = compute_remaining_population(cage.initial_population, previous)
    validation.validate_mortality(mortality_in, remaining_population=remaining)

    db_obj = _store(db, MortalityObservation(cage_id=cage.cage_id, **mortality_in.model_dump()), cache)

    log = logger.warning if db_obj.status == "alert" else logger.info
    log(
        "Mortalidad registrada",
        cage_id=cage.cage_id,
        count_dead=db_obj.count_dead,
        remaining_population=remaining - db_obj.count_dead,
    )
    return db_obj


def record_weighing(
    db: Session,
    cage: Cage,
    weighing_in: WeighingCreate,
    cache: Optional[MetricsCache] = None,
) -> Weighing:
    validation.validate_weighing(weighing_in)

    mortality = list_events(db, MortalityObservation, cage.cage_id)
    previous = list_events(db, Weighing, cage.cage_id)
    remaining = compute_remaining_population(cage.initial_population, mortality)

    db_obj = Weighing(cage_id=cage.cage_id, **weighing_in.model_dump())
    db_obj.total_biomass_kg = compute_biomass(remaining, db_obj.average_sample_weight_kg)

    # Crecimiento respecto al pesaje inmediatamente anterior en fecha
    ordered = chronological([*previous, db_obj])
    position = ordered.index(db_obj)
    if position > 0:
        db_obj.growth_rate_pct = compute_growth_rate(ordered[position - 1:position + 1]).value
    else:
        db_obj.growth_rate_pct = 0.0

    # Pesaje con fecha atrasada: el siguiente pasa a compararse con este
    if position < len(ordered) - 1:
        following = ordered[position + 1]
        following.growth_rate_pct = compute_growth_rate([db_obj, following]).value
        db.add(following)

    # Solo el pesaje más reciente define el peso actual de la jaula
    if position == len(ordered) - 1:
        cage.current_average_weight_kg = db_obj.average_sample_weight_kg
        db.add(cage)

    db_obj = _store(db, db_obj, cache)
    logger.info(
        "Pesaje registrado",
        cage_id=cage.cage_id,
        average_weight_kg=db_obj.average_sample_weight_kg,
        growth_rate_pct=round(db_obj.growth_rate_pct, 2),
    )
    return db_obj


def record_sale(
    db: Session,
    cage: Cage,
    sale_in: SaleCreate,
    cache: Optional[MetricsCache] = None,
) -> Sale:
    validation.validate_sale(sale_in)

    data = sale_in.model_dump()
    if data.get("total_price") is None:
        data["total_price"] = data["quantity_kg"] * data["price_per_kg"]

    db_obj = _store(db, Sale(cage_id=cage.cage_id, **data), cache)
    logger.info(
        "Venta registrada",
        cage_id=cage.cage_id,
        quantity_kg=db_obj.quantity_kg,
        total_price=db_obj.total_price,
    )
    return db_obj


def record_cost(
    db: Session,
    cage: Cage,
    cost_in: CostCreate,
    cache: Optional[MetricsCache] = None,
) -> CostEntry:
    validation.validate_cost(cost_in)

    db_obj = _store(db, CostEntry(cage_id=cage.cage_id, **cost_in.model_dump()), cache)
    logger.info(
        "Coste registrado",
        cage_id=cage.cage_id,
        category=db_obj.category,
        amount=db_obj.amount,
    )
    return db_obj
