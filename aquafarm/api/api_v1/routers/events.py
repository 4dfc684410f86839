from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from aquafarm.api.deps import get_cage_or_404, get_metrics_cache
from aquafarm.db import get_db
from aquafarm.models.cage import Cage
from aquafarm.models.events import CostEntry, FeedingEvent, MortalityObservation, Sale, Weighing
from aquafarm.schemas.events import (
    CostCreate,
    CostRead,
    DailyHistoryEntry,
    FeedingCreate,
    FeedingRead,
    MortalityCreate,
    MortalityRead,
    SaleCreate,
    SaleRead,
    WeighingCreate,
    WeighingRead,
)
from aquafarm.services import event_service
from aquafarm.services.history import daily_history
from aquafarm.services.metrics_cache import MetricsCache

# Los errores de validación (EventValidationError) se traducen a 422 en main.py
router = APIRouter(prefix="/cages/{cage_id}", tags=["events"])


# ---------- Alimentación ----------

@router.get("/feedings", response_model=List[FeedingRead])
def list_feedings(cage: Cage = Depends(get_cage_or_404), db: Session = Depends(get_db)):
    return event_service.list_events(db, FeedingEvent, cage.cage_id)


@router.post("/feedings", response_model=FeedingRead, status_code=status.HTTP_201_CREATED)
def create_feeding(
    feeding_in: FeedingCreate,
    cage: Cage = Depends(get_cage_or_404),
    db: Session = Depends(get_db),
    cache: MetricsCache = Depends(get_metrics_cache),
):
    return event_service.record_feeding(db, cage, feeding_in, cache=cache)


# ---------- Mortalidad ----------

@router.get("/mortalities", response_model=List[MortalityRead])
def list_mortalities(cage: Cage = Depends(get_cage_or_404), db: Session = Depends(get_db)):
    return event_service.list_events(db, MortalityObservation, cage.cage_id)


@router.post("/mortalities", response_model=MortalityRead, status_code=status.HTTP_201_CREATED)
def create_mortality(
    mortality_in: MortalityCreate,
    cage: Cage = Depends(get_cage_or_404),
    db: Session = Depends(get_db),
    cache: MetricsCache = Depends(get_metrics_cache),
):
    return event_service.record_mortality(db, cage, mortality_in, cache=cache)


# ---------- Pesajes ----------

@router.get("/weighings", response_model=List[WeighingRead])
def list_weighings(cage: Cage = Depends(get_cage_or_404), db: Session = Depends(get_db)):
    return event_service.list_events(db, Weighing, cage.cage_id)


@router.post("/weighings", response_model=WeighingRead, status_code=status.HTTP_201_CREATED)
def create_weighing(
    weighing_in: WeighingCreate,
    cage: Cage = Depends(get_cage_or_404),
    db: Session = Depends(get_db),
    cache: MetricsCache = Depends(get_metrics_cache),
):
    return event_service.record_weighing(db, cage, weighing_in, cache=cache)


# ---------- Ventas ----------

@router.get("/sales", response_model=List[SaleRead])
def list_sales(cage: Cage = Depends(get_cage_or_404), db: Session = Depends(get_db)):
    return event_service.list_events(db, Sale, cage.cage_id)


@router.post("/sales", response_model=SaleRead, status_code=status.HTTP_201_CREATED)
def create_sale(
    sale_in: SaleCreate,
    cage: Cage = Depends(get_cage_or_404),
    db: Session = Depends(get_db),
    cache: MetricsCache = Depends(get_metrics_cache),
):
    return event_service.record_sale(db, cage, sale_in, cache=cache)


# ---------- Costes ----------

@router.get("/costs", response_model=List[CostRead])
def list_costs(cage: Cage = Depends(get_cage_or_404), db: Session = Depends(get_db)):
    return event_service.list_events(db, CostEntry, cage.cage_id)


@router.post("/costs", response_model=CostRead, status_code=status.HTTP_201_CREATED)
def create_cost(
    cost_in: CostCreate,
    cage: Cage = Depends(get_cage_or_404),
    db: Session = Depends(get_db),
    cache: MetricsCache = Depends(get_metrics_cache),
):
    return event_service.record_cost(db, cage, cost_in, cache=cache)


# ---------- Histórico diario ----------

@router.get("/history", response_model=List[DailyHistoryEntry])
def get_daily_history(
    start: Optional[date] = None,
    end: Optional[date] = None,
    cage: Cage = Depends(get_cage_or_404),
    db: Session = Depends(get_db),
):
    events = event_service.fetch_events_for_unit(db, cage.cage_id)
    return daily_history(events, start=start, end=end)
