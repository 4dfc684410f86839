import datetime as dt
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt

# Los números van en modo estricto: "12" o true no se aceptan como cantidad.
Quantity = Union[StrictFloat, StrictInt]


# ---------- Alimentación ----------

class FeedingCreate(BaseModel):
    timestamp: dt.datetime
    quantity_kg: Quantity
    feed_type: Optional[str] = None
    appetite_rating: Optional[str] = None


class FeedingRead(FeedingCreate):
    event_id: int
    cage_id: str

    model_config = ConfigDict(from_attributes=True)


# ---------- Mortalidad ----------

class MortalityCreate(BaseModel):
    date: dt.date
    count_dead: StrictInt
    status: Literal["normal", "alert"] = "normal"
    notes: Optional[str] = None


class MortalityRead(MortalityCreate):
    event_id: int
    cage_id: str

    model_config = ConfigDict(from_attributes=True)


# ---------- Pesajes ----------

class WeighingCreate(BaseModel):
    date: dt.date
    sample_size: StrictInt
    average_sample_weight_kg: Quantity


class WeighingRead(WeighingCreate):
    event_id: int
    cage_id: str
    total_biomass_kg: float
    growth_rate_pct: float

    model_config = ConfigDict(from_attributes=True)


# ---------- Ventas ----------

class SaleCreate(BaseModel):
    date: dt.date
    quantity_kg: Quantity
    price_per_kg: Quantity
    total_price: Optional[Quantity] = None  # si no viene: kg × precio


class SaleRead(SaleCreate):
    event_id: int
    cage_id: str
    total_price: float

    model_config = ConfigDict(from_attributes=True)


# ---------- Costes ----------

class CostCreate(BaseModel):
    date: dt.date
    category: str
    amount: Quantity
    description: Optional[str] = None


class CostRead(CostCreate):
    event_id: int
    cage_id: str

    model_config = ConfigDict(from_attributes=True)


# ---------- Histórico diario ----------

class DailyTotals(BaseModel):
    feed_kg: float = 0.0
    deaths: int = 0
    sold_kg: float = 0.0
    revenue: float = 0.0
    costs: float = 0.0
    average_weight_kg: Optional[float] = None  # solo si hubo pesaje ese día


class DailyHistoryEntry(BaseModel):
    date: dt.date
    totals: DailyTotals
    feeding: List[Dict[str, Any]] = []
    mortality: List[Dict[str, Any]] = []
    weighings: List[Dict[str, Any]] = []
    sales: List[Dict[str, Any]] = []
    costs: List[Dict[str, Any]] = []
