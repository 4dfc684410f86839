from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class MetricStatus(str, Enum):
    OK = "ok"
    INSUFFICIENT_DATA = "insufficient_data"  # p.ej. menos de 2 pesajes
    UNDEFINED = "undefined"                  # división por cero, ganancia <= 0...


class PerformanceTier(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    CRITICAL = "critical"


# ---------- Snapshot de métricas de una jaula ----------

class MetricsSnapshot(BaseModel):
    cage_id: str

    feed_conversion_ratio: float
    fcr_status: MetricStatus

    survival_rate: float  # %
    survival_status: MetricStatus
    mortality_rate: float  # %

    growth_rate: float  # % respecto al pesaje anterior
    growth_status: MetricStatus

    cost_per_kg: float
    cost_per_kg_status: MetricStatus

    remaining_population: int
    current_average_weight_kg: float
    biomass_kg: float

    total_feed_kg: float
    total_costs: float
    total_sold_kg: float
    total_revenue: float
    unsold_biomass_kg: float

    # None cuando el FCR o la supervivencia no se pueden calcular
    performance: Optional[PerformanceTier] = None
    low_confidence: bool = False

    model_config = ConfigDict(frozen=True)


class MetricValue(BaseModel):
    cage_id: str
    metric: str
    value: float
    status: MetricStatus = MetricStatus.OK


# ---------- Recálculo masivo ----------

class RecomputeFailure(BaseModel):
    cage_id: str
    error: str


class RecomputeResponse(BaseModel):
    computed: int
    failed: int
    snapshots: Dict[str, MetricsSnapshot]
    failures: List[RecomputeFailure]
