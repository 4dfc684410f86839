from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

from sqlalchemy.orm import Session

from aquafarm.core.config import settings
from aquafarm.core.logging import get_logger
from aquafarm.models.cage import Cage
from aquafarm.schemas.metrics import MetricsSnapshot
from aquafarm.services.event_service import fetch_events_for_unit
from aquafarm.services.metrics import UnitEvents, compute_snapshot
from aquafarm.services.metrics_cache import MetricsCache

logger = get_logger(module="metrics_batch")


@dataclass
class BatchResult:
    snapshots: Dict[str, MetricsSnapshot] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def computed(self) -> int:
        return len(self.snapshots)

    @property
    def failed(self) -> int:
        return len(self.failures)


def _unit_id(unit: Any) -> str:
    if isinstance(unit, dict):
        return str(unit.get("cage_id"))
    return str(getattr(unit, "cage_id", None))


def recompute_snapshots(
    items: Iterable[Tuple[Any, UnitEvents]],
    max_workers: Optional[int] = None,
) -> BatchResult:
    """
    Calcula el snapshot de cada (jaula, eventos) en paralelo.

    Un fallo en una jaula se registra en `failures` y no afecta al resto.
    El resultado va indexado por cage_id, así que el orden de llegada da igual.
    """
    max_workers = max_workers or settings.METRICS_MAX_WORKERS
    result = BatchResult()
    items = list(items)
    if not items:
        return result

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {
            pool.submit(compute_snapshot, unit, events): _unit_id(unit)
            for unit, events in items
        }
        for future in as_completed(futures):
            cage_id = futures[future]
            try:
                result.snapshots[cage_id] = future.result()
            except Exception as exc:
                logger.opt(exception=exc).error(
                    "Error calculando métricas de la jaula",
                    cage_id=cage_id,
                )
                result.failures[cage_id] = str(exc) or exc.__class__.__name__

    logger.info(
        "Recálculo de métricas terminado",
        computed=result.computed,
        failed=result.failed,
    )
    return result


def recompute_active_cages(
    db: Session,
    cache: MetricsCache,
    max_workers: Optional[int] = None,
) -> BatchResult:
    """Barrido periódico: recalcula todas las jaulas activas y refresca la caché."""
    cages = db.query(Cage).filter(Cage.status == "active").all()

    # La generación se lee antes que los eventos: si llega uno nuevo
    # durante el barrido, su snapshot no se cachea
    generations = {cage.cage_id: cache.generation(cage.cage_id) for cage in cages}

    # Lecturas de BD en serie (la Session no es thread-safe), cálculo en paralelo
    items = [(cage, fetch_events_for_unit(db, cage.cage_id)) for cage in cages]
    result = recompute_snapshots(items, max_workers=max_workers)

    for cage_id, snapshot in result.snapshots.items():
        cache.put(cage_id, snapshot, generation=generations.get(cage_id))
    for cage_id in result.failures:
        cache.invalidate(cage_id)

    return result
