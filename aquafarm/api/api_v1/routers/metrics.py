from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from aquafarm.api.deps import get_cage_or_404, get_metrics_cache
from aquafarm.core.logging import get_logger
from aquafarm.db import get_db
from aquafarm.models.cage import Cage
from aquafarm.schemas.metrics import MetricsSnapshot, MetricValue, RecomputeFailure, RecomputeResponse
from aquafarm.services.batch import recompute_active_cages
from aquafarm.services.event_service import fetch_events_for_unit
from aquafarm.services.metrics import SINGLE_METRICS, compute_single_metric, compute_snapshot
from aquafarm.services.metrics_cache import MetricsCache

router = APIRouter(tags=["metrics"])
logger = get_logger(module="metrics")


@router.get("/cages/{cage_id}/metrics", response_model=MetricsSnapshot)
def get_cage_metrics(
    refresh: bool = False,
    cage: Cage = Depends(get_cage_or_404),
    db: Session = Depends(get_db),
    cache: MetricsCache = Depends(get_metrics_cache),
):
    if refresh:
        cache.invalidate(cage.cage_id)

    snapshot = cache.get_or_compute(
        cage.cage_id,
        lambda: compute_snapshot(cage, fetch_events_for_unit(db, cage.cage_id)),
    )
    if snapshot.low_confidence:
        logger.info(
            "Snapshot con datos insuficientes",
            cage_id=cage.cage_id,
            fcr_status=snapshot.fcr_status.value,
            growth_status=snapshot.growth_status.value,
        )
    return snapshot


@router.get("/cages/{cage_id}/metrics/{metric}", response_model=MetricValue)
def get_single_metric(
    metric: str,
    cage: Cage = Depends(get_cage_or_404),
    db: Session = Depends(get_db),
):
    if metric not in SINGLE_METRICS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown metric, expected one of: {', '.join(SINGLE_METRICS)}",
        )

    result = compute_single_metric(metric, cage, fetch_events_for_unit(db, cage.cage_id))
    return MetricValue(
        cage_id=cage.cage_id,
        metric=metric,
        value=result.value,
        status=result.status,
    )


@router.post("/metrics/recompute", response_model=RecomputeResponse)
def recompute_metrics(
    db: Session = Depends(get_db),
    cache: MetricsCache = Depends(get_metrics_cache),
):
    result = recompute_active_cages(db, cache)
    if result.failures:
        logger.warning(
            "Recálculo con jaulas fallidas",
            failed=result.failed,
            cage_ids=sorted(result.failures),
        )

    return RecomputeResponse(
        computed=result.computed,
        failed=result.failed,
        snapshots=result.snapshots,
        failures=[
            RecomputeFailure(cage_id=cage_id, error=error)
            for cage_id, error in sorted(result.failures.items())
        ],
    )
