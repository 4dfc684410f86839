from fastapi import Depends, Request
from sqlalchemy.orm import Session

from aquafarm.db import get_db
from aquafarm.models.cage import Cage
from aquafarm.services import cage_service
from aquafarm.services.metrics_cache import MetricsCache


def get_metrics_cache(request: Request) -> MetricsCache:
    return request.app.state.metrics_cache


def get_cage_or_404(cage_id: str, db: Session = Depends(get_db)) -> Cage:
    # NotFoundError → 404 en el handler de main.py
    return cage_service.require_cage(db=db, cage_id=cage_id)
