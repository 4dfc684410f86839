from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from aquafarm.api.deps import get_metrics_cache
from aquafarm.core.logging import get_logger
from aquafarm.db import get_db
from aquafarm.schemas.cage import CageCreate, CageRead, CageUpdate
from aquafarm.services import cage_service
from aquafarm.services.metrics_cache import MetricsCache

router = APIRouter(prefix="/cages", tags=["cages"])
logger = get_logger(module="cages")


@router.get("/", response_model=List[CageRead])
def list_cages(
    skip: int = 0,
    limit: int = 100,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
):
    cages = cage_service.list_cages(db=db, skip=skip, limit=limit, status=status)
    logger.info(
        "Listando jaulas",
        skip=skip,
        limit=limit,
        status=status,
        cages_count=len(cages),
    )
    return cages


@router.get("/{cage_id}", response_model=CageRead)
def get_cage(
    cage_id: str,
    db: Session = Depends(get_db),
):
    cage = cage_service.get_cage(db=db, cage_id=cage_id)
    if not cage:
        logger.warning("Jaula no encontrada", cage_id=cage_id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Cage not found",
        )
    return cage


@router.post("/", response_model=CageRead, status_code=status.HTTP_201_CREATED)
def create_cage(
    cage_in: CageCreate,
    db: Session = Depends(get_db),
):
    cage = cage_service.create_cage(db=db, cage_in=cage_in)
    logger.info("Jaula creada", cage_id=cage.cage_id, name=cage.name)
    return cage


@router.patch("/{cage_id}", response_model=CageRead)
def update_cage(
    cage_id: str,
    cage_in: CageUpdate,
    db: Session = Depends(get_db),
    cache: MetricsCache = Depends(get_metrics_cache),
):
    cage = cage_service.update_cage(db=db, cage_id=cage_id, cage_in=cage_in)
    if not cage:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Cage not found",
        )

    # población o pesos iniciales cambian las métricas
    cache.invalidate(cage_id)
    logger.info("Jaula actualizada", cage_id=cage_id)
    return cage


@router.delete("/{cage_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_cage(
    cage_id: str,
    db: Session = Depends(get_db),
    cache: MetricsCache = Depends(get_metrics_cache),
):
    deleted = cage_service.delete_cage(db=db, cage_id=cage_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Cage not found",
        )

    cache.invalidate(cage_id)
    logger.info("Jaula eliminada", cage_id=cage_id)
