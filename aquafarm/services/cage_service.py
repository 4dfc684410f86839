import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from aquafarm.core.errors import NotFoundError
from aquafarm.core.logging import get_logger
from aquafarm.models.cage import Cage
from aquafarm.schemas.cage import CageCreate, CageUpdate
from aquafarm.services.event_service import delete_events_for_unit

logger = get_logger(module="cage_service")


def create_cage(db: Session, cage_in: CageCreate) -> Cage:
    data = cage_in.model_dump()
    # Sin pesajes todavía, el peso actual es el de entrada
    if data.get("current_average_weight_kg") is None:
        data["current_average_weight_kg"] = data["initial_average_weight_kg"]

    db_obj = Cage(cage_id=str(uuid.uuid4()), **data)
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)

    logger.info(
        "Jaula creada en servicio",
        cage_id=db_obj.cage_id,
        name=db_obj.name,
        initial_population=db_obj.initial_population,
    )
    return db_obj


def get_cage(db: Session, cage_id: str) -> Optional[Cage]:
    return (
        db.query(Cage)
        .filter(Cage.cage_id == cage_id)
        .first()
    )


def require_cage(db: Session, cage_id: str) -> Cage:
    cage = get_cage(db, cage_id)
    if cage is None:
        raise NotFoundError("Cage", cage_id)
    return cage


def list_cages(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    status: Optional[str] = None,
) -> List[Cage]:
    query = db.query(Cage)
    if status:
        query = query.filter(Cage.status == status)
    return (
        query.order_by(Cage.name)
        .offset(skip)
        .limit(limit)
        .all()
    )


def update_cage(db: Session, cage_id: str, cage_in: CageUpdate) -> Optional[Cage]:
    db_obj = get_cage(db, cage_id)
    if not db_obj:
        logger.warning(
            "Intento de actualización de jaula inexistente en servicio",
            cage_id=cage_id,
        )
        return None

    update_data = cage_in.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(db_obj, field, value)

    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)

    logger.info(
        "Jaula actualizada en servicio",
        cage_id=cage_id,
        fields=sorted(update_data),
    )
    return db_obj


def delete_cage(db: Session, cage_id: str) -> bool:
    db_obj = get_cage(db, cage_id)
    if not db_obj:
        logger.warning(
            "Intento de borrado de jaula inexistente en servicio",
            cage_id=cage_id,
        )
        return False

    # En sqlite no hay ON DELETE CASCADE sin PRAGMA, borramos a mano
    events_deleted = delete_events_for_unit(db, cage_id)
    db.delete(db_obj)
    db.commit()

    logger.info("Jaula eliminada en servicio", cage_id=cage_id, events_deleted=events_deleted)
    return True
