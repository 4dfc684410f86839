from datetime import date, datetime, timedelta

from sqlalchemy.orm import Session

from aquafarm.db import SessionLocal, Base, engine
from aquafarm.models.cage import Cage
from aquafarm.models.events import Weighing
from aquafarm.schemas.events import (
    CostCreate,
    FeedingCreate,
    MortalityCreate,
    SaleCreate,
    WeighingCreate,
)
from aquafarm.services import event_service

CYCLE_START = date(2025, 3, 3)


def create_tables() -> None:
    # Por si el esquema no está creado aún
    Base.metadata.create_all(bind=engine)


def seed_cages(db: Session) -> None:
    if db.query(Cage).count() > 0:
        return

    cages = [
        Cage(
            cage_id="C1",
            name="Jaula Norte 1",
            species="tilapia",
            initial_population=5000,
            initial_average_weight_kg=0.02,
            current_average_weight_kg=0.02,
            introduction_date=CYCLE_START,
            status="active",
        ),
        Cage(
            cage_id="C2",
            name="Jaula Norte 2",
            species="tilapia",
            initial_population=4500,
            initial_average_weight_kg=0.025,
            current_average_weight_kg=0.025,
            introduction_date=CYCLE_START,
            status="active",
        ),
        Cage(
            cage_id="C3",
            name="Jaula Sur 1",
            species="clarias",
            initial_population=3000,
            initial_average_weight_kg=0.03,
            current_average_weight_kg=0.03,
            introduction_date=CYCLE_START + timedelta(weeks=2),
            status="active",
        ),
        # Jaula vacía, en mantenimiento entre ciclos
        Cage(
            cage_id="C4",
            name="Jaula Sur 2",
            species="tilapia",
            initial_population=0,
            initial_average_weight_kg=0.0,
            current_average_weight_kg=0.0,
            status="maintenance",
        ),
    ]

    db.add_all(cages)
    db.commit()


def seed_events(db: Session, weeks: int = 12) -> None:
    """Historial semanal simplificado para las jaulas activas."""
    cages = db.query(Cage).filter(Cage.status == "active").all()
    for index, cage in enumerate(cages):
        if event_service.list_events(db, Weighing, cage.cage_id):
            continue

        weight = cage.initial_average_weight_kg
        # cada jaula crece y se alimenta a un ritmo algo distinto
        weekly_growth = 0.045 - index * 0.005
        for week in range(weeks):
            day = cage.introduction_date + timedelta(weeks=week)
            population = cage.initial_population - week * (8 + index * 4)

            event_service.record_feeding(
                db,
                cage,
                FeedingCreate(
                    timestamp=datetime.combine(day, datetime.min.time()).replace(hour=8),
                    quantity_kg=round(population * weight * 0.03 * 7, 2),
                    feed_type="extrudido 3mm" if week < 6 else "extrudido 4.5mm",
                    appetite_rating="bueno",
                ),
            )
            event_service.record_mortality(
                db,
                cage,
                MortalityCreate(date=day, count_dead=8 + index * 4),
            )
            weight = round(weight + weekly_growth, 3)
            event_service.record_weighing(
                db,
                cage,
                WeighingCreate(date=day, sample_size=30, average_sample_weight_kg=weight),
            )

        event_service.record_cost(
            db,
            cage,
            CostCreate(date=cage.introduction_date, category="alevines", amount=cage.initial_population * 0.12),
        )
        event_service.record_cost(
            db,
            cage,
            CostCreate(date=cage.introduction_date, category="alimento", amount=1850.0),
        )
        event_service.record_sale(
            db,
            cage,
            SaleCreate(
                date=cage.introduction_date + timedelta(weeks=weeks),
                quantity_kg=250.0,
                price_per_kg=3.4,
            ),
        )


def main() -> None:
    create_tables()
    db = SessionLocal()
    try:
        seed_cages(db)
        seed_events(db)
        print("✅ Seed completado: jaulas y eventos.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
