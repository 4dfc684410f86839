import os

# Antes de importar la app: sin ficheros de log y BD en memoria
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FILE", "false")

from datetime import date, datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from aquafarm.db import Base, get_db  # noqa: E402
from aquafarm.main import app  # noqa: E402
from aquafarm.services.metrics_cache import MetricsCache  # noqa: E402


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.state.metrics_cache = MetricsCache()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def unit():
    """Jaula de 1000 peces de 0.1 kg introducida el 1 de marzo."""
    return {
        "cage_id": "C1",
        "initial_population": 1000,
        "initial_average_weight_kg": 0.1,
        "current_average_weight_kg": 0.1,
        "introduction_date": date(2025, 3, 1),
    }


@pytest.fixture
def events():
    start = date(2025, 3, 1)
    return {
        "feeding": [
            {"timestamp": datetime(2025, 3, 1 + i, 8), "quantity_kg": 50.0}
            for i in range(12)
        ],
        "mortality": [
            {"date": start + timedelta(days=3), "count_dead": 20},
            {"date": start + timedelta(days=9), "count_dead": 30},
        ],
        "weighings": [
            {"date": start + timedelta(days=7), "average_sample_weight_kg": 0.3},
            {"date": start + timedelta(days=14), "average_sample_weight_kg": 0.5},
        ],
        "sales": [
            {"date": start + timedelta(days=14), "quantity_kg": 40.0, "price_per_kg": 3.0},
        ],
        "costs": [
            {"date": start, "category": "alevines", "amount": 120.0},
            {"date": start, "category": "alimento", "amount": 255.0},
        ],
    }
