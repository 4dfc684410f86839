from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

import aquafarm.models  # noqa: F401  registra las tablas en Base.metadata
from aquafarm.api.api_v1.api import api_router
from aquafarm.core.config import settings
from aquafarm.core.errors import EventValidationError, NotFoundError
from aquafarm.core.logging import get_logger, setup_logging
from aquafarm.db import Base, engine
from aquafarm.services.metrics_cache import MetricsCache

logger = get_logger(module="main")

app = FastAPI(title=settings.PROJECT_NAME)

# Una caché por aplicación; se invalida al registrar eventos
app.state.metrics_cache = MetricsCache()

app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def on_startup():
    setup_logging()
    # Crea las tablas si no existen (y el fichero sqlite)
    Base.metadata.create_all(bind=engine)
    logger.info("Aplicación arrancada", database_url=settings.DATABASE_URL)


@app.exception_handler(EventValidationError)
async def event_validation_error_handler(request: Request, exc: EventValidationError):
    logger.warning(
        "Evento rechazado por validación",
        path=request.url.path,
        field=exc.field,
        reason=exc.message,
    )
    return JSONResponse(
        status_code=422,
        content={"detail": exc.to_dict()},
    )


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": f"{exc.entity} not found"},
    )


@app.get("/", tags=["health"])
def read_root():
    return {"message": "ok"}
