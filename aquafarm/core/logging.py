# aquafarm/core/logging.py
import logging
import os
import sys
from typing import Any, Optional

from loguru import logger

from aquafarm.core.config import settings

# Loggers de la librería estándar que redirigimos a loguru
INTERCEPTED_LOGGERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "fastapi",
    "sqlalchemy.engine",
    "concurrent.futures",
)

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level> | {extra}"
)

JSON_FORMAT = (
    '{{"time":"{time}","level":"{level}","message":{message!r},'
    '"name":"{name}","function":"{function}","line":{line},"extra":"{extra}"}}'
)


class InterceptHandler(logging.Handler):
    """
    Redirige los registros de `logging` estándar hacia loguru.
    """
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        # saltamos los frames internos de logging/__init__.py
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(
            depth=depth,
            exception=record.exc_info,
        ).log(level, record.getMessage())


def setup_logging(
    *,
    json_logs: Optional[bool] = None,
    log_file: Optional[bool] = None,
    log_dir: Optional[str] = None,
    level: str = "INFO",
) -> None:
    """
    Config global del logging:
    - Intercepta logging estándar (uvicorn, fastapi, sqlalchemy...)
    - Consola: desde `level`
    - Ficheros (si `log_file`):
        - metrics_YYYY-MM-DD.log → INFO y WARNING
        - error_YYYY-MM-DD.log   → ERROR y superiores

    Los valores por defecto salen de `settings` (LOG_JSON, LOG_FILE, LOG_DIR).
    """
    if json_logs is None:
        json_logs = settings.LOG_JSON
    if log_file is None:
        log_file = settings.LOG_FILE
    log_dir = log_dir or settings.LOG_DIR

    logging.root.handlers = [InterceptHandler()]
    logging.root.setLevel(logging.INFO)

    for name in INTERCEPTED_LOGGERS:
        logging.getLogger(name).handlers = [InterceptHandler()]
        logging.getLogger(name).propagate = False

    logger.remove()

    fmt = JSON_FORMAT if json_logs else TEXT_FORMAT

    logger.add(
        sys.stdout,
        format=fmt,
        level=level,
        backtrace=True,
        diagnose=False,
    )

    if not log_file:
        return

    os.makedirs(log_dir, exist_ok=True)

    # INFO / WARNING → metrics_YYYY-MM-DD.log (los errores van aparte)
    logger.add(
        os.path.join(log_dir, "metrics_{time:YYYY-MM-DD}.log"),
        format=fmt,
        level=level,
        filter=lambda record: record["level"].no < 40,
        rotation="00:00",
        retention="7 days",
        compression="zip",
        enqueue=True,
    )

    # ERROR y CRITICAL → error_YYYY-MM-DD.log
    logger.add(
        os.path.join(log_dir, "error_{time:YYYY-MM-DD}.log"),
        format=fmt,
        level="ERROR",
        rotation="00:00",
        retention="30 days",
        compression="zip",
        enqueue=True,
    )


def get_logger(**binds: Any):
    """
    Logger con contexto extra.
    Ej: logger = get_logger(module="metrics", cage_id=cage_id)
    """
    return logger.bind(**binds)
