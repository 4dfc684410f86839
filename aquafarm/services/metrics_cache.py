import threading
from typing import Callable, Dict, Optional

from aquafarm.core.logging import get_logger
from aquafarm.schemas.metrics import MetricsSnapshot

logger = get_logger(module="metrics_cache")


class MetricsCache:
    """
    Último snapshot calculado por jaula.

    No es un singleton: la aplicación crea una instancia (app.state) y quien
    registra eventos se encarga de invalidar la jaula afectada.

    Cada jaula lleva un contador de generación que sube con cada
    invalidación. Un snapshot calculado antes de una invalidación llega
    con una generación vieja y no se guarda.
    """

    def __init__(self) -> None:
        self._snapshots: Dict[str, MetricsSnapshot] = {}
        self._generations: Dict[str, int] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._snapshots)

    def __contains__(self, cage_id: str) -> bool:
        with self._lock:
            return cage_id in self._snapshots

    def generation(self, cage_id: str) -> int:
        with self._lock:
            return self._generations.get(cage_id, 0)

    def get(self, cage_id: str) -> Optional[MetricsSnapshot]:
        with self._lock:
            return self._snapshots.get(cage_id)

    def put(
        self,
        cage_id: str,
        snapshot: MetricsSnapshot,
        generation: Optional[int] = None,
    ) -> bool:
        """
        Guarda el snapshot. Con `generation`, solo si la jaula no se ha
        invalidado desde que se leyó ese valor; devuelve si se guardó.
        """
        with self._lock:
            if generation is not None and self._generations.get(cage_id, 0) != generation:
                stale = True
            else:
                stale = False
                self._snapshots[cage_id] = snapshot
        if stale:
            logger.debug("Snapshot obsoleto descartado", cage_id=cage_id, generation=generation)
        return not stale

    def invalidate(self, cage_id: str) -> bool:
        with self._lock:
            self._generations[cage_id] = self._generations.get(cage_id, 0) + 1
            removed = self._snapshots.pop(cage_id, None) is not None
        if removed:
            logger.debug("Snapshot invalidado", cage_id=cage_id)
        return removed

    def clear(self) -> None:
        with self._lock:
            for cage_id in self._snapshots:
                self._generations[cage_id] = self._generations.get(cage_id, 0) + 1
            self._snapshots.clear()

    def get_or_compute(
        self,
        cage_id: str,
        compute: Callable[[], MetricsSnapshot],
    ) -> MetricsSnapshot:
        cached = self.get(cage_id)
        if cached is not None:
            return cached

        # El cálculo va fuera del lock; si entretanto llega un evento,
        # se devuelve el resultado pero no se cachea
        generation = self.generation(cage_id)
        snapshot = compute()
        self.put(cage_id, snapshot, generation=generation)
        return snapshot
