from __future__ import annotations


class AquafarmError(Exception):
    """Base de los errores propios del servicio."""


class NotFoundError(AquafarmError):
    def __init__(self, entity: str, entity_id: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id!r} not found")


class EventValidationError(AquafarmError):
    """
    Error de validación estricta al registrar un evento.

    `field` es el nombre del campo que ha fallado, para que la API
    pueda devolverlo tal cual al cliente.
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}
