from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy import Date, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Cage(Base):
    __tablename__ = "Cages"

    cage_id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String)
    species: Mapped[str] = mapped_column(String)

    # Estado al inicio del ciclo
    initial_population: Mapped[int] = mapped_column(Integer, default=0)
    initial_average_weight_kg: Mapped[float] = mapped_column(Float, default=0.0)
    introduction_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Se actualiza con cada pesaje
    current_average_weight_kg: Mapped[float] = mapped_column(Float, default=0.0)

    status: Mapped[str] = mapped_column(String, default="empty")  # empty | active | maintenance
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Cage id={self.cage_id!r} name={self.name!r} status={self.status!r}>"
