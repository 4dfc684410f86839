from __future__ import annotations

import datetime as dt
from typing import Optional

from sqlalchemy import Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

MORTALITY_STATUSES = ("normal", "alert")

# Todos los eventos son append-only: se insertan y no se modifican.
# `event_id` autoincremental marca el orden de registro (desempate por fecha).


class FeedingEvent(Base):
    __tablename__ = "FeedingEvents"

    event_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cage_id: Mapped[str] = mapped_column(ForeignKey("Cages.cage_id", ondelete="CASCADE"), index=True)
    timestamp: Mapped[dt.datetime] = mapped_column(DateTime)
    quantity_kg: Mapped[float] = mapped_column(Float)
    feed_type: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    appetite_rating: Mapped[Optional[str]] = mapped_column(String, nullable=True)  # bueno, normal, malo...

    def __repr__(self) -> str:
        return f"<FeedingEvent id={self.event_id!r} cage={self.cage_id!r} kg={self.quantity_kg!r}>"


class MortalityObservation(Base):
    __tablename__ = "MortalityObservations"

    event_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cage_id: Mapped[str] = mapped_column(ForeignKey("Cages.cage_id", ondelete="CASCADE"), index=True)
    date: Mapped[dt.date] = mapped_column(Date)
    count_dead: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(String, default="normal")  # normal | alert
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<MortalityObservation id={self.event_id!r} cage={self.cage_id!r} dead={self.count_dead!r}>"


class Weighing(Base):
    __tablename__ = "Weighings"

    event_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cage_id: Mapped[str] = mapped_column(ForeignKey("Cages.cage_id", ondelete="CASCADE"), index=True)
    date: Mapped[dt.date] = mapped_column(Date)
    sample_size: Mapped[int] = mapped_column(Integer)
    average_sample_weight_kg: Mapped[float] = mapped_column(Float)

    # Derivados al registrar
    total_biomass_kg: Mapped[float] = mapped_column(Float, default=0.0)
    growth_rate_pct: Mapped[float] = mapped_column(Float, default=0.0)

    def __repr__(self) -> str:
        return f"<Weighing id={self.event_id!r} cage={self.cage_id!r} avg={self.average_sample_weight_kg!r}>"


class Sale(Base):
    __tablename__ = "Sales"

    event_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cage_id: Mapped[str] = mapped_column(ForeignKey("Cages.cage_id", ondelete="CASCADE"), index=True)
    date: Mapped[dt.date] = mapped_column(Date)
    quantity_kg: Mapped[float] = mapped_column(Float)
    price_per_kg: Mapped[float] = mapped_column(Float)
    total_price: Mapped[float] = mapped_column(Float)

    def __repr__(self) -> str:
        return f"<Sale id={self.event_id!r} cage={self.cage_id!r} kg={self.quantity_kg!r}>"


class CostEntry(Base):
    __tablename__ = "CostEntries"

    event_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cage_id: Mapped[str] = mapped_column(ForeignKey("Cages.cage_id", ondelete="CASCADE"), index=True)
    date: Mapped[dt.date] = mapped_column(Date)
    category: Mapped[str] = mapped_column(String)  # alimento, alevines, mano_obra...
    amount: Mapped[float] = mapped_column(Float)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<CostEntry id={self.event_id!r} cage={self.cage_id!r} amount={self.amount!r}>"
