from .base import Base
from .cage import Cage
from .events import CostEntry, FeedingEvent, MortalityObservation, Sale, Weighing

__all__ = [
    "Base",
    "Cage",
    "CostEntry",
    "FeedingEvent",
    "MortalityObservation",
    "Sale",
    "Weighing",
]
