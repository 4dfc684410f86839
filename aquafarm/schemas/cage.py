from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

CageStatus = Literal["empty", "active", "maintenance"]

# Columnas de Cages que admiten NULL
NULLABLE_FIELDS = frozenset({"introduction_date", "notes"})


class CageBase(BaseModel):
    name: str
    species: str
    initial_population: int = Field(ge=0)
    initial_average_weight_kg: float = Field(ge=0)
    current_average_weight_kg: Optional[float] = Field(default=None, ge=0)
    introduction_date: Optional[date] = None
    status: CageStatus = "empty"
    notes: Optional[str] = None


class CageCreate(CageBase):
    pass


class CageUpdate(BaseModel):
    name: Optional[str] = None
    species: Optional[str] = None
    initial_population: Optional[int] = Field(default=None, ge=0)
    initial_average_weight_kg: Optional[float] = Field(default=None, ge=0)
    current_average_weight_kg: Optional[float] = Field(default=None, ge=0)
    introduction_date: Optional[date] = None
    status: Optional[CageStatus] = None
    notes: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def reject_null_for_required_columns(self) -> "CageUpdate":
        # Omitir un campo es "no tocarlo"; mandarlo a null solo vale si la columna lo admite
        for field in sorted(self.model_fields_set - NULLABLE_FIELDS):
            if getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class CageRead(CageBase):
    cage_id: str
    current_average_weight_kg: float

    model_config = ConfigDict(from_attributes=True)
