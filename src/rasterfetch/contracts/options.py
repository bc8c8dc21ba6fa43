# src/rasterfetch/contracts/options.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RequestOptions(BaseModel):
    """
    Opciones de lectura ya tipadas.

    - band: índice 1-based (default 1).
    - overview: índice 0-based o None (sin overview).
    - x_extent/y_extent/x_out/y_out: None = "sin resolver"; el planificador
      de ventana los completa cuando conoce el tamaño real de la banda.
    """
    model_config = ConfigDict(frozen=True)

    band: int = 1
    overview: Optional[int] = None
    dump_metadata_only: bool = False
    verbose: bool = True
    x_origin: int = Field(0, ge=0)
    y_origin: int = Field(0, ge=0)
    x_extent: Optional[int] = Field(None, ge=0)
    y_extent: Optional[int] = Field(None, ge=0)
    x_out: Optional[int] = Field(None, ge=0)
    y_out: Optional[int] = Field(None, ge=0)

    @field_validator("overview", mode="before")
    @classmethod
    def _no_overview(cls, v):
        # -1 (o cualquier negativo) es la forma histórica de decir "sin overview"
        if v is not None and int(v) < 0:
            return None
        return v

    @field_validator("x_extent", "y_extent", "x_out", "y_out", mode="before")
    @classmethod
    def _unresolved(cls, v):
        # -1 histórico = aún sin resolver
        if v is not None and int(v) < 0:
            return None
        return v


__all__ = ["RequestOptions"]
