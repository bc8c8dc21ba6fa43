# src/rasterfetch/config.py
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

Backend = Literal["auto", "gdal", "rasterio"]


class Settings(BaseSettings):
    """
    Config unificada del proyecto. No toca disco (salvo .env).
    Debe ser construida y provista por composition/di.py (CLI/API).
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="RASTERFETCH_",
        extra="forbid",
        frozen=True,
    )

    # --- colaborador de decodificación ---
    backend: Backend = "auto"  # auto: GDAL si está, si no rasterio

    # --- diagnósticos ---
    verbose: bool = True        # default cuando las opciones no traen 'verbose'
    log_level: str = "WARNING"

    # --- lectura ---
    nodata_to_nan: bool = True  # sólo read_band()/read_all_bands()
    world_file_extension: str = "wld"

    # ----------------------------
    # Normalizadores / validadores
    # ----------------------------
    @field_validator("log_level", mode="before")
    @classmethod
    def _level(cls, v: str) -> str:
        v2 = str(v).strip().upper()
        if not isinstance(logging.getLevelName(v2), int):
            raise ValueError(f"log_level inválido: {v}")
        return v2

    @field_validator("world_file_extension", mode="before")
    @classmethod
    def _ext(cls, v: str) -> str:
        v2 = str(v).strip().lstrip(".")
        if not v2:
            raise ValueError("world_file_extension no puede ser vacío")
        return v2


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Instancia cacheada. Úsala desde composition/di.py o CLI.
    Para tests, recuerda limpiar:
        get_settings.cache_clear()
    """
    return Settings()


__all__ = ["Settings", "get_settings", "Backend"]
