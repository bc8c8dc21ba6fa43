# src/rasterfetch/composition/di.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml

from ..adapters.gdal_raster_reader import GdalRasterSource, RasterioRasterSource, available_backends
from ..config import Settings, get_settings
from ..contracts.errors import BackendUnavailableError
from ..ports.raster_read import RasterSourcePort
from ..services.fetch_service import RasterFetchService


def load_settings_from_yaml(path: Path) -> Settings:
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    return Settings(**data)


def build_settings(config_file: Optional[Path] = None) -> Settings:
    """YAML explícito si se da; si no, env/.env vía get_settings()."""
    if config_file is not None:
        return load_settings_from_yaml(config_file)
    return get_settings()


def build_source(settings: Settings) -> RasterSourcePort:
    backend = settings.backend
    avail = available_backends()
    if backend in ("auto", "gdal") and "gdal" in avail:
        return GdalRasterSource()
    if backend in ("auto", "rasterio") and "rasterio" in avail:
        return RasterioRasterSource()
    if backend == "auto":
        raise BackendUnavailableError("No hay backend para leer rasters (instala GDAL o rasterio)")
    raise BackendUnavailableError(f"backend '{backend}' no disponible (instala {backend})")


def build_service(settings: Optional[Settings] = None) -> RasterFetchService:
    st = settings or get_settings()
    return RasterFetchService(source=build_source(st), settings=st)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level, format="%(levelname)s: %(message)s")
