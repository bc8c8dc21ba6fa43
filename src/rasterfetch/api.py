# src/rasterfetch/api.py
from __future__ import annotations

"""
Fachada de funciones para uso interactivo:

    >>> from rasterfetch.api import fetch_pixels, describe
    >>> meta = describe("scan.tif")
    >>> buf = fetch_pixels("dem.tif", {"band": 1, "xout": 50, "yout": 60})
    >>> buf.shape        # (yout, xout)

Cada función arma el servicio con la configuración cacheada
(`get_settings()`), salvo que se le pase uno ya construido.
"""

from typing import Any, Mapping, Optional, Union

from .composition.di import build_service
from .contracts.raster import PixelBuffer, SourceMetadata
from .services.band_reader import BandRead, read_all_bands as _read_all_bands, read_band as _read_band
from .services.fetch_service import RasterFetchService
from .services.option_resolver import RawOptions


def fetch_pixels(
    filename: Any, options: RawOptions = None, *, service: Optional[RasterFetchService] = None
) -> Union[PixelBuffer, SourceMetadata]:
    return (service or build_service()).fetch_pixels(filename, options)


def describe(filename: Any, *, service: Optional[RasterFetchService] = None) -> SourceMetadata:
    return (service or build_service()).describe(filename)


def gdaldump(filename: Any, *, service: Optional[RasterFetchService] = None) -> SourceMetadata:
    """Alias histórico de describe()."""
    return describe(filename, service=service)


def read_band(
    filename: Any,
    options: Optional[Mapping[str, Any]] = None,
    *,
    grid: Optional[bool] = None,
    service: Optional[RasterFetchService] = None,
) -> BandRead:
    return _read_band(service or build_service(), filename, options, grid=grid)


def read_all_bands(filename: Any, *, service: Optional[RasterFetchService] = None) -> BandRead:
    return _read_all_bands(service or build_service(), filename)


__all__ = ["fetch_pixels", "describe", "gdaldump", "read_band", "read_all_bands"]
