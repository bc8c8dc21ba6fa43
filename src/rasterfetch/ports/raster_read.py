# src/rasterfetch/ports/raster_read.py
from __future__ import annotations

from typing import Optional, Protocol, Sequence, Tuple, runtime_checkable

from ..contracts.geo import GeoTransform
from ..contracts.raster import PixelKind, Window

URI = str
DriverPair = Tuple[str, str]  # (short_name, long_name)


@runtime_checkable
class RasterBandPort(Protocol):
    """
    Banda (u overview) abierta. `read_window` devuelve el buffer decodificado
    en orden de filas: y_out filas de x_out muestras del tipo pedido.
    """
    @property
    def width(self) -> int: ...
    @property
    def height(self) -> int: ...
    @property
    def data_type_name(self) -> str: ...
    @property
    def no_data_value(self) -> Optional[float]: ...
    @property
    def color_interpretation(self) -> str: ...
    @property
    def overview_count(self) -> int: ...
    def overview(self, index: int) -> "RasterBandPort": ...
    def min_max(self) -> Tuple[float, float]: ...
    def read_window(self, window: Window, kind: PixelKind) -> bytes: ...


@runtime_checkable
class RasterDatasetPort(Protocol):
    """Dataset abierto en sólo-lectura; se usa como context manager."""
    @property
    def projection(self) -> str: ...
    @property
    def driver_short_name(self) -> str: ...
    @property
    def driver_long_name(self) -> str: ...
    @property
    def width(self) -> int: ...
    @property
    def height(self) -> int: ...
    @property
    def band_count(self) -> int: ...
    def geo_transform(self) -> Optional[GeoTransform]: ...
    def band(self, index: int) -> RasterBandPort: ...  # 1-based
    def close(self) -> None: ...
    def __enter__(self) -> "RasterDatasetPort": ...
    def __exit__(self, *exc) -> None: ...


@runtime_checkable
class RasterSourcePort(Protocol):
    """
    Colaborador de decodificación (GDAL, rasterio, ...).
    Reglas: `register_drivers()` es idempotente; `drivers()` respeta el orden del registro.
    """
    supports_world_file_guess: bool
    def register_drivers(self) -> None: ...
    def drivers(self) -> Sequence[DriverPair]: ...
    def open(self, uri: URI) -> RasterDatasetPort: ...
    def read_world_file(self, uri: URI, extension: Optional[str]) -> Optional[GeoTransform]: ...


__all__ = ["RasterSourcePort", "RasterDatasetPort", "RasterBandPort", "URI", "DriverPair"]
