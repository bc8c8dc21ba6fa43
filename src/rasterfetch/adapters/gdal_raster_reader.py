# src/rasterfetch/adapters/gdal_raster_reader.py
from __future__ import annotations

import logging
import math
import threading
import warnings
from contextlib import contextmanager
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

# GDAL primero (registro de drivers, world files, tipos nativos); rasterio como fallback
try:  # GDAL path
    from osgeo import gdal  # type: ignore
    _HAS_GDAL = True
except ImportError:  # pragma: no cover
    _HAS_GDAL = False

try:  # rasterio path
    import rasterio
    from rasterio.enums import Resampling
    from rasterio.errors import NotGeoreferencedWarning, RasterioIOError
    from rasterio.windows import Window as RioWindow
    _HAS_RASTERIO = True
except ImportError:  # pragma: no cover
    _HAS_RASTERIO = False

from ..contracts.errors import BandIndexError, SourceOpenError, WindowReadError
from ..contracts.geo import GeoTransform, as_geotransform
from ..contracts.raster import PixelKind, Window
from ..ports.raster_read import DriverPair, RasterBandPort, RasterDatasetPort, RasterSourcePort, URI
from .world_file import read_world_file

log = logging.getLogger(__name__)

# El registro de drivers es global al proceso: se inicializa una sola vez
_REGISTRY_LOCK = threading.Lock()

# GDALReadWorldFile(NULL) adivina la extensión desde GDAL 1.2.1
_WORLD_FILE_GUESS_VERSION = 1210

_NP_TO_GDAL_NAME = {
    "uint8": "Byte",
    "int8": "Int8",
    "uint16": "UInt16",
    "int16": "Int16",
    "uint32": "UInt32",
    "int32": "Int32",
    "uint64": "UInt64",
    "int64": "Int64",
    "float32": "Float32",
    "float64": "Float64",
    "complex_int16": "CInt16",
    "complex64": "CFloat32",
    "complex128": "CFloat64",
}


def _check_window(uri: str, window: Window, width: int, height: int) -> None:
    if window.x_origin < 0 or window.y_origin < 0:
        raise WindowReadError(uri, window, "origen negativo")
    if window.x_origin + window.x_extent > width or window.y_origin + window.y_extent > height:
        raise WindowReadError(uri, window, f"fuera de los límites de la banda ({width}x{height})")


# --------------- GDAL ---------------
@lru_cache(maxsize=1)
def _register_gdal() -> int:
    gdal.UseExceptions()
    gdal.AllRegister()
    n = gdal.GetDriverCount()
    log.debug("GDAL %s: %d drivers registrados", gdal.__version__, n)
    return n


class _GdalBand:
    def __init__(self, band, uri: str):
        self._band = band
        self._uri = uri

    @property
    def width(self) -> int:
        return int(self._band.XSize)

    @property
    def height(self) -> int:
        return int(self._band.YSize)

    @property
    def data_type_name(self) -> str:
        return gdal.GetDataTypeName(self._band.DataType)

    @property
    def no_data_value(self) -> Optional[float]:
        nd = self._band.GetNoDataValue()
        return float(nd) if nd is not None else None

    @property
    def color_interpretation(self) -> str:
        return gdal.GetColorInterpretationName(self._band.GetColorInterpretation())

    @property
    def overview_count(self) -> int:
        return int(self._band.GetOverviewCount())

    def overview(self, index: int) -> "_GdalBand":
        n = self.overview_count
        if not 0 <= index < n:
            raise BandIndexError(self._uri, "overview", index, n)
        return _GdalBand(self._band.GetOverview(index), self._uri)

    def min_max(self) -> Tuple[float, float]:
        mn, mx = self._band.GetMinimum(), self._band.GetMaximum()
        if mn is None or mx is None:
            try:
                # aproximado: casi duplica el tiempo de la lectura si se pide exacto
                mn, mx = self._band.ComputeRasterMinMax(True)
            except RuntimeError as e:
                log.debug("min/max no disponible para %s: %s", self._uri, e)
                return (math.nan, math.nan)
        return float(mn), float(mx)

    def read_window(self, window: Window, kind: PixelKind) -> bytes:
        buf_type = gdal.GDT_Byte if kind is PixelKind.BYTE else gdal.GDT_Float64
        try:
            raw = self._band.ReadRaster(
                window.x_origin, window.y_origin,
                window.x_extent, window.y_extent,
                buf_xsize=window.x_out, buf_ysize=window.y_out,
                buf_type=buf_type,
            )
        except RuntimeError as e:
            raise WindowReadError(self._uri, window, str(e)) from e
        if raw is None:
            raise WindowReadError(self._uri, window, "GDAL no devolvió datos")
        return raw


class _GdalDataset:
    def __init__(self, ds, uri: str):
        self._ds = ds
        self._uri = uri

    @property
    def projection(self) -> str:
        return self._ds.GetProjection() or ""

    @property
    def driver_short_name(self) -> str:
        return self._ds.GetDriver().ShortName

    @property
    def driver_long_name(self) -> str:
        return self._ds.GetDriver().LongName

    @property
    def width(self) -> int:
        return int(self._ds.RasterXSize)

    @property
    def height(self) -> int:
        return int(self._ds.RasterYSize)

    @property
    def band_count(self) -> int:
        return int(self._ds.RasterCount)

    def geo_transform(self) -> Optional[GeoTransform]:
        return as_geotransform(self._ds.GetGeoTransform(can_return_null=True))

    def band(self, index: int) -> _GdalBand:
        n = self.band_count
        if not 1 <= index <= n:
            raise BandIndexError(self._uri, "banda", index, n)
        return _GdalBand(self._ds.GetRasterBand(index), self._uri)

    def close(self) -> None:
        self._ds = None  # cierre explícito

    def __enter__(self) -> "_GdalDataset":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


@dataclass(frozen=True)
class GdalRasterSource(RasterSourcePort):
    """Colaborador de decodificación sobre `osgeo.gdal` (sólo lectura)."""

    @property
    def supports_world_file_guess(self) -> bool:  # type: ignore[override]
        return int(gdal.VersionInfo("VERSION_NUM")) >= _WORLD_FILE_GUESS_VERSION

    def register_drivers(self) -> None:
        with _REGISTRY_LOCK:
            _register_gdal()

    def drivers(self) -> Sequence[DriverPair]:
        self.register_drivers()
        out: List[DriverPair] = []
        for i in range(gdal.GetDriverCount()):
            drv = gdal.GetDriver(i)
            out.append((drv.ShortName, drv.LongName))
        return out

    def open(self, uri: URI) -> _GdalDataset:
        self.register_drivers()
        try:
            ds = gdal.Open(str(uri), gdal.GA_ReadOnly)
        except RuntimeError as e:
            raise SourceOpenError(str(uri), str(e)) from e
        if ds is None:
            raise SourceOpenError(str(uri))
        return _GdalDataset(ds, str(uri))

    def read_world_file(self, uri: URI, extension: Optional[str]) -> Optional[GeoTransform]:
        return read_world_file(str(uri), extension)


# --------------- rasterio ---------------
@lru_cache(maxsize=1)
def _rasterio_driver_map() -> Dict[str, str]:
    with rasterio.Env() as env:
        return dict(env.drivers())


class _RasterioBand:
    def __init__(self, ds, uri: str, bidx: int, level: Optional[int] = None,
                 size: Optional[Tuple[int, int]] = None):
        self._ds = ds
        self._uri = uri
        self._bidx = bidx
        self._level = level
        self._size = size or (ds.width, ds.height)

    @contextmanager
    def _reader(self) -> Iterator[object]:
        if self._level is None:
            yield self._ds
        else:
            with _open_rasterio(self._uri, overview_level=self._level) as ods:
                yield ods

    @property
    def width(self) -> int:
        return int(self._size[0])

    @property
    def height(self) -> int:
        return int(self._size[1])

    @property
    def data_type_name(self) -> str:
        dt = str(self._ds.dtypes[self._bidx - 1])
        return _NP_TO_GDAL_NAME.get(dt, dt)

    @property
    def no_data_value(self) -> Optional[float]:
        nd = self._ds.nodatavals[self._bidx - 1]
        return float(nd) if nd is not None else None

    @property
    def color_interpretation(self) -> str:
        return self._ds.colorinterp[self._bidx - 1].name.capitalize()

    @property
    def overview_count(self) -> int:
        if self._level is not None:
            return 0
        return len(self._ds.overviews(self._bidx))

    def overview(self, index: int) -> "_RasterioBand":
        n = self.overview_count
        if not 0 <= index < n:
            raise BandIndexError(self._uri, "overview", index, n)
        with _open_rasterio(self._uri, overview_level=index) as ods:
            size = (ods.width, ods.height)
        return _RasterioBand(self._ds, self._uri, self._bidx, level=index, size=size)

    def min_max(self) -> Tuple[float, float]:
        with self._reader() as ds:
            arr = ds.read(self._bidx, masked=True)
        if arr.count() == 0:
            return (math.nan, math.nan)
        return float(arr.min()), float(arr.max())

    def read_window(self, window: Window, kind: PixelKind) -> bytes:
        _check_window(self._uri, window, self.width, self.height)
        rio_win = RioWindow(window.x_origin, window.y_origin, window.x_extent, window.y_extent)
        try:
            with self._reader() as ds:
                arr = ds.read(
                    self._bidx, window=rio_win,
                    out_shape=(window.y_out, window.x_out),
                    out_dtype=kind.dtype, resampling=Resampling.nearest,
                )
        except RasterioIOError as e:
            raise WindowReadError(self._uri, window, str(e)) from e
        return arr.tobytes(order="C")


class _RasterioDataset:
    def __init__(self, ds, uri: str):
        self._ds = ds
        self._uri = uri

    @property
    def projection(self) -> str:
        return self._ds.crs.to_wkt() if self._ds.crs else ""

    @property
    def driver_short_name(self) -> str:
        return self._ds.driver

    @property
    def driver_long_name(self) -> str:
        return _rasterio_driver_map().get(self._ds.driver, self._ds.driver)

    @property
    def width(self) -> int:
        return int(self._ds.width)

    @property
    def height(self) -> int:
        return int(self._ds.height)

    @property
    def band_count(self) -> int:
        return int(self._ds.count)

    def geo_transform(self) -> Optional[GeoTransform]:
        # rasterio reporta identidad cuando no hay georreferencia interna
        if self._ds.transform.is_identity:
            return None
        return as_geotransform(self._ds.transform.to_gdal())

    def band(self, index: int) -> _RasterioBand:
        n = self.band_count
        if not 1 <= index <= n:
            raise BandIndexError(self._uri, "banda", index, n)
        return _RasterioBand(self._ds, self._uri, index)

    def close(self) -> None:
        if self._ds is not None:
            self._ds.close()
            self._ds = None

    def __enter__(self) -> "_RasterioDataset":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def _open_rasterio(uri: str, **kwargs):
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", NotGeoreferencedWarning)
        try:
            return rasterio.open(uri, **kwargs)
        except RasterioIOError as e:
            raise SourceOpenError(uri, str(e)) from e


@dataclass(frozen=True)
class RasterioRasterSource(RasterSourcePort):
    """Colaborador de decodificación sobre rasterio (GDAL embebido)."""

    supports_world_file_guess: bool = True

    def register_drivers(self) -> None:
        with _REGISTRY_LOCK:
            _rasterio_driver_map()

    def drivers(self) -> Sequence[DriverPair]:
        self.register_drivers()
        return list(_rasterio_driver_map().items())

    def open(self, uri: URI) -> _RasterioDataset:
        self.register_drivers()
        return _RasterioDataset(_open_rasterio(str(uri)), str(uri))

    def read_world_file(self, uri: URI, extension: Optional[str]) -> Optional[GeoTransform]:
        return read_world_file(str(uri), extension)


def available_backends() -> Tuple[str, ...]:
    out = []
    if _HAS_GDAL:
        out.append("gdal")
    if _HAS_RASTERIO:
        out.append("rasterio")
    return tuple(out)


__all__ = ["GdalRasterSource", "RasterioRasterSource", "available_backends"]
