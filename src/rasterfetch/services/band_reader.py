# src/rasterfetch/services/band_reader.py
from __future__ import annotations

"""
Lecturas de alto nivel sobre el núcleo (describe + fetch):

  • read_band(): una banda con validación estricta de opciones contra el
    tamaño real, no-data → NaN y coordenadas (esquinas o malla).
  • read_all_bands(): todas las bandas a resolución completa en un arreglo
    (alto, ancho, bandas).

A diferencia de resolve_options() aquí una clave desconocida o un valor
fuera de rango es un error: es el camino "validado".
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

import numpy as np

from ..contracts.errors import OptionValueError
from ..contracts.geo import GeoTransform, window_corners, window_grid
from ..contracts.options import RequestOptions
from ..contracts.raster import PixelKind, SourceMetadata, Window, pixel_kind_for
from .fetch_service import RasterFetchService
from .option_resolver import value_shape


@dataclass(frozen=True)
class BandRead:
    x: Optional[np.ndarray]   # esquinas [x0, x_end] o malla (y_out, x_out); None sin georreferencia
    y: Optional[np.ndarray]
    z: np.ndarray
    metadata: SourceMetadata
    window: Window


@dataclass(frozen=True)
class BandOptions:
    options: RequestOptions
    grid: bool = False


def _scalar(key: str, value: Any) -> float:
    shape, first = value_shape(value)
    if shape != (1, 1) or first is None:
        raise OptionValueError(key, "debe ser un escalar numérico")
    if not math.isfinite(first):
        raise OptionValueError(key, "debe ser un valor finito")
    return first


def _band_size(metadata: SourceMetadata, band: int, overview: Optional[int]) -> Tuple[int, int]:
    info = metadata.bands[band - 1]
    if overview is None:
        return info.width, info.height
    if not 0 <= overview < len(info.overviews):
        raise OptionValueError(
            "overview", f"la banda {band} tiene {len(info.overviews)} overviews; no existe {overview}")
    ov = info.overviews[overview]
    return ov.width, ov.height


def validate_band_options(
    raw: Optional[Mapping[str, Any]], metadata: SourceMetadata
) -> BandOptions:
    """Valida y completa opciones contra `metadata`; devuelve ventana sin huecos."""
    vals: Dict[str, Any] = {}
    grid = False
    for key, value in (raw or {}).items():
        k = str(key).lower()
        if k == "band":
            v = int(_scalar(key, value))
            if v < 1:
                raise OptionValueError(key, "el número de banda debe ser mayor que cero")
            if v > metadata.band_count:
                raise OptionValueError(key, f"la fuente sólo tiene {metadata.band_count} bandas")
            vals["band"] = v
        elif k == "overview":
            vals["overview"] = int(_scalar(key, value))
        elif k == "verbose":
            vals["verbose"] = _scalar(key, value) != 0
        elif k == "grid":
            grid = _scalar(key, value) != 0
        elif k in ("xorigin", "yorigin"):
            vals["x_origin" if k == "xorigin" else "y_origin"] = int(_scalar(key, value))
        elif k in ("xextend", "xextent", "yextend", "yextent", "xout", "yout"):
            v = int(_scalar(key, value))
            if v <= 0:
                raise OptionValueError(key, "debe ser un entero positivo")
            name = {"xextend": "x_extent", "xextent": "x_extent",
                    "yextend": "y_extent", "yextent": "y_extent",
                    "xout": "x_out", "yout": "y_out"}[k]
            vals[name] = v
        else:
            raise OptionValueError(str(key), "opción desconocida")

    band = vals.get("band", 1)
    if metadata.band_count < 1:
        raise OptionValueError("band", "la fuente no tiene bandas")
    overview = vals.get("overview")
    if overview is not None and overview < 0:
        overview = None
    width, height = _band_size(metadata, band, overview)

    resolved: Dict[str, Any] = {"band": band, "overview": overview,
                                "verbose": vals.get("verbose", False)}
    for axis, size in (("x", width), ("y", height)):
        origin = vals.get(f"{axis}_origin", 0)
        if not 0 <= origin <= size:
            raise OptionValueError(f"{axis}origin", f"debe cumplir 0 <= {axis}origin <= {size}")
        extent = vals.get(f"{axis}_extent")
        if extent is None:
            extent = size - origin
        elif origin != 0 and extent == size:
            # tamaño completo con origen desplazado: se recorta hasta el borde
            extent = size - origin
        if origin + extent > size:
            raise OptionValueError(
                f"{axis}extent", f"{axis}origin ({origin}) + {axis}extent ({extent}) supera {size}")
        resolved[f"{axis}_origin"] = origin
        resolved[f"{axis}_extent"] = extent
        resolved[f"{axis}_out"] = vals.get(f"{axis}_out", extent)
    return BandOptions(options=RequestOptions(**resolved), grid=grid)


def _scaled_geotransform(gt: GeoTransform, fx: float, fy: float) -> GeoTransform:
    # overview: mismo origen, píxel más grande
    return (gt[0], gt[1] * fx, gt[2] * fy, gt[3], gt[4] * fx, gt[5] * fy)


def _nodata_to_nan(z: np.ndarray, nodata: float) -> np.ndarray:
    out = np.array(z, dtype=np.float64, order="F", copy=True)
    out[out == nodata] = np.nan
    return out


def read_band(
    service: RasterFetchService,
    filename: Any,
    options: Optional[Mapping[str, Any]] = None,
    *,
    grid: Optional[bool] = None,
) -> BandRead:
    metadata = service.describe(filename, verbose=False)
    bopts = validate_band_options(options, metadata)
    opts = bopts.options
    use_grid = bopts.grid if grid is None else grid

    buf = service.fetch(filename, opts)
    info = metadata.bands[opts.band - 1]
    if service.settings.nodata_to_nan and info.has_no_data:
        z = _nodata_to_nan(buf.data, float(info.no_data_value))  # type: ignore[arg-type]
    else:
        z = np.array(buf.data, order="F", copy=True)

    x = y = None
    gt = metadata.geo_transform
    if gt is not None:
        if opts.overview is not None:
            ov = info.overviews[opts.overview]
            gt = _scaled_geotransform(gt, info.width / ov.width, info.height / ov.height)
        w = buf.window
        if use_grid:
            x, y = window_grid(gt, w.x_origin, w.y_origin, w.x_extent, w.y_extent, w.x_out, w.y_out)
        else:
            (x0, x_end), (y0, y_end) = window_corners(gt, w.x_origin, w.y_origin, w.x_extent, w.y_extent)
            x, y = np.array([x0, x_end]), np.array([y0, y_end])
    return BandRead(x=x, y=y, z=z, metadata=metadata, window=buf.window)


def read_all_bands(service: RasterFetchService, filename: Any) -> BandRead:
    """
    Todas las bandas, sin overviews, en (alto, ancho, bandas). El dtype sigue
    a la primera banda. Requiere que todas las bandas tengan el mismo tamaño.
    """
    metadata = service.describe(filename, verbose=False)
    if metadata.band_count < 1:
        raise OptionValueError("band", f"{filename} no tiene bandas")
    first = metadata.bands[0]
    for i, b in enumerate(metadata.bands, start=1):
        if (b.width, b.height) != (first.width, first.height):
            raise OptionValueError(
                "band", f"la banda {i} mide {b.width}x{b.height} y la 1 {first.width}x{first.height}; usa read_band()")

    kind: PixelKind = pixel_kind_for(first.data_type_name, str(filename))
    nodata_nan = service.settings.nodata_to_nan and any(b.has_no_data for b in metadata.bands)
    dtype = np.float64 if nodata_nan else kind.dtype
    z = np.zeros((first.height, first.width, metadata.band_count), dtype=dtype, order="F")

    window: Optional[Window] = None
    for i, info in enumerate(metadata.bands, start=1):
        buf = service.fetch(filename, RequestOptions(band=i, verbose=False))
        window = buf.window
        # sin NaN, el tipo de la primera banda manda para todo el arreglo
        plane = buf.data if nodata_nan else buf.data.astype(kind.dtype, copy=False)
        if nodata_nan and info.has_no_data:
            plane = _nodata_to_nan(plane, float(info.no_data_value))  # type: ignore[arg-type]
        z[:, :, i - 1] = plane

    x = y = None
    if metadata.geo_transform is not None:
        (x0, x_end), (y0, y_end) = window_corners(
            metadata.geo_transform, 0, 0, first.width, first.height)
        x, y = np.array([x0, x_end]), np.array([y0, y_end])
    if window is None:
        raise OptionValueError("band", f"{filename} no tiene bandas")
    return BandRead(x=x, y=y, z=z, metadata=metadata, window=window)


__all__ = ["BandRead", "BandOptions", "validate_band_options", "read_band", "read_all_bands"]
