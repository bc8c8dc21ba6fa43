# src/rasterfetch/contracts/geo.py

from __future__ import annotations
from typing import NamedTuple, Optional, Sequence, Tuple

import numpy as np

GeoTransform = Tuple[float, float, float, float, float, float]

class Bounds(NamedTuple):
    minx: float; miny: float; maxx: float; maxy: float

# ---------- GeoTransform helpers (afines a GDAL pero sin dependencia) ----------
def as_geotransform(values: Optional[Sequence[float]]) -> Optional[GeoTransform]:
    """Normaliza cualquier secuencia de 6 números a GeoTransform (None pasa tal cual)."""
    if values is None:
        return None
    vals = tuple(float(v) for v in values)
    if len(vals) != 6:
        raise ValueError(f"GeoTransform requiere 6 coeficientes, no {len(vals)}")
    return vals  # type: ignore[return-value]

def geotransform_bounds(gt: GeoTransform, width: int, height: int) -> Bounds:
    x0, px, rx, y0, ry, py = gt
    x_w = x0 + width * px + height * rx
    y_w = y0 + width * ry + height * py
    minx, maxx = (x0, x_w) if x0 <= x_w else (x_w, x0)
    miny, maxy = (y_w, y0) if y_w <= y0 else (y0, y_w)
    return Bounds(minx, miny, maxx, maxy)

def pixel_to_world(col: float, row: float, gt: GeoTransform) -> Tuple[float, float]:
    x0, px, rx, y0, ry, py = gt
    x = x0 + col * px + row * rx
    y = y0 + col * ry + row * py
    return x, y

def window_corners(
    gt: GeoTransform, x_origin: int, y_origin: int, x_extent: int, y_extent: int
) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    """
    Coordenadas de la primera y última celda de una ventana (sólo eje norte-arriba).
    Devuelve ((x0, x_end), (y0, y_end)); los términos de rotación se ignoran.
    """
    x0 = gt[0] + x_origin * gt[1]
    y0 = gt[3] + y_origin * gt[5]
    x_end = x0 + (x_extent - 1) * gt[1]
    y_end = y0 + (y_extent - 1) * gt[5]
    return (x0, x_end), (y0, y_end)

def window_grid(
    gt: GeoTransform, x_origin: int, y_origin: int,
    x_extent: int, y_extent: int, x_out: int, y_out: int,
) -> Tuple[np.ndarray, np.ndarray]:
    """Mallas (y_out, x_out) de coordenadas repartidas entre las esquinas de la ventana."""
    (x0, x_end), (y0, y_end) = window_corners(gt, x_origin, y_origin, x_extent, y_extent)
    xs = np.linspace(x0, x_end, x_out)
    ys = np.linspace(y0, y_end, y_out)
    return np.meshgrid(xs, ys)

def pretty_bounds(b: Bounds, ndigits: int = 3) -> str:
    return (f"Bounds(minx={b.minx:.{ndigits}f}, miny={b.miny:.{ndigits}f}, "
            f"maxx={b.maxx:.{ndigits}f}, maxy={b.maxy:.{ndigits}f})")

__all__ = [
    "GeoTransform","Bounds","as_geotransform","geotransform_bounds",
    "pixel_to_world","window_corners","window_grid","pretty_bounds",
]
