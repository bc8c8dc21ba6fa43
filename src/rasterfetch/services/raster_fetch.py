# src/rasterfetch/services/raster_fetch.py
from __future__ import annotations

"""
Lectura por ventana + trasposición.

El colaborador entrega el buffer en orden de filas (fila externa, columna
interna); el llamador espera orden de columnas. La trasposición es una
copia completa O(x_out*y_out):

    salida[col * y_out + fila] = decodificado[fila * x_out + col]

El arreglo final tiene forma (y_out, x_out) y memoria en orden Fortran, así
que `arr[fila, col]` es el píxel (fila, col) de la ventana remuestreada.
"""

from typing import Optional

import numpy as np

from ..contracts.errors import WindowReadError
from ..contracts.raster import PixelBuffer, PixelKind, Window, pixel_kind_for
from ..ports.raster_read import RasterBandPort
from .diagnostics import Diagnostics


def transpose_flat(buffer: np.ndarray, rows: int, cols: int) -> np.ndarray:
    """
    Traspone un buffer plano rows x cols (orden de filas) a cols x rows.
    Devuelve siempre una copia nueva; nunca comparte memoria con la entrada.
    """
    flat = np.asarray(buffer).reshape(-1)
    if flat.size != rows * cols:
        raise ValueError(f"buffer de {flat.size} muestras no es {rows}x{cols}")
    return np.array(flat.reshape(rows, cols).T, order="C", copy=True).reshape(-1)


def to_column_major(decoded: np.ndarray, x_out: int, y_out: int) -> np.ndarray:
    """Buffer decodificado (y_out filas de x_out) → buffer en orden de columnas."""
    return transpose_flat(decoded, y_out, x_out)


def to_row_major(column_major: np.ndarray, x_out: int, y_out: int) -> np.ndarray:
    """Inversa de `to_column_major`."""
    return transpose_flat(column_major, x_out, y_out)


def _trace_band(band: RasterBandPort, window: Window, diag: Diagnostics) -> None:
    diag.trace("data type is %s", band.data_type_name)
    diag.trace("Block=%dx%d Type=%s, ColorInterp=%s",
               window.x_extent, window.y_extent, band.data_type_name, band.color_interpretation)
    mn, mx = band.min_max()
    diag.trace("Min=%.3f, Max=%.3f", mn, mx)
    diag.trace("xOrigin = %d", window.x_origin)
    diag.trace("yOrigin = %d", window.y_origin)
    diag.trace("RasterXSize = %d", band.width)
    diag.trace("RasterYSize = %d", band.height)
    diag.trace("xExtent = %d", window.x_extent)
    diag.trace("yExtent = %d", window.y_extent)
    diag.trace("xOut = %d", window.x_out)
    diag.trace("yOut = %d", window.y_out)


def fetch_window(
    band: RasterBandPort,
    window: Window,
    diagnostics: Optional[Diagnostics] = None,
    filename: str = "<raster>",
) -> PixelBuffer:
    """
    Lee `window` de `band` en la representación que corresponde a su tipo
    nativo (Byte → uint8, resto → float64) y la traspone.
    """
    diag = diagnostics or Diagnostics()
    kind: PixelKind = pixel_kind_for(band.data_type_name, filename)

    if window.x_out < 1 or window.y_out < 1:
        raise WindowReadError(filename, window, "el tamaño de salida debe ser >= 1x1")

    if diag.verbose:
        _trace_band(band, window, diag)

    diag.trace("Now reading into buffer...")
    raw = band.read_window(window, kind)
    decoded = np.frombuffer(raw, dtype=kind.dtype)
    expected = window.x_out * window.y_out
    if decoded.size != expected:
        raise WindowReadError(
            filename, window, f"se esperaban {expected} muestras y llegaron {decoded.size}")

    transposed = to_column_major(decoded, window.x_out, window.y_out)

    diag.trace("Now copying into output array...")
    data = transposed.reshape(window.out_shape, order="F")
    diag.trace("Finished copying into output array...")
    return PixelBuffer(data=data, kind=kind, window=window)


__all__ = ["fetch_window", "transpose_flat", "to_column_major", "to_row_major"]
