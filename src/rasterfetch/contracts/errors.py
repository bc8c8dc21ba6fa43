# src/rasterfetch/contracts/errors.py
"""
Jerarquía de excepciones de rasterfetch.

Cada excepción hereda de ``RasterFetchError`` y además del built-in más
cercano, así el código cliente puede capturar ``ValueError``/``OSError``
sin conocer este paquete. Los mensajes siempre nombran el archivo, el
campo o el tipo que provocó el fallo.
"""
from __future__ import annotations

from typing import Any, Optional, Tuple


class RasterFetchError(Exception):
    """Base de todos los errores fatales del paquete."""


class RasterFetchWarning(UserWarning):
    """Diagnóstico no fatal: la llamada continúa con un default u omite un campo."""


class RequestShapeError(RasterFetchError, TypeError):
    """Forma de la llamada inválida (nombre de archivo u opciones de tipo incorrecto)."""


class OptionShapeError(RasterFetchError, ValueError):
    """Campo de opciones estructural (extent/out) que no es 1x1."""

    def __init__(self, field: str, shape: Optional[Tuple[int, ...]], detail: Optional[str] = None):
        self.field = field
        self.shape = shape
        if detail is None:
            got = "x".join(str(s) for s in shape) if shape else "no numérico"
            detail = f"el campo debe ser 1x1 y no {got}"
        super().__init__(f"{field}: {detail}")


class OptionValueError(RasterFetchError, ValueError):
    """Valor de opción rechazado por la validación estricta de read_band()."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"opción {field}: {message}")


class SourceOpenError(RasterFetchError, OSError):
    """La fuente raster no se pudo abrir."""

    def __init__(self, filename: str, detail: Optional[str] = None):
        self.filename = filename
        msg = f"No se pudo abrir {filename}"
        super().__init__(f"{msg}: {detail}" if detail else msg)


class BandIndexError(RasterFetchError, IndexError):
    """Banda u overview fuera de rango para la fuente."""

    def __init__(self, filename: str, what: str, index: int, available: int):
        self.filename = filename
        self.index = index
        self.available = available
        super().__init__(f"{filename}: {what} {index} no existe (disponibles: {available})")


class UnsupportedPixelTypeError(RasterFetchError, TypeError):
    """Tipo nativo de píxel fuera de {Byte, (U)Int16, (U)Int32, Float32, Float64}."""

    def __init__(self, type_name: str, filename: Optional[str] = None):
        self.type_name = type_name
        self.filename = filename
        where = f" en {filename}" if filename else ""
        super().__init__(f"Tipo de dato GDAL no soportado{where}: {type_name}")


class WindowReadError(RasterFetchError, RuntimeError):
    """Fallo de la lectura por ventana (límites, I/O o tamaño de salida < 1)."""

    def __init__(self, filename: str, window: Any, detail: str):
        self.filename = filename
        self.window = window
        super().__init__(f"{filename}: lectura de ventana {window} falló: {detail}")


class BackendUnavailableError(RasterFetchError, ImportError):
    """No hay backend de lectura (instala GDAL o rasterio)."""


__all__ = [
    "RasterFetchError", "RasterFetchWarning", "RequestShapeError", "OptionShapeError",
    "OptionValueError", "SourceOpenError", "BandIndexError", "UnsupportedPixelTypeError",
    "WindowReadError", "BackendUnavailableError",
]
