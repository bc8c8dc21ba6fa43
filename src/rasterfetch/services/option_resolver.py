# src/rasterfetch/services/option_resolver.py
from __future__ import annotations

"""
Resolución de opciones: registro genérico clave/valor → RequestOptions.

Política de forma por campo (la forma de un valor es la de
``np.atleast_2d(np.asarray(valor))``; un escalar es 1x1):
  • xextend/yextend/xout/yout: exactamente 1x1 numérico o error fatal
    (definen el tamaño del buffer a reservar).
  • gdal_dump/overview: cualquier vector fila 1xN; se toma el primer
    elemento (comportamiento heredado, no endurecer).
  • resto (band, verbose, xorigin, yorigin): 1x1; si no, advertencia y se
    conserva el default.
Claves desconocidas se ignoran en silencio.
"""

import math
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import numpy as np

from ..contracts.errors import OptionShapeError, RequestShapeError
from ..contracts.options import RequestOptions
from .diagnostics import Diagnostics

RawOptions = Union[Mapping[str, Any], RequestOptions, None]

# clave (minúsculas) → campo de RequestOptions
OPTION_KEYS: Mapping[str, str] = {
    "band": "band",
    "overview": "overview",
    "gdal_dump": "dump_metadata_only",
    "dumpmetadataonly": "dump_metadata_only",
    "dump_metadata_only": "dump_metadata_only",
    "verbose": "verbose",
    "xorigin": "x_origin",
    "yorigin": "y_origin",
    "xextend": "x_extent",
    "xextent": "x_extent",
    "yextend": "y_extent",
    "yextent": "y_extent",
    "xout": "x_out",
    "yout": "y_out",
}

FIELD_LABELS: Mapping[str, str] = {
    "band": "band",
    "overview": "overview",
    "dump_metadata_only": "dumpMetadataOnly",
    "verbose": "verbose",
    "x_origin": "xOrigin",
    "y_origin": "yOrigin",
    "x_extent": "xExtent",
    "y_extent": "yExtent",
    "x_out": "xOut",
    "y_out": "yOut",
}

STRICT_FIELDS = frozenset({"x_extent", "y_extent", "x_out", "y_out"})
ROW_FIELDS = frozenset({"dump_metadata_only", "overview"})
BOOL_FIELDS = frozenset({"dump_metadata_only", "verbose"})


def value_shape(value: Any) -> Tuple[Optional[Tuple[int, ...]], Optional[float]]:
    """
    (forma 2-D, primer elemento) de un valor numérico.
    Forma None = valor no numérico; primer elemento None = arreglo vacío.
    """
    try:
        arr = np.asarray(value)
    except (TypeError, ValueError):
        return None, None
    if arr.dtype.kind not in "biuf":
        return None, None
    arr = np.atleast_2d(arr)
    first = float(arr.flat[0]) if arr.size else None
    return tuple(int(s) for s in arr.shape), first


def _shape_ok(field: str, shape: Tuple[int, ...]) -> bool:
    if field in ROW_FIELDS:
        return len(shape) == 2 and shape[0] == 1 and shape[1] >= 1
    return shape == (1, 1)


def _fmt_shape(shape: Optional[Tuple[int, ...]]) -> str:
    return "x".join(str(s) for s in shape) if shape else "no numérico"


class _OptionsBuilder:
    """Acumula campos ya validados; cada campo se aplica una sola vez."""

    def __init__(self, diagnostics: Diagnostics):
        self._diag = diagnostics
        self._values: Dict[str, Any] = {}

    def apply(self, key: str, field: str, value: Any) -> None:
        label = FIELD_LABELS[field]
        if field in self._values:
            self._diag.warn(f"{label}: la clave {key!r} repite un campo ya asignado; se ignora")
            return

        shape, first = value_shape(value)
        if shape is None or first is None or not _shape_ok(field, shape):
            if field in STRICT_FIELDS:
                raise OptionShapeError(label, shape)
            self._diag.warn(f"{label}: el campo debe ser 1x1 y no {_fmt_shape(shape)}; se conserva el default")
            return
        if not math.isfinite(first):
            if field in STRICT_FIELDS:
                raise OptionShapeError(label, shape, f"el valor debe ser finito y no {first}")
            self._diag.warn(f"{label}: el valor debe ser finito y no {first}; se conserva el default")
            return

        if field in BOOL_FIELDS:
            self._values[field] = first != 0
            return

        iv = int(first)  # truncado, como un cast a int
        if field in ("x_origin", "y_origin") and iv < 0:
            self._diag.warn(f"{label}: el origen no puede ser negativo ({iv}); se usa 0")
            return
        self._values[field] = iv

    def build(self) -> RequestOptions:
        return RequestOptions(**self._values)


def resolve_options(raw: RawOptions, diagnostics: Optional[Diagnostics] = None) -> RequestOptions:
    """Valida cada clave reconocida de forma independiente y arma RequestOptions."""
    if raw is None:
        return RequestOptions()
    if isinstance(raw, RequestOptions):
        return raw
    if not isinstance(raw, Mapping):
        raise RequestShapeError(f"las opciones deben ser un mapping, no {type(raw).__name__}")

    diag = diagnostics or Diagnostics()
    builder = _OptionsBuilder(diag)
    for key, value in raw.items():
        field = OPTION_KEYS.get(str(key).lower())
        if field is None:
            continue
        builder.apply(str(key), field, value)
    return builder.build()


__all__ = ["resolve_options", "value_shape", "OPTION_KEYS", "FIELD_LABELS", "RawOptions"]
