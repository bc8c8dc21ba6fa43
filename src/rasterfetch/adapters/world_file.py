# src/rasterfetch/adapters/world_file.py
"""
Lectura de world files (sidecar .wld/.tfw/...) compartida por los adapters.

Formato: 6 líneas A, D, B, E, C, F con C/F en el *centro* del píxel
superior izquierdo. Se devuelve el GeoTransform GDAL (esquina).
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

from ..contracts.geo import GeoTransform

log = logging.getLogger(__name__)


def world_file_candidates(uri: str, extension: Optional[str]) -> List[Path]:
    """
    Rutas candidatas, en orden.
    - extension dada: reemplaza la extensión del raster (minúsculas, luego MAYÚSCULAS).
    - extension None: adivina a partir de la extensión del raster
      (.tif → .tfw, .tifw) y como último recurso .wld.
    """
    base, ext = os.path.splitext(str(uri))
    if extension is not None:
        ext_clean = extension.lstrip(".")
        names = [ext_clean.lower(), ext_clean.upper()]
    else:
        src = ext.lstrip(".")
        names = []
        if len(src) >= 2:
            names.append(f"{src[0]}{src[-1]}w")
        if src:
            names.append(f"{src}w")
        names.append("wld")
        names = [n for nm in names for n in (nm.lower(), nm.upper())]
    seen: List[Path] = []
    for n in names:
        p = Path(f"{base}.{n}")
        if p not in seen:
            seen.append(p)
    return seen


def parse_world_file(text: str) -> Optional[GeoTransform]:
    """Convierte el contenido de un world file en GeoTransform; None si no es válido."""
    values: List[float] = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            values.append(float(line))
        except ValueError:
            return None
        if len(values) == 6:
            break
    if len(values) < 6:
        return None
    a, d, b, e, c, f = values
    if a == 0.0 or e == 0.0:
        return None
    return (c - 0.5 * a - 0.5 * b, a, b, f - 0.5 * d - 0.5 * e, d, e)


def read_world_file(uri: str, extension: Optional[str]) -> Optional[GeoTransform]:
    """Primer world file válido entre los candidatos, o None."""
    for cand in world_file_candidates(uri, extension):
        if not cand.is_file():
            continue
        try:
            gt = parse_world_file(cand.read_text(encoding="ascii", errors="replace"))
        except OSError as e:
            log.debug("world file %s ilegible: %s", cand, e)
            continue
        if gt is not None:
            log.debug("world file usado: %s", cand)
            return gt
    return None


__all__ = ["world_file_candidates", "parse_world_file", "read_world_file"]
