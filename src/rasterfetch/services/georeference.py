# src/rasterfetch/services/georeference.py
from __future__ import annotations

"""
Resolución de georreferencia por estrategias en orden estricto; gana la
primera que devuelve un GeoTransform:
  1. transform interno del dataset
  2. world file genérico: a.tif → a.wld
  3. world file con extensión añadida: a.tif → a.tif.wld
  4. world file adivinado por el colaborador (a.tfw, a.tifw, ...), si lo soporta
Si ninguna funciona se devuelve None (no es un error).
"""

import logging
from typing import Callable, List, Optional, Tuple

from ..contracts.geo import GeoTransform
from ..ports.raster_read import RasterDatasetPort, RasterSourcePort

log = logging.getLogger(__name__)

GENERIC_WORLD_EXTENSION = "wld"
# extensión ficticia que splitext() descarta, dejando "<nombre-original>.wld"
_SYNTHETIC_SUFFIX = ".xxx"

Strategy = Tuple[str, Callable[[], Optional[GeoTransform]]]


def georeference_strategies(
    source: RasterSourcePort,
    dataset: RasterDatasetPort,
    filename: str,
    world_extension: str = GENERIC_WORLD_EXTENSION,
) -> List[Strategy]:
    strategies: List[Strategy] = [
        ("internal", dataset.geo_transform),
        ("world_file", lambda: source.read_world_file(filename, world_extension)),
        ("world_file_appended",
         lambda: source.read_world_file(f"{filename}{_SYNTHETIC_SUFFIX}", world_extension)),
    ]
    if source.supports_world_file_guess:
        strategies.append(("world_file_guess", lambda: source.read_world_file(filename, None)))
    return strategies


def resolve_geotransform(
    source: RasterSourcePort,
    dataset: RasterDatasetPort,
    filename: str,
    world_extension: str = GENERIC_WORLD_EXTENSION,
) -> Optional[GeoTransform]:
    for name, strategy in georeference_strategies(source, dataset, filename, world_extension):
        gt = strategy()
        if gt is not None:
            log.debug("georreferencia de %s resuelta por %s", filename, name)
            return gt
    return None


__all__ = ["resolve_geotransform", "georeference_strategies", "GENERIC_WORLD_EXTENSION"]
