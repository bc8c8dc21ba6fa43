# src/rasterfetch/services/metadata_service.py
from __future__ import annotations

from typing import Optional, Tuple

from ..contracts.raster import BandInfo, DriverInfo, OverviewInfo, SourceMetadata
from ..ports.raster_read import RasterBandPort, RasterSourcePort
from .diagnostics import Diagnostics
from .georeference import GENERIC_WORLD_EXTENSION, resolve_geotransform


def describe_drivers(source: RasterSourcePort) -> Tuple[DriverInfo, ...]:
    return tuple(DriverInfo(short_name=s, long_name=long_name) for s, long_name in source.drivers())


def describe_overviews(band: RasterBandPort) -> Tuple[OverviewInfo, ...]:
    out = []
    for i in range(band.overview_count):
        ov = band.overview(i)
        out.append(OverviewInfo(width=ov.width, height=ov.height))
    return tuple(out)


def describe_band(band: RasterBandPort) -> BandInfo:
    return BandInfo(
        width=band.width,
        height=band.height,
        data_type_name=band.data_type_name,
        no_data_value=band.no_data_value,
        overviews=describe_overviews(band),
    )


def describe_source(
    source: RasterSourcePort,
    filename: str,
    diagnostics: Optional[Diagnostics] = None,
    world_extension: str = GENERIC_WORLD_EXTENSION,
) -> SourceMetadata:
    """
    Registro completo de la fuente. Se construye de abajo hacia arriba
    (overviews → bandas → dataset) y se entrega de una sola vez.
    La fuente se cierra antes de volver.
    """
    diag = diagnostics or Diagnostics()
    drivers = describe_drivers(source)

    with source.open(filename) as ds:
        projection = ds.projection or ""
        gt = resolve_geotransform(source, ds, filename, world_extension)
        if gt is None:
            diag.warn(
                f"No internal georeferencing exists for {filename}, "
                "and could not find a suitable world file either."
            )
        bands = tuple(describe_band(ds.band(i)) for i in range(1, ds.band_count + 1))
        meta = SourceMetadata(
            projection_text=projection,
            geo_transform=gt,
            driver_short_name=ds.driver_short_name,
            driver_long_name=ds.driver_long_name,
            width=ds.width,
            height=ds.height,
            band_count=ds.band_count,
            drivers=drivers,
            bands=bands,
        )
    diag.trace("%s: %dx%dx%d (%s)", filename, meta.width, meta.height, meta.band_count,
               meta.driver_short_name)
    return meta


__all__ = ["describe_source", "describe_band", "describe_overviews", "describe_drivers"]
