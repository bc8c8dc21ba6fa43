# src/rasterfetch/services/fetch_service.py
from __future__ import annotations

"""
Servicio de lectura: contracts-first, sin dependencias duras fuera de *ports*.

Dos modos excluyentes por llamada:
  • dump (gdal_dump / dumpMetadataOnly): sólo el registro de metadatos;
    nunca se planifica ventana ni se lee un píxel.
  • píxeles: opciones → ventana → lectura + trasposición; devuelve sólo el
    buffer (los metadatos son otra llamada).
Cada llamada abre, lee/describe y cierra su fuente.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from ..config import Settings, get_settings
from ..contracts.errors import RequestShapeError
from ..contracts.options import RequestOptions
from ..contracts.raster import PixelBuffer, SourceMetadata
from ..ports.raster_read import RasterSourcePort
from .diagnostics import Diagnostics
from .metadata_service import describe_source
from .option_resolver import RawOptions, resolve_options
from .raster_fetch import fetch_window
from .window_planner import plan_window


def check_filename(filename: Any) -> str:
    """El nombre de archivo debe ser str o PathLike no vacío."""
    if isinstance(filename, os.PathLike):
        filename = os.fspath(filename)
    if not isinstance(filename, str):
        raise RequestShapeError(
            f"el nombre de archivo debe ser un string, no {type(filename).__name__}")
    if not filename.strip():
        raise RequestShapeError("el nombre de archivo no puede ser vacío")
    return filename


@dataclass
class RasterFetchService:
    source: RasterSourcePort
    settings: Settings = field(default_factory=get_settings)

    # ---------- Helpers ----------
    def _diagnostics(self, opts: Optional[RequestOptions] = None) -> Diagnostics:
        verbose = self.settings.verbose
        if opts is not None and "verbose" in opts.model_fields_set:
            verbose = opts.verbose
        return Diagnostics(verbose=verbose)

    # ---------- Casos de uso ----------
    def resolve(self, options: RawOptions) -> RequestOptions:
        return resolve_options(options, self._diagnostics())

    def describe(self, filename: Any, *, verbose: Optional[bool] = None) -> SourceMetadata:
        uri = check_filename(filename)
        diag = self._diagnostics()
        if verbose is not None:
            diag = diag.with_verbose(verbose)
        self.source.register_drivers()
        return describe_source(self.source, uri, diag, self.settings.world_file_extension)

    def fetch(self, filename: Any, options: RawOptions = None) -> PixelBuffer:
        """Modo píxeles siempre (ignora gdal_dump)."""
        uri = check_filename(filename)
        opts = self.resolve(options)
        return self._fetch(uri, opts, self._diagnostics(opts))

    def fetch_pixels(
        self, filename: Any, options: RawOptions = None
    ) -> Union[PixelBuffer, SourceMetadata]:
        uri = check_filename(filename)
        opts = self.resolve(options)
        diag = self._diagnostics(opts)
        self.source.register_drivers()
        if opts.dump_metadata_only:
            return describe_source(self.source, uri, diag, self.settings.world_file_extension)
        return self._fetch(uri, opts, diag)

    def _fetch(self, uri: str, opts: RequestOptions, diag: Diagnostics) -> PixelBuffer:
        self.source.register_drivers()
        with self.source.open(uri) as ds:
            band = ds.band(opts.band)
            if opts.overview is not None:
                band = band.overview(opts.overview)
            window = plan_window(opts, band.width, band.height)
            return fetch_window(band, window, diag, uri)


__all__ = ["RasterFetchService", "check_filename"]
