# src/rasterfetch/services/window_planner.py
from __future__ import annotations

from ..contracts.options import RequestOptions
from ..contracts.raster import Window


def plan_window(options: RequestOptions, band_width: int, band_height: int) -> Window:
    """
    Resuelve la ventana de lectura con los defaults que dependen de la banda:
      1. extent = el pedido, o el tamaño completo de la banda.
      2. out = el pedido, o extent - origin (sin remuestreo).
      3. origin pasa tal cual.
    No recorta ni valida límites: eso lo reporta la lectura.
    """
    x_extent = options.x_extent if options.x_extent is not None else band_width
    y_extent = options.y_extent if options.y_extent is not None else band_height
    x_out = options.x_out if options.x_out is not None else x_extent - options.x_origin
    y_out = options.y_out if options.y_out is not None else y_extent - options.y_origin
    return Window(
        x_origin=options.x_origin,
        y_origin=options.y_origin,
        x_extent=x_extent,
        y_extent=y_extent,
        x_out=x_out,
        y_out=y_out,
    )


__all__ = ["plan_window"]
