# =============================
# FILE: examples/using_raster_source_port.py
# =============================
"""
Uso mínimo: el colaborador GDAL/rasterio detrás de RasterSourcePort.
Describe la fuente, lee una ventana remuestreada y luego la banda 1 con coordenadas.
"""
import sys

from rasterfetch.api import describe, fetch_pixels, read_band


if __name__ == "__main__":
    path = sys.argv[1] if len(sys.argv) > 1 else "/ruta/al/raster.tif"

    meta = describe(path)
    print(f"{meta.driver_short_name}: {meta.width}x{meta.height}, {meta.band_count} bandas")
    for i, b in enumerate(meta.bands, start=1):
        print(f" - banda {i}: {b.data_type_name}, nodata={b.no_data_value}, overviews={len(b.overviews)}")

    buf = fetch_pixels(path, {"band": 1, "xout": 64, "yout": 64, "verbose": 0})
    print("ventana:", buf.window, "→", buf.shape, buf.dtype)

    r = read_band(path, {"xorigin": 0, "yorigin": 0})
    if r.x is not None:
        print("esquinas x:", r.x, "y:", r.y)
