# tests/integration/adapters/test_gdal_raster_reader.py
import warnings
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import numpy as np
import pytest

rasterio = pytest.importorskip("rasterio")
from rasterio.transform import from_origin  # noqa: E402

from rasterfetch.adapters import gdal_raster_reader as backends  # noqa: E402
from rasterfetch.adapters.gdal_raster_reader import (  # noqa: E402
    GdalRasterSource, RasterioRasterSource, available_backends,
)
from rasterfetch.config import Settings  # noqa: E402
from rasterfetch.contracts.errors import (  # noqa: E402
    RasterFetchWarning, SourceOpenError, WindowReadError,
)
from rasterfetch.services.fetch_service import RasterFetchService  # noqa: E402

pytestmark = [pytest.mark.integration, pytest.mark.gdal]

_SOURCES = {"gdal": GdalRasterSource, "rasterio": RasterioRasterSource}


@pytest.fixture(params=[b for b in ("gdal", "rasterio") if b in available_backends()])
def svc(request):
    return RasterFetchService(source=_SOURCES[request.param](), settings=Settings(verbose=False))


def _write_tif(path: Path, data: np.ndarray, transform=None, nodata=None, overviews=()):
    count = 1 if data.ndim == 2 else data.shape[0]
    kw = dict(driver="GTiff", width=data.shape[-1], height=data.shape[-2], count=count,
              dtype=str(data.dtype))
    if transform is not None:
        kw.update(transform=transform, crs="EPSG:32719")
    if nodata is not None:
        kw["nodata"] = nodata
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        with rasterio.open(path, "w", **kw) as dst:
            dst.write(data if data.ndim == 3 else data[np.newaxis])
            if overviews:
                dst.build_overviews(list(overviews), rasterio.enums.Resampling.nearest)
    return path


@pytest.fixture
def byte_tif(tmp_path: Path):
    data = np.arange(6 * 4, dtype=np.uint8).reshape(4, 6)
    return _write_tif(tmp_path / "byte.tif", data, from_origin(100.0, 500.0, 10.0, 10.0),
                      overviews=(2,))


def test_describe_geotiff(svc, byte_tif):
    meta = svc.describe(byte_tif)
    assert (meta.width, meta.height, meta.band_count) == (6, 4, 1)
    assert meta.driver_short_name == "GTiff"
    assert meta.geo_transform == pytest.approx((100.0, 10.0, 0.0, 500.0, 0.0, -10.0))
    assert meta.bands[0].data_type_name == "Byte"
    assert [(o.width, o.height) for o in meta.bands[0].overviews] == [(3, 2)]
    assert any(d.short_name == "GTiff" for d in meta.drivers)
    assert "32719" in meta.projection_text or "UTM" in meta.projection_text


def test_fetch_full_byte_band(svc, byte_tif):
    buf = svc.fetch_pixels(str(byte_tif))
    assert buf.shape == (4, 6) and buf.dtype == np.uint8
    np.testing.assert_array_equal(buf.data, np.arange(24).reshape(4, 6))


def test_fetch_window_and_overview(svc, byte_tif):
    buf = svc.fetch_pixels(str(byte_tif), {"xorigin": 1, "yorigin": 1, "xextend": 3, "yextend": 2,
                                           "xout": 2, "yout": 1})
    assert buf.shape == (1, 2)
    assert svc.fetch_pixels(str(byte_tif), {"overview": 0}).shape == (2, 3)


def test_int16_widens_to_float64(svc, tmp_path: Path):
    data = (np.arange(12, dtype=np.int16) - 6).reshape(3, 4)
    path = _write_tif(tmp_path / "i16.tif", data, from_origin(0, 3, 1, 1), nodata=-6)
    buf = svc.fetch_pixels(str(path))
    assert buf.dtype == np.float64
    np.testing.assert_array_equal(buf.data, data.astype(np.float64))
    assert svc.describe(path).bands[0].no_data_value == -6.0


def test_world_file_fallback(svc, tmp_path: Path):
    path = _write_tif(tmp_path / "scan.tif", np.zeros((2, 2), dtype=np.uint8))
    (tmp_path / "scan.wld").write_text("2\n0\n0\n-2\n101\n499\n", encoding="ascii")
    meta = svc.describe(path)
    assert meta.geo_transform == pytest.approx((100.0, 2.0, 0.0, 500.0, 0.0, -2.0))


def test_missing_georeference_warns(svc, tmp_path: Path):
    path = _write_tif(tmp_path / "plain.tif", np.zeros((2, 2), dtype=np.uint8))
    with pytest.warns(RasterFetchWarning):
        meta = svc.describe(path)
    assert meta.geo_transform is None


def test_missing_file(svc, tmp_path: Path):
    with pytest.raises(SourceOpenError, match="nope.tif"):
        svc.describe(tmp_path / "nope.tif")


def test_out_of_bounds_window(svc, byte_tif):
    with pytest.raises(WindowReadError):
        svc.fetch_pixels(str(byte_tif), {"xorigin": 5, "xextend": 4, "xout": 2})


_REGISTRIES = {"gdal": "_register_gdal", "rasterio": "_rasterio_driver_map"}


@pytest.mark.parametrize("backend", ["gdal", "rasterio"])
def test_drivers_registered_once_per_process(backend):
    if backend not in available_backends():
        pytest.skip(f"{backend} no instalado")
    src = _SOURCES[backend]()
    registry = getattr(backends, _REGISTRIES[backend])

    for _ in range(3):
        src.register_drivers()
    with ThreadPoolExecutor(max_workers=4) as pool:
        list(pool.map(lambda _: src.register_drivers(), range(8)))
    first = list(src.drivers())
    with ThreadPoolExecutor(max_workers=4) as pool:
        others = list(pool.map(lambda _: list(src.drivers()), range(4)))

    assert registry.cache_info().misses == 1
    assert first and all(o == first for o in others)
    assert "GTiff" in [short for short, _ in first]
