# tests/unit/services/test_band_reader.py
import numpy as np
import pytest

from rasterfetch.contracts.errors import OptionValueError
from rasterfetch.services.band_reader import read_all_bands, read_band, validate_band_options
from tests.factories import make_band, make_service, make_source

GT = (100.0, 10.0, 0.0, 500.0, 0.0, -10.0)


@pytest.fixture
def svc():
    bands = [make_band(6, 4, "Byte", overviews=[(3, 2)]), make_band(6, 4, "Int16", nodata=3.0)]
    return make_service(make_source(bands=bands, gt=GT))


def test_defaults_read_whole_band_with_corners(svc):
    r = read_band(svc, "scene.tif")
    assert r.z.shape == (4, 6) and r.z.dtype == np.uint8
    np.testing.assert_allclose(r.x, [100.0, 150.0])
    np.testing.assert_allclose(r.y, [500.0, 470.0])
    assert r.metadata.band_count == 2


def test_origin_shrinks_extent(svc):
    r = read_band(svc, "scene.tif", {"xorigin": 2, "yorigin": 1})
    assert (r.window.x_extent, r.window.y_extent) == (4, 3)
    assert r.z.shape == (3, 4)
    np.testing.assert_allclose(r.x, [120.0, 150.0])


def test_grid_coordinates(svc):
    r = read_band(svc, "scene.tif", {"xout": 3, "yout": 2}, grid=True)
    assert r.x.shape == r.y.shape == (2, 3)
    np.testing.assert_allclose(r.x[0], [100.0, 125.0, 150.0])
    np.testing.assert_allclose(r.y[:, 0], [500.0, 470.0])


def test_grid_from_options(svc):
    r = read_band(svc, "scene.tif", {"grid": 1})
    assert r.x.shape == (4, 6)


def test_nodata_becomes_nan(svc):
    r = read_band(svc, "scene.tif", {"band": 2})
    assert r.z.dtype == np.float64
    assert np.isnan(r.z[0, 3])
    assert np.count_nonzero(np.isnan(r.z)) == 1


def test_nodata_kept_when_disabled():
    src = make_source(bands=[make_band(6, 4, "Int16", nodata=3.0)])
    r = read_band(make_service(src, nodata_to_nan=False), "scene.tif")
    assert r.z[0, 3] == 3.0


def test_overview_uses_its_size_and_scaled_transform(svc):
    r = read_band(svc, "scene.tif", {"overview": 0})
    assert r.z.shape == (2, 3)
    np.testing.assert_allclose(r.x, [100.0, 140.0])


def test_no_georeference_gives_no_coordinates():
    src = make_source(gt=None, supports_world_file_guess=False)
    with pytest.warns(UserWarning):
        r = read_band(make_service(src), "scene.tif")
    assert r.x is None and r.y is None


@pytest.mark.parametrize("opts, field", [
    ({"band": 0}, "band"),
    ({"band": 3}, "band"),
    ({"overview": 1}, "overview"),
    ({"xorigin": 7}, "xorigin"),
    ({"xextend": 0}, "xextend"),
    ({"xorigin": 2, "xextend": 5}, "xextent"),
    ({"yout": -2}, "yout"),
    ({"verbose": []}, "verbose"),
    ({"grid": "yes"}, "grid"),
    ({"xout": float("nan")}, "xout"),
    ({"bogus": 1}, "bogus"),
    ({"band": [1, 2]}, "band"),
])
def test_strict_validation(svc, opts, field):
    with pytest.raises(OptionValueError) as ei:
        read_band(svc, "scene.tif", opts)
    assert ei.value.field == field


def test_validate_fills_window(svc):
    meta = svc.describe("scene.tif")
    bo = validate_band_options({"yorigin": 1, "xout": 2}, meta)
    o = bo.options
    assert (o.x_extent, o.y_extent, o.x_out, o.y_out) == (6, 3, 2, 3)
    assert o.verbose is False and bo.grid is False


def test_read_all_bands_stacks_planes(svc):
    r = read_all_bands(svc, "scene.tif")
    assert r.z.shape == (4, 6, 2)
    assert r.z.dtype == np.float64  # band 2 has nodata
    np.testing.assert_array_equal(r.z[:, :, 0], np.arange(24).reshape(4, 6))
    assert np.isnan(r.z[0, 3, 1])


def test_read_all_bands_keeps_byte_without_nodata():
    src = make_source(bands=[make_band(3, 2), make_band(3, 2)])
    r = read_all_bands(make_service(src), "scene.tif")
    assert r.z.dtype == np.uint8 and r.z.shape == (2, 3, 2)


def test_read_all_bands_requires_equal_sizes():
    src = make_source(bands=[make_band(3, 2), make_band(4, 2)])
    with pytest.raises(OptionValueError):
        read_all_bands(make_service(src), "scene.tif")


def test_full_size_extent_with_origin_shrinks_to_edge(svc):
    r = read_band(svc, "scene.tif", {"xorigin": 2, "xextend": 6, "yorigin": 1, "yextend": 4})
    assert (r.window.x_extent, r.window.y_extent) == (4, 3)
    assert r.z.shape == (3, 4)
    np.testing.assert_allclose(r.x, [120.0, 150.0])


def test_read_all_bands_without_bands():
    src = make_source(bands=[])
    with pytest.raises(OptionValueError, match="no tiene bandas"):
        read_all_bands(make_service(src), "scene.tif")
