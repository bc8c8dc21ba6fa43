import numpy as np
import pytest
from rasterfetch.contracts.geo import (
    as_geotransform, geotransform_bounds, pixel_to_world, pretty_bounds, window_corners, window_grid,
)

GT = (100.0, 10.0, 0.0, 500.0, 0.0, -10.0)

def test_as_geotransform():
    assert as_geotransform(None) is None
    assert as_geotransform([1, 2, 3, 4, 5, 6]) == (1.0, 2.0, 3.0, 4.0, 5.0, 6.0)
    with pytest.raises(ValueError):
        as_geotransform([1, 2, 3])

def test_bounds_north_up():
    b = geotransform_bounds(GT, 6, 4)
    assert (b.minx, b.miny, b.maxx, b.maxy) == (100.0, 460.0, 160.0, 500.0)
    assert "minx=100.000" in pretty_bounds(b)

def test_pixel_to_world():
    assert pixel_to_world(1, 2, GT) == (110.0, 480.0)

def test_window_corners_use_last_cell():
    (x0, xe), (y0, ye) = window_corners(GT, 2, 1, 3, 2)
    assert (x0, xe, y0, ye) == (120.0, 140.0, 490.0, 480.0)

def test_window_grid_shape():
    x, y = window_grid(GT, 0, 0, 6, 4, 3, 2)
    assert x.shape == y.shape == (2, 3)
    np.testing.assert_allclose(y[:, 0], [500.0, 470.0])
