# tests/unit/services/test_metadata_service.py
import pytest

from rasterfetch.contracts.errors import RasterFetchWarning, SourceOpenError
from rasterfetch.services.diagnostics import Diagnostics
from rasterfetch.services.metadata_service import describe_source
from tests.factories import make_band, make_source

QUIET = Diagnostics(verbose=False)


@pytest.fixture
def three_band_source():
    bands = [make_band(6, 4, "Byte"),
             make_band(6, 4, "Int16", nodata=-9999.0, overviews=[(3, 2), (2, 1)]),
             make_band(6, 4, "Float32")]
    return make_source(bands=bands)


def test_three_bands_in_order(three_band_source):
    meta = describe_source(three_band_source, "scene.tif", QUIET)
    assert meta.band_count == 3
    assert [b.data_type_name for b in meta.bands] == ["Byte", "Int16", "Float32"]
    assert meta.bands[1].no_data_value == -9999.0
    assert [(o.width, o.height) for o in meta.bands[1].overviews] == [(3, 2), (2, 1)]


def test_zero_overviews_serialize_as_empty_list(three_band_source):
    rec = describe_source(three_band_source, "scene.tif", QUIET).to_record()
    assert rec["bands"][0]["overviews"] == []
    assert rec["bands"][0]["noDataValue"] is None
    assert rec["bandCount"] == 3
    assert rec["drivers"][0] == {"shortName": "GTiff", "longName": "GeoTIFF"}
    assert rec["geoTransform"] == [100.0, 10.0, 0.0, 500.0, 0.0, -10.0]


def test_dataset_is_closed(three_band_source):
    describe_source(three_band_source, "scene.tif", QUIET)
    assert three_band_source.opened and all(ds.closed for ds in three_band_source.opened)


def test_missing_georeference_warns_and_omits_field():
    src = make_source(gt=None)
    with pytest.warns(RasterFetchWarning, match="No internal georeferencing exists for scene.tif"):
        meta = describe_source(src, "scene.tif", QUIET)
    assert meta.geo_transform is None
    assert "geoTransform" not in meta.to_record()
    assert meta.to_legacy_record()["GeoTransform"] == []


def test_open_failure_is_fatal():
    src = make_source()
    with pytest.raises(SourceOpenError, match="missing.tif"):
        describe_source(src, "missing.tif", QUIET)


def test_describe_never_reads_pixels(three_band_source):
    describe_source(three_band_source, "scene.tif", QUIET)
    ds = three_band_source.datasets["scene.tif"]
    assert all(b.read_count == 0 for b in ds.bands)


def test_legacy_record_names(three_band_source):
    rec = describe_source(three_band_source, "scene.tif", QUIET).to_legacy_record()
    assert rec["RasterXSize"] == 6 and rec["RasterYSize"] == 4 and rec["RasterCount"] == 3
    assert rec["Band"][1]["Overview"] == [{"XSize": 3, "YSize": 2}, {"XSize": 2, "YSize": 1}]
    assert rec["Band"][1]["DataType"] == "Int16"
    assert rec["Driver"][1]["DriverShortName"] == "MEM"
