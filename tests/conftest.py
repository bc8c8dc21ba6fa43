import os
import pytest
from rasterfetch.config import get_settings

def pytest_configure():
    os.environ.setdefault("RASTERFETCH_LOG_LEVEL", "WARNING")

@pytest.fixture(autouse=True)
def _reset_settings_cache(monkeypatch):
    # evita fuga de estado entre tests
    for k in ("RASTERFETCH_BACKEND", "RASTERFETCH_VERBOSE", "RASTERFETCH_NODATA_TO_NAN",
              "RASTERFETCH_WORLD_FILE_EXTENSION"):
        monkeypatch.delenv(k, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

@pytest.fixture
def source():
    from tests.factories import make_source
    return make_source()

@pytest.fixture
def service(source):
    from tests.factories import make_service
    return make_service(source)

def pytest_collection_modifyitems(items):
    for item in items:
        if "integration" in item.keywords and os.environ.get("CI") == "true":
            # marca como slow en CI si quieres escalonar
            item.add_marker(pytest.mark.slow)
