# tests/unit/test_cli.py
import json
from pathlib import Path

import numpy as np
import pytest

from rasterfetch import cli
from tests.factories import make_service, make_source


@pytest.fixture
def fake(monkeypatch):
    src = make_source()
    seen = {}

    def _build(settings):
        seen["settings"] = settings
        return make_service(src)

    monkeypatch.setattr(cli, "build_service", _build)
    return seen


def test_dump_prints_record(fake, capsys):
    assert cli.main(["dump", "scene.tif"]) == 0
    rec = json.loads(capsys.readouterr().out)
    assert rec["bandCount"] == 1 and rec["bands"][0]["overviews"] == []


def test_dump_legacy(fake, capsys):
    assert cli.main(["dump", "scene.tif", "--legacy", "--indent", "0"]) == 0
    rec = json.loads(capsys.readouterr().out)
    assert rec["RasterXSize"] == 5 and rec["Band"][0]["DataType"] == "Byte"


def test_read_summary(fake, capsys):
    assert cli.main(["read", "scene.tif", "--xout", "2", "--yout", "3", "--quiet"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["shape"] == [3, 2] and out["dtype"] == "uint8" and out["kind"] == "byte"


def test_read_saves_npy(fake, capsys, tmp_path: Path):
    target = tmp_path / "out" / "w.npy"
    assert cli.main(["read", "scene.tif", "--band", "1", "--out", str(target)]) == 0
    assert capsys.readouterr().out.strip() == str(target)
    arr = np.load(target)
    assert arr.shape == (4, 5)


def test_global_overrides_reach_settings(fake):
    cli.main(["--backend", "rasterio", "--log-level", "debug", "dump", "scene.tif"])
    s = fake["settings"]
    assert s.backend == "rasterio" and s.log_level == "DEBUG"


def test_errors_exit_with_one(fake, capsys):
    assert cli.main(["read", "missing.tif"]) == 1
    assert capsys.readouterr().err.startswith("[ERROR] No se pudo abrir missing.tif")


def test_keyboard_interrupt(monkeypatch):
    def _boom(args):
        raise KeyboardInterrupt
    monkeypatch.setattr(cli, "cmd_dump", _boom)
    assert cli.main(["dump", "x.tif"]) == 130


def test_read_help_describes_window_sizes(capsys):
    with pytest.raises(SystemExit):
        cli.main(["read", "--help"])
    out = capsys.readouterr().out
    assert "ancho de la ventana" in out and "alto de la ventana" in out
