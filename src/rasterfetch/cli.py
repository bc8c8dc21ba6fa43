# src/rasterfetch/cli.py
from __future__ import annotations

"""
CLI de rasterfetch (contracts-first, minimal).

Comandos:
  - dump: imprime el registro de metadatos de un raster como JSON.
  - read: lee una ventana de una banda y la resume o la guarda como .npy.

Ejemplos rápidos:
  python -m rasterfetch.cli dump ./dem.tif --indent 2
  python -m rasterfetch.cli dump ./dem.tif --legacy

  python -m rasterfetch.cli read ./dem.tif --band 1 \
      --xorigin 10 --yorigin 20 --xextent 100 --yextent 100 \
      --xout 50 --yout 50 --out ./window.npy
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

from .composition.di import build_service, build_settings, configure_logging
from .config import Settings
from .contracts.raster import PixelBuffer
from .services.fetch_service import RasterFetchService

# ----------------------
# Utilidades locales
# ----------------------

_WINDOW_ARGS = ("band", "overview", "xorigin", "yorigin", "xextent", "yextent", "xout", "yout")


def _settings_from_args(args: argparse.Namespace) -> Settings:
    s = build_settings(Path(args.config) if args.config else None)
    update: Dict[str, Any] = {}
    if args.backend:
        update["backend"] = args.backend
    if args.log_level:
        update["log_level"] = args.log_level.upper()
    return s.model_copy(update=update) if update else s


def _service(args: argparse.Namespace) -> RasterFetchService:
    s = _settings_from_args(args)
    configure_logging(s)
    return build_service(s)


def _options_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    # sólo lo que el usuario pasó; el resto queda por defecto
    opts: Dict[str, Any] = {k: getattr(args, k) for k in _WINDOW_ARGS if getattr(args, k) is not None}
    opts["verbose"] = not args.quiet
    return opts


def _summary(buf: PixelBuffer) -> Dict[str, Any]:
    data = buf.data
    finite = data[np.isfinite(data)] if data.dtype.kind == "f" else data
    out: Dict[str, Any] = {
        "window": str(buf.window),
        "shape": list(buf.shape),
        "dtype": str(buf.dtype),
        "kind": buf.kind.value,
    }
    if finite.size:
        out.update(min=float(finite.min()), max=float(finite.max()), mean=float(finite.mean()))
    return out


# ----------------------
# Comandos
# ----------------------

def cmd_dump(args: argparse.Namespace) -> int:
    svc = _service(args)
    meta = svc.describe(args.file)
    record = meta.to_legacy_record() if args.legacy else meta.to_record()
    print(json.dumps(record, indent=args.indent, ensure_ascii=False))
    return 0


def cmd_read(args: argparse.Namespace) -> int:
    svc = _service(args)
    buf = svc.fetch(args.file, _options_from_args(args))
    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        np.save(out_path, np.asarray(buf.data))
        print(str(out_path))
        return 0
    print(json.dumps(_summary(buf), indent=2))
    return 0


# ----------------------
# Parser / main
# ----------------------

def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="rasterfetch", description="Lectura de rasters vía GDAL/rasterio")
    p.add_argument("--config", help="YAML de Settings (si no, env RASTERFETCH_* / .env)")
    p.add_argument("--backend", choices=("auto", "gdal", "rasterio"), help="sobre-escribe Settings.backend")
    p.add_argument("--log-level", help="sobre-escribe Settings.log_level (DEBUG, INFO, ...)")
    sub = p.add_subparsers(dest="cmd", required=True)

    pd = sub.add_parser("dump", help="imprime los metadatos del raster como JSON")
    pd.add_argument("file", help="ruta o URI que GDAL/rasterio pueda abrir")
    pd.add_argument("--legacy", action="store_true", help="registro con claves históricas (RasterXSize, Band, ...)")
    pd.add_argument("--indent", type=int, default=2, help="sangría del JSON")
    pd.set_defaults(func=cmd_dump)

    pr = sub.add_parser("read", help="lee una ventana de una banda")
    pr.add_argument("file", help="ruta o URI que GDAL/rasterio pueda abrir")
    pr.add_argument("--band", type=int, help="banda, 1-based (defecto 1)")
    pr.add_argument("--overview", type=int, help="índice de overview, 0-based")
    pr.add_argument("--xorigin", type=int, help="columna inicial")
    pr.add_argument("--yorigin", type=int, help="fila inicial")
    pr.add_argument("--xextent", type=int, help="ancho de la ventana, en columnas")
    pr.add_argument("--yextent", type=int, help="alto de la ventana, en filas")
    pr.add_argument("--xout", type=int, help="columnas de salida")
    pr.add_argument("--yout", type=int, help="filas de salida")
    pr.add_argument("--quiet", action="store_true", help="sin trazas informativas")
    pr.add_argument("--out", help="guarda el arreglo en .npy (si no, imprime un resumen)")
    pr.set_defaults(func=cmd_read)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    p = _build_parser()
    args = p.parse_args(argv)
    try:
        return int(args.func(args))
    except KeyboardInterrupt:
        return 130
    except Exception as ex:
        print(f"[ERROR] {ex}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
