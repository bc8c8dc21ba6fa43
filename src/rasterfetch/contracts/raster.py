# src/rasterfetch/contracts/raster.py

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np
import numpy.typing as npt
from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt
from pydantic.alias_generators import to_camel

from .errors import UnsupportedPixelTypeError
from .geo import GeoTransform

# -------------------------
# Representación de salida
# -------------------------
class PixelKind(str, Enum):
    """Las dos representaciones numéricas que entrega la lectura."""
    BYTE = "byte"
    WIDE = "wide"

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(np.uint8) if self is PixelKind.BYTE else np.dtype(np.float64)

    @property
    def item_size(self) -> int:
        return self.dtype.itemsize


# Único lugar donde se decide byte vs float64. Nombres = GDALGetDataTypeName.
NATIVE_TYPE_KINDS: Mapping[str, PixelKind] = MappingProxyType({
    "Byte": PixelKind.BYTE,
    "UInt16": PixelKind.WIDE,
    "Int16": PixelKind.WIDE,
    "UInt32": PixelKind.WIDE,
    "Int32": PixelKind.WIDE,
    "Float32": PixelKind.WIDE,
    "Float64": PixelKind.WIDE,
})


def pixel_kind_for(type_name: str, filename: Optional[str] = None) -> PixelKind:
    """Mapea el tipo nativo de la banda a BYTE/WIDE; cualquier otro tipo es fatal."""
    try:
        return NATIVE_TYPE_KINDS[type_name]
    except KeyError as e:
        raise UnsupportedPixelTypeError(str(type_name), filename) from e


# -------------------------
# Ventana y buffer
# -------------------------
@dataclass(frozen=True)
class Window:
    """Ventana resuelta: región leída (origen + extent) y tamaño de salida remuestreado."""
    x_origin: int
    y_origin: int
    x_extent: int
    y_extent: int
    x_out: int
    y_out: int

    @property
    def out_shape(self) -> Tuple[int, int]:
        # (filas, columnas) en la convención traspuesta
        return (self.y_out, self.x_out)

    def __str__(self) -> str:
        return (f"(xorigin={self.x_origin}, yorigin={self.y_origin}, "
                f"xextent={self.x_extent}, yextent={self.y_extent}, "
                f"xout={self.x_out}, yout={self.y_out})")


@dataclass(frozen=True)
class PixelBuffer:
    """Arreglo (y_out, x_out) en orden de columnas, uint8 o float64."""
    data: "npt.NDArray[Any]"  # type: ignore[valid-type]
    kind: PixelKind
    window: Window

    def __post_init__(self):
        # Bloquea mutaciones accidentales sobre los datos entregados
        if hasattr(self.data, "setflags"):
            self.data.setflags(write=False)

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.data.shape  # type: ignore[no-any-return]

    @property
    def dtype(self) -> np.dtype:
        return self.data.dtype


# -------------------------
# Metadatos (registro anidado)
# -------------------------
class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class DriverInfo(_Record):
    short_name: str
    long_name: str


class OverviewInfo(_Record):
    width: NonNegativeInt
    height: NonNegativeInt


class BandInfo(_Record):
    width: NonNegativeInt
    height: NonNegativeInt
    data_type_name: str
    no_data_value: Optional[float] = None
    overviews: Tuple[OverviewInfo, ...] = ()

    @property
    def has_no_data(self) -> bool:
        return self.no_data_value is not None and not math.isnan(self.no_data_value)


class SourceMetadata(_Record):
    """
    Descripción completa de una fuente: dataset → drivers[], bands[] → overviews[].
    Se arma de una vez por llamada; nunca se actualiza por partes.
    """
    projection_text: str = ""
    geo_transform: Optional[GeoTransform] = None
    driver_short_name: str
    driver_long_name: str
    width: NonNegativeInt
    height: NonNegativeInt
    band_count: NonNegativeInt
    drivers: Tuple[DriverInfo, ...] = ()
    bands: Tuple[BandInfo, ...] = Field(default=())

    @property
    def is_georeferenced(self) -> bool:
        return self.geo_transform is not None

    def to_record(self) -> Dict[str, Any]:
        """
        Registro genérico (dict) con los nombres del contrato de intercambio.
        `geoTransform` se omite si no hay georreferencia; `noDataValue` siempre está.
        """
        rec: Dict[str, Any] = {"projectionText": self.projection_text}
        if self.geo_transform is not None:
            rec["geoTransform"] = list(self.geo_transform)
        rec.update({
            "driverShortName": self.driver_short_name,
            "driverLongName": self.driver_long_name,
            "width": self.width,
            "height": self.height,
            "bandCount": self.band_count,
            "drivers": [{"shortName": d.short_name, "longName": d.long_name} for d in self.drivers],
            "bands": [_band_record(b) for b in self.bands],
        })
        return rec

    def to_legacy_record(self) -> Dict[str, Any]:
        """Mismo contenido con los nombres históricos (ProjectionRef, RasterXSize, Band, ...)."""
        rec: Dict[str, Any] = {"ProjectionRef": self.projection_text}
        rec["GeoTransform"] = list(self.geo_transform) if self.geo_transform is not None else []
        rec.update({
            "DriverShortName": self.driver_short_name,
            "DriverLongName": self.driver_long_name,
            "RasterXSize": self.width,
            "RasterYSize": self.height,
            "RasterCount": self.band_count,
            "Driver": [{"DriverShortName": d.short_name, "DriverLongName": d.long_name}
                       for d in self.drivers],
            "Band": [
                {
                    "XSize": b.width,
                    "YSize": b.height,
                    "Overview": [{"XSize": o.width, "YSize": o.height} for o in b.overviews],
                    "NoDataValue": b.no_data_value,
                    "DataType": b.data_type_name,
                }
                for b in self.bands
            ],
        })
        return rec


def _band_record(b: BandInfo) -> Dict[str, Any]:
    overviews: List[Dict[str, int]] = [{"width": o.width, "height": o.height} for o in b.overviews]
    return {
        "width": b.width,
        "height": b.height,
        "dataTypeName": b.data_type_name,
        "noDataValue": b.no_data_value,
        "overviews": overviews,
    }


__all__ = [
    "PixelKind", "NATIVE_TYPE_KINDS", "pixel_kind_for", "Window", "PixelBuffer",
    "DriverInfo", "OverviewInfo", "BandInfo", "SourceMetadata",
]
