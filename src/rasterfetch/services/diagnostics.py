# src/rasterfetch/services/diagnostics.py
from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field

from ..contracts.errors import RasterFetchWarning

log = logging.getLogger("rasterfetch")


@dataclass(frozen=True)
class Diagnostics:
    """
    Sumidero de diagnósticos que viaja explícito por cada llamada.
    - trace(): mensajes informativos, sólo si verbose.
    - warn(): advertencia no fatal, siempre visible (warnings.warn).
    """
    verbose: bool = True
    logger: logging.Logger = field(default=log, repr=False, compare=False)

    def trace(self, msg: str, *args: object) -> None:
        if self.verbose:
            self.logger.info(msg, *args)

    def warn(self, msg: str) -> None:
        self.logger.debug("advertencia: %s", msg)
        warnings.warn(msg, RasterFetchWarning, stacklevel=3)

    def with_verbose(self, verbose: bool) -> "Diagnostics":
        return Diagnostics(verbose=verbose, logger=self.logger)


__all__ = ["Diagnostics"]
