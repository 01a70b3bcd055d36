"""Logging del cliente QLDT.

Un único logger de aplicación (`qldt`); la CLI lo configura una vez al
arrancar y el resto de módulos lo obtiene con `get_logger()`.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOGGER_NAME = "qldt"


def setup_logger(
    name: str = LOGGER_NAME,
    level: int | str = logging.INFO,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configura y devuelve el logger.

    Idempotente: si ya tiene handlers se devuelve tal cual.
    """

    log = logging.getLogger(name)
    if log.handlers:
        return log

    log.setLevel(level)
    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    h = logging.StreamHandler(sys.stderr)
    h.setFormatter(fmt)
    log.addHandler(h)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(fmt)
        log.addHandler(fh)

    return log


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Devuelve el logger de la aplicación (o un hijo, p.ej. `qldt.cache`)."""

    return logging.getLogger(name)
