"""Runtime configuration helpers for the kinematics service."""
from __future__ import annotations

import logging
import os
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_FABRIK_ITERATIONS = 10
DEFAULT_FABRIK_TOLERANCE = 0.001
DEFAULT_SPRING_FACTOR = 0.2
DEFAULT_CCD_ITERATIONS = 10
DEFAULT_CCD_TOLERANCE = 0.01


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(name, default)


def _parse_env(
    name: str,
    parse: Callable[[str], T],
    default: T,
    valid: Callable[[T], bool] = lambda _: True,
) -> T:
    raw = _get_env(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = parse(raw)
    except ValueError:
        value = None
    if value is None or not valid(value):
        logger.warning("Ignoring malformed %s=%r; using default %r", name, raw, default)
        return default
    return value


def get_fabrik_iterations() -> int:
    return _parse_env("RIG2D_FABRIK_ITERATIONS", int, DEFAULT_FABRIK_ITERATIONS, lambda v: v >= 1)


def get_fabrik_tolerance() -> float:
    return _parse_env("RIG2D_FABRIK_TOLERANCE", float, DEFAULT_FABRIK_TOLERANCE, lambda v: v > 0)


def get_spring_factor() -> float:
    return _parse_env("RIG2D_SPRING_FACTOR", float, DEFAULT_SPRING_FACTOR, lambda v: 0.0 <= v <= 1.0)


def get_ccd_iterations() -> int:
    return _parse_env("RIG2D_CCD_ITERATIONS", int, DEFAULT_CCD_ITERATIONS, lambda v: v >= 1)


def get_ccd_tolerance() -> float:
    return _parse_env("RIG2D_CCD_TOLERANCE", float, DEFAULT_CCD_TOLERANCE, lambda v: v > 0)
