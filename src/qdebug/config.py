"""Runtime limits for the simulator.

Defaults can be overridden with environment variables:
  QDEBUG_MAX_WIRES             largest register accepted by the engine
  QDEBUG_MAX_TOMOGRAPHY_WIRES  largest register accepted by tomography
  QDEBUG_ATOL                  tolerance used for norm/unitarity checks
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional


@dataclass(frozen=True)
class SimConfig:
    max_wires: int = 12
    max_tomography_wires: int = 5
    atol: float = 1e-9
    overlap_floor: float = 1e-3

    def validate(self) -> None:
        if int(self.max_wires) < 1:
            raise ValueError("max_wires must be >= 1")
        if int(self.max_tomography_wires) < 1:
            raise ValueError("max_tomography_wires must be >= 1")
        if self.max_tomography_wires > self.max_wires:
            raise ValueError("max_tomography_wires must not exceed max_wires")
        if not (0.0 < float(self.atol) < 1e-3):
            raise ValueError(f"atol must be in (0, 1e-3), got {self.atol}")
        if float(self.overlap_floor) <= 0.0:
            raise ValueError("overlap_floor must be positive")


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = str(env.get(key, "") or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from e


def _env_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = str(env.get(key, "") or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{key} must be a number, got {raw!r}") from e


def load_config(env: Optional[Mapping[str, str]] = None) -> SimConfig:
    env = os.environ if env is None else env
    base = SimConfig()
    max_wires = _env_int(env, "QDEBUG_MAX_WIRES", base.max_wires)
    # tomography cap follows a lowered engine cap unless set explicitly
    tomo_default = min(base.max_tomography_wires, max_wires)
    cfg = SimConfig(
        max_wires=max_wires,
        max_tomography_wires=_env_int(env, "QDEBUG_MAX_TOMOGRAPHY_WIRES", tomo_default),
        atol=_env_float(env, "QDEBUG_ATOL", base.atol),
    )
    cfg.validate()
    return cfg


@lru_cache(maxsize=1)
def get_config() -> SimConfig:
    return load_config()
