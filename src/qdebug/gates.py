from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from .config import get_config
from .errors import InvalidCircuitError


## 1 qubit gates

I = np.array([
    [1, 0],
    [0, 1],
], dtype=complex)

X = np.array([
    [0, 1],
    [1, 0],
], dtype=complex)

Y = np.array([
    [0, -1j],
    [1j, 0],
], dtype=complex)

Z = np.array([
    [1, 0],
    [0, -1],
], dtype=complex)

H = (1 / np.sqrt(2)) * np.array([
    [1, 1],
    [1, -1],
], dtype=complex)

S = np.array([
    [1, 0],
    [0, 1j],
], dtype=complex)

SDG = S.conj().T

T = np.array([
    [1, 0],
    [0, np.exp(1j * np.pi / 4)],
], dtype=complex)


def RZ(theta: float) -> np.ndarray:
    """
    RZ(theta) = exp(-i theta Z/2) =
    [[e^{-iθ/2}, 0],
     [0, e^{+iθ/2}]]
    """
    t = float(theta) / 2.0
    return np.array([
        [np.exp(-1j * t), 0.0],
        [0.0, np.exp(1j * t)],
    ], dtype=complex)


def RY(theta: float) -> np.ndarray:
    """
    RY(theta) = exp(-i theta Y/2) =
    [[cos(θ/2), -sin(θ/2)],
     [sin(θ/2),  cos(θ/2)]]
    """
    t = float(theta) / 2.0
    c = np.cos(t)
    s = np.sin(t)
    return np.array([
        [c, -s],
        [s,  c],
    ], dtype=complex)


def RX(theta: float) -> np.ndarray:
    """
    RX(theta) = exp(-i theta X/2) =
    [[cos(θ/2), -i sin(θ/2)],
     [-i sin(θ/2), cos(θ/2)]]
    """
    t = float(theta) / 2.0
    c = np.cos(t)
    s = np.sin(t)
    return np.array([
        [c, -1j * s],
        [-1j * s, c],
    ], dtype=complex)


def PHASE(theta: float) -> np.ndarray:
    ## diag(1, e^{iθ}); the controlled form is CPHASE
    return np.array([
        [1.0, 0.0],
        [0.0, np.exp(1j * float(theta))],
    ], dtype=complex)


## catalog

class Arity(enum.Enum):
    SINGLE = "single"
    CONTROLLED = "controlled"
    TWO_QUBIT = "two_qubit"


class GateKind(enum.Enum):
    I = "I"
    H = "H"
    X = "X"
    Y = "Y"
    Z = "Z"
    S = "S"
    T = "T"
    RX = "RX"
    RY = "RY"
    RZ = "RZ"
    CNOT = "CNOT"
    CZ = "CZ"
    CPHASE = "CPHASE"
    SWAP = "SWAP"
    CCX = "CCX"
    CSWAP = "CSWAP"

    @classmethod
    def parse(cls, name) -> "GateKind":
        if isinstance(name, cls):
            return name
        key = str(name).strip().upper()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise InvalidCircuitError(f"unknown gate kind: {name!r}") from None

    @property
    def spec(self) -> "GateSpec":
        return CATALOG[self]

    @property
    def arity(self) -> Arity:
        return CATALOG[self].arity

    @property
    def num_controls(self) -> int:
        return CATALOG[self].num_controls

    @property
    def parameterized(self) -> bool:
        return CATALOG[self].parameterized

    @property
    def is_swap(self) -> bool:
        return self in (GateKind.SWAP, GateKind.CSWAP)


_ALIASES = {
    "ID": "I",
    "CX": "CNOT",
    "TOFFOLI": "CCX",
    "TOF": "CCX",
    "FREDKIN": "CSWAP",
    "FRED": "CSWAP",
    "CP": "CPHASE",
    "P": "CPHASE",
}


@dataclass(frozen=True)
class GateSpec:
    name: str
    arity: Arity
    num_controls: int
    parameterized: bool
    generator: Callable[[float], np.ndarray]
    default_parameter: float = 0.0


def _fixed(U: np.ndarray) -> Callable[[float], np.ndarray]:
    def gen(_theta: float) -> np.ndarray:
        return U.copy()
    return gen


CATALOG: dict[GateKind, GateSpec] = {
    GateKind.I:      GateSpec("Identity", Arity.SINGLE, 0, False, _fixed(I)),
    GateKind.H:      GateSpec("Hadamard", Arity.SINGLE, 0, False, _fixed(H)),
    GateKind.X:      GateSpec("Pauli-X", Arity.SINGLE, 0, False, _fixed(X)),
    GateKind.Y:      GateSpec("Pauli-Y", Arity.SINGLE, 0, False, _fixed(Y)),
    GateKind.Z:      GateSpec("Pauli-Z", Arity.SINGLE, 0, False, _fixed(Z)),
    GateKind.S:      GateSpec("S", Arity.SINGLE, 0, False, _fixed(S)),
    GateKind.T:      GateSpec("T", Arity.SINGLE, 0, False, _fixed(T)),
    GateKind.RX:     GateSpec("Rx(θ)", Arity.SINGLE, 0, True, RX),
    GateKind.RY:     GateSpec("Ry(θ)", Arity.SINGLE, 0, True, RY),
    GateKind.RZ:     GateSpec("Rz(θ)", Arity.SINGLE, 0, True, RZ),
    GateKind.CNOT:   GateSpec("CNOT", Arity.CONTROLLED, 1, False, _fixed(X)),
    GateKind.CZ:     GateSpec("Controlled-Z", Arity.CONTROLLED, 1, False, _fixed(Z)),
    GateKind.CPHASE: GateSpec("Controlled phase", Arity.CONTROLLED, 1, True, PHASE, np.pi / 4),
    GateKind.SWAP:   GateSpec("SWAP", Arity.TWO_QUBIT, 0, False, _fixed(X)),
    GateKind.CCX:    GateSpec("Toffoli", Arity.CONTROLLED, 2, False, _fixed(X)),
    GateKind.CSWAP:  GateSpec("Fredkin", Arity.TWO_QUBIT, 1, False, _fixed(X)),
}

_missing = set(GateKind) - set(CATALOG)
if _missing:
    raise RuntimeError(f"gate catalog is missing kinds: {sorted(k.value for k in _missing)}")


def resolve_parameter(kind: GateKind, parameter: Optional[float]) -> float:
    """
    Angle actually used for `kind`.

    Fixed gates ignore any angle. Parameterized gates without one fall back to
    their catalog default: 0.0 for the rotations, pi/4 for CPHASE.
    """
    spec = CATALOG[kind]
    if not spec.parameterized:
        return 0.0
    if parameter is None:
        return spec.default_parameter
    return float(parameter)


def unitary(kind, parameter: Optional[float] = None) -> np.ndarray:
    """
    The 2x2 unitary for a gate kind.

    Controlled kinds return the single-qubit operator applied when all controls
    are 1. Swap-family kinds are permutations and return X as the exchange of
    the |01>/|10> pair.
    """
    kind = GateKind.parse(kind)
    return CATALOG[kind].generator(resolve_parameter(kind, parameter))


def is_unitary(U: np.ndarray, atol: Optional[float] = None) -> bool:
    atol = get_config().atol if atol is None else float(atol)
    U = np.asarray(U, dtype=complex)
    if U.ndim != 2 or U.shape[0] != U.shape[1]:
        return False
    return bool(np.allclose(U @ U.conj().T, np.eye(U.shape[0]), rtol=0.0, atol=atol))
