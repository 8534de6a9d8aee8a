from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .state import num_qubits_of


@dataclass(frozen=True)
class QubitProbability:
    p0: float
    p1: float


def probabilities(state: np.ndarray) -> np.ndarray:
    """|amplitude|^2 per basis index, renormalised to sum to 1."""
    psi = np.asarray(state, dtype=complex)
    p = (psi.real * psi.real + psi.imag * psi.imag)
    s = float(p.sum())
    if s == 0.0:
        raise ValueError("state has zero norm")
    return p / s


def _bit_is_one(num_qubits: int, wire: int) -> np.ndarray:
    if wire < 0 or wire >= num_qubits:
        raise ValueError(f"wire must be in [0, {num_qubits - 1}], got {wire}")
    idx = np.arange(2 ** num_qubits)
    return ((idx >> int(wire)) & 1) == 1


def probability(state: np.ndarray, wire: int) -> QubitProbability:
    n = num_qubits_of(state)
    p = probabilities(state)
    p1 = float(p[_bit_is_one(n, wire)].sum())
    p1 = min(max(p1, 0.0), 1.0)
    return QubitProbability(p0=1.0 - p1, p1=p1)


def expectation_z(state: np.ndarray, wire: int) -> float:
    n = num_qubits_of(state)
    p = probabilities(state)
    z = np.where(_bit_is_one(n, wire), -1.0, 1.0)
    return float(np.dot(z, p))


def expectation_zz(state: np.ndarray, wire_a: int, wire_b: int) -> float:
    """
    <Z_a Z_b> = sum_i |a_i|^2 * (+1 if bits a and b agree, -1 otherwise)
    """
    n = num_qubits_of(state)
    p = probabilities(state)
    differ = _bit_is_one(n, wire_a) != _bit_is_one(n, wire_b)
    zz = np.where(differ, -1.0, 1.0)
    return float(np.dot(zz, p))


def entropy(state: np.ndarray) -> float:
    ## Shannon entropy (bits) of the basis distribution, not von Neumann
    p = probabilities(state)
    p = p[p > 0]
    h = float(-np.sum(p * np.log2(p)))
    return h if h > 0.0 else 0.0


def fidelity(a: np.ndarray, b: np.ndarray) -> float:
    a = np.asarray(a, dtype=complex)
    b = np.asarray(b, dtype=complex)
    if a.shape != b.shape:
        raise ValueError(f"states must have the same shape, got {a.shape} and {b.shape}")
    na = np.linalg.norm(a)
    nb = np.linalg.norm(b)
    if na == 0.0 or nb == 0.0:
        raise ValueError("state has zero norm")
    f = abs(np.vdot(a / na, b / nb)) ** 2
    return float(min(max(f, 0.0), 1.0))
