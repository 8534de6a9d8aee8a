from __future__ import annotations

from typing import Sequence

import numpy as np

from .state import validate_state


def _mask(wires: Sequence[int]) -> int:
    m = 0
    for w in wires:
        m |= 1 << int(w)
    return m


def _check_wires(wires: Sequence[int], num_qubits: int) -> None:
    if len(set(wires)) != len(wires):
        raise ValueError(f"wires must be unique, got {list(wires)}")
    if any((w < 0 or w >= num_qubits) for w in wires):
        raise ValueError(f"wires out of range for num_qubits={num_qubits}: {list(wires)}")


def apply_controlled(
    state: np.ndarray,
    U: np.ndarray,
    target: int,
    controls: Sequence[int],
    num_qubits: int,
) -> np.ndarray:
    """
    Apply a 2x2 unitary U to `target`, conditioned on every wire in `controls`
    being 1. With no controls this is a plain single-qubit gate.

    Conventions:
    - Statevector length 2**num_qubits.
    - wire w is bit w of the basis index (wire 0 is least significant).

    For every index i with all control bits set and the target bit clear, the
    pair (i, i | 1<<target) is replaced by U @ (a_i, a_j). Everything else is
    left untouched.
    """
    validate_state(state, num_qubits)

    U = np.asarray(U, dtype=complex)
    if U.shape != (2, 2):
        raise ValueError(f"U must have shape (2, 2), got {U.shape}")

    controls = [int(c) for c in controls]
    _check_wires([int(target)] + controls, num_qubits)

    out = np.array(state, dtype=complex, copy=True)

    idx = np.arange(2 ** num_qubits)
    tmask = 1 << int(target)
    cmask = _mask(controls)

    lo = idx[((idx & cmask) == cmask) & ((idx & tmask) == 0)]
    hi = lo | tmask

    a0 = out[lo]
    a1 = out[hi]
    out[lo] = U[0, 0] * a0 + U[0, 1] * a1
    out[hi] = U[1, 0] * a0 + U[1, 1] * a1

    return out


def apply_swap(
    state: np.ndarray,
    q1: int,
    q2: int,
    controls: Sequence[int],
    num_qubits: int,
) -> np.ndarray:
    """
    Exchange wires q1 and q2 (conditioned on `controls`) by permuting amplitudes.
    """
    validate_state(state, num_qubits)

    controls = [int(c) for c in controls]
    _check_wires([int(q1), int(q2)] + controls, num_qubits)

    psi = np.asarray(state, dtype=complex)
    out = psi.copy()

    idx = np.arange(2 ** num_qubits)
    m1 = 1 << int(q1)
    m2 = 1 << int(q2)
    cmask = _mask(controls)

    # indices with q1=1, q2=0 pair with q1=0, q2=1
    src = idx[((idx & cmask) == cmask) & ((idx & m1) != 0) & ((idx & m2) == 0)]
    dst = src ^ (m1 | m2)

    out[src] = psi[dst]
    out[dst] = psi[src]

    return out
