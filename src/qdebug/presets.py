from __future__ import annotations

import numpy as np

from .circuit import Circuit


def _ensure_qubit_list(qubits):
    """Accept either int (count) or list[int] (explicit qubits). Return list[int]."""
    if isinstance(qubits, (int, np.integer)):
        n = int(qubits)
        if n <= 0:
            raise ValueError("qubit count must be positive")
        return list(range(n))

    qs = [int(q) for q in qubits]
    if not qs:
        raise ValueError("qubits must be non-empty")
    if any(q < 0 for q in qs):
        raise ValueError("qubit indices must be non-negative")
    return qs


def bell_pair(q0: int = 0, q1: int = 1) -> Circuit:
    """
    Bell pair on (q0, q1):
      H q0
      CNOT q0 q1
    """
    q0 = int(q0); q1 = int(q1)
    c = Circuit(max(q0, q1) + 1)
    c.h(q0)
    c.cx(q0, q1)
    return c


def ghz(n: int) -> Circuit:
    """
    GHZ(n):
      H 0
      CNOT 0 1
      CNOT 0 2
      ...
    GHZ(1) is just |+>.
    """
    n = int(n)
    if n <= 0:
        raise ValueError("n must be positive")

    c = Circuit(n)
    c.h(0)
    for t in range(1, n):
        c.cx(0, t)
    return c


def uniform_superposition(qubits) -> Circuit:
    ## all H gates share position 0
    qs = _ensure_qubit_list(qubits)
    c = Circuit(max(qs) + 1)
    for q in qs:
        c.h(q, position=0)
    return c


def qaoa_layer(n: int, gamma: float = np.pi / 4, beta: float = np.pi / 8) -> Circuit:
    """
    One QAOA layer for MaxCut on a ring of n wires:
    H on every wire, CNOT-RZ(2γ)-CNOT on each edge, then RX(2β) mixers.
    The RZ/RX gates are the ones a parameter sweep moves.
    """
    n = int(n)
    if n < 2:
        raise ValueError("qaoa_layer needs at least 2 wires")

    c = Circuit(n)
    for q in range(n):
        c.h(q, position=0)

    edges = [(q, (q + 1) % n) for q in range(n)] if n > 2 else [(0, 1)]
    for a, b in edges:
        c.cx(a, b)
        c.rz(b, 2 * gamma)
        c.cx(a, b)

    pos = max(g.position for g in c.gates) + 1
    for q in range(n):
        c.rx(q, 2 * beta, position=pos)
    return c


def random_clifford_ish(seed: int, *, num_qubits: int = 2, depth: int = 12) -> Circuit:
    """
    A simple 'Clifford-ish' random circuit (not a uniform Clifford sampler):
    1q layers of H/S/X/Z mixed with occasional CNOTs.
    """
    num_qubits = int(num_qubits)
    depth = int(depth)
    if num_qubits <= 0:
        raise ValueError("num_qubits must be positive")
    if depth <= 0:
        raise ValueError("depth must be positive")

    rng = np.random.default_rng(int(seed))
    oneq = ["h", "s", "x", "z"]

    c = Circuit(num_qubits)
    for _ in range(depth):
        pos = max((g.position for g in c.gates), default=-1) + 1
        for q in range(num_qubits):
            if rng.random() < 0.6:
                name = oneq[int(rng.integers(0, len(oneq)))]
                getattr(c, name)(q, position=pos)

        if num_qubits >= 2 and rng.random() < 0.5:
            a = int(rng.integers(0, num_qubits))
            b = int(rng.integers(0, num_qubits - 1))
            if b >= a:
                b += 1
            c.cx(a, b)

    return c
