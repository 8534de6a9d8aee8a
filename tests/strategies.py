"""Hypothesis strategies and dense reference operators for qdebug tests."""

import numpy as np
from hypothesis import strategies as st

from qdebug.circuit import Circuit, GateInstance
from qdebug.gates import GateKind, X, Y, Z, unitary

SINGLE_KINDS = [
    GateKind.I, GateKind.H, GateKind.X, GateKind.Y,
    GateKind.Z, GateKind.S, GateKind.T,
]
ROTATION_KINDS = [GateKind.RX, GateKind.RY, GateKind.RZ]

angles = st.floats(min_value=-2 * np.pi, max_value=2 * np.pi, allow_nan=False, allow_infinity=False)


@st.composite
def gate_strategy(draw, num_wires: int, gate_id: str, position: int):
    wires = list(range(num_wires))
    choices = ["single", "rotation"]
    if num_wires >= 2:
        choices += ["cnot", "cz", "cphase", "swap"]
    if num_wires >= 3:
        choices += ["ccx", "cswap"]
    which = draw(st.sampled_from(choices))

    picked = draw(st.permutations(wires))

    if which == "single":
        kind = draw(st.sampled_from(SINGLE_KINDS))
        return GateInstance(gate_id, kind, position, picked[0])
    if which == "rotation":
        kind = draw(st.sampled_from(ROTATION_KINDS))
        return GateInstance(gate_id, kind, position, picked[0], parameter=draw(angles))
    if which == "cnot":
        return GateInstance(gate_id, GateKind.CNOT, position, picked[0], control=picked[1])
    if which == "cz":
        return GateInstance(gate_id, GateKind.CZ, position, picked[0], control=picked[1])
    if which == "cphase":
        return GateInstance(gate_id, GateKind.CPHASE, position, picked[0], control=picked[1], parameter=draw(angles))
    if which == "swap":
        return GateInstance(gate_id, GateKind.SWAP, position, picked[0], target2=picked[1])
    if which == "ccx":
        return GateInstance(gate_id, GateKind.CCX, position, picked[0], control=picked[1], control2=picked[2])
    return GateInstance(gate_id, GateKind.CSWAP, position, picked[0], control=picked[1], target2=picked[2])


@st.composite
def circuit_strategy(draw, max_wires: int = 4, max_gates: int = 12):
    num_wires = draw(st.integers(min_value=1, max_value=max_wires))
    count = draw(st.integers(min_value=0, max_value=max_gates))
    gates = [draw(gate_strategy(num_wires, f"g{i}", i)) for i in range(count)]
    return Circuit(num_wires, gates)


## dense references, built independently of the pairwise update

P1 = np.array([[0, 0], [0, 1]], dtype=complex)


def embed(ops: dict, num_wires: int) -> np.ndarray:
    """kron of per-wire 2x2 ops; wire 0 is the least significant (last) factor."""
    big = np.array([[1.0]], dtype=complex)
    for w in reversed(range(num_wires)):
        big = np.kron(big, ops.get(w, np.eye(2, dtype=complex)))
    return big


def dense_gate(g: GateInstance, num_wires: int) -> np.ndarray:
    dim = 2 ** num_wires
    eye = np.eye(dim, dtype=complex)
    ctrl = embed({c: P1 for c in g.controls}, num_wires)

    if g.kind in (GateKind.SWAP, GateKind.CSWAP):
        a, b = g.target, g.swap_partner
        swap = 0.5 * (eye + embed({a: X, b: X}, num_wires)
                      + embed({a: Y, b: Y}, num_wires)
                      + embed({a: Z, b: Z}, num_wires))
        return eye + ctrl @ (swap - eye)

    U = unitary(g.kind, g.parameter)
    return eye + ctrl @ (embed({g.target: U}, num_wires) - eye)


def dense_execute(c: Circuit) -> np.ndarray:
    psi = np.zeros(2 ** c.num_wires, dtype=complex)
    psi[0] = 1.0
    for g in sorted(c.gates, key=lambda g: g.position):
        psi = dense_gate(g, c.num_wires) @ psi
    return psi
