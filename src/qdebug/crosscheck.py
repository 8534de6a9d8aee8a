"""
Export to OpenQASM 2.0 and compare our engine against qiskit.

Wire w here is bit w of the basis index, which is also qiskit's
little-endian convention, so wires map to qiskit qubits one to one.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .apply import apply_controlled
from .circuit import GateList, as_gate_list, check_circuit, sort_gates
from .gates import GateKind, X, Y, Z, resolve_parameter
from .observables import fidelity, probabilities
from .simulator import execute

_SIMPLE = {
    GateKind.I: "id",
    GateKind.H: "h",
    GateKind.X: "x",
    GateKind.Y: "y",
    GateKind.Z: "z",
    GateKind.S: "s",
    GateKind.T: "t",
}

_ROTATIONS = {
    GateKind.RX: "rx",
    GateKind.RY: "ry",
    GateKind.RZ: "rz",
}


def circuit_to_qasm(gates: GateList, num_wires: Optional[int] = None) -> str:
    gates, num_wires = as_gate_list(gates, num_wires)
    check_circuit(gates, num_wires)

    lines: list[str] = []
    lines.append('OPENQASM 2.0;')
    lines.append('include "qelib1.inc";')
    lines.append(f"qreg q[{num_wires}];")

    for g in sort_gates(gates):
        k = g.kind
        theta = resolve_parameter(k, g.parameter)

        if k in _SIMPLE:
            lines.append(f"{_SIMPLE[k]} q[{g.target}];")
        elif k in _ROTATIONS:
            lines.append(f"{_ROTATIONS[k]}({theta!r}) q[{g.target}];")
        elif k is GateKind.CNOT:
            lines.append(f"cx q[{g.control}],q[{g.target}];")
        elif k is GateKind.CZ:
            lines.append(f"cz q[{g.control}],q[{g.target}];")
        elif k is GateKind.CPHASE:
            # qelib1 spells the controlled phase as cu1
            lines.append(f"cu1({theta!r}) q[{g.control}],q[{g.target}];")
        elif k is GateKind.SWAP:
            lines.append(f"swap q[{g.target}],q[{g.swap_partner}];")
        elif k is GateKind.CCX:
            lines.append(f"ccx q[{g.control}],q[{g.control2}],q[{g.target}];")
        elif k is GateKind.CSWAP:
            lines.append(f"cswap q[{g.control}],q[{g.target}],q[{g.swap_partner}];")
        else:
            raise ValueError(f"no QASM mapping for {k.value}")

    return "\n".join(lines) + "\n"


def circuit_to_qiskit(gates: GateList, num_wires: Optional[int] = None):
    """
    Build a qiskit.QuantumCircuit by going through QASM.
    Requires qiskit to be installed.
    """
    try:
        from qiskit import QuantumCircuit
    except ImportError as e:
        raise ImportError(
            "Qiskit is not installed. Try:\n"
            "  pip install 'qdebug[qiskit]'\n"
        ) from e

    return QuantumCircuit.from_qasm_str(circuit_to_qasm(gates, num_wires))


def _pauli_expectations(state: np.ndarray, num_wires: int) -> list[tuple[float, float, float]]:
    rows = []
    for q in range(num_wires):
        vals = []
        for P in (X, Y, Z):
            v = apply_controlled(state, P, q, (), num_wires)
            vals.append(float(np.real(np.vdot(state, v))))
        rows.append(tuple(vals))
    return rows


def validate_with_qiskit(gates: GateList, num_wires: Optional[int] = None, *, atol: float = 1e-6) -> dict:
    """
    Compare our final state with qiskit's Statevector for:
      - probabilities in the computational basis
      - <X>, <Y>, <Z> per wire
      - overall fidelity (insensitive to global phase)

    Returns a dict with the diffs and an `ok` flag.
    """
    gates, num_wires = as_gate_list(gates, num_wires)

    try:
        from qiskit.quantum_info import Statevector
    except ImportError as e:
        raise ImportError(
            "Qiskit is not installed. Try:\n"
            "  pip install 'qdebug[qiskit]'\n"
        ) from e

    ours = execute(gates, num_wires)
    qc = circuit_to_qiskit(gates, num_wires)
    theirs = np.asarray(Statevector.from_instruction(qc).data, dtype=complex)

    prob_diff = float(np.max(np.abs(probabilities(ours) - probabilities(theirs))))

    exp_rows = []
    exp_diffs = []
    for q, (o, t) in enumerate(zip(_pauli_expectations(ours, num_wires), _pauli_expectations(theirs, num_wires))):
        d = tuple(abs(a - b) for a, b in zip(o, t))
        exp_diffs.extend(d)
        exp_rows.append((q, *o, *t, *d))

    exp_max_diff = float(max(exp_diffs)) if exp_diffs else 0.0
    f = fidelity(ours, theirs)

    ok = (prob_diff <= float(atol)) and (exp_max_diff <= float(atol)) and (abs(1.0 - f) <= float(atol))

    return {
        "ok": bool(ok),
        "atol": float(atol),
        "prob_max_abs_diff": prob_diff,
        "exp_max_abs_diff": exp_max_diff,
        "fidelity": f,
        "exp_rows": exp_rows,
        "qasm": circuit_to_qasm(gates, num_wires),
    }
