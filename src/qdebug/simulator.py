from __future__ import annotations
from typing     import Mapping, Optional

import logging

import numpy as np

from .config      import get_config
from .state       import zero_state, validate_state, format_basis, normalize
from .apply       import apply_controlled, apply_swap
from .circuit     import GateInstance, GateList, as_gate_list, check_circuit, sort_gates
from .gates       import Arity, unitary
from .measurement import sample

logger = logging.getLogger(__name__)


def apply_gate(
    state: np.ndarray,
    gate: GateInstance,
    num_wires: int,
    parameter: Optional[float] = None,
) -> np.ndarray:
    """
    Apply one gate instance to `state` and return the new state.
    `parameter`, when given, replaces the gate's stored angle.
    """
    validate_state(state, num_wires)

    theta = gate.parameter if parameter is None else parameter

    if gate.kind.arity is Arity.TWO_QUBIT:
        return apply_swap(state, gate.target, gate.swap_partner, gate.controls, num_wires)

    U = unitary(gate.kind, theta)
    return apply_controlled(state, U, gate.target, gate.controls, num_wires)


def correct_drift(state: np.ndarray) -> np.ndarray:
    """Renormalise `state` when its norm has drifted past the configured tolerance."""
    norm = float(np.linalg.norm(state))
    if abs(norm - 1.0) > get_config().atol:
        logger.debug("renormalising drifted state (norm=%.12f)", norm)
        return normalize(state)
    return state


def _override_for(gate: GateInstance, overrides: Optional[Mapping[str, float]]) -> Optional[float]:
    if not overrides or gate.id not in overrides:
        return None
    if not gate.kind.parameterized:
        logger.warning("ignoring parameter override for fixed gate %s (%s)", gate.id, gate.kind.value)
        return None
    return float(overrides[gate.id])


def execute(
    gates: GateList,
    num_wires: Optional[int] = None,
    parameter_overrides: Optional[Mapping[str, float]] = None,
    *, validate: bool = True,
) -> np.ndarray:
    """
    Run a gate list from |0...0> and return the final state vector.

    The whole circuit is checked before anything is applied; an invalid
    gate anywhere raises InvalidCircuitError. `parameter_overrides` maps gate
    ids to angles and leaves the gates themselves untouched.
    """
    gates, num_wires = as_gate_list(gates, num_wires)

    if validate:
        check_circuit(gates, num_wires)

    state = zero_state(num_wires)

    for gate in sort_gates(gates):
        state = apply_gate(state, gate, num_wires, _override_for(gate, parameter_overrides))

    state = correct_drift(state)
    logger.debug("executed %d gates on %d wires", len(gates), num_wires)
    return state


def run_counts(
    gates: GateList,
    num_wires: Optional[int] = None,
    shots: int = 1024,
    seed: Optional[int] = None,
) -> dict[str, int]:
    gates, num_wires = as_gate_list(gates, num_wires)
    psi = execute(gates, num_wires)
    rng = np.random.default_rng(seed)

    counts: dict[str, int] = {}
    for outcome_index in sample(psi, rng, shots):
        bitstring = format_basis(int(outcome_index), num_wires)
        counts[bitstring] = counts.get(bitstring, 0) + 1
    return counts
