from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .apply import apply_controlled
from .circuit import GateList, as_gate_list, check_circuit, sort_gates
from .config import get_config
from .gates import X, Y, Z
from .observables import probabilities, fidelity
from .simulator import apply_gate, correct_drift, execute
from .state import zero_state

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoiseModel:
    bit_flip_p: float = 0.0       # X with probability p
    phase_flip_p: float = 0.0     # Z with probability p
    depolarizing_p: float = 0.0   # apply random {X,Y,Z} with prob p
    kick_p: float = 0.0           # X or Z (equal odds) with prob p

    def validate(self) -> None:
        _validate_p(self.bit_flip_p, "bit_flip_p")
        _validate_p(self.phase_flip_p, "phase_flip_p")
        _validate_p(self.depolarizing_p, "depolarizing_p")
        _validate_p(self.kick_p, "kick_p")

    @property
    def is_noiseless(self) -> bool:
        return not (self.bit_flip_p or self.phase_flip_p or self.depolarizing_p or self.kick_p)


@dataclass(frozen=True)
class ComparisonResult:
    ideal_state: np.ndarray
    noisy_state: np.ndarray
    ideal_probs: np.ndarray
    noisy_probs: np.ndarray
    prob_difference: np.ndarray
    state_overlap: np.ndarray
    fidelity: float
    errors_injected: int


def _validate_p(p: float, name: str):
    if not (0.0 <= p <= 1.0):
        raise ValueError(f"{name} must be in [0,1], got {p}")


def apply_noise_to_statevector(
    state: np.ndarray,
    num_qubits: int,
    qubit: int,
    model: NoiseModel,
    rng: np.random.Generator,
) -> tuple[np.ndarray, int]:
    """
    Sample the model's channels once on `qubit`.
    Returns the new state and the number of Pauli errors applied.
    """
    applied = 0

    if model.bit_flip_p > 0 and rng.random() < model.bit_flip_p:
        state = apply_controlled(state, X, qubit, (), num_qubits)
        applied += 1

    if model.phase_flip_p > 0 and rng.random() < model.phase_flip_p:
        state = apply_controlled(state, Z, qubit, (), num_qubits)
        applied += 1

    if model.depolarizing_p > 0 and rng.random() < model.depolarizing_p:
        gate = (X, Y, Z)[int(rng.integers(0, 3))]
        state = apply_controlled(state, gate, qubit, (), num_qubits)
        applied += 1

    if model.kick_p > 0 and rng.random() < model.kick_p:
        gate = X if rng.random() < 0.5 else Z
        state = apply_controlled(state, gate, qubit, (), num_qubits)
        applied += 1

    return state, applied


def run_noisy(
    gates: GateList,
    num_wires: Optional[int] = None,
    model: Optional[NoiseModel] = None,
    *,
    rng: Optional[np.random.Generator] = None,
    validate: bool = True,
) -> tuple[np.ndarray, int]:
    """
    Execute with noise sampled after every gate on that gate's target wire.
    Returns (state, number of injected errors).
    """
    gates, num_wires = as_gate_list(gates, num_wires)
    model = NoiseModel() if model is None else model
    model.validate()

    if rng is None:
        rng = np.random.default_rng()

    if validate:
        check_circuit(gates, num_wires)

    state = zero_state(num_wires)
    injected = 0

    for gate in sort_gates(gates):
        state = apply_gate(state, gate, num_wires)
        if model.is_noiseless:
            continue
        state, n = apply_noise_to_statevector(state, num_wires, gate.target, model, rng)
        injected += n

    return correct_drift(state), injected


def state_overlap(ideal_probs: np.ndarray, noisy_probs: np.ndarray, floor: Optional[float] = None) -> np.ndarray:
    """min(p, q) / max(p, q, floor) per basis state: 1 where they agree."""
    floor = get_config().overlap_floor if floor is None else float(floor)
    lo = np.minimum(ideal_probs, noisy_probs)
    hi = np.maximum(np.maximum(ideal_probs, noisy_probs), floor)
    return lo / hi


def compare(
    gates: GateList,
    num_wires: Optional[int] = None,
    noise_level: float = 0.01,
    *,
    seed: Optional[int] = None,
    model: Optional[NoiseModel] = None,
) -> ComparisonResult:
    """
    Run the circuit ideally and with stochastic bit-flip / phase-kick noise
    (probability `noise_level` per gate on its target) and compare the two.
    A custom `model` replaces the default kick model.
    """
    gates, num_wires = as_gate_list(gates, num_wires)
    _validate_p(noise_level, "noise_level")

    ideal = execute(gates, num_wires)

    if model is None:
        model = NoiseModel(kick_p=float(noise_level))

    rng = np.random.default_rng(seed)
    noisy, injected = run_noisy(gates, num_wires, model, rng=rng, validate=False)

    ideal_probs = probabilities(ideal)
    noisy_probs = probabilities(noisy)

    if injected == 0 and np.array_equal(ideal, noisy):
        f = 1.0
    else:
        f = fidelity(ideal, noisy)
    logger.debug("compare: %d errors injected, fidelity=%.6f", injected, f)

    return ComparisonResult(
        ideal_state=ideal,
        noisy_state=noisy,
        ideal_probs=ideal_probs,
        noisy_probs=noisy_probs,
        prob_difference=noisy_probs - ideal_probs,
        state_overlap=state_overlap(ideal_probs, noisy_probs),
        fidelity=f,
        errors_injected=injected,
    )
