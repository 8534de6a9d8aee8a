from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .errors import SamplingError
from .observables import probabilities
from .state import validate_state, copy_state, num_qubits_of, format_basis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MeasurementResult:
    outcome: int
    probability: float
    post_state: np.ndarray


def _bit_is_one(index: int, qubit: int) -> bool:
    return ((index >> qubit) & 1) == 1


def measure(state: np.ndarray, rng: np.random.Generator) -> int:
    """
    Draw one basis index with probability |amplitude|^2 (Born rule).
    The state is renormalised first, so small drift never biases the draw.
    """
    probs = probabilities(state)
    return int(rng.choice(len(probs), p=probs))


def sample(state: np.ndarray, rng: np.random.Generator, shots: int) -> np.ndarray:
    """`shots` independent draws of `measure`, returned as an int array."""
    shots = int(shots)
    if shots < 1:
        raise SamplingError(f"shots must be >= 1, got {shots}")

    probs = probabilities(state)
    outcomes = rng.choice(len(probs), size=shots, p=probs)
    logger.debug("sampled %d shots over %d outcomes", shots, len(probs))
    return outcomes.astype(np.int64)


def frequencies(outcomes: np.ndarray, dim: int) -> np.ndarray:
    outcomes = np.asarray(outcomes, dtype=np.int64)
    if outcomes.size == 0:
        raise SamplingError("cannot build frequencies from zero samples")
    return np.bincount(outcomes, minlength=dim).astype(float) / float(outcomes.size)


def counts(state: np.ndarray, rng: np.random.Generator, shots: int) -> dict[str, int]:
    n = num_qubits_of(state)
    out: dict[str, int] = {}
    for i in sample(state, rng, shots):
        key = format_basis(int(i), n)
        out[key] = out.get(key, 0) + 1
    return out


def measure_qubit(
    state: np.ndarray,
    qubit: int,
    num_qubits: int,
    *,
    rng: Optional[np.random.Generator] = None,
    validate: bool = True,
) -> MeasurementResult:

    if validate:
        validate_state(state, num_qubits)

    if qubit < 0 or qubit >= num_qubits:
        raise ValueError("qubit out of range")

    psi = copy_state(state)

    dim = 2 ** num_qubits

    p1 = 0.0
    for i in range(dim):
        if _bit_is_one(i, qubit):
            amp = psi[i]
            p1 += (amp.real * amp.real + amp.imag * amp.imag)

    total = float(np.sum(np.abs(psi) ** 2))
    if total == 0.0:
        raise ValueError("Zero total probability")
    p1 /= total
    p0 = 1.0 - p1
    if p0 < 0 and p0 > -1e-12:
        p0 = 0.0

    if rng is None:
        rng = np.random.default_rng()

    r = rng.random()
    outcome = 1 if r < p1 else 0
    prob = p1 if outcome == 1 else p0

    if prob == 0.0:
        raise ValueError("Measured an outcome with zero probability")

    post = psi
    for i in range(dim):
        if _bit_is_one(i, qubit) != (outcome == 1):
            post[i] = 0.0

    post /= np.linalg.norm(post)

    return MeasurementResult(outcome=outcome, probability=float(prob), post_state=post)
