"""
Linear state tomography from simulated measurement.

Every product setting in {Z, X, Y}^n is measured `shots` times. Each Pauli
string P gets an estimate <P> averaged over all settings compatible with it
(a setting is compatible when it measures every non-identity factor of P in
the right basis), and the state is rebuilt as

    rho = 2^-n * sum_P <P> P

The linear estimate can have small negative eigenvalues from sampling noise,
so it is projected back onto the physical states (clip, renormalise) before
purity and entropy are read off its spectrum.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .apply import apply_controlled
from .circuit import GateList, as_gate_list, check_circuit
from .config import get_config
from .errors import InvalidCircuitError, SamplingError
from .gates import I, X, Y, Z, H, SDG
from .measurement import sample, frequencies
from .simulator import execute

logger = logging.getLogger(__name__)

BASES = ("Z", "X", "Y")

## rotation applied before a computational-basis readout
_BASIS_CHANGE = {
    "Z": I,
    "X": H,
    "Y": H @ SDG,
}

_PAULI = {"I": I, "X": X, "Y": Y, "Z": Z}


@dataclass(frozen=True)
class TomographyResult:
    density_matrix: np.ndarray
    purity: float
    von_neumann_entropy: float
    z_probs: np.ndarray
    x_probs: np.ndarray
    y_probs: np.ndarray
    expectations: dict
    shots: int
    seed: Optional[int]


def rotate_to_basis(state: np.ndarray, setting: tuple[str, ...], num_qubits: int) -> np.ndarray:
    """setting[q] is the basis ('Z', 'X' or 'Y') read out on wire q."""
    out = state
    for q, b in enumerate(setting):
        if b != "Z":
            out = apply_controlled(out, _BASIS_CHANGE[b], q, (), num_qubits)
    return out


def pauli_operator(pauli: tuple[str, ...]) -> np.ndarray:
    ## pauli[q] acts on wire q; wire 0 is the least significant bit, so it is the last kron factor
    big = np.array([[1.0]], dtype=complex)
    for p in reversed(pauli):
        big = np.kron(big, _PAULI[p])
    return big


def pauli_label(pauli: tuple[str, ...]) -> str:
    return "".join(reversed(pauli))


def _parity_signs(mask: int, dim: int) -> np.ndarray:
    return np.array([1.0 - 2.0 * (bin(i & mask).count("1") & 1) for i in range(dim)])


def estimate_expectations(
    freqs: dict[tuple[str, ...], np.ndarray],
    num_qubits: int,
) -> dict[tuple[str, ...], float]:
    dim = 2 ** num_qubits
    settings = list(freqs)
    out: dict[tuple[str, ...], float] = {}

    for pauli in itertools.product("IXYZ", repeat=num_qubits):
        support = [q for q, p in enumerate(pauli) if p != "I"]
        if not support:
            out[pauli] = 1.0
            continue

        mask = 0
        for q in support:
            mask |= 1 << q
        signs = _parity_signs(mask, dim)

        compatible = [s for s in settings if all(s[q] == pauli[q] for q in support)]
        vals = [float(np.dot(freqs[s], signs)) for s in compatible]
        out[pauli] = float(np.mean(vals))

    return out


def reconstruct_density_matrix(expectations: dict[tuple[str, ...], float], num_qubits: int) -> np.ndarray:
    dim = 2 ** num_qubits
    rho = np.zeros((dim, dim), dtype=complex)
    for pauli, value in expectations.items():
        rho += value * pauli_operator(pauli)
    return rho / dim


def physical_projection(rho: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Nearest-in-spectrum density matrix: returns (rho', eigenvalues)."""
    rho = 0.5 * (rho + rho.conj().T)
    w, V = np.linalg.eigh(rho)
    w = np.clip(w, 0.0, None)
    total = float(w.sum())
    if total <= 0.0:
        raise ValueError("reconstructed density matrix has no positive spectrum")
    w = w / total
    return (V * w) @ V.conj().T, w


def purity_from_spectrum(w: np.ndarray) -> float:
    return float(min(np.sum(w ** 2), 1.0))


def von_neumann_entropy_from_spectrum(w: np.ndarray) -> float:
    nz = w[w > 1e-12]
    s = float(-np.sum(nz * np.log2(nz)))
    return s if s > 0.0 else 0.0


def perform_tomography(
    gates: GateList,
    num_wires: Optional[int] = None,
    shots: int = 1024,
    seed: Optional[int] = None,
) -> TomographyResult:
    gates, num_wires = as_gate_list(gates, num_wires)

    if int(shots) < 1:
        raise SamplingError(f"tomography needs at least one shot per setting, got {shots}")
    shots = int(shots)

    cap = get_config().max_tomography_wires
    if num_wires > cap:
        raise InvalidCircuitError(f"tomography supports at most {cap} wires, got {num_wires}")

    check_circuit(gates, num_wires)
    psi = execute(gates, num_wires, validate=False)

    rng = np.random.default_rng(seed)
    dim = 2 ** num_wires

    freqs: dict[tuple[str, ...], np.ndarray] = {}
    for setting in itertools.product(BASES, repeat=num_wires):
        rotated = rotate_to_basis(psi, setting, num_wires)
        freqs[setting] = frequencies(sample(rotated, rng, shots), dim)

    expectations = estimate_expectations(freqs, num_wires)
    rho_linear = reconstruct_density_matrix(expectations, num_wires)
    rho, w = physical_projection(rho_linear)

    purity = purity_from_spectrum(w)
    entropy = von_neumann_entropy_from_spectrum(w)

    logger.debug(
        "tomography on %d wires: %d settings x %d shots, purity=%.6f entropy=%.6f",
        num_wires, len(freqs), shots, purity, entropy,
    )

    return TomographyResult(
        density_matrix=rho,
        purity=purity,
        von_neumann_entropy=entropy,
        z_probs=freqs[("Z",) * num_wires],
        x_probs=freqs[("X",) * num_wires],
        y_probs=freqs[("Y",) * num_wires],
        expectations={pauli_label(p): v for p, v in expectations.items()},
        shots=shots,
        seed=seed,
    )
