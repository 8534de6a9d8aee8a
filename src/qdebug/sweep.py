from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

import numpy as np

from .circuit import GateList, as_gate_list, check_circuit
from .observables import expectation_zz
from .simulator import execute

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    parameter_values: np.ndarray
    energies: np.ndarray
    min_energy: float
    optimal_parameter: float
    gate_ids: tuple[str, ...]


def zz_energy(state: np.ndarray, num_wires: int) -> float:
    """
    QAOA-style cost: -sum_{a<b} <Z_a Z_b>. Lower when neighbouring wires disagree.
    """
    e = 0.0
    for a in range(num_wires):
        for b in range(a + 1, num_wires):
            e += expectation_zz(state, a, b)
    return -e


def parameter_sweep(
    gates: GateList,
    num_wires: Optional[int] = None,
    gate_ids: Optional[Sequence[str]] = None,
    *,
    num_points: int = 20,
    start: float = 0.0,
    stop: float = 2 * np.pi,
    cost: Optional[Callable[[np.ndarray, int], float]] = None,
) -> SweepResult:
    """
    Evaluate `cost` on num_points+1 evenly spaced angles in [start, stop],
    overriding every selected gate with the same angle. By default every
    parameterized gate in the circuit is swept.
    """
    gates, num_wires = as_gate_list(gates, num_wires)
    if num_points < 1:
        raise ValueError("num_points must be positive")

    check_circuit(gates, num_wires)

    if gate_ids is None:
        gate_ids = [g.id for g in gates if g.kind.parameterized]
    else:
        known = {g.id: g for g in gates}
        missing = [i for i in gate_ids if i not in known]
        if missing:
            raise KeyError(f"unknown gate ids: {missing}")
        fixed = [i for i in gate_ids if not known[i].kind.parameterized]
        if fixed:
            raise ValueError(f"gates are not parameterized: {fixed}")

    if not gate_ids:
        raise ValueError("circuit has no parameterized gates to sweep")

    cost = zz_energy if cost is None else cost

    thetas = np.linspace(float(start), float(stop), int(num_points) + 1)
    energies = np.empty_like(thetas)

    for k, theta in enumerate(thetas):
        overrides = {gid: float(theta) for gid in gate_ids}
        state = execute(gates, num_wires, overrides, validate=False)
        energies[k] = float(cost(state, num_wires))

    best = int(np.argmin(energies))
    logger.debug("swept %d gates over %d points, min energy %.6f at %.6f",
                 len(gate_ids), len(thetas), energies[best], thetas[best])

    return SweepResult(
        parameter_values=thetas,
        energies=energies,
        min_energy=float(energies[best]),
        optimal_parameter=float(thetas[best]),
        gate_ids=tuple(gate_ids),
    )
