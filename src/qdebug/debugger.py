"""
Stepwise debugger over a fixed gate list.

A DebugSession is an immutable value; every transition returns a new session
and leaves the old one usable, so a caller can keep earlier sessions around
as undo points.

    session = init_session(circuit.gates, circuit.num_wires)
    session = add_break_condition(session, BreakCondition.entropy_above(0.9))
    session = run_until_break(session)
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, replace
from typing import Optional, Sequence

import numpy as np

from .circuit import GateInstance, check_circuit, sort_gates
from .observables import entropy, probabilities, probability, QubitProbability
from .simulator import apply_gate
from .state import zero_state

logger = logging.getLogger(__name__)


class ConditionKind(enum.Enum):
    PROBABILITY = "probability"
    ENTROPY = "entropy"


class Comparison(enum.Enum):
    ABOVE = "above"
    BELOW = "below"


class SessionStatus(enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


@dataclass(frozen=True)
class BreakCondition:
    kind: ConditionKind
    threshold: float
    comparison: Comparison
    qubit: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "kind", ConditionKind(self.kind))
        object.__setattr__(self, "comparison", Comparison(self.comparison))
        if self.kind is ConditionKind.PROBABILITY and self.qubit is None:
            raise ValueError("probability conditions need a qubit")
        if self.kind is ConditionKind.ENTROPY and self.qubit is not None:
            raise ValueError("entropy conditions do not take a qubit")

    @classmethod
    def probability_above(cls, qubit: int, threshold: float) -> "BreakCondition":
        return cls(ConditionKind.PROBABILITY, threshold, Comparison.ABOVE, qubit)

    @classmethod
    def probability_below(cls, qubit: int, threshold: float) -> "BreakCondition":
        return cls(ConditionKind.PROBABILITY, threshold, Comparison.BELOW, qubit)

    @classmethod
    def entropy_above(cls, threshold: float) -> "BreakCondition":
        return cls(ConditionKind.ENTROPY, threshold, Comparison.ABOVE)

    @classmethod
    def entropy_below(cls, threshold: float) -> "BreakCondition":
        return cls(ConditionKind.ENTROPY, threshold, Comparison.BELOW)

    def value(self, state: np.ndarray) -> float:
        if self.kind is ConditionKind.PROBABILITY:
            return probability(state, self.qubit).p1
        return entropy(state)

    def holds(self, state: np.ndarray) -> bool:
        v = self.value(state)
        if self.comparison is Comparison.ABOVE:
            return v > self.threshold
        return v < self.threshold


@dataclass(frozen=True, eq=False)
class DebugSnapshot:
    step: int
    state: np.ndarray
    gate: GateInstance
    entropy: float
    probabilities: np.ndarray


@dataclass(frozen=True, eq=False)
class DebugSession:
    gates: tuple[GateInstance, ...]
    num_wires: int
    initial_state: np.ndarray
    history: tuple[DebugSnapshot, ...] = ()
    step: int = 0
    breakpoints: frozenset = frozenset()
    break_conditions: tuple[BreakCondition, ...] = ()
    hit_breakpoint: Optional[str] = None
    hit_condition: Optional[BreakCondition] = None

    @property
    def num_steps(self) -> int:
        return len(self.gates)

    @property
    def status(self) -> SessionStatus:
        if self.step == 0 and self.num_steps > 0:
            return SessionStatus.NOT_STARTED
        if self.step >= self.num_steps:
            return SessionStatus.COMPLETE
        return SessionStatus.IN_PROGRESS

    @property
    def halted(self) -> bool:
        return self.hit_breakpoint is not None or self.hit_condition is not None

    @property
    def current_state(self) -> np.ndarray:
        return self.history[-1].state if self.history else self.initial_state

    @property
    def current_probabilities(self) -> np.ndarray:
        return self.history[-1].probabilities if self.history else probabilities(self.initial_state)

    @property
    def current_entropy(self) -> float:
        return self.history[-1].entropy if self.history else entropy(self.initial_state)

    @property
    def last_gate(self) -> Optional[GateInstance]:
        return self.history[-1].gate if self.history else None

    @property
    def next_gate(self) -> Optional[GateInstance]:
        return self.gates[self.step] if self.step < self.num_steps else None

    def qubit_probability(self, wire: int) -> QubitProbability:
        return probability(self.current_state, wire)


def init_session(gates: Sequence[GateInstance], num_wires: int) -> DebugSession:
    gates = list(gates)
    check_circuit(gates, num_wires)
    return DebugSession(
        gates=tuple(sort_gates(gates)),
        num_wires=int(num_wires),
        initial_state=zero_state(num_wires),
    )


def reset_session(session: DebugSession) -> DebugSession:
    # breakpoints and conditions are configuration, not execution state
    fresh = init_session(session.gates, session.num_wires)
    return replace(fresh, breakpoints=session.breakpoints, break_conditions=session.break_conditions)


def step_forward(session: DebugSession) -> DebugSession:
    if session.step >= session.num_steps:
        return replace(session, hit_breakpoint=None, hit_condition=None)

    gate = session.gates[session.step]
    new_state = apply_gate(session.current_state, gate, session.num_wires)

    snap = DebugSnapshot(
        step=session.step + 1,
        state=new_state,
        gate=gate,
        entropy=entropy(new_state),
        probabilities=probabilities(new_state),
    )

    hit_breakpoint = gate.id if gate.id in session.breakpoints else None
    hit_condition = None
    for cond in session.break_conditions:
        if cond.holds(new_state):
            hit_condition = cond
            break

    logger.debug(
        "step %d/%d applied %s (%s), entropy=%.6f",
        snap.step, session.num_steps, gate.id, gate.kind.value, snap.entropy,
    )

    return replace(
        session,
        history=session.history + (snap,),
        step=session.step + 1,
        hit_breakpoint=hit_breakpoint,
        hit_condition=hit_condition,
    )


def step_backward(session: DebugSession) -> DebugSession:
    if session.step <= 0:
        return replace(session, hit_breakpoint=None, hit_condition=None)

    return replace(
        session,
        history=session.history[:-1],
        step=session.step - 1,
        hit_breakpoint=None,
        hit_condition=None,
    )


def run_until_break(session: DebugSession) -> DebugSession:
    current = replace(session, hit_breakpoint=None, hit_condition=None)
    while current.step < current.num_steps:
        current = step_forward(current)
        if current.halted:
            logger.debug(
                "halted at step %d (breakpoint=%s, condition=%s)",
                current.step, current.hit_breakpoint, current.hit_condition,
            )
            break
    return current


def run_to_gate(session: DebugSession, gate_index: int) -> DebugSession:
    """Move to step `gate_index`, replaying from the start when it lies behind."""
    target = max(0, min(int(gate_index), session.num_steps))

    current = session
    if target < current.step:
        current = reset_session(session)

    while current.step < target:
        current = step_forward(current)
    return current


def toggle_breakpoint(session: DebugSession, gate_id: str) -> DebugSession:
    if gate_id in session.breakpoints:
        return replace(session, breakpoints=session.breakpoints - {gate_id})
    return replace(session, breakpoints=session.breakpoints | {gate_id})


def add_break_condition(session: DebugSession, condition: BreakCondition) -> DebugSession:
    if condition.kind is ConditionKind.PROBABILITY and not (0 <= condition.qubit < session.num_wires):
        raise ValueError(f"condition qubit {condition.qubit} out of range for {session.num_wires} wires")
    return replace(session, break_conditions=session.break_conditions + (condition,))


def remove_break_condition(session: DebugSession, index: int) -> DebugSession:
    conds = session.break_conditions
    if not (0 <= index < len(conds)):
        raise IndexError(f"no break condition at index {index}")
    return replace(session, break_conditions=conds[:index] + conds[index + 1:])
