from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from .config import get_config
from .errors import InvalidCircuitError
from .gates import Arity, GateKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GateInstance:
    """
    One gate placed on the circuit grid.

    `position` orders execution; gates sharing a position are expected to act
    on disjoint wires. `target2` is only read by swap-family gates and
    defaults to the wire after `target`.
    """
    id: str
    kind: GateKind
    position: int
    target: int
    control: Optional[int] = None
    control2: Optional[int] = None
    parameter: Optional[float] = None
    target2: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "kind", GateKind.parse(self.kind))

    @property
    def controls(self) -> tuple[int, ...]:
        return tuple(c for c in (self.control, self.control2) if c is not None)

    @property
    def swap_partner(self) -> Optional[int]:
        if self.target2 is not None:
            return self.target2
        if isinstance(self.target, numbers.Integral):
            return self.target + 1
        return None

    @property
    def targets(self) -> tuple[int, ...]:
        if self.kind.is_swap:
            return (self.target, self.swap_partner)
        return (self.target,)

    @property
    def wires(self) -> tuple[int, ...]:
        return self.controls + self.targets

    @classmethod
    def from_dict(cls, d: dict) -> "GateInstance":
        ## accepts both snake_case and the camelCase shape used by the editor
        def pick(*keys):
            for k in keys:
                if k in d and d[k] is not None:
                    return d[k]
            return None

        def required_int(*keys) -> int:
            v = pick(*keys)
            if v is None:
                raise InvalidCircuitError(f"gate {d.get('id')!r} is missing {keys[0]!r}")
            try:
                return int(v)
            except (TypeError, ValueError):
                raise InvalidCircuitError(f"gate {d.get('id')!r} has non-integer {keys[0]!r}: {v!r}") from None

        if pick("id") is None:
            raise InvalidCircuitError("gate is missing 'id'")

        return cls(
            id=str(d["id"]),
            kind=pick("kind", "type"),
            position=required_int("position"),
            target=required_int("target", "wireIndex"),
            control=pick("control", "controlWire"),
            control2=pick("control2", "controlWire2"),
            parameter=pick("parameter"),
            target2=pick("target2"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "position": self.position,
            "target": self.target,
            "control": self.control,
            "control2": self.control2,
            "parameter": self.parameter,
            "target2": self.target2,
        }


@dataclass(frozen=True)
class Wire:
    index: int
    label: str


@dataclass(frozen=True)
class CircuitIssue:
    gate_id: Optional[str]
    severity: str  # "error" | "warning"
    message: str

    @property
    def is_error(self) -> bool:
        return self.severity == "error"


@dataclass(frozen=True)
class Layer:
    position: int
    gates: tuple[GateInstance, ...]

    @property
    def parallelism(self) -> int:
        return len(self.gates)


@dataclass(frozen=True)
class DepthInfo:
    depth: int
    total_ops: int
    avg_parallelism: float
    layers: tuple[Layer, ...]


def sort_gates(gates: Iterable[GateInstance]) -> list[GateInstance]:
    # stable: gates sharing a position keep their list order
    return sorted(gates, key=lambda g: g.position)


def _check_gate(g: GateInstance, num_wires: int) -> list[CircuitIssue]:
    issues: list[CircuitIssue] = []

    def err(msg):
        issues.append(CircuitIssue(g.id, "error", msg))

    kind = g.kind
    name = kind.value

    if not isinstance(g.position, numbers.Integral) or g.position < 0:
        err(f"{name} has invalid position {g.position!r}")

    def in_range(w) -> bool:
        return isinstance(w, numbers.Integral) and 0 <= w < num_wires

    if not in_range(g.target):
        err(f"{name} target wire {g.target!r} out of range [0, {num_wires})")

    need = kind.num_controls
    if need >= 1 and g.control is None:
        err(f"{name} requires a control wire")
    if need >= 2 and g.control2 is None:
        err(f"{name} requires a second control wire")
    if need < 2 and g.control2 is not None:
        err(f"{name} does not take a second control wire")
    if need < 1 and g.control is not None:
        err(f"{name} does not take a control wire")

    for c in g.controls:
        if not in_range(c):
            err(f"{name} control wire {c!r} out of range [0, {num_wires})")

    if kind.arity is Arity.TWO_QUBIT:
        if not in_range(g.swap_partner):
            err(f"{name} second target wire {g.swap_partner!r} out of range [0, {num_wires})")
    elif g.target2 is not None:
        err(f"{name} does not take a second target wire")

    if len(set(g.wires)) != len(g.wires):
        err(f"{name} uses the same wire more than once: {list(g.wires)}")

    if g.parameter is not None:
        try:
            p = float(g.parameter)
        except (TypeError, ValueError):
            err(f"{name} parameter {g.parameter!r} is not a number")
        else:
            if not math.isfinite(p):
                err(f"{name} parameter must be finite, got {g.parameter!r}")
            elif not kind.parameterized:
                issues.append(CircuitIssue(g.id, "warning", f"{name} ignores its parameter"))

    return issues


def verify(gates: Sequence[GateInstance], num_wires: int) -> list[CircuitIssue]:
    """
    Report every problem with a gate list. Nothing here raises; see
    check_circuit for the rejecting variant.
    """
    issues: list[CircuitIssue] = []

    max_wires = get_config().max_wires
    if not isinstance(num_wires, numbers.Integral) or num_wires < 1 or num_wires > max_wires:
        issues.append(CircuitIssue(None, "error", f"num_wires must be in [1, {max_wires}], got {num_wires!r}"))
        return issues

    seen_ids: set[str] = set()
    for g in gates:
        if not isinstance(g, GateInstance):
            issues.append(CircuitIssue(None, "error", f"not a gate instance: {g!r}"))
            continue
        if g.id in seen_ids:
            issues.append(CircuitIssue(g.id, "error", f"duplicate gate id {g.id!r}"))
        seen_ids.add(g.id)
        issues.extend(_check_gate(g, num_wires))

    # same-position gates should touch disjoint wires
    occupied: dict[tuple[int, int], str] = {}
    for g in gates:
        if not isinstance(g, GateInstance):
            continue
        for w in set(g.wires):
            other = occupied.get((g.position, w))
            if other is not None:
                issues.append(CircuitIssue(
                    g.id, "warning",
                    f"shares wire {w} with gate {other} at position {g.position}; applied in list order",
                ))
            else:
                occupied[(g.position, w)] = g.id

    return issues


def check_circuit(gates: Sequence[GateInstance], num_wires: int) -> list[CircuitIssue]:
    issues = verify(gates, num_wires)
    errors = [i for i in issues if i.is_error]
    if errors:
        first = errors[0]
        where = f" (gate {first.gate_id})" if first.gate_id else ""
        more = f" and {len(errors) - 1} more" if len(errors) > 1 else ""
        raise InvalidCircuitError(f"invalid circuit: {first.message}{where}{more}", errors)

    for w in issues:
        logger.warning("circuit warning for gate %s: %s", w.gate_id, w.message)
    return issues


GateList = Union["Circuit", Sequence[GateInstance]]


class Circuit:
    def __init__(self, num_wires: int, gates: Iterable[GateInstance] = ()):
        if num_wires <= 0:
            raise ValueError("num_wires must be positive")

        self.num_wires = int(num_wires)
        self.gates: list[GateInstance] = list(gates)
        self._next_id = len(self.gates)

    @property
    def num_qubits(self) -> int:
        return self.num_wires

    def __len__(self) -> int:
        return len(self.gates)

    def __iter__(self):
        return iter(self.gates)

    def __repr__(self):
        return f"Circuit(num_wires={self.num_wires}, gates={len(self.gates)})"

    def wires(self) -> list[Wire]:
        return [Wire(i, f"q[{i}]") for i in range(self.num_wires)]

    def positions(self) -> list[int]:
        return sorted({g.position for g in self.gates})

    def gates_at(self, position: int) -> list[GateInstance]:
        return [g for g in self.gates if g.position == position]

    def layers(self) -> list[Layer]:
        return [Layer(p, tuple(self.gates_at(p))) for p in self.positions()]

    def depth_info(self) -> DepthInfo:
        layers = self.layers()
        if not layers:
            return DepthInfo(depth=0, total_ops=0, avg_parallelism=0.0, layers=())
        return DepthInfo(
            depth=len(layers),
            total_ops=len(self.gates),
            avg_parallelism=len(self.gates) / len(layers),
            layers=tuple(layers),
        )

    def get(self, gate_id: str) -> GateInstance:
        for g in self.gates:
            if g.id == gate_id:
                return g
        raise KeyError(gate_id)

    def parameterized_gates(self) -> list[GateInstance]:
        return [g for g in self.gates if g.kind.parameterized]

    def verify(self) -> list[CircuitIssue]:
        return verify(self.gates, self.num_wires)

    def check(self) -> list[CircuitIssue]:
        return check_circuit(self.gates, self.num_wires)

    ## builders

    def _next_position(self) -> int:
        return max((g.position for g in self.gates), default=-1) + 1

    def add(
        self,
        kind,
        target: int,
        *,
        control: Optional[int] = None,
        control2: Optional[int] = None,
        parameter: Optional[float] = None,
        target2: Optional[int] = None,
        position: Optional[int] = None,
        gate_id: Optional[str] = None,
    ) -> GateInstance:
        if gate_id is None:
            gate_id = f"gate-{self._next_id}"
        self._next_id += 1

        g = GateInstance(
            id=gate_id,
            kind=kind,
            position=self._next_position() if position is None else int(position),
            target=int(target),
            control=control,
            control2=control2,
            parameter=parameter,
            target2=target2,
        )
        self.gates.append(g)
        return g

    def i(self, q, **kw):
        return self.add(GateKind.I, q, **kw)

    def h(self, q, **kw):
        return self.add(GateKind.H, q, **kw)

    def x(self, q, **kw):
        return self.add(GateKind.X, q, **kw)

    def y(self, q, **kw):
        return self.add(GateKind.Y, q, **kw)

    def z(self, q, **kw):
        return self.add(GateKind.Z, q, **kw)

    def s(self, q, **kw):
        return self.add(GateKind.S, q, **kw)

    def t(self, q, **kw):
        return self.add(GateKind.T, q, **kw)

    def rx(self, q, theta, **kw):
        return self.add(GateKind.RX, q, parameter=theta, **kw)

    def ry(self, q, theta, **kw):
        return self.add(GateKind.RY, q, parameter=theta, **kw)

    def rz(self, q, theta, **kw):
        return self.add(GateKind.RZ, q, parameter=theta, **kw)

    def cx(self, control, target, **kw):
        return self.add(GateKind.CNOT, target, control=control, **kw)

    def cz(self, control, target, **kw):
        return self.add(GateKind.CZ, target, control=control, **kw)

    def cphase(self, control, target, theta=math.pi / 4, **kw):
        return self.add(GateKind.CPHASE, target, control=control, parameter=theta, **kw)

    def swap(self, q1, q2, **kw):
        return self.add(GateKind.SWAP, q1, target2=q2, **kw)

    def ccx(self, c1, c2, target, **kw):
        return self.add(GateKind.CCX, target, control=c1, control2=c2, **kw)

    def cswap(self, control, q1, q2, **kw):
        return self.add(GateKind.CSWAP, q1, control=control, target2=q2, **kw)


def as_gate_list(gates: GateList, num_wires: Optional[int] = None) -> tuple[list[GateInstance], int]:
    """Accept either a Circuit or a plain gate sequence plus wire count."""
    if isinstance(gates, Circuit):
        if num_wires is not None and int(num_wires) != gates.num_wires:
            raise InvalidCircuitError(
                f"circuit has {gates.num_wires} wires but num_wires={num_wires} was given"
            )
        return list(gates.gates), gates.num_wires
    if num_wires is None:
        raise InvalidCircuitError("num_wires is required when passing a plain gate list")
    return list(gates), num_wires
