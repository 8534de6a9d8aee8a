"""
SCL - Simple circuit language

One instruction per line, `#` starts a comment. Each gate goes to the next
free position unless the line starts with `@<position>`.

Supported instructions:
  - 1-qubit gates: I/X/Y/Z/H/S/T <target>
  - parameterized: RX/RY/RZ <target> <theta>
  - CNOT <control> <target>          (alias CX)
  - CZ <control> <target>
  - CPHASE <control> <target> [theta] (default pi/4)
  - SWAP <q1> <q2>
  - CCX <c1> <c2> <target>           (alias TOFFOLI)
  - CSWAP <control> <q1> <q2>        (alias FREDKIN)

Angles accept plain numbers or pi expressions: pi, -pi/2, 3pi/4, 0.5*pi.
"""

from __future__ import annotations

import math
import re

from .circuit import Circuit
from .errors import InvalidCircuitError
from .gates import GateKind, resolve_parameter

_ARGS = {
    GateKind.I: 1, GateKind.H: 1, GateKind.X: 1, GateKind.Y: 1,
    GateKind.Z: 1, GateKind.S: 1, GateKind.T: 1,
    GateKind.RX: 2, GateKind.RY: 2, GateKind.RZ: 2,
    GateKind.CNOT: 2, GateKind.CZ: 2, GateKind.SWAP: 2,
    GateKind.CCX: 3, GateKind.CSWAP: 3,
}

_PI_EXPR = re.compile(r"^([+-]?\d*\.?\d*)\s*\*?\s*pi\s*(?:/\s*(\d+\.?\d*))?$")


def _strip_comment(line: str) -> str:
    return line.split("#", 1)[0].strip()


def parse_angle(text: str) -> float:
    s = text.strip().lower()
    m = _PI_EXPR.match(s)
    if m:
        coef, denom = m.group(1), m.group(2)
        if coef in ("", "+"):
            c = 1.0
        elif coef == "-":
            c = -1.0
        else:
            c = float(coef)
        return c * math.pi / (float(denom) if denom else 1.0)
    return float(s)


def parse_program(program: str, num_wires: int) -> Circuit:
    c = Circuit(num_wires)

    for lineno, raw in enumerate(program.splitlines(), start=1):
        line = _strip_comment(raw)
        if not line:
            continue

        parts = line.split()
        position = None
        if parts[0].startswith("@"):
            try:
                position = int(parts[0][1:])
            except ValueError:
                raise InvalidCircuitError(f"line {lineno}: bad position {parts[0]!r}") from None
            parts = parts[1:]
            if not parts:
                raise InvalidCircuitError(f"line {lineno}: position without an instruction")

        try:
            kind = GateKind.parse(parts[0])
        except InvalidCircuitError:
            raise InvalidCircuitError(f"line {lineno}: unknown instruction {parts[0]!r}") from None
        args = parts[1:]

        try:
            _emit(c, kind, args, position)
        except (ValueError, IndexError) as e:
            raise InvalidCircuitError(f"line {lineno}: {e}") from e

    return c


def _emit(c: Circuit, kind: GateKind, args: list[str], position) -> None:
    name = kind.value

    if kind is GateKind.CPHASE:
        if len(args) not in (2, 3):
            raise ValueError("CPHASE expects 2 or 3 args: CPHASE <control> <target> [theta]")
        theta = parse_angle(args[2]) if len(args) == 3 else math.pi / 4
        c.cphase(int(args[0]), int(args[1]), theta, position=position)
        return

    expected = _ARGS[kind]
    if len(args) != expected:
        raise ValueError(f"{name} expects {expected} arg(s), got {len(args)}")

    if kind in (GateKind.RX, GateKind.RY, GateKind.RZ):
        c.add(kind, int(args[0]), parameter=parse_angle(args[1]), position=position)
    elif kind in (GateKind.CNOT, GateKind.CZ):
        c.add(kind, int(args[1]), control=int(args[0]), position=position)
    elif kind is GateKind.SWAP:
        c.swap(int(args[0]), int(args[1]), position=position)
    elif kind is GateKind.CCX:
        c.ccx(int(args[0]), int(args[1]), int(args[2]), position=position)
    elif kind is GateKind.CSWAP:
        c.cswap(int(args[0]), int(args[1]), int(args[2]), position=position)
    else:
        c.add(kind, int(args[0]), position=position)


def circuit_to_scl(c: Circuit) -> str:
    lines: list[str] = []
    for g in sorted(c.gates, key=lambda g: g.position):
        k = g.kind
        if k in (GateKind.RX, GateKind.RY, GateKind.RZ):
            body = f"{k.value} {g.target} {resolve_parameter(k, g.parameter)!r}"
        elif k is GateKind.CPHASE:
            body = f"CPHASE {g.control} {g.target} {resolve_parameter(k, g.parameter)!r}"
        elif k in (GateKind.CNOT, GateKind.CZ):
            body = f"{k.value} {g.control} {g.target}"
        elif k is GateKind.SWAP:
            body = f"SWAP {g.target} {g.swap_partner}"
        elif k is GateKind.CCX:
            body = f"CCX {g.control} {g.control2} {g.target}"
        elif k is GateKind.CSWAP:
            body = f"CSWAP {g.control} {g.target} {g.swap_partner}"
        else:
            body = f"{k.value} {g.target}"
        lines.append(f"@{g.position} {body}")
    return "\n".join(lines) + ("\n" if lines else "")
