import numpy as np
import pytest
from hypothesis import given

from qdebug.circuit import Circuit, GateInstance
from qdebug.errors import InvalidCircuitError
from qdebug.gates import GateKind
from qdebug.presets import bell_pair, ghz, uniform_superposition, random_clifford_ish
from qdebug.simulator import apply_gate, execute, run_counts
from qdebug.state import basis_state

from strategies import circuit_strategy, dense_execute


def test_empty_circuit_is_zero_state():
    c = Circuit(3)
    psi = execute(c)
    assert psi.shape == (8,)
    assert np.allclose(psi, np.array([1, 0, 0, 0, 0, 0, 0, 0], dtype=complex))


def test_x_on_wire0_sets_lowest_bit():
    # wire 0 is bit 0, so |..1> on wire 0 is index 1
    c = Circuit(3)
    c.x(0)
    psi = execute(c)

    expected = np.zeros(8, dtype=complex)
    expected[1] = 1.0
    assert np.allclose(psi, expected)


def test_x_on_top_wire_sets_highest_bit():
    c = Circuit(3)
    c.x(2)
    psi = execute(c)
    assert np.isclose(abs(psi[4]), 1.0)


def test_h_on_single_qubit_gives_half_half_probs():
    c = Circuit(1)
    c.h(0)
    psi = execute(c)

    probs = np.abs(psi) ** 2
    assert np.allclose(probs.sum(), 1.0)
    assert np.allclose(probs, np.array([0.5, 0.5], dtype=float), atol=1e-12)


def test_self_inverse_gates():
    c = Circuit(1)
    c.h(0)
    c.h(0)
    assert np.allclose(execute(c), [1, 0], atol=1e-12)

    c = Circuit(2)
    c.h(1)
    c.x(0)
    c.x(0)
    ref = Circuit(2)
    ref.h(1)
    assert np.allclose(execute(c), execute(ref), atol=1e-12)


def test_bell_state_amplitudes():
    c = Circuit(2)
    c.h(0, position=0)
    c.cx(0, 1, position=1)

    psi = execute(c)
    s = 1 / np.sqrt(2)
    assert np.allclose(psi, [s, 0, 0, s], atol=1e-12)


@pytest.mark.parametrize("control_bit,target_bit", [(0, 0), (0, 1), (1, 0), (1, 1)])
def test_cnot_on_all_basis_inputs(control_bit, target_bit):
    c = Circuit(2)
    if control_bit:
        c.x(0, position=0)
    if target_bit:
        c.x(1, position=0)
    c.cx(0, 1, position=1)

    psi = execute(c)
    out_target = target_bit ^ control_bit
    expected_index = control_bit | (out_target << 1)
    assert np.isclose(abs(psi[expected_index]), 1.0, atol=1e-12)


def test_toffoli_deterministic_mapping_011_to_111():
    c = Circuit(3)
    c.x(0)
    c.x(1)          # wires 0 and 1 set: index 3
    c.ccx(0, 1, 2)  # flips wire 2 iff both controls are 1

    psi = execute(c)

    expected = np.zeros(8, dtype=complex)
    expected[7] = 1.0
    assert np.allclose(psi, expected)


def test_toffoli_needs_both_controls():
    c = Circuit(3)
    c.x(0)
    c.ccx(0, 1, 2)
    psi = execute(c)
    assert np.isclose(abs(psi[1]), 1.0)


def test_fredkin_swaps_when_control_set():
    c = Circuit(3)
    c.x(0)
    c.x(1)              # index 3: control on, wire 1 on, wire 2 off
    c.cswap(0, 1, 2)    # swap wires 1 and 2 => index 5

    psi = execute(c)

    expected = np.zeros(8, dtype=complex)
    expected[5] = 1.0
    assert np.allclose(psi, expected)


def test_swap_exchanges_wires():
    c = Circuit(3)
    c.x(0)
    c.swap(0, 2)
    psi = execute(c)
    assert np.isclose(abs(psi[4]), 1.0)


def test_swap_defaults_to_next_wire():
    c = Circuit(2)
    c.x(0)
    c.add(GateKind.SWAP, 0)
    psi = execute(c)
    assert np.isclose(abs(psi[2]), 1.0)


def test_cz_phase_only_on_11():
    c = Circuit(2)
    c.h(0, position=0)
    c.h(1, position=0)
    c.cz(0, 1)
    psi = execute(c)
    assert np.allclose(psi, 0.5 * np.array([1, 1, 1, -1]), atol=1e-12)


def test_ghz_support():
    psi = execute(ghz(3))
    probs = np.abs(psi) ** 2
    assert np.isclose(probs[0], 0.5)
    assert np.isclose(probs[7], 0.5)


def test_uniform_superposition_is_flat():
    psi = execute(uniform_superposition(3))
    assert np.allclose(np.abs(psi) ** 2, np.full(8, 1 / 8))


def test_same_position_gates_commute():
    a = Circuit(2)
    a.h(0, position=0)
    a.x(1, position=0)
    b = Circuit(2, list(reversed(a.gates)))
    assert np.allclose(execute(a), execute(b))


def test_gates_run_in_position_order_not_list_order():
    c = Circuit(1, [
        GateInstance("late", GateKind.H, 5, 0),
        GateInstance("early", GateKind.X, 1, 0),
    ])
    # X then H: |1> -> |->
    s = 1 / np.sqrt(2)
    assert np.allclose(execute(c), [s, -s], atol=1e-12)


@given(circuit=circuit_strategy())
def test_norm_preserved(circuit):
    psi = execute(circuit)
    assert np.isclose(np.sum(np.abs(psi) ** 2), 1.0, atol=1e-9)


@given(circuit=circuit_strategy(max_wires=3, max_gates=8))
def test_matches_dense_reference(circuit):
    psi = execute(circuit)
    assert np.allclose(psi, dense_execute(circuit), atol=1e-9)


def test_parameter_override_does_not_mutate_circuit():
    c = Circuit(1)
    g = c.rx(0, 0.0)
    before = list(c.gates)

    psi = execute(c, parameter_overrides={g.id: np.pi})
    assert np.isclose(abs(psi[1]), 1.0)
    assert c.gates == before
    assert c.gates[0].parameter == 0.0

    # and without the override the stored angle is used again
    assert np.isclose(abs(execute(c)[0]), 1.0)


def test_override_on_fixed_gate_is_ignored():
    c = Circuit(1)
    g = c.x(0)
    psi = execute(c, parameter_overrides={g.id: 1.0})
    assert np.isclose(abs(psi[1]), 1.0)


def test_invalid_wire_rejects_whole_circuit():
    c = Circuit(2)
    c.h(0)
    c.x(5)
    with pytest.raises(InvalidCircuitError) as exc:
        execute(c)
    assert exc.value.issues[0].gate_id == c.gates[1].id


def test_degenerate_control_is_rejected():
    c = Circuit(2)
    c.cx(1, 1)
    with pytest.raises(InvalidCircuitError):
        execute(c)


def test_missing_control_is_rejected():
    c = Circuit(2, [GateInstance("g", GateKind.CNOT, 0, 1)])
    with pytest.raises(InvalidCircuitError):
        execute(c)


def test_invalid_circuit_is_also_a_value_error():
    with pytest.raises(ValueError):
        execute([GateInstance("g", GateKind.H, 0, 3)], 2)


def test_plain_gate_list_needs_num_wires():
    with pytest.raises(InvalidCircuitError):
        execute([GateInstance("g", GateKind.H, 0, 0)])


def test_too_many_wires_rejected():
    with pytest.raises(InvalidCircuitError):
        execute([], 64)


def test_apply_gate_returns_new_state():
    psi = basis_state(0, 1)
    out = apply_gate(psi, GateInstance("g", GateKind.X, 0, 0), 1)
    assert np.allclose(psi, [1, 0])
    assert np.allclose(out, [0, 1])


def test_run_counts_bell_only_00_11():
    counts = run_counts(bell_pair(), shots=500, seed=3)
    assert set(counts) <= {"00", "11"}
    assert sum(counts.values()) == 500


def test_random_clifford_ish_is_reproducible():
    a = random_clifford_ish(11, num_qubits=3, depth=6)
    b = random_clifford_ish(11, num_qubits=3, depth=6)
    assert [g.to_dict() for g in a.gates] == [g.to_dict() for g in b.gates]
    assert np.allclose(execute(a), execute(b))


def test_cphase_from_editor_shape_uses_quarter_turn():
    gates = [
        GateInstance.from_dict({"id": "a", "type": "X", "position": 0, "wireIndex": 0}),
        GateInstance.from_dict({"id": "b", "type": "X", "position": 0, "wireIndex": 1}),
        GateInstance.from_dict({"id": "c", "type": "CPHASE", "position": 1, "wireIndex": 1, "controlWire": 0}),
    ]
    psi = execute(gates, 2)
    assert np.isclose(psi[3], np.exp(1j * np.pi / 4), atol=1e-12)


def test_execute_renormalises_drift(monkeypatch):
    from qdebug import gates, simulator

    # every gate inflates the norm slightly
    monkeypatch.setattr(simulator, "unitary", lambda kind, theta=None: 1.001 * gates.unitary(kind, theta))

    c = Circuit(1)
    c.h(0)
    c.h(0)
    psi = execute(c)
    assert np.isclose(np.linalg.norm(psi), 1.0, atol=1e-12)
    assert np.allclose(psi, [1, 0], atol=1e-12)
