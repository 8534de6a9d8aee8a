import numpy as np
import pytest

from qdebug.circuit import Circuit
from qdebug.errors import SamplingError
from qdebug.measurement import counts, measure, measure_qubit, sample
from qdebug.presets import bell_pair
from qdebug.simulator import execute


def test_measure_returns_valid_basis_index():
    psi = execute(bell_pair())

    rng = np.random.default_rng(123)
    outcome = measure(psi, rng)

    assert isinstance(outcome, int)
    assert outcome in (0, 3)


def test_measure_is_reproducible_with_seed():
    c = Circuit(3)
    for q in range(3):
        c.h(q, position=0)
    psi = execute(c)

    a = [measure(psi, np.random.default_rng(9)) for _ in range(5)]
    b = [measure(psi, np.random.default_rng(9)) for _ in range(5)]
    assert a == b

    s1 = sample(psi, np.random.default_rng(42), 200)
    s2 = sample(psi, np.random.default_rng(42), 200)
    assert np.array_equal(s1, s2)


def test_sample_follows_born_rule():
    c = Circuit(1)
    c.ry(0, 2 * np.arccos(np.sqrt(0.8)))  # P(0) = 0.8
    psi = execute(c)

    outcomes = sample(psi, np.random.default_rng(0), 20000)
    assert np.mean(outcomes == 0) == pytest.approx(0.8, abs=0.02)


def test_zero_shots_rejected():
    psi = np.array([1, 0], dtype=complex)
    with pytest.raises(SamplingError):
        sample(psi, np.random.default_rng(0), 0)


def test_counts_bitstrings():
    psi = execute(bell_pair())
    out = counts(psi, np.random.default_rng(1), 100)
    assert set(out) <= {"00", "11"}
    assert sum(out.values()) == 100


def test_measure_qubit_on_plus_state_is_half_half_and_collapses():
    c = Circuit(1)
    c.h(0)  # |+>
    psi = execute(c)

    rng = np.random.default_rng(7)
    res = measure_qubit(psi, qubit=0, num_qubits=1, rng=rng)

    assert res.outcome in (0, 1)
    assert np.isclose(res.probability, 0.5, atol=1e-12)

    # collapsed state must be |0> or |1>
    if res.outcome == 0:
        assert np.allclose(res.post_state, np.array([1, 0], dtype=complex))
    else:
        assert np.allclose(res.post_state, np.array([0, 1], dtype=complex))


def test_measure_qubit_collapses_partner_of_bell_pair():
    psi = execute(bell_pair())
    res = measure_qubit(psi, qubit=0, num_qubits=2, rng=np.random.default_rng(5))
    expected_index = 3 if res.outcome == 1 else 0
    assert np.isclose(abs(res.post_state[expected_index]), 1.0)


def test_measure_qubit_out_of_range_raises():
    psi = np.array([1, 0], dtype=complex)
    with pytest.raises(ValueError):
        measure_qubit(psi, qubit=1, num_qubits=1)
