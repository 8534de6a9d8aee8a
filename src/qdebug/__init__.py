"""State-vector quantum circuit simulator with a stepwise debugger."""

from .errors      import QdebugError, InvalidCircuitError, SamplingError
from .gates       import GateKind, unitary
from .circuit     import Circuit, GateInstance, Wire, verify, check_circuit
from .simulator   import execute, apply_gate, run_counts
from .observables import probability, expectation_z, expectation_zz, entropy, fidelity
from .measurement import measure, sample
from .tomography  import perform_tomography, TomographyResult
from .noise       import compare, NoiseModel, ComparisonResult
from .debugger    import (
    BreakCondition,
    DebugSession,
    init_session,
    reset_session,
    step_forward,
    step_backward,
    run_until_break,
    run_to_gate,
    toggle_breakpoint,
    add_break_condition,
    remove_break_condition,
)
from .sweep       import parameter_sweep

__version__ = "0.1.0"
