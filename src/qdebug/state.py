import numpy as np

def basis_state(index: int, num_qubits: int) -> np.ndarray:
	dim = 2 ** num_qubits
	if index < 0 or index >= dim:
		raise ValueError(f"index must be between 0 and {dim-1}")

	state = np.zeros(dim, dtype=complex)
	state[index] = 1.0
	return state

def zero_state(num_qubits: int) -> np.ndarray:
	return basis_state(0, num_qubits)

def copy_state(state: np.ndarray) -> np.ndarray:
	return np.array(state, dtype=complex, copy=True)

def validate_state(state: np.ndarray, num_qubits: int) -> None:
	state = np.asarray(state)
	if num_qubits <= 0:
		raise ValueError("num_qubits must be positive")
	if state.ndim != 1 or state.shape[0] != 2 ** num_qubits:
		raise ValueError(f"state must have shape ({2 ** num_qubits},), got {state.shape}")
	if not np.all(np.isfinite(state)):
		raise ValueError("state contains non-finite amplitudes")

def normalize(state: np.ndarray) -> np.ndarray:
	norm = np.linalg.norm(state)
	if norm == 0:
		raise ValueError("Cannot normalise zero vector!")
	return state / norm

def num_qubits_of(state: np.ndarray) -> int:
	dim = int(np.asarray(state).shape[0])
	n = dim.bit_length() - 1
	if dim <= 1 or (1 << n) != dim:
		raise ValueError(f"state length must be a power of two >= 2, got {dim}")
	return n

def format_basis(index: int, num_qubits: int) -> str:
	## wire n-1 on the left, wire 0 on the right
	return format(index, f"0{num_qubits}b")
