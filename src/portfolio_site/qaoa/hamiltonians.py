"""
QAOA Hamiltonians for MaxCut
============================

The cost Hamiltonian encodes the cut value on the computational basis:

    H_C = Σ_{(u,v)} w_uv (I - Z_u Z_v) / 2

Z_u Z_v = +1 when qubits u and v agree and -1 when they differ, so each
term contributes w_uv exactly for the cut edges and H_C |z⟩ = C(z) |z⟩.

The mixer drives transitions between basis states:

    B = Σ_i X_i

Its ground state (of -B) is |+⟩^⊗n, the uniform superposition, which is
where QAOA starts.

Why the layers are cheap
------------------------
H_C is diagonal, so e^{-iγH_C} is just a phase per basis state:
multiply the state vector by exp(-iγ C(z)). The X_i terms of B commute, so

    e^{-iβB} = ⊗_i (cos β I - i sin β X)

exactly, without a matrix exponential of the full operator.

Qubit ordering: qubit 0 is the leftmost tensor factor (most significant
bit of the basis index), matching ``problems.cut_values``.
"""

from __future__ import annotations

from typing import List

import numpy as np

# QuTiP imports for quantum objects
try:
    from qutip import Qobj, basis, tensor, qeye, sigmax, sigmaz
except ImportError:
    raise ImportError(
        "QuTiP is required for the QAOA walkthrough. "
        "Install with: pip install qutip"
    )

from .problems import MaxCutProblem, cut_values


def _on_site(op: Qobj, site: int, n: int) -> Qobj:
    """Embed a single-qubit operator at ``site`` in an n-qubit register."""
    ops: List[Qobj] = [qeye(2)] * n
    ops[site] = op
    return tensor(ops)


def identity(n: int) -> Qobj:
    return tensor([qeye(2)] * n)


def cost_hamiltonian(problem: MaxCutProblem) -> Qobj:
    """
    Build H_C = Σ w_uv (I - Z_u Z_v)/2 as a QuTiP operator.

    Parameters
    ----------
    problem : MaxCutProblem
        Graph to encode.

    Returns
    -------
    Qobj
        Hermitian, diagonal operator on ``problem.n_nodes`` qubits. A graph
        with no edges gives the zero operator.
    """
    n = problem.n_nodes
    eye = identity(n)
    H = 0 * eye
    for u, v, w in problem.edges:
        zz = _on_site(sigmaz(), u, n) * _on_site(sigmaz(), v, n)
        H = H + 0.5 * w * (eye - zz)
    return H


def mixer_hamiltonian(n: int) -> Qobj:
    """Transverse-field mixer B = Σ_i X_i."""
    B = 0 * identity(n)
    for i in range(n):
        B = B + _on_site(sigmax(), i, n)
    return B


def cost_diagonal(problem: MaxCutProblem) -> np.ndarray:
    """Diagonal of H_C, i.e. the cut value of each basis state."""
    return cut_values(problem)


def plus_state(n: int) -> Qobj:
    """|+⟩^⊗n, the uniform superposition over all 2^n bitstrings."""
    plus = (basis(2, 0) + basis(2, 1)).unit()
    return tensor([plus] * n)


def mixer_unitary(beta: float, n: int) -> Qobj:
    """e^{-iβB} as the tensor product of single-qubit X rotations."""
    single = np.cos(beta) * qeye(2) - 1j * np.sin(beta) * sigmax()
    return tensor([single] * n)


def apply_cost_phase(state: Qobj, gamma: float, diagonal: np.ndarray) -> Qobj:
    """Apply e^{-iγH_C} to a ket using the diagonal of H_C."""
    amplitudes = state.full().ravel() * np.exp(-1j * gamma * diagonal)
    return Qobj(amplitudes.reshape(-1, 1), dims=state.dims)
