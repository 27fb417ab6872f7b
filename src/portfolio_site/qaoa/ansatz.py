"""
QAOA Ansatz State
=================

The depth-p QAOA state for angles γ = (γ_1..γ_p), β = (β_1..β_p) is

    |γ, β⟩ = e^{-iβ_p B} e^{-iγ_p H_C} ... e^{-iβ_1 B} e^{-iγ_1 H_C} |+⟩^⊗n

and the quantity the classical optimizer sees is the expected cut

    F_p(γ, β) = ⟨γ, β| H_C |γ, β⟩

Measuring the state in the computational basis samples bitstrings z with
probability |⟨z|γ, β⟩|²; a good set of angles concentrates that
probability on large cuts.

Parameters are passed either as separate ``gammas``/``betas`` arrays or as
one flat vector ``[γ_1..γ_p, β_1..β_p]`` (the layout handed to SciPy).
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

import numpy as np
from qutip import Qobj, expect

from .hamiltonians import (
    cost_hamiltonian,
    mixer_hamiltonian,
    cost_diagonal,
    plus_state,
    mixer_unitary,
    apply_cost_phase,
)
from .problems import MaxCutProblem


class QAOAAnsatz:
    """
    Depth-p QAOA circuit for one MaxCut instance.

    Parameters
    ----------
    problem : MaxCutProblem
        The graph to cut.
    p : int
        Number of (cost, mixer) layers, p ≥ 1.

    Examples
    --------
    >>> problem = MaxCutProblem.ring(4)
    >>> ansatz = QAOAAnsatz(problem, p=1)
    >>> round(ansatz.expectation([0.0, 0.0]), 6)   # uniform superposition: half the edges
    2.0
    """

    def __init__(self, problem: MaxCutProblem, p: int = 1):
        if p < 1:
            raise ValueError(f"QAOA depth must be at least 1, got {p}")
        self.problem = problem
        self.p = int(p)
        self.n_qubits = problem.n_nodes
        self.diagonal = cost_diagonal(problem)
        self.initial_state = plus_state(self.n_qubits)
        self._cost_operator: Optional[Qobj] = None
        self._mixer_operator: Optional[Qobj] = None

    @property
    def cost_operator(self) -> Qobj:
        """H_C as a Qobj (built lazily; the evolution itself only needs the diagonal)."""
        if self._cost_operator is None:
            self._cost_operator = cost_hamiltonian(self.problem)
        return self._cost_operator

    @property
    def mixer_operator(self) -> Qobj:
        if self._mixer_operator is None:
            self._mixer_operator = mixer_hamiltonian(self.n_qubits)
        return self._mixer_operator

    @property
    def n_params(self) -> int:
        return 2 * self.p

    def split_params(self, params: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
        """Split a flat ``[γ..., β...]`` vector into (gammas, betas)."""
        params = np.asarray(params, dtype=float).ravel()
        if params.size != self.n_params:
            raise ValueError(f"Expected {self.n_params} parameters for p={self.p}, got {params.size}")
        return params[:self.p], params[self.p:]

    def state(self, gammas: Sequence[float], betas: Sequence[float]) -> Qobj:
        """
        Prepare |γ, β⟩.

        Raises
        ------
        ValueError
            If either angle vector does not have length p.
        """
        gammas = np.atleast_1d(np.asarray(gammas, dtype=float))
        betas = np.atleast_1d(np.asarray(betas, dtype=float))
        if gammas.size != self.p or betas.size != self.p:
            raise ValueError(
                f"Expected {self.p} gammas and {self.p} betas, got {gammas.size} and {betas.size}"
            )

        psi = self.initial_state
        for gamma, beta in zip(gammas, betas):
            psi = apply_cost_phase(psi, gamma, self.diagonal)
            psi = mixer_unitary(beta, self.n_qubits) * psi
        return psi

    def state_from_params(self, params: Sequence[float]) -> Qobj:
        return self.state(*self.split_params(params))

    def probability_vector(self, params: Sequence[float]) -> np.ndarray:
        """|amplitude|² of every basis state, indexed like ``cost_diagonal``."""
        amplitudes = self.state_from_params(params).full().ravel()
        return np.abs(amplitudes) ** 2

    def expectation(self, params: Sequence[float]) -> float:
        """Expected cut ⟨H_C⟩ for a flat parameter vector."""
        return float(np.dot(self.probability_vector(params), self.diagonal))

    def expectation_operator(self, params: Sequence[float]) -> float:
        """⟨H_C⟩ via ``qutip.expect`` on the full operator (slower, used as a cross-check)."""
        return float(np.real(expect(self.cost_operator, self.state_from_params(params))))

    def probabilities(self, params: Sequence[float], threshold: float = 0.0) -> Dict[str, float]:
        """Map bitstring -> probability, dropping entries at or below ``threshold``."""
        probs = self.probability_vector(params)
        n = self.n_qubits
        return {
            format(i, f"0{n}b"): float(pr)
            for i, pr in enumerate(probs)
            if pr > threshold
        }

    def sample(self, params: Sequence[float], shots: int = 1024, seed: int = None) -> Dict[str, int]:
        """
        Simulate ``shots`` computational-basis measurements.

        Returns
        -------
        Dict[str, int]
            Bitstring counts (only observed bitstrings appear).
        """
        if shots < 1:
            raise ValueError(f"shots must be positive, got {shots}")
        probs = self.probability_vector(params)
        probs = probs / probs.sum()
        rng = np.random.default_rng(seed)
        outcomes = rng.choice(probs.size, size=shots, p=probs)
        indices, counts = np.unique(outcomes, return_counts=True)
        n = self.n_qubits
        return {format(int(i), f"0{n}b"): int(c) for i, c in zip(indices, counts)}

    def most_likely(self, params: Sequence[float]) -> Tuple[str, float]:
        """The highest-probability bitstring and its probability."""
        probs = self.probability_vector(params)
        idx = int(np.argmax(probs))
        return format(idx, f"0{self.n_qubits}b"), float(probs[idx])
