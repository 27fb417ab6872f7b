"""
MaxCut QAOA Walkthrough
=======================

The runnable code behind the "QAOA notebook walkthrough" post.

QAOA IN ONE PARAGRAPH
---------------------
Encode the cut value of a graph as a diagonal Hamiltonian H_C. Start in
the uniform superposition |+⟩^⊗n and alternate p times between evolving
under H_C for "time" γ_k and under a mixer B = Σ X_i for time β_k. The
resulting state is measured in the computational basis; the angles
(γ, β) are tuned by a classical optimizer to maximise the expected cut.
At p → ∞ this recovers adiabatic evolution; at small p it is a heuristic
whose quality is measured by the approximation ratio ⟨C⟩ / C_max.

Nothing here is new algorithmic infrastructure: QuTiP builds and evolves
the state, SciPy does the optimisation, matplotlib draws the figures.

MODULE STRUCTURE
----------------
- problems: MaxCutProblem, graph families, brute-force optimum
- hamiltonians: H_C, B and the layer unitaries as QuTiP objects
- ansatz: QAOAAnsatz (state, expectation, probabilities, sampling)
- optimization: QAOAConfig, optimize_qaoa, optimize_layerwise,
  explore_landscape, the ``portfolio-qaoa`` CLI
- visualization: landscape / distribution / depth-sweep plots
  (import explicitly; pulls in matplotlib)

References
----------
[1] Farhi, Goldstone & Gutmann, "A Quantum Approximate Optimization
    Algorithm", arXiv:1411.4028 (2014)
[2] Zhou, Wang, Choi, Pichler & Lukin, "Quantum Approximate Optimization
    Algorithm: Performance, Mechanism, and Implementation on Near-Term
    Devices", Phys. Rev. X 10, 021067 (2020)
"""

from .problems import (
    MaxCutProblem,
    cut_values,
    MAX_BRUTE_FORCE_NODES,
)

from .hamiltonians import (
    cost_hamiltonian,
    mixer_hamiltonian,
    cost_diagonal,
    plus_state,
    mixer_unitary,
)

from .ansatz import QAOAAnsatz

from .optimization import (
    QAOAConfig,
    get_default_qaoa_config,
    EvaluationCache,
    QAOAResult,
    LandscapeResult,
    optimize_qaoa,
    optimize_layerwise,
    explore_landscape,
    interp_initial_point,
    zero_padded_initial_point,
    format_summary,
)

__all__ = [
    "MaxCutProblem",
    "cut_values",
    "MAX_BRUTE_FORCE_NODES",
    "cost_hamiltonian",
    "mixer_hamiltonian",
    "cost_diagonal",
    "plus_state",
    "mixer_unitary",
    "QAOAAnsatz",
    "QAOAConfig",
    "get_default_qaoa_config",
    "EvaluationCache",
    "QAOAResult",
    "LandscapeResult",
    "optimize_qaoa",
    "optimize_layerwise",
    "explore_landscape",
    "interp_initial_point",
    "zero_padded_initial_point",
    "format_summary",
]
