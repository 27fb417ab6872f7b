"""
QAOA Angle Optimization
=======================

The outer, classical half of QAOA: choose the angles (γ, β) that maximise
the expected cut F_p(γ, β) computed by :class:`ansatz.QAOAAnsatz`.

The landscape F_p is smooth but non-convex, with many local optima that
grow in number with p. Three strategies are provided:

1. **Multi-start local search** (default): ``scipy.optimize.minimize``
   (COBYLA unless configured otherwise) from several random starting
   points, keeping the best point seen across all runs.

2. **Global search**: ``method="differential_evolution"`` uses
   ``scipy.optimize.differential_evolution`` over the angle box.

3. **Layerwise warm start**: :func:`optimize_layerwise` grows p one layer
   at a time. Depth p+1 starts from the depth-p optimum, both
   interpolated (INTERP, Zhou et al. PRX 10, 021067 (2020)) and
   zero-padded. The zero-padded start reproduces the depth-p state
   exactly, so the deeper result is never worse.

Angle box
---------
γ ∈ [0, 2π] (H_C has integer spectrum for unit weights, so e^{-iγH_C} is
2π-periodic) and β ∈ [0, π] (e^{-iπB} is a global phase).

Usage
-----
>>> problem = MaxCutProblem.ring(6)
>>> result = optimize_qaoa(problem, QAOAConfig(p=2, n_restarts=5, seed=7))
>>> print(result)

>>> results = optimize_layerwise(problem, p_max=4)
>>> [round(r.approximation_ratio, 3) for r in results]
"""

from __future__ import annotations

import argparse
import json
import os
import time
import warnings
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy.optimize import differential_evolution, minimize

from .ansatz import QAOAAnsatz
from .problems import MaxCutProblem, MAX_BRUTE_FORCE_NODES


GAMMA_BOUNDS = (0.0, 2 * np.pi)
BETA_BOUNDS = (0.0, np.pi)

# scipy.optimize.minimize methods that accept a ``bounds`` argument
BOUNDED_METHODS = ("L-BFGS-B", "TNC", "SLSQP", "Powell", "trust-constr", "Nelder-Mead")


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class QAOAConfig:
    """
    Settings for one QAOA optimisation.

    Attributes
    ----------
    p : int
        Circuit depth (number of cost/mixer layer pairs).
    method : str
        Any ``scipy.optimize.minimize`` method name, or
        ``"differential_evolution"`` for a global search.
    maxiter : int
        Iteration cap per local run (generations for differential evolution).
    n_restarts : int
        Total number of local runs, including any supplied starting points.
    seed : int, optional
        Seed for random starting points and differential evolution.
    tol : float
        Convergence tolerance handed to SciPy.
    shots : int
        Measurement samples drawn for the reported counts (0 disables).
    """
    p: int = 1
    method: str = "COBYLA"
    maxiter: int = 500
    n_restarts: int = 10
    seed: Optional[int] = None
    tol: float = 1e-6
    shots: int = 1024

    def with_depth(self, p: int) -> "QAOAConfig":
        return QAOAConfig(p=p, method=self.method, maxiter=self.maxiter,
                          n_restarts=self.n_restarts, seed=self.seed,
                          tol=self.tol, shots=self.shots)


def get_default_qaoa_config(p: int = 1) -> QAOAConfig:
    """Settings used in the walkthrough post: COBYLA, 10 restarts, fixed seed."""
    return QAOAConfig(p=p, method="COBYLA", maxiter=500, n_restarts=10, seed=1234, shots=1024)


# =============================================================================
# EVALUATION CACHE
# =============================================================================

class EvaluationCache:
    """
    Memoization cache for expected-cut evaluations.

    Keys combine the node count, a hash of the (rounded) weighted edge list
    and the rounded angles; the depth is implied by the number of angles.
    Values are the expected cut. Can be saved to and loaded from JSON, so
    that repeated runs of a sweep skip points already evaluated.

    Usage
    -----
        cache = EvaluationCache(precision=6)
        result = optimize_qaoa(problem, config, cache=cache)
        cache.save("qaoa_cache.json")
    """

    def __init__(self, precision: int = 8):
        self._store: Dict[str, float] = {}
        self.precision = precision
        self.hits = 0
        self.misses = 0

    def make_key(self, problem: MaxCutProblem, params: Sequence[float]) -> str:
        rounded = tuple(round(float(x), self.precision) for x in params)
        edges = tuple((u, v, round(w, self.precision)) for u, v, w in problem.edges)
        return f"{problem.n_nodes}|{hash(edges) & 0xFFFFFFFF:08x}|{rounded}"

    def __contains__(self, key: str) -> bool:
        return key in self._store

    def __getitem__(self, key: str) -> float:
        self.hits += 1
        return self._store[key]

    def __setitem__(self, key: str, value: float):
        self._store[key] = float(value)

    def __len__(self) -> int:
        return len(self._store)

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def save(self, path: str):
        """Save cache to JSON file."""
        data = {"precision": self.precision, "entries": self._store}
        with open(path, "w") as f:
            json.dump(data, f, indent=2)

    def load(self, path: str):
        """Load cache from JSON file (missing file is a no-op)."""
        if not os.path.exists(path):
            return
        with open(path, "r") as f:
            data = json.load(f)
        self.precision = data.get("precision", self.precision)
        for k, v in data.get("entries", {}).items():
            self._store[k] = float(v)


# =============================================================================
# RESULT DATACLASS
# =============================================================================

@dataclass
class QAOAResult:
    """Outcome of optimising the angles of one depth-p QAOA circuit."""
    problem_name: str
    p: int
    gammas: np.ndarray
    betas: np.ndarray
    expected_cut: float
    optimal_cut: Optional[float]
    approximation_ratio: Optional[float]
    most_likely_bitstring: str
    most_likely_probability: float
    most_likely_cut: float
    n_evaluations: int
    success: bool
    message: str
    runtime_seconds: float = 0.0
    counts: Dict[str, int] = field(default_factory=dict)
    history: List[float] = field(default_factory=list)

    @property
    def params(self) -> np.ndarray:
        """Flat ``[γ..., β...]`` vector."""
        return np.concatenate([self.gammas, self.betas])

    def __repr__(self):
        ratio = f"{self.approximation_ratio:.4f}" if self.approximation_ratio is not None else "n/a"
        optimum = f"{self.optimal_cut:g}" if self.optimal_cut is not None else "n/a"
        return f"""QAOAResult(
  Problem:  {self.problem_name}, p={self.p}
  Angles:   γ={np.round(self.gammas, 4).tolist()}, β={np.round(self.betas, 4).tolist()}
  Expected cut: {self.expected_cut:.4f} (optimum {optimum}, ratio {ratio})
  Most likely:  {self.most_likely_bitstring} (P={self.most_likely_probability:.3f}, cut={self.most_likely_cut:g})
  Evals={self.n_evaluations}, Success: {self.success}
)"""


@dataclass
class LandscapeResult:
    """Expected cut on a (γ, β) grid for p=1."""
    gammas: np.ndarray
    betas: np.ndarray
    values: np.ndarray  # shape (len(betas), len(gammas))

    @property
    def best(self) -> Tuple[float, float, float]:
        """(γ, β, expected cut) at the best grid point."""
        i, j = np.unravel_index(int(np.argmax(self.values)), self.values.shape)
        return float(self.gammas[j]), float(self.betas[i]), float(self.values[i, j])


# =============================================================================
# STARTING POINTS
# =============================================================================

def angle_bounds(p: int) -> List[Tuple[float, float]]:
    return [GAMMA_BOUNDS] * p + [BETA_BOUNDS] * p


def random_initial_point(p: int, rng: np.random.Generator) -> np.ndarray:
    gammas = rng.uniform(*GAMMA_BOUNDS, size=p)
    betas = rng.uniform(*BETA_BOUNDS, size=p)
    return np.concatenate([gammas, betas])


def interp_initial_point(gammas: Sequence[float], betas: Sequence[float]) -> np.ndarray:
    """
    INTERP warm start for depth p+1 from depth-p angles.

        x'_i = (i-1)/p · x_{i-1} + (p-i+1)/p · x_i,   i = 1..p+1

    with x_0 = x_{p+1} = 0. Applied to γ and β separately.
    """
    def interp(x):
        x = np.asarray(x, dtype=float)
        p = x.size
        padded = np.concatenate([[0.0], x, [0.0]])
        return np.array([
            (i - 1) / p * padded[i - 1] + (p - i + 1) / p * padded[i]
            for i in range(1, p + 2)
        ])
    return np.concatenate([interp(gammas), interp(betas)])


def zero_padded_initial_point(gammas: Sequence[float], betas: Sequence[float]) -> np.ndarray:
    """Depth-p angles with an extra (0, 0) layer: the same state at depth p+1."""
    return np.concatenate([np.append(gammas, 0.0), np.append(betas, 0.0)])


# =============================================================================
# OPTIMIZATION
# =============================================================================

def optimize_qaoa(
    problem: MaxCutProblem,
    config: Optional[QAOAConfig] = None,
    initial_points: Optional[Sequence[Sequence[float]]] = None,
    cache: Optional[EvaluationCache] = None,
    verbose: bool = False,
) -> QAOAResult:
    """
    Optimise the QAOA angles for one problem at a fixed depth.

    Parameters
    ----------
    problem : MaxCutProblem
        Graph to cut.
    config : QAOAConfig, optional
        Depth and optimizer settings (``get_default_qaoa_config()`` if None).
    initial_points : sequence of flat parameter vectors, optional
        Starting points tried first; random points fill up to
        ``config.n_restarts`` runs.
    cache : EvaluationCache, optional
        Memoises expected-cut evaluations across calls.
    verbose : bool
        Print progress.

    Returns
    -------
    QAOAResult
        Built from the best point evaluated during the whole search, which
        is at least as good as every supplied starting point.

    Raises
    ------
    ValueError
        If a starting point has the wrong length or the method is unknown.
    RuntimeError
        If every optimizer run failed.
    """
    config = config or get_default_qaoa_config()
    ansatz = QAOAAnsatz(problem, p=config.p)
    rng = np.random.default_rng(config.seed)
    bounds = angle_bounds(config.p)

    starts = [np.asarray(x, dtype=float).ravel() for x in (initial_points or [])]
    for x in starts:
        if x.size != ansatz.n_params:
            raise ValueError(f"Initial point has {x.size} values, expected {ansatz.n_params}")
    while len(starts) < max(config.n_restarts, 1):
        starts.append(random_initial_point(config.p, rng))

    eval_count = [0]
    best = {"value": -np.inf, "params": None}
    history: List[float] = []
    t_start = time.time()

    def objective(params: np.ndarray) -> float:
        """Negative expected cut (SciPy minimises)."""
        eval_count[0] += 1
        key = cache.make_key(problem, params) if cache is not None else None
        if key is not None and key in cache:
            value = cache[key]
        else:
            if cache is not None:
                cache.misses += 1
            value = ansatz.expectation(params)
            if key is not None:
                cache[key] = value

        history.append(value)
        if value > best["value"]:
            best["value"] = value
            best["params"] = np.array(params, dtype=float)
        return -value

    if verbose:
        print(f"QAOA on {problem.name}: n={problem.n_nodes}, |E|={len(problem.edges)}, "
              f"p={config.p}, method={config.method}, runs={len(starts)}")

    # Evaluate every supplied start so the result can never be worse than one
    for x in starts[:len(initial_points or [])]:
        objective(x)

    successes = []
    messages = []
    if config.method == "differential_evolution":
        res = differential_evolution(
            objective, bounds, maxiter=config.maxiter, tol=config.tol,
            seed=config.seed, polish=True,
        )
        successes.append(bool(res.success))
        messages.append(str(res.message))
    else:
        kwargs = {"method": config.method, "tol": config.tol,
                  "options": {"maxiter": config.maxiter}}
        if config.method in BOUNDED_METHODS:
            kwargs["bounds"] = bounds
        for run, x0 in enumerate(starts):
            try:
                res = minimize(objective, x0, **kwargs)
            except (ValueError, ArithmeticError, np.linalg.LinAlgError) as e:
                warnings.warn(f"QAOA run {run} failed: {e}")
                continue
            successes.append(bool(res.success))
            messages.append(str(res.message))
            if verbose:
                print(f"  [run {run:2d}] F={-res.fun:.6f}  evals={res.nfev}  best={best['value']:.6f}")

    if best["params"] is None:
        raise RuntimeError(f"All QAOA optimizer runs failed for {problem.name}")

    params = best["params"]
    gammas, betas = ansatz.split_params(params)
    expected = float(best["value"])

    optimal_cut = None
    ratio = None
    if problem.n_nodes <= MAX_BRUTE_FORCE_NODES:
        optimal_cut, _ = problem.brute_force()
        ratio = expected / optimal_cut if optimal_cut > 0 else None

    bitstring, probability = ansatz.most_likely(params)
    counts = ansatz.sample(params, config.shots, seed=config.seed) if config.shots > 0 else {}

    result = QAOAResult(
        problem_name=problem.name,
        p=config.p,
        gammas=gammas,
        betas=betas,
        expected_cut=expected,
        optimal_cut=optimal_cut,
        approximation_ratio=ratio,
        most_likely_bitstring=bitstring,
        most_likely_probability=probability,
        most_likely_cut=problem.cut_value(bitstring),
        n_evaluations=eval_count[0],
        success=any(successes) if successes else False,
        message=messages[-1] if messages else "no optimizer runs completed",
        runtime_seconds=time.time() - t_start,
        counts=counts,
        history=history,
    )

    if verbose:
        print(result)
    return result


def optimize_layerwise(
    problem: MaxCutProblem,
    p_max: int,
    config: Optional[QAOAConfig] = None,
    cache: Optional[EvaluationCache] = None,
    verbose: bool = False,
) -> List[QAOAResult]:
    """
    Optimise depths 1..p_max, warm-starting each depth from the previous.

    Depth 1 uses ``config`` as given (random restarts). Each deeper level
    starts from the INTERP and zero-padded extensions of the previous
    optimum, topped up with random starts to ``config.n_restarts``.

    Returns
    -------
    List[QAOAResult]
        One result per depth; ``expected_cut`` is non-decreasing in p.
    """
    if p_max < 1:
        raise ValueError(f"p_max must be at least 1, got {p_max}")
    config = config or get_default_qaoa_config()

    results = [optimize_qaoa(problem, config.with_depth(1), cache=cache, verbose=verbose)]
    for p in range(2, p_max + 1):
        prev = results[-1]
        starts = [
            interp_initial_point(prev.gammas, prev.betas),
            zero_padded_initial_point(prev.gammas, prev.betas),
        ]
        results.append(optimize_qaoa(problem, config.with_depth(p), initial_points=starts,
                                     cache=cache, verbose=verbose))
    return results


def explore_landscape(
    problem: MaxCutProblem,
    n_gamma: int = 50,
    n_beta: int = 50,
    gamma_range: Tuple[float, float] = (0.0, np.pi),
    beta_range: Tuple[float, float] = (0.0, np.pi / 2),
) -> LandscapeResult:
    """
    Evaluate the p=1 expected cut on a regular (γ, β) grid.

    The default window covers one symmetry cell for unweighted graphs.
    """
    ansatz = QAOAAnsatz(problem, p=1)
    gammas = np.linspace(*gamma_range, n_gamma)
    betas = np.linspace(*beta_range, n_beta)
    values = np.empty((n_beta, n_gamma))
    for i, beta in enumerate(betas):
        for j, gamma in enumerate(gammas):
            values[i, j] = ansatz.expectation([gamma, beta])
    return LandscapeResult(gammas=gammas, betas=betas, values=values)


def format_summary(results: Sequence[QAOAResult]) -> str:
    """Table of depth vs expected cut / approximation ratio."""
    lines = [
        f"  {'p':>3} {'<C>':>10} {'optimum':>9} {'ratio':>8} {'best z':>12} {'P(z)':>7} {'evals':>7}",
        "-" * 64,
    ]
    for r in results:
        optimum = f"{r.optimal_cut:9g}" if r.optimal_cut is not None else f"{'n/a':>9}"
        ratio = f"{r.approximation_ratio:8.4f}" if r.approximation_ratio is not None else f"{'n/a':>8}"
        lines.append(
            f"  {r.p:>3} {r.expected_cut:10.4f} {optimum} {ratio} "
            f"{r.most_likely_bitstring:>12} {r.most_likely_probability:7.3f} {r.n_evaluations:>7}"
        )
    return "\n".join(lines)


# =============================================================================
# COMMAND LINE
# =============================================================================

def build_problem(graph: str, nodes: int, degree: int = 3, prob: float = 0.5,
                  seed: Optional[int] = None) -> MaxCutProblem:
    """Named graph families used by the walkthrough."""
    if graph == "ring":
        return MaxCutProblem.ring(nodes)
    if graph == "complete":
        return MaxCutProblem.complete(nodes)
    if graph == "regular":
        return MaxCutProblem.random_regular(nodes, degree, seed=seed)
    if graph == "gnp":
        return MaxCutProblem.erdos_renyi(nodes, prob, seed=seed)
    raise ValueError(f"Unknown graph family: {graph}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the MaxCut QAOA walkthrough from the command line."""
    parser = argparse.ArgumentParser(prog="portfolio-qaoa", description="MaxCut QAOA walkthrough")
    parser.add_argument("--graph", default="ring", choices=["ring", "complete", "regular", "gnp"],
                        help="Graph family (default: ring)")
    parser.add_argument("--nodes", type=int, default=6, help="Number of nodes (default: 6)")
    parser.add_argument("--degree", type=int, default=3, help="Degree for --graph regular (default: 3)")
    parser.add_argument("--prob", type=float, default=0.5, help="Edge probability for --graph gnp")
    parser.add_argument("--p", type=int, default=1, help="QAOA depth (default: 1)")
    parser.add_argument("--layerwise", action="store_true",
                        help="Optimise depths 1..p with warm starts")
    parser.add_argument("--method", default="COBYLA",
                        help="scipy minimize method or differential_evolution (default: COBYLA)")
    parser.add_argument("--restarts", type=int, default=10, help="Optimizer runs per depth (default: 10)")
    parser.add_argument("--maxiter", type=int, default=500, help="Max iterations per run (default: 500)")
    parser.add_argument("--seed", type=int, default=1234, help="Random seed (default: 1234)")
    parser.add_argument("--shots", type=int, default=1024, help="Measurement shots (default: 1024)")
    parser.add_argument("--cache", default=None, help="JSON file for the evaluation cache")
    parser.add_argument("--verbose", action="store_true", help="Print per-run progress")
    args = parser.parse_args(argv)
    if args.p < 1:
        parser.error(f"--p must be at least 1, got {args.p}")

    try:
        problem = build_problem(args.graph, args.nodes, args.degree, args.prob, seed=args.seed)
    except ValueError as e:
        parser.error(str(e))

    config = QAOAConfig(p=args.p, method=args.method, maxiter=args.maxiter,
                        n_restarts=args.restarts, seed=args.seed, shots=args.shots)

    cache = None
    if args.cache:
        cache = EvaluationCache()
        cache.load(args.cache)

    print("\n" + "=" * 64)
    print(f"  MaxCut QAOA: {problem.name} ({problem.n_nodes} nodes, {len(problem.edges)} edges)")
    print("=" * 64)

    if args.layerwise:
        results = optimize_layerwise(problem, args.p, config, cache=cache, verbose=args.verbose)
    else:
        results = [optimize_qaoa(problem, config, cache=cache, verbose=args.verbose)]

    print(format_summary(results))
    print("=" * 64)

    if cache is not None:
        cache.save(args.cache)
        print(f"✓ Saved {len(cache)} cached evaluations to {args.cache} (hit rate {cache.hit_rate:.1%})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
