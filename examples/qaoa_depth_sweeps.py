#!/usr/bin/env python3
"""
QAOA Depth Sweeps for the Walkthrough Post
==========================================

Generates the figures used in the "QAOA notebook walkthrough" post:

1. p = 1 landscape of the 6-node ring
2. Measurement distribution at the optimized p = 1 angles
3. Approximation ratio vs depth for rings of several sizes
4. Approximation ratio vs depth for random 3-regular graphs
5. Optimizer convergence trace

Figures are written to ``figures/`` next to this script.
"""

import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from pathlib import Path
from dataclasses import dataclass
from typing import List

from portfolio_site.qaoa import (
    MaxCutProblem,
    QAOAAnsatz,
    QAOAResult,
    get_default_qaoa_config,
    optimize_qaoa,
    optimize_layerwise,
    explore_landscape,
    format_summary,
)
from portfolio_site.qaoa.visualization import (
    plot_landscape,
    plot_probabilities,
    plot_depth_sweep,
    plot_convergence,
)


@dataclass
class SweepResult:
    """Container for one depth sweep"""
    label: str
    depths: np.ndarray
    ratios: np.ndarray
    expected_cuts: np.ndarray
    results: List[QAOAResult]


def run_depth_sweep(problem: MaxCutProblem, p_max: int, restarts: int = 6) -> SweepResult:
    """Layerwise optimisation up to p_max"""
    config = get_default_qaoa_config()
    config.n_restarts = restarts

    print(f"\nSweeping depth for {problem.name} (p = 1..{p_max})...")
    results = optimize_layerwise(problem, p_max, config)
    print(format_summary(results))

    return SweepResult(
        label=problem.name,
        depths=np.array([r.p for r in results]),
        ratios=np.array([r.approximation_ratio for r in results]),
        expected_cuts=np.array([r.expected_cut for r in results]),
        results=results,
    )


def main():
    output_dir = Path(__file__).parent / "figures"
    output_dir.mkdir(exist_ok=True)

    ring = MaxCutProblem.ring(6)

    # 1. Landscape
    print("\n" + "=" * 40)
    print("1. p = 1 Landscape (6-node ring)")
    print("=" * 40)
    landscape = explore_landscape(ring, n_gamma=80, n_beta=80)
    gamma, beta, value = landscape.best
    print(f"  best grid point: γ={gamma:.3f}, β={beta:.3f}, ⟨C⟩={value:.4f}")
    fig, ax = plt.subplots(figsize=(7, 5.5))
    plot_landscape(landscape, ax=ax, title="6-node ring, p = 1")
    plt.savefig(output_dir / "01_landscape_ring6.png", dpi=150, bbox_inches='tight')
    plt.close(fig)

    # 2. Distribution at the p = 1 optimum
    print("\n" + "=" * 40)
    print("2. Measurement Distribution")
    print("=" * 40)
    result = optimize_qaoa(ring, get_default_qaoa_config(p=1))
    print(result)
    probs = QAOAAnsatz(ring, p=1).probabilities(result.params)
    fig, ax = plt.subplots(figsize=(10, 5))
    plot_probabilities(probs, problem=ring, ax=ax, title="6-node ring, p = 1 optimum")
    plt.savefig(output_dir / "02_distribution_ring6.png", dpi=150, bbox_inches='tight')
    plt.close(fig)

    # 3. Rings of several sizes
    print("\n" + "=" * 40)
    print("3. Depth Sweep: Rings")
    print("=" * 40)
    fig, ax = plt.subplots(figsize=(7, 5))
    for n in (4, 6, 8):
        sweep = run_depth_sweep(MaxCutProblem.ring(n), p_max=4)
        plot_depth_sweep(sweep.results, ax=ax, label=sweep.label)
    ax.set_title("Rings: approximation ratio vs depth")
    plt.savefig(output_dir / "03_depth_sweep_rings.png", dpi=150, bbox_inches='tight')
    plt.close(fig)

    # 4. Random 3-regular graphs
    print("\n" + "=" * 40)
    print("4. Depth Sweep: Random 3-Regular Graphs")
    print("=" * 40)
    fig, ax = plt.subplots(figsize=(7, 5))
    for seed in (1, 2, 3):
        problem = MaxCutProblem.random_regular(8, 3, seed=seed)
        sweep = run_depth_sweep(problem, p_max=3)
        plot_depth_sweep(sweep.results, ax=ax, label=f"seed {seed}")
    ax.set_title("3-regular, n = 8: approximation ratio vs depth")
    plt.savefig(output_dir / "04_depth_sweep_3regular.png", dpi=150, bbox_inches='tight')
    plt.close(fig)

    # 5. Convergence
    print("\n" + "=" * 40)
    print("5. Optimizer Convergence")
    print("=" * 40)
    fig, ax = plt.subplots(figsize=(7, 4))
    plot_convergence(result, ax=ax)
    plt.savefig(output_dir / "05_convergence_ring6.png", dpi=150, bbox_inches='tight')
    plt.close(fig)

    print("\n" + "=" * 60)
    print("All figures saved to:", output_dir)
    print("=" * 60)

    print("\nGenerated files:")
    for f in sorted(output_dir.glob("*.png")):
        print(f"  - {f.name}")


if __name__ == "__main__":
    main()
