"""
QAOA Visualization Tools
========================

Figures used in the walkthrough post.

Key Functions
-------------
- plot_landscape(): heatmap of the p=1 expected cut over (γ, β)
- plot_probabilities(): bar chart of the most probable bitstrings, coloured by cut value
- plot_depth_sweep(): approximation ratio vs depth p
- plot_convergence(): expected cut per objective evaluation
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

import numpy as np
import matplotlib.pyplot as plt

from .optimization import LandscapeResult, QAOAResult
from .problems import MaxCutProblem


def plot_landscape(
    landscape: LandscapeResult,
    ax: Optional[plt.Axes] = None,
    title: Optional[str] = None,
    figsize: Tuple[float, float] = (7, 5.5),
    cmap: str = "viridis",
    mark_best: bool = True,
) -> plt.Axes:
    """
    Heatmap of the p=1 expected cut.

    Parameters
    ----------
    landscape : LandscapeResult
        Output of ``explore_landscape``.
    ax : plt.Axes, optional
        Axes to plot on. If None, creates new figure.
    title : str, optional
        Plot title.
    mark_best : bool
        Mark the best grid point with a star.

    Returns
    -------
    plt.Axes
        The axes with the plot
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)

    mesh = ax.pcolormesh(landscape.gammas, landscape.betas, landscape.values,
                         shading="auto", cmap=cmap)
    plt.colorbar(mesh, ax=ax, label="⟨C⟩")

    if mark_best:
        gamma, beta, value = landscape.best
        ax.plot(gamma, beta, marker="*", color="white", markersize=14,
                markeredgecolor="black", label=f"best ⟨C⟩={value:.3f}")
        ax.legend(loc="upper right")

    ax.set_xlabel("γ")
    ax.set_ylabel("β")
    ax.set_title(title or "p = 1 QAOA landscape")
    return ax


def plot_probabilities(
    probabilities: Dict[str, float],
    problem: Optional[MaxCutProblem] = None,
    top_k: int = 16,
    ax: Optional[plt.Axes] = None,
    title: Optional[str] = None,
    figsize: Tuple[float, float] = (10, 5),
    cmap: str = "plasma",
) -> plt.Axes:
    """
    Bar chart of the ``top_k`` most probable bitstrings.

    If ``problem`` is given, bars are coloured by the cut value of each
    bitstring and optimal cuts are outlined.
    """
    if not probabilities:
        print("No probabilities to plot!")
        return None

    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)

    items = sorted(probabilities.items(), key=lambda kv: kv[1], reverse=True)[:top_k]
    labels = [k for k, _ in items]
    values = np.array([v for _, v in items])

    if problem is not None:
        cuts = np.array([problem.cut_value(b) for b in labels])
        best, _ = problem.brute_force()
        norm = plt.Normalize(vmin=0, vmax=max(best, 1e-12))
        colors = plt.get_cmap(cmap)(norm(cuts))
        bars = ax.bar(labels, values, color=colors)
        for bar, cut in zip(bars, cuts):
            if np.isclose(cut, best):
                bar.set_edgecolor("black")
                bar.set_linewidth(2)
        sm = plt.cm.ScalarMappable(norm=norm, cmap=cmap)
        plt.colorbar(sm, ax=ax, label="cut value")
    else:
        ax.bar(labels, values, color="#6495ED")

    ax.set_xlabel("bitstring")
    ax.set_ylabel("probability")
    ax.set_title(title or "Measurement distribution")
    ax.tick_params(axis="x", rotation=60)
    ax.grid(axis="y", linestyle="--", alpha=0.7)
    return ax


def plot_depth_sweep(
    results: Sequence[QAOAResult],
    ax: Optional[plt.Axes] = None,
    label: Optional[str] = None,
    title: Optional[str] = None,
    figsize: Tuple[float, float] = (7, 5),
) -> plt.Axes:
    """Approximation ratio (or expected cut when no optimum is known) against depth."""
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)

    ps = [r.p for r in results]
    have_ratio = all(r.approximation_ratio is not None for r in results)
    ys = [r.approximation_ratio if have_ratio else r.expected_cut for r in results]

    ax.plot(ps, ys, "o-", lw=2, label=label or (results[0].problem_name if results else None))
    if have_ratio:
        ax.axhline(1.0, color="gray", ls="--", alpha=0.6)
        ax.set_ylabel("approximation ratio ⟨C⟩ / C_max")
    else:
        ax.set_ylabel("⟨C⟩")
    ax.set_xlabel("depth p")
    ax.set_xticks(ps)
    ax.set_title(title or "QAOA performance vs depth")
    ax.grid(True, alpha=0.3)
    if label or results:
        ax.legend()
    return ax


def plot_convergence(
    result: QAOAResult,
    ax: Optional[plt.Axes] = None,
    figsize: Tuple[float, float] = (7, 4),
) -> plt.Axes:
    """Expected cut at every objective evaluation plus the running best."""
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)

    history = np.asarray(result.history)
    ax.plot(history, ".", ms=2, alpha=0.4, label="evaluation")
    ax.plot(np.maximum.accumulate(history), lw=2, label="best so far")
    if result.optimal_cut is not None:
        ax.axhline(result.optimal_cut, color="gray", ls="--", label="MaxCut optimum")
    ax.set_xlabel("objective evaluation")
    ax.set_ylabel("⟨C⟩")
    ax.set_title(f"{result.problem_name}, p = {result.p}")
    ax.legend()
    return ax
