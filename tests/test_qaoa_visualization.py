import matplotlib.pyplot as plt
import pytest

from portfolio_site.qaoa.problems import MaxCutProblem
from portfolio_site.qaoa.ansatz import QAOAAnsatz
from portfolio_site.qaoa.optimization import QAOAConfig, optimize_layerwise, explore_landscape
from portfolio_site.qaoa.visualization import (
    plot_landscape,
    plot_probabilities,
    plot_depth_sweep,
    plot_convergence,
)


@pytest.fixture(scope="module")
def sweep():
    config = QAOAConfig(n_restarts=2, maxiter=100, seed=5, shots=0)
    return optimize_layerwise(MaxCutProblem.ring(4), 2, config)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


def test_plot_landscape():
    landscape = explore_landscape(MaxCutProblem.ring(4), n_gamma=6, n_beta=4)
    ax = plot_landscape(landscape, title="ring")
    assert ax.get_title() == "ring"
    assert ax.get_xlabel() == "γ"


def test_plot_probabilities_marks_optimal_cuts():
    problem = MaxCutProblem.ring(4)
    probs = QAOAAnsatz(problem, 1).probabilities([0.6, 0.4])
    ax = plot_probabilities(probs, problem=problem, top_k=5)
    assert len(ax.patches) == 5


def test_plot_probabilities_empty(capsys):
    assert plot_probabilities({}) is None
    assert "No probabilities" in capsys.readouterr().out


def test_plot_depth_sweep(sweep):
    ax = plot_depth_sweep(sweep)
    x, y = ax.lines[0].get_data()
    assert list(x) == [1, 2]
    assert y[0] == pytest.approx(0.75, abs=1e-2)


def test_plot_convergence(sweep):
    ax = plot_convergence(sweep[0])
    assert len(ax.lines[0].get_xdata()) == sweep[0].n_evaluations
