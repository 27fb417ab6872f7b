"""
Test Suite: Angle Optimisation
==============================

Small graphs whose optima are known in closed form:
- single edge: <C> = 1 at p = 1
- 2-regular, triangle-free rings: ratio 3/4 at p = 1

Layerwise runs must never lose expected cut when a layer is added.
"""

import json

import numpy as np
import pytest

from portfolio_site.qaoa.problems import MaxCutProblem
from portfolio_site.qaoa.ansatz import QAOAAnsatz
from portfolio_site.qaoa.optimization import (
    QAOAConfig,
    EvaluationCache,
    get_default_qaoa_config,
    optimize_qaoa,
    optimize_layerwise,
    explore_landscape,
    interp_initial_point,
    zero_padded_initial_point,
    format_summary,
    build_problem,
    main,
)


def quick_config(p=1, **kwargs):
    config = QAOAConfig(p=p, n_restarts=3, maxiter=300, seed=11, shots=200)
    for key, value in kwargs.items():
        setattr(config, key, value)
    return config


class TestConfig:
    def test_default_config(self):
        config = get_default_qaoa_config(p=3)
        assert config.p == 3
        assert config.method == "COBYLA"
        assert config.seed == 1234

    def test_with_depth_keeps_settings(self):
        config = quick_config(method="Nelder-Mead").with_depth(4)
        assert config.p == 4
        assert config.method == "Nelder-Mead"
        assert config.n_restarts == 3


class TestWarmStarts:
    def test_interp_from_depth_one(self):
        # p=1 -> 2: x'_1 = x_1, x'_2 = x_1
        x = interp_initial_point([0.4], [0.2])
        assert np.allclose(x, [0.4, 0.4, 0.2, 0.2])

    def test_interp_from_depth_two(self):
        x = interp_initial_point([0.2, 0.6], [0.5, 0.1])
        assert np.allclose(x[:3], [0.2, 0.4, 0.6])
        assert np.allclose(x[3:], [0.5, 0.3, 0.1])

    def test_zero_padding_preserves_the_state(self):
        problem = MaxCutProblem.ring(4)
        shallow = QAOAAnsatz(problem, p=1).expectation([0.5, 0.3])
        deep = QAOAAnsatz(problem, p=2).expectation(zero_padded_initial_point([0.5], [0.3]))
        assert deep == pytest.approx(shallow)


class TestOptimize:
    def test_single_edge(self):
        result = optimize_qaoa(MaxCutProblem(2, [(0, 1)]), quick_config())
        assert result.expected_cut == pytest.approx(1.0, abs=1e-3)
        assert result.approximation_ratio == pytest.approx(1.0, abs=1e-3)
        assert result.most_likely_bitstring in ("01", "10")
        assert result.most_likely_cut == 1

    def test_ring_p1_reaches_three_quarters(self):
        result = optimize_qaoa(MaxCutProblem.ring(4), quick_config())
        assert result.optimal_cut == 4
        assert result.expected_cut == pytest.approx(3.0, abs=1e-2)
        assert result.approximation_ratio == pytest.approx(0.75, abs=1e-2)

    def test_result_fields(self):
        problem = MaxCutProblem.ring(4)
        result = optimize_qaoa(problem, quick_config(p=2))
        assert result.p == 2
        assert result.gammas.shape == (2,) and result.betas.shape == (2,)
        assert result.params.shape == (4,)
        assert sum(result.counts.values()) == 200
        assert result.n_evaluations == len(result.history)
        assert max(result.history) == pytest.approx(result.expected_cut)
        assert QAOAAnsatz(problem, 2).expectation(result.params) == pytest.approx(result.expected_cut)
        assert "ring-4, p=2" in repr(result)

    def test_never_worse_than_a_supplied_start(self):
        problem = MaxCutProblem.ring(4)
        start = [np.pi / 4, np.pi / 8]
        start_value = QAOAAnsatz(problem, 1).expectation(start)
        result = optimize_qaoa(problem, quick_config(n_restarts=1, maxiter=20), initial_points=[start])
        assert result.expected_cut >= start_value - 1e-12

    def test_wrong_start_length(self):
        with pytest.raises(ValueError):
            optimize_qaoa(MaxCutProblem.ring(4), quick_config(), initial_points=[[0.1, 0.2, 0.3]])

    def test_bounded_method(self):
        result = optimize_qaoa(MaxCutProblem.ring(4), quick_config(method="L-BFGS-B"))
        assert np.all(result.gammas >= 0) and np.all(result.gammas <= 2 * np.pi)
        assert np.all(result.betas >= 0) and np.all(result.betas <= np.pi)

    def test_differential_evolution(self):
        result = optimize_qaoa(MaxCutProblem.ring(4), quick_config(method="differential_evolution", maxiter=30))
        assert result.expected_cut == pytest.approx(3.0, abs=1e-2)

    def test_no_ratio_without_edges(self):
        result = optimize_qaoa(MaxCutProblem(2), quick_config(n_restarts=1, shots=0))
        assert result.expected_cut == 0
        assert result.approximation_ratio is None
        assert result.counts == {}

    def test_layerwise_is_monotone(self):
        results = optimize_layerwise(MaxCutProblem.ring(6), 3, quick_config())
        assert [r.p for r in results] == [1, 2, 3]
        cuts = [r.expected_cut for r in results]
        assert all(b >= a - 1e-9 for a, b in zip(cuts, cuts[1:]))
        assert cuts[0] == pytest.approx(4.5, abs=1e-2)

    def test_layerwise_rejects_zero_depth(self):
        with pytest.raises(ValueError):
            optimize_layerwise(MaxCutProblem.ring(4), 0)

    def test_format_summary(self):
        results = optimize_layerwise(MaxCutProblem.ring(4), 2, quick_config())
        lines = format_summary(results).splitlines()
        assert len(lines) == 4
        assert lines[2].split()[0] == "1"
        assert lines[3].split()[0] == "2"


class TestCache:
    def test_second_run_hits_the_cache(self):
        problem = MaxCutProblem.ring(4)
        cache = EvaluationCache()
        first = optimize_qaoa(problem, quick_config(), cache=cache)
        misses = cache.misses
        assert cache.hits < first.n_evaluations

        second = optimize_qaoa(problem, quick_config(), cache=cache)
        assert cache.misses == misses
        assert cache.hits >= second.n_evaluations
        assert second.expected_cut == pytest.approx(first.expected_cut)
        assert 0 < cache.hit_rate <= 1

    def test_save_and_load(self, tmp_path):
        path = str(tmp_path / "cache.json")
        cache = EvaluationCache(precision=6)
        problem = MaxCutProblem.ring(4)
        key = cache.make_key(problem, [0.1234567, 0.2])
        cache[key] = 2.5
        cache.save(path)

        with open(path) as f:
            assert json.load(f)["precision"] == 6

        loaded = EvaluationCache()
        loaded.load(path)
        assert loaded.precision == 6
        assert len(loaded) == 1
        assert loaded[loaded.make_key(problem, [0.1234568, 0.2])] == 2.5

    def test_load_missing_file(self, tmp_path):
        cache = EvaluationCache()
        cache.load(str(tmp_path / "nope.json"))
        assert len(cache) == 0

    def test_key_depends_on_graph(self):
        cache = EvaluationCache()
        params = [0.1, 0.2]
        assert cache.make_key(MaxCutProblem.ring(4), params) != \
            cache.make_key(MaxCutProblem(4, [(0, 1), (2, 3)]), params)

    def test_key_ignores_name_but_not_weights_or_depth(self):
        cache = EvaluationCache()
        ring = MaxCutProblem.ring(4)
        renamed = MaxCutProblem(4, ring.edges, name="square")
        assert cache.make_key(ring, [0.1, 0.2]) == cache.make_key(renamed, [0.1, 0.2])
        assert cache.make_key(ring, [0.1, 0.2]) != cache.make_key(MaxCutProblem.ring(4, weight=2.0), [0.1, 0.2])
        assert cache.make_key(ring, [0.1, 0.2]) != cache.make_key(ring, [0.1, 0.1, 0.2, 0.2])


class TestLandscape:
    def test_shape_and_best(self):
        problem = MaxCutProblem.ring(4)
        landscape = explore_landscape(problem, n_gamma=9, n_beta=5)
        assert landscape.values.shape == (5, 9)
        gamma, beta, value = landscape.best
        assert value == landscape.values.max()
        assert QAOAAnsatz(problem, 1).expectation([gamma, beta]) == pytest.approx(value)
        assert value <= 3.0 + 1e-9


class TestCommandLine:
    def test_build_problem(self):
        assert build_problem("ring", 5).name == "ring-5"
        assert len(build_problem("complete", 4).edges) == 6
        assert all(d == 3 for d in map(build_problem("regular", 6, seed=1).degree, range(6)))
        with pytest.raises(ValueError):
            build_problem("star", 4)

    def test_main_layerwise_with_cache(self, tmp_path, capsys):
        cache_path = tmp_path / "cache.json"
        argv = ["--graph", "ring", "--nodes", "4", "--p", "2", "--layerwise",
                "--restarts", "2", "--maxiter", "100", "--cache", str(cache_path)]
        assert main(argv) == 0
        out = capsys.readouterr().out
        assert "ring-4" in out
        assert cache_path.exists()

    def test_main_rejects_impossible_graph(self):
        with pytest.raises(SystemExit) as excinfo:
            main(["--graph", "regular", "--nodes", "5", "--degree", "3"])
        assert excinfo.value.code == 2

    def test_main_rejects_zero_depth(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["--p", "0"])
        assert excinfo.value.code == 2
        assert "--p must be at least 1" in capsys.readouterr().err
