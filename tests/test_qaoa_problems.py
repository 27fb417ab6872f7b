import numpy as np
import pytest

from portfolio_site.qaoa.problems import MaxCutProblem, cut_values, MAX_BRUTE_FORCE_NODES


class TestConstruction:
    def test_edges_are_normalised(self):
        problem = MaxCutProblem(3, [(2, 0), (1, 2, 2)])
        assert problem.edges == [(0, 2, 1.0), (1, 2, 2.0)]
        assert problem.total_weight == 3.0

    @pytest.mark.parametrize("edges", [
        [(0, 3)],
        [(1, 1)],
        [(0, 1), (1, 0)],
        [(0, 1, float("nan"))],
    ])
    def test_invalid_edges(self, edges):
        with pytest.raises(ValueError):
            MaxCutProblem(3, edges)

    def test_from_edge_list_infers_size(self):
        problem = MaxCutProblem.from_edge_list([(0, 1), (1, 4)])
        assert problem.n_nodes == 5
        assert problem.degree(1) == 2
        assert problem.degree(2) == 0

    def test_ring(self):
        ring = MaxCutProblem.ring(5)
        assert ring.name == "ring-5"
        assert len(ring.edges) == 5
        assert all(ring.degree(i) == 2 for i in range(5))
        with pytest.raises(ValueError):
            MaxCutProblem.ring(2)

    def test_complete(self):
        assert len(MaxCutProblem.complete(5).edges) == 10

    def test_random_regular(self):
        problem = MaxCutProblem.random_regular(8, 3, seed=7)
        assert all(problem.degree(i) == 3 for i in range(8))
        assert problem == MaxCutProblem.random_regular(8, 3, seed=7)

    def test_random_regular_impossible(self):
        with pytest.raises(ValueError):
            MaxCutProblem.random_regular(5, 3)

    def test_erdos_renyi_extremes(self):
        assert MaxCutProblem.erdos_renyi(5, 0.0, seed=1).edges == []
        assert len(MaxCutProblem.erdos_renyi(5, 1.0, seed=1).edges) == 10
        with pytest.raises(ValueError):
            MaxCutProblem.erdos_renyi(5, 1.5)


class TestCuts:
    def test_cut_value(self):
        ring = MaxCutProblem.ring(4)
        assert ring.cut_value("0101") == 4
        assert ring.cut_value("0011") == 2
        assert ring.cut_value("0000") == 0

    @pytest.mark.parametrize("bad", ["010", "01a1", "01011"])
    def test_cut_value_rejects_bad_bitstrings(self, bad):
        with pytest.raises(ValueError):
            MaxCutProblem.ring(4).cut_value(bad)

    def test_cut_values_match_bitstrings(self):
        problem = MaxCutProblem(3, [(0, 1, 1.0), (1, 2, 0.5)])
        values = cut_values(problem)
        for i, value in enumerate(values):
            assert value == problem.cut_value(format(i, "03b"))
        # node 0 is the most significant bit
        assert values[0b100] == 1.0

    @pytest.mark.parametrize("problem, best", [
        (MaxCutProblem.complete(3), 2),
        (MaxCutProblem.ring(4), 4),
        (MaxCutProblem.ring(5), 4),
        (MaxCutProblem.complete(4), 4),
    ])
    def test_brute_force(self, problem, best):
        value, bitstrings = problem.brute_force()
        assert value == best
        for z in bitstrings:
            assert problem.cut_value(z) == best
            complement = "".join("1" if c == "0" else "0" for c in z)
            assert complement in bitstrings

    def test_brute_force_refuses_large_graphs(self):
        with pytest.raises(ValueError):
            MaxCutProblem(MAX_BRUTE_FORCE_NODES + 1).brute_force()

    def test_edgeless_graph(self):
        value, bitstrings = MaxCutProblem(2).brute_force()
        assert value == 0
        assert len(bitstrings) == 4
        assert np.all(cut_values(MaxCutProblem(2)) == 0)
