"""
MaxCut Problem Instances
========================

MaxCut on a weighted graph G = (V, E, w): split the nodes into two sets so
that the total weight of edges crossing the split is as large as possible.

A split is a bitstring z ∈ {0,1}^n (node i is on side z_i) and its cut value
is

    C(z) = Σ_{(u,v) ∈ E} w_uv [z_u ≠ z_v]

Bitstring convention: character i of the string is node i, so "0110" puts
nodes 1 and 2 on one side and nodes 0 and 3 on the other. The same
convention is used for qubit ordering in the Hamiltonians (qubit 0 is the
leftmost tensor factor).

MaxCut is NP-hard in general; ``brute_force`` enumerates all 2^n splits and
is only meant for the small walkthrough instances (n ≤ 20).
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple

import numpy as np


MAX_BRUTE_FORCE_NODES = 20

Edge = Tuple[int, int, float]


@dataclass
class MaxCutProblem:
    """
    A weighted MaxCut instance.

    Attributes
    ----------
    n_nodes : int
        Number of nodes (= qubits).
    edges : List[Tuple[int, int, float]]
        Edges as (u, v, weight) with u < v after construction.
    name : str
        Label used in printed summaries and plot titles.

    Raises
    ------
    ValueError
        On a node index out of range, a self-loop, a repeated edge or a
        non-finite weight.
    """
    n_nodes: int
    edges: List[Edge] = field(default_factory=list)
    name: str = "graph"

    def __post_init__(self):
        if self.n_nodes < 1:
            raise ValueError(f"n_nodes must be positive, got {self.n_nodes}")

        normalized = []
        seen = set()
        for edge in self.edges:
            if len(edge) == 2:
                u, v = edge
                w = 1.0
            else:
                u, v, w = edge
            u, v, w = int(u), int(v), float(w)
            if not (0 <= u < self.n_nodes and 0 <= v < self.n_nodes):
                raise ValueError(f"Edge ({u}, {v}) has a node outside 0..{self.n_nodes - 1}")
            if u == v:
                raise ValueError(f"Self-loop on node {u} is not allowed")
            if not np.isfinite(w):
                raise ValueError(f"Edge ({u}, {v}) has non-finite weight {w}")
            key = (min(u, v), max(u, v))
            if key in seen:
                raise ValueError(f"Duplicate edge {key}")
            seen.add(key)
            normalized.append((key[0], key[1], w))
        self.edges = normalized

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def from_edge_list(cls, edges: Iterable[Sequence], n_nodes: int = None, name: str = "graph"):
        """Build from (u, v) or (u, v, w) tuples; ``n_nodes`` defaults to max index + 1."""
        edges = [tuple(e) for e in edges]
        if n_nodes is None:
            n_nodes = 1 + max((max(e[0], e[1]) for e in edges), default=0)
        return cls(n_nodes=n_nodes, edges=edges, name=name)

    @classmethod
    def ring(cls, n: int, weight: float = 1.0):
        """Cycle graph C_n (the "ring of disagrees")."""
        if n < 3:
            raise ValueError(f"A ring needs at least 3 nodes, got {n}")
        return cls(n, [(i, (i + 1) % n, weight) for i in range(n)], name=f"ring-{n}")

    @classmethod
    def complete(cls, n: int, weight: float = 1.0):
        """Complete graph K_n."""
        return cls(n, [(u, v, weight) for u, v in itertools.combinations(range(n), 2)],
                   name=f"complete-{n}")

    @classmethod
    def random_regular(cls, n: int, d: int, seed: int = None, max_tries: int = 1000):
        """
        Random d-regular graph via the configuration model with rejection.

        Raises
        ------
        ValueError
            If n*d is odd, d >= n, or no simple graph was drawn in
            ``max_tries`` attempts.
        """
        if (n * d) % 2 != 0 or d >= n or d < 1:
            raise ValueError(f"No simple {d}-regular graph on {n} nodes")
        rng = np.random.default_rng(seed)
        stubs = np.repeat(np.arange(n), d)
        for _ in range(max_tries):
            rng.shuffle(stubs)
            pairs = stubs.reshape(-1, 2)
            if np.any(pairs[:, 0] == pairs[:, 1]):
                continue
            keys = {(int(min(a, b)), int(max(a, b))) for a, b in pairs}
            if len(keys) != len(pairs):
                continue
            return cls(n, [(u, v, 1.0) for u, v in sorted(keys)], name=f"{d}-regular-{n}")
        raise ValueError(f"Failed to draw a simple {d}-regular graph on {n} nodes")

    @classmethod
    def erdos_renyi(cls, n: int, prob: float, seed: int = None, weighted: bool = False):
        """G(n, p) random graph; weights uniform in [0.5, 1.5] if ``weighted``."""
        if not 0.0 <= prob <= 1.0:
            raise ValueError(f"Edge probability must be in [0, 1], got {prob}")
        rng = np.random.default_rng(seed)
        edges = []
        for u, v in itertools.combinations(range(n), 2):
            if rng.random() < prob:
                w = float(rng.uniform(0.5, 1.5)) if weighted else 1.0
                edges.append((u, v, w))
        return cls(n, edges, name=f"gnp-{n}-{prob:g}")

    # -------------------------------------------------------------------------
    # Cut values
    # -------------------------------------------------------------------------

    @property
    def total_weight(self) -> float:
        return float(sum(w for _, _, w in self.edges))

    def degree(self, node: int) -> int:
        return sum(1 for u, v, _ in self.edges if node in (u, v))

    def cut_value(self, bitstring: str) -> float:
        """
        Cut value of a split given as a bitstring.

        Raises
        ------
        ValueError
            If the bitstring has the wrong length or characters other than 0/1.
        """
        if len(bitstring) != self.n_nodes or set(bitstring) - {"0", "1"}:
            raise ValueError(f"Expected a {self.n_nodes}-character 0/1 string, got {bitstring!r}")
        return float(sum(w for u, v, w in self.edges if bitstring[u] != bitstring[v]))

    def brute_force(self) -> Tuple[float, List[str]]:
        """
        Exact MaxCut by enumeration.

        Returns
        -------
        best_value : float
            Maximum cut value.
        best_bitstrings : List[str]
            Every bitstring achieving it (always includes complements in pairs).
        """
        if self.n_nodes > MAX_BRUTE_FORCE_NODES:
            raise ValueError(f"Brute force refused for {self.n_nodes} > {MAX_BRUTE_FORCE_NODES} nodes")
        values = cut_values(self)
        best = float(values.max())
        idx = np.flatnonzero(np.isclose(values, best))
        return best, [format(int(i), f"0{self.n_nodes}b") for i in idx]


def cut_values(problem: MaxCutProblem) -> np.ndarray:
    """
    Cut value of every basis state, indexed by the integer whose binary
    expansion (node 0 = most significant bit) is the bitstring.
    """
    n = problem.n_nodes
    indices = np.arange(2 ** n)
    # bit of node i sits at position n-1-i
    bits = (indices[:, None] >> (n - 1 - np.arange(n))[None, :]) & 1
    values = np.zeros(2 ** n)
    for u, v, w in problem.edges:
        values += w * (bits[:, u] != bits[:, v])
    return values
