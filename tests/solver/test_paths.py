import itertools
import random

import networkx as nx
import pytest

from netimpact.graph.build import graph_from_records
from netimpact.model.topology import DirectedEdge, Node
from netimpact.solver.paths import find_path, shortest_path, shortest_paths_from

NODES_ABCD = [Node("A"), Node("B"), Node("C"), Node("D")]


def _square_edges(cd_cost=5):
    return [
        DirectedEdge("ab", "A", "B", 5),
        DirectedEdge("bd", "B", "D", 5),
        DirectedEdge("ac", "A", "C", 5),
        DirectedEdge("cd", "C", "D", cd_cost),
    ]


def _brute_force_paths(graph, src, dst):
    """(cost, edge keys) of every simple edge-level path, via networkx."""
    paths = []
    for path in nx.all_simple_edge_paths(graph, src, dst):
        cost = sum(graph.edges[u, v, k]["cost"] for u, v, k in path)
        paths.append((cost, {k for _, _, k in path}))
    return paths


class TestLiteralScenarios:
    def test_equal_cost_square(self):
        result = find_path("A", "D", NODES_ABCD, _square_edges())
        assert result.cost == 10
        assert result.is_ecmp
        assert result.path_count == 2
        assert result.involved_edge_ids == {"ab", "bd", "ac", "cd"}
        assert result.involved_node_ids == {"A", "B", "C", "D"}
        assert result.canonical_path == ("A", "B", "D")
        assert result.wavefront_steps == (("A",), ("B", "C"), ("D",))

    def test_unequal_cost_square(self):
        result = find_path("A", "D", NODES_ABCD, _square_edges(cd_cost=6))
        assert result.cost == 10
        assert not result.is_ecmp
        assert result.canonical_path == ("A", "B", "D")
        assert result.involved_edge_ids == {"ab", "bd"}
        assert result.hops == 2

    def test_no_path(self):
        nodes = [Node("A"), Node("B"), Node("C")]
        edges = [DirectedEdge("ab", "A", "B", 10)]
        assert find_path("A", "C", nodes, edges) is None

    def test_zero_cost_dead_end_not_involved(self):
        # Y only loops back to X over zero-cost edges
        nodes = [Node("A"), Node("X"), Node("Y"), Node("D")]
        edges = [
            DirectedEdge("ax", "A", "X", 1),
            DirectedEdge("xy", "X", "Y", 0),
            DirectedEdge("yx", "Y", "X", 0),
            DirectedEdge("xd", "X", "D", 1),
        ]
        result = find_path("A", "D", nodes, edges)
        assert result.cost == 2
        assert result.involved_edge_ids == {"ax", "xd"}
        assert result.involved_node_ids == {"A", "X", "D"}
        assert result.wavefront_steps == (("A",), ("X",), ("D",))
        assert not result.is_ecmp


class TestProperties:
    @pytest.mark.parametrize("node", ["A", "B", "C", "D"])
    def test_reflexivity(self, node):
        result = find_path(node, node, NODES_ABCD, _square_edges())
        assert result.cost == 0
        assert result.canonical_path == (node,)
        assert result.involved_edge_ids == frozenset()
        assert not result.is_ecmp
        assert result.wavefront_steps == ((node,),)

    @pytest.mark.parametrize("seed", range(10))
    def test_optimality_against_brute_force(self, seed):
        rng = random.Random(seed)
        node_ids = [f"R{i}" for i in range(6)]
        edges = []
        for i, (u, v) in enumerate(itertools.permutations(node_ids, 2)):
            if rng.random() < 0.4:
                edges.append(DirectedEdge(f"e{i}", u, v, rng.randint(0, 4)))
        graph = graph_from_records([Node(n) for n in node_ids], edges)

        for src, dst in itertools.permutations(node_ids, 2):
            paths = _brute_force_paths(graph, src, dst)
            result = shortest_path(graph, src, dst)
            if not paths:
                assert result is None
                continue
            best = min(cost for cost, _ in paths)
            best_paths = [keys for cost, keys in paths if cost == best]
            assert result.cost == best
            assert result.path_count == len(best_paths)
            assert result.is_ecmp == (len(best_paths) > 1)
            assert result.involved_edge_ids == set().union(*best_paths)

    def test_ecmp_completeness(self):
        # Three equal-cost routes A->D, one of them over parallel links
        nodes = NODES_ABCD
        edges = [
            DirectedEdge("ab1", "A", "B", 1),
            DirectedEdge("ab2", "A", "B", 1),
            DirectedEdge("bd", "B", "D", 2),
            DirectedEdge("ac", "A", "C", 2),
            DirectedEdge("cd", "C", "D", 1),
            DirectedEdge("ad", "A", "D", 4),
        ]
        result = find_path("A", "D", nodes, edges)
        assert result.cost == 3
        assert result.is_ecmp
        assert result.path_count == 3
        assert result.involved_edge_ids == {"ab1", "ab2", "bd", "ac", "cd"}

    def test_visibility_atomicity(self):
        # The cheap route through B must not be used once B is hidden
        edges = _square_edges(cd_cost=50)
        result = find_path("A", "D", NODES_ABCD, edges, visible=lambda n: n != "B")
        assert result.cost == 55
        assert "B" not in result.involved_node_ids
        assert result.involved_edge_ids == {"ac", "cd"}

    def test_hidden_endpoint(self):
        nodes = [Node("A"), Node("B", is_visible=False)]
        edges = [DirectedEdge("ab", "A", "B", 1)]
        assert find_path("A", "B", nodes, edges) is None
        assert find_path("B", "B", nodes, edges) is None

    def test_unknown_endpoint(self):
        assert find_path("A", "Z", NODES_ABCD, _square_edges()) is None
        assert find_path("Z", "A", NODES_ABCD, _square_edges()) is None

    def test_idempotence(self):
        first = find_path("A", "D", NODES_ABCD, _square_edges())
        second = find_path("A", "D", NODES_ABCD, _square_edges())
        assert first == second
        assert first.to_dict() == second.to_dict()


class TestShortestPathsFrom:
    def test_matches_single_pair_results(self, square2):
        results = shortest_paths_from(square2, "A")
        assert set(results) == {"B", "C", "D"}
        for dst, result in results.items():
            assert result == shortest_path(square2, "A", dst)

    def test_selected_destinations(self, square1):
        results = shortest_paths_from(square1, "C", ["A", "C", "Z"])
        assert results["A"] is None
        assert results["C"].cost == 0
        assert results["Z"] is None

    def test_unknown_source(self, square1):
        assert shortest_paths_from(square1, "Z", ["A"]) == {"A": None}

    def test_zero_cost_ecmp(self, zero_cost_ecmp):
        result = shortest_paths_from(zero_cost_ecmp, "A")["B"]
        assert result.cost == 1
        assert result.is_ecmp
        assert result.involved_edge_ids == {"ab", "ac", "cb"}
