# pylint: disable=protected-access,invalid-name
import pytest

from netimpact.algorithms.spf import spf
from netimpact.graph.strict_multidigraph import StrictMultiDiGraph


class TestSPF:
    def test_spf_1(self, square1):
        costs, pred = spf(square1, "A")
        assert costs == {"A": 0, "B": 1, "D": 2, "C": 2}
        assert pred == {
            "A": {},
            "B": {"A": ["ab"]},
            "D": {"A": ["ad"]},
            "C": {"B": ["bc"]},
        }

    def test_spf_2_ecmp(self, square2):
        costs, pred = spf(square2, "A")
        assert costs == {"A": 0, "B": 1, "D": 1, "C": 2}
        # Equal-cost predecessors kept in discovery order
        assert list(pred["C"]) == ["B", "D"]
        assert pred["C"] == {"B": ["bc"], "D": ["dc"]}

    def test_spf_3_parallel_edges(self, line1):
        costs, pred = spf(line1, "A")
        assert costs == {"A": 0, "B": 1, "C": 2}
        # Only the cheapest parallel edges are selected
        assert pred["C"] == {"B": ["bc1", "bc2"]}

    def test_spf_4_no_route_back_into_source(self, triangle1):
        costs, pred = spf(triangle1, "A")
        assert costs == {"A": 0, "B": 1, "C": 1}
        assert pred["A"] == {}
        assert pred["B"] == {"A": ["ab"]}
        assert pred["C"] == {"A": ["ac"]}

    def test_spf_5_costlier_route_not_recorded(self, square1):
        # D->C costs 4 in total and never joins C's predecessors
        _, pred = spf(square1, "A")
        assert "D" not in pred["C"]

    def test_spf_early_stop(self, square1):
        costs, pred = spf(square1, "A", dst_node="B")
        assert costs["B"] == 1
        assert pred["B"] == {"A": ["ab"]}

    def test_spf_early_stop_keeps_zero_cost_ecmp(self, zero_cost_ecmp):
        costs, pred = spf(zero_cost_ecmp, "A", dst_node="B")
        assert costs["B"] == 1
        assert pred["B"] == {"A": ["ab"], "C": ["cb"]}

    def test_spf_early_stop_matches_full_run(self, square2):
        full_costs, full_pred = spf(square2, "A")
        costs, pred = spf(square2, "A", dst_node="C")
        assert costs["C"] == full_costs["C"]
        assert pred["C"] == full_pred["C"]

    def test_spf_unreachable(self, square1):
        costs, pred = spf(square1, "C")
        assert costs == {"C": 0}
        assert pred == {"C": {}}

    def test_spf_missing_source(self, square1):
        with pytest.raises(KeyError):
            spf(square1, "Z")

    def test_spf_strict_improvement_resets_predecessors(self):
        g = StrictMultiDiGraph()
        for node in ("A", "B", "C"):
            g.add_node(node)
        g.add_edge("A", "C", key="ac", cost=10)
        g.add_edge("A", "B", key="ab", cost=1)
        g.add_edge("B", "C", key="bc", cost=1)

        costs, pred = spf(g, "A")
        assert costs["C"] == 2
        assert pred["C"] == {"B": ["bc"]}
