import pytest

from netimpact.graph.strict_multidigraph import StrictMultiDiGraph
from netimpact.model.topology import DirectedEdge, Node, Topology


@pytest.fixture
def line1():
    # Cost:
    #      [1]      [1,1,2]
    #  A◄───────►B◄───────►C

    g = StrictMultiDiGraph()
    g.add_node("A")
    g.add_node("B")
    g.add_node("C")

    g.add_edge("A", "B", key="ab", cost=1)
    g.add_edge("B", "A", key="ba", cost=1)
    g.add_edge("B", "C", key="bc1", cost=1)
    g.add_edge("C", "B", key="cb1", cost=1)
    g.add_edge("B", "C", key="bc2", cost=1)
    g.add_edge("C", "B", key="cb2", cost=1)
    g.add_edge("B", "C", key="bc3", cost=2)
    g.add_edge("C", "B", key="cb3", cost=2)
    return g


@pytest.fixture
def square1():
    # Cost:
    #      [1]        [1]
    #   A──────►B──────►C
    #   │               ▲
    #   │ [2]      [2]  │
    #   └──────►D───────┘

    g = StrictMultiDiGraph()
    for node in ("A", "B", "C", "D"):
        g.add_node(node)

    g.add_edge("A", "B", key="ab", cost=1)
    g.add_edge("B", "C", key="bc", cost=1)
    g.add_edge("A", "D", key="ad", cost=2)
    g.add_edge("D", "C", key="dc", cost=2)
    return g


@pytest.fixture
def square2():
    # Cost:
    #      [1]        [1]
    #   A──────►B──────►C
    #   │               ▲
    #   │ [1]      [1]  │
    #   └──────►D───────┘

    g = StrictMultiDiGraph()
    for node in ("A", "B", "C", "D"):
        g.add_node(node)

    g.add_edge("A", "B", key="ab", cost=1)
    g.add_edge("B", "C", key="bc", cost=1)
    g.add_edge("A", "D", key="ad", cost=1)
    g.add_edge("D", "C", key="dc", cost=1)
    return g


@pytest.fixture
def triangle1():
    # Cost:
    #     [1]        [1]
    #   ┌──────►B◄──────┐
    #   │               │
    #   ▼      [1]      ▼
    #   A◄─────────────►C

    g = StrictMultiDiGraph()
    g.add_node("A")
    g.add_node("B")
    g.add_node("C")

    g.add_edge("A", "B", key="ab", cost=1)
    g.add_edge("B", "A", key="ba", cost=1)
    g.add_edge("B", "C", key="bc", cost=1)
    g.add_edge("C", "B", key="cb", cost=1)
    g.add_edge("A", "C", key="ac", cost=1)
    g.add_edge("C", "A", key="ca", cost=1)
    return g


@pytest.fixture
def zero_cost_ecmp():
    # Cost:
    #      [1]
    #   A──────►B
    #   │       ▲
    #   │ [1]   │ [0]
    #   └──────►C

    g = StrictMultiDiGraph()
    g.add_node("A")
    g.add_node("B")
    g.add_node("C")

    g.add_edge("A", "B", key="ab", cost=1)
    g.add_edge("A", "C", key="ac", cost=1)
    g.add_edge("C", "B", key="cb", cost=0)
    return g


@pytest.fixture
def zero_cost_loop():
    # Cost:
    #      [1]       [1]
    #   A──────►B───────►D
    #           ▲│
    #        [0]│▼[0]
    #           C

    g = StrictMultiDiGraph()
    for node in ("A", "B", "C", "D"):
        g.add_node(node)

    g.add_edge("A", "B", key="ab", cost=1)
    g.add_edge("B", "C", key="bc", cost=0)
    g.add_edge("C", "B", key="cb", cost=0)
    g.add_edge("B", "D", key="bd", cost=1)
    return g


@pytest.fixture
def diamond_topology():
    # Cost (both directions):
    #       [5]       [5]
    #   A◄──────►B◄──────►D
    #   ▲                 ▲
    #   │ [5]        [5]  │
    #   └───────►C◄───────┘

    nodes = [
        Node("A", region="north"),
        Node("B", region="north"),
        Node("C", region="south"),
        Node("D", region="south"),
    ]
    links = [("A", "B", 5), ("B", "D", 5), ("A", "C", 5), ("C", "D", 5)]
    edges = []
    for u, v, cost in links:
        link_id = f"{u}{v}"
        edges.append(DirectedEdge(f"{u}{v}_f", u, v, cost, logical_id=link_id))
        edges.append(DirectedEdge(f"{u}{v}_r", v, u, cost, logical_id=link_id))
    return Topology(nodes=nodes, edges=edges)


@pytest.fixture
def reroute_topology():
    # Cost (both directions):
    #       [5]
    #   A◄──────►B
    #   ▲        ▲
    #   │ [6]    │ [6]
    #   └───►C◄──┘

    nodes = [
        Node("A", region="east"),
        Node("B", region="west"),
        Node("C", region="east"),
    ]
    links = [("A", "B", 5), ("A", "C", 6), ("C", "B", 6)]
    edges = []
    for u, v, cost in links:
        link_id = f"{u}{v}"
        edges.append(DirectedEdge(f"{u}{v}_f", u, v, cost, logical_id=link_id))
        edges.append(DirectedEdge(f"{u}{v}_r", v, u, cost, logical_id=link_id))
    return Topology(nodes=nodes, edges=edges)


@pytest.fixture
def grid_topology():
    # 4x4 bidirectional grid, cost 1 on every edge; 240 ordered pairs.
    #   n0_0 ─ n0_1 ─ n0_2 ─ n0_3
    #    │      │      │      │
    #   n1_0 ─ n1_1 ─ ...
    size = 4
    nodes = [
        Node(f"n{r}_{c}", region=f"row{r}") for r in range(size) for c in range(size)
    ]
    edges = []
    for r in range(size):
        for c in range(size):
            for dr, dc in ((0, 1), (1, 0)):
                rr, cc = r + dr, c + dc
                if rr >= size or cc >= size:
                    continue
                u, v = f"n{r}_{c}", f"n{rr}_{cc}"
                link_id = f"{u}-{v}"
                edges.append(DirectedEdge(f"{link_id}_f", u, v, 1, logical_id=link_id))
                edges.append(DirectedEdge(f"{link_id}_r", v, u, 1, logical_id=link_id))
    return Topology(nodes=nodes, edges=edges)
