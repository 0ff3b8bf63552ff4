"""
Unit tests for process.py — teams (components) and connectors
(articulation points).

networkx is used as an independent oracle on random graphs.
"""

import random

import networkx as nx
import pytest

from process import ConnectivityAnalyzer, find_teams
from conftest import make_graph


def random_graph(seed, n=12, m=16):
    rng = random.Random(seed)
    names = [f"u{i}@enron.com" for i in range(n)]
    edges = set()
    while len(edges) < m:
        a, b = rng.sample(names, 2)
        edges.add((a, b))
    return make_graph(sorted(edges), vertices=names)


def shuffled(seed):
    rng = random.Random(seed)

    def order(items):
        items = list(items)
        rng.shuffle(items)
        return items

    return order


def root_first(root):
    return lambda items: sorted(items, key=lambda v: (v != root, v))


def partition(analysis):
    return {team for team in analysis.teams}


def undirected(graph):
    g = nx.Graph()
    g.add_nodes_from(graph.vertices())
    g.add_edges_from((v, w) for v in graph.vertices() for w in graph.neighbors(v))
    return g


def components_without(graph, removed):
    g = undirected(graph)
    g.remove_node(removed)
    return nx.number_connected_components(g)


# =============================================================================
# Scenarios
# =============================================================================

class TestScenarios:

    def test_path(self):
        g = make_graph([("A", "B"), ("B", "C"), ("C", "D")])
        res = find_teams(g)
        assert res.teams == [frozenset("ABCD")]
        assert res.team_size("A") == 4
        assert res.connectors == {"B", "C"}

    def test_star(self):
        g = make_graph([("X", "P"), ("X", "Q"), ("X", "R")])
        res = find_teams(g)
        assert len(res.teams) == 1
        assert res.team_size("R") == 4
        assert res.connectors == {"X"}

    def test_isolated_vertex(self):
        g = make_graph([("A", "B"), ("B", "C")], vertices=["Z"])
        res = find_teams(g)
        assert res.team_of("Z") == {"Z"}
        assert res.team_size("Z") == 1
        assert "Z" not in res.connectors

    def test_disconnected_pairs(self):
        g = make_graph([("A", "B"), ("C", "D")])
        res = find_teams(g)
        assert partition(res) == {frozenset("AB"), frozenset("CD")}
        assert res.team_size("A") == res.team_size("D") == 2
        assert res.connectors == frozenset()

    def test_cycle_has_no_connectors(self):
        g = make_graph([("A", "B"), ("B", "C"), ("C", "D"), ("D", "A")])
        res = find_teams(g)
        assert res.team_size("C") == 4
        assert res.connectors == frozenset()

    def test_two_triangles_sharing_a_vertex(self):
        g = make_graph([("A", "B"), ("B", "C"), ("C", "A"),
                        ("C", "D"), ("D", "E"), ("E", "C")])
        for seed in range(5):
            assert find_teams(g, order=shuffled(seed)).connectors == {"C"}

    def test_direction_is_ignored(self):
        # B only receives, yet bridges A and C
        g = make_graph([("A", "B"), ("C", "B")])
        assert find_teams(g).connectors == {"B"}

    def test_mutual_edges_count_once(self):
        g = make_graph([("A", "B"), ("B", "A"), ("B", "C"), ("C", "B")])
        assert find_teams(g).connectors == {"B"}

    def test_self_loops_are_harmless(self):
        g = make_graph([("A", "A"), ("A", "B"), ("B", "B"), ("B", "C")])
        res = find_teams(g)
        assert res.team_size("A") == 3
        assert res.connectors == {"B"}

    def test_empty_graph(self):
        res = find_teams(make_graph())
        assert res.teams == []
        assert res.connectors == frozenset()
        assert res.team_size("nobody") == 0
        assert res.team_id("nobody") is None

    def test_long_path_does_not_recurse(self):
        n = 20_000
        names = [f"p{i}" for i in range(n)]
        g = make_graph(zip(names, names[1:]))
        res = find_teams(g)
        assert res.team_size("p0") == n
        assert res.connectors == set(names[1:-1])


# =============================================================================
# Root rule
# =============================================================================

class TestRootRule:

    def test_root_with_one_child_is_not_connector(self):
        g = make_graph([("A", "B"), ("B", "C")])
        res = find_teams(g, order=root_first("A"))
        assert "A" not in res.connectors
        assert res.connectors == {"B"}

    def test_root_with_two_children_is_connector(self):
        g = make_graph([("A", "B"), ("A", "C")])
        res = find_teams(g, order=root_first("A"))
        assert res.connectors == {"A"}

    def test_root_on_cycle_has_one_child(self):
        g = make_graph([("A", "B"), ("B", "C"), ("C", "A")])
        res = find_teams(g, order=root_first("A"))
        assert res.connectors == frozenset()

    @pytest.mark.parametrize("root", ["A", "B", "C", "D", "E"])
    def test_any_root_gives_same_connectors(self, root):
        # A - B - C, B - D - E
        g = make_graph([("A", "B"), ("B", "C"), ("B", "D"), ("D", "E")])
        assert find_teams(g, order=root_first(root)).connectors == {"B", "D"}


# =============================================================================
# Properties on random graphs
# =============================================================================

class TestProperties:

    @pytest.mark.parametrize("seed", range(25))
    def test_partition(self, seed):
        g = random_graph(seed)
        res = find_teams(g)
        seen = [v for team in res.teams for v in team]
        assert len(seen) == len(set(seen))
        assert set(seen) == set(g.vertices())
        for v in g.vertices():
            assert v in res.teams[res.team_id(v)]

    @pytest.mark.parametrize("seed", range(25))
    def test_order_independence(self, seed):
        g = random_graph(seed)
        base = find_teams(g)
        for k in range(6):
            other = find_teams(g, order=shuffled(seed * 100 + k))
            assert other.connectors == base.connectors
            assert partition(other) == partition(base)

    @pytest.mark.parametrize("seed", range(25))
    def test_removal_sanity(self, seed):
        g = random_graph(seed, n=10, m=12)
        res = find_teams(g)
        before = nx.number_connected_components(undirected(g))
        for v in g.vertices():
            after = components_without(g, v)
            if res.team_size(v) == 1:
                # Removing a singleton drops its own component
                assert after == before - 1
                assert v not in res.connectors
            elif v in res.connectors:
                assert after > before
            else:
                assert after == before

    @pytest.mark.parametrize("seed", range(25))
    def test_matches_networkx(self, seed):
        g = random_graph(seed, n=30, m=36)
        res = find_teams(g)
        flat = undirected(g)
        assert res.connectors == set(nx.articulation_points(flat))
        assert partition(res) == {frozenset(c) for c in nx.connected_components(flat)}


class TestAnalyzer:

    def test_single_use(self):
        analyzer = ConnectivityAnalyzer(make_graph([("A", "B")]))
        analyzer.run()
        with pytest.raises(RuntimeError):
            analyzer.run()

    def test_discovery_numbers_are_unique_across_trees(self):
        g = make_graph([("A", "B"), ("C", "D")], vertices=["E"])
        analyzer = ConnectivityAnalyzer(g)
        analyzer.run()
        assert sorted(analyzer.disc.values()) == [1, 2, 3, 4, 5]
        assert all(analyzer.low[v] <= analyzer.disc[v] for v in analyzer.disc)
