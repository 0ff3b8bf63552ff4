#!/usr/bin/env python
# coding: utf-8
"""
============================================================
TEAMS & CONNECTORS
============================================================
Single pass over the finished communication graph that
computes, at the same time:

  - teams:      connected components of the undirected
                graph (sent ∪ received)
  - connectors: articulation points, people whose removal
                splits their team apart

The search is an iterative depth-first search (explicit
stack + parent map) so that very large teams cannot exhaust
the interpreter's recursion limit. Low-link values are folded
in post-order, once every neighbour of a vertex has been
explored.
============================================================
"""

import itertools
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional

from graph import CommunicationGraph


Order = Callable[[Iterable[str]], Iterable[str]]


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass
class TeamAnalysis:
    teams:      List[FrozenSet[str]]
    connectors: FrozenSet[str]
    team_index: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self):
        if not self.team_index:
            self.team_index = {
                v: tid for tid, team in enumerate(self.teams) for v in team
            }

    def team_id(self, vertex: str) -> Optional[int]:
        return self.team_index.get(vertex)

    def team_of(self, vertex: str) -> FrozenSet[str]:
        tid = self.team_index.get(vertex)
        return self.teams[tid] if tid is not None else frozenset()

    def team_size(self, vertex: str) -> int:
        tid = self.team_index.get(vertex)
        return len(self.teams[tid]) if tid is not None else 0


# ---------------------------------------------------------------------------
# Analyzer
# ---------------------------------------------------------------------------

class _Frame:
    """One DFS stack entry: the vertex and its not-yet-explored neighbours."""

    __slots__ = ("vertex", "neighbors", "pending")

    def __init__(self, vertex: str, neighbors: List[str]):
        self.vertex    = vertex
        self.neighbors = neighbors
        self.pending   = iter(neighbors)


class ConnectivityAnalyzer:
    """
    Compute teams and connectors of a CommunicationGraph.

    One instance performs one run; the discovery counter and the
    disc / low tables belong to that run.

    `order`, when given, decides the order in which vertices are scanned
    and neighbours are explored. The result does not depend on it.

    Usage:
        analysis = ConnectivityAnalyzer(graph).run()
        analysis.connectors, analysis.team_size("a@enron.com")
    """

    def __init__(self, graph: CommunicationGraph, order: Optional[Order] = None):
        self.graph   = graph
        self.order   = order or list
        self.counter = itertools.count(1)
        self.disc: Dict[str, int] = {}
        self.low:  Dict[str, int] = {}
        self.connectors = set()
        self.teams: List[FrozenSet[str]] = []
        self._done = False

    def run(self) -> TeamAnalysis:
        if self._done:
            raise RuntimeError("ConnectivityAnalyzer instances are single-use")
        self._done = True

        for vertex in self.order(self.graph.vertices()):
            if vertex in self.disc:
                continue
            self.teams.append(frozenset(self._explore(vertex)))

        return TeamAnalysis(teams=self.teams, connectors=frozenset(self.connectors))

    # ------------------------------------------------------------------
    # Depth-first search
    # ------------------------------------------------------------------

    def _visit(self, vertex: str) -> _Frame:
        n = next(self.counter)
        self.disc[vertex] = n
        self.low[vertex]  = n
        return _Frame(vertex, list(self.order(self.graph.neighbors(vertex))))

    def _explore(self, root: str) -> List[str]:
        """DFS tree rooted at `root`; returns every vertex it reached."""
        parents = {root: None}
        team    = [root]
        stack   = [self._visit(root)]

        while stack:
            top = stack[-1]

            for v in top.pending:
                if v not in self.disc:
                    parents[v] = top.vertex
                    team.append(v)
                    stack.append(self._visit(v))
                    break
            else:
                # Every neighbour explored: finish the vertex
                stack.pop()
                self._finish(top, parents)

        return team

    def _finish(self, frame: _Frame, parents: Dict[str, Optional[str]]):
        u      = frame.vertex
        parent = parents[u]
        disc_u = self.disc[u]
        low_u  = self.low[u]

        children = 0
        cut      = False
        for v in frame.neighbors:
            if parents.get(v) == u:
                # Tree child, already finished
                children += 1
                low_u = min(low_u, self.low[v])
                if self.low[v] >= disc_u:
                    cut = True
            elif v != parent:
                # Back edge (or self-loop)
                low_u = min(low_u, self.disc[v])

        self.low[u] = low_u

        if parent is None:
            if children > 1:
                self.connectors.add(u)
        elif cut:
            self.connectors.add(u)


def find_teams(graph: CommunicationGraph, order: Optional[Order] = None) -> TeamAnalysis:
    """Run a fresh ConnectivityAnalyzer over `graph`."""
    return ConnectivityAnalyzer(graph, order=order).run()
