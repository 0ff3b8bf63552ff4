"""
============================================================
COMMUNICATION GRAPH
============================================================
Who-wrote-to-whom graph over mail addresses.

The store is a networkx DiGraph: successors are the "sent"
view (X -> Ys) and predecessors the "received" view
(X <- Ys). Both views are updated by the same insertion, so
sent[x] contains y exactly when received[y] contains x.

Mutations take the graph's re-entrant lock for the whole
operation so that ingestion workers can share one instance.
Reads are only meaningful once ingestion has stopped.
============================================================
"""

import threading
from typing import Iterable, Iterator, Set

import networkx as nx


class CommunicationGraph:
    """Vertices are address strings; edges are distinct (sender, recipient) pairs."""

    def __init__(self):
        self._g   = nx.DiGraph()
        self.lock = threading.RLock()

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_vertex(self, vertex: str):
        with self.lock:
            self._g.add_node(vertex)

    def add_edge(self, sender: str, recipient: str):
        with self.lock:
            self._g.add_edge(sender, recipient)

    def add_edges(self, sender: str, recipients: Iterable[str]):
        """Insert sender -> r for every recipient under a single lock hold."""
        with self.lock:
            for r in recipients:
                self._g.add_edge(sender, r)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def has_vertex(self, vertex: str) -> bool:
        return vertex in self._g

    __contains__ = has_vertex

    def __len__(self) -> int:
        return self._g.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return self._g.number_of_edges()

    def vertices(self) -> Iterator[str]:
        return iter(self._g.nodes())

    def sent_count(self, vertex: str) -> int:
        """How many distinct individuals `vertex` sent messages to."""
        if vertex not in self._g:
            return 0
        return len(self._g.succ[vertex])

    def received_count(self, vertex: str) -> int:
        """How many distinct individuals `vertex` received messages from."""
        if vertex not in self._g:
            return 0
        return len(self._g.pred[vertex])

    def sent_to(self, vertex: str) -> Set[str]:
        if vertex not in self._g:
            return set()
        return set(self._g.succ[vertex])

    def received_from(self, vertex: str) -> Set[str]:
        if vertex not in self._g:
            return set()
        return set(self._g.pred[vertex])

    def neighbors(self, vertex: str) -> Set[str]:
        """Undirected neighbourhood: everyone `vertex` wrote to or heard from."""
        return self.sent_to(vertex) | self.received_from(vertex)
