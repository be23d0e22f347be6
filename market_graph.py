from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterator, List, Optional, Tuple

import networkx as nx


WEIGHT_KEY = "weight"


@dataclass
class Vertex:
    """Snapshot of one vertex: its id and outgoing adjacency (neighbour id -> weight)."""
    id: Hashable
    edges: Dict[Hashable, float] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"Vertex({self.id!r})"


class Graph:
    """Weighted graph over opaque hashable ids, directed or undirected.

    Storage is a networkx graph kept in ``G``; an undirected ``nx.Graph``
    holds every edge in both adjacency lists, a ``nx.DiGraph`` only in the
    source's successors. Building the graph never fails: edges create their
    endpoints on demand and re-adding an edge overwrites its weight.
    """

    def __init__(self, directed: bool = False):
        self.is_directed = bool(directed)
        self.G: nx.Graph = nx.DiGraph() if self.is_directed else nx.Graph()

    def __len__(self) -> int:
        return self.G.number_of_nodes()

    def __contains__(self, vid: Hashable) -> bool:
        return self.has_vertex(vid)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self.G.nodes)

    def __repr__(self) -> str:
        kind = "directed" if self.is_directed else "undirected"
        return f"Graph({kind}, |V|={self.G.number_of_nodes()}, |E|={self.G.number_of_edges()})"

    # ------------------------------
    # Construction
    # ------------------------------

    def add_vertex(self, vid: Hashable) -> None:
        # networkx leaves an existing node (and its edges) untouched
        if vid not in self.G:
            self.G.add_node(vid)

    def add_edge(self, src: Hashable, dst: Hashable, weight: float) -> None:
        """Record ``src -> dst`` with ``weight``; undirected graphs also get ``dst -> src``."""
        self.add_vertex(src)
        self.add_vertex(dst)
        self.G.add_edge(src, dst, **{WEIGHT_KEY: float(weight)})

    # ------------------------------
    # Queries
    # ------------------------------

    def has_vertex(self, vid: Hashable) -> bool:
        # nx answers False for unhashable ids instead of raising
        return vid in self.G

    def outgoing(self, vid: Hashable) -> Dict[Hashable, float]:
        """Outgoing neighbours and weights of ``vid`` in insertion order (a copy)."""
        if vid not in self.G:
            return {}
        return {nbr: data[WEIGHT_KEY] for nbr, data in self.G.adj[vid].items()}

    def weight(self, src: Hashable, dst: Hashable) -> Optional[float]:
        data = self.G.get_edge_data(src, dst, default=None)
        if data is None:
            return None
        return data[WEIGHT_KEY]

    def get_vertices(self) -> List[Vertex]:
        return [Vertex(vid, self.outgoing(vid)) for vid in self.G.nodes]

    def get_edges(self) -> List[Tuple[Hashable, Hashable, float]]:
        """One ``(source, dest, weight)`` triple per adjacency entry.

        Undirected edges show up twice, once per orientation; callers who
        want logical edges have to deduplicate.
        """
        edges: List[Tuple[Hashable, Hashable, float]] = []
        for u, nbrs in self.G.adjacency():
            for v, data in nbrs.items():
                edges.append((u, v, data[WEIGHT_KEY]))
        return edges

    def is_bipartite(self) -> bool:
        """Two-colour every component; False on the first edge joining equal colours.

        networkx colours with an explicit work list, so deep graphs do not hit
        the recursion limit. A self-loop can never be two-coloured. Directed
        graphs are coloured over their underlying undirected edges.
        """
        return nx.is_bipartite(self.G)
