"""
Supplier/director relationship graph and a force-directed layout for it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class NetworkNode:
    node_id: str
    label: str
    kind: str  # supplier | director
    risk_score: float


@dataclass
class RelationshipGraph:
    nodes: List[NetworkNode]
    edges: List[Tuple[str, str]]

    def degree(self) -> Dict[str, int]:
        counts = {node.node_id: 0 for node in self.nodes}
        for a, b in self.edges:
            counts[a] = counts.get(a, 0) + 1
            counts[b] = counts.get(b, 0) + 1
        return counts


def build_relationship_graph(suppliers: pd.DataFrame, directors: pd.DataFrame) -> RelationshipGraph:
    """Nodes for every supplier and director; an edge for each board seat."""
    nodes: List[NetworkNode] = []
    edges: List[Tuple[str, str]] = []
    director_ids = set(directors["director_id"]) if not directors.empty else set()

    for row in directors.to_dict("records"):
        nodes.append(NetworkNode(row["director_id"], row["name"], "director", float(row.get("risk_score", 0) or 0)))
    for row in suppliers.to_dict("records"):
        nodes.append(NetworkNode(row["supplier_id"], row["name"], "supplier", float(row.get("risk_score", 0) or 0)))
        for director_id in row.get("director_ids") or []:
            if director_id in director_ids:
                edges.append((row["supplier_id"], director_id))
    return RelationshipGraph(nodes, edges)


def force_layout(
    graph: RelationshipGraph,
    iterations: int = 150,
    seed: int = 7,
    k: Optional[float] = None,
) -> Dict[str, Tuple[float, float]]:
    """Fruchterman-Reingold layout in the unit square. Deterministic for a given seed."""
    n = len(graph.nodes)
    if n == 0:
        return {}
    if n == 1:
        return {graph.nodes[0].node_id: (0.5, 0.5)}

    index = {node.node_id: i for i, node in enumerate(graph.nodes)}
    rng = np.random.default_rng(seed)
    pos = rng.random((n, 2))
    adjacency = np.zeros((n, n))
    for a, b in graph.edges:
        adjacency[index[a], index[b]] = adjacency[index[b], index[a]] = 1.0

    k = k or np.sqrt(1.0 / n)
    temperature = 0.1
    cooling = temperature / (iterations + 1)
    for _ in range(iterations):
        delta = pos[:, None, :] - pos[None, :, :]
        distance = np.linalg.norm(delta, axis=-1)
        np.clip(distance, 0.01, None, out=distance)
        # repulsion k^2/d between all pairs, attraction d^2/k along edges
        force = (k * k / distance**2) - (adjacency * distance / k)
        displacement = np.einsum("ijk,ij->ik", delta, force)
        length = np.linalg.norm(displacement, axis=-1)
        np.clip(length, 0.01, None, out=length)
        pos += displacement * (temperature / length)[:, None]
        temperature -= cooling

    pos -= pos.min(axis=0)
    span = pos.max(axis=0)
    span[span == 0] = 1.0
    pos /= span
    return {node.node_id: (float(pos[i, 0]), float(pos[i, 1])) for i, node in enumerate(graph.nodes)}
