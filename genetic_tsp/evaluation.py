import math
from dataclasses import dataclass
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

import networkx as nx
import torch

from .individual import Individual


Tour = Sequence[Hashable]


def tour_length(graph: nx.Graph, tour: Tour) -> float:
    """Length of a closed tour whose last city repeats the first."""
    dist = 0.0
    for a, b in zip(tour, tour[1:]):
        if a == b:
            continue
        dist += graph[a][b]["weight"]
    return float(dist)


def build_distance_matrix(graph: nx.Graph, device: Optional[torch.device] = None) -> Tuple[torch.Tensor, Dict]:
    nodes = list(graph.nodes())
    idx_map = {n: i for i, n in enumerate(nodes)}
    device = device or torch.device("cpu")
    edges = list(graph.edges(data="weight", default=1.0))
    if not edges:
        return torch.zeros((len(nodes), len(nodes)), device=device, dtype=torch.float64), idx_map
    rows = []
    cols = []
    vals = []
    for u, v, w in edges:
        rows.append(idx_map[u])
        cols.append(idx_map[v])
        rows.append(idx_map[v])
        cols.append(idx_map[u])
        vals.extend([w, w])
    indices = torch.tensor([rows, cols], device=device)
    values = torch.tensor(vals, device=device, dtype=torch.float64)
    size = (len(nodes), len(nodes))
    # Self-loops are written twice; the diagonal is never part of a tour.
    mat = torch.sparse_coo_tensor(indices, values, size=size, device=device).to_dense()
    mat.fill_diagonal_(0.0)
    return mat, idx_map


def _tour_length_torch(dist: torch.Tensor, tour_idx: List[int]) -> float:
    idx = torch.tensor(tour_idx, device=dist.device, dtype=torch.long)
    return dist[idx[:-1], idx[1:]].sum().item()


class TourFitness:
    """Scores a tour as ``scale / length`` so that shorter tours rank higher."""

    def __init__(
        self,
        graph: nx.Graph,
        scale: float = 1.0,
        dist_mat: Optional[torch.Tensor] = None,
        node_map: Optional[Dict] = None,
    ):
        if dist_mat is not None and node_map is None:
            raise ValueError("node_map is required together with dist_mat")
        self.graph = graph
        self.scale = scale
        self.dist_mat = dist_mat
        self.node_map = node_map

    @classmethod
    def with_torch(cls, graph: nx.Graph, scale: float = 1.0, device=None) -> "TourFitness":
        dist_mat, node_map = build_distance_matrix(graph, device=device)
        return cls(graph, scale=scale, dist_mat=dist_mat, node_map=node_map)

    def length(self, individual: Individual) -> float:
        tour = individual.representation
        if self.dist_mat is not None:
            return _tour_length_torch(self.dist_mat, [self.node_map[c] for c in tour])
        return tour_length(self.graph, tour)

    def __call__(self, individual: Individual) -> float:
        length = self.length(individual)
        if length <= 0.0:
            return float("inf")
        return self.scale / length


@dataclass
class RunSummary:
    tour: Tuple[Hashable, ...]
    length: float
    optimum: Optional[float]
    generations: int
    elapsed_ms: float

    @property
    def gap(self) -> float:
        if self.optimum is None or math.isclose(self.optimum, 0.0):
            return float("inf")
        return (self.length - self.optimum) / self.optimum
