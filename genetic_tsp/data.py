import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Hashable, Iterable, List, Optional, Sequence

import networkx as nx
import numpy as np
import tsplib95

from .individual import Individual


logger = logging.getLogger(__name__)


@dataclass
class Instance:
    name: str
    graph: nx.Graph
    optimum: Optional[float] = None
    path: Optional[Path] = None

    @property
    def cities(self) -> List[Hashable]:
        return list(self.graph.nodes())


def _solution_candidates(path: Path) -> Iterable[Path]:
    yield path.with_suffix(".opt.tour")
    for ext in (".opt.tour", ".opt", ".tour"):
        yield path.parent / "solutions" / f"{path.stem}{ext}"


def _load_optimum(problem, path: Path) -> Optional[float]:
    for candidate in _solution_candidates(path):
        if not candidate.exists():
            continue
        try:
            tour_file = tsplib95.parse(candidate.read_text())
            nodes = list(tour_file.tours[0])
        except Exception as exc:
            logger.warning("ignoring unreadable tour file %s: %s", candidate, exc)
            continue
        dist = 0.0
        for i in range(len(nodes)):
            a = nodes[i]
            b = nodes[(i + 1) % len(nodes)]
            dist += problem.get_weight(a, b)
        return float(dist)
    return None


def load_instance(path: Path) -> Instance:
    path = Path(path)
    problem = tsplib95.load(path)
    graph = problem.get_graph()
    graph.remove_edges_from(list(nx.selfloop_edges(graph)))
    optimum = _load_optimum(problem, path)
    logger.info("loaded %s: %d cities, optimum=%s", problem.name, graph.number_of_nodes(), optimum)
    return Instance(name=problem.name or path.stem, graph=graph, optimum=optimum, path=path)


def random_instance(n_cities: int, seed: Optional[int] = None, extent: float = 100.0) -> Instance:
    """Complete Euclidean instance with cities scattered uniformly in a square."""
    if n_cities < 2:
        raise ValueError(f"A tour needs at least 2 cities, got {n_cities}")
    rng = np.random.default_rng(seed)
    coords = rng.uniform(0.0, extent, size=(n_cities, 2))
    graph = nx.complete_graph(n_cities)
    for i in range(n_cities):
        graph.nodes[i]["pos"] = (float(coords[i, 0]), float(coords[i, 1]))
    for u, v in graph.edges():
        graph[u][v]["weight"] = float(np.hypot(*(coords[u] - coords[v])))
    return Instance(name=f"random{n_cities}", graph=graph)


def random_population(cities: Sequence[Hashable], size: int, rng: random.Random) -> List[Individual]:
    population = []
    for _ in range(size):
        order = list(cities)
        rng.shuffle(order)
        population.append(Individual.tour(order))
    return population
