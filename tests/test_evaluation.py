import math
import unittest

import networkx as nx
import torch

from genetic_tsp.evaluation import RunSummary, TourFitness, build_distance_matrix, tour_length
from genetic_tsp.individual import Individual


def unit_square() -> nx.Graph:
    coords = {0: (0, 0), 1: (0, 1), 2: (1, 1), 3: (1, 0)}
    graph = nx.complete_graph(4)
    for u, v in graph.edges():
        (x1, y1), (x2, y2) = coords[u], coords[v]
        graph[u][v]["weight"] = math.hypot(x1 - x2, y1 - y2)
    return graph


class TestTourLength(unittest.TestCase):
    def setUp(self):
        self.graph = unit_square()

    def test_perimeter(self):
        self.assertAlmostEqual(tour_length(self.graph, [0, 1, 2, 3, 0]), 4.0)

    def test_crossing_tour(self):
        self.assertAlmostEqual(tour_length(self.graph, [0, 2, 1, 3, 0]), 2.0 + 2 * math.sqrt(2))

    def test_distance_matrix(self):
        mat, idx = build_distance_matrix(self.graph)
        self.assertEqual(tuple(mat.shape), (4, 4))
        self.assertTrue(torch.allclose(mat, mat.T))
        self.assertEqual(float(mat[idx[0], idx[0]]), 0.0)
        self.assertAlmostEqual(float(mat[idx[0], idx[2]]), math.sqrt(2))

    def test_distance_matrix_without_edges(self):
        graph = nx.Graph()
        graph.add_nodes_from([0, 1])
        mat, idx = build_distance_matrix(graph)
        self.assertEqual(float(mat.sum()), 0.0)
        self.assertEqual(idx, {0: 0, 1: 1})


class TestTourFitness(unittest.TestCase):
    def setUp(self):
        self.graph = unit_square()
        self.short = Individual.tour([0, 1, 2, 3])
        self.long = Individual.tour([0, 2, 1, 3])

    def test_shorter_tours_score_higher(self):
        fitness = TourFitness(self.graph, scale=10.0)
        self.assertAlmostEqual(fitness(self.short), 2.5)
        self.assertGreater(fitness(self.short), fitness(self.long))

    def test_torch_matches_graph(self):
        plain = TourFitness(self.graph)
        tensor = TourFitness.with_torch(self.graph)
        for individual in (self.short, self.long):
            self.assertAlmostEqual(plain.length(individual), tensor.length(individual), places=9)
            self.assertAlmostEqual(plain(individual), tensor(individual), places=9)

    def test_zero_length(self):
        self.assertEqual(TourFitness(self.graph)(Individual((0, 0))), float("inf"))

    def test_dist_mat_requires_node_map(self):
        mat, _ = build_distance_matrix(self.graph)
        with self.assertRaises(ValueError):
            TourFitness(self.graph, dist_mat=mat)


class TestRunSummary(unittest.TestCase):
    def test_gap(self):
        summary = RunSummary(tour=(0, 1, 0), length=110.0, optimum=100.0, generations=3, elapsed_ms=1.0)
        self.assertAlmostEqual(summary.gap, 0.1)

    def test_gap_without_optimum(self):
        summary = RunSummary(tour=(0, 1, 0), length=110.0, optimum=None, generations=3, elapsed_ms=1.0)
        self.assertEqual(summary.gap, float("inf"))


if __name__ == "__main__":
    unittest.main()
