import random
from dataclasses import dataclass
from typing import Callable, List, Sequence

import numpy as np

from .individual import Individual


FitnessFn = Callable[[Individual], float]
SelectFn = Callable[[Sequence[Individual], FitnessFn, random.Random], Individual]
ReproduceFn = Callable[[Individual, Individual, int, random.Random], Individual]
MutateFn = Callable[[Individual, int, random.Random], Individual]


def fitness_proportionate_select(
    population: Sequence[Individual], fitness_fn: FitnessFn, rng: random.Random
) -> Individual:
    """Roulette-wheel selection over min-shifted fitness values.

    The worst individual always gets weight 0. When every individual scores
    the same, all weights are 0 and the pick is uniform instead. Infinite
    scores outweigh every finite one, so the pick is uniform among them.
    """
    values = np.array([fitness_fn(ind) for ind in population], dtype=np.float64)
    infinite = np.flatnonzero(np.isposinf(values))
    if infinite.size:
        selected = population[int(infinite[rng.randrange(infinite.size)])]
        selected.inc_descendants()
        return selected
    values -= values.min()
    total = values.sum()
    if not np.isfinite(total) or total <= 0.0:
        selected = population[rng.randrange(len(population))]
    else:
        cumulative = np.cumsum(values / total)
        draw = rng.random()
        idx = int(np.searchsorted(cumulative, draw, side="left"))
        # Rounding can leave the cumulative sum just below the draw.
        selected = population[min(idx, len(population) - 1)]
    selected.inc_descendants()
    return selected


def reproduce(x: Individual, y: Individual, individual_length: int, rng: random.Random) -> Individual:
    """Order-based crossover producing one child.

    The cyclic segment ``[p1, p2)`` of ``x`` is kept in place and the rest
    is filled with the remaining cities in the order they appear in ``y``,
    starting at ``p2``.
    """
    working = individual_length - 1
    child = list(x.representation)
    p1 = rng.randrange(working)
    p2 = rng.randrange(working)

    inherited = []
    i = p1
    while i != p2:
        inherited.append(x.representation[i])
        i = (i + 1) % working
    kept = set(inherited)

    cursor = p2
    for city in y.representation[:working]:
        if city in kept:
            continue
        child[cursor] = city
        cursor = (cursor + 1) % working

    child[individual_length - 1] = child[0]
    return Individual(representation=tuple(child))


def swap_mutate(individual: Individual, individual_length: int, rng: random.Random) -> Individual:
    genes = list(individual.representation)
    a = rng.randrange(individual_length - 1)
    b = rng.randrange(individual_length - 1)
    genes[a], genes[b] = genes[b], genes[a]
    genes[individual_length - 1] = genes[0]
    return Individual(representation=tuple(genes))


def best_individual(population: Sequence[Individual], fitness_fn: FitnessFn) -> Individual:
    best = population[0]
    best_score = fitness_fn(best)
    for ind in population[1:]:
        score = fitness_fn(ind)
        if score > best_score:
            best = ind
            best_score = score
    return best


def average_fitness(population: Sequence[Individual], fitness_fn: FitnessFn) -> float:
    scores: List[float] = [fitness_fn(ind) for ind in population]
    return sum(scores) / len(scores)


@dataclass
class Operators:
    select: SelectFn = fitness_proportionate_select
    reproduce: ReproduceFn = reproduce
    mutate: MutateFn = swap_mutate
