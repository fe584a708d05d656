import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Collection, Hashable, Iterable, List, Optional, Sequence, Union

from . import metrics as m
from .individual import Individual
from .metrics import MetricSet, ProgressEvent
from .operators import FitnessFn, Operators, average_fitness, best_individual


logger = logging.getLogger(__name__)

GoalTest = Callable[[Individual], bool]
ProgressListener = Callable[[ProgressEvent], None]


def _cached(population: Sequence[Individual], fitness_fn: FitnessFn) -> FitnessFn:
    # Fitness is pure, so each member of a population is scored once.
    scored = {id(ind): fitness_fn(ind) for ind in population}

    def lookup(ind: Individual) -> float:
        score = scored.get(id(ind))
        return fitness_fn(ind) if score is None else score

    return lookup


class ConfigurationError(ValueError):
    pass


class EmptyPopulationError(ConfigurationError):
    def __init__(self, expected_length: int):
        self.expected_length = expected_length
        super().__init__(
            f"Must start with at least a population of size 1 "
            f"(individuals of length {expected_length})"
        )


class IndividualLengthError(ConfigurationError):
    def __init__(self, individual: Individual, index: int, expected_length: int):
        self.individual = individual
        self.index = index
        self.expected_length = expected_length
        super().__init__(
            f"Individual {individual!r} at position {index} in population has length "
            f"{len(individual)}, not the required length of {expected_length}"
        )


@dataclass
class EvolutionConfig:
    population_size: int = 50
    mutation_probability: float = 0.05
    max_iterations: int = 500
    max_time_ms: float = 0
    random_seed: int = 123


class GeneticAlgorithm:
    """Generational GA over closed tours with single-slot elitism.

    Each generation holds N-1 children bred by selection, crossover and
    optional mutation, plus the best individual of the previous generation.
    """

    def __init__(
        self,
        individual_length: int,
        alphabet: Iterable[Hashable],
        mutation_probability: float,
        rng: Union[random.Random, int, None] = None,
        operators: Optional[Operators] = None,
    ):
        if individual_length < 2:
            raise ConfigurationError(
                f"individual_length must be at least 2 (a closed tour), got {individual_length}"
            )
        if not 0.0 <= mutation_probability <= 1.0:
            raise ConfigurationError(
                f"mutation_probability must lie in [0, 1], got {mutation_probability}"
            )
        self.individual_length = individual_length
        self.alphabet: List[Hashable] = list(dict.fromkeys(alphabet))
        if not self.alphabet:
            raise ConfigurationError("alphabet must contain at least one symbol")
        self.mutation_probability = mutation_probability
        self.rng = rng if isinstance(rng, random.Random) else random.Random(rng)
        self.operators = operators or Operators()
        self.metrics = MetricSet()
        self.iterations = 0
        self._listeners: List[ProgressListener] = []

    @classmethod
    def from_config(
        cls, config: EvolutionConfig, alphabet: Collection[Hashable], individual_length: Optional[int] = None
    ) -> "GeneticAlgorithm":
        if individual_length is None:
            individual_length = len(set(alphabet)) + 1
        return cls(
            individual_length,
            alphabet,
            config.mutation_probability,
            rng=random.Random(config.random_seed),
        )

    def subscribe(self, listener: ProgressListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: ProgressListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def run(
        self,
        initial_population: Iterable[Individual],
        fitness_fn: FitnessFn,
        goal_test: Optional[GoalTest] = None,
        max_iterations: Optional[int] = None,
        max_time_ms: float = 0,
    ) -> Individual:
        """Evolve until ``goal_test`` holds for the best individual or time runs out.

        Without a goal test the run stops once ``max_iterations`` generations
        have completed. At least one generation always runs. ``max_time_ms``
        is checked after every generation and is ignored when not positive.
        """
        if goal_test is None:
            if max_iterations is None:
                raise ConfigurationError("Either goal_test or max_iterations is required")
            limit = max_iterations
            goal_test = lambda _best: self.iterations >= limit

        population = list(initial_population)
        self.validate_population(population)

        self.metrics = MetricSet()
        self.iterations = 0
        start = time.perf_counter()
        logger.info(
            "starting run: population=%d length=%d mutation=%.3f",
            len(population),
            self.individual_length,
            self.mutation_probability,
        )

        fitness = _cached(population, fitness_fn)
        best = best_individual(population, fitness)
        self._record(population, fitness, best, 0.0)

        while True:
            population = self.next_generation(population, fitness, best)
            fitness = _cached(population, fitness_fn)
            best = best_individual(population, fitness)
            self.iterations += 1
            elapsed_ms = (time.perf_counter() - start) * 1000.0
            self._record(population, fitness, best, elapsed_ms)

            # Listener time counts against the budget.
            if max_time_ms > 0 and (time.perf_counter() - start) * 1000.0 > max_time_ms:
                logger.info("time budget of %sms exceeded after %d generations", max_time_ms, self.iterations)
                break
            if goal_test(best):
                logger.info("goal reached after %d generations", self.iterations)
                break
        return best

    def next_generation(
        self, population: Sequence[Individual], fitness_fn: FitnessFn, best_before: Individual
    ) -> List[Individual]:
        cached_fitness = _cached(population, fitness_fn)
        ops = self.operators
        children: List[Individual] = []
        for _ in range(len(population) - 1):
            x = ops.select(population, cached_fitness, self.rng)
            y = ops.select(population, cached_fitness, self.rng)
            child = ops.reproduce(x, y, self.individual_length, self.rng)
            if self.rng.random() < self.mutation_probability:
                child = ops.mutate(child, self.individual_length, self.rng)
            children.append(child)
        children.append(best_before)
        return children

    def validate_population(self, population: Sequence[Individual]) -> None:
        if len(population) < 1:
            raise EmptyPopulationError(self.individual_length)
        for idx, individual in enumerate(population):
            if len(individual) != self.individual_length:
                raise IndividualLengthError(individual, idx, self.individual_length)

    def _record(
        self, population: Sequence[Individual], fitness: FitnessFn, best: Individual, elapsed_ms: float
    ) -> None:
        best_score = fitness(best)
        avg_score = average_fitness(population, fitness)
        self.metrics.record(m.BEST_FITNESS, best_score)
        self.metrics.record(m.AVERAGE_FITNESS, avg_score)
        self.metrics.record(m.POPULATION_SIZE, len(population))
        self.metrics.record(m.ITERATIONS, self.iterations)
        self.metrics.record(m.TIME_IN_MILLISECONDS, elapsed_ms)
        logger.debug(
            "gen %d: best=%.6g avg=%.6g elapsed=%.1fms", self.iterations, best_score, avg_score, elapsed_ms
        )
        event = ProgressEvent(generation=self.iterations, best_fitness=best_score, elapsed_ms=elapsed_ms)
        for listener in list(self._listeners):
            listener(event)
