"""
Generational genetic algorithm for the travelling salesman problem.
"""

from .evolutionary import (
    ConfigurationError,
    EmptyPopulationError,
    EvolutionConfig,
    GeneticAlgorithm,
    IndividualLengthError,
)
from .individual import Individual
from .metrics import Metric, MetricSet, ProgressEvent
from .operators import (
    Operators,
    average_fitness,
    best_individual,
    fitness_proportionate_select,
    reproduce,
    swap_mutate,
)

__all__ = [
    "data",
    "evaluation",
    "ConfigurationError",
    "EmptyPopulationError",
    "EvolutionConfig",
    "GeneticAlgorithm",
    "Individual",
    "IndividualLengthError",
    "Metric",
    "MetricSet",
    "Operators",
    "ProgressEvent",
    "average_fitness",
    "best_individual",
    "fitness_proportionate_select",
    "reproduce",
    "swap_mutate",
]
