"""
Per-run metric series and progress events published by the engine.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple


BEST_FITNESS = "bestFitness"
AVERAGE_FITNESS = "averageFitness"
POPULATION_SIZE = "populationSize"
ITERATIONS = "iterations"
TIME_IN_MILLISECONDS = "timeInMilliseconds"


@dataclass(frozen=True)
class ProgressEvent:
    generation: int
    best_fitness: float
    elapsed_ms: float


class Metric:
    """Append-only named series, one value per generation."""

    def __init__(self, name: str):
        self.name = name
        self._values: List[float] = []

    def append(self, value: float) -> None:
        self._values.append(value)

    @property
    def values(self) -> Tuple[float, ...]:
        return tuple(self._values)

    @property
    def last(self) -> Optional[float]:
        return self._values[-1] if self._values else None

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[float]:
        return iter(tuple(self._values))

    def to_state(self) -> Dict:
        return {"name": self.name, "values": list(self._values)}

    def __repr__(self) -> str:
        return f"Metric({self.name!r}, size={len(self._values)})"


class MetricSet:
    def __init__(self):
        self._metrics: Dict[str, Metric] = {}

    def get(self, name: str) -> Metric:
        metric = self._metrics.get(name)
        if metric is None:
            metric = Metric(name)
            self._metrics[name] = metric
        return metric

    def record(self, name: str, value: float) -> None:
        self.get(name).append(value)

    def values(self, name: str) -> Tuple[float, ...]:
        if name not in self._metrics:
            return ()
        return self._metrics[name].values

    def names(self) -> List[str]:
        return list(self._metrics)

    def __contains__(self, name: str) -> bool:
        return name in self._metrics

    def to_state(self) -> Dict:
        return {name: list(metric.values) for name, metric in self._metrics.items()}
