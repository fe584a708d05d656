import random
from typing import Iterable, List, Optional

from genetic_tsp.individual import Individual


class ScriptedRandom(random.Random):
    """random.Random that replays fixed offsets and draws before falling back to a seed."""

    def __init__(self, offsets: Iterable[int] = (), draws: Iterable[float] = (), seed: Optional[int] = 0):
        super().__init__(seed)
        self.offsets: List[int] = list(offsets)
        self.draws: List[float] = list(draws)

    # Keeps randrange/shuffle on getrandbits instead of the overridden random().
    def getrandbits(self, k):
        return super().getrandbits(k)

    def randrange(self, *args, **kwargs):
        if self.offsets:
            return self.offsets.pop(0)
        return super().randrange(*args, **kwargs)

    def random(self):
        if self.draws:
            return self.draws.pop(0)
        return super().random()


def ind(symbols: str) -> Individual:
    return Individual(representation=tuple(symbols))


def assert_closed_permutation(test, individual: Individual, cities) -> None:
    rep = individual.representation
    test.assertEqual(rep[0], rep[-1])
    test.assertEqual(sorted(rep[:-1]), sorted(cities))
