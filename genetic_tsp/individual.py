from dataclasses import dataclass, field
from typing import Hashable, Sequence, Tuple


@dataclass
class Individual:
    """A closed tour: the last symbol repeats the first one.

    ``descendants`` counts how often the individual was picked as a parent.
    It is bookkeeping only and does not take part in equality.
    """

    representation: Tuple[Hashable, ...]
    descendants: int = field(default=0, compare=False)

    def __post_init__(self):
        if not isinstance(self.representation, tuple):
            object.__setattr__(self, "representation", tuple(self.representation))

    def __setattr__(self, name, value):
        if name == "representation" and "representation" in self.__dict__:
            raise AttributeError("Individual.representation is read-only; build a new Individual")
        super().__setattr__(name, value)

    @staticmethod
    def tour(cities: Sequence[Hashable]) -> "Individual":
        cities = list(cities)
        if not cities:
            return Individual(representation=())
        return Individual(representation=tuple(cities) + (cities[0],))

    def inc_descendants(self) -> None:
        self.descendants += 1

    @property
    def is_closed(self) -> bool:
        return bool(self.representation) and self.representation[0] == self.representation[-1]

    @property
    def cities(self) -> Tuple[Hashable, ...]:
        # Open ordering without the closing symbol.
        return self.representation[:-1]

    def __len__(self) -> int:
        return len(self.representation)

    def __repr__(self) -> str:
        path = " ".join(str(s) for s in self.representation)
        return f"Individual([{path}], descendants={self.descendants})"
