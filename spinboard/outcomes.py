import random
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Segment:
    option: str
    background_color: str
    text_color: str = 'white'


GREEN = '#16a34a'
RED = '#dc2626'
BLACK = '#000000'

# Wheel order, clockwise from the zero pocket.
WHEEL = (
    Segment('0', GREEN),
    Segment('32', RED),
    Segment('15', BLACK),
    Segment('19', RED),
    Segment('4', BLACK),
    Segment('21', RED),
    Segment('2', BLACK),
    Segment('25', RED),
    Segment('17', BLACK),
    Segment('34', RED),
    Segment('6', BLACK),
    Segment('27', RED),
    Segment('13', BLACK),
    Segment('36', RED),
    Segment('11', BLACK),
    Segment('30', RED),
)


def wheel_value(index: int) -> str:
    return WHEEL[index].option


@dataclass(frozen=True)
class Outcome:
    index: int
    value: str

    @property
    def segment(self) -> Segment:
        return WHEEL[self.index]


class OutcomeGenerator:
    """Draws wheel outcomes uniformly over the catalog.

    `rng` may be any object with a `randrange` method, which lets tests pin
    the landing pocket.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.SystemRandom()

    def next(self) -> Outcome:
        index = self._rng.randrange(len(WHEEL))
        return Outcome(index=index, value=wheel_value(index))
