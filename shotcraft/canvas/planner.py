from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence, Union

from shotcraft.core.objects import Screenshot


@dataclass(frozen=True)
class Single:
    index: int

    @property
    def indices(self) -> tuple[int, ...]:
        return (self.index,)


@dataclass(frozen=True)
class Pair:
    primary: int
    secondary: int

    @property
    def indices(self) -> tuple[int, ...]:
        return (self.primary, self.secondary)


RenderItem = Union[Single, Pair]


def iter_render_items(screenshots: Sequence[Screenshot]) -> Iterator[RenderItem]:
    i = 0
    n = len(screenshots)
    while i < n:
        if screenshots[i].settings.linked_to_next and i + 1 < n:
            yield Pair(i, i + 1)
            i += 2
        else:
            yield Single(i)
            i += 1


def plan_render_items(screenshots: Sequence[Screenshot]) -> list[RenderItem]:
    """Partition the ordered list into the units the composer draws.

    A screen flagged ``linked_to_next`` absorbs its successor into a
    ``Pair``; a trailing flag with no successor renders as ``Single``.
    Every index appears exactly once, in order.
    """
    return list(iter_render_items(screenshots))
