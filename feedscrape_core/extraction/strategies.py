import logging
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Sequence, Tuple, TypeVar

from feedscrape_core.content_item import ContentItem

logger = logging.getLogger(__name__)

T = TypeVar("T")

Strategy = Callable[[ContentItem], Optional[T]]


@dataclass
class StrategyHit(Generic[T]):
    """Value found by a chain and the name of the strategy that found it."""
    value: T
    strategy: str


class StrategyChain(Generic[T]):
    """
    Ordered extraction strategies; the first one returning a value wins.

    A strategy that raises is treated as a miss so one broken heuristic never
    blocks the ones after it.
    """

    def __init__(self, name: str, strategies: Sequence[Tuple[str, Strategy]]):
        self.name = name
        self.strategies: List[Tuple[str, Strategy]] = list(strategies)

    def __len__(self) -> int:
        return len(self.strategies)

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.strategies]

    def run(self, item: ContentItem) -> Optional[StrategyHit[T]]:
        for name, strategy in self.strategies:
            try:
                value = strategy(item)
            except Exception as e:
                logger.debug(f"{self.name}: strategy {name} failed: {e}")
                continue
            if value is not None:
                return StrategyHit(value=value, strategy=name)
        return None

    def __call__(self, item: ContentItem) -> Optional[T]:
        hit = self.run(item)
        return hit.value if hit else None
