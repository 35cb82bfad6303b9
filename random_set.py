#!/usr/bin/env python3
"""
Unordered collection with O(1) insertion, removal and uniform random extraction
"""

import random
from typing import Dict, Generic, Hashable, Iterator, List, TypeVar

T = TypeVar("T", bound=Hashable)


class RandomSet(Generic[T]):
    """Set backed by a list for index sampling plus an item -> index map.

    Removal swaps the victim with the last element and pops, so order is not
    preserved. Each item is stored at most once.
    """

    def __init__(self, items=()):
        self._items: List[T] = []
        self._index: Dict[T, int] = {}
        for item in items:
            self.add(item)

    def add(self, item: T) -> bool:
        """Insert item; returns False if it was already a member"""
        if item in self._index:
            return False
        self._index[item] = len(self._items)
        self._items.append(item)
        return True

    def discard(self, item: T) -> bool:
        """Remove item; returns False if it was not a member"""
        position = self._index.pop(item, None)
        if position is None:
            return False
        last = self._items.pop()
        if position < len(self._items):
            self._items[position] = last
            self._index[last] = position
        return True

    def pop_random(self, rng: random.Random) -> T:
        """Remove and return a uniformly chosen member"""
        if not self._items:
            raise KeyError("pop from an empty RandomSet")
        item = self._items[rng.randrange(len(self._items))]
        self.discard(item)
        return item

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __contains__(self, item) -> bool:
        return item in self._index

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def __repr__(self):
        return f"RandomSet({self._items!r})"
