# Path: core/indexing/handle.py
# Purpose: Hold the currently published index generation for concurrent readers.
# Layer: core/indexing.
# Details: Readers copy out under a shared lock; the reload path swaps in whole generations under an exclusive lock.

from __future__ import annotations

import random
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from core.models.domain import ImageEntry


class ReadWriteLock:
    """Lock allowing many concurrent readers or a single writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


@dataclass(frozen=True)
class IndexGeneration:
    """One complete snapshot produced by a single scan+optimise cycle."""

    number: int
    entries: Mapping[str, ImageEntry] = field(default_factory=dict)
    names: Tuple[str, ...] = ()

    @classmethod
    def build(cls, number: int, entries: Dict[str, ImageEntry]) -> "IndexGeneration":
        frozen = MappingProxyType(dict(entries))
        return cls(number=number, entries=frozen, names=tuple(frozen.keys()))


class IndexHandle:
    """Publish index generations to HTTP handlers.

    ``publish`` is called by the single writer (startup and the change
    watcher). Readers never hold the lock across I/O; they copy what they
    need and release it.
    """

    def __init__(self, entries: Optional[Dict[str, ImageEntry]] = None) -> None:
        self._lock = ReadWriteLock()
        self._generation = IndexGeneration.build(0, entries or {})

    def publish(self, entries: Dict[str, ImageEntry]) -> IndexGeneration:
        """Replace the current generation with one built from ``entries``."""

        with self._lock.read():
            number = self._generation.number + 1
        generation = IndexGeneration.build(number, entries)
        with self._lock.write():
            self._generation = generation
        return generation

    def snapshot(self) -> IndexGeneration:
        with self._lock.read():
            return self._generation

    def names(self) -> List[str]:
        with self._lock.read():
            return list(self._generation.names)

    def shuffled_names(self, rng: Optional[random.Random] = None) -> List[str]:
        """Return the current names in random order; the published list is untouched."""

        names = self.names()
        (rng or random).shuffle(names)
        return names

    def lookup(self, name: str) -> Optional[ImageEntry]:
        return self.snapshot().entries.get(name)

    def __len__(self) -> int:
        return len(self.snapshot().names)
