"""Deterministic random helpers used across the game logic."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence  # noqa: TC003
from random import Random
from typing import TypeVar

_T = TypeVar("_T")
_K = TypeVar("_K")


class DeterministicRandomService:
    """Thin wrapper around :class:`random.Random` providing deterministic utilities.

    Every random decision made during turn resolution goes through a single
    instance of this service so a seeded session replays identically.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._seed = seed
        self._random = Random(seed)  # noqa: S311

    @property
    def seed(self) -> int | None:
        """Return the base seed for the service."""
        return self._seed

    def reseed(self, seed: int | None) -> None:
        """Reset the random generator to a new seed."""
        self._seed = seed
        self._random = Random(seed)  # noqa: S311

    def random(self) -> float:
        """Return a float in ``[0, 1)``."""
        return self._random.random()

    def uniform(self, lower: float, upper: float) -> float:
        """Return a float between *lower* and *upper*."""
        return self._random.uniform(lower, upper)

    def roll(self, probability: float) -> bool:
        """Return ``True`` with the given *probability*."""
        return self._random.random() < probability

    def choice(self, population: Sequence[_T]) -> _T:
        """Return a deterministic choice from *population*."""
        if not population:
            msg = "Cannot choose from an empty population."
            raise ValueError(msg)
        return population[self._random.randrange(len(population))]

    def shuffle(self, items: Iterable[_T]) -> tuple[_T, ...]:
        """Return a shuffled tuple of *items* using the service RNG."""
        mutable = list(items)
        self._random.shuffle(mutable)
        return tuple(mutable)

    def weighted_choice(self, weights: Mapping[_K, float]) -> _K | None:
        """Pick a key from *weights* with probability proportional to its weight.

        Cumulative weights are accumulated in mapping order, a single draw is
        taken from ``uniform(0, total)`` and the walk stops at the first key
        whose cumulative weight exceeds the draw. Returns ``None`` when no
        key carries a positive weight.
        """
        entries = [(key, weight) for key, weight in weights.items() if weight > 0]
        if not entries:
            return None
        total = sum(weight for _, weight in entries)
        draw = self._random.uniform(0, total)
        cumulative = 0.0
        for key, weight in entries:
            cumulative += weight
            if cumulative > draw:
                return key
        return entries[-1][0]


__all__ = ["DeterministicRandomService"]
