"""
RandomOpponent: seedable random choices for the game.

- choose(): uniform pick from the legal cells; the oracle resolver's guaranteed-progress fallback.
- pick_symbol(): 50/50 symbol assignment when the player asks for "random".
- pick(): generic choice used for {{random:...}} template placeholders.

Pass a seed (or a random.Random) to make games reproducible in tests.
"""
from __future__ import annotations

import random
from typing import Optional, Sequence, Tuple, TypeVar, Union

from .board import Symbol

T = TypeVar("T")


class RandomOpponent:
    def __init__(self, seed: Union[int, random.Random, None] = None):
        self.rng = seed if isinstance(seed, random.Random) else random.Random(seed)

    def pick(self, options: Sequence[T]) -> T:
        return self.rng.choice(list(options))

    def choose(self, legal: Sequence[Tuple[int, int]]) -> Optional[Tuple[int, int]]:
        return self.pick(legal) if legal else None

    def pick_symbol(self) -> Symbol:
        return self.pick([Symbol.X, Symbol.O])
