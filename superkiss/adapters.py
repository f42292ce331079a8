"""random.Random on top of SuperKISS64.

    import random
    from superkiss import SuperKISS64, SuperKISSRandom

    r = SuperKISSRandom(SuperKISS64(seed))
    r.shuffle(items); r.randrange(1000); r.sample(population, k)

seed() is ignored: the wrapped generator is the only state. Save/restore the
generator (or use getstate/setstate) to resume a sequence of shuffles.
"""

from __future__ import annotations

import random
from typing import Optional

from .generator import SuperKISS64
from .init_and_checkpoints import GeneratorState

_STATE_VERSION = "superkiss-1"


class SuperKISSRandom(random.Random):

    def __init__(self, generator: Optional[SuperKISS64] = None):
        self._gen = generator if generator is not None else SuperKISS64.from_entropy()
        super().__init__()

    @property
    def generator(self) -> SuperKISS64:
        return self._gen

    def seed(self, a=None, version=2) -> None:
        # ignored hook, random.Random.__init__ calls it
        pass

    def random(self) -> float:
        return self._gen.next_float64()

    def getrandbits(self, k: int) -> int:
        if k < 0:
            raise ValueError("number of bits must be non-negative")
        if k == 0:
            return 0
        words = (k + 63) // 64
        x = int.from_bytes(self._gen.uint64_array(words).astype("<u8", copy=False).tobytes(), "little")
        return x >> (words * 64 - k)

    def randbytes(self, n: int) -> bytes:
        return self._gen.randbytes(n)

    def getstate(self):
        return (_STATE_VERSION, self._gen.get_state(), self.gauss_next)

    def setstate(self, state) -> None:
        try:
            version, gen_state, gauss_next = state
        except (TypeError, ValueError) as err:
            raise ValueError("state is not a SuperKISSRandom state") from err
        if version != _STATE_VERSION or not isinstance(gen_state, GeneratorState):
            raise ValueError(f"state is not a SuperKISSRandom state (version={version!r})")
        self._gen.set_state(gen_state)
        self.gauss_next = gauss_next

    def __reduce__(self):
        return (self.__class__, (SuperKISS64(),), self.getstate())


__all__ = ["SuperKISSRandom"]
