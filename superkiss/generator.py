"""SuperKISS64: George Marsaglia's immense-period 64-bit generator.

Period 5 * 2**1320480 * (2**64 - 1), i.e. more than 10**397524. The state is
a QSIZE-word lagged array refilled by an add-with-carry pass, and every
output word is mixed with a congruential and an xorshift generator.

Neither this generator nor its entropy-seeded variant is suitable for
cryptographic use. An instance is not thread-safe: serialise access with a
lock or give each consumer its own instance.
"""

from __future__ import annotations

import operator
from typing import Iterable, Optional, Union

import numpy as np
from numpy.typing import NDArray

from .RNG_helpers import (QSIZE, MASK64, CARRY, XCNG, XS, INDEX,
                          FLOAT64_ONE_BITS, FLOAT32_ONE_BITS, new_state_arrays)
from .jitted_kernel import (next_uint, fill_uint, discard, warm_up,
                            populate_from_int, populate_from_array)
from .entropy import EntropySource
from .init_and_checkpoints import (GeneratorState, GeneratorConfig, PathLike,
                                   draw_entropy_state, state_to_bytes, state_from_bytes,
                                   save_state, load_state)


def _as_uint64_values(values) -> NDArray[np.uint64]:
    """Any iterable of ints (or integer ndarray) reduced mod 2**64."""
    if isinstance(values, np.ndarray):
        if values.dtype.kind not in "iu":
            raise TypeError(f"values must be integers, got dtype {values.dtype}")
        return np.ascontiguousarray(values.ravel().astype(np.uint64))
    out = []
    for v in values:
        if isinstance(v, bool) or not isinstance(v, (int, np.integer)):
            raise TypeError(f"values must be integers, got {type(v).__name__}")
        out.append(int(v) & MASK64)
    return np.array(out, dtype=np.uint64)


def _check_size(size: int) -> int:
    size = operator.index(size)
    if size < 0:
        raise ValueError("size must be >= 0")
    return size


class SuperKISS64:
    """
    SuperKISS64(seed) seeds with an integer; SuperKISS64() stays unseeded and
    seeds itself with 1 on the first draw.
    """

    def __init__(self, seed: Optional[int] = None):
        self._Q, self._s = new_state_arrays()
        self._seeded = False
        if seed is not None:
            self.seed(seed)

    # ------------------------------------------------------------------
    # constructors
    # ------------------------------------------------------------------
    @classmethod
    def from_array(cls, values) -> "SuperKISS64":
        r = cls()
        r.seed_array(values)
        return r

    @classmethod
    def from_entropy(cls, source=None) -> "SuperKISS64":
        r = cls()
        r.seed_from_entropy(source)
        return r

    @classmethod
    def from_state_file(cls, path: PathLike) -> "SuperKISS64":
        r = cls()
        r.load_state(path)
        return r

    @classmethod
    def from_config(cls, config: GeneratorConfig) -> "SuperKISS64":
        if config.mode == "seed":
            return cls(config.seed)
        if config.mode == "array":
            return cls.from_array(config.values)
        if config.mode == "entropy":
            return cls.from_entropy()
        return cls.from_state_file(config.state_path)

    @property
    def is_seeded(self) -> bool:
        return self._seeded

    # ------------------------------------------------------------------
    # seeding
    # ------------------------------------------------------------------
    def seed(self, seed: int) -> None:
        """
        Integer seeding. seed == 0 reproduces the reference sequence and skips
        the warm-up; any other seed (negative ones as two's complement) is
        followed by 4*QSIZE discarded draws.
        """
        if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)):
            raise TypeError(f"seed must be an integer, got {type(seed).__name__}")
        useed = int(seed) & MASK64
        self._seeded = True
        populate_from_int(self._Q, self._s, np.uint64(useed))
        if useed != 0:
            warm_up(self._Q, self._s)

    def seed_array(self, values: Union[Iterable[int], NDArray]) -> None:
        """
        Seeds from a sequence of any length; QSIZE values or more reach the
        whole state space, a single integer seed only reaches 2**64 points.
        Always warmed up.
        """
        vals = _as_uint64_values(values)
        self._seeded = True
        populate_from_array(self._Q, self._s, vals)
        warm_up(self._Q, self._s)

    def seed_from_entropy(self, source=None) -> None:
        """
        Draws every state word from `source` (default: a fresh EntropySource).
        Raises whatever the source raises, leaving the previous state intact.
        """
        if source is None:
            source = EntropySource()
        self.set_state(draw_entropy_state(source))

    def _ensure_seeded(self) -> None:
        if not self._seeded:
            self.seed(1)

    # ------------------------------------------------------------------
    # output
    # ------------------------------------------------------------------
    def next_uint64(self) -> int:
        self._ensure_seeded()
        return int(next_uint(self._Q, self._s))

    def next_int63(self) -> int:
        """Uniform in [0, 2**63)."""
        return self.next_uint64() >> 1

    def next_float64(self) -> float:
        """Uniform in [0, 1) with 52 random mantissa bits."""
        bits = (np.uint64(self.next_uint64()) >> np.uint64(2)) | FLOAT64_ONE_BITS
        return float(bits.view(np.float64) - 1.0)

    def next_float32(self) -> float:
        """Uniform in [0, 1) with 23 random mantissa bits, taken from the low word."""
        low = np.uint32(self.next_uint64() & 0xFFFFFFFF)
        bits = (low >> np.uint32(2)) | FLOAT32_ONE_BITS
        return float(bits.view(np.float32) - np.float32(1.0))

    def uint64_array(self, size: int) -> NDArray[np.uint64]:
        out = np.empty(_check_size(size), dtype=np.uint64)
        if out.size:
            self._ensure_seeded()
            fill_uint(self._Q, self._s, out)
        return out

    def float64_array(self, size: int) -> NDArray[np.float64]:
        u = self.uint64_array(size)
        return ((u >> np.uint64(2)) | FLOAT64_ONE_BITS).view(np.float64) - 1.0

    def float32_array(self, size: int) -> NDArray[np.float32]:
        low = self.uint64_array(size).astype(np.uint32)
        return ((low >> np.uint32(2)) | FLOAT32_ONE_BITS).view(np.float32) - np.float32(1.0)

    def read(self, buf) -> int:
        """
        Fills the writable bytes-like `buf` with little-endian draws. A partial
        tail takes the low bytes of one more draw. Returns len(buf).
        """
        view = memoryview(buf).cast("B")
        n = view.nbytes
        view[:] = self.randbytes(n)
        return n

    def randbytes(self, n: int) -> bytes:
        n = _check_size(n)
        words = self.uint64_array((n + 7) // 8)
        return words.astype("<u8", copy=False).tobytes()[:n]

    def discard(self, n: int) -> int:
        """Advances n draws and returns the last one (0 when n == 0)."""
        n = _check_size(n)
        if n == 0:
            return 0
        self._ensure_seeded()
        return int(discard(self._Q, self._s, n))

    # ------------------------------------------------------------------
    # state
    # ------------------------------------------------------------------
    def get_state(self) -> GeneratorState:
        return GeneratorState(
            carry=int(self._s[CARRY]),
            xcng=int(self._s[XCNG]),
            xs=int(self._s[XS]),
            index=int(self._s[INDEX]),
            Q=self._Q,
            seeded=self._seeded,
        )

    def set_state(self, state: GeneratorState) -> None:
        if not isinstance(state, GeneratorState):
            raise TypeError(f"expected GeneratorState, got {type(state).__name__}")
        self._Q[:] = state.Q
        self._s[:] = state.scalars()
        self._seeded = state.seeded

    def snapshot(self, compress: bool = False) -> bytes:
        return state_to_bytes(self.get_state(), compress=compress)

    def restore(self, blob: bytes) -> None:
        """Raises StateError on malformed input; the current state is then untouched."""
        self.set_state(state_from_bytes(blob))

    def save_state(self, path: PathLike) -> None:
        """Writes the state to `path`; a ".gz" suffix selects compression."""
        save_state(path, self.get_state())

    def load_state(self, path: PathLike) -> None:
        self.set_state(load_state(path))

    def __repr__(self) -> str:
        if not self._seeded:
            return f"{type(self).__name__}(unseeded)"
        return f"{type(self).__name__}(index={int(self._s[INDEX])}/{QSIZE})"
