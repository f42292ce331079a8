"""OS-entropy source used to seed SuperKISS64 with non-reproducible state.

Not intended for cryptographic use: it only gives easy access to the whole
reachable SuperKISS64 state space. A single instance is not safe for
concurrent use without external locking.
"""

from __future__ import annotations

import os

U64_BYTES = 8
BUFFER_WORDS = 32


class EntropyError(RuntimeError):
    """The operating system could not supply random bytes."""


def _urandom(n: int) -> bytes:
    try:
        data = os.urandom(n)
    except (OSError, NotImplementedError) as err:
        raise EntropyError(f"os.urandom({n}) failed: {err}") from err
    if len(data) != n:
        raise EntropyError(f"os.urandom returned {len(data)} of {n} bytes")
    return data


class EntropySource:
    """
    Pull-based 64-bit values from os.urandom, read BUFFER_WORDS words at a time.
    """

    def __init__(self):
        self._buf = b""
        self._next = 0

    def seed(self, seed=None) -> None:
        # noop: there is nothing to reseed
        pass

    def uint64(self) -> int:
        if self._next >= len(self._buf):
            self._buf = _urandom(U64_BYTES * BUFFER_WORDS)
            self._next = 0
        n = int.from_bytes(self._buf[self._next:self._next + U64_BYTES], "little")
        self._next += U64_BYTES
        return n

    def int63(self) -> int:
        return self.uint64() >> 1

    def read(self, buf) -> int:
        """Fills the writable bytes-like `buf` completely; returns its length."""
        view = memoryview(buf).cast("B")
        view[:] = _urandom(view.nbytes)
        return view.nbytes
