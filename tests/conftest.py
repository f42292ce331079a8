import numpy as np
import pytest

from superkiss import SuperKISS64

MASK64 = (1 << 64) - 1


def py_cng(x):
    return (6906969069 * x + 123) & MASK64


def py_xs(x):
    x ^= (x << 13) & MASK64
    x ^= x >> 17
    x ^= (x << 43) & MASK64
    return x


class ListSource:
    """Entropy stand-in replaying fixed words, then counting up from `tail`."""

    def __init__(self, words, tail=1):
        self.words = list(words)
        self.tail = tail
        self.calls = 0

    def uint64(self):
        self.calls += 1
        if self.words:
            return self.words.pop(0)
        self.tail += 1
        return self.tail & MASK64


class FailingSource:
    def __init__(self, after=0):
        self.after = after

    def uint64(self):
        if self.after <= 0:
            raise OSError("entropy pool unavailable")
        self.after -= 1
        return 12345


@pytest.fixture
def seeded():
    return SuperKISS64(20240917)


@pytest.fixture
def rng_np():
    return np.random.default_rng(0)
