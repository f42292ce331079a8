
import numpy as np
from numba import njit
from numba import int64, uint64, void

from .RNG_helpers import (QSIZE, QSIZE_U, WARMUP, CARRY, XCNG, XS, INDEX,
                          XCNG_REFERENCE, XS_INIT, CARRY_INIT,
                          cng_next, xs_next)

"""
Every kernel works in place on the pair (Q, s):

    Q : uint64[QSIZE]   lagged array
    s : uint64[4]       [carry, xcng, xs, index]

The seeded flag is not visible here, callers make sure a seeding kernel ran first.
"""

ONE = np.uint64(1)
ZERO = np.uint64(0)


# ─────────────────────────────────────────────────────────────────────────────
#  Add-with-carry refill over the whole lagged array
# ─────────────────────────────────────────────────────────────────────────────
@njit(uint64(uint64[::1], uint64[::1]), nogil=True)
def refill(Q, s):
    """
    Regenerates Q in place, threads the carry through all QSIZE words,
    leaves index = 1 and returns Q[0].
    """
    carry = s[CARRY]

    for i in range(QSIZE):
        q = Q[i]
        h = carry & ONE
        z = ((q << np.uint64(41)) >> ONE) + ((q << np.uint64(39)) >> ONE) + (carry >> ONE)
        carry = (q >> np.uint64(23)) + (q >> np.uint64(25)) + (z >> np.uint64(63))
        Q[i] = ~((z << ONE) + h)

    s[CARRY] = carry
    s[INDEX] = ONE
    return Q[0]


# ─────────────────────────────────────────────────────────────────────────────
#  Draws
# ─────────────────────────────────────────────────────────────────────────────
@njit(uint64(uint64[::1], uint64[::1]), nogil=True)
def next_uint(Q, s):
    idx = s[INDEX]
    if idx < QSIZE_U:
        result = Q[np.int64(idx)]
        s[INDEX] = idx + ONE
    else:
        result = refill(Q, s)

    s[XS] = xs_next(s[XS])
    return result + cng_next(s) + s[XS]


@njit(void(uint64[::1], uint64[::1], uint64[::1]), nogil=True)
def fill_uint(Q, s, out):
    for k in range(out.shape[0]):
        out[k] = next_uint(Q, s)


@njit(uint64(uint64[::1], uint64[::1], int64), nogil=True)
def discard(Q, s, n):
    """Advance n draws; returns the last one (0 when n == 0)."""
    last = ZERO
    for _ in range(n):
        last = next_uint(Q, s)
    return last


@njit(void(uint64[::1], uint64[::1]), nogil=True)
def warm_up(Q, s):
    discard(Q, s, WARMUP)


# ─────────────────────────────────────────────────────────────────────────────
#  Deterministic population (no warm-up, see generator.SuperKISS64.seed*)
# ─────────────────────────────────────────────────────────────────────────────
@njit(void(uint64[::1]), nogil=True, inline='always')
def _reset_scalars(s):
    s[XS] = XS_INIT
    s[CARRY] = CARRY_INIT
    s[INDEX] = QSIZE_U


@njit(void(uint64[::1], uint64[::1]), nogil=True, inline='always')
def _fill_cng_xs(Q, s):
    for i in range(QSIZE):
        s[XS] = xs_next(s[XS])
        Q[i] = cng_next(s) + s[XS]


@njit(void(uint64[::1], uint64[::1], uint64), nogil=True)
def populate_from_int(Q, s, seed):
    """seed == 0 selects the reference congruential start."""
    if seed == ZERO:
        s[XCNG] = XCNG_REFERENCE
    else:
        s[XCNG] = seed
    _reset_scalars(s)
    _fill_cng_xs(Q, s)


@njit(void(uint64[::1], uint64[::1], uint64[::1]), nogil=True)
def populate_from_array(Q, s, values):
    """
    Walks `values` cyclically while filling Q. Q[0] is written twice:
    once from values[0] at the start and once more after the last word.
    """
    count = values.shape[0]
    s[XCNG] = XCNG_REFERENCE
    _reset_scalars(s)

    if count == 0:
        _fill_cng_xs(Q, s)
        return

    s[XS] = xs_next(s[XS])
    Q[0] = values[0] + cng_next(s) + s[XS]

    j = 1
    for i in range(1, QSIZE):
        prev = Q[i - 1]
        j %= count
        Q[i] = values[j] + cng_next(s) + xs_next(prev) + np.uint64(i)
        j += 1

    Q[0] = values[j % count] + cng_next(s) + xs_next(Q[QSIZE - 1]) + QSIZE_U
