import numpy as np
from numba import njit
from numba import uint64

# ─────────────────────────────────────────────────────────────────────────────
#  Constants shared by every kernel
# ─────────────────────────────────────────────────────────────────────────────
QSIZE = 20632                     # length of the lagged array Q
QSIZE_U = np.uint64(QSIZE)
WARMUP = 4 * QSIZE                # draws discarded after deterministic seeding

MASK64 = (1 << 64) - 1

# scalar state vector s: uint64[4]
CARRY = 0
XCNG = 1
XS = 2
INDEX = 3
N_SCALARS = 4

CNG_MUL = np.uint64(6906969069)
CNG_ADD = np.uint64(123)

XCNG_REFERENCE = np.uint64(12367890123456)   # seed == 0 and array seeding
XS_INIT = np.uint64(521288629546311)
CARRY_INIT = np.uint64(36243678541)

# known output after 10**9 draws from seed 0
REFERENCE_DRAWS = 1_000_000_000
REFERENCE_VALUE = 4013566000157423768

FLOAT64_ONE_BITS = np.uint64(0x3FF0000000000000)
FLOAT32_ONE_BITS = np.uint32(0x3F800000)


# ─────────────────────────────────────────────────────────────────────────────
#  Combiner primitives: 64-bit congruential step and 64-bit xorshift step
# ─────────────────────────────────────────────────────────────────────────────
@njit(uint64(uint64[::1]), nogil=True, inline='always')
def cng_next(s):
    """
    Advances the congruential accumulator s[XCNG] in place and returns it.
    """
    s[XCNG] = CNG_MUL * s[XCNG] + CNG_ADD
    return s[XCNG]


@njit(uint64(uint64), nogil=True, inline='always')
def xs_next(x):
    """
    One xorshift step. Bijective on uint64, with 0 as its only fixed point.
    """
    x ^= x << np.uint64(13)
    x ^= x >> np.uint64(17)
    x ^= x << np.uint64(43)
    return x


def new_state_arrays():
    """Fresh (Q, s) pair: all zeros, C-contiguous uint64."""
    Q = np.zeros(QSIZE, dtype=np.uint64)
    s = np.zeros(N_SCALARS, dtype=np.uint64)
    return Q, s
