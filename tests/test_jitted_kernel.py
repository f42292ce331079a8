import numpy as np
import pytest

from superkiss.RNG_helpers import (QSIZE, WARMUP, CARRY, XCNG, XS, INDEX,
                                   new_state_arrays)
from superkiss.jitted_kernel import (refill, next_uint, fill_uint, discard, warm_up,
                                     populate_from_int, populate_from_array)

from conftest import MASK64, py_cng, py_xs


def py_refill(Q, carry):
    Q = list(Q)
    for i in range(QSIZE):
        q = Q[i]
        h = carry & 1
        z = ((((q << 41) & MASK64) >> 1) + (((q << 39) & MASK64) >> 1) + (carry >> 1)) & MASK64
        carry = ((q >> 23) + (q >> 25) + (z >> 63)) & MASK64
        Q[i] = ~(((z << 1) + h) & MASK64) & MASK64
    return Q, carry


def py_populate_from_array(values):
    count = len(values)
    xcng, xs = 12367890123456, 521288629546311
    Q = [0] * QSIZE
    xs = py_xs(xs)
    xcng = py_cng(xcng)
    Q[0] = (values[0] + xcng + xs) & MASK64
    j = 1
    for i in range(1, QSIZE):
        prev = Q[i - 1]
        j %= count
        xcng = py_cng(xcng)
        Q[i] = (values[j] + xcng + py_xs(prev) + i) & MASK64
        j += 1
    xcng = py_cng(xcng)
    Q[0] = (values[j % count] + xcng + py_xs(Q[QSIZE - 1]) + QSIZE) & MASK64
    return Q, xcng, xs


@pytest.fixture
def random_state(rng_np):
    Q, s = new_state_arrays()
    Q[:] = rng_np.integers(0, 2**64 - 1, size=QSIZE, dtype=np.uint64, endpoint=True)
    s[:] = np.array([36243678541, 99, 12345, QSIZE], dtype=np.uint64)
    return Q, s


def test_refill_matches_reference(random_state):
    Q, s = random_state
    want_Q, want_carry = py_refill([int(q) for q in Q], int(s[CARRY]))

    first = refill(Q, s)

    assert [int(q) for q in Q] == want_Q
    assert int(s[CARRY]) == want_carry
    assert int(s[INDEX]) == 1
    assert int(first) == want_Q[0]


def test_refill_keeps_combiners(random_state):
    Q, s = random_state
    refill(Q, s)
    assert int(s[XCNG]) == 99 and int(s[XS]) == 12345


def test_next_uint_reads_buffer_then_refills(random_state):
    Q, s = random_state
    s[INDEX] = np.uint64(QSIZE - 1)
    last = int(Q[QSIZE - 1])

    xs = py_xs(12345)
    xcng = py_cng(99)
    assert int(next_uint(Q, s)) == (last + xcng + xs) & MASK64
    assert int(s[INDEX]) == QSIZE

    want_Q, _ = py_refill([int(q) for q in Q], int(s[CARRY]))
    xs = py_xs(xs)
    xcng = py_cng(xcng)
    assert int(next_uint(Q, s)) == (want_Q[0] + xcng + xs) & MASK64
    assert int(s[INDEX]) == 1


def test_fill_uint_equals_single_draws(random_state):
    Q, s = random_state
    Q2, s2 = Q.copy(), s.copy()
    out = np.empty(QSIZE + 50, dtype=np.uint64)
    fill_uint(Q, s, out)
    singles = [next_uint(Q2, s2) for _ in range(out.size)]
    assert [int(v) for v in out] == [int(v) for v in singles]
    assert np.array_equal(Q, Q2) and np.array_equal(s, s2)


def test_discard_returns_last(random_state):
    Q, s = random_state
    Q2, s2 = Q.copy(), s.copy()
    out = np.empty(1000, dtype=np.uint64)
    fill_uint(Q2, s2, out)
    assert discard(Q, s, 1000) == out[-1]
    assert discard(Q, s, 0) == 0


def test_populate_from_int_reference_start():
    Q, s = new_state_arrays()
    populate_from_int(Q, s, np.uint64(0))

    xcng, xs = 12367890123456, 521288629546311
    for i in (0, 1, 2):
        xs = py_xs(xs)
        xcng = py_cng(xcng)
        assert int(Q[i]) == (xcng + xs) & MASK64
    assert int(s[CARRY]) == 36243678541
    assert int(s[INDEX]) == QSIZE


def test_populate_from_int_uses_seed():
    Q, s = new_state_arrays()
    populate_from_int(Q, s, np.uint64(42))
    assert int(Q[0]) == (py_cng(42) + py_xs(521288629546311)) & MASK64


def test_populate_from_array_matches_reference():
    values = list(range(1, 11))
    Q, s = new_state_arrays()
    populate_from_array(Q, s, np.array(values, dtype=np.uint64))

    want_Q, want_xcng, want_xs = py_populate_from_array(values)
    assert [int(q) for q in Q] == want_Q
    assert int(s[XCNG]) == want_xcng
    assert int(s[XS]) == want_xs
    assert int(s[INDEX]) == QSIZE


def test_populate_from_array_single_value():
    Q, s = new_state_arrays()
    populate_from_array(Q, s, np.array([2**64 - 1], dtype=np.uint64))
    want_Q, _, _ = py_populate_from_array([2**64 - 1])
    assert [int(q) for q in Q] == want_Q


def test_populate_from_empty_array_equals_reference_int_fill():
    Q1, s1 = new_state_arrays()
    Q2, s2 = new_state_arrays()
    populate_from_array(Q1, s1, np.empty(0, dtype=np.uint64))
    populate_from_int(Q2, s2, np.uint64(0))
    assert np.array_equal(Q1, Q2) and np.array_equal(s1, s2)


def test_warm_up_advances_state():
    Q, s = new_state_arrays()
    populate_from_array(Q, s, np.arange(1, 11, dtype=np.uint64))
    before_Q, before_s = Q.copy(), s.copy()

    warm_up(Q, s)

    assert not np.array_equal(Q, before_Q)
    assert int(s[XCNG]) != int(before_s[XCNG])
    # 4*QSIZE draws from index QSIZE: four refills, ending on an exhausted buffer
    assert WARMUP == 4 * QSIZE
    assert int(s[INDEX]) == QSIZE
