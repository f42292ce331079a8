import numpy as np
import pytest

from superkiss import SuperKISS64
from superkiss.diagnostics import (byte_chisquare_pvalue, pvalue_of_pvalues,
                                   byte_frequency_test)


def test_uniform_bytes_not_extreme():
    data = bytes(range(256)) * 1000
    # perfectly flat counts: chi-square of 0
    assert byte_chisquare_pvalue(data) == pytest.approx(1.0)


def test_biased_bytes_rejected():
    data = b"\x00" * 5000 + bytes(range(256)) * 10
    assert byte_chisquare_pvalue(data) < 1e-10


def test_empty_data_rejected():
    with pytest.raises(ValueError):
        byte_chisquare_pvalue(b"")


def test_pvalue_of_pvalues():
    flat = np.linspace(0.0, 1.0, 100, endpoint=False) + 0.005
    assert pvalue_of_pvalues(flat) > 0.99
    assert pvalue_of_pvalues(np.full(100, 0.01)) < 1e-10
    # p == 1.0 is counted in the last bin
    assert 0.0 <= pvalue_of_pvalues([1.0] * 10 + list(flat[:90])) <= 1.0
    with pytest.raises(ValueError):
        pvalue_of_pvalues([0.5, 1.5])


def test_generator_passes_small_frequency_test():
    res = byte_frequency_test(SuperKISS64(0), runs=20, nbytes=50_000, alpha=1e-5)
    assert res.pvalues.shape == (20,)
    assert res.extreme == 0
    assert 0.0 <= res.meta_pvalue <= 1.0


class _Stuck:
    def randbytes(self, n):
        return b"\x07" * n


def test_broken_source_fails():
    res = byte_frequency_test(_Stuck(), runs=10, nbytes=1000)
    assert res.extreme == 10
    assert not res.passed
