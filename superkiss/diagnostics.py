from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.typing import NDArray
from scipy.stats import chi2

"""
Byte-frequency sanity check (not a certification):

  - each run draws `nbytes` bytes and computes a chi-square over the 256 byte values
  - each run's p-value must lie inside [alpha, 1 - alpha]
  - the run p-values are binned in `bins` equal bins and must themselves be uniform
"""

BYTE_VALUES = 256


@dataclass(frozen=True)
class FrequencyTestResult:
    pvalues: NDArray[np.float64]
    meta_pvalue: float
    extreme: int
    alpha: float

    @property
    def passed(self) -> bool:
        return self.extreme == 0 and self.alpha <= self.meta_pvalue <= 1.0 - self.alpha


def byte_chisquare_pvalue(data) -> float:
    """p-value of the chi-square statistic of byte counts (255 dof)."""
    arr = np.frombuffer(memoryview(data).cast("B"), dtype=np.uint8)
    if arr.size == 0:
        raise ValueError("need at least one byte")
    counts = np.bincount(arr, minlength=BYTE_VALUES)
    expected = arr.size / BYTE_VALUES
    stat = float(np.sum((counts - expected) ** 2) / expected)
    return float(chi2.sf(stat, BYTE_VALUES - 1))


def pvalue_of_pvalues(pvalues: Sequence[float], bins: int = 10) -> float:
    p = np.asarray(pvalues, dtype=np.float64)
    if bins < 2:
        raise ValueError("bins must be >= 2")
    if p.size == 0:
        raise ValueError("need at least one p-value")
    if np.any((p < 0.0) | (p > 1.0)):
        raise ValueError("p-values must lie in [0, 1]")

    idx = np.minimum((p * bins).astype(np.int64), bins - 1)   # p == 1.0 goes to the last bin
    observed = np.bincount(idx, minlength=bins)
    expected = p.size / bins
    stat = float(np.sum((observed - expected) ** 2) / expected)
    return float(chi2.sf(stat, bins - 1))


def byte_frequency_test(generator, runs: int = 100, nbytes: int = 800_000,
                        alpha: float = 1e-5, bins: int = 10) -> FrequencyTestResult:
    """
    Runs the check on anything with a randbytes(n) method.
    """
    if runs <= 0 or nbytes <= 0:
        raise ValueError("runs and nbytes must be > 0")
    if not (0.0 < alpha < 0.5):
        raise ValueError("alpha must be in (0, 0.5)")

    pvalues = np.empty(runs, dtype=np.float64)
    for m in range(runs):
        pvalues[m] = byte_chisquare_pvalue(generator.randbytes(nbytes))

    extreme = int(np.count_nonzero((pvalues < alpha) | (pvalues > 1.0 - alpha)))
    meta = pvalue_of_pvalues(pvalues, bins=bins)
    return FrequencyTestResult(pvalues=pvalues, meta_pvalue=meta, extreme=extreme, alpha=alpha)
