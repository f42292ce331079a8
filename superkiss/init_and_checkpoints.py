from __future__ import annotations

import io
import os
import warnings
import zipfile
import zlib
from dataclasses import dataclass, field
from typing import Literal, Optional, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from .RNG_helpers import QSIZE, MASK64
from .I_O_helpers import atomic_write

STATE_KIND = "SuperKISS64"

PathLike = Union[str, os.PathLike]


class StateError(ValueError):
    """Persisted generator state is malformed, truncated or inconsistent."""


# ---------------------------------------------------------------------------
# Configs
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class GeneratorState:
    """
    Complete state of one SuperKISS64 instance. Validated on construction,
    so an existing GeneratorState is always safe to load into a generator.
    """
    carry: int
    xcng: int
    xs: int
    index: int
    Q: NDArray[np.uint64]
    seeded: bool

    def __post_init__(self):
        for name in ("carry", "xcng", "xs", "index"):
            try:
                v = int(getattr(self, name))
            except (TypeError, ValueError, OverflowError) as err:
                raise StateError(f"{name} is not an integer") from err
            if not (0 <= v <= MASK64):
                raise StateError(f"{name}={v} outside the uint64 range")
            object.__setattr__(self, name, v)

        if not (0 <= self.index <= QSIZE):
            raise StateError(f"index={self.index} outside [0, {QSIZE}]")

        Q = np.asarray(self.Q)
        if Q.shape != (QSIZE,):
            raise StateError(f"Q must have shape ({QSIZE},), got {Q.shape}")
        if Q.dtype != np.uint64:
            if Q.dtype.kind != "u":
                raise StateError(f"Q must hold unsigned integers, got dtype {Q.dtype}")
            Q = Q.astype(np.uint64)
        object.__setattr__(self, "Q", np.array(Q, dtype=np.uint64, order="C", copy=True))
        object.__setattr__(self, "seeded", bool(self.seeded))

    def scalars(self) -> NDArray[np.uint64]:
        """The [carry, xcng, xs, index] vector used by the jitted kernels."""
        return np.array([self.carry, self.xcng, self.xs, self.index], dtype=np.uint64)

    def __eq__(self, other):
        if not isinstance(other, GeneratorState):
            return NotImplemented
        return (self.carry == other.carry and self.xcng == other.xcng
                and self.xs == other.xs and self.index == other.index
                and self.seeded == other.seeded
                and bool(np.array_equal(self.Q, other.Q)))


SeedMode = Literal["seed", "array", "entropy", "state"]


@dataclass(frozen=True)
class GeneratorConfig:
    mode: SeedMode = "seed"
    seed: int = 1
    values: Tuple[int, ...] = field(default_factory=tuple)
    state_path: Optional[str] = None

    def __post_init__(self):
        if self.mode not in ("seed", "array", "entropy", "state"):
            raise ValueError(f"Unknown seeding mode: {self.mode!r}")
        if isinstance(self.seed, bool) or not isinstance(self.seed, (int, np.integer)):
            raise ValueError("seed must be an integer")
        object.__setattr__(self, "seed", int(self.seed))
        object.__setattr__(self, "values", tuple(int(v) & MASK64 for v in self.values))
        if self.mode == "state" and not self.state_path:
            raise ValueError("mode='state' requires state_path")
        if self.mode != "state" and self.state_path is not None:
            raise ValueError("state_path is only used with mode='state'")


# ---------------------------------------------------------------------------
# Seeding from an entropy source
# ---------------------------------------------------------------------------

def draw_entropy_state(source) -> GeneratorState:
    """
    Draws every state word from `source` (anything with a uint64() method).
    xs is redrawn until nonzero: 0 is the xorshift fixed point.
    Nothing is committed anywhere, a failing source simply propagates.
    """
    xcng = source.uint64()
    xs = source.uint64()
    while xs == 0:
        xs = source.uint64()
    carry = source.uint64()
    Q = np.fromiter((source.uint64() for _ in range(QSIZE)), dtype=np.uint64, count=QSIZE)

    return GeneratorState(carry=carry, xcng=xcng, xs=xs, index=QSIZE, Q=Q, seeded=True)


# ---------------------------------------------------------------------------
# Checkpoint helpers
# ---------------------------------------------------------------------------

_PARSE_ERRORS = (ValueError, TypeError, KeyError, EOFError, OSError, zipfile.BadZipFile, zlib.error)
SCALAR_FIELDS = ("carry", "xcng", "xs", "index")


def _state_arrays(state: GeneratorState) -> dict:
    return dict(
        kind=np.array(STATE_KIND, dtype="U"),
        carry=np.uint64(state.carry),
        xcng=np.uint64(state.xcng),
        xs=np.uint64(state.xs),
        index=np.uint64(state.index),
        Q=np.ascontiguousarray(state.Q, dtype=np.uint64),
        seeded=np.bool_(state.seeded),
    )


def _write_state(f, state: GeneratorState, compress: bool) -> None:
    if compress:
        np.savez_compressed(f, **_state_arrays(state))
    else:
        np.savez(f, **_state_arrays(state))


def _parse_state(f) -> GeneratorState:
    try:
        z = np.load(f, allow_pickle=False)
        if not isinstance(z, np.lib.npyio.NpzFile):
            raise StateError(f"not a {STATE_KIND} state archive")
        with z:
            kind = z["kind"]
            kind = str(kind.item()) if kind.size == 1 else str(kind)
            if kind != STATE_KIND:
                raise StateError(f"not a {STATE_KIND} state (kind={kind!r})")
            scalars = {}
            for name in SCALAR_FIELDS:
                arr = z[name]
                if arr.ndim != 0 or arr.dtype.kind not in "iu":
                    raise StateError(f"{name} stored as {arr.dtype}{list(arr.shape)}, expected an integer scalar")
                scalars[name] = int(arr)
            Q = z["Q"]
            if Q.dtype != np.uint64:
                raise StateError(f"Q stored as {Q.dtype}, expected uint64")
            state = GeneratorState(
                **scalars,
                Q=Q,
                seeded=bool(z["seeded"]),
            )
    except StateError:
        raise
    except _PARSE_ERRORS as err:
        raise StateError(f"cannot parse {STATE_KIND} state: {err}") from err
    return state


def _read_state(f) -> GeneratorState:
    state = _parse_state(f)
    if not state.seeded:
        warnings.warn(
            f"[state] restored an unseeded {STATE_KIND} state; the first draw will seed it with 1.",
            RuntimeWarning, stacklevel=2
        )
    return state


def wants_compression(path: PathLike) -> bool:
    return os.fspath(path).endswith(".gz")


def state_to_bytes(state: GeneratorState, compress: bool = False) -> bytes:
    buf = io.BytesIO()
    _write_state(buf, state, compress)
    return buf.getvalue()


def state_from_bytes(blob: bytes) -> GeneratorState:
    if not isinstance(blob, (bytes, bytearray, memoryview)):
        raise TypeError(f"expected a bytes-like object, got {type(blob).__name__}")
    return _read_state(io.BytesIO(bytes(blob)))


def save_state(path: PathLike, state: GeneratorState) -> None:
    """
    Writes `state` to `path` atomically. A path ending in ".gz" is written
    with np.savez_compressed, anything else uncompressed. File names are used
    verbatim (no ".npz" is appended).
    """
    compress = wants_compression(path)
    atomic_write(path,
                 lambda f: _write_state(f, state, compress),
                 validate=_parse_state)


def load_state(path: PathLike) -> GeneratorState:
    """Reads either variant written by save_state; a missing file raises OSError."""
    with open(path, "rb") as f:
        return _read_state(f)
