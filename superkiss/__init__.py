# superkiss/__init__.py
"""
SuperKISS64 pseudorandom number generator package.
"""

from .RNG_helpers import QSIZE
from .generator import SuperKISS64
from .entropy import EntropySource, EntropyError
from .init_and_checkpoints import GeneratorState, GeneratorConfig, StateError
from .adapters import SuperKISSRandom

__all__ = [
    "QSIZE",
    "SuperKISS64", "SuperKISSRandom",
    "GeneratorState", "GeneratorConfig",
    "EntropySource",
    "StateError", "EntropyError",
]
