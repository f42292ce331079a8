"""Command line front end: python -m superkiss {verify,bytes,save,bench,freqtest}."""

from __future__ import annotations

import argparse
import sys
import time

import numpy as np

from .RNG_helpers import REFERENCE_DRAWS, REFERENCE_VALUE
from .generator import SuperKISS64
from .init_and_checkpoints import GeneratorConfig
from .diagnostics import byte_frequency_test

# first floats after seed_array([1..10])
ARRAY_REFERENCE_VALUES = tuple(range(1, 11))
ARRAY_REFERENCE_FLOATS = (
    0.41220837956570899,
    0.48274503148508496,
    0.95863961958564214,
    0.09328491655867133,
    0.60216498744900138,
    0.36813425752037832,
    0.68242169093785998,
)


def config_from_args(args) -> GeneratorConfig:
    if args.state is not None:
        return GeneratorConfig(mode="state", state_path=args.state)
    if args.entropy:
        return GeneratorConfig(mode="entropy")
    if args.values is not None:
        return GeneratorConfig(mode="array", values=tuple(args.values))
    return GeneratorConfig(mode="seed", seed=1 if args.seed is None else args.seed)


def _cmd_verify(args) -> int:
    ok = True

    r = SuperKISS64(0)
    t0 = time.perf_counter()
    got = r.discard(args.draws)
    dt = time.perf_counter() - t0
    if args.draws == REFERENCE_DRAWS:
        if got == REFERENCE_VALUE:
            print(f"[ok] seed 0: draw #{args.draws} = {got} ({dt:.2f}s)", flush=True)
        else:
            print(f"[fail] seed 0: draw #{args.draws} = {got}, want {REFERENCE_VALUE}", flush=True)
            ok = False
    else:
        print(f"[info] seed 0: draw #{args.draws} = {got} ({dt:.2f}s, no reference for this count)",
              flush=True)

    r = SuperKISS64.from_array(ARRAY_REFERENCE_VALUES)
    got_f = [r.next_float64() for _ in ARRAY_REFERENCE_FLOATS]
    if tuple(got_f) == ARRAY_REFERENCE_FLOATS:
        print(f"[ok] seed_array(1..10): first {len(got_f)} floats match", flush=True)
    else:
        print(f"[fail] seed_array(1..10): got {got_f}", flush=True)
        ok = False

    return 0 if ok else 1


def _cmd_bytes(args) -> int:
    r = SuperKISS64.from_config(config_from_args(args))
    data = r.randbytes(args.n)
    if args.out is None or args.out == "-":
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
    else:
        with open(args.out, "wb") as f:
            f.write(data)
        print(f"[ok] wrote {args.n} bytes to {args.out}", file=sys.stderr, flush=True)
    return 0


def _cmd_save(args) -> int:
    r = SuperKISS64.from_config(config_from_args(args))
    r.save_state(args.file)
    print(f"[ok] wrote {args.file}", flush=True)
    return 0


def _cmd_bench(args) -> int:
    if args.draws <= 0:
        raise SystemExit("--draws must be > 0")
    r = SuperKISS64.from_config(config_from_args(args))
    r.discard(1)  # seeds (and compiles) outside the timed region
    t0 = time.perf_counter()
    r.discard(args.draws)
    dt = time.perf_counter() - t0
    print(f"[bench] {args.draws} draws in {dt:.3f}s | {1e9 * dt / args.draws:.2f} ns/draw "
          f"| {8 * args.draws / dt / 2**20:.1f} MiB/s", flush=True)
    return 0


def _cmd_freqtest(args) -> int:
    r = SuperKISS64.from_config(config_from_args(args))
    res = byte_frequency_test(r, runs=args.runs, nbytes=args.nbytes, alpha=args.alpha)
    tag = "ok" if res.passed else "fail"
    print(f"[{tag}] {args.runs} runs x {args.nbytes} bytes | extreme p-values={res.extreme} "
          f"| p-value of p-values={res.meta_pvalue:.6g} | min p={np.min(res.pvalues):.3g}",
          flush=True)
    return 0 if res.passed else 1


def build_parser() -> argparse.ArgumentParser:
    gen = argparse.ArgumentParser(add_help=False)
    g = gen.add_mutually_exclusive_group()
    g.add_argument("--seed", type=int, default=None, help="integer seed (default 1)")
    g.add_argument("--values", type=int, nargs="+", help="seed from a sequence of integers")
    g.add_argument("--entropy", action="store_true", help="seed from os.urandom")
    g.add_argument("--state", type=str, help="resume from a saved state file")

    ap = argparse.ArgumentParser(prog="superkiss", description="SuperKISS64 generator tools")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("verify", help="check the reference output vectors")
    p.add_argument("--draws", type=int, default=REFERENCE_DRAWS, help="draws from seed 0")
    p.set_defaults(func=_cmd_verify)

    p = sub.add_parser("bytes", parents=[gen], help="write random bytes")
    p.add_argument("n", type=int, help="number of bytes")
    p.add_argument("--out", type=str, default=None, help="output file (default stdout)")
    p.set_defaults(func=_cmd_bytes)

    p = sub.add_parser("save", parents=[gen], help="write a state file (.gz suffix compresses)")
    p.add_argument("file", type=str)
    p.set_defaults(func=_cmd_save)

    p = sub.add_parser("bench", parents=[gen], help="time the draw kernel")
    p.add_argument("--draws", type=int, default=100_000_000)
    p.set_defaults(func=_cmd_bench)

    p = sub.add_parser("freqtest", parents=[gen], help="byte-frequency chi-square check")
    p.add_argument("--runs", type=int, default=100)
    p.add_argument("--nbytes", type=int, default=800_000)
    p.add_argument("--alpha", type=float, default=1e-5)
    p.set_defaults(func=_cmd_freqtest)

    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if getattr(args, "draws", 1) < 0 or getattr(args, "n", 0) < 0:
        raise SystemExit("counts must be >= 0")
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
