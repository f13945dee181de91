from __future__ import annotations

import argparse

import mpmath as mp
import numpy as np

from arbengine import elementary, hyperbolic, hypgeom, roots, trig
from arbengine.mpfloat import MPFloat

# name -> (engine function, mpmath reference, sampling interval)
FUNCTIONS = {
    "exp": (elementary.exp, mp.exp, (-100.0, 100.0)),
    "log": (elementary.log, mp.log, (1e-8, 1e8)),
    "expm1": (elementary.expm1, mp.expm1, (-1.0, 1.0)),
    "log1p": (elementary.log1p, mp.log1p, (-0.99, 10.0)),
    "sin": (trig.sin, mp.sin, (-1e6, 1e6)),
    "cos": (trig.cos, mp.cos, (-1e6, 1e6)),
    "tan": (trig.tan, mp.tan, (-10.0, 10.0)),
    "atan": (trig.atan, mp.atan, (-1e3, 1e3)),
    "sinh": (hyperbolic.sinh, mp.sinh, (-50.0, 50.0)),
    "atanh": (hyperbolic.atanh, mp.atanh, (-0.999, 0.999)),
    "cbrt": (roots.cbrt, mp.cbrt, (-1e9, 1e9)),
    "gamma": (hypgeom.gamma, mp.gamma, (0.01, 60.0)),
    "erf": (hypgeom.erf, mp.erf, (-6.0, 6.0)),
    "erfc": (hypgeom.erfc, mp.erfc, (-3.0, 25.0)),
    "j0": (lambda x, prec_bits: hypgeom.bessel_j(0, x, prec_bits=prec_bits), lambda x: mp.besselj(0, x), (0.0, 60.0)),
    "y1": (lambda x, prec_bits: hypgeom.bessel_y(1, x, prec_bits=prec_bits), lambda x: mp.bessely(1, x), (0.1, 60.0)),
}


def _rel_error_bits(got: MPFloat, expected) -> float:
    """-log2 of the relative error; inf for an exact match."""
    err = abs(got.to_mpmath() - expected)
    if err == 0:
        return float("inf")
    scale = max(abs(expected), mp.mpf(2) ** -64)
    return float(-mp.log(err / scale, 2))


def main() -> int:
    parser = argparse.ArgumentParser(description="Compare arbengine evaluators against mpmath.")
    parser.add_argument("--samples", type=int, default=200)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--prec-bits", type=int, default=256)
    parser.add_argument("--only", type=str, default="", help="comma separated function names")
    args = parser.parse_args()

    names = [n for n in args.only.split(",") if n] or list(FUNCTIONS)
    rng = np.random.default_rng(args.seed)
    prec = args.prec_bits
    worst_overall = float("inf")

    print(f"arbengine vs mpmath | samples={args.samples} | prec_bits={prec}")
    for name in names:
        fn, ref, (lo, hi) = FUNCTIONS[name]
        xs = rng.uniform(lo, hi, size=args.samples)
        worst = float("inf")
        for x in xs:
            xv = MPFloat(float(x), prec)
            got = fn(xv, prec_bits=prec)
            with mp.workprec(prec + 64):
                bits = _rel_error_bits(got, ref(xv.to_mpmath()))
            worst = min(worst, bits)
        worst_overall = min(worst_overall, worst)
        print(f"{name:6s} worst_correct_bits={worst:8.2f}")

    print(f"worst overall: {worst_overall:.2f} bits")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
