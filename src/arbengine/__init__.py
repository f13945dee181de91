from . import angles
from . import basic_ops
from . import chebyshev
from . import checks
from . import combinatorics
from . import constants
from . import convergence
from . import elementary
from . import hyperbolic
from . import hypgeom
from . import mpfloat
from . import precision
from . import roots
from . import rounding
from . import runtime
from . import trig
from . import ulp
from . import validation
from . import mp_mode

from .angles import deg_norm, rad_norm, rad_norm_02pi
from .chebyshev import ChebyshevSegment, StateVector, chebyshev_eval, chebyshev_eval_derivative, evaluate_segment
from .combinatorics import binomial, factorial
from .constants import constant
from .convergence import ConvergenceError, ConvergencePolicy
from .elementary import exp, expm1, log, log10, log1p, logb, pow, sqrt
from .hyperbolic import acosh, asinh, atanh, cosh, sinh, tanh
from .hypgeom import bessel_j, bessel_y, erf, erfc, gamma
from .mpfloat import MPFloat
from .precision import DEFAULT_PREC_BITS, GUARD_BITS, workdps, workprec
from .roots import cbrt, nth_root
from .trig import acos, asin, atan, atan2, cos, sin, tan

__all__ = [
    "angles",
    "basic_ops",
    "chebyshev",
    "checks",
    "combinatorics",
    "constants",
    "convergence",
    "elementary",
    "hyperbolic",
    "hypgeom",
    "mp_mode",
    "mpfloat",
    "precision",
    "roots",
    "rounding",
    "runtime",
    "trig",
    "ulp",
    "validation",
    "MPFloat",
    "DEFAULT_PREC_BITS",
    "GUARD_BITS",
    "workdps",
    "workprec",
    "ConvergenceError",
    "ConvergencePolicy",
    "constant",
    "exp",
    "log",
    "sqrt",
    "expm1",
    "log1p",
    "log10",
    "logb",
    "pow",
    "sin",
    "cos",
    "tan",
    "asin",
    "acos",
    "atan",
    "atan2",
    "sinh",
    "cosh",
    "tanh",
    "asinh",
    "acosh",
    "atanh",
    "gamma",
    "erf",
    "erfc",
    "bessel_j",
    "bessel_y",
    "factorial",
    "binomial",
    "cbrt",
    "nth_root",
    "chebyshev_eval",
    "chebyshev_eval_derivative",
    "evaluate_segment",
    "ChebyshevSegment",
    "StateVector",
    "deg_norm",
    "rad_norm",
    "rad_norm_02pi",
]
