from __future__ import annotations

import argparse
import platform
import subprocess
import time
from datetime import datetime, timezone
from pathlib import Path

import jax.numpy as jnp
import numpy as np

from arbengine import chebyshev, elementary, hypgeom, runtime, trig
from arbengine.mpfloat import MPFloat


def _git_commit(repo_root: Path) -> str:
    try:
        return subprocess.check_output(["git", "rev-parse", "HEAD"], cwd=repo_root, text=True).strip()
    except (OSError, subprocess.CalledProcessError):
        return "unknown"


def _log_run(tool: str, command: str, notes: str = "") -> None:
    repo_root = Path(__file__).resolve().parents[1]
    results_dir = repo_root / "results"
    results_dir.mkdir(parents=True, exist_ok=True)
    log_path = results_dir / "runs.csv"
    if not log_path.exists():
        log_path.write_text("run_id,timestamp_utc,tool,command,commit,platform,notes\n", encoding="ascii")
    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    run_id = f"{tool}-{timestamp}"
    commit = _git_commit(repo_root)
    plat = platform.platform()
    line = f"{run_id},{timestamp},{tool},\"{command}\",{commit},\"{plat}\",\"{notes}\"\n"
    with log_path.open("a", encoding="ascii") as f:
        f.write(line)


def _time_calls(fn, args_list) -> float:
    t0 = time.perf_counter()
    for args in args_list:
        fn(*args)
    return (time.perf_counter() - t0) * 1000.0 / max(1, len(args_list))


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark arbengine evaluators and float64 batch kernels.")
    parser.add_argument("--calls", type=int, default=200)
    parser.add_argument("--samples", type=int, default=100000)
    parser.add_argument("--prec-bits", type=int, default=256)
    parser.add_argument("--degree", type=int, default=14)
    args = parser.parse_args()

    prec = args.prec_bits
    rng = np.random.default_rng(2251)
    xs = [MPFloat(float(x), prec) for x in rng.uniform(0.1, 20.0, size=args.calls)]
    ts = [MPFloat(float(t), prec) for t in rng.uniform(-1.0, 1.0, size=args.calls)]
    coeffs = chebyshev.coeffs_from_floats(rng.standard_normal(args.degree), prec)

    timings = {
        "exp": _time_calls(lambda x: elementary.exp(x, prec_bits=prec), [(x,) for x in xs]),
        "log": _time_calls(lambda x: elementary.log(x, prec_bits=prec), [(x,) for x in xs]),
        "sin": _time_calls(lambda x: trig.sin(x, prec_bits=prec), [(x,) for x in xs]),
        "gamma": _time_calls(lambda x: hypgeom.gamma(x, prec_bits=prec), [(x,) for x in xs]),
        "erf": _time_calls(lambda x: hypgeom.erf(x, prec_bits=prec), [(x,) for x in xs]),
    }
    for name in runtime.STRATEGIES:
        timings[f"cheb_{name}"] = _time_calls(
            lambda t, s=name: chebyshev.chebyshev_eval(t, coeffs, prec_bits=prec, strategy=s), [(t,) for t in ts]
        )

    print(f"strategy={runtime.strategy()} | prec_bits={prec} | calls={args.calls}")
    for name, ms in timings.items():
        print(f"{name:16s} ms_per_call={ms:.4f}")

    seg = jnp.asarray(rng.standard_normal(3 * args.degree))
    tjd = jnp.asarray(rng.uniform(0.0, 32.0, size=args.samples))
    chebyshev.segment_eval_batch_jit(tjd, seg, 0.0, 32.0).block_until_ready()
    t0 = time.perf_counter()
    out = chebyshev.segment_eval_batch_jit(tjd, seg, 0.0, 32.0)
    out.block_until_ready()
    batch_ms = (time.perf_counter() - t0) * 1000.0
    print(f"segment_eval_batch_jit | samples={args.samples} | time_ms={batch_ms:.2f}")

    _log_run(
        "benchmark_engine",
        f"benchmark_engine.py --calls {args.calls} --samples {args.samples} --prec-bits {prec}",
        f"exp_ms={timings['exp']:.4f};batch_ms={batch_ms:.2f}",
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
