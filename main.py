import argparse
import sys
import time

import numpy as np
import torch

from backends import BACKENDS, select_backend
from integration import (
    Domain,
    MonteCarloError,
    Roots,
    analytic_integral,
    expected_estimate,
    montecarlo,
    parallel_montecarlo,
    roots_from_id,
)

DEFAULT_ID = "231RDB026"
DEFAULT_SIZES = [10**p for p in range(4, 10)]

# -------------------------------------------------------------------------
# Utils
# -------------------------------------------------------------------------
def print_header(msg):
    print(f"\n{'='*60}\n {msg}\n{'='*60}")

def sync(backend):
    if backend is not None and backend.device is not None and backend.device.type == "cuda":
        torch.cuda.synchronize(backend.device)

def timed_run(label, fn, reference, backend=None):
    """Runs one estimate and prints it with its error and wall-clock time."""
    print(f"\n{label}:")
    sync(backend)
    start = time.perf_counter()
    res = fn()
    sync(backend)
    elapsed_ms = (time.perf_counter() - start) * 1000

    print(f"Definite integral = {res:.5f}")
    if reference:
        print(f"Relative error    = {abs(res - reference) / abs(reference):.4%}")
    print(f"Elapsed time = {elapsed_ms:.0f}ms")
    return res, elapsed_ms

def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Monte Carlo integral of a cubic: sequential CPU vs parallel backend."
    )
    parser.add_argument("--id", type=str, default=DEFAULT_ID,
                        help="Identifier whose digits 6-8 are the roots")
    parser.add_argument("--roots", type=int, nargs=3, metavar=("A", "B", "C"),
                        help="Explicit roots (overrides --id)")
    parser.add_argument("--sizes", type=int, nargs="+", default=DEFAULT_SIZES,
                        help="Sample counts to sweep")
    parser.add_argument("--sequential-max", type=int, default=None,
                        help="Skip the sequential estimator above this sample count (no cap by default)")
    parser.add_argument("--backend", type=str, default="auto", choices=BACKENDS)
    parser.add_argument("--device", type=str, default=None, help="torch device, e.g. 'cpu', 'cuda:1'")
    parser.add_argument("--workers", type=int, default=None,
                        help="Override the number of parallel workers")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible runs")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Deadline in seconds for each parallel batch")
    parser.add_argument("--truncate", action="store_true",
                        help="Historical partitioning: max(N // W, 1) per worker, remainder dropped")
    return parser.parse_args(argv)

# -------------------------------------------------------------------------
# Main
# -------------------------------------------------------------------------
def run(args):
    roots = Roots(*args.roots) if args.roots else roots_from_id(args.id)
    domain = Domain.from_roots(roots)
    exact = analytic_integral(roots, domain.x_min, domain.x_max)
    reference = expected_estimate(domain, roots)

    print(f"a: {roots.a}, b: {roots.b}, c: {roots.c}")
    print(f"x_min: {domain.x_min}, x_max: {domain.x_max}, y_min: {domain.y_min}, y_max: {domain.y_max}")
    print(f"Analytic integral = {exact:.5f}")
    if not np.isclose(exact, reference):
        print(f"[Warning] Curve leaves the box; estimator converges to {reference:.5f}")

    rng = np.random.default_rng(args.seed)
    backend = select_backend(args.backend, device=args.device, workers=args.workers)

    with backend:
        print(f"[Device] {backend.device_name} | workers: {backend.compute_units}")

        for n in args.sizes:
            print_header(f"{n:,} points")
            timed_run(
                f"Paralel code with {n:,} points",
                lambda: parallel_montecarlo(
                    backend, domain, roots, n, rng=rng, timeout=args.timeout, truncate=args.truncate
                ),
                reference,
                backend=backend,
            )
            if args.sequential_max is None or n <= args.sequential_max:
                timed_run(
                    f"Not paralel code with {n:,} points",
                    lambda: montecarlo(domain, roots, n, rng=rng),
                    reference,
                )

def main(argv=None):
    args = parse_args(argv)
    try:
        run(args)
    except MonteCarloError as e:
        print(f"[Error] {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
