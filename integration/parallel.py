import numpy as np

from integration.errors import InvalidArgument

# Worker seeds are seed + worker * WORKER_SEED_STRIDE and stay within int32 for ~1000 workers
SEED_BOUND = 2**30
WORKER_SEED_STRIDE = 999999


def partition(n_points, workers, truncate=False):
    """
    Splits the sample budget across workers.

    Exact (default): shares differ by at most one and always sum to n_points.
    truncate=True keeps the historical max(n // workers, 1) per worker, which
    drops the remainder (and oversamples when n_points < workers).
    """
    if workers < 1:
        raise InvalidArgument(f"workers must be >= 1, got {workers}")
    if n_points < 0:
        raise InvalidArgument(f"n_points must be >= 0, got {n_points}")

    if truncate:
        return [max(n_points // workers, 1)] * workers

    base, remainder = divmod(n_points, workers)
    return [base + 1 if i < remainder else base for i in range(workers)]


def parallel_montecarlo(backend, domain, roots, n_points, rng=None, timeout=None, truncate=False):
    """
    Runs one independent sequential estimator per worker on `backend` and
    reduces the signed partial counts on the host.

    The backend must already be discovered and built. Blocks until every
    worker has finished, or raises DeadlineExceeded after `timeout` seconds.
    """
    if n_points < 0:
        raise InvalidArgument(f"n_points must be >= 0, got {n_points}")
    if n_points == 0:
        return 0.0

    if rng is None:
        rng = np.random.default_rng()

    shares = partition(n_points, backend.compute_units, truncate=truncate)
    seed = int(rng.integers(0, SEED_BOUND))

    backend.dispatch(shares, domain, roots, seed)
    partial_counts = backend.read_results(timeout=timeout)

    total = sum(int(c) for c in partial_counts)
    return total / n_points * domain.area
