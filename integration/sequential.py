import numpy as np

from integration.domain import cubic
from integration.errors import InvalidArgument

CHUNK_SIZE = 1 << 20


def signed_count(f, y):
    """
    +1 for points between the axis and a positive curve value,
    -1 for points between a negative curve value and the axis.
    """
    above = (f > 0) & (y > 0) & (y < f)
    below = (f < 0) & (y < 0) & (y > f)
    return int(np.count_nonzero(above)) - int(np.count_nonzero(below))


def montecarlo(domain, roots, n_points, rng=None, chunk_size=CHUNK_SIZE):
    """
    Single-threaded hit-or-miss estimate of the signed integral of the cubic
    over [domain.x_min, domain.x_max].

    Points are drawn in chunks of `chunk_size` so memory stays flat for
    billions of samples; the result is the same as a per-point loop.
    """
    if n_points < 0:
        raise InvalidArgument(f"n_points must be >= 0, got {n_points}")
    if n_points == 0:
        return 0.0

    if rng is None:
        rng = np.random.default_rng()

    count = 0
    remaining = n_points
    while remaining > 0:
        n = min(chunk_size, remaining)
        # y first, then x
        y = domain.y_min + rng.random(n) * domain.height
        x = domain.x_min + rng.random(n) * domain.width
        count += signed_count(cubic(x, roots), y)
        remaining -= n

    return count / n_points * domain.area
