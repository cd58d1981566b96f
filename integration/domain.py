from dataclasses import dataclass
from typing import NamedTuple

import numpy as np
from scipy import integrate

from integration.errors import InvalidArgument


class Roots(NamedTuple):
    a: int
    b: int
    c: int


def cubic(x, roots):
    """
    f(x) = (x - a)(x - b)(x - c)
    Works for Python scalars, numpy arrays and torch tensors alike.
    """
    a, b, c = roots
    return (x - a) * (x - b) * (x - c)


def roots_from_id(student_id, positions=(6, 7, 8)):
    """
    Reads the three cubic roots from single digits of an identifier,
    e.g. '231RDB026' -> Roots(0, 2, 6).
    """
    try:
        digits = [student_id[p] for p in positions]
    except IndexError:
        raise InvalidArgument(
            f"Identifier '{student_id}' is too short for positions {positions}"
        ) from None

    if not all(d.isdigit() for d in digits):
        raise InvalidArgument(f"Identifier '{student_id}' has non-digit roots {digits}")

    return Roots(*(int(d) for d in digits))


@dataclass(frozen=True)
class Domain:
    x_min: int
    x_max: int
    y_min: int
    y_max: int

    @classmethod
    def from_roots(cls, roots):
        """
        Bounding box of the curve: one unit of padding around the roots on x,
        and the curve values at those padded ends on y.
        """
        roots = Roots(*(int(r) for r in roots))
        x_min = min(roots) - 1
        x_max = max(roots) + 1
        return cls(x_min, x_max, cubic(x_min, roots), cubic(x_max, roots))

    @property
    def width(self):
        return self.x_max - self.x_min

    @property
    def height(self):
        return self.y_max - self.y_min

    @property
    def area(self):
        return self.width * self.height


def analytic_integral(roots, lo, hi):
    """Exact signed integral of the cubic over [lo, hi]."""
    antiderivative = np.polynomial.Polynomial.fromroots(list(roots)).integ()
    return float(antiderivative(hi) - antiderivative(lo))


def expected_estimate(domain, roots):
    """
    Value the hit-or-miss estimator converges to: the integral of f clipped
    to [y_min, y_max]. Matches analytic_integral() when the curve never
    leaves the box.
    """
    def clipped(x):
        return min(max(cubic(x, roots), domain.y_min), domain.y_max)

    inner = sorted({float(r) for r in roots})
    value, _ = integrate.quad(clipped, domain.x_min, domain.x_max, points=inner, limit=200)
    return float(value)
