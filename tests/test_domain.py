import pytest
from scipy import integrate

from integration import (
    Domain,
    InvalidArgument,
    Roots,
    analytic_integral,
    cubic,
    expected_estimate,
    roots_from_id,
)


def test_roots_from_default_id():
    assert roots_from_id("231RDB026") == Roots(0, 2, 6)


@pytest.mark.parametrize("bad_id", ["231RDB0X6", "231RD"])
def test_roots_from_bad_id(bad_id):
    with pytest.raises(InvalidArgument):
        roots_from_id(bad_id)


def test_example_domain():
    """
    Roots (0, 2, 6): f(-1) = -21, f(7) = 35.
    """
    domain = Domain.from_roots((0, 2, 6))

    assert (domain.x_min, domain.x_max) == (-1, 7)
    assert (domain.y_min, domain.y_max) == (-21, 35)
    assert domain.area == 8 * 56


@pytest.mark.parametrize("roots", [(0, 2, 6), (3, 1, 8), (9, 0, 5), (4, 4, 7), (-3, 2, 1)])
def test_domain_padding(roots):
    domain = Domain.from_roots(roots)

    assert domain.x_min == min(roots) - 1
    assert domain.x_max == max(roots) + 1
    assert domain.x_min < min(roots) < max(roots) < domain.x_max or min(roots) == max(roots)
    # Left of every root the cubic is negative, right of every root positive
    assert domain.y_min < 0 < domain.y_max


def test_cubic_vanishes_at_roots():
    roots = Roots(0, 2, 6)
    for r in roots:
        assert cubic(r, roots) == 0
    assert cubic(1, roots) == 1 * -1 * -5


@pytest.mark.parametrize("roots", [(0, 2, 6), (1, 5, 3), (4, 4, 7)])
def test_analytic_integral_matches_quadrature(roots):
    domain = Domain.from_roots(roots)
    ref, _ = integrate.quad(lambda x: cubic(x, roots), domain.x_min, domain.x_max)

    assert analytic_integral(roots, domain.x_min, domain.x_max) == pytest.approx(ref, rel=1e-9)


def test_expected_estimate_inside_box():
    """For (0, 2, 6) the curve never leaves the box, so nothing is clipped."""
    roots = (0, 2, 6)
    domain = Domain.from_roots(roots)

    exact = analytic_integral(roots, domain.x_min, domain.x_max)
    assert exact == pytest.approx(-88 / 3)
    assert expected_estimate(domain, roots) == pytest.approx(exact, rel=1e-6)


def test_expected_estimate_clips_curve():
    """
    (0, 0, 9): the local minimum f(6) = -108 drops below y_min = f(-1) = -10,
    so the estimator converges to less negative area than the exact integral.
    """
    roots = (0, 0, 9)
    domain = Domain.from_roots(roots)

    exact = analytic_integral(roots, domain.x_min, domain.x_max)
    clipped = expected_estimate(domain, roots)
    assert clipped > exact
