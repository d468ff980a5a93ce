from fractions import Fraction

import pytest

from geoprover import conditions as cond
from geoprover.polynomials import Variable


def evaluate(template, **points):
    """Evaluate a template at concrete coordinates given per role label."""

    coordinates = {}
    values = {}
    for position, (label, (x, y)) in enumerate(sorted(points.items())):
        vx, vy = Variable('u', 2 * position + 1), Variable('u', 2 * position + 2)
        coordinates['0' if label == 'origin' else label] = (vx, vy)
        values[vx], values[vy] = Fraction(x), Fraction(y)
    return template.instantiate(coordinates).evaluate(values)


def test_templates_are_cached():
    assert cond.collinear('A', 'B', 'C') is cond.collinear('A', 'B', 'C')
    assert cond.midpoint() is cond.midpoint()


@pytest.mark.parametrize('c, expected_zero', [((2, 2), True), ((2, 3), False)])
def test_collinear(c, expected_zero):
    value = evaluate(cond.collinear('A', 'B', 'C'), A=(0, 0), B=(1, 1), C=c)

    assert (value == 0) is expected_zero


def test_concyclic_on_unit_circle():
    template = cond.concyclic('A', 'B', 'C', 'D')

    assert evaluate(template, A=(1, 0), B=(0, 1), C=(-1, 0), D=(0, -1)) == 0
    assert evaluate(template, A=(1, 0), B=(0, 1), C=(-1, 0), D=(0, -2)) != 0


def test_midpoint_conditions_vanish_at_midpoint():
    x_cond, y_cond = cond.midpoint()

    assert evaluate(x_cond, origin=(2, 3), A=(0, 0), B=(4, 6)) == 0
    assert evaluate(y_cond, origin=(2, 3), A=(0, 0), B=(4, 6)) == 0
    assert evaluate(y_cond, origin=(2, 4), A=(0, 0), B=(4, 6)) != 0


@pytest.mark.parametrize(
    'template, image, points',
    [
        (cond.translation, (4, 3), {'P': (1, 1), 'A': (0, 0), 'B': (3, 2)}),
        (cond.central_symmetry, (2, -1), {'P': (0, 1), 'O': (1, 0)}),
        (cond.rotation_90, (0, 1), {'P': (1, 0), 'O': (0, 0)}),
        (cond.reflection, (1, -2), {'P': (1, 2), 'A': (0, 0), 'B': (1, 0)}),
    ],
)
def test_self_conditional_templates(template, image, points):
    for polynomial in template():
        assert evaluate(polynomial, origin=image, **points) == 0


def test_tangent_of_60_degrees():
    x_cond, y_cond = cond.tangent_of_60_deg()

    assert x_cond.degree(next(iter(x_cond.variables()))) == 2
    assert evaluate(y_cond, origin=(5, 0)) == 0


def test_angle_tangent_of_right_and_half_right_angles():
    tangent = cond.angle_tangent('A', 'O', 'B')
    points = {'A': (1, 0), 'O': (0, 0), 'B': (1, 1)}

    assert evaluate(tangent.numerator, **points) == evaluate(tangent.denominator, **points) == 1


def test_tangent_of_sum_adds_angles():
    # 45 + 45 degrees: the denominator of the tangent vanishes.
    first = cond.angle_tangent('A', 'O', 'B')
    second = cond.angle_tangent('B', 'O', 'C')
    total = cond.tangent_of_sum(first, second)
    points = {'A': (1, 0), 'O': (0, 0), 'B': (1, 1), 'C': (0, 1)}

    assert evaluate(total.denominator, **points) == 0
    assert evaluate(total.numerator, **points) != 0


def test_angle_ray_copies_an_angle():
    points = {'A': (1, 0), 'O': (0, 0), 'A1': (0, 0), 'O1': (2, 0), 'B1': (3, 1)}

    assert evaluate(cond.angle_ray(), origin=(2, 2), **points) == 0
    assert evaluate(cond.angle_ray(), origin=(2, 3), **points) != 0


def test_signed_area_and_pythagoras_difference():
    points = {'A': (0, 0), 'B': (2, 0), 'C': (0, 3)}

    assert evaluate(cond.signed_area('A', 'B', 'C'), **points) == 3
    assert evaluate(cond.pythagoras_difference('B', 'A', 'C'), **points) == 0
    assert evaluate(cond.pythagoras_difference('A', 'B', 'A'), **points) == 8
