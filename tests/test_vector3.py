import math

import pytest

from exptran.vector3 import Color3, Point2, Point3, Vector3, normalize_values


def test_between_is_p2_minus_p1():
    v = Vector3.between(Point3(1.0, 2.0, 3.0), Point3(4.0, 6.0, 8.0))
    assert v == Vector3(3.0, 4.0, 5.0)


def test_add_and_sub_are_inverse():
    a = Vector3(1.5, -2.0, 3.25)
    b = Vector3(0.5, 4.0, -1.0)
    assert (a + b) - b == a
    assert a - a == Vector3(0.0, 0.0, 0.0)


def test_mul_scales_each_component():
    a = Vector3(1.0, -2.0, 3.0)
    assert a * 2.0 == Vector3(2.0, -4.0, 6.0)
    assert 2.0 * a == a * 2.0


def test_iadd_mutates_in_place():
    a = Vector3(1.0, 1.0, 1.0)
    alias = a
    a += Vector3(2.0, 3.0, 4.0)
    assert alias is a
    assert a == Vector3(3.0, 4.0, 5.0)


def test_itruediv_mutates_in_place():
    a = Vector3(2.0, 4.0, 6.0)
    alias = a
    a /= 2.0
    assert alias is a
    assert a == Vector3(1.0, 2.0, 3.0)


def test_cross_of_basis_vectors():
    assert Vector3(1, 0, 0).cross(Vector3(0, 1, 0)) == Vector3(0, 0, 1)


@pytest.mark.parametrize(
    "a,b",
    [
        (Vector3(1.0, 2.0, 3.0), Vector3(-4.0, 0.5, 2.0)),
        (Vector3(0.3, -1.2, 5.0), Vector3(2.2, 2.2, -0.7)),
    ],
)
def test_cross_is_orthogonal_and_anticommutative(a, b):
    c = a.cross(b)
    assert math.isclose(c.x * a.x + c.y * a.y + c.z * a.z, 0.0, abs_tol=1e-9)
    assert math.isclose(c.x * b.x + c.y * b.y + c.z * b.z, 0.0, abs_tol=1e-9)
    d = b.cross(a)
    assert (c.x, c.y, c.z) == pytest.approx((-d.x, -d.y, -d.z))


def test_length():
    assert Vector3(3.0, 4.0, 0.0).length() == pytest.approx(5.0)


def test_normalized_has_unit_length_and_same_direction():
    v = Vector3(2.0, -3.0, 6.0)
    n = v.normalized()
    assert n.length() == pytest.approx(1.0)
    assert tuple(n * v.length()) == pytest.approx(tuple(v))


def test_normalized_zero_vector_raises():
    with pytest.raises(ZeroDivisionError):
        Vector3().normalized()


def test_str_format():
    assert str(Vector3(1.0, 2.0, 3.0)) == "vector = (1, 2, 3)"


def test_normalize_values_unit_norm():
    result = normalize_values([1.0, 2.0, 2.0, 4.0])
    assert math.sqrt(sum(v * v for v in result)) == pytest.approx(1.0)
    assert result[1] == pytest.approx(result[2])


def test_normalize_values_zero_unchanged():
    assert normalize_values([0.0, 0.0, 0.0]) == [0.0, 0.0, 0.0]


def test_points_and_colour_iterate_components():
    assert tuple(Point3(1.0, 2.0, 3.0)) == (1.0, 2.0, 3.0)
    assert tuple(Point2(4.0, 5.0)) == (4.0, 5.0)
    assert tuple(Color3(0.1, 0.2, 0.3)) == (0.1, 0.2, 0.3)