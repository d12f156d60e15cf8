import numpy as np
import pytest

from exptran.matrix import converged, jacobi, kronecker, solve_lin_sys_svd, submatrix

A = [[0, 1], [3, 1], [2, 0]]
B = [[4, 1, 0], [2, 1, 2]]


def test_kronecker_shape():
    assert kronecker(A, B).shape == (6, 6)


def test_kronecker_with_identity_is_block_diagonal():
    b = np.array(B, dtype=float)
    k = kronecker(np.eye(2), b)
    np.testing.assert_allclose(k[:2, :3], b)
    np.testing.assert_allclose(k[2:, 3:], b)
    np.testing.assert_allclose(k[:2, 3:], 0.0)
    np.testing.assert_allclose(k[2:, :3], 0.0)


def test_kronecker_mixed_product_property():
    rng = np.random.default_rng(1)
    a, c = rng.normal(size=(2, 3)), rng.normal(size=(3, 2))
    b, d = rng.normal(size=(2, 2)), rng.normal(size=(2, 4))
    left = kronecker(a, b) @ kronecker(c, d)
    right = kronecker(a @ c, b @ d)
    np.testing.assert_allclose(left, right)


def test_kronecker_of_row_vectors_is_outer_flattened():
    r1 = np.array([[1.0, 2.0]])
    r2 = np.array([[3.0, 5.0, 7.0]])
    np.testing.assert_allclose(kronecker(r1, r2)[0], np.outer(r1[0], r2[0]).ravel())


def test_submatrix_is_inclusive():
    k = kronecker(A, B)
    sub = submatrix(k, 2, 4)
    assert sub.shape == (3, 6)
    np.testing.assert_allclose(sub, k[2:5])


def test_submatrix_returns_copy():
    m = np.arange(12, dtype=float).reshape(4, 3)
    sub = submatrix(m, 1, 2)
    sub[0, 0] = -1.0
    assert m[1, 0] == 3.0


@pytest.mark.parametrize("start,end", [(-1, 2), (2, 1), (0, 4)])
def test_submatrix_rejects_bad_range(start, end):
    with pytest.raises(ValueError):
        submatrix(np.zeros((4, 3)), start, end)


def test_solve_lin_sys_svd_source_example():
    m = [[4, 1.5, 2], [3, 3, 1], [2, 1, 5]]
    b = [[10.6], [11.3], [9]]
    x = solve_lin_sys_svd(m, b)
    assert x.shape == (3, 1)
    np.testing.assert_allclose(x[:, 0], [1.5, 2, 0.8], atol=1e-9)


def test_solve_lin_sys_svd_vector_rhs():
    m = [[4, 1.5, 2], [3, 3, 1], [2, 1, 5]]
    x = solve_lin_sys_svd(m, [10.6, 11.3, 9])
    assert x.shape == (3,)
    np.testing.assert_allclose(np.array(m) @ x, [10.6, 11.3, 9], atol=1e-9)


def test_solve_lin_sys_svd_random_system():
    rng = np.random.default_rng(7)
    m = rng.normal(size=(5, 5)) + 5 * np.eye(5)
    b = rng.normal(size=(5, 2))
    x = solve_lin_sys_svd(m, b)
    np.testing.assert_allclose(m @ x, b, atol=1e-8)


def test_solve_lin_sys_svd_shape_mismatch():
    with pytest.raises(ValueError):
        solve_lin_sys_svd(np.eye(3), np.ones(2))


def test_jacobi_source_example():
    aj = np.array([[2.0, 1.0], [5.0, 7.0]])
    bj = np.array([[11.0], [13.0]])
    x = jacobi(aj, bj)
    assert x.shape == (2, 1)
    np.testing.assert_allclose(aj @ x, bj, rtol=1e-4)


def test_jacobi_agrees_with_svd_solver():
    m = np.array([[10.0, 1.0, 2.0], [1.0, 8.0, 1.0], [2.0, 1.0, 9.0]])
    b = np.array([3.0, -2.0, 5.0])
    np.testing.assert_allclose(jacobi(m, b), solve_lin_sys_svd(m, b), rtol=1e-4)


def test_jacobi_stops_after_max_iter():
    m = np.array([[2.0, 1.0], [5.0, 7.0]])
    b = np.array([11.0, 13.0])
    one_sweep = jacobi(m, b, max_iter=1)
    np.testing.assert_allclose(one_sweep, (b - np.array([1.0, 5.0])) / np.array([2.0, 7.0]))


def test_jacobi_rejects_zero_diagonal():
    with pytest.raises(ValueError):
        jacobi([[0.0, 1.0], [1.0, 0.0]], [1.0, 1.0])


def test_jacobi_rejects_non_square():
    with pytest.raises(ValueError):
        jacobi(np.ones((2, 3)), np.ones(2))


def test_converged_identical_iterates():
    assert converged([1.0, 2.0], [1.0, 2.0]) is True


def test_converged_large_step():
    assert converged([1.0, 2.0], [1.5, 2.0]) is False


def test_converged_zero_iterate_is_not_converged():
    assert converged([0.0, 0.0], [0.0, 0.0]) is False


def test_converged_shape_mismatch():
    with pytest.raises(ValueError):
        converged([1.0], [1.0, 2.0])