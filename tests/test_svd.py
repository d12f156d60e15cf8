import numpy as np
import pytest

from exptran.svd import svd

SOURCE_MATRIX = [[4.0, 1.5, 2.0], [3.0, 3.0, 1.0], [2.0, 1.0, 5.0]]


def _reconstruct(result, n):
    return result.u[:, :n] @ np.diag(result.singular_values) @ result.v.T


def test_square_reconstruction():
    a = np.array(SOURCE_MATRIX)
    result = svd(a, with_u=True, with_v=True)
    assert result.converged
    assert result.failed_index is None
    assert np.allclose(_reconstruct(result, 3), a)


def test_solves_source_linear_system():
    a = np.array(SOURCE_MATRIX)
    b = np.array([10.6, 11.3, 9.0])
    result = svd(a, with_u=True, with_v=True)
    x = result.v @ np.diag(1.0 / result.singular_values) @ result.u.T @ b
    assert np.allclose(x, [1.5, 2.0, 0.8])


@pytest.mark.parametrize("shape", [(3, 3), (5, 3), (6, 2), (4, 4)])
@pytest.mark.parametrize("seed", [0, 1, 7])
def test_random_matrices(shape, seed):
    rng = np.random.default_rng(seed)
    a = rng.normal(size=shape)
    m, n = shape
    result = svd(a, with_u=True, with_v=True)
    assert result.converged
    assert np.all(result.singular_values >= 0.0)
    assert np.allclose(_reconstruct(result, n), a)
    assert np.allclose(result.u[:, :n].T @ result.u[:, :n], np.eye(n))
    assert np.allclose(result.v.T @ result.v, np.eye(n))
    expected = np.linalg.svd(a, compute_uv=False)
    assert np.allclose(np.sort(result.singular_values)[::-1], expected)


def test_symmetric_gram_matrix():
    rng = np.random.default_rng(3)
    base = rng.normal(size=(4, 9))
    gram = base @ base.T
    result = svd(gram, with_u=True, with_v=False)
    eigen = np.sort(np.linalg.eigvalsh(gram))[::-1]
    assert np.allclose(np.sort(result.singular_values)[::-1], eigen)
    u = result.u
    assert np.allclose(u @ np.diag(result.singular_values) @ u.T, gram)


def test_rank_deficient():
    a = np.array([[1.0, 2.0], [2.0, 4.0]])
    result = svd(a, with_u=True, with_v=True)
    values = np.sort(result.singular_values)
    assert values[0] == pytest.approx(0.0, abs=1e-9)
    assert np.allclose(_reconstruct(result, 2), a)


def test_zero_matrix():
    result = svd(np.zeros((3, 3)), with_u=True, with_v=True)
    assert np.allclose(result.singular_values, 0.0)


def test_optional_factors_omitted():
    result = svd(SOURCE_MATRIX, with_u=False, with_v=False)
    assert result.u is None
    assert result.v is None
    expected = np.linalg.svd(np.array(SOURCE_MATRIX), compute_uv=False)
    assert np.allclose(np.sort(result.singular_values)[::-1], expected)


def test_input_not_modified():
    a = np.array(SOURCE_MATRIX)
    copy = a.copy()
    svd(a, with_u=True, with_v=True)
    assert np.array_equal(a, copy)


def test_wide_matrix_rejected():
    with pytest.raises(ValueError):
        svd(np.ones((2, 3)))


def test_non_matrix_rejected():
    with pytest.raises(ValueError):
        svd([1.0, 2.0, 3.0])


def test_non_positive_tolerance_rejected():
    with pytest.raises(ValueError):
        svd(SOURCE_MATRIX, tol=0.0)