"""Dense matrix helpers: Kronecker products, row slices and linear solvers."""

from __future__ import annotations

import numpy as np

from exptran.svd import svd

_CONVERGENCE_EPS = 1e-6


def _as_matrix(value, name: str) -> np.ndarray:
    arr = np.array(value, dtype=float)
    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    if arr.ndim != 2:
        raise ValueError(f"{name} must be a one- or two-dimensional array")
    return arr


def kronecker(a, b) -> np.ndarray:
    """Return the Kronecker product of two matrices.

    For ``a`` of shape ``m x n`` and ``b`` of shape ``p x q`` the result has
    shape ``m*p x n*q`` and element ``[i*p + k, j*q + l] == a[i, j] * b[k, l]``.
    """
    left = np.atleast_2d(np.array(a, dtype=float))
    right = np.atleast_2d(np.array(b, dtype=float))
    if left.ndim != 2 or right.ndim != 2:
        raise ValueError("kronecker expects two-dimensional matrices")
    return np.kron(left, right)


def submatrix(a, rowstart: int, rowend: int) -> np.ndarray:
    """Return a copy of rows ``rowstart`` to ``rowend`` inclusive."""
    arr = np.atleast_2d(np.array(a, dtype=float))
    rows = arr.shape[0]
    if not 0 <= rowstart <= rowend < rows:
        raise ValueError(
            f"row range {rowstart}..{rowend} is not within a matrix of {rows} rows"
        )
    return arr[rowstart : rowend + 1].copy()


def solve_lin_sys_svd(a, b) -> np.ndarray:
    """Solve ``a @ x = b`` through the singular value decomposition of ``a``.

    ``x = V @ inv(D) @ U.T @ b`` where zero singular values are kept as zero
    in ``inv(D)``, so singular systems still yield a solution. ``b`` may be a
    vector or a matrix of right-hand sides; the result has the same form.
    """
    mat = np.array(a, dtype=float)
    if mat.ndim != 2:
        raise ValueError("the system matrix must be two-dimensional")
    rhs_arr = np.array(b, dtype=float)
    vector_rhs = rhs_arr.ndim == 1
    rhs = _as_matrix(rhs_arr, "b")
    m, n = mat.shape
    if rhs.shape[0] != m:
        raise ValueError(
            f"right-hand side has {rhs.shape[0]} rows, the matrix has {m}"
        )

    result = svd(mat, with_u=True, with_v=True)
    d = result.singular_values
    inv_d = np.zeros_like(d)
    nonzero = d != 0
    inv_d[nonzero] = 1.0 / d[nonzero]

    projected = result.u[:, :n].T @ rhs
    x = result.v @ (projected * inv_d[:, None])
    return x[:, 0] if vector_rhs else x


def converged(x_k, x_k1) -> bool:
    """Whether successive iterates agree to a relative tolerance of 1e-6.

    The measure is ``max|x_k1 - x_k| / max|x_k1|``; an all-zero ``x_k1``
    never counts as converged.
    """
    prev = np.asarray(x_k, dtype=float)
    curr = np.asarray(x_k1, dtype=float)
    if prev.shape != curr.shape:
        raise ValueError("iterates must have the same shape")
    if curr.size == 0:
        return False
    max_step = float(np.max(np.abs(curr - prev)))
    max_value = float(np.max(np.abs(curr)))
    if max_value == 0.0:
        return False
    return max_step / max_value < _CONVERGENCE_EPS


def jacobi(a, b, max_iter: int = 500) -> np.ndarray:
    """Solve ``a @ x = b`` with the Jacobi iteration, starting from all ones.

    Stops when :func:`converged` holds or after ``max_iter`` sweeps and
    returns the last iterate, shaped like ``b``.
    """
    mat = np.array(a, dtype=float)
    if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
        raise ValueError("jacobi needs a square matrix")
    rhs_arr = np.array(b, dtype=float)
    vector_rhs = rhs_arr.ndim == 1
    rhs = _as_matrix(rhs_arr, "b")
    if rhs.shape != (mat.shape[0], 1):
        raise ValueError("right-hand side must be a single column matching the matrix")
    if max_iter < 1:
        raise ValueError("max_iter must be at least 1")

    diagonal = np.diag(mat).copy()
    if np.any(diagonal == 0.0):
        raise ValueError("jacobi needs a matrix without zeros on its diagonal")
    off_diagonal = mat - np.diag(diagonal)
    column = rhs[:, 0]

    x_k = np.ones(mat.shape[0])
    x_k1 = x_k
    for _ in range(max_iter):
        x_k1 = (column - off_diagonal @ x_k) / diagonal
        if converged(x_k, x_k1):
            break
        x_k = x_k1
    return x_k1 if vector_rhs else x_k1.reshape(-1, 1)