"""Singular value decomposition by Householder bidiagonalisation and QR."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

_MAX_ITERATIONS = 30


@dataclass
class SvdResult:
    """Outcome of :func:`svd`.

    ``a == u[:, :n] @ diag(singular_values) @ v.T`` for an ``m x n`` input.
    ``u`` is ``m x m`` (only its first ``n`` columns carry the decomposition)
    and ``v`` is ``n x n``. The singular values are non-negative but not sorted.
    ``failed_index`` is ``None`` on success, otherwise the index of the
    singular value whose iteration did not converge.
    """

    singular_values: np.ndarray
    u: Optional[np.ndarray]
    v: Optional[np.ndarray]
    failed_index: Optional[int] = None

    @property
    def converged(self) -> bool:
        return self.failed_index is None


def _rotate(mat: np.ndarray, a: int, b: int, c: float, s: float) -> None:
    col_a = mat[:, a].copy()
    col_b = mat[:, b].copy()
    mat[:, a] = col_a * c + col_b * s
    mat[:, b] = -col_a * s + col_b * c


def svd(a, with_u=True, with_v=False, eps=1e-6, tol=1e-6) -> SvdResult:
    """Decompose an ``m x n`` matrix with ``m >= n``."""
    arr = np.array(a, dtype=float)
    if arr.ndim != 2:
        raise ValueError("svd expects a two-dimensional matrix")
    m, n = arr.shape
    if m < n:
        raise ValueError("svd needs at least as many rows as columns")
    if tol <= 0:
        raise ValueError("tol must be positive")

    u = np.zeros((m, m))
    u[:, :n] = arr
    v = np.zeros((n, n))
    q = np.zeros(n)
    e = np.zeros(n)

    # Householder reduction to bidiagonal form.
    g = x = 0.0
    l = 0
    for i in range(n):
        e[i] = g
        l = i + 1
        col = u[i:, i]
        s = float(col @ col)
        if s < tol:
            g = 0.0
        else:
            f = u[i, i]
            g = math.sqrt(s) if f < 0 else -math.sqrt(s)
            h = f * g - s
            u[i, i] = f - g
            col = u[i:, i].copy()
            sums = col @ u[i:, l:n]
            u[i:, l:n] += np.outer(col, sums / h)
        q[i] = g
        row = u[i, l:n]
        s = float(row @ row)
        if s < tol:
            g = 0.0
        else:
            f = u[i, l]
            g = math.sqrt(s) if f < 0 else -math.sqrt(s)
            h = f * g - s
            u[i, l] = f - g
            e[l:n] = u[i, l:n] / h
            sums = u[l:m, l:n] @ u[i, l:n]
            u[l:m, l:n] += np.outer(sums, e[l:n])
        x = max(x, abs(q[i]) + abs(e[i]))

    # Accumulation of right-hand transformations.
    if with_v:
        for i in range(n - 1, -1, -1):
            if g != 0.0:
                h = u[i, i + 1] * g
                v[l:n, i] = u[i, l:n] / h
                sums = u[i, l:n] @ v[l:n, l:n]
                v[l:n, l:n] += np.outer(v[l:n, i], sums)
            v[i, l:n] = 0.0
            v[l:n, i] = 0.0
            v[i, i] = 1.0
            g = e[i]
            l = i

    # Accumulation of left-hand transformations.
    if with_u:
        for i in range(n, m):
            u[i, n:m] = 0.0
            u[i, i] = 1.0
        for i in range(n - 1, -1, -1):
            l = i + 1
            g = q[i]
            u[i, l:m] = 0.0
            if g != 0.0:
                h = u[i, i] * g
                sums = u[l:m, i] @ u[l:m, l:m]
                u[i:m, l:m] += np.outer(u[i:m, i], sums / h)
                u[i:m, i] /= g
            else:
                u[i:m, i] = 0.0
            u[i, i] += 1.0

    # Diagonalisation of the bidiagonal form.
    eps *= x
    failed_index: Optional[int] = None
    for k in range(n - 1, -1, -1):
        iterations = 0
        while True:
            cancel = False
            for l in range(k, -1, -1):
                if abs(e[l]) <= eps:
                    break
                if abs(q[l - 1]) <= eps:
                    cancel = True
                    break
            if cancel:
                c, s = 0.0, 1.0
                l1 = l - 1
                for i in range(l, k + 1):
                    f = s * e[i]
                    e[i] *= c
                    if abs(f) <= eps:
                        break
                    g = q[i]
                    h = math.sqrt(f * f + g * g)
                    q[i] = h
                    c = g / h
                    s = -f / h
                    if with_u:
                        _rotate(u, l1, i, c, s)
            z = q[k]
            if l == k:
                break
            iterations += 1
            if iterations > _MAX_ITERATIONS:
                failed_index = k
                break
            # Shift from the bottom 2x2 minor.
            x = q[l]
            y = q[k - 1]
            g = e[k - 1]
            h = e[k]
            f = ((y - z) * (y + z) + (g - h) * (g + h)) / (2 * h * y)
            g = math.sqrt(f * f + 1.0)
            f = ((x - z) * (x + z) + h * (y / (f - g if f < 0 else f + g) - h)) / x
            c = s = 1.0
            for i in range(l + 1, k + 1):
                g = e[i]
                y = q[i]
                h = s * g
                g *= c
                z = math.sqrt(f * f + h * h)
                e[i - 1] = z
                c = f / z
                s = h / z
                f = x * c + g * s
                g = -x * s + g * c
                h = y * s
                y *= c
                if with_v:
                    _rotate(v, i - 1, i, c, s)
                z = math.sqrt(f * f + h * h)
                q[i - 1] = z
                c = f / z
                s = h / z
                f = c * g + s * y
                x = -s * g + c * y
                if with_u:
                    _rotate(u, i - 1, i, c, s)
            e[l] = 0.0
            e[k] = f
            q[k] = x
        if failed_index is not None:
            break
        if z < 0.0:
            q[k] = -z
            if with_v:
                v[:, k] = -v[:, k]

    return SvdResult(
        singular_values=q,
        u=u if with_u else None,
        v=v if with_v else None,
        failed_index=failed_index,
    )