"""Image and point helpers for fitting faces to video frames.

Covers gradient filtering, Poisson cloning, random sampling of points
along feature lines, Euler angles from rotation matrices and reading
feature point files.
"""

from __future__ import annotations

import math
import random
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from exptran.face import Face
from exptran.vector3 import Point2

PathLike = Union[str, Path]

_GRADIENT_KERNEL = np.array([[-3.0, 0.0, 3.0], [-10.0, 0.0, 10.0], [-3.0, 0.0, 3.0]])
_LAPLACIAN_KERNEL = np.array([[0.0, 1.0, 0.0], [1.0, -4.0, 1.0], [0.0, 1.0, 0.0]])
_NEIGHBOURS = ((-1, 0), (0, -1), (0, 1), (1, 0))
_PI = 3.141593
_GIMBAL_LOCK_LIMIT = 0.005
_SAMPLES_PER_SEGMENT = 10


def _reflect_pad(img: np.ndarray) -> np.ndarray:
    widths = ((1, 1), (1, 1)) + ((0, 0),) * (img.ndim - 2)
    return np.pad(img, widths, mode="reflect")


def _correlate3(img: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    """Correlate every channel with a 3x3 kernel, mirroring at the borders."""
    padded = _reflect_pad(img)
    h, w = img.shape[:2]
    out = np.zeros(img.shape, dtype=float)
    for (dy, dx), weight in np.ndenumerate(kernel):
        if weight:
            out += weight * padded[dy : dy + h, dx : dx + w]
    return out


def filter_for_gradient(img) -> np.ndarray:
    """Return the horizontal Scharr gradient saturated to 8-bit values."""
    arr = np.asarray(img, dtype=float)
    if arr.ndim not in (2, 3):
        raise ValueError("expected a two-dimensional image, optionally with channels")
    filtered = _correlate3(arr, _GRADIENT_KERNEL)
    return np.clip(np.rint(filtered), 0, 255).astype(np.uint8)


def _shift(img: np.ndarray, o_x: int, o_y: int) -> np.ndarray:
    """Move the image content by the offsets; uncovered pixels become zero."""
    h, w = img.shape[:2]
    out = np.zeros_like(img)
    ax, ay = abs(o_x), abs(o_y)
    rows, cols = h - ay, w - ax
    if rows <= 0 or cols <= 0:
        return out
    dst_r, src_r = (slice(ay, h), slice(0, rows)) if o_y < 0 else (slice(0, rows), slice(ay, h))
    dst_c, src_c = (slice(ax, w), slice(0, cols)) if o_x < 0 else (slice(0, cols), slice(ax, w))
    out[dst_r, dst_c] = img[src_r, src_c]
    return out


def poisson_clone(src, mask, target, o_x: int = 0, o_y: int = 0) -> np.ndarray:
    """Blend the masked part of ``src`` into ``target`` by solving Poisson's equation.

    ``src`` and ``target`` are ``h x w x channels`` 8-bit images of equal
    size; ``mask`` is ``h x w`` and marks the region with non-zero values.
    The source is shifted by ``(o_x, o_y)`` before its Laplacian is taken.
    Only pixels off the image border take part. Returns a new image.
    """
    src_arr = np.asarray(src)
    if src_arr.ndim != 3:
        raise ValueError("src must be an image with channels")
    h, w = src_arr.shape[:2]
    mask_arr = np.asarray(mask, dtype=float)
    if mask_arr.shape != (h, w):
        raise ValueError(f"mask has shape {mask_arr.shape}, expected {(h, w)}")
    result = np.array(target, copy=True)
    if result.shape != src_arr.shape:
        raise ValueError(f"target has shape {result.shape}, expected {src_arr.shape}")

    region = np.zeros((h, w), dtype=bool)
    region[1:-1, 1:-1] = mask_arr[1:-1, 1:-1] != 0.0
    ys, xs = np.nonzero(region)
    count = ys.size
    if count == 0:
        return result

    laplacian = _correlate3(_shift(src_arr.astype(float) / 255.0, o_x, o_y), _LAPLACIAN_KERNEL)
    index = np.full((h, w), -1, dtype=int)
    index[ys, xs] = np.arange(count)

    rows = np.arange(count)
    system = np.zeros((count, count))
    system[rows, rows] = -4.0
    rhs = laplacian[ys, xs].copy()
    boundary = result.astype(float) / 255.0
    for dy, dx in _NEIGHBOURS:
        ny, nx = ys + dy, xs + dx
        neighbour = index[ny, nx]
        inside = neighbour >= 0
        system[rows[inside], neighbour[inside]] = 1.0
        outside = ~inside
        rhs[outside] -= boundary[ny[outside], nx[outside]]

    solution = np.linalg.solve(system, rhs)
    result[ys, xs] = (255.0 * np.clip(solution, 0.0, 1.0)).astype(result.dtype)
    return result


def point_sampling(a, b, num: int, rng: Optional[random.Random] = None) -> List[Point2]:
    """Sample ``num`` points on the line through ``a`` and ``b``.

    The parameter is uniform in ``[0, 1.01)``, measured from ``a``.
    """
    if num < 0:
        raise ValueError("num must not be negative")
    rng = rng if rng is not None else random.Random()
    ax, ay = a
    bx, by = b
    points = []
    for _ in range(num):
        t = rng.random() * 101.0 / 100.0
        points.append(Point2((1 - t) * ax + t * bx, (1 - t) * ay + t * by))
    return points


def _standard_normal(rng: random.Random) -> float:
    while True:
        v1 = 2.0 * rng.random() - 1.0
        v2 = 2.0 * rng.random() - 1.0
        s = v1 * v1 + v2 * v2
        if 0.0 < s < 1.0:
            return v1 * math.sqrt(-2.0 * math.log(s) / s)


def point_sampling_normal(
    a, num: int, var1: float, var2: float, rng: Optional[random.Random] = None
) -> List[Point2]:
    """Sample ``num`` points normally distributed around ``a``.

    ``var1`` and ``var2`` are the variances along x and y.
    """
    if num < 0:
        raise ValueError("num must not be negative")
    if var1 < 0 or var2 < 0:
        raise ValueError("variances must not be negative")
    rng = rng if rng is not None else random.Random()
    ax, ay = a
    sd_x, sd_y = math.sqrt(var1), math.sqrt(var2)
    points = []
    for _ in range(num):
        n1 = _standard_normal(rng)
        n2 = _standard_normal(rng)
        points.append(Point2(ax + n1 * sd_x, ay + n2 * sd_y))
    return points


def sample_good_points(points: Sequence, rng: Optional[random.Random] = None) -> List[Point2]:
    """Sample points along the four lip outlines of the marked feature points.

    The segments are: left corner to top lip, left corner to bottom lip,
    top lip to right corner and bottom lip to right corner.
    """
    rng = rng if rng is not None else random.Random()
    left = points[Face.LEFT_MOUTH_CORNER_INDEX]
    right = points[Face.RIGHT_MOUTH_CORNER_INDEX]
    top = points[Face.TOP_LIP_INDEX]
    bottom = points[Face.BOTTOM_LIP_INDEX]
    sampled: List[Point2] = []
    for start, end in ((left, top), (left, bottom), (top, right), (bottom, right)):
        sampled.extend(point_sampling(start, end, _SAMPLES_PER_SEGMENT, rng))
    return sampled


def closest_larger_power_of_2(x: int) -> int:
    """Return the smallest power of two that is at least ``x``."""
    if x <= 0:
        raise ValueError("x must be positive")
    return 1 << (int(x) - 1).bit_length()


def euler_angles_from_rmatrix(rmatrix) -> Tuple[float, float, float]:
    """Return the ``(x, y, z)`` Euler angles in degrees of a rotation matrix.

    Raises ValueError near gimbal lock, where the angles are not defined.
    """
    r = np.asarray(rmatrix, dtype=float)
    if r.shape != (3, 3):
        raise ValueError("expected a 3x3 rotation matrix")
    rot_y = math.asin(max(-1.0, min(1.0, r[2, 0])))
    cy = math.cos(rot_y)
    if abs(cy) <= _GIMBAL_LOCK_LIMIT:
        raise ValueError("rotation is in gimbal lock")
    rot_x = math.atan2(r[2, 1] / cy, r[2, 2] / cy)
    rot_z = math.atan2(r[1, 0] / cy, r[0, 0] / cy)
    return tuple(angle * 180.0 / _PI for angle in (rot_x, rot_y, rot_z))


def read_feature_points(path: PathLike) -> List[Point2]:
    """Read the marked feature points, one ``x y`` pair per feature."""
    tokens: Iterable[str] = Path(path).read_text().split()
    wanted = len(Face.F_POINTS)
    try:
        values = [float(t) for t in tokens]
    except ValueError:
        raise ValueError(f"{path}: feature points must be numbers") from None
    if len(values) < 2 * wanted:
        raise ValueError(f"{path}: expected {wanted} points, found {len(values) // 2}")
    return [Point2(values[2 * i], values[2 * i + 1]) for i in range(wanted)]