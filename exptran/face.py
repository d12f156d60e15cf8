"""A face mesh driven by identity and expression weights of a face model."""

from __future__ import annotations

import enum
import warnings
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple, Union

import numpy as np

from exptran.facemodel import FaceModel, read_vtk
from exptran.vector3 import Color3, Point3

PathLike = Union[str, Path]

EMOTIONS = ("Angry", "Disgust", "Fear", "Happy", "Neutral", "Sad", "Surprise")

_NEUTRAL_EXPRESSION = 4
_DEFAULT_IDENTITY = 28


class InterpolType(enum.Enum):
    """Which weight vectors are normalised to sum to one before use."""

    NO_INTER = 0
    ID_INTER = 1
    EXP_INTER = 2
    ID_EXP_INTER = 3

    @property
    def normalizes_id(self) -> bool:
        return self in (InterpolType.ID_INTER, InterpolType.ID_EXP_INTER)

    @property
    def normalizes_exp(self) -> bool:
        return self in (InterpolType.EXP_INTER, InterpolType.ID_EXP_INTER)


def interpolate_color(a: Color3, b: Color3, c: Color3, d: Color3, r: float, s: float) -> Color3:
    """Bilinearly blend four corner colours.

    The corners are laid out with ``c``/``d`` on top and ``a``/``b`` below;
    ``r`` weighs horizontally towards the left, ``s`` vertically towards the
    bottom.
    """

    def blend(ca: float, cb: float, cc: float, cd: float) -> float:
        return r * s * ca + (1 - r) * s * cb + r * (1 - s) * cc + (1 - r) * (1 - s) * cd

    return Color3(
        blend(a.r, b.r, c.r, d.r),
        blend(a.g, b.g, c.g, d.g),
        blend(a.b, b.b, c.b, d.b),
    )


def _normalized(weights: List[float], fallback: int, what: str) -> List[float]:
    total = sum(weights)
    if total == 0:
        if not 0 <= fallback < len(weights):
            raise ValueError(f"no default {what} weight at index {fallback}")
        weights[fallback] = 1.0
        return weights
    return [w / total for w in weights]


class Face:
    """Vertices, normals and topology of one face generated from a model."""

    F_POINTS = (4925, 3878, 702, 4733, 4632, 3828, 1451, 3278, 4572, 953, 1992,
                4332, 2540, 1509, 3196, 1930)
    F_POLYGONS = (9521, 7455, 1386, 8934, 8945, 7140, 2851, 6058, 8825, 1680, 3907,
                  8144, 6111, 3786)

    LEFT_MOUTH_CORNER_INDEX = 1
    RIGHT_MOUTH_CORNER_INDEX = 2
    TOP_LIP_INDEX = 3
    BOTTOM_LIP_INDEX = 4
    LEFT_EYE_BROW = 7
    RIGHT_EYE_BROW = 9

    MOUTH = (975, 769, 768, 561, 352, 558, 349, 141, 142, 9569, 9572, 9361, 9360, 9149,
             9152, 8940, 8939, 8726, 8729, 8514, 8302, 8515, 8301, 8087, 8090, 7877,
             7878, 7669, 7458, 7668, 8088, 8299, 8517, 8728, 8942, 9363, 9151, 9571,
             144, 351, 560, 8941, 8731)

    L_EYE_B = (3278, 4246, 3924, 4572)
    R_EYE_B = (953, 1052, 1537, 1992)

    def __init__(self, model: FaceModel):
        self._model = model
        self.triangles = np.array(model.triangles, dtype=int).reshape(-1, 3)
        self.vertices = np.zeros((model.n_vertices, 3))
        self.vertex_normals = np.zeros((model.n_vertices, 3))
        self._w_id = [0.0] * model.n_id
        self._w_exp = [0.0] * model.n_exp
        self.set_identity_and_expression(self._w_id, self._w_exp)

    @property
    def n_id(self) -> int:
        return self._model.n_id

    @property
    def n_exp(self) -> int:
        return self._model.n_exp

    @property
    def point_num(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def poly_num(self) -> int:
        return int(self.triangles.shape[0])

    def set_identity_and_expression(
        self,
        w_id: Sequence[float],
        w_exp: Sequence[float],
        interpolation: InterpolType = InterpolType.NO_INTER,
    ) -> None:
        """Regenerate the vertices from new weights.

        With interpolation the chosen weight vectors are scaled to sum to one;
        an all-zero vector becomes the neutral expression or the default
        identity instead.
        """
        ids = [float(w) for w in w_id]
        exps = [float(w) for w in w_exp]
        if len(ids) != self.n_id:
            raise ValueError(f"expected {self.n_id} identity weights, got {len(ids)}")
        if len(exps) != self.n_exp:
            raise ValueError(f"expected {self.n_exp} expression weights, got {len(exps)}")
        interpolation = InterpolType(interpolation)
        if interpolation.normalizes_exp:
            exps = _normalized(exps, _NEUTRAL_EXPRESSION, "expression")
        if interpolation.normalizes_id:
            ids = _normalized(ids, _DEFAULT_IDENTITY, "identity")

        self._w_id = ids
        self._w_exp = exps
        self.vertices = np.asarray(self._model.generate_face(ids, exps), dtype=float)
        self.generate_vertex_normals()

    def transfer_expression_from(self, other: "Face") -> None:
        """Keep this face's identity and take the other face's expression."""
        _, other_exp = other.weights()
        self.set_identity_and_expression(self._w_id, other_exp)

    def weights(self) -> Tuple[List[float], List[float]]:
        """Return copies of the identity and expression weights."""
        return list(self._w_id), list(self._w_exp)

    def emotion(self) -> str:
        """Name the basic expression whose one-hot weights lie closest."""
        best_index = 0
        best = float("inf")
        for i in range(self.n_exp):
            dist = sum(
                (w - 1) ** 2 if j == i else w * w for j, w in enumerate(self._w_exp)
            )
            if best > dist:
                best = dist
                best_index = i
        if best_index >= len(EMOTIONS):
            raise ValueError(f"expression {best_index} has no name")
        return EMOTIONS[best_index]

    def average_depth(self) -> float:
        """Return the mean z coordinate, 0 for an empty mesh."""
        if self.point_num == 0:
            return 0.0
        return float(self.vertices[:, 2].mean())

    def set_average_depth(self, depth: float) -> None:
        """Shift all vertices along z so the mean depth becomes ``depth``."""
        self.vertices[:, 2] += depth - self.average_depth()

    def point_index_from_polygon(self, index: int) -> int:
        """Return the first vertex index of a triangle."""
        return int(self.triangles[index][0])

    def point_from_polygon(self, index: int) -> Point3:
        """Return the first vertex of a triangle."""
        x, y, z = self.vertices[self.point_index_from_polygon(index)]
        return Point3(float(x), float(y), float(z))

    def closest_point_index(self, point: Union[Point3, Iterable[float]]) -> int:
        """Return the index of the vertex nearest to ``point``, -1 if none."""
        if self.point_num == 0:
            return -1
        target = np.array(tuple(point), dtype=float)
        dists = np.linalg.norm(self.vertices - target, axis=1)
        return int(np.argmin(dists))

    def bounding_sphere(self) -> Tuple[float, float, float, float]:
        """Return ``(cx, cy, cz, diameter)`` of the box around the triangles.

        The box always contains the origin.
        """
        lo = np.zeros(3)
        hi = np.zeros(3)
        if self.poly_num:
            used = self.vertices[self.triangles.ravel()]
            lo = np.minimum(lo, used.min(axis=0))
            hi = np.maximum(hi, used.max(axis=0))
        cx, cy, cz = (float(v) for v in (hi + lo) / 2.0)
        return cx, cy, cz, float(np.max(np.abs(hi - lo)))

    def load(self, path: PathLike) -> None:
        """Replace vertices and triangles with those of a VTK mesh file."""
        mesh = read_vtk(path)
        self.vertices = np.array(mesh.points, dtype=float)
        self.triangles = np.array(mesh.triangles, dtype=int).reshape(-1, 3)
        self.generate_vertex_normals()

    def generate_vertex_normals(self) -> None:
        """Average the surface normals of adjacent triangles at each vertex."""
        normals = np.zeros((self.point_num, 3))
        if self.poly_num:
            p1 = self.vertices[self.triangles[:, 0]]
            p2 = self.vertices[self.triangles[:, 1]]
            p3 = self.vertices[self.triangles[:, 2]]
            surface = np.cross(p2 - p1, p3 - p2)
            for corner in range(3):
                np.add.at(normals, self.triangles[:, corner], surface)
        counts = np.bincount(self.triangles.ravel(), minlength=self.point_num)[: self.point_num]
        isolated = np.flatnonzero(counts == 0)
        if isolated.size:
            warnings.warn(
                f"isolated vertices at {isolated.tolist()}", RuntimeWarning, stacklevel=2
            )
        used = counts > 0
        normals[used] /= counts[used, None]
        lengths = np.linalg.norm(normals, axis=1)
        nonzero = lengths > 0
        normals[nonzero] /= lengths[nonzero, None]
        self.vertex_normals = normals