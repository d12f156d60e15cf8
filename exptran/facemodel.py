"""Multilinear face model built from a database of face meshes.

The model is an ``identity x expression x vertex`` tensor decomposed as
``core x U_id x U_exp``. It is stored as a plain-text file. If that file
is missing, the model is computed from a directory of VTK meshes.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Sequence, Union

import numpy as np

from exptran.matrix import kronecker, submatrix
from exptran.svd import svd

PathLike = Union[str, Path]

_HEADER_LINES = 4
_SVD_SCALE = 0.01


class ModelError(Exception):
    """Raised when model data or a mesh file cannot be read."""


@dataclass(eq=False)
class VtkMesh:
    """Points and triangles read from a legacy ASCII VTK polydata file."""

    points: np.ndarray
    triangles: np.ndarray

    @property
    def point_num(self) -> int:
        return int(self.points.shape[0])

    @property
    def poly_num(self) -> int:
        return int(self.triangles.shape[0])


@dataclass(frozen=True)
class ModelProperties:
    """Settings that say where the model and its source meshes live."""

    result_object: Path
    database_location: Path
    db_listing: Path
    n_id: int
    n_exp: int
    n_vertices: int


def _vtk_tokens(path: PathLike, text: str) -> Iterator[str]:
    lines = text.splitlines()
    if len(lines) < _HEADER_LINES:
        raise ModelError(f"{path}: missing VTK header")
    for line in lines[_HEADER_LINES:]:
        yield from line.split()


def _next(tokens: Iterator[str], path: PathLike, what: str) -> str:
    try:
        return next(tokens)
    except StopIteration:
        raise ModelError(f"{path}: file ends while reading {what}") from None


def _next_number(tokens: Iterator[str], path: PathLike, what: str, kind=float):
    token = _next(tokens, path, what)
    try:
        return kind(token)
    except ValueError:
        raise ModelError(f"{path}: expected a number for {what}, got {token!r}") from None


def _read_points(tokens: Iterator[str], path: PathLike) -> np.ndarray:
    label = _next(tokens, path, "the POINTS label")
    if label != "POINTS":
        raise ModelError(f"{path}: did not match the label POINTS, got {label!r}")
    count = _next_number(tokens, path, "the point count", int)
    _next(tokens, path, "the point data type")
    values = [_next_number(tokens, path, "point coordinates") for _ in range(3 * count)]
    return np.array(values, dtype=float).reshape(count, 3)


def read_vtk(path: PathLike) -> VtkMesh:
    """Read points and triangles from an ASCII VTK polydata file."""
    text = Path(path).read_text()
    tokens = _vtk_tokens(path, text)
    points = _read_points(tokens, path)

    label = _next(tokens, path, "the POLYGONS label")
    if label != "POLYGONS":
        raise ModelError(f"{path}: did not match the label POLYGONS, got {label!r}")
    poly_num = _next_number(tokens, path, "the polygon count", int)
    _next_number(tokens, path, "the polygon list size", int)

    triangles: List[List[int]] = []
    for index in range(poly_num):
        corners = _next_number(tokens, path, "a polygon size", int)
        if corners != 3:
            raise ModelError(f"{path}: polygon {index} is not a triangle")
        triangles.append(
            [_next_number(tokens, path, "triangle indices", int) for _ in range(3)]
        )
    return VtkMesh(points, np.array(triangles, dtype=int).reshape(poly_num, 3))


def _read_mesh_points(path: Path, n_vertices: int) -> np.ndarray:
    points = _read_points(_vtk_tokens(path, path.read_text()), path)
    if points.shape[0] < n_vertices:
        raise ModelError(
            f"{path}: holds {points.shape[0]} points, the model needs {n_vertices}"
        )
    return points[:n_vertices]


def read_properties(path: PathLike) -> ModelProperties:
    """Read a properties file.

    The file holds, separated by whitespace: the result file, the database
    directory, the database listing, and the identity, expression and
    vertex counts.
    """
    tokens = Path(path).read_text().split()
    if len(tokens) < 6:
        raise ModelError(f"{path}: expected six model properties, found {len(tokens)}")
    try:
        n_id, n_exp, n_vertices = (int(t) for t in tokens[3:6])
    except ValueError:
        raise ModelError(f"{path}: model sizes must be integers") from None
    if min(n_id, n_exp, n_vertices) <= 0:
        raise ModelError(f"{path}: model sizes must be positive")
    return ModelProperties(
        Path(tokens[0]), Path(tokens[1]), Path(tokens[2]), n_id, n_exp, n_vertices
    )


def _read_db_listing(path: Path, n_id: int, n_exp: int) -> List[str]:
    tokens = path.read_text().split()
    if not tokens:
        raise ModelError(f"{path}: empty database listing")
    try:
        declared = int(tokens[0])
    except ValueError:
        raise ModelError(f"{path}: listing must start with the file count") from None
    wanted = n_id * n_exp
    if declared != wanted:
        warnings.warn(
            f"{path}: listing declares {declared} files, the model needs {wanted}",
            stacklevel=3,
        )
    names = tokens[1 : 1 + wanted]
    if len(names) < wanted:
        raise ModelError(f"{path}: listing names {len(names)} files, need {wanted}")
    return names


def _singular_vectors(flat: np.ndarray):
    scaled = flat * _SVD_SCALE
    result = svd(scaled @ scaled.T, with_u=True, with_v=False)
    return result.u, result.singular_values


@dataclass(eq=False)
class FaceModel:
    """Core tensor, mode matrices and mesh topology of the face model."""

    u_id: np.ndarray
    u_exp: np.ndarray
    core: np.ndarray
    sigma_id: np.ndarray
    sigma_exp: np.ndarray
    triangles: np.ndarray
    point_num: int = field(default=0)

    def __post_init__(self) -> None:
        n_id = self.u_id.shape[0]
        n_exp = self.u_exp.shape[0]
        if self.u_id.shape != (n_id, n_id) or self.u_exp.shape != (n_exp, n_exp):
            raise ValueError("mode matrices must be square")
        if self.core.ndim != 2 or self.core.shape[1] != n_id * n_exp:
            raise ValueError("core must have n_id * n_exp columns")
        if self.core.shape[0] % 3:
            raise ValueError("core must have three rows per vertex")

    @property
    def n_id(self) -> int:
        return int(self.u_id.shape[0])

    @property
    def n_exp(self) -> int:
        return int(self.u_exp.shape[0])

    @property
    def n_vertices(self) -> int:
        return int(self.core.shape[0] // 3)

    @property
    def poly_num(self) -> int:
        return int(self.triangles.shape[0])

    @classmethod
    def load(cls, path: PathLike, n_id: int, n_exp: int, n_vertices: int) -> "FaceModel":
        """Read a model saved by :meth:`save`.

        Raises FileNotFoundError if the file is absent and ModelError if its
        contents are short or malformed.
        """
        tokens = Path(path).read_text().split()
        pos = 0

        def take(count: int, what: str) -> np.ndarray:
            nonlocal pos
            end = pos + count
            if end > len(tokens):
                raise ModelError(f"{path}: file ends while reading {what}")
            try:
                values = [float(t) for t in tokens[pos:end]]
            except ValueError:
                raise ModelError(f"{path}: non-numeric value in {what}") from None
            pos = end
            return np.array(values, dtype=float)

        u_id = take(n_id * n_id, "U_id").reshape(n_id, n_id)
        sigma_id = take(n_id, "sigma_id")
        u_exp = take(n_exp * n_exp, "U_exp").reshape(n_exp, n_exp)
        sigma_exp = take(n_exp, "sigma_exp")
        core = take(3 * n_vertices * n_id * n_exp, "the core tensor").reshape(
            3 * n_vertices, n_id * n_exp
        )
        point_num, poly_num = (int(v) for v in take(2, "the topology sizes"))
        triangles = take(3 * poly_num, "triangles").astype(int).reshape(poly_num, 3)
        return cls(u_id, u_exp, core, sigma_id, sigma_exp, triangles, point_num)

    def save(self, path: PathLike) -> None:
        """Write the model in the text format :meth:`load` reads."""

        def line(values) -> str:
            return " ".join(repr(float(v)) for v in np.ravel(values)) + "\n"

        with open(path, "w") as out:
            out.write(line(self.u_id))
            out.write(line(self.sigma_id))
            out.write(line(self.u_exp))
            out.write(line(self.sigma_exp))
            out.write(line(self.core))
            out.write(f"{self.point_num} {self.poly_num}\n")
            out.write(" ".join(str(int(i)) for i in np.ravel(self.triangles)))

    @classmethod
    def compute(
        cls,
        directory: PathLike,
        db_list: PathLike,
        topology_file: PathLike,
        n_id: int,
        n_exp: int,
        n_vertices: int,
    ) -> "FaceModel":
        """Build the model from the meshes named in ``db_list``.

        The listing starts with the number of files, followed by the file
        names ordered identity by identity, each with all its expressions.
        Triangles come from ``topology_file``.
        """
        base = Path(directory)
        names = _read_db_listing(Path(db_list), n_id, n_exp)
        data = np.array(
            [_read_mesh_points(base / name, n_vertices) for name in names]
        ).reshape(n_id, n_exp, n_vertices, 3)

        mean = data.reshape(-1, 3).mean(axis=0)
        centered = data - mean

        u_id, sigma_id = _singular_vectors(centered.reshape(n_id, -1))
        u_exp, sigma_exp = _singular_vectors(
            centered.transpose(1, 0, 2, 3).reshape(n_exp, -1)
        )
        vertex_flat = centered.reshape(n_id * n_exp, 3 * n_vertices).T
        core = vertex_flat @ kronecker(u_id, u_exp)

        mesh = read_vtk(topology_file)
        return cls(u_id, u_exp, core, sigma_id, sigma_exp, mesh.triangles, mesh.point_num)

    @classmethod
    def from_properties(cls, path: PathLike, topology_file: PathLike) -> "FaceModel":
        """Load the model a properties file names, computing and saving it if needed."""
        props = read_properties(path)
        try:
            return cls.load(props.result_object, props.n_id, props.n_exp, props.n_vertices)
        except (FileNotFoundError, ModelError):
            pass
        model = cls.compute(
            props.database_location,
            props.db_listing,
            topology_file,
            props.n_id,
            props.n_exp,
            props.n_vertices,
        )
        model.save(props.result_object)
        return model

    def generate_face(
        self,
        w_id: Sequence[float],
        w_exp: Sequence[float],
        brute_exp: bool = False,
        brute_id: bool = False,
    ) -> np.ndarray:
        """Return the ``n_vertices x 3`` vertices for the given weights.

        Unless brute, weights are first multiplied by the mode matrices.
        """
        wid = np.asarray(w_id, dtype=float).ravel()
        wexp = np.asarray(w_exp, dtype=float).ravel()
        if wid.size != self.n_id:
            raise ValueError(f"expected {self.n_id} identity weights, got {wid.size}")
        if wexp.size != self.n_exp:
            raise ValueError(f"expected {self.n_exp} expression weights, got {wexp.size}")
        row_id = wid if brute_id else wid @ self.u_id
        row_exp = wexp if brute_exp else wexp @ self.u_exp
        flat = self.core @ kronecker(row_id, row_exp).T
        return flat.reshape(self.n_vertices, 3)

    def core_submatrix(self, rowstart: int, rowend: int) -> np.ndarray:
        """Return core rows ``rowstart`` to ``rowend`` inclusive."""
        return submatrix(self.core, rowstart, rowend)

    def sigma_id_at(self, i: int) -> float:
        """Return the i-th identity singular value."""
        if not 0 <= i < self.n_id:
            raise IndexError(f"identity singular value index {i} out of range")
        return float(self.sigma_id[i])

    def sigma_exp_at(self, i: int) -> float:
        """Return the i-th expression singular value."""
        if not 0 <= i < self.n_exp:
            raise IndexError(f"expression singular value index {i} out of range")
        return float(self.sigma_exp[i])