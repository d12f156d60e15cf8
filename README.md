# exptran

A multilinear (tensor) face model and the tools around it: building the
model from a database of VTK face meshes, generating faces from identity
and expression weights, transferring an expression from one face to
another, and a few image utilities such as Poisson cloning.

## Installation

```
pip install .
```

Tests are run with `pip install .[test]` followed by `pytest`.

## Modules

- `exptran.vector3`: the value types `Point3`, `Point2`, `Color3` and
  `Vector3` (with `+`, `-`, scalar `*`, `+=`, `/=`, `cross`, `length`,
  `normalized` and `Vector3.between(p1, p2)`), and `normalize_values`.
- `exptran.svd`: a singular value decomposition by Householder
  bidiagonalisation and QR iteration, `svd(a, with_u, with_v, eps, tol)`,
  which returns an `SvdResult` holding `singular_values`, `u`, `v`,
  `failed_index` and `converged`. The input needs at least as many rows
  as columns; the singular values are not sorted.
- `exptran.matrix`: `kronecker`, `submatrix` (inclusive row range),
  `solve_lin_sys_svd` (works for singular systems too), `jacobi` and
  `converged`.
- `exptran.facemodel`: `FaceModel`, which can be computed from a mesh
  database (`FaceModel.compute`), saved as text (`save`), loaded again
  (`load`) or set up from a properties file (`from_properties`, which
  loads the saved model or, failing that, computes and saves it). It
  generates vertices from weights with `generate_face`. The module also
  holds `read_vtk`, `read_properties`, `VtkMesh`, `ModelProperties` and
  `ModelError`.
- `exptran.face`: `Face`, an instance of the model with its own weights,
  vertices, triangles and vertex normals; `InterpolType`, which chooses
  which weight vectors are normalised to sum to one; `interpolate_color`.
- `exptran.imaging`: `filter_for_gradient`, `poisson_clone`,
  `point_sampling`, `point_sampling_normal`, `sample_good_points`,
  `closest_larger_power_of_2`, `euler_angles_from_rmatrix` and
  `read_feature_points`.
- `exptran.face_controls`: `FaceControls` and `Expression`, which hold
  the slider and selector state that drives a face.

## Example

```python
from exptran.facemodel import FaceModel
from exptran.face import Face, InterpolType

model = FaceModel.load("svd_result", n_id=56, n_exp=7, n_vertices=5090)
face = Face(model)

w_id = [0.0] * 56
w_id[7] = 1.0
w_exp = [0.0] * 7
w_exp[3] = 1.0
face.set_identity_and_expression(w_id, w_exp, InterpolType.NO_INTER)
print(face.emotion())          # "Happy"

other = Face(model)
other.transfer_expression_from(face)
```

`FaceModel.load` raises `FileNotFoundError` when the file is absent and
`ModelError` when its contents are short or malformed.

Images are handled as NumPy arrays of shape `(rows, cols, 3)` with 8-bit
channels:

```python
import numpy as np
from exptran.imaging import poisson_clone

src = np.zeros((20, 20, 3), dtype=np.uint8)
target = np.full((20, 20, 3), 200, dtype=np.uint8)
mask = np.zeros((20, 20))
mask[5:10, 5:10] = 1.0
blended = poisson_clone(src, mask, target, 0, 0)   # target is left unchanged
```

## What this package does not do

It is a library only: there is no command, no window or other user
interface, no rendering of the face, and no reading of video files,
optical flow, pose estimation or frame-by-frame expression transfer
from video. `FaceControls` keeps slider state and regenerates the face,
but showing sliders and the face is left to the caller.