"""Interactive controls that set the identity and expression of a face."""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Dict, List, Union

from exptran.face import Face, InterpolType

PathLike = Union[str, Path]

_INITIAL_IDENTITY = 7
_SLIDER_SCALE = 100.0
_FREE_MINIMUM = -100
_INTERPOLATING_MINIMUM = 0


class Expression(enum.IntEnum):
    """The basic expressions, numbered as in the model's expression axis."""

    ANGRY = 0
    DISGUST = 1
    FEAR = 2
    HAPPY = 3
    NEUTRAL = 4
    SAD = 5
    SURPRISE = 6

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def from_label(cls, label: str) -> "Expression":
        """Return the expression named by its display label, e.g. ``"Happy"``."""
        labels: Dict[str, Expression] = {e.label: e for e in cls}
        try:
            return labels[label]
        except KeyError:
            raise ValueError(f"unknown expression {label!r}") from None


class FaceControls:
    """Slider and selector state that drives a :class:`Face`.

    One slider sets the weight of the selected identity, another the weight
    of the selected expression; slider positions run in hundredths.
    """

    def __init__(self, face: Face):
        if face.n_exp < len(Expression):
            raise ValueError(f"the face needs at least {len(Expression)} expressions")
        if face.n_id <= _INITIAL_IDENTITY:
            raise ValueError(f"the face needs more than {_INITIAL_IDENTITY} identities")
        self.face = face
        self.id_inter = False
        self.exp_inter = False
        self.id_slider_minimum = _FREE_MINIMUM
        self.exp_slider_minimum = _FREE_MINIMUM
        self.current_expression = Expression.NEUTRAL
        self.current_identity = _INITIAL_IDENTITY

        w_id = [0.0] * face.n_id
        w_id[_INITIAL_IDENTITY] = 1.0
        w_exp = [0.0] * face.n_exp
        w_exp[Expression.NEUTRAL] = 1.0
        self._w_id: List[float] = w_id
        self._w_exp: List[float] = w_exp
        self._apply()

    @property
    def id_weights(self) -> List[float]:
        return list(self._w_id)

    @property
    def exp_weights(self) -> List[float]:
        return list(self._w_exp)

    def interpolation(self) -> InterpolType:
        """Return which weight vectors are normalised, from the two toggles."""
        if self.id_inter and self.exp_inter:
            return InterpolType.ID_EXP_INTER
        if self.id_inter:
            return InterpolType.ID_INTER
        if self.exp_inter:
            return InterpolType.EXP_INTER
        return InterpolType.NO_INTER

    def _apply(self) -> None:
        self.face.set_identity_and_expression(self._w_id, self._w_exp, self.interpolation())
        # The face normalises the weights it is given; keep the same values here.
        self._w_id, self._w_exp = self.face.weights()

    def expression_activated(self, name: str) -> int:
        """Select an expression by label; return its slider position."""
        self.current_expression = Expression.from_label(name)
        return int(self._w_exp[self.current_expression] * _SLIDER_SCALE)

    def identity_activated(self, ident: int) -> int:
        """Select an identity, numbered from 1; return its slider position."""
        index = ident - 1
        if not 0 <= index < len(self._w_id):
            raise IndexError(f"identity {ident} out of range 1..{len(self._w_id)}")
        self.current_identity = index
        return int(self._w_id[index] * _SLIDER_SCALE)

    def id_slider_moved(self, val: int) -> None:
        """Set the selected identity's weight to ``val / 100`` and regenerate."""
        self._w_id[self.current_identity] = val / _SLIDER_SCALE
        self._apply()

    def exp_slider_moved(self, val: int) -> None:
        """Set the selected expression's weight to ``val / 100`` and regenerate."""
        self._w_exp[self.current_expression] = val / _SLIDER_SCALE
        self._apply()

    def id_inter_toggled(self, toggled: bool) -> None:
        """Switch identity normalisation; it also forbids negative weights."""
        self.id_inter = bool(toggled)
        self.id_slider_minimum = _INTERPOLATING_MINIMUM if self.id_inter else _FREE_MINIMUM

    def exp_inter_toggled(self, toggled: bool) -> None:
        """Switch expression normalisation; it also forbids negative weights."""
        self.exp_inter = bool(toggled)
        self.exp_slider_minimum = _INTERPOLATING_MINIMUM if self.exp_inter else _FREE_MINIMUM

    def render(self) -> None:
        """Regenerate the face from the current weights and toggles."""
        self._apply()

    def load_face_file(self, path: PathLike) -> None:
        """Replace the face mesh with one read from a VTK file."""
        self.face.load(path)