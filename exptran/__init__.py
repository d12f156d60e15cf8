"""Multilinear face model, expression transfer and image utilities."""

__version__ = "0.1.0"

__all__ = ["vector3", "svd", "matrix", "facemodel", "face", "imaging", "face_controls"]