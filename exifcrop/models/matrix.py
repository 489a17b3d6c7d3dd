from __future__ import annotations
from typing import Tuple
import math
import numpy as np

from .rect import Rect

# sin/cos results this close to zero are snapped, so quarter turns stay exact.
_NEARLY_ZERO = 1.0 / (1 << 12)


def _sin_cos(degrees: float) -> Tuple[float, float]:
    radians = math.radians(degrees)
    sin_v, cos_v = math.sin(radians), math.cos(radians)
    if abs(sin_v) <= _NEARLY_ZERO:
        sin_v = 0.0
    if abs(cos_v) <= _NEARLY_ZERO:
        cos_v = 0.0
    return sin_v, cos_v


class Matrix:
    """
    3x3 affine transform over (x, y) with y pointing down, so positive angles
    rotate clockwise on screen.

    post_* operations apply after the current transform (M = T @ M),
    pre_* operations apply before it (M = M @ T).
    """

    def __init__(self, values: np.ndarray | None = None):
        self.values = np.identity(3, dtype=np.float64) if values is None else np.array(values, dtype=np.float64)

    # ── Factories for elementary transforms ─────────────────────────
    @staticmethod
    def _rotation(degrees: float) -> np.ndarray:
        sin_v, cos_v = _sin_cos(degrees)
        return np.array([[cos_v, -sin_v, 0.0],
                         [sin_v, cos_v, 0.0],
                         [0.0, 0.0, 1.0]])

    @staticmethod
    def _scale(sx: float, sy: float) -> np.ndarray:
        return np.array([[sx, 0.0, 0.0], [0.0, sy, 0.0], [0.0, 0.0, 1.0]])

    @staticmethod
    def _translation(dx: float, dy: float) -> np.ndarray:
        return np.array([[1.0, 0.0, dx], [0.0, 1.0, dy], [0.0, 0.0, 1.0]])

    # ── Mutators (return self for chaining) ─────────────────────────
    def set_rotate(self, degrees: float) -> "Matrix":
        self.values = self._rotation(degrees)
        return self

    def post_rotate(self, degrees: float) -> "Matrix":
        self.values = self._rotation(degrees) @ self.values
        return self

    def post_scale(self, sx: float, sy: float) -> "Matrix":
        self.values = self._scale(sx, sy) @ self.values
        return self

    def post_translate(self, dx: float, dy: float) -> "Matrix":
        self.values = self._translation(dx, dy) @ self.values
        return self

    def pre_translate(self, dx: float, dy: float) -> "Matrix":
        self.values = self.values @ self._translation(dx, dy)
        return self

    def pre_concat(self, other: "Matrix") -> "Matrix":
        self.values = self.values @ other.values
        return self

    def set_rect_to_rect(self, src: Rect, dst: Rect) -> "Matrix":
        """
        Map src onto dst, scaling each axis independently so src fills dst.
        An empty src gives the zero matrix; drawing through it renders nothing.
        """
        if src.is_empty:
            self.values = np.zeros((3, 3), dtype=np.float64)
            return self

        sx = dst.width / src.width
        sy = dst.height / src.height
        tx = dst.left - src.left * sx
        ty = dst.top - src.top * sy
        self.values = np.array([[sx, 0.0, tx], [0.0, sy, ty], [0.0, 0.0, 1.0]])
        return self

    # ── Queries ─────────────────────────────────────────────────────
    def is_identity(self) -> bool:
        return bool(np.array_equal(self.values, np.identity(3)))

    def map_points(self, points: np.ndarray) -> np.ndarray:
        """points: (N, 2) array of (x, y). Returns mapped (N, 2) array."""
        pts = np.asarray(points, dtype=np.float64)
        homogeneous = np.hstack([pts, np.ones((pts.shape[0], 1))])
        return (homogeneous @ self.values.T)[:, :2]

    def map_rect(self, rect: Rect) -> Tuple[float, float, float, float]:
        """Bounding box (left, top, right, bottom) of the mapped rect corners."""
        corners = np.array([[rect.left, rect.top], [rect.right, rect.top],
                            [rect.right, rect.bottom], [rect.left, rect.bottom]])
        mapped = self.map_points(corners)
        left, top = mapped.min(axis=0)
        right, bottom = mapped.max(axis=0)
        return float(left), float(top), float(right), float(bottom)

    def to_pixel_affine(self) -> np.ndarray:
        """
        2x3 matrix for cv2.warpAffine. Matrix coordinates treat a pixel as a unit
        area, OpenCV addresses pixel centers, hence the half-pixel shifts.
        """
        centered = self._translation(-0.5, -0.5) @ self.values @ self._translation(0.5, 0.5)
        return centered[:2].astype(np.float64)

    def copy(self) -> "Matrix":
        return Matrix(self.values.copy())

    def __repr__(self) -> str:
        return f"Matrix({np.round(self.values, 6).tolist()})"
