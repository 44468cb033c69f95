"""
Geometry utilities for the plane finder.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple
import math


def quaternion_to_rotation(x: float, y: float, z: float, w: float) -> np.ndarray:
    """
    Convert a quaternion to a 3x3 rotation matrix.

    The quaternion is normalized first, so slightly denormalized input
    from a transform message is accepted.

    Args:
        x, y, z, w: Quaternion components

    Returns:
        Rotation matrix of shape (3, 3)
    """
    q = np.array([x, y, z, w], dtype=np.float64)
    norm = np.linalg.norm(q)
    if norm < 1e-12:
        raise ValueError('Cannot convert a zero quaternion to a rotation')
    x, y, z, w = q / norm

    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
        [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
        [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
    ])


def rotation_to_quaternion(rotation: np.ndarray) -> Tuple[float, float, float, float]:
    """
    Convert a rotation matrix to a quaternion (x, y, z, w) with w >= 0.
    """
    r = np.asarray(rotation, dtype=np.float64)
    trace = np.trace(r)

    if trace > 0:
        s = 2.0 * math.sqrt(trace + 1.0)
        w = 0.25 * s
        x = (r[2, 1] - r[1, 2]) / s
        y = (r[0, 2] - r[2, 0]) / s
        z = (r[1, 0] - r[0, 1]) / s
    elif r[0, 0] > r[1, 1] and r[0, 0] > r[2, 2]:
        s = 2.0 * math.sqrt(1.0 + r[0, 0] - r[1, 1] - r[2, 2])
        w = (r[2, 1] - r[1, 2]) / s
        x = 0.25 * s
        y = (r[0, 1] + r[1, 0]) / s
        z = (r[0, 2] + r[2, 0]) / s
    elif r[1, 1] > r[2, 2]:
        s = 2.0 * math.sqrt(1.0 + r[1, 1] - r[0, 0] - r[2, 2])
        w = (r[0, 2] - r[2, 0]) / s
        x = (r[0, 1] + r[1, 0]) / s
        y = 0.25 * s
        z = (r[1, 2] + r[2, 1]) / s
    else:
        s = 2.0 * math.sqrt(1.0 + r[2, 2] - r[0, 0] - r[1, 1])
        w = (r[1, 0] - r[0, 1]) / s
        x = (r[0, 2] + r[2, 0]) / s
        y = (r[1, 2] + r[2, 1]) / s
        z = 0.25 * s

    if w < 0:
        x, y, z, w = -x, -y, -z, -w
    return float(x), float(y), float(z), float(w)


def normalize(vector: Sequence[float]) -> np.ndarray:
    """Return vector scaled to unit length."""
    v = np.asarray(vector, dtype=np.float64)
    norm = np.linalg.norm(v)
    if norm < 1e-12:
        raise ValueError(f'Cannot normalize zero-length vector {list(v)}')
    return v / norm


@dataclass
class RigidTransform:
    """
    Rigid transform taking points from child_frame into parent_frame.
    """
    rotation: np.ndarray = field(default_factory=lambda: np.eye(3))
    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    parent_frame: str = ''
    child_frame: str = ''
    stamp: float = 0.0

    def __post_init__(self):
        self.rotation = np.asarray(self.rotation, dtype=np.float64).reshape(3, 3)
        self.translation = np.asarray(self.translation, dtype=np.float64).reshape(3)

    @classmethod
    def from_quaternion(
        cls,
        translation: Sequence[float],
        quaternion: Sequence[float],
        parent_frame: str = '',
        child_frame: str = '',
        stamp: float = 0.0
    ) -> 'RigidTransform':
        return cls(
            rotation=quaternion_to_rotation(*quaternion),
            translation=translation,
            parent_frame=parent_frame,
            child_frame=child_frame,
            stamp=stamp
        )

    def apply(self, points: np.ndarray) -> np.ndarray:
        """Transform points of shape (N, 3) or (3,)."""
        return points @ self.rotation.T + self.translation

    def as_matrix(self) -> np.ndarray:
        matrix = np.eye(4)
        matrix[:3, :3] = self.rotation
        matrix[:3, 3] = self.translation
        return matrix

    def to_dict(self) -> dict:
        x, y, z, w = rotation_to_quaternion(self.rotation)
        return {
            'parent_frame': self.parent_frame,
            'child_frame': self.child_frame,
            'stamp': self.stamp,
            'translation': [float(v) for v in self.translation],
            'rotation': [x, y, z, w],
        }


@dataclass(frozen=True)
class CameraIntrinsics:
    """Pinhole intrinsics of the depth camera."""
    fx: float
    fy: float
    cx: float
    cy: float
    width: int = 0
    height: int = 0

    def ray(self, row: int, col: int) -> np.ndarray:
        """Unit viewing ray through pixel (row, col) in the optical frame."""
        direction = np.array([
            (col - self.cx) / self.fx,
            (row - self.cy) / self.fy,
            1.0
        ])
        return direction / np.linalg.norm(direction)

    def to_dict(self) -> dict:
        return {
            'fx': self.fx,
            'fy': self.fy,
            'cx': self.cx,
            'cy': self.cy,
            'width': self.width,
            'height': self.height,
        }


def intrinsics_from_k(
    k: Sequence[float],
    width: int = 0,
    height: int = 0
) -> Optional[CameraIntrinsics]:
    """
    Build intrinsics from a row-major 3x3 camera matrix.

    Returns:
        CameraIntrinsics, or None when the matrix is unset (zero focal length)
    """
    k = np.asarray(k, dtype=np.float64).reshape(9)
    if k[0] == 0.0 or k[4] == 0.0:
        return None
    return CameraIntrinsics(
        fx=float(k[0]),
        fy=float(k[4]),
        cx=float(k[2]),
        cy=float(k[5]),
        width=int(width),
        height=int(height)
    )
