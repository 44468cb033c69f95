"""
Point cloud containers used by the plane finder.

Clouds keep their original ordering so that organized (camera-aligned)
clouds can map any point index back to its pixel. Invalid points are
tracked in a validity bitmap instead of being removed.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned box in the sensor frame (meters), limits inclusive."""
    min_x: float = -2.0
    max_x: float = 2.0
    min_y: float = -2.0
    max_y: float = 2.0
    min_z: float = 0.0
    max_z: float = 2.0

    def lower(self) -> np.ndarray:
        return np.array([self.min_x, self.min_y, self.min_z])

    def upper(self) -> np.ndarray:
        return np.array([self.max_x, self.max_y, self.max_z])


@dataclass
class PointCloud:
    """
    A single sensor frame.

    Attributes:
        points: Array of shape (N, 3) with XYZ coordinates, may hold NaN/Inf
        valid: Boolean array of shape (N,), False for invalid points
        width: Number of columns (N for unorganized clouds)
        height: Number of rows (1 for unorganized clouds)
        frame_id: Sensor frame the points are expressed in
        stamp: Capture time in seconds
    """
    points: np.ndarray
    valid: Optional[np.ndarray] = None
    width: int = 0
    height: int = 1
    frame_id: str = ''
    stamp: float = 0.0

    def __post_init__(self):
        self.points = np.asarray(self.points, dtype=np.float64).reshape(-1, 3)
        n_points = len(self.points)
        if self.valid is None:
            self.valid = np.ones(n_points, dtype=bool)
        else:
            self.valid = np.asarray(self.valid, dtype=bool)
        if self.valid.shape != (n_points,):
            raise ValueError(
                f'valid mask has shape {self.valid.shape}, expected ({n_points},)')
        if self.width <= 0:
            self.width = n_points
            self.height = 1
        if self.width * self.height != n_points:
            raise ValueError(
                f'{self.width}x{self.height} layout does not match {n_points} points')

    def __len__(self) -> int:
        return len(self.points)

    @property
    def is_organized(self) -> bool:
        return self.height > 1

    @property
    def valid_indices(self) -> np.ndarray:
        return np.flatnonzero(self.valid)

    @property
    def num_valid(self) -> int:
        return int(np.count_nonzero(self.valid))

    def pixel(self, index: int) -> Optional[Tuple[int, int]]:
        """Return (row, col) of a point in an organized cloud, else None."""
        if not self.is_organized:
            return None
        row, col = divmod(int(index), self.width)
        return row, col

    def with_valid(self, valid: np.ndarray) -> 'PointCloud':
        """Return a cloud sharing these coordinates with a new validity mask."""
        return PointCloud(
            points=self.points,
            valid=valid,
            width=self.width,
            height=self.height,
            frame_id=self.frame_id,
            stamp=self.stamp
        )


@dataclass
class PlaneModel:
    """Plane ``normal . p = offset`` with a unit normal."""
    normal: np.ndarray
    offset: float
    tolerance: float = 0.0

    def distances(self, points: np.ndarray) -> np.ndarray:
        """Perpendicular distance of each point to the plane."""
        return np.abs(points @ self.normal - self.offset)


@dataclass
class PlaneCloud:
    """Inliers of a fitted plane, referenced by index into the source cloud."""
    source: PointCloud
    inlier_indices: np.ndarray
    model: PlaneModel

    def __len__(self) -> int:
        return len(self.inlier_indices)

    @property
    def points(self) -> np.ndarray:
        return self.source.points[self.inlier_indices]

    @property
    def inlier_ratio(self) -> float:
        n_valid = self.source.num_valid
        return len(self.inlier_indices) / n_valid if n_valid else 0.0
