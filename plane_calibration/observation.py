"""
Calibration observations.

An observation is the fixed-size, ordered set of plane samples one sensor
contributes to a calibration frame. Feature finders of every kind emit the
same structure so the optimizer can treat them uniformly.
"""

import logging
import numpy as np
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from .cloud import PlaneCloud, PointCloud
from .errors import InsufficientSamples
from .utils import CameraIntrinsics, RigidTransform


# Receives (points (N, 3), frame_id, stamp)
DebugPublisher = Callable[[np.ndarray, str, float], None]


@dataclass
class ObservationPoint:
    """One sample of an observation."""
    position: np.ndarray
    pixel: Optional[Tuple[int, int]] = None
    ray: Optional[np.ndarray] = None

    def to_dict(self) -> dict:
        return {
            'position': [float(v) for v in self.position],
            'pixel': list(self.pixel) if self.pixel is not None else None,
            'ray': [float(v) for v in self.ray] if self.ray is not None else None,
        }


@dataclass
class CalibrationObservation:
    """Samples of one sensor, in the sensor frame."""
    sensor_name: str
    points: List[ObservationPoint] = field(default_factory=list)
    frame_id: str = ''
    intrinsics: Optional[CameraIntrinsics] = None
    cloud: Optional[PointCloud] = None  # filtered frame, attached for debugging

    def __len__(self) -> int:
        return len(self.points)

    def positions(self) -> np.ndarray:
        if not self.points:
            return np.zeros((0, 3))
        return np.array([p.position for p in self.points])

    def to_dict(self) -> dict:
        return {
            'sensor_name': self.sensor_name,
            'frame_id': self.frame_id,
            'intrinsics': self.intrinsics.to_dict() if self.intrinsics else None,
            'points': [p.to_dict() for p in self.points],
        }


@dataclass
class CalibrationFrame:
    """Output of one successful capture, handed to the optimizer."""
    observations: List[CalibrationObservation]
    reference_transform: Optional[RigidTransform] = None
    timestamp: float = 0.0

    def to_dict(self) -> dict:
        return {
            'timestamp': self.timestamp,
            'reference_transform': (
                self.reference_transform.to_dict()
                if self.reference_transform is not None else None
            ),
            'observations': [o.to_dict() for o in self.observations],
        }


def stride_indices(count: int, points_max: int) -> np.ndarray:
    """
    Positions of points_max samples spread uniformly over count items.

    Selects floor(i * count / points_max) for i in [0, points_max), which
    is strictly increasing whenever count >= points_max.
    """
    return (np.arange(points_max, dtype=np.int64) * count) // points_max


class ObservationBuilder:
    """
    Downsamples a plane cloud into a calibration observation.
    """

    def __init__(
        self,
        points_max: int,
        intrinsics: Optional[CameraIntrinsics] = None,
        publisher: Optional[DebugPublisher] = None,
        logger=None
    ):
        """
        Args:
            points_max: Exact number of samples in every observation
            intrinsics: Camera intrinsics used to attach viewing rays
            publisher: Optional debug sink for the selected samples
            logger: Logger with debug/info/warning/error methods
        """
        if points_max < 1:
            raise ValueError(f'points_max must be positive, got {points_max}')
        self.points_max = points_max
        self.intrinsics = intrinsics
        self.publisher = publisher
        self.logger = logger or logging.getLogger(__name__)

    def build(self, plane_cloud: PlaneCloud, sensor_name: str) -> CalibrationObservation:
        """
        Select points_max inliers and convert them into an observation.

        Raises:
            InsufficientSamples: The plane has fewer than points_max inliers
        """
        n_inliers = len(plane_cloud)
        if n_inliers < self.points_max:
            raise InsufficientSamples(
                f'plane has {n_inliers} inliers, need {self.points_max}')

        source = plane_cloud.source
        selected = plane_cloud.inlier_indices[stride_indices(n_inliers, self.points_max)]

        observation = CalibrationObservation(
            sensor_name=sensor_name,
            frame_id=source.frame_id,
            intrinsics=self.intrinsics
        )
        for index in selected:
            pixel = source.pixel(index)
            ray = None
            if pixel is not None and self.intrinsics is not None:
                ray = self.intrinsics.ray(*pixel)
            observation.points.append(ObservationPoint(
                position=source.points[index].copy(),
                pixel=pixel,
                ray=ray
            ))

        if self.publisher is not None:
            self._publish(observation.positions(), source)

        return observation

    def _publish(self, points: np.ndarray, source: PointCloud):
        try:
            self.publisher(points, source.frame_id, source.stamp)
        except Exception as e:
            self.logger.warning(f'Failed to publish debug observation cloud: {e}')
