"""
Plane Finder.

Finds the largest plane of the expected orientation in the next depth
frame and turns it into a calibration observation.
"""

import logging
import numpy as np
from typing import Callable, Optional

from .cloud import PointCloud
from .config import PlaneFinderConfig
from .errors import PlaneOrientationMismatch
from .feature_finder import FeatureFinder, register_finder
from .frame_synchronizer import FrameSynchronizer
from .observation import CalibrationFrame, DebugPublisher, ObservationBuilder
from .point_filter import filter_points
from .ransac_plane import RANSACPlane
from .utils import CameraIntrinsics, RigidTransform


# (target_frame, source_frame, stamp) -> transform, or None when unavailable
TransformLookup = Callable[[str, str, float], Optional[RigidTransform]]


@register_finder('plane')
class PlaneFinder(FeatureFinder):
    """
    Captures planar calibration observations from a depth sensor.

    Frames are fed through on_cloud() from the sensor callback; find() is
    called from a single consumer thread.
    """

    def __init__(
        self,
        config: PlaneFinderConfig,
        transform_lookup: Optional[TransformLookup] = None,
        debug_publisher: Optional[DebugPublisher] = None,
        logger=None
    ):
        """
        Args:
            config: Plane finder parameters
            transform_lookup: Resolves config.transform_frame at a frame's stamp
            debug_publisher: Receives the selected samples when output_debug is set
            logger: Logger with debug/info/warning/error methods
        """
        self.config = config
        self.transform_lookup = transform_lookup
        self.debug_publisher = debug_publisher
        self.logger = logger or logging.getLogger(__name__)
        self.synchronizer: FrameSynchronizer[PointCloud] = FrameSynchronizer()
        self.intrinsics: Optional[CameraIntrinsics] = None

    def _make_ransac(self) -> RANSACPlane:
        """Extractor restarted from config.random_seed on every call."""
        config = self.config
        return RANSACPlane(
            max_iterations=config.ransac_iterations,
            distance_threshold=config.plane_tolerance,
            min_inliers=config.ransac_points,
            sample_size=config.ransac_sample_size,
            min_sample_distance=config.initial_sampling_distance,
            random_seed=config.random_seed
        )

    def on_cloud(self, cloud: PointCloud):
        """Sensor callback: store cloud as the latest frame."""
        self.synchronizer.on_frame(cloud)

    def set_intrinsics(self, intrinsics: Optional[CameraIntrinsics]):
        self.intrinsics = intrinsics

    def find(self, timeout: Optional[float] = None) -> CalibrationFrame:
        """
        Capture one planar observation from the next frame.

        Args:
            timeout: Seconds to wait for a frame (default: config.cloud_timeout)

        Returns:
            CalibrationFrame with a single observation

        Raises:
            NoFrameReceived: No frame arrived in time
            InsufficientInputPoints: Too few valid points after filtering
            InsufficientPlaneFit: No plane reached ransac_points inliers
            PlaneOrientationMismatch: Best plane normal is off desired_normal
            InsufficientSamples: Plane has fewer than points_max inliers
        """
        config = self.config
        if timeout is None:
            timeout = config.cloud_timeout

        self.synchronizer.request_frame()
        cloud = self.synchronizer.wait_for_cloud(timeout)
        self.logger.debug(
            f'Got cloud with {len(cloud)} points ({cloud.width}x{cloud.height})')

        cloud = filter_points(cloud, config.bounds)
        self.logger.debug(f'{cloud.num_valid} valid points after filtering')

        model, plane_cloud = self._make_ransac().extract(
            cloud, reference_normal=config.desired_normal)

        cos_angle = float(np.dot(model.normal, config.desired_normal))
        if cos_angle < config.cos_normal_angle:
            raise PlaneOrientationMismatch(
                f'plane normal [{model.normal[0]:.3f}, {model.normal[1]:.3f}, '
                f'{model.normal[2]:.3f}] has cos {cos_angle:.3f} to desired normal, '
                f'need {config.cos_normal_angle:.3f}')

        self.logger.info(
            f'Plane detected: normal=[{model.normal[0]:.3f}, '
            f'{model.normal[1]:.3f}, {model.normal[2]:.3f}], '
            f'inliers={len(plane_cloud)}/{cloud.num_valid} '
            f'({plane_cloud.inlier_ratio:.1%})'
        )

        builder = ObservationBuilder(
            points_max=config.points_max,
            intrinsics=self.intrinsics,
            publisher=self.debug_publisher if config.output_debug else None,
            logger=self.logger
        )
        observation = builder.build(plane_cloud, config.sensor_name)
        if config.output_debug:
            observation.cloud = cloud

        return CalibrationFrame(
            observations=[observation],
            reference_transform=self._lookup_transform(cloud),
            timestamp=cloud.stamp
        )

    def _lookup_transform(self, cloud: PointCloud) -> Optional[RigidTransform]:
        if self.transform_lookup is None:
            return None
        try:
            transform = self.transform_lookup(
                self.config.transform_frame, cloud.frame_id, cloud.stamp)
        except Exception as e:
            self.logger.warning(
                f'Transform lookup {self.config.transform_frame} <- {cloud.frame_id} '
                f'failed: {e}')
            return None
        if transform is None:
            self.logger.warning(
                f'No transform {self.config.transform_frame} <- {cloud.frame_id} '
                f'at {cloud.stamp:.3f}')
        return transform
