"""
Plane Calibration - planar observation capture for robot calibration.

This package finds the dominant plane in depth camera point clouds and
turns it into fixed-size calibration observations.
"""

__version__ = '1.0.0'

from .cloud import Bounds, PointCloud, PlaneCloud, PlaneModel
from .config import PlaneFinderConfig
from .errors import (
    PlaneFinderError,
    NoFrameReceived,
    InsufficientInputPoints,
    InsufficientPlaneFit,
    PlaneOrientationMismatch,
    InsufficientSamples,
)
from .feature_finder import FeatureFinder, available_finders, create_finder, register_finder
from .frame_synchronizer import FrameSynchronizer
from .observation import (
    CalibrationFrame,
    CalibrationObservation,
    ObservationBuilder,
    ObservationPoint,
)
from .plane_finder import PlaneFinder
from .point_filter import filter_points
from .ransac_plane import RANSACPlane
from .utils import CameraIntrinsics, RigidTransform

__all__ = [
    'Bounds',
    'PointCloud',
    'PlaneCloud',
    'PlaneModel',
    'PlaneFinderConfig',
    'PlaneFinderError',
    'NoFrameReceived',
    'InsufficientInputPoints',
    'InsufficientPlaneFit',
    'PlaneOrientationMismatch',
    'InsufficientSamples',
    'FeatureFinder',
    'available_finders',
    'create_finder',
    'register_finder',
    'FrameSynchronizer',
    'CalibrationFrame',
    'CalibrationObservation',
    'ObservationBuilder',
    'ObservationPoint',
    'PlaneFinder',
    'filter_points',
    'RANSACPlane',
    'CameraIntrinsics',
    'RigidTransform',
]
