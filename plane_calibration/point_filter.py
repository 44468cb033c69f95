"""
Invalid point removal.

Points are marked invalid rather than erased so that organized clouds keep
their row/column layout for pixel lookups.
"""

import numpy as np

from .cloud import Bounds, PointCloud


def invalid_point_mask(points: np.ndarray, bounds: Bounds) -> np.ndarray:
    """
    Flag points that cannot be used for plane fitting.

    A point is invalid when any coordinate is NaN or infinite, when its
    z-distance is exactly 0 (no range return), or when it falls outside
    the bounding box.

    Args:
        points: Array of shape (N, 3)
        bounds: Inclusive bounding box

    Returns:
        Boolean array of shape (N,), True for invalid points
    """
    finite = np.all(np.isfinite(points), axis=1)
    # Comparisons against NaN are False, so non-finite rows drop out below
    with np.errstate(invalid='ignore'):
        inside = np.all((points >= bounds.lower()) & (points <= bounds.upper()), axis=1)
        no_range = points[:, 2] == 0.0
    return ~(finite & inside & ~no_range)


def filter_points(cloud: PointCloud, bounds: Bounds) -> PointCloud:
    """
    Mark invalid and out-of-bounds points of a cloud.

    Args:
        cloud: Raw sensor cloud
        bounds: Inclusive bounding box in the sensor frame

    Returns:
        Cloud of the same size whose validity mask excludes filtered points
    """
    valid = cloud.valid & ~invalid_point_mask(cloud.points, bounds)
    return cloud.with_valid(valid)
