"""
RANSAC Plane Extraction.

This module fits the dominant plane of a filtered point cloud:
- random minimal samples are drawn from the valid points only
- samples that are too tight or degenerate are rejected
- the candidate with the most inliers wins and is refined with SVD
"""

import numpy as np
from itertools import combinations
from typing import Optional, Tuple

from .cloud import PlaneCloud, PlaneModel, PointCloud
from .errors import InsufficientInputPoints, InsufficientPlaneFit


class RANSACPlane:
    """
    RANSAC algorithm for fitting a plane to a 3D point cloud.

    Plane equation: normal . p = offset, with normal a unit vector.
    """

    def __init__(
        self,
        max_iterations: int = 100,
        distance_threshold: float = 0.02,
        min_inliers: int = 35,
        sample_size: int = 3,
        min_sample_distance: float = 0.0,
        random_seed: Optional[int] = None
    ):
        """
        Initialize RANSAC plane extraction.

        Args:
            max_iterations: Number of RANSAC trials
            distance_threshold: Maximum distance for a point to be considered inlier
            min_inliers: Minimum inlier count of an acceptable plane
            sample_size: Number of points drawn per trial (at least 3)
            min_sample_distance: Minimum spacing between the points of a sample
            random_seed: Optional seed for reproducibility
        """
        if sample_size < 3:
            raise ValueError(f'sample_size must be at least 3, got {sample_size}')
        self.max_iterations = max_iterations
        self.distance_threshold = distance_threshold
        self.min_inliers = min_inliers
        self.sample_size = sample_size
        self.min_sample_distance = min_sample_distance
        self.rng = np.random.default_rng(random_seed)

    def extract(
        self,
        cloud: PointCloud,
        reference_normal: Optional[np.ndarray] = None
    ) -> Tuple[PlaneModel, PlaneCloud]:
        """
        Extract the largest plane from a filtered cloud.

        Args:
            cloud: Cloud whose validity mask has already been filtered
            reference_normal: Optional direction the normal is flipped towards

        Returns:
            Tuple of (refined plane model, plane inliers)

        Raises:
            InsufficientInputPoints: Fewer valid points than one sample
            InsufficientPlaneFit: No candidate reached min_inliers
        """
        valid_indices = cloud.valid_indices
        if len(valid_indices) < self.sample_size:
            raise InsufficientInputPoints(
                f'{len(valid_indices)} valid points, need at least {self.sample_size}')

        points = cloud.points[valid_indices]
        n_points = len(points)
        best_model = None
        best_inlier_count = 0
        best_inliers = None

        for _ in range(self.max_iterations):
            # Randomly sample minimum required points
            sample_indices = self.rng.choice(n_points, self.sample_size, replace=False)
            sample_points = points[sample_indices]

            if not self._sample_is_spread(sample_points):
                continue

            # Fit model to samples
            model = self._fit_model(sample_points)
            if model is None:
                continue

            # Compute distances and find inliers
            inliers = model.distances(points) <= self.distance_threshold
            inlier_count = int(np.count_nonzero(inliers))

            # Strictly greater, so the first candidate wins ties
            if inlier_count > best_inlier_count:
                best_model = model
                best_inlier_count = inlier_count
                best_inliers = inliers

        if best_model is None or best_inlier_count < self.min_inliers:
            raise InsufficientPlaneFit(
                f'best plane has {best_inlier_count} inliers, need {self.min_inliers}')

        inlier_indices = valid_indices[best_inliers]

        # Refine model using all inliers
        refined_model = self._fit_model(points[best_inliers])
        if refined_model is not None:
            best_model = refined_model
        best_model.tolerance = self.distance_threshold

        if reference_normal is not None:
            best_model = orient_plane(best_model, reference_normal)

        plane_cloud = PlaneCloud(
            source=cloud,
            inlier_indices=inlier_indices,
            model=best_model
        )
        return best_model, plane_cloud

    def _sample_is_spread(self, points: np.ndarray) -> bool:
        """Reject samples whose points lie closer than min_sample_distance."""
        if self.min_sample_distance <= 0.0:
            return True
        for p1, p2 in combinations(points, 2):
            if np.linalg.norm(p2 - p1) < self.min_sample_distance:
                return False
        return True

    def _fit_model(self, points: np.ndarray) -> Optional[PlaneModel]:
        """
        Fit plane to 3 or more points.

        Args:
            points: Array of shape (N, 3)

        Returns:
            Plane model or None if degenerate
        """
        if len(points) < 3:
            return None

        if len(points) == 3:
            # Compute plane from 3 points using cross product
            p1, p2, p3 = points[0], points[1], points[2]
            v1 = p2 - p1
            v2 = p3 - p1

            # Normal vector is cross product
            normal = np.cross(v1, v2)
            norm = np.linalg.norm(normal)

            # Check for collinear points
            if norm < 1e-10:
                return None

            normal = normal / norm
            return PlaneModel(normal=normal, offset=float(np.dot(normal, p1)))

        # Use SVD for least squares fit to multiple points
        centroid = np.mean(points, axis=0)
        centered = points - centroid

        _, singular_values, vh = np.linalg.svd(centered, full_matrices=False)

        # A second singular value of zero means the points are collinear
        if singular_values[1] < 1e-10:
            return None

        normal = vh[-1]  # Last row of V^T is normal to plane
        normal = normal / np.linalg.norm(normal)
        return PlaneModel(normal=normal, offset=float(np.dot(normal, centroid)))


def orient_plane(model: PlaneModel, reference_normal: np.ndarray) -> PlaneModel:
    """Flip the plane so its normal points to the same side as reference_normal."""
    if np.dot(model.normal, reference_normal) < 0.0:
        return PlaneModel(
            normal=-model.normal,
            offset=-model.offset,
            tolerance=model.tolerance
        )
    return model
