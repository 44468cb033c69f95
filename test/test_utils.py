"""
Unit tests for geometry utilities.
"""

import pytest
import numpy as np
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from plane_calibration.utils import (
    CameraIntrinsics,
    RigidTransform,
    intrinsics_from_k,
    normalize,
    quaternion_to_rotation,
    rotation_to_quaternion,
)


class TestQuaternions:
    """Tests for quaternion conversions."""

    def test_identity(self):
        np.testing.assert_allclose(quaternion_to_rotation(0, 0, 0, 1), np.eye(3))

    def test_quarter_turn_about_z(self):
        s = np.sqrt(0.5)
        rotation = quaternion_to_rotation(0, 0, s, s)

        np.testing.assert_allclose(rotation @ [1, 0, 0], [0, 1, 0], atol=1e-12)

    def test_unnormalized_quaternion(self):
        np.testing.assert_allclose(quaternion_to_rotation(0, 0, 0, 2), np.eye(3))

    def test_zero_quaternion(self):
        with pytest.raises(ValueError):
            quaternion_to_rotation(0, 0, 0, 0)

    def test_half_turn_about_x(self):
        """Trace of -1 takes the off-diagonal branch."""
        rotation = np.diag([1.0, -1.0, -1.0])

        x, y, z, w = rotation_to_quaternion(rotation)

        assert abs(x) == pytest.approx(1.0)
        assert w == pytest.approx(0.0, abs=1e-12)

    def test_matrix_to_quaternion_and_back(self):
        q = normalize([0.1, -0.4, 0.3, 0.85])

        rotation = quaternion_to_rotation(*q)

        np.testing.assert_allclose(rotation_to_quaternion(rotation), q, atol=1e-12)


class TestRigidTransform:
    """Tests for RigidTransform."""

    def test_apply(self):
        s = np.sqrt(0.5)
        transform = RigidTransform.from_quaternion(
            translation=[1.0, 0.0, 0.0], quaternion=[0, 0, s, s])

        points = np.array([[1.0, 0.0, 0.0], [0.0, 0.0, 2.0]])

        np.testing.assert_allclose(
            transform.apply(points), [[1.0, 1.0, 0.0], [1.0, 0.0, 2.0]], atol=1e-12)

    def test_as_matrix(self):
        transform = RigidTransform(translation=[1.0, 2.0, 3.0])

        matrix = transform.as_matrix()

        np.testing.assert_allclose(matrix[:3, 3], [1.0, 2.0, 3.0])
        np.testing.assert_allclose(matrix[3], [0.0, 0.0, 0.0, 1.0])


class TestCameraIntrinsics:
    """Tests for CameraIntrinsics."""

    def test_principal_point_ray(self):
        intrinsics = CameraIntrinsics(fx=500.0, fy=500.0, cx=320.0, cy=240.0)

        np.testing.assert_allclose(intrinsics.ray(240, 320), [0.0, 0.0, 1.0])

    def test_ray_direction(self):
        intrinsics = CameraIntrinsics(fx=100.0, fy=100.0, cx=0.0, cy=0.0)

        ray = intrinsics.ray(0, 100)

        np.testing.assert_allclose(ray, [np.sqrt(0.5), 0.0, np.sqrt(0.5)])

    def test_from_k(self):
        intrinsics = intrinsics_from_k(
            [525.0, 0.0, 319.5, 0.0, 525.0, 239.5, 0.0, 0.0, 1.0], width=640, height=480)

        assert intrinsics == CameraIntrinsics(
            fx=525.0, fy=525.0, cx=319.5, cy=239.5, width=640, height=480)

    def test_from_uncalibrated_k(self):
        assert intrinsics_from_k([0.0] * 9) is None


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
