"""
Unit tests for ROS2 message conversions.

Skipped when the ROS2 message packages are not available.
"""

import pytest
import numpy as np
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

pytest.importorskip('sensor_msgs.msg')
pytest.importorskip('geometry_msgs.msg')

from geometry_msgs.msg import TransformStamped
from sensor_msgs.msg import CameraInfo, PointCloud2, PointField
from std_msgs.msg import Header

from plane_calibration.cloud import PointCloud
from plane_calibration.point_cloud_handler import (
    PointCloudHandler,
    seconds_to_stamp,
    stamp_to_seconds,
)


def make_header(frame_id='camera_depth_optical_frame', seconds=5.25):
    header = Header()
    header.frame_id = frame_id
    header.stamp = seconds_to_stamp(seconds)
    return header


class TestPointCloudHandler:
    """Tests for PointCloudHandler."""

    def test_organized_cloud_layout_and_nans(self):
        points = np.arange(18, dtype=np.float64).reshape(6, 3)
        points[2] = np.nan

        msg = PointCloudHandler.xyz_to_pointcloud2(points, make_header(), width=3, height=2)
        cloud = PointCloudHandler.pointcloud2_to_cloud(msg)

        assert (cloud.width, cloud.height) == (3, 2)
        assert cloud.is_organized
        assert cloud.frame_id == 'camera_depth_optical_frame'
        assert cloud.stamp == pytest.approx(5.25)
        assert np.all(np.isnan(cloud.points[2]))
        np.testing.assert_allclose(cloud.points[5], [15.0, 16.0, 17.0])
        assert not msg.is_dense

    def test_missing_fields(self):
        msg = PointCloud2()
        msg.fields = [PointField(name='x', offset=0, datatype=PointField.FLOAT32, count=1)]

        assert PointCloudHandler.pointcloud2_to_cloud(msg) is None

    def test_padded_points(self):
        """Extra fields after xyz are skipped using point_step."""
        data = np.zeros((4, 4), dtype=np.float32)
        data[:, :3] = np.arange(12, dtype=np.float32).reshape(4, 3)
        data[:, 3] = -1.0

        msg = PointCloud2()
        msg.header = make_header()
        msg.height = 1
        msg.width = 4
        msg.fields = [
            PointField(name='x', offset=0, datatype=PointField.FLOAT32, count=1),
            PointField(name='y', offset=4, datatype=PointField.FLOAT32, count=1),
            PointField(name='z', offset=8, datatype=PointField.FLOAT32, count=1),
            PointField(name='intensity', offset=12, datatype=PointField.FLOAT32, count=1),
        ]
        msg.is_bigendian = False
        msg.point_step = 16
        msg.row_step = 64
        msg.data = data.tobytes()

        cloud = PointCloudHandler.pointcloud2_to_cloud(msg)

        np.testing.assert_allclose(cloud.points, data[:, :3])
        assert not cloud.is_organized

    def test_cloud_to_pointcloud2_marks_invalid_points(self):
        cloud = PointCloud(points=np.ones((4, 3)), valid=np.array([True, False, True, True]),
                           frame_id='camera', stamp=2.0)

        msg = PointCloudHandler.cloud_to_pointcloud2(cloud)
        back = PointCloudHandler.pointcloud2_to_cloud(msg)

        assert np.all(np.isnan(back.points[1]))
        assert back.frame_id == 'camera'

    def test_camera_info(self):
        msg = CameraInfo()
        msg.width = 640
        msg.height = 480
        msg.k = [525.0, 0.0, 319.5, 0.0, 525.0, 239.5, 0.0, 0.0, 1.0]

        intrinsics = PointCloudHandler.camera_info_to_intrinsics(msg)

        assert intrinsics.fx == 525.0
        assert intrinsics.cy == 239.5
        assert intrinsics.width == 640

    def test_transform(self):
        msg = TransformStamped()
        msg.header = make_header(frame_id='base_link', seconds=1.5)
        msg.child_frame_id = 'camera_depth_optical_frame'
        msg.transform.translation.z = 1.2
        msg.transform.rotation.w = 1.0

        transform = PointCloudHandler.transform_to_rigid(msg)

        assert transform.parent_frame == 'base_link'
        assert transform.child_frame == 'camera_depth_optical_frame'
        assert transform.stamp == pytest.approx(1.5)
        np.testing.assert_allclose(transform.apply(np.zeros(3)), [0.0, 0.0, 1.2])

    def test_stamp_conversion(self):
        stamp = seconds_to_stamp(3.999999999)

        assert stamp_to_seconds(stamp) == pytest.approx(3.999999999)
        assert 0 <= stamp.nanosec < 1000000000


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
