"""
Unit tests for the plane finder node wiring.

Skipped when rclpy is not available.
"""

import pytest
import numpy as np
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

rclpy = pytest.importorskip('rclpy')
pytest.importorskip('tf2_ros')
pytest.importorskip('std_srvs.srv')

from rclpy.callback_groups import MutuallyExclusiveCallbackGroup, ReentrantCallbackGroup
from rclpy.parameter import Parameter

from plane_calibration.cloud import PointCloud
from plane_calibration.observation import (
    CalibrationFrame,
    CalibrationObservation,
    ObservationPoint,
)
from plane_calibration.plane_finder_node import PlaneFinderNode
from plane_calibration.point_cloud_handler import PointCloudHandler


class RecordingPublisher:
    def __init__(self):
        self.messages = []

    def publish(self, msg):
        self.messages.append(msg)


@pytest.fixture
def ros_context():
    rclpy.init()
    yield
    rclpy.shutdown()


def make_node(output_debug):
    return PlaneFinderNode(
        parameter_overrides=[Parameter('output_debug', value=output_debug)])


def make_frame():
    valid = np.ones(6, dtype=bool)
    valid[4] = False
    cloud = PointCloud(points=np.arange(18, dtype=np.float64).reshape(6, 3), valid=valid,
                       width=3, height=2, frame_id='camera', stamp=4.0)
    observation = CalibrationObservation(
        sensor_name='camera',
        points=[ObservationPoint(position=cloud.points[0], pixel=(0, 0))],
        frame_id='camera',
        cloud=cloud
    )
    return CalibrationFrame(observations=[observation], timestamp=4.0)


class TestPlaneFinderNode:
    """Tests for PlaneFinderNode."""

    def test_debug_cloud_published(self, ros_context):
        node = make_node(output_debug=True)
        try:
            assert node.debug_cloud_pub is not None
            node.debug_cloud_pub = RecordingPublisher()

            node.publish_debug_cloud(make_frame())

            assert len(node.debug_cloud_pub.messages) == 1
            msg = node.debug_cloud_pub.messages[0]
            assert (msg.width, msg.height) == (3, 2)
            assert msg.header.frame_id == 'camera'
            cloud = PointCloudHandler.pointcloud2_to_cloud(msg)
            assert np.all(np.isnan(cloud.points[4]))
        finally:
            node.destroy_node()

    def test_no_debug_cloud_without_output_debug(self, ros_context):
        node = make_node(output_debug=False)
        try:
            assert node.debug_cloud_pub is None
            node.publish_debug_cloud(make_frame())
        finally:
            node.destroy_node()

    def test_find_service_runs_exclusively(self, ros_context):
        node = make_node(output_debug=False)
        try:
            assert isinstance(node.find_srv.callback_group, MutuallyExclusiveCallbackGroup)
            assert isinstance(node.pointcloud_sub.callback_group, ReentrantCallbackGroup)
            assert node.find_srv.callback_group is not node.pointcloud_sub.callback_group
        finally:
            node.destroy_node()


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
