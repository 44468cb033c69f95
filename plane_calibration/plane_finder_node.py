"""
Plane Finder ROS2 Node.

This node subscribes to a depth camera point cloud and, on request, captures
a planar calibration observation from the next frame.
"""

import json
import numpy as np
from typing import Optional

import rclpy
from rclpy.callback_groups import MutuallyExclusiveCallbackGroup, ReentrantCallbackGroup
from rclpy.duration import Duration
from rclpy.executors import MultiThreadedExecutor
from rclpy.node import Node
from rclpy.qos import QoSProfile, ReliabilityPolicy, HistoryPolicy
from rclpy.time import Time
import tf2_ros
from tf2_ros import TransformException

from sensor_msgs.msg import CameraInfo, PointCloud2
from std_msgs.msg import Header, String
from std_srvs.srv import Trigger

from .config import PlaneFinderConfig
from .errors import PlaneFinderError
from .feature_finder import create_finder
from .observation import CalibrationFrame
from .point_cloud_handler import PointCloudHandler, seconds_to_stamp
from .utils import RigidTransform


class PlaneFinderNode(Node):
    """
    ROS2 Node wrapping a feature finder.

    Call the ~/find service to capture one observation; successful
    captures are also published as JSON on ~/observations.
    """

    _parameter_names = [
        'sensor_name', 'points_max', 'initial_sampling_distance', 'plane_tolerance',
        'min_x', 'max_x', 'min_y', 'max_y', 'min_z', 'max_z',
        'normal_a', 'normal_b', 'normal_c', 'cos_normal_angle', 'transform_frame',
        'ransac_iterations', 'ransac_sample_size', 'ransac_points',
        'output_debug', 'cloud_timeout', 'random_seed',
    ]

    def __init__(self, **kwargs):
        super().__init__('plane_finder', **kwargs)

        # Declare parameters
        self._declare_parameters()

        # Get parameters
        self.finder_type = self.get_parameter('finder_type').value
        self.config = PlaneFinderConfig.from_parameters({
            name: self.get_parameter(name).value for name in self._parameter_names
        })

        self.callback_group = ReentrantCallbackGroup()
        # one capture at a time
        self.service_group = MutuallyExclusiveCallbackGroup()

        # tf2 buffer for the reference transform
        self.tf_buffer = tf2_ros.Buffer(cache_time=Duration(seconds=10.0))
        self.tf_listener = tf2_ros.TransformListener(self.tf_buffer, self)

        # Publishers
        self.observations_pub = self.create_publisher(String, '~/observations', 10)
        self.debug_pub = None
        self.debug_cloud_pub = None
        if self.config.output_debug:
            self.debug_pub = self.create_publisher(PointCloud2, '~/debug_points', 10)
            self.debug_cloud_pub = self.create_publisher(PointCloud2, '~/debug_cloud', 1)

        self.finder = create_finder(
            self.finder_type,
            self.config,
            transform_lookup=self.lookup_transform,
            debug_publisher=self.publish_debug_points,
            logger=self.get_logger()
        )

        # QoS profile for sensor data
        sensor_qos = QoSProfile(
            reliability=ReliabilityPolicy.BEST_EFFORT,
            history=HistoryPolicy.KEEP_LAST,
            depth=1
        )

        # Subscriptions
        self.pointcloud_sub = self.create_subscription(
            PointCloud2,
            'points',
            self.pointcloud_callback,
            sensor_qos,
            callback_group=self.callback_group
        )
        self.camera_info_sub = self.create_subscription(
            CameraInfo,
            'camera_info',
            self.camera_info_callback,
            sensor_qos,
            callback_group=self.callback_group
        )

        self.find_srv = self.create_service(
            Trigger,
            '~/find',
            self.find_callback,
            callback_group=self.service_group
        )

        self.get_logger().info(
            f'Plane Finder Node initialized\n'
            f'  Finder type: {self.finder_type}\n'
            f'  Sensor name: {self.config.sensor_name}\n'
            f'  Points max: {self.config.points_max}\n'
            f'  Plane tolerance: {self.config.plane_tolerance}\n'
            f'  RANSAC iterations: {self.config.ransac_iterations}\n'
            f'  Transform frame: {self.config.transform_frame}'
        )

    def _declare_parameters(self):
        """Declare ROS2 parameters."""
        self.declare_parameter('finder_type', 'plane')
        self.declare_parameter('sensor_name', 'camera')
        self.declare_parameter('points_max', 60)
        self.declare_parameter('initial_sampling_distance', 0.01)
        self.declare_parameter('plane_tolerance', 0.02)
        self.declare_parameter('min_x', -2.0)
        self.declare_parameter('max_x', 2.0)
        self.declare_parameter('min_y', -2.0)
        self.declare_parameter('max_y', 2.0)
        self.declare_parameter('min_z', 0.0)
        self.declare_parameter('max_z', 2.0)
        self.declare_parameter('normal_a', 0.0)
        self.declare_parameter('normal_b', 0.0)
        self.declare_parameter('normal_c', 1.0)
        self.declare_parameter('cos_normal_angle', 0.0)
        self.declare_parameter('transform_frame', 'base_link')
        self.declare_parameter('ransac_iterations', 100)
        self.declare_parameter('ransac_sample_size', 3)
        self.declare_parameter('ransac_points', 35)
        self.declare_parameter('output_debug', False)
        self.declare_parameter('cloud_timeout', 2.5)
        self.declare_parameter('random_seed', -1)  # -1 = unseeded

    def pointcloud_callback(self, msg: PointCloud2):
        """
        Hand an incoming PointCloud2 message to the finder.

        Args:
            msg: PointCloud2 message
        """
        cloud = PointCloudHandler.pointcloud2_to_cloud(msg)
        if cloud is None:
            self.get_logger().warning('PointCloud2 has no x, y, z fields')
            return
        self.finder.on_cloud(cloud)

    def camera_info_callback(self, msg: CameraInfo):
        intrinsics = PointCloudHandler.camera_info_to_intrinsics(msg)
        if intrinsics is None:
            self.get_logger().warning('CameraInfo is uncalibrated, ignoring', once=True)
            return
        self.finder.set_intrinsics(intrinsics)

    def find_callback(self, request, response):
        """Capture one observation for the ~/find service."""
        frame = self.capture()
        response.success = frame is not None
        if frame is None:
            response.message = 'Failed to capture a plane observation'
        else:
            response.message = json.dumps(frame.to_dict())
        return response

    def capture(self) -> Optional[CalibrationFrame]:
        """Run the finder once, publishing and returning the frame on success."""
        try:
            frame = self.finder.find()
        except PlaneFinderError as e:
            self.get_logger().warning(f'{type(e).__name__}: {e}')
            return None

        msg = String()
        msg.data = json.dumps(frame.to_dict())
        self.observations_pub.publish(msg)
        self.publish_debug_cloud(frame)
        return frame

    def lookup_transform(
        self,
        target_frame: str,
        source_frame: str,
        stamp: float
    ) -> Optional[RigidTransform]:
        """Resolve target_frame <- source_frame at stamp, or None if unavailable."""
        try:
            msg = self.tf_buffer.lookup_transform(
                target_frame,
                source_frame,
                Time.from_msg(seconds_to_stamp(stamp)),
                timeout=Duration(seconds=0.1)
            )
        except TransformException as e:
            self.get_logger().debug(f'TF lookup failed: {e}')
            return None
        return PointCloudHandler.transform_to_rigid(msg)

    def publish_debug_cloud(self, frame: CalibrationFrame):
        """Publish the filtered frame attached to each observation."""
        if self.debug_cloud_pub is None:
            return
        for observation in frame.observations:
            if observation.cloud is not None:
                self.debug_cloud_pub.publish(
                    PointCloudHandler.cloud_to_pointcloud2(observation.cloud))

    def publish_debug_points(self, points: np.ndarray, frame_id: str, stamp: float):
        """Publish the selected observation points for visualization."""
        if self.debug_pub is None:
            return
        header = Header()
        header.stamp = seconds_to_stamp(stamp)
        header.frame_id = frame_id
        self.debug_pub.publish(PointCloudHandler.xyz_to_pointcloud2(points, header))


def main(args=None):
    """Main entry point."""
    rclpy.init(args=args)

    node = PlaneFinderNode()
    executor = MultiThreadedExecutor()
    executor.add_node(node)

    try:
        executor.spin()
    except KeyboardInterrupt:
        pass
    finally:
        node.destroy_node()
        rclpy.shutdown()


if __name__ == '__main__':
    main()
