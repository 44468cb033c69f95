"""
Synthetic Depth Camera Node.

This node publishes an organized point cloud and matching camera info
for exercising the plane finder without a real sensor.
"""

import rclpy
from rclpy.node import Node
import numpy as np

from sensor_msgs.msg import CameraInfo, PointCloud2
from std_msgs.msg import Header

from .point_cloud_handler import PointCloudHandler


class SyntheticDepthPublisher(Node):
    """
    Renders a tilting calibration board in front of a back wall.

    Points are expressed in a camera optical frame (z forward). The
    board sits around 1 m away, the wall at 2.5 m, and a fraction of
    pixels return no range.
    """

    def __init__(self):
        super().__init__('synthetic_depth_publisher')

        # Declare parameters
        self.declare_parameter('publish_rate', 10.0)
        self.declare_parameter('noise_level', 0.002)
        self.declare_parameter('dropout_ratio', 0.05)
        self.declare_parameter('width', 160)
        self.declare_parameter('height', 120)
        self.declare_parameter('frame_id', 'camera_depth_optical_frame')

        self.publish_rate = self.get_parameter('publish_rate').value
        self.noise_level = self.get_parameter('noise_level').value
        self.dropout_ratio = self.get_parameter('dropout_ratio').value
        self.width = self.get_parameter('width').value
        self.height = self.get_parameter('height').value
        self.frame_id = self.get_parameter('frame_id').value

        # Pinhole model with a ~60 degree horizontal field of view
        self.fx = self.fy = 0.5 * self.width / np.tan(np.radians(30.0))
        self.cx = (self.width - 1) / 2.0
        self.cy = (self.height - 1) / 2.0

        # Publishers
        self.pointcloud_pub = self.create_publisher(PointCloud2, 'points', 10)
        self.camera_info_pub = self.create_publisher(CameraInfo, 'camera_info', 10)

        # Timer
        self.timer = self.create_timer(1.0 / self.publish_rate, self.timer_callback)

        # Random number generator
        self.rng = np.random.default_rng(42)

        # Animation state
        self.frame_count = 0

        self.get_logger().info(
            f'Synthetic Depth Publisher initialized\n'
            f'  Resolution: {self.width}x{self.height}\n'
            f'  Rate: {self.publish_rate} Hz\n'
            f'  Noise level: {self.noise_level}\n'
            f'  Dropout ratio: {self.dropout_ratio}'
        )

    def timer_callback(self):
        """Publish synthetic data."""
        self.frame_count += 1

        header = Header()
        header.stamp = self.get_clock().now().to_msg()
        header.frame_id = self.frame_id

        points = self._render()
        msg = PointCloudHandler.xyz_to_pointcloud2(
            points, header, width=self.width, height=self.height)
        self.pointcloud_pub.publish(msg)
        self.camera_info_pub.publish(self._camera_info(header))

        self.get_logger().debug(f'Published {self.width}x{self.height} depth cloud')

    def _render(self) -> np.ndarray:
        """Ray-cast the scene for every pixel, row-major."""
        rows, cols = np.mgrid[0:self.height, 0:self.width]
        rays = np.stack([
            (cols - self.cx) / self.fx,
            (rows - self.cy) / self.fy,
            np.ones_like(cols, dtype=np.float64)
        ], axis=-1).reshape(-1, 3)

        # Board tilts back and forth about the camera x-axis
        angle = 0.3 * np.sin(self.frame_count * 0.05)
        board_normal = np.array([0.0, -np.sin(angle), -np.cos(angle)])
        board_center = np.array([0.0, 0.0, 1.0])
        board_offset = np.dot(board_normal, board_center)

        # Build in-plane axes to clip the board to 0.8 m x 0.6 m
        right = np.cross(board_normal, [0.0, 1.0, 0.0])
        right = right / np.linalg.norm(right)
        up = np.cross(right, board_normal)

        with np.errstate(divide='ignore', invalid='ignore'):
            t_board = board_offset / (rays @ board_normal)
        hits = rays * t_board[:, None]
        local = hits - board_center
        on_board = (
            (t_board > 0)
            & (np.abs(local @ right) < 0.4)
            & (np.abs(local @ up) < 0.3)
        )

        # Back wall at z = 2.5
        points = rays * 2.5
        points[on_board] = hits[on_board]

        # Range noise along the viewing ray
        points *= 1.0 + self.rng.normal(0, self.noise_level, (len(points), 1))

        # Missing returns: NaN or zero range
        n_dropouts = int(len(points) * self.dropout_ratio)
        dropout = self.rng.choice(len(points), n_dropouts, replace=False)
        points[dropout[: n_dropouts // 2]] = np.nan
        points[dropout[n_dropouts // 2:]] = 0.0

        return points

    def _camera_info(self, header: Header) -> CameraInfo:
        msg = CameraInfo()
        msg.header = header
        msg.width = self.width
        msg.height = self.height
        msg.distortion_model = 'plumb_bob'
        msg.d = [0.0] * 5
        msg.k = [
            self.fx, 0.0, self.cx,
            0.0, self.fy, self.cy,
            0.0, 0.0, 1.0
        ]
        msg.r = [1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0]
        msg.p = [
            self.fx, 0.0, self.cx, 0.0,
            0.0, self.fy, self.cy, 0.0,
            0.0, 0.0, 1.0, 0.0
        ]
        return msg


def main(args=None):
    """Main entry point."""
    rclpy.init(args=args)

    node = SyntheticDepthPublisher()

    try:
        rclpy.spin(node)
    except KeyboardInterrupt:
        pass
    finally:
        node.destroy_node()
        rclpy.shutdown()


if __name__ == '__main__':
    main()
