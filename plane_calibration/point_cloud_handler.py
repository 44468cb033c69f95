"""
ROS2 Message Conversions.

This module converts PointCloud2, CameraInfo and TransformStamped messages
to the plane finder's numpy types and back.
"""

import numpy as np
from typing import Optional

from builtin_interfaces.msg import Time
from geometry_msgs.msg import TransformStamped
from sensor_msgs.msg import CameraInfo, PointCloud2, PointField
from std_msgs.msg import Header

from .cloud import PointCloud
from .utils import CameraIntrinsics, RigidTransform, intrinsics_from_k


# PointField type mappings
PFTYPE_DTYPES = {
    PointField.INT8: 'i1',
    PointField.UINT8: 'u1',
    PointField.INT16: 'i2',
    PointField.UINT16: 'u2',
    PointField.INT32: 'i4',
    PointField.UINT32: 'u4',
    PointField.FLOAT32: 'f4',
    PointField.FLOAT64: 'f8',
}


def stamp_to_seconds(stamp: Time) -> float:
    return stamp.sec + stamp.nanosec * 1e-9


def seconds_to_stamp(seconds: float) -> Time:
    sec = int(np.floor(seconds))
    nanosec = int(round((seconds - sec) * 1e9))
    if nanosec >= 1000000000:
        sec += 1
        nanosec -= 1000000000
    return Time(sec=sec, nanosec=nanosec)


class PointCloudHandler:
    """
    Handler for converting between ROS2 messages and plane finder types.
    """

    @staticmethod
    def pointcloud2_to_cloud(msg: PointCloud2) -> Optional[PointCloud]:
        """
        Convert a PointCloud2 message into a PointCloud.

        Organized clouds keep their width x height layout and invalid
        returns (NaN) stay in place; they are removed later by filtering.

        Args:
            msg: PointCloud2 message

        Returns:
            PointCloud, or None if the message has no x, y, z fields
        """
        # Find x, y, z field offsets
        field_map = {field.name: field for field in msg.fields}

        required_fields = ['x', 'y', 'z']
        for field_name in required_fields:
            if field_name not in field_map:
                return None

        # Determine endianness
        fmt_prefix = '>' if msg.is_bigendian else '<'

        # Structured view over the raw buffer, one record per point
        dtype = np.dtype({
            'names': required_fields,
            'formats': [fmt_prefix + PFTYPE_DTYPES[field_map[name].datatype]
                        for name in required_fields],
            'offsets': [field_map[name].offset for name in required_fields],
            'itemsize': msg.point_step,
        })

        n_points = msg.width * msg.height
        data = np.frombuffer(bytes(msg.data), dtype=np.uint8)
        points = np.zeros((n_points, 3), dtype=np.float64)

        if n_points > 0:
            if msg.row_step == msg.width * msg.point_step:
                records = data[:n_points * msg.point_step].view(dtype)
            else:
                # Rows are padded, drop the padding row by row
                rows = data[:msg.height * msg.row_step].reshape(msg.height, msg.row_step)
                records = np.ascontiguousarray(
                    rows[:, :msg.width * msg.point_step]).reshape(-1).view(dtype)
            for i, name in enumerate(required_fields):
                points[:, i] = records[name]

        return PointCloud(
            points=points,
            width=msg.width,
            height=msg.height,
            frame_id=msg.header.frame_id,
            stamp=stamp_to_seconds(msg.header.stamp)
        )

    @staticmethod
    def xyz_to_pointcloud2(
        points: np.ndarray,
        header: Header,
        width: Optional[int] = None,
        height: int = 1
    ) -> PointCloud2:
        """
        Convert numpy array of XYZ coordinates to PointCloud2 message.

        Args:
            points: Numpy array of shape (N, 3) with XYZ coordinates
            header: ROS2 Header with timestamp and frame_id
            width: Columns of an organized cloud (default: N)
            height: Rows of an organized cloud

        Returns:
            PointCloud2 message
        """
        n_points = len(points)
        if width is None:
            width = n_points // height if height else 0

        # Create PointField descriptors
        point_fields = [
            PointField(name=name, offset=4 * i, datatype=PointField.FLOAT32, count=1)
            for i, name in enumerate(['x', 'y', 'z'])
        ]

        xyz = np.asarray(points, dtype=np.float32).reshape(-1, 3)

        # Create message
        msg = PointCloud2()
        msg.header = header
        msg.height = height
        msg.width = width
        msg.fields = point_fields
        msg.is_bigendian = False
        msg.point_step = 12  # 3 floats * 4 bytes
        msg.row_step = msg.point_step * width
        msg.is_dense = bool(np.all(np.isfinite(xyz)))
        msg.data = xyz.tobytes()

        return msg

    @staticmethod
    def cloud_to_pointcloud2(cloud: PointCloud) -> PointCloud2:
        """Convert a PointCloud back into a PointCloud2, invalid points as NaN."""
        points = np.where(cloud.valid[:, None], cloud.points, np.nan)
        header = Header()
        header.stamp = seconds_to_stamp(cloud.stamp)
        header.frame_id = cloud.frame_id
        return PointCloudHandler.xyz_to_pointcloud2(
            points, header, width=cloud.width, height=cloud.height)

    @staticmethod
    def camera_info_to_intrinsics(msg: CameraInfo) -> Optional[CameraIntrinsics]:
        """Extract pinhole intrinsics, or None if the camera is uncalibrated."""
        return intrinsics_from_k(msg.k, width=msg.width, height=msg.height)

    @staticmethod
    def transform_to_rigid(msg: TransformStamped) -> RigidTransform:
        """Convert a tf2 TransformStamped into a RigidTransform."""
        t = msg.transform.translation
        q = msg.transform.rotation
        return RigidTransform.from_quaternion(
            translation=[t.x, t.y, t.z],
            quaternion=[q.x, q.y, q.z, q.w],
            parent_frame=msg.header.frame_id,
            child_frame=msg.child_frame_id,
            stamp=stamp_to_seconds(msg.header.stamp)
        )
