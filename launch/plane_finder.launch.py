"""
Main Launch File for the Plane Finder Node.

Usage:
    ros2 launch plane_calibration plane_finder.launch.py
    ros2 launch plane_calibration plane_finder.launch.py points_topic:=/camera/depth/points
    ros2 service call /plane_finder/find std_srvs/srv/Trigger
"""

from launch import LaunchDescription
from launch.actions import DeclareLaunchArgument
from launch.substitutions import LaunchConfiguration, PathJoinSubstitution
from launch_ros.actions import Node
from launch_ros.substitutions import FindPackageShare


def generate_launch_description():
    # Declare launch arguments
    sensor_name_arg = DeclareLaunchArgument(
        'sensor_name',
        default_value='camera',
        description='Sensor name written into each observation'
    )

    transform_frame_arg = DeclareLaunchArgument(
        'transform_frame',
        default_value='base_link',
        description='Frame of the reference transform'
    )

    output_debug_arg = DeclareLaunchArgument(
        'output_debug',
        default_value='false',
        description='Publish the selected points on ~/debug_points and the filtered frame on ~/debug_cloud'
    )

    points_topic_arg = DeclareLaunchArgument(
        'points_topic',
        default_value='/camera/depth/points',
        description='Input PointCloud2 topic'
    )

    camera_info_topic_arg = DeclareLaunchArgument(
        'camera_info_topic',
        default_value='/camera/depth/camera_info',
        description='Input CameraInfo topic'
    )

    # Get package share directory for config
    pkg_share = FindPackageShare('plane_calibration')
    config_file = PathJoinSubstitution([pkg_share, 'config', 'plane_finder.yaml'])

    plane_finder_node = Node(
        package='plane_calibration',
        executable='plane_finder',
        name='plane_finder',
        output='screen',
        parameters=[
            config_file,
            {
                'sensor_name': LaunchConfiguration('sensor_name'),
                'transform_frame': LaunchConfiguration('transform_frame'),
                'output_debug': LaunchConfiguration('output_debug'),
            }
        ],
        remappings=[
            ('points', LaunchConfiguration('points_topic')),
            ('camera_info', LaunchConfiguration('camera_info_topic')),
        ]
    )

    return LaunchDescription([
        sensor_name_arg,
        transform_frame_arg,
        output_debug_arg,
        points_topic_arg,
        camera_info_topic_arg,
        plane_finder_node,
    ])
