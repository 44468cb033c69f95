"""
Demo Launch File with Synthetic Depth Camera.

Launches the plane finder together with a synthetic depth camera and a
static transform, for demonstration and testing without real sensors.

Usage:
    ros2 launch plane_calibration demo.launch.py
    ros2 service call /plane_finder/find std_srvs/srv/Trigger
"""

from launch import LaunchDescription
from launch.actions import DeclareLaunchArgument, TimerAction
from launch.substitutions import LaunchConfiguration, PathJoinSubstitution
from launch_ros.actions import Node
from launch_ros.substitutions import FindPackageShare


def generate_launch_description():
    # Declare launch arguments
    publish_rate_arg = DeclareLaunchArgument(
        'publish_rate',
        default_value='10.0',
        description='Synthetic depth publish rate (Hz)'
    )

    noise_level_arg = DeclareLaunchArgument(
        'noise_level',
        default_value='0.002',
        description='Relative range noise of the synthetic camera'
    )

    # Get package share directory for config
    pkg_share = FindPackageShare('plane_calibration')
    config_file = PathJoinSubstitution([pkg_share, 'config', 'plane_finder.yaml'])

    synthetic_publisher = Node(
        package='plane_calibration',
        executable='synthetic_publisher',
        name='synthetic_depth_publisher',
        output='screen',
        parameters=[{
            'publish_rate': LaunchConfiguration('publish_rate'),
            'noise_level': LaunchConfiguration('noise_level'),
            'frame_id': 'camera_depth_optical_frame',
        }]
    )

    # Camera mounted 1 m up, looking forward
    camera_tf = Node(
        package='tf2_ros',
        executable='static_transform_publisher',
        name='camera_tf',
        arguments=[
            '--x', '0.0', '--y', '0.0', '--z', '1.0',
            '--roll', '-1.5708', '--pitch', '0.0', '--yaw', '-1.5708',
            '--frame-id', 'base_link',
            '--child-frame-id', 'camera_depth_optical_frame',
        ]
    )

    # Plane finder (delayed to let the synthetic camera start first)
    plane_finder_node = TimerAction(
        period=1.0,  # 1 second delay
        actions=[
            Node(
                package='plane_calibration',
                executable='plane_finder',
                name='plane_finder',
                output='screen',
                parameters=[
                    config_file,
                    {
                        # The board faces the camera (optical z forward)
                        'normal_a': 0.0,
                        'normal_b': 0.0,
                        'normal_c': -1.0,
                        'cos_normal_angle': 0.8,
                        'output_debug': True,
                    }
                ]
            )
        ]
    )

    return LaunchDescription([
        publish_rate_arg,
        noise_level_arg,
        synthetic_publisher,
        camera_tf,
        plane_finder_node,
    ])
