"""
RealSense D435/D455 Depth Camera Example.

This launch file starts the Intel RealSense camera driver and the plane
finder, configured to capture a table surface below the camera.

Prerequisites:
    sudo apt install ros-humble-realsense2-camera

Usage:
    ros2 launch plane_calibration realsense_example.launch.py
    ros2 service call /plane_finder/find std_srvs/srv/Trigger
"""

from launch import LaunchDescription
from launch.actions import DeclareLaunchArgument
from launch.substitutions import LaunchConfiguration, PathJoinSubstitution
from launch_ros.actions import Node
from launch_ros.substitutions import FindPackageShare


def generate_launch_description():
    # Declare launch arguments
    plane_tolerance_arg = DeclareLaunchArgument(
        'plane_tolerance',
        default_value='0.015',
        description='Inlier distance threshold (meters)'
    )

    output_debug_arg = DeclareLaunchArgument(
        'output_debug',
        default_value='true',
        description='Publish the selected points on ~/debug_points'
    )

    # Get package share paths
    pkg_share = FindPackageShare('plane_calibration')
    config_file = PathJoinSubstitution([pkg_share, 'config', 'plane_finder.yaml'])

    # RealSense camera node
    # Note: You may need to adjust these parameters for your camera model
    realsense_node = Node(
        package='realsense2_camera',
        executable='realsense2_camera_node',
        name='camera',
        namespace='camera',
        output='screen',
        parameters=[{
            'enable_color': False,
            'enable_depth': True,
            'enable_infra1': False,
            'enable_infra2': False,
            'depth_module.profile': '640x480x30',
            'pointcloud.enable': True,
            # Keep the cloud organized so pixels can be recovered
            'pointcloud.ordered_pc': True,
        }]
    )

    plane_finder_node = Node(
        package='plane_calibration',
        executable='plane_finder',
        name='plane_finder',
        output='screen',
        parameters=[
            config_file,
            {
                'plane_tolerance': LaunchConfiguration('plane_tolerance'),
                'output_debug': LaunchConfiguration('output_debug'),
                'points_max': 100,
                'ransac_points': 2000,
                # Table seen from above: normal points back at the camera
                'normal_a': 0.0,
                'normal_b': -1.0,
                'normal_c': 0.0,
                'cos_normal_angle': 0.7,
                'max_z': 1.5,
            }
        ],
        remappings=[
            ('points', '/camera/camera/depth/color/points'),
            ('camera_info', '/camera/camera/depth/camera_info'),
        ]
    )

    return LaunchDescription([
        plane_tolerance_arg,
        output_debug_arg,
        realsense_node,
        plane_finder_node,
    ])
