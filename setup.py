from setuptools import find_packages, setup
import os
from glob import glob

package_name = 'plane_calibration'

setup(
    name=package_name,
    version='1.0.0',
    packages=find_packages(exclude=['test']),
    data_files=[
        ('share/ament_index/resource_index/packages',
            ['resource/' + package_name]),
        ('share/' + package_name, ['package.xml']),
        # Include launch files
        (os.path.join('share', package_name, 'launch'), glob('launch/*.py')),
        # Include example launch files
        (os.path.join('share', package_name, 'examples'), glob('examples/*.py')),
        # Include config files
        (os.path.join('share', package_name, 'config'), glob('config/*.yaml')),
    ],
    install_requires=['setuptools', 'numpy'],
    extras_require={
        'test': ['pytest'],
    },
    zip_safe=True,
    maintainer='SAI ESWARA M',
    maintainer_email='saimurali2005@gmail.com',
    description='Plane detection and observation capture for robot extrinsic calibration',
    license='MIT',
    tests_require=['pytest'],
    entry_points={
        'console_scripts': [
            'plane_finder = plane_calibration.plane_finder_node:main',
            'synthetic_publisher = plane_calibration.synthetic_publisher:main',
        ],
    },
)
