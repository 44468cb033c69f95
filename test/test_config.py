"""
Unit tests for plane finder configuration.
"""

import pytest
import numpy as np
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from plane_calibration.cloud import Bounds
from plane_calibration.config import PlaneFinderConfig


class TestPlaneFinderConfig:
    """Tests for PlaneFinderConfig."""

    def test_defaults(self):
        config = PlaneFinderConfig()

        assert config.points_max == 60
        assert config.ransac_points == 35
        assert config.transform_frame == 'base_link'
        assert config.random_seed is None
        np.testing.assert_allclose(config.desired_normal, [0.0, 0.0, 1.0])

    def test_desired_normal_is_normalized(self):
        config = PlaneFinderConfig(desired_normal=np.array([0.0, 3.0, 4.0]))

        np.testing.assert_allclose(config.desired_normal, [0.0, 0.6, 0.8])

    @pytest.mark.parametrize('overrides', [
        {'desired_normal': np.zeros(3)},
        {'points_max': 0},
        {'plane_tolerance': 0.0},
        {'initial_sampling_distance': -0.1},
        {'cos_normal_angle': 1.5},
        {'ransac_iterations': 0},
        {'ransac_sample_size': 2},
        {'ransac_points': 2},
        {'cloud_timeout': 0.0},
        {'bounds': Bounds(min_x=1.0, max_x=-1.0)},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            PlaneFinderConfig(**overrides)

    def test_from_parameters(self):
        config = PlaneFinderConfig.from_parameters({
            'sensor_name': 'head_camera',
            'points_max': 80,
            'plane_tolerance': 0.01,
            'min_x': -1.0,
            'max_z': 1.5,
            'normal_a': 1.0,
            'normal_b': 0.0,
            'normal_c': 1.0,
            'cos_normal_angle': 0.7,
            'output_debug': True,
            'random_seed': 4,
            'finder_type': 'plane',  # unknown to the config, ignored
        })

        assert config.sensor_name == 'head_camera'
        assert config.points_max == 80
        assert config.plane_tolerance == 0.01
        assert config.bounds.min_x == -1.0
        assert config.bounds.max_x == 2.0
        assert config.bounds.max_z == 1.5
        np.testing.assert_allclose(config.desired_normal, [np.sqrt(0.5), 0.0, np.sqrt(0.5)])
        assert config.output_debug is True
        assert config.random_seed == 4

    def test_negative_seed_means_unseeded(self):
        config = PlaneFinderConfig.from_parameters({'random_seed': -1})

        assert config.random_seed is None


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
