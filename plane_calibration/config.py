"""
Plane finder configuration.

Values are fixed at startup. The ROS node fills them from declared
parameters; see config/plane_finder.yaml for the shipped defaults.
"""

import numpy as np
from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional

from .cloud import Bounds
from .utils import normalize


@dataclass
class PlaneFinderConfig:
    """Parameters of the plane finder."""
    sensor_name: str = 'camera'
    points_max: int = 60
    initial_sampling_distance: float = 0.01
    plane_tolerance: float = 0.02
    bounds: Bounds = field(default_factory=Bounds)
    desired_normal: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 1.0]))
    cos_normal_angle: float = 0.0
    transform_frame: str = 'base_link'
    ransac_iterations: int = 100
    ransac_sample_size: int = 3
    ransac_points: int = 35
    output_debug: bool = False
    cloud_timeout: float = 2.5
    random_seed: Optional[int] = None

    def __post_init__(self):
        self.desired_normal = normalize(self.desired_normal)

        if self.points_max < 1:
            raise ValueError(f'points_max must be positive, got {self.points_max}')
        if self.plane_tolerance <= 0.0:
            raise ValueError(f'plane_tolerance must be positive, got {self.plane_tolerance}')
        if self.initial_sampling_distance < 0.0:
            raise ValueError(
                f'initial_sampling_distance must be >= 0, got {self.initial_sampling_distance}')
        if not -1.0 <= self.cos_normal_angle <= 1.0:
            raise ValueError(
                f'cos_normal_angle must be within [-1, 1], got {self.cos_normal_angle}')
        if self.ransac_iterations < 1:
            raise ValueError(
                f'ransac_iterations must be positive, got {self.ransac_iterations}')
        if self.ransac_sample_size < 3:
            raise ValueError(
                f'ransac_sample_size must be at least 3, got {self.ransac_sample_size}')
        if self.ransac_points < self.ransac_sample_size:
            raise ValueError(
                f'ransac_points ({self.ransac_points}) must be >= '
                f'ransac_sample_size ({self.ransac_sample_size})')
        if self.cloud_timeout <= 0.0:
            raise ValueError(f'cloud_timeout must be positive, got {self.cloud_timeout}')

        b = self.bounds
        if b.min_x > b.max_x or b.min_y > b.max_y or b.min_z > b.max_z:
            raise ValueError(f'bounds have min greater than max: {b}')

    @classmethod
    def from_parameters(cls, params: Mapping[str, Any]) -> 'PlaneFinderConfig':
        """
        Build a config from flat parameter names.

        Accepts the field names plus min_x..max_z for the bounds and
        normal_a, normal_b, normal_c for the desired normal. A negative
        random_seed means unseeded. Unknown names are ignored.
        """
        defaults = cls()
        kwargs = {}
        for f in fields(cls):
            if f.name in ('bounds', 'desired_normal'):
                continue
            if f.name in params:
                kwargs[f.name] = params[f.name]

        if kwargs.get('random_seed') is not None and kwargs['random_seed'] < 0:
            kwargs['random_seed'] = None

        bounds = {
            name: float(params.get(name, getattr(defaults.bounds, name)))
            for name in ('min_x', 'max_x', 'min_y', 'max_y', 'min_z', 'max_z')
        }
        kwargs['bounds'] = Bounds(**bounds)

        kwargs['desired_normal'] = np.array([
            float(params.get('normal_a', defaults.desired_normal[0])),
            float(params.get('normal_b', defaults.desired_normal[1])),
            float(params.get('normal_c', defaults.desired_normal[2])),
        ])
        return cls(**kwargs)
