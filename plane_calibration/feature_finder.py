"""
Feature finder contract and registry.

Every finder turns the next sensor frame into a CalibrationFrame. Variants
register themselves under a name and are selected from configuration.
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Type

from .observation import CalibrationFrame


class FeatureFinder(ABC):
    """Base class for feature finders."""

    @abstractmethod
    def find(self, timeout: Optional[float] = None) -> CalibrationFrame:
        """Capture one calibration frame, raising PlaneFinderError on failure."""
        pass


_FINDERS: Dict[str, Type[FeatureFinder]] = {}


def register_finder(name: str) -> Callable[[Type[FeatureFinder]], Type[FeatureFinder]]:
    """Class decorator adding a finder variant to the registry."""
    def decorator(cls: Type[FeatureFinder]) -> Type[FeatureFinder]:
        if name in _FINDERS and _FINDERS[name] is not cls:
            raise ValueError(f'Feature finder "{name}" is already registered')
        _FINDERS[name] = cls
        return cls
    return decorator


def available_finders() -> List[str]:
    return sorted(_FINDERS)


def create_finder(kind: str, config, **kwargs) -> FeatureFinder:
    """
    Instantiate a registered finder.

    Args:
        kind: Registered finder name, e.g. 'plane'
        config: Finder configuration
        **kwargs: Extra constructor arguments (transform lookup, logger, ...)

    Raises:
        ValueError: kind is not registered
    """
    try:
        finder_cls = _FINDERS[kind]
    except KeyError:
        raise ValueError(
            f'Unknown feature finder "{kind}", available: {available_finders()}') from None
    return finder_cls(config, **kwargs)
