"""
Error kinds raised while capturing a plane observation.

Every error is terminal for a single ``find()`` call. Callers decide
whether to retry by calling ``find()`` again, which waits for a new frame.
"""


class PlaneFinderError(Exception):
    """Base class for all plane finder failures."""


class NoFrameReceived(PlaneFinderError):
    """No sensor frame arrived before the timeout elapsed."""


class InsufficientInputPoints(PlaneFinderError):
    """Too few valid points to draw a RANSAC sample."""


class InsufficientPlaneFit(PlaneFinderError):
    """No RANSAC candidate reached the minimum inlier count."""


class PlaneOrientationMismatch(PlaneFinderError):
    """A plane was found but its normal is not the expected orientation."""


class InsufficientSamples(PlaneFinderError):
    """The plane has fewer inliers than the observation needs."""
