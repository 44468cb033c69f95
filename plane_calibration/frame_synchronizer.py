"""
Latest-frame mailbox shared between the sensor callback and find().
"""

import threading
import time
from typing import Generic, Optional, TypeVar

from .errors import NoFrameReceived

T = TypeVar('T')


class FrameSynchronizer(Generic[T]):
    """
    Single-slot mailbox holding the most recent sensor frame.

    The slot is either Waiting (no fresh frame since the last request) or
    Ready. Frames pushed while Ready overwrite the stored one; a frame is
    handed out at most once.
    """

    def __init__(self):
        self._condition = threading.Condition()
        self._frame: Optional[T] = None
        self._ready = False

    @property
    def has_frame(self) -> bool:
        with self._condition:
            return self._ready

    def request_frame(self):
        """Discard any stored frame and wait for a fresh one."""
        with self._condition:
            self._frame = None
            self._ready = False

    def push(self, frame: T):
        """Store frame as the latest one and wake a waiting consumer."""
        with self._condition:
            self._frame = frame
            self._ready = True
            self._condition.notify_all()

    # Sensor callback entry point
    on_frame = push

    def take(self, timeout: float) -> Optional[T]:
        """
        Wait for a fresh frame and consume it.

        Args:
            timeout: Maximum time to wait in seconds

        Returns:
            The frame, or None if none arrived within timeout
        """
        deadline = time.monotonic() + max(timeout, 0.0)
        with self._condition:
            while not self._ready:
                remaining = deadline - time.monotonic()
                if remaining <= 0.0:
                    return None
                self._condition.wait(remaining)
            frame = self._frame
            self._frame = None
            self._ready = False
            return frame

    def wait_for_cloud(self, timeout: float) -> T:
        """
        Like take(), but raises instead of returning None.

        Raises:
            NoFrameReceived: No frame arrived within timeout
        """
        frame = self.take(timeout)
        if frame is None:
            raise NoFrameReceived(f'no frame received within {timeout:.2f} s')
        return frame
