"""
Unit tests for the latest-frame mailbox.
"""

import threading
import time
import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from plane_calibration.errors import NoFrameReceived
from plane_calibration.frame_synchronizer import FrameSynchronizer


class TestFrameSynchronizer:
    """Tests for FrameSynchronizer."""

    def test_timeout_without_frame(self):
        """take() returns None after roughly the timeout, not later."""
        sync = FrameSynchronizer()

        start = time.monotonic()
        frame = sync.take(timeout=0.1)
        elapsed = time.monotonic() - start

        assert frame is None
        assert 0.09 <= elapsed < 1.0

    def test_wait_for_cloud_raises_on_timeout(self):
        sync = FrameSynchronizer()

        start = time.monotonic()
        with pytest.raises(NoFrameReceived):
            sync.wait_for_cloud(timeout=0.1)
        assert time.monotonic() - start < 1.0

    def test_frame_is_consumed_once(self):
        sync = FrameSynchronizer()
        sync.push('frame-1')

        assert sync.has_frame
        assert sync.take(timeout=0.1) == 'frame-1'
        assert not sync.has_frame
        assert sync.take(timeout=0.05) is None

    def test_latest_frame_wins(self):
        sync = FrameSynchronizer()
        sync.on_frame('frame-1')
        sync.on_frame('frame-2')

        assert sync.take(timeout=0.1) == 'frame-2'

    def test_request_frame_drops_stale_frame(self):
        sync = FrameSynchronizer()
        sync.push('stale')

        sync.request_frame()

        assert not sync.has_frame
        assert sync.take(timeout=0.05) is None

    def test_frame_from_another_thread(self):
        """A waiting consumer is woken by a producer thread."""
        sync = FrameSynchronizer()
        sync.request_frame()
        producer = threading.Timer(0.05, sync.push, args=('fresh',))
        producer.start()

        try:
            start = time.monotonic()
            frame = sync.wait_for_cloud(timeout=2.0)
            elapsed = time.monotonic() - start
        finally:
            producer.cancel()

        assert frame == 'fresh'
        assert elapsed < 1.0

    def test_zero_timeout_returns_ready_frame(self):
        sync = FrameSynchronizer()
        sync.push('ready')

        assert sync.take(timeout=0.0) == 'ready'


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
