"""
Voice Capture Session

Models continuous browser speech recognition as an explicit object. The
recognizer ends on its own every so often; while the session is active that
end is turned into a restart, and stop/cancel take effect immediately.
"""

import logging
from enum import Enum

from ..errors import CaptureError

logger = logging.getLogger(__name__)


class CaptureState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    STOPPED = "stopped"
    CANCELLED = "cancelled"


class CaptureSession:
    """Lifecycle of one continuous voice capture"""

    def __init__(self, available: bool = True, continuous: bool = True):
        """
        Args:
            available: Whether speech recognition is offered at all
            continuous: Restart the recognizer when it ends while active
        """
        self.available = available
        self.continuous = continuous
        self.state = CaptureState.IDLE
        self.text = ""
        self.restarts = 0

    @property
    def is_active(self) -> bool:
        return self.state == CaptureState.ACTIVE

    def start(self) -> None:
        """Begin capturing; raises CaptureError when capture is unavailable"""
        if not self.available:
            raise CaptureError("Voice capture is not available")
        if self.is_active:
            return

        self.state = CaptureState.ACTIVE
        self.text = ""
        self.restarts = 0
        logger.debug("Voice capture started")

    def update(self, text: str) -> None:
        """Replace the interim transcript; ignored unless active"""
        if self.is_active:
            self.text = text

    def handle_end(self) -> bool:
        """Recognizer ended by itself; returns True if it should be restarted"""
        if self.is_active and self.continuous:
            self.restarts += 1
            logger.debug(f"Voice capture restarted ({self.restarts})")
            return True
        return False

    def stop(self) -> str:
        """Stop capturing and return the captured text"""
        captured = self.text.strip() if self.is_active else ""
        self.state = CaptureState.STOPPED
        self.text = ""
        return captured

    def cancel(self) -> None:
        """Stop capturing and discard any captured text"""
        self.state = CaptureState.CANCELLED
        self.text = ""
        logger.debug("Voice capture cancelled")
