"""
Asyncio driver for a recording session.

Ticks the controller once per second and pumps queued transcription results
in between, all on one event loop, until the session leaves the recording
state.
"""
import asyncio
import logging

from ..assessment.models import LevelConfig
from .controller import RecordingSessionController
from .session import RecordingSession, SessionState

logger = logging.getLogger("session_runner")


class SessionRunner:
    """Runs a controller's session to completion."""

    def __init__(self,
                 controller: RecordingSessionController,
                 tick_interval: float = 1.0,
                 pump_interval: float = 0.2):
        if pump_interval <= 0 or tick_interval < pump_interval:
            raise ValueError("Need 0 < pump_interval <= tick_interval")
        self.controller = controller
        self.tick_interval = tick_interval
        self.pump_interval = pump_interval

    async def record(self, level_config: LevelConfig) -> RecordingSession:
        """
        Start a session and drive it until it is recorded.

        Raises:
            DeviceUnavailable: If the microphone cannot be acquired
            TranscriptionUnavailable: If live transcription cannot be opened
        """
        session = self.controller.start(level_config)
        await self.drive()
        return session

    async def drive(self) -> None:
        """Tick and pump until the current session stops recording."""
        controller = self.controller
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self.tick_interval

        try:
            while controller.state == SessionState.RECORDING:
                await asyncio.sleep(self.pump_interval)
                controller.pump()
                if controller.state != SessionState.RECORDING:
                    break
                if loop.time() >= next_tick:
                    next_tick += self.tick_interval
                    controller.tick()
        except asyncio.CancelledError:
            logger.info("Session runner cancelled, resetting controller")
            controller.reset()
            raise
