"""
Session host: runs one GameSession and its camera on a private asyncio loop.

The loop lives in a daemon thread so synchronous front ends (Flask handlers, the
terminal client) can submit events with dispatch()/snapshot(). A frame ticker on
the same loop steps the camera model at the configured frame rate; it only reads
the session's cursor and never waits on opponent requests.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .camera import CameraFocusModel, CameraMode, Vec3
from .config import SETTINGS
from .session import GameSession, ResetSession
from .squares import world_position

log = logging.getLogger("SessionHost")


@dataclass(frozen=True)
class SetCameraMode:
    mode: CameraMode


@dataclass(frozen=True)
class OrbitCamera:
    target: Optional[Vec3] = None
    position: Optional[Vec3] = None


class SessionHost:
    def __init__(self, session: GameSession, camera: CameraFocusModel | None = None, frame_rate: float | None = None, call_timeout_s: float = 10.0):
        self.session = session
        self.camera = camera or CameraFocusModel()
        self.frame_rate = frame_rate or SETTINGS.frame_rate
        self.call_timeout_s = call_timeout_s
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._ticker: Optional[asyncio.Task] = None

    # ---------------- Lifecycle -----------------
    def start(self) -> "SessionHost":
        if self._thread is not None:
            return self
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_loop, name="session-loop", daemon=True)
        self._thread.start()
        self.call(self._boot)
        log.info("Session host started (%.0f fps camera)", self.frame_rate)
        return self

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def _boot(self) -> None:
        self.session.reset()
        self.camera.reset_for_side(self.session.player_side)
        self._ticker = asyncio.get_running_loop().create_task(self._frames(), name="camera-frames")

    async def _frames(self) -> None:
        loop = asyncio.get_running_loop()
        period = 1.0 / self.frame_rate
        last = loop.time()
        while True:
            await asyncio.sleep(period)
            now = loop.time()
            try:
                self.camera.step(now - last, Vec3(*world_position(self.session.cursor)))
            except Exception:
                log.exception("Camera step failed; skipping frame")
            last = now

    def stop(self) -> None:
        if self._thread is None or self.loop is None:
            return
        fut = asyncio.run_coroutine_threadsafe(self._shutdown(), self.loop)
        try:
            fut.result(self.call_timeout_s)
        finally:
            self.loop.call_soon_threadsafe(self.loop.stop)
            self._thread.join(self.call_timeout_s)
            self.loop.close()
            self._thread = None
            self.loop = None
        log.info("Session host stopped")

    async def _shutdown(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            await asyncio.gather(self._ticker, return_exceptions=True)
        await self.session.close()

    # ---------------- Cross-thread calls -----------------
    def call(self, fn: Callable[..., Any], *args) -> Any:
        """Run fn(*args) on the session loop and return its result."""
        if self.loop is None:
            raise RuntimeError("SessionHost is not started")

        async def _invoke():
            return fn(*args)

        return asyncio.run_coroutine_threadsafe(_invoke(), self.loop).result(self.call_timeout_s)

    def dispatch(self, event) -> dict:
        return self.call(self._apply, event)

    def snapshot(self) -> dict:
        return self.call(self._snapshot)

    def _apply(self, event) -> dict:
        if isinstance(event, SetCameraMode):
            self.camera.set_mode(event.mode)
        elif isinstance(event, OrbitCamera):
            self.camera.orbit(event.target, event.position)
        else:
            self.session.dispatch(event)
            if isinstance(event, ResetSession):
                self.camera.reset_for_side(self.session.player_side)
        return self._snapshot()

    def _snapshot(self) -> dict:
        return {"session": self.session.view().to_dict(), "camera": self.camera.to_dict()}
