"""
Screen wake-lock backends

Both backends keep at most one outstanding acquisition: acquire() while held
and release() while not held are no-ops.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from stillpoint.models.enums import LogCategory, WakeLockBackend
from stillpoint.utils.logger import get_logger

log = get_logger().for_category(LogCategory.WAKELOCK)


class WakeLockUnavailableError(RuntimeError):
    """Platform refused or does not support the wake-lock"""


class NullWakeLock:
    """Wake-lock that only tracks state (platforms without support)."""

    def __init__(self) -> None:
        self._held = False
        self.acquire_count = 0

    @property
    def held(self) -> bool:
        return self._held

    async def acquire(self) -> None:
        if self._held:
            return
        self._held = True
        self.acquire_count += 1
        log.debug("Wake-lock acquired (null backend)")

    async def release(self) -> None:
        if not self._held:
            return
        self._held = False
        log.debug("Wake-lock released (null backend)")


class SystemdInhibitWakeLock:
    """
    Holds an idle/sleep inhibitor through `systemd-inhibit` for as long as a
    child process lives. If the inhibitor dies on its own (killed, logind
    restart) the lock counts as released and the next acquire() takes a new one.
    """

    COMMAND = (
        "systemd-inhibit",
        "--what=idle:sleep",
        "--who=stillpoint",
        "--why=Meditation session in progress",
        "--mode=block",
        "sleep",
        "infinity",
    )

    def __init__(self) -> None:
        self._process: Optional[asyncio.subprocess.Process] = None

    @property
    def held(self) -> bool:
        return self._process is not None and self._process.returncode is None

    async def acquire(self) -> None:
        if self.held:
            return
        try:
            self._process = await asyncio.create_subprocess_exec(
                *self.COMMAND,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except (FileNotFoundError, PermissionError) as e:
            self._process = None
            raise WakeLockUnavailableError(f"systemd-inhibit unavailable: {e}") from e
        log.info("Wake-lock acquired", pid=self._process.pid)

    async def release(self) -> None:
        process = self._process
        self._process = None
        if process is None or process.returncode is not None:
            return
        process.terminate()
        await process.wait()
        log.info("Wake-lock released")


def create_wake_lock(backend: WakeLockBackend):
    if backend is WakeLockBackend.SYSTEMD:
        return SystemdInhibitWakeLock()
    return NullWakeLock()
