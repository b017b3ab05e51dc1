"""Thread-safe command queue feeding the event loop.

The MQTT network thread produces commands; a single consumer task on the
event loop (the engine thread) hands them to the dispatcher one at a time,
in the order they were pushed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from phone_mqtt.broker.message import Command

logger = logging.getLogger(__name__)

CommandHandler = Callable[[Command], Awaitable[None]]


class CommandQueue:
    def __init__(
        self,
        handler: CommandHandler,
        *,
        loop: asyncio.AbstractEventLoop,
        maxsize: int = 64,
    ) -> None:
        if maxsize < 1:
            raise ValueError(f"command queue size must be positive, got {maxsize}")
        self._handler = handler
        self._loop = loop
        self._queue: asyncio.Queue[Command] = asyncio.Queue(maxsize)
        self._task: asyncio.Task[None] | None = None

    def push(self, command: Command) -> None:
        """Enqueue ``command`` from any thread.  Never blocks or raises."""
        try:
            self._loop.call_soon_threadsafe(self._put, command)
        except RuntimeError:
            logger.error("Event loop closed, dropping %s", command.kind)

    def _put(self, command: Command) -> None:
        try:
            self._queue.put_nowait(command)
        except asyncio.QueueFull:
            logger.error(
                "Command queue full (%d), dropping %s",
                self._queue.maxsize,
                command.kind,
            )

    async def run(self) -> None:
        """Consume commands until cancelled."""
        while True:
            command = await self._queue.get()
            try:
                await self._handler(command)
            except Exception:
                logger.exception("Handling %s failed", command.kind)
            finally:
                self._queue.task_done()

    def start(self) -> None:
        if self._task is None:
            self._task = self._loop.create_task(self.run())

    async def join(self) -> None:
        await self._queue.join()

    async def close(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
