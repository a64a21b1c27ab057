"""Single-threaded event loop driving the controller.

Input, ticks and IO completions share one queue, so they are applied strictly in
arrival order and only ever from this loop's task.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from kanban_tui.io_worker import IoWorker

if TYPE_CHECKING:
    from collections.abc import Callable

    from kanban_tui.controller import Controller
    from kanban_tui.core.keybindings import Key
    from kanban_tui.core.mouse import MouseEvent
    from kanban_tui.io_worker import IoCompletion
    from kanban_tui.storage.cloud import CloudClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class KeyPressed:
    key: Key


@dataclass(frozen=True, slots=True)
class MouseInput:
    event: MouseEvent


@dataclass(frozen=True, slots=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True, slots=True)
class MouseLeft:
    pass


@dataclass(frozen=True, slots=True)
class Tick:
    at: float


@dataclass(frozen=True, slots=True)
class IoFinished:
    completion: IoCompletion


type LoopEvent = KeyPressed | MouseInput | Resized | MouseLeft | Tick | IoFinished


class EventLoop:
    def __init__(
        self,
        controller: Controller,
        *,
        cloud: CloudClient | None = None,
        on_frame: Callable[[Controller], None] | None = None,
    ) -> None:
        self.controller = controller
        self.worker = IoWorker(self._post_completion, cloud)
        self._on_frame = on_frame
        self._queue: asyncio.Queue[LoopEvent] = asyncio.Queue()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def post(self, event: LoopEvent) -> None:
        """Enqueue an event; safe to call from the loop's thread only."""
        self._queue.put_nowait(event)

    def _post_completion(self, completion: IoCompletion) -> None:
        self.post(IoFinished(completion))

    @property
    def tick_interval(self) -> float:
        return self.controller.config.tickrate / 1000

    def dispatch(self, event: LoopEvent) -> None:
        controller = self.controller
        match event:
            case KeyPressed(key):
                controller.handle_key(key)
            case MouseInput(mouse):
                controller.handle_mouse(mouse)
            case Resized(width, height):
                controller.resize(width, height)
            case MouseLeft():
                controller.handle_mouse_leave()
            case Tick(at):
                controller.handle_tick(at)
            case IoFinished(completion):
                controller.apply_io_completion(completion)

    def flush_requests(self) -> None:
        for request in self.controller.take_requests():
            if not self.worker.submit(request):
                self.controller.request_dropped(request)

    def render(self) -> None:
        if self._on_frame is not None:
            self._on_frame(self.controller)

    async def run(self) -> None:
        """Run until the controller asks to quit, then drain the IO worker."""
        clock = self.controller.clock
        self._running = True
        self.worker.start()
        self.controller.startup()
        self.flush_requests()
        self.render()
        next_tick = clock() + self.tick_interval
        try:
            while not self.controller.should_quit:
                timeout = max(0.0, next_tick - clock())
                try:
                    event: LoopEvent = await asyncio.wait_for(self._queue.get(), timeout=timeout)
                except TimeoutError:
                    event = Tick(clock())
                self.dispatch(event)
                # A due tick still fires under continuous input
                if not isinstance(event, Tick) and clock() >= next_tick:
                    self.dispatch(Tick(clock()))
                if clock() >= next_tick:
                    next_tick = clock() + self.tick_interval
                self.flush_requests()
                self.render()
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        self.flush_requests()
        await self.worker.stop()
        while not self._queue.empty():
            event = self._queue.get_nowait()
            if isinstance(event, IoFinished):
                self.controller.apply_io_completion(event.completion)
        self._running = False
        logger.info("Event loop stopped")
