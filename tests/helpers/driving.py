"""Drive a controller the way the event loop does, without the loop."""

from __future__ import annotations

from typing import TYPE_CHECKING

from kanban_tui.core.keybindings import Key
from kanban_tui.io_worker import Initialize, InitResult, IoCompletion, IoWorker

if TYPE_CHECKING:
    from kanban_tui.controller import Controller
    from kanban_tui.storage.cloud import CloudClient


def ready(controller: Controller) -> Controller:
    """Run startup and complete Initialize with nothing loaded."""
    controller.startup()
    for request in controller.take_requests():
        assert isinstance(request, Initialize)
        controller.apply_io_completion(IoCompletion(request, value=InitResult(None, None, None)))
    return controller


def press(controller: Controller, *keys: str) -> None:
    for name in keys:
        controller.handle_key(Key.parse(name))


def type_text(controller: Controller, text: str) -> None:
    for char in text:
        controller.handle_key(Key.char(char))


async def drain(
    controller: Controller, cloud: CloudClient | None = None, limit: int = 20
) -> list[IoCompletion]:
    """Run every pending request (and any follow-ups) through a worker, in order."""
    worker = IoWorker(lambda _completion: None, cloud)
    completions: list[IoCompletion] = []
    for _ in range(limit):
        requests = controller.take_requests()
        if not requests:
            break
        for request in requests:
            completion = await worker.run(request)
            completions.append(completion)
            controller.apply_io_completion(completion)
    return completions
