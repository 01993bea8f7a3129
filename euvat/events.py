"""In-process event bus for validation pipeline events.

Two delivery modes, chosen per event loop:
  - queued: ``start_event_system()`` was called on the running loop (the
    FastAPI lifespan does this). Events go on that loop's queue and a
    background worker delivers them, so a slow subscriber never delays a
    validation.
  - inline: no worker owns the running loop, e.g. ``validate_vat_number``
    driven by ``asyncio.run``. Events are delivered before ``emit`` returns,
    because a loop about to close would cancel a worker with events pending.

Usage:
    from euvat.events import emit, subscribe

    subscribe(my_handler)  # async def my_handler(event: SystemEvent) -> None
    await emit(SystemEvent(event_type=EventType.VAT_CACHE_HIT, data={"prefix": "DE"}))
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine, Iterable
from typing import Any

from euvat.schemas.events import EventType, SystemEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[SystemEvent], Coroutine[Any, Any, None]]


class _LoopWorker:
    """Queue and delivery task owned by one event loop."""

    def __init__(self, bus: EventBus) -> None:
        self.queue: asyncio.Queue[SystemEvent] = asyncio.Queue()
        self.task = asyncio.create_task(self._run(bus), name="euvat-event-worker")

    @property
    def alive(self) -> bool:
        return not self.task.done()

    async def _run(self, bus: EventBus) -> None:
        while True:
            event = await self.queue.get()
            try:
                await bus.dispatch(event)
            except Exception:
                logger.exception("Event delivery failed for %s", event.event_type.value)
            finally:
                self.queue.task_done()

    async def drain_and_stop(self) -> None:
        if self.alive:
            await self.queue.join()
            self.task.cancel()
        try:
            await self.task
        except asyncio.CancelledError:
            pass


class EventBus:
    """Subscribers plus at most one worker per running event loop."""

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []
        self._handlers_by_type: dict[EventType, list[EventHandler]] = {}
        self._workers: dict[asyncio.AbstractEventLoop, _LoopWorker] = {}

    def subscribe(self, handler: EventHandler, event_types: Iterable[EventType] | None = None) -> None:
        """Register ``handler`` for ``event_types``, or for every event if None."""
        if event_types is None:
            self._handlers.append(handler)
        else:
            for event_type in event_types:
                self._handlers_by_type.setdefault(event_type, []).append(handler)
        logger.debug("Subscribed %s", handler.__name__)

    def unsubscribe(self, handler: EventHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)
        for handlers in self._handlers_by_type.values():
            if handler in handlers:
                handlers.remove(handler)

    def clear(self) -> None:
        self._handlers.clear()
        self._handlers_by_type.clear()

    def _handlers_for(self, event: SystemEvent) -> list[EventHandler]:
        return [*self._handlers, *self._handlers_by_type.get(event.event_type, [])]

    async def dispatch(self, event: SystemEvent) -> None:
        """Deliver ``event`` to every matching handler; one failure does not stop the rest."""
        handlers = self._handlers_for(event)
        if not handlers:
            return
        results = await asyncio.gather(*(handler(event) for handler in handlers), return_exceptions=True)
        for handler, result in zip(handlers, results):
            if isinstance(result, Exception):
                logger.error("Handler %s failed for %s: %s", handler.__name__, event.event_type.value, result)

    def _worker(self) -> _LoopWorker | None:
        # A worker task keeps its loop alive, so closed loops are dropped here.
        for loop in [loop for loop in self._workers if loop.is_closed()]:
            del self._workers[loop]
        return self._workers.get(asyncio.get_running_loop())

    async def emit(self, event: SystemEvent) -> None:
        worker = self._worker()
        if worker is not None and worker.alive:
            worker.queue.put_nowait(event)
        else:
            await self.dispatch(event)

    async def start(self) -> None:
        """Start queued delivery on the running loop. Idempotent."""
        worker = self._worker()
        if worker is None or not worker.alive:
            self._workers[asyncio.get_running_loop()] = _LoopWorker(self)
            logger.info("Event worker started (%d subscribers)", len(self._handlers))

    async def stop(self) -> None:
        """Deliver what is queued on the running loop, then go back to inline delivery."""
        worker = self._workers.pop(asyncio.get_running_loop(), None)
        if worker is not None:
            await worker.drain_and_stop()
            logger.info("Event worker stopped")


bus = EventBus()

subscribe = bus.subscribe
unsubscribe = bus.unsubscribe
dispatch = bus.dispatch
emit = bus.emit
start_event_system = bus.start
stop_event_system = bus.stop
