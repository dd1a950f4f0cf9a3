from collections import defaultdict
from typing import Any, Callable, Optional
import asyncio, logging

from meower.utils import full_stack, log


Handler = Callable[..., Any]


class EventEmitter:
    """
    Minimal event emitter.

    Handlers run inline, in registration order, when an event is emitted. Coroutine handlers
    are scheduled as their own tasks so they never hold up the emitter.
    """

    # alias -> canonical event name
    aliases: dict[str, str] = {}

    def __init__(self):
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._tasks: set[asyncio.Task] = set()

    def _event_name(self, event: str) -> str:
        return self.aliases.get(event, event)

    def on(self, event: str, handler: Optional[Handler] = None):
        """Register a handler. Usable directly or as a decorator."""

        def decorator(func: Handler) -> Handler:
            self._handlers[self._event_name(event)].append(func)
            return func

        if handler is not None:
            return decorator(handler)
        return decorator

    def off(self, event: str, handler: Handler):
        handlers = self._handlers.get(self._event_name(event), [])
        if handler in handlers:
            handlers.remove(handler)

    def once(self, event: str, handler: Handler) -> Handler:
        def wrapper(*args):
            self.off(event, wrapper)
            return handler(*args)

        self.on(event, wrapper)
        return wrapper

    def wait_for(self, event: str) -> asyncio.Future:
        """Get a future that resolves with the payload of the next emission of an event."""

        future = asyncio.get_running_loop().create_future()

        def resolve(*args):
            if not future.done():
                future.set_result(args[0] if len(args) == 1 else args)

        self.once(event, resolve)
        return future

    def emit(self, event: str, *args):
        event = self._event_name(event)
        for handler in list(self._handlers.get(event, [])):
            try:
                result = handler(*args)
                if asyncio.iscoroutine(result):
                    task = asyncio.ensure_future(result)
                    self._tasks.add(task)
                    task.add_done_callback(self._task_done)
            except Exception:
                log(f"Handler for '{event}' raised:\n{full_stack()}", logging.ERROR)

    def _task_done(self, task: asyncio.Task):
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            log(f"Handler task raised: {task.exception()!r}", logging.ERROR)
