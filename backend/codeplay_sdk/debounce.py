import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, Hashable, Optional, Set

logger = logging.getLogger(__name__)

DEFAULT_AUTO_SAVE_DELAY = 2.0


class KeyedDebouncer:
    """
    One pending timer per key on the asyncio event loop.
    Scheduling a key again restarts its timer; the callback runs once the key
    has been quiet for ``delay`` seconds. Coroutine callbacks are run as tasks.
    """

    def __init__(self, delay: float = DEFAULT_AUTO_SAVE_DELAY, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.delay = delay
        self._loop = loop
        self._handles: Dict[Hashable, asyncio.TimerHandle] = {}
        self._tasks: Set[asyncio.Task] = set()

    def _get_loop(self) -> Optional[asyncio.AbstractEventLoop]:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            return None

    def schedule(self, key: Hashable, callback: Callable[[], Any]) -> bool:
        loop = self._get_loop()
        if loop is None:
            logger.debug("No running event loop; debounce for %r not scheduled", key)
            return False
        self.cancel(key)
        self._handles[key] = loop.call_later(self.delay, self._fire, key, callback)
        return True

    def _fire(self, key: Hashable, callback: Callable[[], Any]) -> None:
        self._handles.pop(key, None)
        try:
            result = callback()
        except Exception:
            logger.exception("Debounced callback for %r failed", key)
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Debounced task failed: %s", exc, exc_info=exc)

    def cancel(self, key: Hashable) -> bool:
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> None:
        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()

    def is_pending(self, key: Hashable) -> bool:
        return key in self._handles

    @property
    def pending_keys(self):
        return list(self._handles.keys())

    async def drain(self) -> None:
        """Wait for callbacks that already fired and are still running."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
