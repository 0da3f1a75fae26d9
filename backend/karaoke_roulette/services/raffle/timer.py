"""Round countdown.

The timer itself never sleeps: it asks an injected scheduler for a recurring
callback and reacts to each tick. Production uses the Socket.IO background
task machinery; tests drive a virtual clock.
"""

import logging
import threading
from enum import Enum
from typing import Callable, Optional


class TimerState(str, Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    STOPPED = 'stopped'
    EXPIRED = 'expired'


class _RepeatingTask:
    def __init__(self):
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class SocketIOScheduler:
    """Recurring callbacks on top of ``socketio.start_background_task``.

    Works with whichever async mode the Socket.IO server picked (threading,
    eventlet, gevent) because sleeping goes through ``socketio.sleep``.
    """

    def __init__(self, socketio):
        self._socketio = socketio

    def call_every(self, interval: float, callback: Callable[[], None]) -> _RepeatingTask:
        task = _RepeatingTask()

        def _runner():
            while True:
                self._socketio.sleep(interval)
                if task.cancelled:
                    return
                callback()

        self._socketio.start_background_task(_runner)
        return task


class RoundTimer:
    """Single countdown with ``idle -> running -> expired`` and ``running -> stopped``.

    - ``start`` re-arms the full duration from any state and cancels the
      previous schedule, so at most one tick source is alive.
    - Each tick takes one second off; reaching 0 expires the round and
      cancels the schedule. ``remaining`` never goes negative.
    - ``stop`` only acts on a running timer and keeps ``remaining`` as is.
    - Ticks from a cancelled schedule are dropped by generation.

    ``on_change(event, timer)`` is called with ``'tick'`` or ``'expired'``.
    """

    def __init__(self, scheduler, tick_interval: float = 1.0, on_change: Optional[Callable] = None,
                 lock=None, logger: Optional[logging.Logger] = None):
        self._scheduler = scheduler
        self._tick_interval = tick_interval
        self._on_change = on_change
        self._lock = lock or threading.RLock()
        self._logger = logger or logging.getLogger(__name__)
        self._task = None
        self._generation = 0
        self.duration = 0
        self.remaining = 0
        self.state = TimerState.IDLE

    @property
    def running(self) -> bool:
        return self.state is TimerState.RUNNING

    def start(self, duration: int) -> None:
        with self._lock:
            self._cancel_task()
            self.duration = int(duration)
            self.remaining = int(duration)
            self.state = TimerState.RUNNING
            generation = self._generation
            self._task = self._scheduler.call_every(self._tick_interval, lambda: self._tick(generation))
            self._logger.info(f"[timer-set] duration={self.duration}s")

    def stop(self) -> bool:
        with self._lock:
            if self.state is not TimerState.RUNNING:
                return False
            self._cancel_task()
            self.state = TimerState.STOPPED
            self._logger.info(f"[timer-stop] remaining={self.remaining}s")
            return True

    def reset(self) -> None:
        with self._lock:
            self._cancel_task()
            self.remaining = 0
            self.state = TimerState.IDLE

    def _tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self.state is not TimerState.RUNNING:
                return
            self.remaining = max(0, self.remaining - 1)
            if self.remaining == 0:
                self._cancel_task()
                self.state = TimerState.EXPIRED
                self._logger.info("[timer-expire] time's up")
                self._emit('expired')
                return
            self._emit('tick')

    def _cancel_task(self) -> None:
        self._generation += 1
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _emit(self, event: str) -> None:
        if self._on_change is not None:
            self._on_change(event, self)

    def to_dict(self):
        return {
            'remaining': self.remaining,
            'running': self.running,
            'state': self.state.value,
            'duration': self.duration,
        }
