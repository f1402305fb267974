import logging
import time


logger = logging.getLogger(__name__)


class ScheduledTask:
    """A delayed, cancellable callback owned by a room.

    The task sleeps without holding any room lock. The callback receives the
    task itself first, re-acquires what it needs and must tolerate the room
    being gone.
    """

    def __init__(self, name, delay, callback, *args):
        self.name = name
        self.delay = delay
        self.callback = callback
        self.args = args
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def run(self, sleep) -> None:
        if self.delay and self.delay > 0:
            sleep(self.delay)
        if self._cancelled:
            logger.info(f"[timer-abort] task={self.name} cancelled")
            return
        logger.info(f"[timer-fire] task={self.name}")
        self.callback(self, *self.args)


class TaskScheduler:
    """Starts scheduled tasks.

    With a ``spawn`` function (``socketio.start_background_task`` in the
    server) each task runs on its own green thread or thread. Without one the
    task runs inline in the caller, which keeps tests deterministic.
    """

    def __init__(self, spawn=None, sleep=time.sleep):
        self._spawn = spawn
        self._sleep = sleep

    def start(self, task: ScheduledTask) -> None:
        logger.info(f"[timer-set] task={task.name} delay={task.delay}s")
        if self._spawn is None:
            task.run(self._sleep)
        else:
            self._spawn(task.run, self._sleep)
