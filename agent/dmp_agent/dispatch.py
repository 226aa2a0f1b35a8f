"""
SerialQueue — the single execution context that owns all agent state.

One daemon worker drains a queue.Queue of jobs in submission order, so
buffer, session and config mutations never interleave. Callers get a
concurrent.futures.Future per job. Network I/O must never run here.

deliver() hands a finished future to a completion callback on the
caller-facing callback executor.
"""

import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor

from .config import log
from .state import Result


class SerialQueue:
    """Runs submitted callables one at a time on a dedicated worker thread."""

    def __init__(self, name="dmp-serial"):
        self._queue = queue.Queue()
        self._lock = threading.Lock()
        self._stopped = False
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    def submit(self, fn, *args, **kwargs) -> Future:
        """Enqueue fn; never blocks. The returned future carries its result."""
        future = Future()
        with self._lock:
            if self._stopped:
                future.set_exception(RuntimeError("serial queue is shut down"))
                return future
            self._queue.put((future, fn, args, kwargs))
        return future

    def on_worker(self) -> bool:
        return threading.current_thread() is self._thread

    def join(self):
        """Block until every job submitted so far has run."""
        self._queue.join()

    def shutdown(self, wait=True):
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            self._queue.put(None)
        if wait and not self.on_worker():
            self._thread.join()

    def _run(self):
        while True:
            item = self._queue.get()
            try:
                if item is None:
                    return
                future, fn, args, kwargs = item
                if not future.set_running_or_notify_cancel():
                    continue
                try:
                    result = fn(*args, **kwargs)
                except Exception as e:
                    log.debug("Serial job %s failed: %r", getattr(fn, "__name__", fn), e)
                    future.set_exception(e)
                else:
                    future.set_result(result)
            finally:
                self._queue.task_done()


def create_callback_executor():
    """Default caller-facing context: one thread, so completions arrive in order."""
    return ThreadPoolExecutor(max_workers=1, thread_name_prefix="dmp-callbacks")


def _invoke(completion, result):
    try:
        completion(result)
    except Exception as e:
        log.error("Completion handler raised: %s", e, exc_info=True)


def deliver(future, completion, executor):
    """
    Post exactly one Result for future to completion on executor.
    With no completion the outcome is only logged.
    """
    def _done(f):
        result = Result.from_future(f)
        if completion is None:
            if result.is_failure:
                log.info("Request finished without handler: %s", result.error)
            return
        try:
            executor.submit(_invoke, completion, result)
        except RuntimeError as e:
            log.warning("Completion dropped, callback context is shut down: %s", e)

    future.add_done_callback(_done)
    return future
