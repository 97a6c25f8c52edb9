"""Background threads that remember why they died."""

import threading
from collections.abc import Callable, Iterable


class Worker(threading.Thread):
    """
    Daemon thread that records an exception raised by its target.

    threading.Thread only reports uncaught exceptions through
    threading.excepthook; the session owner needs them back at join time
    so they can be surfaced from stop().

    Attributes:
        error: Exception raised by the target, or None
    """

    def __init__(self, target: Callable[[], None], name: str) -> None:
        super().__init__(target=target, name=name, daemon=True)
        self.error: Exception | None = None

    def run(self) -> None:
        try:
            super().run()
        except Exception as e:
            self.error = e


def join_workers(workers: Iterable[Worker]) -> list[str]:
    """
    Join every worker and describe the ones that failed.

    Args:
        workers: Started workers to join

    Returns:
        "<thread name>: <error>" for each failed worker, in join order
    """
    failures = []
    for worker in workers:
        worker.join()
        if worker.error is not None:
            failures.append(f"{worker.name}: {worker.error!r}")
    return failures
