"""
Threaded validation rounds.

A round validates every field of a pool once. Per-field work runs on a
QThreadPool; results travel back as queued signals into the ValidationRound,
which lives on the thread that started it and joins them in pool order.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from enum import Enum, auto

from PySide6.QtCore import QObject, QRunnable, QThreadPool, QTimer, Signal, Slot

from .config import DEFAULT_MESSAGES, VALIDATION_ERROR_KEY
from .notification import NotificationSet, ValidationResult

logger = logging.getLogger(__name__)

ValidationTask = Callable[[], ValidationResult]


class RoundState(Enum):
    """Lifecycle of one validation round."""

    IDLE = auto()  # Created, nothing dispatched
    DISPATCHING = auto()  # Waiting for pending per-field results
    JOINED = auto()  # All results in, NotificationSet emitted
    CANCELLED = auto()  # Superseded or disposed, will never emit


class _WorkerSignals(QObject):
    """Signals for ValidationWorker (QRunnable cannot own signals)."""

    # index, ValidationResult or None when skipped after cancellation
    resultReady = Signal(int, object)


class ValidationWorker(QRunnable):
    """
    Runs one per-field validation task on a thread pool.

    Exactly one resultReady is emitted per worker, carrying None when the
    round was cancelled before the task got to run.
    """

    def __init__(self, index: int, task: ValidationTask, cancel_event: threading.Event):
        super().__init__()
        self.signals = _WorkerSignals()
        self._index = index
        self._task: ValidationTask | None = task
        self._cancel_event = cancel_event

    def run(self) -> None:
        # The task must be released before reporting so the last reference to
        # the validator behind it is never dropped on a pool thread.
        task, self._task = self._task, None
        result: ValidationResult | None = None

        try:
            if task is not None and not self._cancel_event.is_set():
                result = task()
        except Exception:
            # Tasks convert validator failures into results; anything
            # reaching here is a bug in the task itself.
            logger.exception("Validation task raised")
        finally:
            del task
            self.signals.resultReady.emit(self._index, result)


class ValidationRound(QObject):
    """
    One dispatch-and-join pass over a pool of fields.

    Signals:
        finished(NotificationSet): all results joined, in pool order
        released(): every dispatched worker has reported; safe to drop
    """

    finished = Signal(object)  # NotificationSet
    released = Signal()

    def __init__(self, round_id: int, parent: QObject | None = None):
        super().__init__(parent)
        self.round_id = round_id
        self.state = RoundState.IDLE
        self._results: list[ValidationResult | None] = []
        self._fallbacks: list[ValidationResult] = []
        self._pending = 0
        self._outstanding = 0
        self._cancel_event = threading.Event()
        self.setObjectName(f"ValidationRound-{round_id}")

    @property
    def pending(self) -> int:
        """Number of per-field results not yet joined."""
        return self._pending

    def start(
        self,
        items: Sequence[ValidationResult | ValidationTask],
        thread_pool: QThreadPool,
        fallbacks: Sequence[ValidationResult] | None = None,
    ) -> None:
        """
        Dispatch a round.

        Args:
            items: One entry per field in pool order. A ValidationResult is
                already settled; a callable is run on the thread pool.
            thread_pool: Pool to run tasks on
            fallbacks: Failed results, one per item, joined in place of tasks
                that report no ValidationResult. Defaults to a generic
                validation error keyed by position.
        """
        if self.state is not RoundState.IDLE:
            raise RuntimeError(f"Round {self.round_id} was already started")
        if fallbacks is not None and len(fallbacks) != len(items):
            raise ValueError(f"Round {self.round_id} needs one fallback per item")

        self.state = RoundState.DISPATCHING
        self._results = [None] * len(items)
        self._fallbacks = list(fallbacks) if fallbacks is not None else [
            ValidationResult(f"#{index}", "", DEFAULT_MESSAGES[VALIDATION_ERROR_KEY]) for index in range(len(items))
        ]

        tasks: list[tuple[int, ValidationTask]] = []
        for index, item in enumerate(items):
            if isinstance(item, ValidationResult):
                self._results[index] = item
            else:
                tasks.append((index, item))

        self._pending = len(tasks)
        self._outstanding = len(tasks)
        logger.debug(f"Round {self.round_id}: {len(items)} fields, {len(tasks)} dispatched")

        if not tasks:
            # Defer so callers can connect to finished after start() returns
            QTimer.singleShot(0, self._join)
            return

        for index, task in tasks:
            worker = ValidationWorker(index, task, self._cancel_event)
            worker.signals.resultReady.connect(self._on_result)
            thread_pool.start(worker)

    def cancel(self) -> None:
        """
        Cancel the round.

        Workers that have not started skip their task. Running tasks finish
        but their results are dropped and finished is never emitted.
        """
        if self.state in (RoundState.JOINED, RoundState.CANCELLED):
            return
        self.state = RoundState.CANCELLED
        self._cancel_event.set()
        logger.debug(f"Round {self.round_id} cancelled with {self._pending} pending")
        if self._outstanding == 0:
            self.released.emit()

    @Slot(int, object)
    def _on_result(self, index: int, result: object) -> None:
        self._outstanding -= 1

        if self.state is RoundState.DISPATCHING:
            if isinstance(result, ValidationResult):
                self._results[index] = result
            self._pending -= 1
            if self._pending == 0:
                self._join()
        elif self._outstanding == 0:
            # Cancelled round: the last straggler reported
            self.released.emit()

    @Slot()
    def _join(self) -> None:
        if self.state is not RoundState.DISPATCHING:
            return

        missing = [index for index, result in enumerate(self._results) if result is None]
        if missing:
            logger.warning(f"Round {self.round_id} joined without results for positions {missing}")
            for index in missing:
                self._results[index] = self._fallbacks[index]

        self.state = RoundState.JOINED
        notification = NotificationSet.build(self._results)
        logger.debug(f"Round {self.round_id} joined ({len(notification)} results)")
        self.finished.emit(notification)
        self.released.emit()


def create_thread_pool(max_thread_count: int, parent: QObject | None = None) -> QThreadPool:
    """
    Get the thread pool validators should run on.

    Args:
        max_thread_count: Positive value creates a dedicated pool with that
            many threads; 0 returns the global pool untouched
        parent: Parent for a dedicated pool

    Returns:
        QThreadPool instance
    """
    if max_thread_count > 0:
        pool = QThreadPool(parent)
        pool.setMaxThreadCount(max_thread_count)
        return pool
    return QThreadPool.globalInstance()
