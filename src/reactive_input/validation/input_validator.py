"""
Reactive input validation.

This module provides InputValidator, the base class hosts subclass (or wrap a
callback with CallbackValidator) to validate fields. Subclasses implement one
primitive, validate_one; everything else is composed from it and from the
fields' change streams:

- require_then_validate: required-and-empty short-circuit, then validate_one
- validate_all: one threaded round over a pool, joined in pool order
- all_required_filled / empty_required_latest / empty_inputs: live checks
- validate_latest / is_valid_latest: re-validate on every change
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from functools import partial

from PySide6.QtCore import QEventLoop, QObject, QThreadPool, QTimer, Signal

from ..core.config import REQUIRED_ERROR_KEY, VALIDATION_ERROR_KEY, RoundPolicy, ValidatorConfig
from ..core.error_handler import get_error_handler
from ..core.errors import ValidationError, ValidatorFailure
from ..core.localization import Localizer, QtLocalizer
from ..core.notification import NotificationSet, ValidationResult
from ..core.threading import ValidationRound, ValidationTask, create_thread_pool
from ..fields.field import FieldSnapshot
from ..fields.field_state import FieldState
from ..fields.streams import Subscription, combine_latest

logger = logging.getLogger(__name__)


class _LiveRounds:
    """Ids of rounds started on behalf of one live subscription."""

    def __init__(self, policy: RoundPolicy, lookup: Callable[[int], ValidationRound | None]):
        self.policy = policy
        self.active: set[int] = set()
        self.closed = False
        self._lookup = lookup

    def track(self, validation_round: ValidationRound) -> None:
        if self.policy is RoundPolicy.RESTART:
            self.cancel_all()
        round_id = validation_round.round_id
        self.active.add(round_id)
        validation_round.released.connect(lambda: self.active.discard(round_id))

    def cancel_all(self) -> None:
        for round_id in list(self.active):
            validation_round = self._lookup(round_id)
            if validation_round is not None:
                validation_round.cancel()

    def close(self) -> None:
        self.closed = True
        self.cancel_all()


class InputValidator(QObject):
    """
    Base class for validating tracked fields.

    Subclasses implement validate_one. It receives immutable snapshots and
    always runs on a thread pool worker when called from a round, so it may
    block (for example on I/O).

    Signals:
        roundStarted(int): a validation round was dispatched
        roundFinished(int, NotificationSet): a round joined
        resultReady(ValidationResult): one result of a live round, in pool order
    """

    roundStarted = Signal(int)
    roundFinished = Signal(int, object)
    resultReady = Signal(object)

    def __init__(
        self,
        config: ValidatorConfig | None = None,
        localizer: Localizer | None = None,
        thread_pool: QThreadPool | None = None,
        parent: QObject | None = None,
    ):
        super().__init__(parent)
        self._config = config or ValidatorConfig()
        self._localizer = localizer or QtLocalizer(self._config.messages)
        self._thread_pool = thread_pool or create_thread_pool(self._config.max_thread_count, self)
        self._error_handler = get_error_handler()
        self._round_counter = 0
        self._rounds: dict[int, ValidationRound] = {}

    @property
    def config(self) -> ValidatorConfig:
        return self._config

    @property
    def thread_pool(self) -> QThreadPool:
        return self._thread_pool

    def active_rounds(self) -> list[int]:
        """Ids of rounds that still have workers outstanding."""
        return sorted(self._rounds)

    def required_error(self) -> str:
        """Localized text reported for required fields left empty."""
        return self._localizer(REQUIRED_ERROR_KEY)

    def validate_one(self, target: FieldSnapshot, pool: Sequence[FieldSnapshot]) -> ValidationResult:
        """
        Validate one field against the whole pool.

        Args:
            target: Snapshot of the field to validate
            pool: Snapshots of every field in the round, target included

        Returns:
            ValidationResult for target; an empty error means valid

        Raises:
            ValidationError: To report a failure with its user_message
        """
        raise NotImplementedError

    def require_then_validate(self, target: FieldSnapshot, pool: Sequence[FieldSnapshot]) -> ValidationResult:
        """
        Check required-ness first, then delegate to validate_one.

        A required field that is empty fails with the required error without
        validate_one ever being called. Exceptions from validate_one, and
        return values that are not a ValidationResult, are turned into a failed
        result and never propagate.
        """
        required = self._required_result(target)
        if required is not None:
            return required

        try:
            result = self.validate_one(target, pool)
            if not isinstance(result, ValidationResult):
                raise ValidatorFailure(
                    self._localizer(VALIDATION_ERROR_KEY),
                    technical_message=f"validate_one returned {type(result).__name__}, expected ValidationResult",
                )
            return result
        except ValidationError as e:
            return ValidationResult.failure(target, e.user_message)
        except Exception as e:
            self._error_handler.handle(e, {"field": target.identifier, "value": target.content})
            message = str(e) or self._localizer(VALIDATION_ERROR_KEY)
            return ValidationResult.failure(target, message)

    def validate_all(
        self,
        pool: Sequence[FieldState | FieldSnapshot],
        slot: Callable[[NotificationSet], None] | None = None,
    ) -> ValidationRound:
        """
        Validate every field of the pool concurrently.

        The returned round emits finished(NotificationSet) once, after every
        field has been validated. Results are in pool order regardless of the
        order validations complete in. Delivery goes through the event loop of
        the calling thread.

        Args:
            pool: Fields (or snapshots) to validate
            slot: Optional callable connected to the round's finished signal

        Returns:
            The dispatched ValidationRound
        """
        snapshots = tuple(_snapshot_of(item) for item in pool)
        return self._start_round(snapshots, slot)

    def validate_all_blocking(
        self,
        pool: Sequence[FieldState | FieldSnapshot],
        timeout_ms: int = 30_000,
    ) -> NotificationSet:
        """
        Run validate_all and wait for it with a local event loop.

        Args:
            pool: Fields (or snapshots) to validate
            timeout_ms: Maximum time to wait

        Returns:
            The joined NotificationSet

        Raises:
            TimeoutError: If the round does not join within timeout_ms
        """
        loop = QEventLoop()
        timer = QTimer()
        timer.setSingleShot(True)
        timer.timeout.connect(loop.quit)
        joined: list[NotificationSet] = []

        def on_finished(notification: NotificationSet) -> None:
            joined.append(notification)
            loop.quit()

        validation_round = self.validate_all(pool, on_finished)
        timer.start(timeout_ms)
        loop.exec()
        timer.stop()

        if not joined:
            validation_round.cancel()
            raise TimeoutError(f"Validation round {validation_round.round_id} did not finish in {timeout_ms}ms")
        return joined[0]

    def all_required_filled(
        self,
        pool: Sequence[FieldState],
        slot: Callable[[bool], None],
    ) -> Subscription:
        """
        Watch whether every required field has content.

        slot receives True when no required field is empty, False otherwise,
        right away and after every change of any field in the pool.
        """
        return combine_latest(pool, lambda row: slot(not any(s.is_required and s.is_empty for s in row)))

    def empty_required_latest(
        self,
        pool: Sequence[FieldState],
        slot: Callable[[FieldSnapshot], None],
    ) -> Subscription:
        """
        Report required fields that are currently empty.

        After every change of any field, slot is called once per required
        field that is empty at that moment (possibly zero times).
        """

        def emit(row: tuple[FieldSnapshot, ...]) -> None:
            for snapshot in row:
                if snapshot.is_required and snapshot.is_empty:
                    slot(snapshot)

        return combine_latest(pool, emit)

    def empty_inputs(
        self,
        pool: Sequence[FieldState],
        slot: Callable[[FieldSnapshot], None],
    ) -> Subscription:
        """Like empty_required_latest, but reports every empty field."""

        def emit(row: tuple[FieldSnapshot, ...]) -> None:
            for snapshot in row:
                if snapshot.is_empty:
                    slot(snapshot)

        return combine_latest(pool, emit)

    def validate_latest(
        self,
        pool: Sequence[FieldState],
        slot: Callable[[ValidationResult], None],
    ) -> Subscription:
        """
        Re-validate the pool whenever any field changes.

        Each change starts a new round over the latest snapshots. When a round
        joins, slot is called once per result, in pool order. Results are not
        batched; consumers that need an aggregate collect them per round (see
        roundFinished). Overlapping rounds follow the configured RoundPolicy.
        Disposing the subscription cancels its in-flight rounds.
        """

        def emit(notification: NotificationSet) -> None:
            for result in notification:
                self.resultReady.emit(result)
                slot(result)

        return self._latest_rounds(pool, emit)

    def is_valid_latest(
        self,
        pool: Sequence[FieldState],
        slot: Callable[[bool], None],
    ) -> Subscription:
        """Call slot with the overall validity of every round validate_latest would run."""
        return self._latest_rounds(pool, lambda notification: slot(not notification.has_errors))

    def cancel_all_rounds(self) -> None:
        """Cancel every round that has not joined yet."""
        for validation_round in list(self._rounds.values()):
            validation_round.cancel()

    def _latest_rounds(
        self,
        pool: Sequence[FieldState],
        on_joined: Callable[[NotificationSet], None],
    ) -> Subscription:
        live = _LiveRounds(self._config.round_policy, self._rounds.get)

        def on_row(row: tuple[FieldSnapshot, ...]) -> None:
            if live.closed:
                return
            live.track(self._start_round(row, on_joined))

        subscription = combine_latest(pool, on_row)
        subscription.on_dispose(live.close)
        return subscription

    def _required_result(self, target: FieldSnapshot) -> ValidationResult | None:
        if target.is_required and target.is_empty:
            return ValidationResult.failure(target, self.required_error())
        return None

    def _start_round(
        self,
        snapshots: tuple[FieldSnapshot, ...],
        slot: Callable[[NotificationSet], None] | None,
    ) -> ValidationRound:
        self._round_counter += 1
        round_id = self._round_counter
        validation_round = ValidationRound(round_id)

        items: list[ValidationResult | ValidationTask] = []
        for snapshot in snapshots:
            required = self._required_result(snapshot)
            items.append(required if required is not None else partial(self.require_then_validate, snapshot, snapshots))

        validation_round.finished.connect(lambda notification: self.roundFinished.emit(round_id, notification))
        if slot is not None:
            validation_round.finished.connect(slot)
        validation_round.released.connect(lambda: self._release_round(round_id))

        self._rounds[round_id] = validation_round
        logger.debug(f"Starting validation round {round_id} over {len(snapshots)} fields")
        self.roundStarted.emit(round_id)
        generic_error = self._localizer(VALIDATION_ERROR_KEY)
        fallbacks = [ValidationResult.failure(snapshot, generic_error) for snapshot in snapshots]
        validation_round.start(items, self._thread_pool, fallbacks)
        return validation_round

    def _release_round(self, round_id: int) -> None:
        # Drop our reference outside the round's own signal dispatch
        QTimer.singleShot(0, lambda: self._rounds.pop(round_id, None))


def _snapshot_of(item: FieldState | FieldSnapshot) -> FieldSnapshot:
    if isinstance(item, FieldSnapshot):
        return item
    return item.snapshot()
