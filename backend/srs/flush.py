"""Debounced persistence of session answers.

Answer bursts are coalesced into infrequent writes: a flush fires once
answering pauses for the debounce interval, and never later than the
max-wait ceiling after the first unsaved answer.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any

from backend.config import settings
from backend.srs.cards import Card
from backend.srs.errors import PersistenceError
from backend.srs.session import Session, SessionEngine

logger = logging.getLogger(__name__)

AnswerPersister = Callable[[list[Card]], Awaitable[None]]
ErrorReporter = Callable[[str, Any], None]


def log_error_reporter(context: str, detail: Any) -> None:
    """Report an error by logging it."""
    logger.error("%s: %s", context, detail)


class FlushScheduler:
    """Runs ``flush`` after a quiet period, with an upper bound on delay.

    Two timers drive it: a debounce timer restarted by every signal, and a
    max-wait timer started by the first signal after a flush. Whichever
    fires first starts the flush and cancels the other. At most one flush
    runs at a time; a timer that fires meanwhile defers a single follow-up
    flush until the running one completes.
    """

    def __init__(
        self,
        flush: Callable[[], Awaitable[None]],
        debounce: float | None = None,
        max_wait: float | None = None,
        reporter: ErrorReporter = log_error_reporter,
    ) -> None:
        self._flush = flush
        self.reporter = reporter
        self.debounce = settings.debounce_seconds if debounce is None else debounce
        self.max_wait = settings.max_wait_seconds if max_wait is None else max_wait
        self._debounce_handle: asyncio.TimerHandle | None = None
        self._max_wait_handle: asyncio.TimerHandle | None = None
        self._task: asyncio.Task[None] | None = None
        self._deferred = False
        self._closed = False

    @property
    def pending(self) -> bool:
        """Return True if a flush is scheduled but not yet started."""
        return self._debounce_handle is not None or self._deferred

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    def signal(self) -> None:
        """Note that the buffer changed. Must be called from the event loop."""
        if self._closed:
            logger.debug("Ignoring signal on closed scheduler")
            return

        loop = asyncio.get_running_loop()
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
        self._debounce_handle = loop.call_later(self.debounce, self._fire)
        if self._max_wait_handle is None:
            self._max_wait_handle = loop.call_later(self.max_wait, self._fire)

    async def drain(self) -> None:
        """Flush immediately, after any flush already in flight."""
        # A signal arriving while we wait can start a deferred flush.
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})
        self._cancel_timers()
        self._deferred = False
        self._start()
        await asyncio.wait({self._task})

    def close(self) -> None:
        """Stop scheduling flushes. A flush in flight is left to finish."""
        self._closed = True
        self._deferred = False
        self._cancel_timers()

    def _cancel_timers(self) -> None:
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None
        if self._max_wait_handle is not None:
            self._max_wait_handle.cancel()
            self._max_wait_handle = None

    def _fire(self) -> None:
        self._cancel_timers()
        if self.in_flight:
            self._deferred = True
            return
        self._start()

    def _start(self) -> None:
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        try:
            await self._flush()
        except Exception as e:
            logger.exception("Flush raised an unexpected error")
            self.reporter("Flush failed", str(e))
        finally:
            if self._deferred and not self._closed:
                self._deferred = False
                self._start()


class AnswerSaver:
    """Persists a SessionEngine's buffered answers through a FlushScheduler.

    Every session gets its own scheduler, and each flush is bound to the
    session that produced it, so a flush still running when a new deck is
    loaded only ever touches the abandoned session's buffer.
    """

    def __init__(
        self,
        engine: SessionEngine,
        persister: AnswerPersister,
        reporter: ErrorReporter = log_error_reporter,
        debounce: float | None = None,
        max_wait: float | None = None,
    ) -> None:
        self.engine = engine
        self.persister = persister
        self.reporter = reporter
        self.debounce = debounce
        self.max_wait = max_wait
        self._saved: tuple[Session, list[Card]] | None = None
        self._session: Session | None = None
        self._scheduler: FlushScheduler | None = None
        engine.add_listener(self._on_answer)

    @property
    def is_saving(self) -> bool:
        """Return True while answers are scheduled or being written."""
        scheduler = self._scheduler
        return scheduler is not None and (scheduler.pending or scheduler.in_flight)

    @property
    def saved_answers(self) -> list[Card]:
        """Return the last batch saved for the current session."""
        if self._saved is None or self._saved[0] is not self.engine.session:
            return []
        return self._saved[1]

    async def flush_now(self) -> None:
        """Persist the current session's buffer without waiting for timers."""
        await self._scheduler_for(self.engine.session).drain()

    def close(self) -> None:
        self.engine.remove_listener(self._on_answer)
        if self._scheduler is not None:
            self._scheduler.close()

    def _on_answer(self, session: Session) -> None:
        self._scheduler_for(session).signal()

    def _scheduler_for(self, session: Session) -> FlushScheduler:
        if session is not self._session or self._scheduler is None:
            if self._scheduler is not None:
                self._scheduler.close()
            self._session = session
            self._scheduler = FlushScheduler(
                partial(self._flush, session),
                debounce=self.debounce,
                max_wait=self.max_wait,
                reporter=self.reporter,
            )
        return self._scheduler

    async def _flush(self, session: Session) -> None:
        answers = session.pending_answers()
        if not answers:
            return

        try:
            await self.persister(answers)
        except PersistenceError as e:
            logger.warning(
                "Saving %d answers for session %s failed: %s",
                len(answers),
                session.session_id,
                e,
            )
            self.reporter("Save answers failed", e.detail if e.detail is not None else str(e))
            return

        session.acknowledge(answers)
        self._saved = (session, answers)
        logger.debug("Saved %d answers for session %s", len(answers), session.session_id)
