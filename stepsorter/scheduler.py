import logging
from enum import Enum

from . import settings
from .engine import RunStatistics

LOGGER = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    IDLE      = "idle"
    RUNNING   = "running"
    PAUSED    = "paused"
    VERIFYING = "verifying"


def _noop(*args):
    pass


class StepScheduler:
    """Drives one SortEngine at a fixed cadence.

    The scheduler never sleeps. The host loop calls :meth:`update` with the
    current time in milliseconds and the scheduler advances the engine when
    the inter-step delay has elapsed. Listeners:

      on_step(event, stats)      after every advance that did work
      on_verify_progress(index)  once per index of the verification sweep
      on_complete(stats)         when the scheduler is back to IDLE
    """

    def __init__(self, delay_ms=settings.DEFAULT_DELAY_MS, on_step=None,
                 on_verify_progress=None, on_complete=None,
                 verify_interval_ms=settings.VERIFY_INTERVAL_MS,
                 pause_poll_ms=settings.PAUSE_POLL_MS,
                 max_steps_per_update=settings.MAX_STEPS_PER_UPDATE,
                 verify_on_cancel=settings.VERIFY_ON_CANCEL):
        self.delay_ms = settings.validate_delay(delay_ms)
        self.on_step = on_step or _noop
        self.on_verify_progress = on_verify_progress or _noop
        self.on_complete = on_complete or _noop
        self.verify_interval_ms = verify_interval_ms
        self.pause_poll_ms = pause_poll_ms
        self.max_steps_per_update = max_steps_per_update
        self.verify_on_cancel = verify_on_cancel

        self.state = SchedulerState.IDLE
        self.engine = None
        self.stats = RunStatistics()
        self.verified = 0
        self._data = []
        self._next_due = None
        self._next_verify = None

    @property
    def active(self) -> bool:
        return self.state is not SchedulerState.IDLE

    # ---------------------------------------------------------------- control

    def start(self, engine, now=None) -> bool:
        if self.active:
            LOGGER.debug("start() ignored while %s", self.state.value)
            return False
        self.engine = engine
        self._data = engine.data
        self.stats = engine.stats
        self.verified = 0
        self._next_due = now
        self.state = SchedulerState.RUNNING
        LOGGER.info("Running %s on %d elements (delay %sms)",
                    engine.name, len(engine.data), self.delay_ms)
        return True

    def pause(self) -> bool:
        if self.state is not SchedulerState.RUNNING:
            return False
        self.state = SchedulerState.PAUSED
        LOGGER.info("Paused after %d steps", self.stats.steps)
        return True

    def resume(self) -> bool:
        if self.state is not SchedulerState.PAUSED:
            return False
        self.state = SchedulerState.RUNNING
        LOGGER.info("Resumed")
        return True

    def toggle_pause(self) -> bool:
        return self.pause() or self.resume()

    def cancel(self) -> bool:
        if self.state in (SchedulerState.RUNNING, SchedulerState.PAUSED):
            LOGGER.info("Cancelled %s after %d steps", self.engine.name, self.stats.steps)
            self.engine = None
            if self.verify_on_cancel:
                self._begin_verify(None)
            else:
                self._finish()
            return True
        if self.state is SchedulerState.VERIFYING:
            self._finish()
            return True
        return False

    def set_delay(self, delay_ms):
        self.delay_ms = settings.validate_delay(delay_ms)

    # ------------------------------------------------------------------ clock

    def update(self, now):
        """Do whatever work is due at ``now`` (milliseconds, monotonic)."""
        if self.state is SchedulerState.PAUSED:
            self._next_due = now + self.pause_poll_ms
        elif self.state is SchedulerState.RUNNING:
            self._run_due_steps(now)
        if self.state is SchedulerState.VERIFYING:
            self._verify_due(now)

    def next_deadline(self):
        """Earliest time at which :meth:`update` has work, or None."""
        if self.state is SchedulerState.RUNNING:
            return self._next_due
        if self.state is SchedulerState.VERIFYING:
            return self._next_verify
        return None

    def run_until_idle(self, now=0.0):
        """Drive the scheduler on a synthetic clock until it is idle.

        Stops early, leaving the run in place, if it is paused. Returns the
        synthetic time reached.
        """
        while self.state in (SchedulerState.RUNNING, SchedulerState.VERIFYING):
            due = self.next_deadline()
            if due is not None:
                now = max(now, due)
            self.update(now)
        return now

    def _run_due_steps(self, now):
        if self._next_due is None:
            self._next_due = now
        budget = self.max_steps_per_update
        while self.state is SchedulerState.RUNNING and now >= self._next_due and budget > 0:
            self._step(now)
            self._next_due += self.delay_ms
            budget -= 1
        if self.state is SchedulerState.RUNNING and now > self._next_due:
            # Too far behind to catch up; drop the backlog.
            self._next_due = now + self.delay_ms

    def _step(self, now):
        result = self.engine.advance()
        if result.completed:
            self.stats = self.engine.stats
            LOGGER.info("%s finished: %d comparisons, %d swaps, %d writes in %d steps",
                        self.engine.name, self.stats.comparisons, self.stats.swaps,
                        self.stats.writes, self.stats.steps)
            self.engine = None
            self._begin_verify(now)
            return
        self.stats = result.event.stats
        self.on_step(result.event, self.stats)

    # ----------------------------------------------------------- verification

    def _begin_verify(self, now):
        self.state = SchedulerState.VERIFYING
        self.verified = 0
        self._next_verify = now
        if not self._data:
            self._finish()

    def _verify_due(self, now):
        if self._next_verify is None:
            self._next_verify = now
        while self.state is SchedulerState.VERIFYING and now >= self._next_verify:
            index = self.verified
            self.verified += 1
            self._next_verify += self.verify_interval_ms
            self.on_verify_progress(index)
            if self.verified >= len(self._data):
                self._finish()

    def _finish(self):
        self.state = SchedulerState.IDLE
        self.engine = None
        self._next_due = self._next_verify = None
        self.on_complete(self.stats)
