import logging
import random

from . import settings as cfg
from .algorithms import SORTERS, display_name, estimate_total_steps
from .engine import RunStatistics, create_engine
from .errors import UnknownAlgorithm
from .scheduler import StepScheduler

LOGGER = logging.getLogger(__name__)


def shuffled_range(n, rng=random) -> list:
    arr = list(range(1, n+1)); rng.shuffle(arr)
    return arr


class Controller:
    """What the buttons and sliders talk to.

    Owns the dataset, the selected algorithm and the scheduler. Operations
    that are not allowed in the current state return False and do nothing.
    """

    def __init__(self, settings=None, on_step=None, on_verify_progress=None,
                 on_complete=None, rng=None):
        settings = (settings or cfg.Settings()).validate()
        self.settings = settings
        self.rng = rng or random.Random(settings.seed)
        self._listeners = (on_step, on_verify_progress, on_complete)
        self.scheduler = StepScheduler(
            delay_ms=settings.delay_ms,
            on_step=self._on_step,
            on_verify_progress=self._on_verify_progress,
            on_complete=self._on_complete,
            verify_interval_ms=settings.verify_interval_ms,
            pause_poll_ms=settings.pause_poll_ms,
            max_steps_per_update=settings.max_steps_per_update,
            verify_on_cancel=settings.verify_on_cancel,
        )
        self.algorithm = cfg.DEFAULT_ALGORITHM
        self.element_count = settings.element_count
        self.data = []
        self._stats = RunStatistics()
        self.select_algorithm(settings.algorithm)
        self._regenerate()

    # ------------------------------------------------------------- read-only

    @property
    def state(self):
        return self.scheduler.state

    @property
    def delay_ms(self):
        return self.scheduler.delay_ms

    @property
    def stats(self) -> RunStatistics:
        if self.scheduler.active:
            return self.scheduler.stats
        return self._stats

    @property
    def algorithm_name(self):
        return display_name(self.algorithm)

    # ----------------------------------------------------------- operations

    def configure(self, element_count, delay_ms) -> bool:
        cfg.validate_element_count(element_count)
        cfg.validate_delay(delay_ms)
        if self.scheduler.active:
            LOGGER.debug("configure() ignored while %s", self.state.value)
            return False
        self.element_count = element_count
        self.scheduler.set_delay(delay_ms)
        self._regenerate()
        return True

    def select_algorithm(self, name) -> str:
        if name not in SORTERS:
            LOGGER.warning("%s, falling back to %s", UnknownAlgorithm(name), cfg.DEFAULT_ALGORITHM)
            name = cfg.DEFAULT_ALGORITHM
        self.algorithm = name
        if not self.scheduler.active:
            self._stats = RunStatistics(
                estimated_steps=estimate_total_steps(name, len(self.data)))
        return name

    def set_delay(self, delay_ms):
        self.scheduler.set_delay(delay_ms)

    def start(self, now=None) -> bool:
        if self.scheduler.active:
            LOGGER.debug("start() ignored while %s", self.state.value)
            return False
        engine = create_engine(self.algorithm, self.data)
        return self.scheduler.start(engine, now)

    def pause(self) -> bool:
        return self.scheduler.pause()

    def resume(self) -> bool:
        return self.scheduler.resume()

    def toggle_pause(self) -> bool:
        return self.scheduler.toggle_pause()

    def cancel(self) -> bool:
        return self.scheduler.cancel()

    def reset(self):
        """Abandon any run, including a verification sweep, and re-seed a
        fresh dataset of the same size."""
        # With verify_on_cancel the first cancel only starts a sweep.
        while self.scheduler.active:
            self.scheduler.cancel()
        self._regenerate()

    def update(self, now):
        self.scheduler.update(now)

    # ------------------------------------------------------------- internals

    def _regenerate(self):
        self.data = shuffled_range(self.element_count, self.rng)
        self._stats = RunStatistics(
            estimated_steps=estimate_total_steps(self.algorithm, self.element_count))
        LOGGER.info("New dataset: %d elements", self.element_count)

    def _on_step(self, event, stats):
        if self._listeners[0]:
            self._listeners[0](event, stats)

    def _on_verify_progress(self, index):
        if self._listeners[1]:
            self._listeners[1](index)

    def _on_complete(self, stats):
        self._stats = stats
        if self._listeners[2]:
            self._listeners[2](stats)
