"""Scheduler lifecycle, cadence and verification tests."""

from __future__ import annotations

import random

import pytest

from stepsorter.algorithms import ALGORITHMS
from stepsorter.engine import create_engine
from stepsorter.errors import InvalidConfiguration
from stepsorter.scheduler import SchedulerState, StepScheduler

KEYS = [key for _, key in ALGORITHMS]


class Recorder:
    def __init__(self):
        self.steps = []
        self.verified = []
        self.completed = []

    def kwargs(self):
        return dict(on_step=self.on_step, on_verify_progress=self.verified.append,
                    on_complete=self.completed.append)

    def on_step(self, event, stats):
        assert event.stats == stats
        self.steps.append(event)


def make(delay_ms=100, **kw):
    rec = Recorder()
    return StepScheduler(delay_ms=delay_ms, **rec.kwargs(), **kw), rec


def shuffled(n, seed=0):
    arr = list(range(1, n + 1))
    random.Random(seed).shuffle(arr)
    return arr


class TestLifecycle:
    def test_full_run(self):
        sched, rec = make(delay_ms=5)
        data = shuffled(20)
        assert sched.start(create_engine("merge", data), now=0)
        assert sched.state is SchedulerState.RUNNING
        sched.run_until_idle()
        assert sched.state is SchedulerState.IDLE
        assert data == list(range(1, 21))
        assert rec.verified == list(range(20))
        assert len(rec.completed) == 1
        assert rec.completed[0].steps == len(rec.steps)
        assert sched.engine is None

    def test_start_while_active_is_noop(self):
        sched, _ = make()
        first = create_engine("bubble", shuffled(5))
        assert sched.start(first, now=0)
        assert not sched.start(create_engine("quick", shuffled(5)), now=0)
        assert sched.engine is first

    def test_start_while_verifying_is_noop(self):
        sched, _ = make(delay_ms=0, verify_interval_ms=10)
        sched.start(create_engine("bubble", [1, 2, 3]), now=0)
        sched.update(0)
        assert sched.state is SchedulerState.VERIFYING
        assert not sched.start(create_engine("bubble", [2, 1]), now=0)

    def test_single_element_goes_straight_to_verification(self):
        sched, rec = make(delay_ms=100)
        sched.start(create_engine("heap", [1]), now=0)
        sched.update(0)
        assert rec.steps == []
        assert rec.verified == [0]
        assert sched.state is SchedulerState.IDLE
        assert rec.completed[0].comparisons == 0

    def test_counters_reset_between_runs(self):
        sched, rec = make(delay_ms=1)
        sched.start(create_engine("bubble", shuffled(8, 1)), now=0)
        sched.run_until_idle()
        first = rec.completed[-1]
        sched.start(create_engine("bubble", [2, 1]), now=0)
        sched.run_until_idle()
        assert rec.completed[-1].comparisons == 1
        assert first.comparisons == 28


class TestCadence:
    def test_one_step_per_delay(self):
        sched, rec = make(delay_ms=100)
        sched.start(create_engine("bubble", shuffled(10)), now=0)
        sched.update(0)
        assert len(rec.steps) == 1
        sched.update(50)
        assert len(rec.steps) == 1
        sched.update(100)
        assert len(rec.steps) == 2
        sched.update(300)
        assert len(rec.steps) == 4

    def test_backlog_capped(self):
        sched, rec = make(delay_ms=1, max_steps_per_update=5)
        sched.start(create_engine("bubble", shuffled(30)), now=0)
        sched.update(1000)
        assert len(rec.steps) == 5
        # the backlog was dropped, so the next step is one delay away
        sched.update(1000)
        assert len(rec.steps) == 5
        sched.update(1001)
        assert len(rec.steps) == 6

    def test_zero_delay_runs_cap_per_update(self):
        sched, rec = make(delay_ms=0, max_steps_per_update=8)
        sched.start(create_engine("bubble", shuffled(30)), now=0)
        sched.update(0)
        sched.update(0)
        assert len(rec.steps) == 16

    def test_set_delay_mid_run(self):
        sched, rec = make(delay_ms=100)
        sched.start(create_engine("bubble", shuffled(10)), now=0)
        sched.update(0)
        sched.set_delay(10)
        sched.update(100)
        sched.update(110)
        assert len(rec.steps) == 3

    def test_invalid_delay(self):
        sched, _ = make()
        with pytest.raises(InvalidConfiguration):
            sched.set_delay(-5)
        with pytest.raises(InvalidConfiguration):
            StepScheduler(delay_ms="fast")

    def test_verification_cadence(self):
        sched, rec = make(delay_ms=0, verify_interval_ms=10)
        sched.start(create_engine("bubble", [1, 2, 3, 4]), now=0)
        sched.run_until_idle(now=0)
        assert rec.verified == [0, 1, 2, 3]

        sched.start(create_engine("bubble", [1, 2, 3]), now=0)
        while sched.state is SchedulerState.RUNNING:
            sched.update(0)
        assert rec.verified[4:] == [0]
        sched.update(5)
        assert rec.verified[4:] == [0]
        sched.update(20)
        assert rec.verified[4:] == [0, 1, 2]
        assert sched.state is SchedulerState.IDLE


class TestPause:
    def test_paused_never_touches_data(self):
        sched, rec = make(delay_ms=10)
        data = shuffled(15)
        sched.start(create_engine("selection", data), now=0)
        sched.update(0)
        assert sched.pause()
        snapshot, n = list(data), len(rec.steps)
        for t in range(0, 5000, 10):
            sched.update(t)
        assert data == snapshot
        assert len(rec.steps) == n
        assert sched.state is SchedulerState.PAUSED

    def test_resume_repolls(self):
        sched, rec = make(delay_ms=10, pause_poll_ms=50)
        sched.start(create_engine("bubble", shuffled(10)), now=0)
        sched.update(0)
        sched.pause()
        sched.update(1000)
        sched.resume()
        sched.update(1020)
        assert len(rec.steps) == 1
        sched.update(1050)
        assert len(rec.steps) == 2

    def test_pause_resume_only_from_matching_state(self):
        sched, _ = make()
        assert not sched.pause()
        assert not sched.resume()
        sched.start(create_engine("bubble", shuffled(4)), now=0)
        assert not sched.resume()
        assert sched.toggle_pause()
        assert sched.state is SchedulerState.PAUSED
        assert sched.toggle_pause()
        assert sched.state is SchedulerState.RUNNING

    def test_run_until_idle_stops_when_paused(self):
        sched, rec = make(delay_ms=1)
        sched.start(create_engine("bubble", shuffled(6)), now=0)
        sched.pause()
        sched.run_until_idle()
        assert sched.state is SchedulerState.PAUSED
        assert rec.steps == []

    @pytest.mark.parametrize("key", KEYS)
    def test_pausing_does_not_change_outcome(self, key):
        plain_data = shuffled(40, seed=7)
        paused_data = list(plain_data)

        plain, plain_rec = make(delay_ms=3)
        plain.start(create_engine(key, plain_data), now=0)
        plain.run_until_idle()

        paused, paused_rec = make(delay_ms=3)
        paused.start(create_engine(key, paused_data), now=0)
        rng = random.Random(key)
        now = 0
        while paused.active:
            if paused.state is SchedulerState.RUNNING and rng.random() < 0.2:
                paused.pause()
                for _ in range(rng.randint(1, 4)):
                    paused.update(now)
                    now += 7
                paused.resume()
            paused.update(now)
            now += 3

        assert paused_data == plain_data == list(range(1, 41))
        assert paused_rec.completed == plain_rec.completed
        assert [e.indices for e in paused_rec.steps] == [e.indices for e in plain_rec.steps]


class TestCancel:
    def test_cancel_running_goes_idle(self):
        sched, rec = make(delay_ms=10)
        data = shuffled(30)
        sched.start(create_engine("bubble", data), now=0)
        sched.update(0)
        sched.update(10)
        assert sched.cancel()
        assert sched.state is SchedulerState.IDLE
        assert rec.verified == []
        assert rec.completed[0].steps == 2
        snapshot = list(data)
        sched.update(1000)
        assert data == snapshot

    def test_cancel_paused(self):
        sched, rec = make()
        sched.start(create_engine("bubble", shuffled(5)), now=0)
        sched.pause()
        assert sched.cancel()
        assert sched.state is SchedulerState.IDLE
        assert len(rec.completed) == 1

    def test_cancel_with_verification(self):
        sched, rec = make(delay_ms=10, verify_on_cancel=True)
        sched.start(create_engine("bubble", shuffled(6)), now=0)
        sched.update(0)
        assert sched.cancel()
        assert sched.state is SchedulerState.VERIFYING
        assert rec.completed == []
        sched.run_until_idle(now=10)
        assert rec.verified == list(range(6))
        assert len(rec.completed) == 1

    def test_cancel_during_verification_ends_sweep(self):
        sched, rec = make(delay_ms=0, verify_interval_ms=10)
        sched.start(create_engine("bubble", [1, 2, 3]), now=0)
        while sched.state is SchedulerState.RUNNING:
            sched.update(0)
        assert sched.cancel()
        assert sched.state is SchedulerState.IDLE
        assert rec.verified == [0]

    def test_cancel_idle(self):
        sched, rec = make()
        assert not sched.cancel()
        assert rec.completed == []
