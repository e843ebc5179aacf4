"""App wiring tests: completion chime, configured palette and startup logging."""

from __future__ import annotations

import logging

import pygame

from stepsorter import app as app_module
from stepsorter.app import App
from stepsorter.render import Palette
from stepsorter.scheduler import SchedulerState
from stepsorter.settings import Settings


class FakeTones:
    def __init__(self):
        self.triggered = []
        self.chimes = 0

    def trigger(self, value, n):
        self.triggered.append((value, n))

    def chime(self):
        self.chimes += 1


def make(**overrides):
    settings = Settings(**{"seed": 3, "delay_ms": 0, "element_count": 8, "sound": False,
                           **overrides})
    app = App(settings, pygame.Surface((settings.window_width, settings.window_height)), None)
    app.tones = FakeTones()
    return app


class TestCompletion:
    def test_chime_after_full_sweep(self):
        app = make()
        app.controller.start(now=0)
        app.controller.scheduler.run_until_idle()
        assert app.tones.chimes == 1
        assert app.tones.triggered
        assert not app.highlights.verified

    def test_no_chime_on_cancel(self):
        app = make(delay_ms=10)
        app.controller.start(now=0)
        app.controller.update(0)
        app.controller.cancel()
        assert app.tones.chimes == 0

    def test_no_chime_on_reset_mid_sweep(self):
        app = make(verify_interval_ms=10)
        app.controller.start(now=0)
        while app.controller.state is SchedulerState.RUNNING:
            app.controller.update(0)
        app.highlights.clear()
        app.controller.reset()
        assert app.tones.chimes == 0


class TestPalette:
    def test_renderer_uses_settings_colors(self):
        app = make(compare_color=(1, 2, 3), bar_style="solid")
        assert app.renderer.palette == Palette.from_settings(app.settings)
        assert app.renderer.palette.compare == (1, 2, 3)
        assert app.renderer.palette.style == "solid"


class TestMain:
    def test_logging_configured_before_settings_load(self, monkeypatch):
        calls = []
        root = logging.getLogger()
        level = root.level
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(("config", kw["level"])))

        def load_settings():
            calls.append(("load", None))
            return Settings(log_level="debug", window_width=200, window_height=120)

        class StubApp:
            def __init__(self, settings, screen, font):
                calls.append(("app", settings.log_level))

            def run(self):
                pass

        monkeypatch.setattr(app_module.cfg, "load_settings", load_settings)
        monkeypatch.setattr(app_module, "App", StubApp)
        monkeypatch.setattr(app_module, "build_font", lambda size=16: None)
        try:
            assert app_module.main() == 0
            assert root.level == logging.DEBUG
        finally:
            root.setLevel(level)
        assert calls == [("config", logging.INFO), ("load", None), ("app", "debug")]
