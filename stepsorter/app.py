import logging
import sys

import pygame

from . import settings as cfg
from .algorithms import ALGORITHMS
from .controller import Controller
from .render import BarRenderer, Highlights, Palette, Slider
from .scheduler import SchedulerState
from .sound import ToneOutput

LOGGER = logging.getLogger(__name__)

ALGO_KEYS = [pygame.K_1, pygame.K_2, pygame.K_3, pygame.K_4,
             pygame.K_5, pygame.K_6, pygame.K_7, pygame.K_8]

HELP = "SPACE start/pause   R reset   1-8 algorithm   ESC quit"


class App:
    def __init__(self, settings, screen, font):
        self.settings = settings
        self.screen = screen
        self.font = font
        self.highlights = Highlights()
        self.tones = ToneOutput(settings.freq_low, settings.freq_high, enabled=settings.sound)
        self.controller = Controller(settings, on_step=self.on_step,
                                     on_verify_progress=self.on_verify_progress,
                                     on_complete=self.on_complete)
        w, h = settings.window_width, settings.window_height
        self.renderer = BarRenderer(w, h, font, Palette.from_settings(settings))
        self.sl_size  = Slider(w - 480, 4, 220, cfg.MIN_ELEMENTS, cfg.MAX_ELEMENTS,
                               settings.element_count, "Elements")
        self.sl_delay = Slider(w - 240, 4, 220, cfg.MIN_DELAY_MS, cfg.MAX_DELAY_MS,
                               settings.delay_ms, "Delay", "ms")

    # -------------------------------------------------- scheduler listeners

    def on_step(self, event, stats):
        self.highlights.apply(event)
        data = self.controller.data
        self.tones.trigger(data[event.indices[-1]], len(data))

    def on_verify_progress(self, index):
        self.highlights.mark_verified(index)
        data = self.controller.data
        if index < len(data):
            self.tones.trigger(data[index], len(data))

    def on_complete(self, stats):
        # Only a sweep that reached the last bar earns the chime.
        verified = self.highlights.verified
        if verified and len(verified) >= len(self.controller.data):
            self.tones.chime()
        self.highlights.clear()

    # --------------------------------------------------------------- input

    def handle(self, ev) -> bool:
        """Returns False when the app should quit."""
        if ev.type == pygame.QUIT:
            return False
        if ev.type == pygame.KEYDOWN:
            if ev.key == pygame.K_ESCAPE:
                return False
            if ev.key == pygame.K_SPACE:
                if self.controller.state is SchedulerState.IDLE:
                    self.highlights.clear()
                    self.controller.start(pygame.time.get_ticks())
                else:
                    self.controller.toggle_pause()
            elif ev.key == pygame.K_r:
                self.highlights.clear()
                self.controller.reset()
            elif ev.key in ALGO_KEYS:
                _, key = ALGORITHMS[ALGO_KEYS.index(ev.key)]
                if not self.controller.scheduler.active:
                    self.controller.select_algorithm(key)
        if self.sl_size.handle(ev):
            if not self.controller.configure(self.sl_size.value, self.controller.delay_ms):
                self.sl_size.value = self.controller.element_count
            self.highlights.clear()
        if self.sl_delay.handle(ev) or self.sl_delay.drag:
            self.controller.set_delay(self.sl_delay.value)
        return True

    # ---------------------------------------------------------------- draw

    def draw(self):
        c = self.controller
        status = f"[{c.state.value.upper()}]   delay {c.delay_ms}ms"
        self.renderer.draw(self.screen, c.data, self.highlights, c.stats, c.algorithm_name, status)
        self.sl_size.draw(self.screen, self.font)
        self.sl_delay.draw(self.screen, self.font)
        self.screen.blit(self.font.render(HELP, True, (105, 105, 130)),
                         (12, self.settings.window_height - 22))
        pygame.display.flip()

    def run(self):
        clock = pygame.time.Clock()
        self.tones.start()
        try:
            running = True
            while running:
                clock.tick(self.settings.fps)
                for ev in pygame.event.get():
                    if not self.handle(ev):
                        running = False
                        break
                self.controller.update(pygame.time.get_ticks())
                self.draw()
        finally:
            self.controller.cancel()
            self.tones.stop()


def build_font(size=16):
    return pygame.font.SysFont("consolas,couriernew,lucidaconsole", size)


def main():
    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    settings = cfg.load_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    pygame.init()
    screen = pygame.display.set_mode((settings.window_width, settings.window_height))
    pygame.display.set_caption("StepSorter")
    try:
        App(settings, screen, build_font()).run()
    finally:
        pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
