from dataclasses import dataclass

import pygame

from . import settings as cfg
from .engine import StepKind

UI_PANEL   = (14, 14, 22)
UI_PANEL2  = (22, 22, 36)
UI_ACCENT  = (255, 55, 55)
UI_TEXT    = (215, 215, 228)
UI_SUBTEXT = (105, 105, 130)
UI_BORDER  = (38, 38, 58)

HUD_HEIGHT = 60

# ============================================================
# ======================== HIGHLIGHTS ========================
# ============================================================

class Highlights:
    """Which bars to color, rebuilt from the step events.

    Swapped/written bars stay marked until the next mutation; compared bars
    last for a single step and never override a swap mark.
    """

    def __init__(self):
        self.compare = set()
        self.swap = set()
        self.verified = set()

    def apply(self, event):
        if event.kind is StepKind.COMPARE:
            self.compare = set(event.indices) - self.swap
        else:
            self.compare = set()
            self.swap = set(event.indices)

    def mark_verified(self, index):
        if not self.verified:
            self.compare = set(); self.swap = set()
        self.verified.add(index)

    def clear(self):
        self.compare = set(); self.swap = set(); self.verified = set()

# ============================================================
# ======================= COLOR / DRAW =======================
# ============================================================

def value_to_color(value, max_value):
    r = value / max_value
    if r < 0.25: return (0, int(255 * r * 4), 255)
    if r < 0.5:  return (0, 255, int(255 * (1 - (r - 0.25) * 4)))
    if r < 0.75: return (int(255 * (r - 0.5) * 4), 255, 0)
    return (255, int(255 * (1 - (r - 0.75) * 4)), 0)


@dataclass(frozen=True)
class Palette:
    background: tuple = cfg.BACKGROUND_COLOR
    bar: tuple = cfg.BAR_COLOR
    compare: tuple = cfg.COMPARE_COLOR
    swap: tuple = cfg.SWAP_COLOR
    verify: tuple = cfg.VERIFY_COLOR
    style: str = cfg.BAR_STYLE

    @classmethod
    def from_settings(cls, settings):
        return cls(settings.background_color, settings.bar_color, settings.compare_color,
                   settings.swap_color, settings.verify_color, settings.bar_style)


DEFAULT_PALETTE = Palette()


def bar_color(index, value, n, highlights, palette=DEFAULT_PALETTE):
    if index in highlights.swap:     return palette.swap
    if index in highlights.compare:  return palette.compare
    if index in highlights.verified: return palette.verify
    if palette.style == "solid":     return palette.bar
    return value_to_color(value, n)


class BarRenderer:
    def __init__(self, width, height, font=None, palette=DEFAULT_PALETTE):
        self.width, self.height = width, height
        self.font = font
        self.palette = palette

    def bar_rects(self, data):
        """(x, y, w, h) for every bar, tallest value touching the HUD."""
        n = len(data)
        if not n:
            return []
        bw = self.width / n
        area = self.height - HUD_HEIGHT
        return [(i * bw, self.height - (v / n) * area, max(1.0, bw - cfg.BAR_SPACING), (v / n) * area)
                for i, v in enumerate(data)]

    def draw(self, surface, data, highlights, stats, label="", status=""):
        surface.fill(self.palette.background)
        n = len(data)
        for i, rect in enumerate(self.bar_rects(data)):
            pygame.draw.rect(surface, bar_color(i, data[i], n, highlights, self.palette), rect)
        self._draw_progress(surface, stats)
        if self.font:
            self._draw_hud(surface, stats, label, status)

    def _draw_progress(self, surface, stats):
        track = pygame.Rect(12, HUD_HEIGHT - 10, self.width - 24, 4)
        pygame.draw.rect(surface, UI_BORDER, track, border_radius=2)
        fw = int(stats.progress * track.width)
        if fw > 0:
            pygame.draw.rect(surface, UI_ACCENT, (track.x, track.y, fw, 4), border_radius=2)

    def _draw_hud(self, surface, stats, label, status):
        line1 = f"{label}   {status}".strip()
        line2 = (f"comparisons {stats.comparisons}   swaps {stats.swaps}   "
                 f"writes {stats.writes}   steps {stats.steps}/{stats.estimated_steps}")
        surface.blit(self.font.render(line1, True, UI_TEXT), (12, 8))
        surface.blit(self.font.render(line2, True, UI_SUBTEXT), (12, 28))

# ============================================================
# ========================= UI WIDGETS =======================
# ============================================================

class Slider:
    """Single-knob integer slider for element count and delay."""
    KNOB_RADIUS = 6

    def __init__(self, x, y, w, lo, hi, val, label, unit=""):
        self.x, self.y, self.w = x, y, w
        self.lo, self.hi = lo, hi
        self.value = val
        self.label, self.unit = label, unit
        self.drag = False
        self.track = pygame.Rect(x, y+18, w, 4)
        self.hit = pygame.Rect(x-5, y, w+10, 38)

    def _r(self):
        return (self.value - self.lo) / (self.hi - self.lo)

    def _kx(self):
        return int(self.x + self._r() * self.w)

    def set_from_x(self, mx):
        r = max(0.0, min(1.0, (mx - self.x) / self.w))
        self.value = int(round(self.lo + r * (self.hi - self.lo)))

    def handle(self, ev) -> bool:
        """Feed a pygame event; True when the value changed on release."""
        if ev.type == pygame.MOUSEBUTTONDOWN and ev.button == 1 and self.hit.collidepoint(ev.pos):
            self.drag = True; self.set_from_x(ev.pos[0])
        elif ev.type == pygame.MOUSEMOTION and self.drag:
            self.set_from_x(ev.pos[0])
        elif ev.type == pygame.MOUSEBUTTONUP and self.drag:
            self.drag = False
            return True
        return False

    def draw(self, s, font):
        s.blit(font.render(f"{self.label}:  {self.value}{self.unit}", True, UI_SUBTEXT), (self.x, self.y))
        pygame.draw.rect(s, UI_BORDER, self.track, border_radius=2)
        fw = int(self._r() * self.w)
        if fw > 0: pygame.draw.rect(s, UI_ACCENT, (self.x, self.track.y, fw, 4), border_radius=2)
        kx, ky = self._kx(), self.track.centery
        pygame.draw.circle(s, UI_PANEL2, (kx, ky), self.KNOB_RADIUS)
        pygame.draw.circle(s, UI_ACCENT, (kx, ky), self.KNOB_RADIUS, 2)
