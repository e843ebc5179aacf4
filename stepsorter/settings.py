import json
import logging
import os
from dataclasses import dataclass, fields, replace

from .errors import InvalidConfiguration

LOGGER = logging.getLogger(__name__)

# ============================================================
# ===================== USER SETTINGS ========================
# ============================================================

WINDOW_WIDTH  = 1100
WINDOW_HEIGHT = 680
FPS           = 120

MIN_ELEMENTS     = 2
MAX_ELEMENTS     = 200
DEFAULT_ELEMENTS = 50

# Delay between two engine steps, in milliseconds.
MIN_DELAY_MS     = 0
MAX_DELAY_MS     = 1000
DEFAULT_DELAY_MS = 100

# Cosmetic verification sweep cadence and the pause re-poll interval.
VERIFY_INTERVAL_MS = 10
PAUSE_POLL_MS      = 50
MAX_STEPS_PER_UPDATE = 64

DEFAULT_ALGORITHM = "bubble"
VERIFY_ON_CANCEL  = False

ENABLE_SOUND = True
FREQ_LOW     = 200.0
FREQ_HIGH    = 800.0

BACKGROUND_COLOR   = (5, 5, 10)
BAR_COLOR          = (52, 152, 219)
COMPARE_COLOR      = (231, 76, 60)
SWAP_COLOR         = (241, 196, 15)
VERIFY_COLOR       = (46, 204, 113)
BAR_SPACING        = 1

# "gradient" colors each bar by its value, "solid" uses BAR_COLOR for all.
BAR_STYLES = ("gradient", "solid")
BAR_STYLE  = "gradient"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

SETTINGS_FILE = "stepsorter.json"
SETTINGS_ENV  = "STEPSORTER_SETTINGS"

_INT_FIELDS   = ("window_width", "window_height", "fps", "verify_interval_ms",
                 "pause_poll_ms", "max_steps_per_update")
_BOOL_FIELDS  = ("verify_on_cancel", "sound")
_FLOAT_FIELDS = ("freq_low", "freq_high")
_COLOR_FIELDS = ("background_color", "bar_color", "compare_color", "swap_color", "verify_color")


@dataclass(frozen=True)
class Settings:
    """Every knob the application reads at startup.

    The defaults come from the constants above; a JSON file may override any
    field by name.
    """

    window_width: int = WINDOW_WIDTH
    window_height: int = WINDOW_HEIGHT
    fps: int = FPS
    element_count: int = DEFAULT_ELEMENTS
    delay_ms: int = DEFAULT_DELAY_MS
    algorithm: str = DEFAULT_ALGORITHM
    verify_interval_ms: int = VERIFY_INTERVAL_MS
    pause_poll_ms: int = PAUSE_POLL_MS
    max_steps_per_update: int = MAX_STEPS_PER_UPDATE
    verify_on_cancel: bool = VERIFY_ON_CANCEL
    sound: bool = ENABLE_SOUND
    freq_low: float = FREQ_LOW
    freq_high: float = FREQ_HIGH
    seed: int | None = None
    log_level: str = "INFO"
    background_color: tuple = BACKGROUND_COLOR
    bar_color: tuple = BAR_COLOR
    compare_color: tuple = COMPARE_COLOR
    swap_color: tuple = SWAP_COLOR
    verify_color: tuple = VERIFY_COLOR
    bar_style: str = BAR_STYLE

    def validate(self) -> "Settings":
        self._check_types()
        validate_element_count(self.element_count)
        validate_delay(self.delay_ms)
        if self.verify_interval_ms < 0 or self.pause_poll_ms <= 0:
            raise InvalidConfiguration("verify_interval_ms must be >= 0 and pause_poll_ms > 0")
        if self.max_steps_per_update < 1:
            raise InvalidConfiguration("max_steps_per_update must be at least 1")
        if not 0 < self.freq_low < self.freq_high:
            raise InvalidConfiguration(
                f"Frequency range {self.freq_low}-{self.freq_high} Hz is not increasing")
        if self.log_level.upper() not in LOG_LEVELS:
            raise InvalidConfiguration(f"Unknown log level {self.log_level!r}")
        if self.bar_style not in BAR_STYLES:
            raise InvalidConfiguration(f"bar_style must be one of {BAR_STYLES}, got {self.bar_style!r}")
        return self

    def _check_types(self):
        for name in _INT_FIELDS:
            if not _is_int(getattr(self, name)):
                raise InvalidConfiguration(f"{name} must be an integer, got {getattr(self, name)!r}")
        for name in _BOOL_FIELDS:
            if not isinstance(getattr(self, name), bool):
                raise InvalidConfiguration(f"{name} must be true or false, got {getattr(self, name)!r}")
        for name in _FLOAT_FIELDS:
            value = getattr(self, name)
            if not (_is_int(value) or isinstance(value, float)):
                raise InvalidConfiguration(f"{name} must be a number, got {value!r}")
        for name in _COLOR_FIELDS:
            validate_color(name, getattr(self, name))
        for name in ("algorithm", "log_level", "bar_style"):
            if not isinstance(getattr(self, name), str):
                raise InvalidConfiguration(f"{name} must be a string, got {getattr(self, name)!r}")
        if self.seed is not None and not _is_int(self.seed):
            raise InvalidConfiguration(f"seed must be an integer or null, got {self.seed!r}")


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def validate_color(name, color):
    if (not isinstance(color, (tuple, list)) or len(color) != 3
            or not all(_is_int(c) and 0 <= c <= 255 for c in color)):
        raise InvalidConfiguration(f"{name} must be three integers 0-255, got {color!r}")
    return tuple(color)


def validate_element_count(count):
    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidConfiguration(f"Element count must be an integer, got {count!r}")
    if not MIN_ELEMENTS <= count <= MAX_ELEMENTS:
        raise InvalidConfiguration(
            f"Element count {count} outside {MIN_ELEMENTS}..{MAX_ELEMENTS}")
    return count


def validate_delay(delay_ms):
    if isinstance(delay_ms, bool) or not isinstance(delay_ms, (int, float)):
        raise InvalidConfiguration(f"Delay must be a number, got {delay_ms!r}")
    if not MIN_DELAY_MS <= delay_ms <= MAX_DELAY_MS:
        raise InvalidConfiguration(
            f"Delay {delay_ms}ms outside {MIN_DELAY_MS}..{MAX_DELAY_MS}ms")
    return delay_ms


def settings_path():
    return os.environ.get(SETTINGS_ENV) or os.path.join(os.getcwd(), SETTINGS_FILE)


def _read_settings_json(path) -> dict:
    if not os.path.exists(path):
        return {}
    try:
        with open(path) as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        LOGGER.warning("Ignoring unreadable settings file %s: %s", path, e)
        return {}
    if not isinstance(payload, dict):
        LOGGER.warning("Ignoring settings file %s: top level is not an object", path)
        return {}
    return payload


def load_settings(path=None) -> Settings:
    """Return defaults overridden by the JSON settings file, if any."""
    path = path or settings_path()
    payload = _read_settings_json(path)
    known = {f.name for f in fields(Settings)}
    for key in sorted(set(payload) - known):
        LOGGER.warning("Unknown setting %r in %s", key, path)
    overrides = {k: v for k, v in payload.items() if k in known}
    for name in _COLOR_FIELDS:
        if isinstance(overrides.get(name), list):
            overrides[name] = tuple(overrides[name])
    settings = replace(Settings(), **overrides)
    if overrides:
        LOGGER.info("Loaded %d setting(s) from %s", len(overrides), path)
    return settings.validate()
