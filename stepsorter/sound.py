"""
Tone output: every step event plays a short note whose pitch follows the
value of the bar it touched.

Each note is a Voice. Per chunk, all live voices are mixed into one buffer:

  wave[t] = sin(2pi * phase[t]) + HARMONIC_BLEND * sin(4pi * phase[t])

shaped by a raised-cosine envelope, attack at the start and release at the
end, so notes start and stop without clicks. When more than MAX_VOICES are
alive the oldest one is clamped to a short release instead of being cut.
The mix is divided by sqrt(live voices) to keep loudness roughly constant.

Synthesis is plain numpy; only ToneOutput touches pygame.mixer.
"""

import logging
import math
import threading
import time

import numpy as np
import pygame

from . import settings as cfg

LOGGER = logging.getLogger(__name__)

SAMPLE_RATE    = 44100
CHUNK_SIZE     = 512
SOUND_SUSTAIN  = 0.05
SOUND_ATTACK   = 0.005
SOUND_RELEASE  = 0.030
HARMONIC_BLEND = 0.08
MAX_VOICES     = 24
STEAL_FADE     = 64
TRIGGER_MIN_INTERVAL = 0.02
CHIME_SUSTAIN  = 0.35
CHIME_RELEASE  = 0.25

TWO_PI = 2.0 * math.pi


def tone_frequency(value, n, lo=cfg.FREQ_LOW, hi=cfg.FREQ_HIGH) -> float:
    return lo + (value / max(1, n)) * (hi - lo)


class Voice:
    __slots__ = ('freq', 'phase', 'age', 'max_age', 'attack', 'release')

    def __init__(self, freq, max_age, attack, release):
        self.freq    = freq
        self.phase   = 0.0
        self.age     = 0
        self.max_age = max_age
        self.attack  = attack
        self.release = release


def steal_oldest(voices, fade=STEAL_FADE):
    oldest = voices[0]
    fade = min(fade, oldest.release)
    oldest.max_age = min(oldest.max_age, oldest.age + fade)
    oldest.release = fade


def envelope(voice, ages):
    env = np.ones(len(ages), dtype=np.float64)
    a_mask = ages < voice.attack
    if np.any(a_mask):
        env[a_mask] = 0.5 * (1.0 - np.cos(math.pi * ages[a_mask] / voice.attack))
    rel_start = voice.max_age - voice.release
    r_mask = ages >= rel_start
    if np.any(r_mask):
        env[r_mask] = np.maximum(
            0.0, 0.5 * (1.0 + np.cos(math.pi * (ages[r_mask] - rel_start) / voice.release)))
    env[ages >= voice.max_age] = 0.0
    return env


def synthesize_chunk(voices, chunk_size=CHUNK_SIZE, sample_rate=SAMPLE_RATE):
    """Mix one chunk. Returns (float buffer in [-1, 1], voices still alive)."""
    buf = np.zeros(chunk_size, dtype=np.float64)
    idx = np.arange(chunk_size, dtype=np.float64)
    alive = []
    for v in voices:
        step = v.freq / sample_rate
        phases = (v.phase + idx * step) % 1.0
        wave = np.sin(TWO_PI * phases)
        if HARMONIC_BLEND > 0.0:
            wave += HARMONIC_BLEND * np.sin(TWO_PI * 2.0 * phases)
        buf += wave * envelope(v, idx + v.age)
        v.phase = (v.phase + chunk_size * step) % 1.0
        v.age += chunk_size
        if v.age < v.max_age:
            alive.append(v)
    buf /= math.sqrt(max(1, len(alive))) * (1.0 + HARMONIC_BLEND)
    return np.clip(buf, -1.0, 1.0), alive


def to_pcm_stereo(mono) -> np.ndarray:
    pcm = (mono * 32767 * 0.85).astype(np.int16)
    return np.column_stack((pcm, pcm))


class ToneOutput:
    """Feeds synthesized chunks to a pygame mixer channel from a daemon thread."""

    def __init__(self, freq_low=cfg.FREQ_LOW, freq_high=cfg.FREQ_HIGH, enabled=True):
        self.freq_low, self.freq_high = freq_low, freq_high
        self.enabled = enabled
        self.sustain_smp = int(SOUND_SUSTAIN * SAMPLE_RATE)
        self.attack_smp  = max(1, int(SOUND_ATTACK * SAMPLE_RATE))
        self.release_smp = max(1, int(SOUND_RELEASE * SAMPLE_RATE))
        self._voices  = []
        self._lock    = threading.Lock()
        self._running = False
        self._thread  = None
        self._channel = None
        self._last_trigger = 0.0

    def start(self) -> bool:
        if not self.enabled:
            return False
        try:
            pygame.mixer.pre_init(SAMPLE_RATE, -16, 2, CHUNK_SIZE)
            pygame.mixer.init()
        except pygame.error as e:
            LOGGER.warning("No audio device, tones disabled: %s", e)
            self.enabled = False
            return False
        self._channel = pygame.mixer.Channel(1)
        self._running = True
        self._thread = threading.Thread(target=self._loop, name="tone-output", daemon=True)
        self._thread.start()
        return True

    def stop(self):
        self._running = False
        if self._thread:
            self._thread.join(timeout=1.0)
            self._thread = None
        if self._channel:
            self._channel.stop()

    def trigger(self, value, n):
        if not (self.enabled and self._running):
            return
        now = time.monotonic()
        if now - self._last_trigger < TRIGGER_MIN_INTERVAL:
            return
        self._last_trigger = now
        voice = Voice(tone_frequency(value, n, self.freq_low, self.freq_high),
                      self.sustain_smp, self.attack_smp, self.release_smp)
        self._add(voice)

    def chime(self):
        """Longer top-of-range note once a run is verified. Not rate limited."""
        if not (self.enabled and self._running):
            return
        release = int(CHIME_RELEASE * SAMPLE_RATE)
        voice = Voice(self.freq_high, int(CHIME_SUSTAIN * SAMPLE_RATE) + release,
                      self.attack_smp, release)
        self._add(voice)

    def _add(self, voice):
        with self._lock:
            if len(self._voices) >= MAX_VOICES:
                steal_oldest(self._voices)
            self._voices.append(voice)

    def _loop(self):
        chunk_secs = CHUNK_SIZE / SAMPLE_RATE
        while self._running:
            with self._lock:
                mono, self._voices = synthesize_chunk(self._voices)
            snd = pygame.mixer.Sound(buffer=to_pcm_stereo(mono).tobytes())
            deadline = time.monotonic() + chunk_secs * 4
            while self._channel.get_queue() is not None and self._running:
                time.sleep(0.001)
                if time.monotonic() > deadline:
                    break
            if self._running:
                self._channel.queue(snd)
            time.sleep(chunk_secs * 0.75)
