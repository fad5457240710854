from __future__ import annotations

from typing import Dict, Optional

import numpy as np
import pygame

from block_blast.engine import SoundEvent


SAMPLE_RATE = 22050

# (start Hz, end Hz, seconds, volume)
TONES: Dict[SoundEvent, tuple[float, float, float, float]] = {
    SoundEvent.SELECT: (400.0, 400.0, 0.05, 0.05),
    SoundEvent.PLACE: (200.0, 50.0, 0.1, 0.1),
    SoundEvent.CLEAR: (400.0, 800.0, 0.3, 0.1),
    SoundEvent.COMBO: (600.0, 1800.0, 0.5, 0.1),
    SoundEvent.GAME_OVER: (300.0, 50.0, 1.0, 0.2),
}


def _sweep(start_hz: float, end_hz: float, seconds: float, volume: float) -> np.ndarray:
    n = max(1, int(SAMPLE_RATE * seconds))
    freq = np.geomspace(start_hz, end_hz, n)
    phase = 2.0 * np.pi * np.cumsum(freq) / SAMPLE_RATE
    envelope = np.linspace(1.0, 0.0, n)
    wave = np.sin(phase) * envelope * volume
    samples = (wave * 32767).astype(np.int16)
    return np.column_stack((samples, samples))


class SoundPlayer:
    """Plays short synthesized cues for session sound events.

    Silently disabled when no audio device is available.
    """

    def __init__(self) -> None:
        self._sounds: Dict[SoundEvent, pygame.mixer.Sound] = {}
        self.enabled = False
        try:
            pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=2)
        except pygame.error:
            return
        for event, params in TONES.items():
            self._sounds[event] = pygame.sndarray.make_sound(_sweep(*params))
        self.enabled = True

    def __call__(self, sender, event: Optional[SoundEvent] = None, **_: object) -> None:
        if self.enabled and event in self._sounds:
            self._sounds[event].play()
