"""
Tick Sound - pygame mixer playback of a short tick

Uses the configured sample when there is one, otherwise a short synthesized
click.
"""
import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np
import pygame

logger = logging.getLogger(__name__)

TICK_FREQUENCY = 1500
TICK_DURATION = 0.03


def create_tick(freq: float = TICK_FREQUENCY, duration: float = TICK_DURATION) -> pygame.mixer.Sound:
    """
    Synthesize a short sine click for the initialized mixer.

    Args:
        freq: Tone frequency in Hz
        duration: Length in seconds

    Returns:
        Sound built with pygame.sndarray
    """
    sample_rate, _, channels = pygame.mixer.get_init()
    n = int(duration * sample_rate)
    t = np.linspace(0, duration, n, False)
    wave = np.sin(freq * t * 2 * np.pi)

    fade = min(int(sample_rate * 0.01), n // 2)
    wave[:fade] *= np.linspace(0, 1, fade)
    wave[-fade:] *= np.linspace(1, 0, fade)

    audio = (wave * 32767).astype(np.int16)
    if channels > 1:
        audio = np.repeat(audio.reshape(n, 1), channels, axis=1)
    return pygame.sndarray.make_sound(audio)


class TickSound:
    """
    Plays a tick once per call. Unavailable audio disables playback.
    """

    def __init__(self, path: Union[str, Path, None], volume: float = 0.45):
        """
        Initialize tick sound.

        Args:
            path: Sound file (wav/ogg/mp3); empty or None uses a synthesized tick
            volume: Playback volume 0.0-1.0
        """
        self._path = Path(path).expanduser() if path else None
        self._volume = volume
        self._sound: Optional[pygame.mixer.Sound] = None
        self._available: Optional[bool] = None

    def _load(self) -> bool:
        if self._available is not None:
            return self._available

        self._available = False
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init(frequency=44100, size=-16, channels=2, buffer=512)

            if self._path is not None and self._path.exists():
                self._sound = pygame.mixer.Sound(str(self._path))
            else:
                if self._path is not None:
                    logger.warning(f"Tick sound not found, using built-in tick: {self._path}")
                self._sound = create_tick()

            self._sound.set_volume(self._volume)
            self._available = True
        except pygame.error as e:
            logger.warning(f"Audio unavailable, tick sound disabled: {e}")
        return self._available

    def play(self) -> None:
        """Play one tick; overlapping ticks use a free mixer channel"""
        if not self._load():
            return
        try:
            self._sound.play()
        except pygame.error as e:
            logger.debug(f"Tick playback failed: {e}")

    def close(self) -> None:
        if self._sound is not None and pygame.mixer.get_init():
            pygame.mixer.quit()
        self._sound = None
        self._available = None

    @property
    def available(self) -> bool:
        """True once the mixer is up and a tick is loaded"""
        return self._load()
