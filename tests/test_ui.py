"""Tests for the tick sound and the window's display interface, without real audio or a Tk root."""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

import pytest
import pygame

from zoneclock.core.models import ClockFrame, DayPeriod, ReadingSource
from zoneclock.ui.sound import TickSound, create_tick


class FakeMixerSound:
    def __init__(self, source: Any) -> None:
        self.source = source
        self.volume = None
        self.plays = 0

    def set_volume(self, volume: float) -> None:
        self.volume = volume

    def play(self) -> None:
        self.plays += 1


@pytest.fixture
def mixer(monkeypatch):
    """Pretend the mixer is up at 44.1 kHz stereo and record built sounds."""
    built: List[FakeMixerSound] = []

    def make(source):
        sound = FakeMixerSound(source)
        built.append(sound)
        return sound

    monkeypatch.setattr(pygame.mixer, 'get_init', lambda: (44100, -16, 2))
    monkeypatch.setattr(pygame.mixer, 'init', lambda **kwargs: None)
    monkeypatch.setattr(pygame.mixer, 'Sound', make)
    monkeypatch.setattr(pygame.sndarray, 'make_sound', make)
    return built


# ---- tick sound ----

def test_default_tick_is_synthesized_and_played(mixer):
    sound = TickSound(None, volume=0.3)
    sound.play()
    sound.play()

    assert sound.available is True
    assert len(mixer) == 1
    assert mixer[0].plays == 2
    assert mixer[0].volume == 0.3


def test_synthesized_tick_matches_mixer_layout(mixer):
    create_tick(freq=1000, duration=0.02)
    samples = mixer[0].source
    assert samples.shape == (882, 2)
    assert samples.dtype.name == 'int16'
    assert samples[0, 0] == 0
    assert int(abs(samples).max()) > 20000


def test_configured_file_is_loaded(mixer, tmp_path):
    path = tmp_path / 'tick.wav'
    path.write_bytes(b'RIFF')
    sound = TickSound(path)
    sound.play()
    assert mixer[0].source == str(path)
    assert mixer[0].plays == 1


def test_missing_file_falls_back_to_builtin_tick(mixer, tmp_path):
    sound = TickSound(tmp_path / 'missing.wav')
    sound.play()
    assert mixer[0].source is not None
    assert not isinstance(mixer[0].source, str)
    assert mixer[0].plays == 1


def test_no_audio_device_disables_playback(monkeypatch):
    def no_device(**kwargs):
        raise pygame.error('No available audio device')

    monkeypatch.setattr(pygame.mixer, 'get_init', lambda: None)
    monkeypatch.setattr(pygame.mixer, 'init', no_device)

    sound = TickSound(None)
    sound.play()
    assert sound.available is False


# ---- main window ----

@pytest.fixture
def main_window():
    pytest.importorskip('tkinter')
    from zoneclock.ui import main_window
    return main_window


class FakeCanvas:
    def __init__(self) -> None:
        self.items: Dict[int, Dict[str, Any]] = {}
        self.updates: List[Tuple[int, Dict[str, Any]]] = []

    def create_text(self, x, y, **options) -> int:
        item_id = len(self.items) + 1
        self.items[item_id] = dict(options)
        return item_id

    def itemconfig(self, item_id: int, **options) -> None:
        self.updates.append((item_id, options))
        self.items[item_id].update(options)


def _frame(seconds: str = '20') -> ClockFrame:
    return ClockFrame('22', '13', seconds, None, True, 'Tuesday', '14', 'November', '2023',
                      DayPeriod.NIGHT, ReadingSource.AUTHORITATIVE)


def test_render_updates_only_the_changing_items(main_window):
    window = main_window.MainWindow()
    window._canvas = FakeCanvas()
    window._create_ui_elements()
    status_id = window._text_ids['status']
    assert window._canvas.items[status_id]['text'] == main_window.KEY_HINT

    window.render(_frame('20'))
    window.render(_frame('21'))

    touched = {item_id for item_id, _ in window._canvas.updates}
    assert status_id not in touched
    assert window._canvas.items[window._text_ids['time']]['text'] == '22:13:21'
    assert window._canvas.items[window._text_ids['date']]['text'] == 'Tuesday, 14 November 2023'
    assert window._canvas.items[status_id]['text'] == main_window.KEY_HINT


def test_render_without_canvas_is_a_no_op(main_window):
    main_window.MainWindow().render(_frame())
