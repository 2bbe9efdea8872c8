"""Shared fakes for the zone clock tests."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import pytest
import requests

from zoneclock.core.models import ClockState
from zoneclock.core.render_loop import RenderLoop
from zoneclock.core.time_api import TimeApiClient


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200, text: Optional[str] = None):
        self._payload = payload
        self.status_code = status_code
        self._text = text

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")

    def json(self) -> Any:
        if self._text is not None:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeSession:
    """Stands in for requests.Session; routes by the last path segment."""

    def __init__(self) -> None:
        self.routes: Dict[str, Any] = {}
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def get(self, url: str, params=None, timeout=None):
        self.calls.append({'url': url, 'params': params, 'timeout': timeout})
        route = self.routes.get(url.rsplit('/', 1)[-1])
        if route is None:
            raise requests.exceptions.ConnectionError(f"No route to {url}")
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(params or {})
        return route

    def close(self) -> None:
        self.closed = True


class FakeScheduler:
    """Implements the tkinter after/after_cancel pair without a Tk root."""

    def __init__(self) -> None:
        self._next_id = 0
        self.pending: Dict[int, Callable[[], Any]] = {}
        self.cancelled: List[int] = []

    def after(self, ms: int, callback: Callable[[], Any]) -> int:
        self._next_id += 1
        self.pending[self._next_id] = callback
        return self._next_id

    def after_cancel(self, after_id: int) -> None:
        self.cancelled.append(after_id)
        self.pending.pop(after_id, None)

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            after_id = min(self.pending)
            callback = self.pending.pop(after_id)
            callback()


class FakeDisplay:
    def __init__(self) -> None:
        self.frames: List[Any] = []
        self.periods: List[Any] = []
        self.labels: List[str] = []

    def render(self, frame) -> None:
        self.frames.append(frame)

    def apply_period(self, period) -> None:
        self.periods.append(period)

    def set_zone_label(self, label: str) -> None:
        self.labels.append(label)


class ManualWorker:
    """Resync worker that never starts a thread; tests call loop.resync()."""

    instances: List['ManualWorker'] = []

    def __init__(self, callback, interval, name='zoneclock-sync'):
        self.callback = callback
        self.interval = interval
        self.started = False
        self.stopped = False
        ManualWorker.instances.append(self)

    def start(self) -> None:
        self.started = True

    def stop(self, wait: bool = False) -> None:
        self.stopped = True


def run_inline(job) -> None:
    """Fetch runner that does the zone-change fetch synchronously."""
    job()


class FakeSound:
    def __init__(self) -> None:
        self.plays = 0

    def play(self) -> None:
        self.plays += 1


def time_payload(timestamp: Any, zone: str = 'Europe/London', **extra) -> FakeResponse:
    payload = {'status': 'success', 'timezone': zone, 'timestamp': timestamp, 'gmtOffset': 0}
    payload.update(extra)
    return FakeResponse(payload)


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def api(session) -> TimeApiClient:
    return TimeApiClient('http://clock.test/api', timeout=2.0, session=session)


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def display() -> FakeDisplay:
    return FakeDisplay()


@pytest.fixture
def sound() -> FakeSound:
    return FakeSound()


@pytest.fixture
def state() -> ClockState:
    return ClockState(is_24_hour=True)


@pytest.fixture
def loop(state, api, display, scheduler, sound) -> RenderLoop:
    ManualWorker.instances.clear()
    return RenderLoop(state, api, display, scheduler, sound=sound,
                      update_interval_ms=1000, sync_interval_s=60,
                      worker_factory=ManualWorker, fetch_runner=run_inline)
