"""Tests for the HTTP time API client."""

from __future__ import annotations

import threading
import time

import pytest
import requests

from zoneclock.core.errors import TimeApiError
from zoneclock.core.models import FALLBACK_TIMEZONES, TimezoneEntry
from zoneclock.core.time_api import TimeApiClient, parse_timestamp

from conftest import FakeResponse, FakeSession, time_payload


# ---- timezone list ----

def test_fetch_timezones_parses_entries(api, session):
    session.routes['timezones'] = FakeResponse([
        {'zone': 'Europe/Paris', 'name': 'France', 'code': 'FR', 'flag': '🇫🇷'},
        {'zone': 'UTC'},
    ])
    entries = api.fetch_timezones()
    assert entries == [
        TimezoneEntry('Europe/Paris', 'France', 'FR', '🇫🇷'),
        TimezoneEntry('UTC'),
    ]
    assert session.calls[0]['url'] == 'http://clock.test/api/timezones'
    assert session.calls[0]['timeout'] == 2.0


def test_fetch_timezones_skips_invalid_entries(api, session):
    session.routes['timezones'] = FakeResponse([{'name': 'No zone'}, 'junk', {'zone': 'Asia/Tokyo'}])
    assert [entry.zone for entry in api.fetch_timezones()] == ['Asia/Tokyo']


@pytest.mark.parametrize('response', [
    requests.exceptions.ConnectionError('refused'),
    requests.exceptions.Timeout('slow'),
    FakeResponse(status_code=500),
    FakeResponse(text='<html>'),
    FakeResponse([]),
    FakeResponse({'zones': []}),
    FakeResponse([{'name': 'only invalid'}]),
])
def test_fetch_timezones_failure_yields_builtin_list(api, session, response):
    session.routes['timezones'] = response
    entries = api.fetch_timezones()
    assert entries == FALLBACK_TIMEZONES
    assert len(entries) == 5
    assert api.last_error


def test_fallback_list_is_a_copy(api):
    entries = api.fetch_timezones()
    entries.clear()
    assert len(FALLBACK_TIMEZONES) == 5


# ---- time for zone ----

def test_fetch_time_success(api, session):
    session.routes['time'] = time_payload(1700000000, gmtOffset=3600)
    outcome = api.fetch_time('Europe/London')
    assert outcome.succeeded
    assert outcome.timestamp == 1700000000
    assert outcome.gmt_offset == 3600
    assert session.calls[0]['params'] == {'zone': 'Europe/London'}


def test_fetch_time_truncates_float_timestamp(api, session):
    session.routes['time'] = time_payload(1700000000.75)
    assert api.fetch_time('Europe/London').timestamp == 1700000000


@pytest.mark.parametrize('response', [
    FakeResponse({'status': 'success'}),
    time_payload('1700000000'),
    time_payload(True),
    time_payload(None),
    FakeResponse({'status': 'FAILED', 'message': 'Invalid zone'}),
    FakeResponse(['not', 'an', 'object']),
    FakeResponse(status_code=404),
    FakeResponse(text='oops'),
    requests.exceptions.ConnectionError('down'),
])
def test_fetch_time_rejects_bad_responses(api, session, response):
    session.routes['time'] = response
    with pytest.raises(TimeApiError):
        api.fetch_time('Europe/London')


def test_try_fetch_time_turns_errors_into_outcomes(api, session):
    session.routes['time'] = requests.exceptions.ConnectionError('down')
    outcome = api.try_fetch_time('Asia/Tokyo')
    assert not outcome.succeeded
    assert outcome.zone == 'Asia/Tokyo'
    assert outcome.timestamp is None
    assert 'down' in outcome.error
    assert api.last_error == outcome.error


def test_try_fetch_time_clears_last_error(api, session):
    session.routes['time'] = FakeResponse(status_code=503)
    api.try_fetch_time('UTC')
    session.routes['time'] = time_payload(5)
    assert api.try_fetch_time('UTC').succeeded
    assert api.last_error is None


def test_base_url_trailing_slash_is_trimmed(session):
    client = TimeApiClient('http://clock.test/api/', session=session)
    session.routes['time'] = time_payload(1)
    client.fetch_time('UTC')
    assert session.calls[0]['url'] == 'http://clock.test/api/time'
    client.close()
    assert session.closed


def test_parse_timestamp_rejects_non_finite():
    with pytest.raises(TimeApiError):
        parse_timestamp(float('nan'))
    assert parse_timestamp(0) == 0


class CountingSession(FakeSession):
    """Records how many requests are in flight at once."""

    def __init__(self) -> None:
        super().__init__()
        self._lock = threading.Lock()
        self.active = 0
        self.max_active = 0

    def get(self, url, params=None, timeout=None):
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            time.sleep(0.05)
            return super().get(url, params=params, timeout=timeout)
        finally:
            with self._lock:
                self.active -= 1


def test_requests_from_several_threads_do_not_share_the_session_concurrently():
    session = CountingSession()
    session.routes['time'] = time_payload(1700000000)
    client = TimeApiClient('http://clock.test/api', session=session)

    threads = [threading.Thread(target=client.try_fetch_time, args=('UTC',)) for _ in range(3)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(5)

    assert len(session.calls) == 3
    assert session.max_active == 1
