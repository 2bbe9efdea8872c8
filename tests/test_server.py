"""Tests for the time API server."""

from __future__ import annotations

import pytest

from zoneclock.core.models import TimezoneEntry
from zoneclock.web.server import DEFAULT_TIMEZONES, create_app

T = 1700000000


@pytest.fixture
def client():
    app = create_app(clock=lambda: T + 0.9)
    app.testing = True
    return app.test_client()


def test_timezones_lists_builtin_zones(client):
    response = client.get('/api/timezones')
    assert response.status_code == 200
    data = response.get_json()
    assert len(data) == len(DEFAULT_TIMEZONES)
    assert data[0] == {'zone': 'Asia/Kolkata', 'name': 'India', 'code': 'IN', 'flag': '🇮🇳'}


def test_timezones_can_be_configured():
    app = create_app([TimezoneEntry('UTC', 'UTC')])
    data = app.test_client().get('/api/timezones').get_json()
    assert data == [{'zone': 'UTC', 'name': 'UTC', 'code': '', 'flag': ''}]


def test_time_for_zone(client):
    data = client.get('/api/time?zone=Asia/Kolkata').get_json()
    assert data['status'] == 'success'
    assert data['timezone'] == 'Asia/Kolkata'
    assert data['timestamp'] == T
    assert data['gmtOffset'] == 19800
    assert data['abbreviation'] == 'IST'


def test_time_offset_follows_daylight_saving(client):
    app = create_app(clock=lambda: 1688169600)  # 2023-07-01, BST
    data = app.test_client().get('/api/time', query_string={'zone': 'Europe/London'}).get_json()
    assert data['gmtOffset'] == 3600


def test_time_requires_zone(client):
    response = client.get('/api/time')
    assert response.status_code == 400
    assert response.get_json()['status'] == 'error'


def test_time_rejects_unknown_zone(client):
    response = client.get('/api/time?zone=Middle/Earth')
    assert response.status_code == 404
    assert 'Middle/Earth' in response.get_json()['message']


def test_health(client):
    assert client.get('/health').get_json() == {'status': 'ok'}
