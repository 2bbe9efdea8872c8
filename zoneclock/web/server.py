#!/usr/bin/env python3
"""
Time API Server - Serves the timezone list and per-zone authoritative time
from the system timezone database

GET /api/timezones         -> [{zone, name, code, flag}, ...]
GET /api/time?zone=<IANA>  -> {status, timezone, timestamp, gmtOffset, abbreviation}
"""
import time
from datetime import datetime, timezone as dt_timezone
from typing import Callable, List, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from ..core.clock_service import load_zone
from ..core.config_service import config
from ..core.logging_service import get_logger
from ..core.models import FALLBACK_TIMEZONES, TimezoneEntry

EXTRA_TIMEZONES: List[TimezoneEntry] = [
    TimezoneEntry('UTC', 'Coordinated Universal Time', '', '🌐'),
    TimezoneEntry('Europe/Paris', 'France', 'FR', '🇫🇷'),
    TimezoneEntry('Europe/Berlin', 'Germany', 'DE', '🇩🇪'),
    TimezoneEntry('America/Los_Angeles', 'United States (LA)', 'US', '🇺🇸'),
    TimezoneEntry('America/Sao_Paulo', 'Brazil', 'BR', '🇧🇷'),
    TimezoneEntry('Asia/Dubai', 'United Arab Emirates', 'AE', '🇦🇪'),
    TimezoneEntry('Asia/Singapore', 'Singapore', 'SG', '🇸🇬'),
    TimezoneEntry('Pacific/Auckland', 'New Zealand', 'NZ', '🇳🇿'),
]

DEFAULT_TIMEZONES: List[TimezoneEntry] = list(FALLBACK_TIMEZONES) + EXTRA_TIMEZONES


def create_app(timezones: Optional[List[TimezoneEntry]] = None,
               clock: Callable[[], float] = time.time) -> Flask:
    """
    Build the API application.

    Args:
        timezones: Entries served by /api/timezones (defaults to the built-in list)
        clock: Source of unix time in seconds

    Returns:
        Flask app
    """
    app = Flask(__name__)
    CORS(app)
    zones = list(timezones) if timezones else list(DEFAULT_TIMEZONES)

    @app.route('/api/timezones', methods=['GET'])
    def list_timezones():
        return jsonify([entry.to_dict() for entry in zones])

    @app.route('/api/time', methods=['GET'])
    def zone_time():
        zone = (request.args.get('zone') or '').strip()
        if not zone:
            return jsonify({'status': 'error', 'message': 'Missing zone parameter'}), 400

        tz = load_zone(zone)
        if tz is None:
            return jsonify({'status': 'error', 'message': f'Unknown timezone: {zone}'}), 404

        timestamp = int(clock())
        moment = datetime.fromtimestamp(timestamp, dt_timezone.utc).astimezone(tz)
        offset = moment.utcoffset()
        return jsonify({
            'status': 'success',
            'timezone': zone,
            'timestamp': timestamp,
            'gmtOffset': int(offset.total_seconds()) if offset is not None else 0,
            'abbreviation': moment.tzname() or '',
        })

    @app.route('/health')
    def health():
        return jsonify({'status': 'ok'})

    return app


def _configured_timezones() -> List[TimezoneEntry]:
    entries = []
    for item in config.get('server.timezones', []) or []:
        try:
            entries.append(TimezoneEntry.from_dict(item))
        except ValueError as e:
            get_logger().warning(f"Ignoring configured timezone: {e}")
    return entries


def main():
    """Run the API server"""
    logger = get_logger('zoneclock', config.get('logging.level', 'INFO'))
    host = config.get('server.host', '0.0.0.0')
    port = config.get('server.port', 8000)

    timezones = _configured_timezones()
    app = create_app(timezones)
    logger.info("=" * 60)
    logger.info(f"Time API server on http://{host}:{port}/api")
    logger.info(f"Serving {len(timezones) or len(DEFAULT_TIMEZONES)} timezones")
    logger.info("=" * 60)

    app.run(host=host, port=port, debug=False)


if __name__ == '__main__':
    main()
