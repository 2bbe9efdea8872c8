"""
Time API Client - Timezone list and authoritative time over HTTP
Every failure degrades: the zone list falls back to a built-in list and a
failed time fetch becomes an unsuccessful SyncOutcome
"""
import logging
import math
from threading import Lock
from typing import Any, Dict, List, Optional

import requests

from .errors import TimeApiError
from .models import FALLBACK_TIMEZONES, SyncOutcome, TimezoneEntry

logger = logging.getLogger(__name__)


class TimeApiClient:
    """
    Client for the clock's two JSON endpoints.
    """

    def __init__(self, base_url: str = 'http://127.0.0.1:8000/api', timeout: float = 5.0,
                 session: Optional[requests.Session] = None):
        """
        Initialize time API client.

        Args:
            base_url: API root, e.g. 'http://clock.local/api'
            timeout: Per-request timeout in seconds
            session: requests session to reuse (one is created if omitted)
        """
        self._base_url = base_url.rstrip('/')
        self._timeout = timeout
        self._session = session or requests.Session()
        # Shared by the zone-change fetch thread and the resync worker
        self._session_lock = Lock()
        self._last_error: Optional[str] = None

    def _get_json(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            with self._session_lock:
                response = self._session.get(url, params=params, timeout=self._timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            raise TimeApiError(f"Request to {url} failed: {e}", url) from e
        except ValueError as e:
            raise TimeApiError(f"Response from {url} is not JSON: {e}", url) from e

    def fetch_timezones(self) -> List[TimezoneEntry]:
        """
        Get the selectable timezones.

        Returns:
            Entries from the server, or the built-in fallback list when the
            request fails or yields nothing usable. Never empty.
        """
        try:
            data = self._get_json('timezones')
            if not isinstance(data, list) or not data:
                raise TimeApiError("Timezone list response is empty or not a list")

            entries = []
            for item in data:
                try:
                    entries.append(TimezoneEntry.from_dict(item))
                except ValueError as e:
                    logger.debug(f"Skipping timezone entry: {e}")

            if not entries:
                raise TimeApiError("Timezone list response has no valid entries")

            self._last_error = None
            logger.info(f"Loaded {len(entries)} timezones from server")
            return entries

        except TimeApiError as e:
            self._last_error = str(e)
            logger.warning(f"Using built-in timezone list: {e}")
            return list(FALLBACK_TIMEZONES)

    def fetch_time(self, zone: str) -> SyncOutcome:
        """
        Get the authoritative time for a zone.

        Args:
            zone: IANA timezone string

        Returns:
            Successful SyncOutcome

        Raises:
            TimeApiError: On network failure or a payload without a usable timestamp
        """
        data = self._get_json('time', params={'zone': zone})
        if not isinstance(data, dict):
            raise TimeApiError("Time response is not an object")

        status = data.get('status')
        if isinstance(status, str) and status.lower() not in ('success', 'ok'):
            raise TimeApiError(f"Time API reported status '{status}': {data.get('message', '')}")

        return SyncOutcome(
            zone=zone,
            timestamp=parse_timestamp(data.get('timestamp')),
            gmt_offset=_optional_int(data.get('gmtOffset')),
        )

    def try_fetch_time(self, zone: str) -> SyncOutcome:
        """
        Like fetch_time(), but failures come back as an unsuccessful outcome.
        """
        try:
            outcome = self.fetch_time(zone)
            self._last_error = None
            return outcome
        except TimeApiError as e:
            self._last_error = str(e)
            logger.warning(f"Time sync for {zone} failed: {e}")
            return SyncOutcome(zone=zone, error=str(e))

    def close(self) -> None:
        self._session.close()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def last_error(self) -> Optional[str]:
        """Get last error message"""
        return self._last_error


def parse_timestamp(value: Any) -> int:
    """
    Validate a unix-seconds value from a payload.

    Raises:
        TimeApiError: If the value is missing, not a number, or not finite
    """
    if value is None:
        raise TimeApiError("Time response has no timestamp")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TimeApiError(f"Timestamp is not numeric: {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise TimeApiError(f"Timestamp is not finite: {value!r}")
    return int(value)


def _optional_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return int(value)
