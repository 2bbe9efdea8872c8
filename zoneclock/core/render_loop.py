"""
Render Loop - One-second display ticks with periodic authoritative resync

All ClockState mutation happens on the thread that drives the scheduler (the
UI thread). The resync worker and the zone-change fetch thread only perform
HTTP and hand outcomes over through queues drained on that thread.
"""
import logging
import queue
import time
from threading import Event, Thread
from typing import Any, Callable, Dict, List, Optional, Tuple

from .clock_service import ClockService, format_frame
from .models import (ClockFrame, ClockState, DayPeriod, FALLBACK_TIMEZONES,
                     SyncOutcome, TimezoneEntry, WallClockReading)
from .preferences import PreferencesStore
from .time_api import TimeApiClient

logger = logging.getLogger(__name__)


class SyncWorker:
    """
    Background thread that calls a function at a fixed interval.

    The first call happens one interval after start(), like a repeating timer.
    """

    def __init__(self, callback: Callable[[], Any], interval: float, name: str = 'zoneclock-sync'):
        """
        Initialize sync worker.

        Args:
            callback: Function to call each interval
            interval: Seconds between calls
            name: Thread name
        """
        self._callback = callback
        self._interval = interval
        self._name = name
        self._stop_event = Event()
        self._thread: Optional[Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()

    def stop(self, wait: bool = False) -> None:
        """
        Stop the worker.

        Args:
            wait: Join the thread (bounded by two seconds)
        """
        self._stop_event.set()
        if wait and self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=2)
        self._thread = None

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval):
            try:
                self._callback()
            except Exception as e:
                logger.error(f"Sync worker callback error: {e}", exc_info=True)

    def is_running(self) -> bool:
        return self._thread is not None and not self._stop_event.is_set()


def run_in_thread(job: Callable[[], None]) -> Thread:
    """Run a job on a one-shot daemon thread"""
    thread = Thread(target=job, name='zoneclock-fetch', daemon=True)
    thread.start()
    return thread


def pick_default_zone(entries: List[TimezoneEntry], preferred: Optional[str] = None,
                      machine_zone: Optional[str] = None) -> TimezoneEntry:
    """
    Choose the zone to show at startup.

    Order: configured zone, the machine's zone when it is in the list, the
    first listed entry, then the first built-in entry.
    """
    for candidate in (preferred, machine_zone):
        if not candidate:
            continue
        for entry in entries:
            if entry.zone == candidate:
                return entry
        if candidate == preferred:
            return TimezoneEntry(zone=preferred)
    if entries:
        return entries[0]
    return FALLBACK_TIMEZONES[0]


class RenderLoop:
    """
    Drives the display from ClockState.

    The display must provide render(frame), apply_period(period) and
    set_zone_label(label). The scheduler must provide after(ms, callback) and
    after_cancel(id), which a tkinter root already does.
    """

    def __init__(
        self,
        state: ClockState,
        api: TimeApiClient,
        display: Any,
        scheduler: Any,
        sound: Any = None,
        preferences: Optional[PreferencesStore] = None,
        update_interval_ms: int = 1000,
        sync_interval_s: float = 60,
        worker_factory: Callable[..., SyncWorker] = SyncWorker,
        fetch_runner: Optional[Callable[[Callable[[], None]], Any]] = None,
        poll_interval_ms: int = 50,
    ):
        """
        Initialize render loop.

        Args:
            state: Clock state owned by this loop
            api: Time API client
            display: Render target
            scheduler: Timer provider for the display tick
            sound: Tick sound player with play() (optional)
            preferences: Store for the tick sound flag (optional)
            update_interval_ms: Display tick interval in milliseconds
            sync_interval_s: Authoritative resync interval in seconds
            worker_factory: Builds the resync worker
            fetch_runner: Runs the initial fetch after a zone change off the
                UI thread (defaults to a one-shot daemon thread)
            poll_interval_ms: How often the UI thread checks for that fetch
        """
        self._state = state
        self._api = api
        self._display = display
        self._scheduler = scheduler
        self._sound = sound
        self._preferences = preferences
        self._update_interval_ms = update_interval_ms
        self._sync_interval_s = sync_interval_s
        self._worker_factory = worker_factory
        self._fetch_runner = fetch_runner or run_in_thread
        self._poll_interval_ms = poll_interval_ms

        self._clock = ClockService(state.selected_zone)
        self._pending: 'queue.Queue[Tuple[int, SyncOutcome]]' = queue.Queue()
        self._initial: 'queue.Queue[Tuple[int, SyncOutcome]]' = queue.Queue()
        self._poll_id: Optional[Any] = None
        self._generation = 0
        self._tick_id: Optional[Any] = None
        self._worker: Optional[SyncWorker] = None
        self._running = False

        self._period: Optional[DayPeriod] = None
        self._last_reading: Optional[WallClockReading] = None
        self._last_sync_at: Optional[float] = None
        self._last_sync_error: Optional[str] = None

    # ------------------------------------------------------------------
    # Display tick
    # ------------------------------------------------------------------

    def tick(self) -> ClockFrame:
        """
        Render one tick.

        Applies any finished resync first, then renders the cached
        authoritative timestamp (advancing it by one second) or, without one,
        the zone-rule reading.

        Returns:
            The rendered frame
        """
        self._apply_pending_syncs()

        state = self._state
        if state.authoritative_timestamp is not None:
            reading = self._clock.resolve(state.authoritative_timestamp)
            state.authoritative_timestamp += 1
        else:
            reading = self._clock.resolve()

        self._last_reading = reading
        frame = format_frame(reading, state.is_24_hour, state.show_seconds)
        self._display.render(frame)
        self._update_period(frame.period)

        if state.sound_enabled and self._sound is not None:
            self._sound.play()

        return frame

    def _on_timer(self) -> None:
        self._tick_id = None
        try:
            self.tick()
        except Exception as e:
            logger.error(f"Tick error: {e}", exc_info=True)

        if self._running:
            self._tick_id = self._scheduler.after(self._update_interval_ms, self._on_timer)

    def start_ticking(self) -> None:
        """Tick now and every interval; replaces any running tick timer"""
        self._cancel_tick()
        self._running = True
        self._on_timer()

    def _cancel_tick(self) -> None:
        if self._tick_id is not None:
            self._scheduler.after_cancel(self._tick_id)
            self._tick_id = None

    def refresh(self) -> Optional[ClockFrame]:
        """Re-render the last reading with the current format, without advancing"""
        if self._last_reading is None:
            return None
        frame = format_frame(self._last_reading, self._state.is_24_hour, self._state.show_seconds)
        self._display.render(frame)
        return frame

    def _update_period(self, period: DayPeriod) -> None:
        if period == self._period:
            return
        self._period = period
        logger.debug(f"Day period changed to {period.value}")
        self._display.apply_period(period)

    # ------------------------------------------------------------------
    # Authoritative resync
    # ------------------------------------------------------------------

    def start_sync(self) -> None:
        """Start the periodic resync worker; replaces any running worker"""
        self._stop_sync()
        self._worker = self._worker_factory(self.resync, self._sync_interval_s)
        self._worker.start()

    def _stop_sync(self, wait: bool = False) -> None:
        if self._worker is not None:
            self._worker.stop(wait=wait)
            self._worker = None

    def resync(self) -> Optional[SyncOutcome]:
        """
        Fetch the authoritative time for the selected zone.

        Safe to call from the worker thread: the outcome is queued and
        applied by the next tick, and ignored if the selection changed in
        the meantime.

        Returns:
            The outcome, or None when no zone is selected
        """
        zone = self._state.selected_zone
        generation = self._generation
        if not zone:
            return None
        outcome = self._api.try_fetch_time(zone)
        self._pending.put((generation, outcome))
        return outcome

    def _apply_pending_syncs(self) -> None:
        while True:
            try:
                generation, outcome = self._pending.get_nowait()
            except queue.Empty:
                return

            if generation != self._generation or outcome.zone != self._state.selected_zone:
                logger.debug(f"Discarding stale sync result for {outcome.zone}")
                continue

            self._record_outcome(outcome)
            if outcome.succeeded:
                drift = None
                if self._state.authoritative_timestamp is not None:
                    drift = self._state.authoritative_timestamp - outcome.timestamp
                self._state.authoritative_timestamp = outcome.timestamp
                logger.debug(f"Resynced {outcome.zone} to {outcome.timestamp} (drift {drift})")

    def _record_outcome(self, outcome: SyncOutcome) -> None:
        if outcome.succeeded:
            self._last_sync_at = time.time()
            self._last_sync_error = None
        else:
            self._last_sync_error = outcome.error

    # ------------------------------------------------------------------
    # Selection and settings
    # ------------------------------------------------------------------

    def select_zone(self, zone: str, label: Optional[str] = None) -> None:
        """
        Switch to a zone.

        Stops both loops, forgets the authoritative timestamp and starts one
        fetch off the UI thread. Both loops restart from a scheduler callback
        once that fetch finishes, whatever it returned. Returns immediately.

        Args:
            zone: IANA timezone string
            label: Visible label (defaults to the list entry's label)
        """
        self.stop_ticking()

        state = self._state
        self._generation += 1
        state.selected_zone = zone
        entry = state.find_entry(zone)
        state.selected_label = label or (entry.label if entry else zone)
        state.authoritative_timestamp = None
        self._clock.set_timezone(zone)

        self._display.set_zone_label(state.selected_label)
        self._update_period(self._clock.current_period())

        generation = self._generation
        self._fetch_runner(lambda: self._initial_fetch(generation, zone))
        self._await_initial_fetch()

    def _initial_fetch(self, generation: int, zone: str) -> None:
        try:
            outcome = self._api.try_fetch_time(zone)
        except Exception as e:
            logger.error(f"Initial fetch for {zone} failed: {e}", exc_info=True)
            outcome = SyncOutcome(zone=zone, error=str(e))
        self._initial.put((generation, outcome))

    def _await_initial_fetch(self) -> None:
        self._poll_id = None
        while True:
            try:
                generation, outcome = self._initial.get_nowait()
            except queue.Empty:
                self._poll_id = self._scheduler.after(self._poll_interval_ms, self._await_initial_fetch)
                return

            if generation == self._generation:
                break
            logger.debug(f"Discarding initial fetch for previous selection {outcome.zone}")

        self._record_outcome(outcome)
        if outcome.succeeded:
            self._state.authoritative_timestamp = outcome.timestamp
            logger.info(f"Selected {outcome.zone}: synced to server time")
        else:
            logger.info(f"Selected {outcome.zone}: using local timezone rules")

        self.start_ticking()
        self.start_sync()

    def _cancel_poll(self) -> None:
        if self._poll_id is not None:
            self._scheduler.after_cancel(self._poll_id)
            self._poll_id = None

    def cycle_zone(self, step: int = 1) -> None:
        """Select the next (or previous, with step=-1) zone in the list"""
        zones = self._state.timezones
        if not zones:
            return
        current = [entry.zone for entry in zones]
        try:
            index = current.index(self._state.selected_zone)
        except ValueError:
            index = -1 if step > 0 else 0
        entry = zones[(index + step) % len(zones)]
        self.select_zone(entry.zone, entry.label)

    def set_24_hour(self, enabled: bool) -> None:
        self._state.is_24_hour = bool(enabled)
        self.refresh()

    def toggle_format(self) -> bool:
        self.set_24_hour(not self._state.is_24_hour)
        return self._state.is_24_hour

    def set_show_seconds(self, enabled: bool) -> None:
        self._state.show_seconds = bool(enabled)
        self.refresh()

    def toggle_seconds(self) -> bool:
        self.set_show_seconds(not self._state.show_seconds)
        return self._state.show_seconds

    def set_sound_enabled(self, enabled: bool) -> None:
        """Turn the tick sound on or off and persist the choice"""
        self._state.sound_enabled = bool(enabled)
        if self._preferences is not None:
            self._preferences.save_sound_enabled(self._state.sound_enabled)
        logger.info(f"Tick sound {'enabled' if enabled else 'disabled'}")

    def toggle_sound(self) -> bool:
        self.set_sound_enabled(not self._state.sound_enabled)
        return self._state.sound_enabled

    # ------------------------------------------------------------------
    # Lifecycle and diagnostics
    # ------------------------------------------------------------------

    def stop_ticking(self, wait: bool = False) -> None:
        """Cancel the display timer and the resync worker"""
        self._running = False
        self._cancel_tick()
        self._cancel_poll()
        self._stop_sync(wait=wait)

    def sync_status(self) -> Dict[str, Any]:
        """
        Get sync diagnostics.

        Returns:
            Dictionary with zone, sync state, reading source, the last sync
            error and the client's most recent request error
        """
        return {
            'zone': self._state.selected_zone,
            'synced': self._state.synced,
            'source': self._last_reading.source.value if self._last_reading else None,
            'period': self._period.value if self._period else None,
            'last_sync_at': self._last_sync_at,
            'last_error': self._last_sync_error,
            'api_error': self._api.last_error,
            'ticking': self._running,
        }

    def is_running(self) -> bool:
        return self._running

    @property
    def state(self) -> ClockState:
        return self._state

    @property
    def last_reading(self) -> Optional[WallClockReading]:
        return self._last_reading
