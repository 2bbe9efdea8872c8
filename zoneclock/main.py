"""
Main entry point for Zone Clock
"""
import signal
import sys
from typing import Any, Dict, Optional

from zoneclock.core.clock_service import machine_timezone
from zoneclock.core.config_service import config
from zoneclock.core.logging_service import get_logger
from zoneclock.core.models import ClockState
from zoneclock.core.preferences import PreferencesStore
from zoneclock.core.render_loop import RenderLoop, pick_default_zone
from zoneclock.core.time_api import TimeApiClient
from zoneclock.ui.main_window import MainWindow
from zoneclock.ui.sound import TickSound

__version__ = '1.0.0'


class Application:
    """
    Main application orchestrator.
    """

    def __init__(self):
        """Initialize application"""
        config.reload()

        self._logger = get_logger('zoneclock', config.get('logging.level', 'INFO'))
        self._logger.log_startup(__version__, self._get_config_summary())

        self._api: Optional[TimeApiClient] = None
        self._preferences: Optional[PreferencesStore] = None
        self._sound: Optional[TickSound] = None
        self._window: Optional[MainWindow] = None
        self._loop: Optional[RenderLoop] = None
        self._state = ClockState()
        self._stopped = False

    def _get_config_summary(self) -> Dict[str, Any]:
        return {
            'api_base_url': config.get('api.base_url'),
            'timezone': config.get('clock.default_timezone'),
            'sync_interval_seconds': config.get('clock.sync_interval_seconds', 60),
        }

    def _initialize_services(self) -> None:
        """Create API client, preferences, sound and clock state"""
        self._logger.info("Initializing services")
        config.validate()

        self._api = TimeApiClient(config.get('api.base_url'), config.get('api.timeout', 5.0))

        self._preferences = PreferencesStore(config.get('preferences.path'))
        self._state.sound_enabled = self._preferences.load_sound_enabled()
        self._state.is_24_hour = config.get('clock.format_24h', False)
        self._state.show_seconds = config.get('clock.show_seconds', True)

        self._sound = TickSound(config.get('sound.path'), config.get('sound.volume', 0.45))
        self._logger.info(f"Tick sound {'enabled' if self._state.sound_enabled else 'disabled'}")
        if self._state.sound_enabled and not self._sound.available:
            self._logger.warning("Tick sound is enabled but no audio output is available")

    def _initialize_ui(self) -> None:
        """Create the window and the render loop bound to it"""
        self._window = MainWindow(
            width=config.get('display.width', 800),
            height=config.get('display.height', 480),
            fullscreen=config.get('display.fullscreen', False),
        )
        self._window.initialize()

        self._loop = RenderLoop(
            state=self._state,
            api=self._api,
            display=self._window,
            scheduler=self._window,
            sound=self._sound,
            preferences=self._preferences,
            update_interval_ms=config.get('clock.update_interval_ms', 1000),
            sync_interval_s=config.get('clock.sync_interval_seconds', 60),
        )

        self._window.bind_key('f', self._loop.toggle_format)
        self._window.bind_key('s', self._loop.toggle_seconds)
        self._window.bind_key('m', self._loop.toggle_sound)
        self._window.bind_key('Right', lambda: self._loop.cycle_zone(1))
        self._window.bind_key('Left', lambda: self._loop.cycle_zone(-1))

    def _select_default_zone(self) -> None:
        self._state.timezones = self._api.fetch_timezones()
        entry = pick_default_zone(
            self._state.timezones,
            preferred=config.get('clock.default_timezone') or None,
            machine_zone=machine_timezone(),
        )
        self._loop.select_zone(entry.zone, entry.label)

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown"""
        def signal_handler(signum, frame):
            self._logger.info(f"Received signal {signum}, shutting down")
            self.shutdown()
            sys.exit(0)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def run(self) -> None:
        """Run the application"""
        try:
            self._setup_signal_handlers()
            self._initialize_services()
            self._initialize_ui()

            try:
                self._select_default_zone()
            except Exception as e:
                # Keep the clock moving on local time
                self._logger.error(f"Initialization failed, showing local time: {e}", exc_info=True)
                self._loop.start_ticking()

            self._logger.info("Application started successfully")
            self._window.start()

        except KeyboardInterrupt:
            self._logger.info("Keyboard interrupt received")
        except Exception as e:
            self._logger.critical(f"Fatal error: {e}", exc_info=True)
            raise
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        """Cleanup and shutdown"""
        if self._stopped:
            return
        self._stopped = True

        if self._loop:
            self._loop.stop_ticking(wait=True)
            self._loop = None

        if self._window and self._window.is_running():
            self._window.stop()

        if self._sound:
            self._sound.close()
            self._sound = None

        if self._api:
            self._api.close()
            self._api = None

        self._logger.log_shutdown()


def main():
    """Main entry point"""
    app = Application()
    app.run()


if __name__ == '__main__':
    main()
