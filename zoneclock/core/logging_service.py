"""
Logging Service - Console logging with configurable levels
"""
import sys
import logging
from typing import Any, Dict, Optional

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class LoggingService:
    """
    Application logger that also configures the 'zoneclock' logger hierarchy,
    so module loggers (logging.getLogger(__name__)) share its handler and level.
    """

    def __init__(self, name: str = 'zoneclock', level: str = 'INFO'):
        """
        Initialize logging service.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        self._logger = logging.getLogger(name)
        self._set_level(level)
        self._setup_handlers()

    def _set_level(self, level: str) -> None:
        """Set logging level from string"""
        log_level = getattr(logging, str(level).upper(), None)
        if not isinstance(log_level, int):
            log_level = logging.INFO
        self._logger.setLevel(log_level)

    def _setup_handlers(self) -> None:
        """Setup console handler with formatting"""
        self._logger.handlers.clear()
        self._logger.propagate = False

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self._logger.level)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

        self._logger.addHandler(console_handler)

    def debug(self, message: str, **kwargs) -> None:
        self._logger.debug(message, extra=kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._logger.info(message, extra=kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._logger.warning(message, extra=kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs) -> None:
        """
        Log error message.

        Args:
            message: Error message
            exc_info: Include exception traceback
            **kwargs: Additional context
        """
        self._logger.error(message, exc_info=exc_info, extra=kwargs)

    def critical(self, message: str, exc_info: bool = False, **kwargs) -> None:
        self._logger.critical(message, exc_info=exc_info, extra=kwargs)

    def log_startup(self, version: str, summary: Dict[str, Any]) -> None:
        """
        Log application startup information.

        Args:
            version: Application version
            summary: Configuration summary
        """
        self.info("=" * 60)
        self.info(f"Zone Clock v{version} starting up")
        self.info(f"Python: {sys.version.split()[0]}")
        self.info(f"Time API: {summary.get('api_base_url', '-')}")
        self.info(f"Default timezone: {summary.get('timezone') or 'auto'}")
        self.info(f"Sync interval: {summary.get('sync_interval_seconds', 60)}s")
        self.info("=" * 60)

    def log_shutdown(self) -> None:
        self.info("=" * 60)
        self.info("Zone Clock shutting down")
        self.info("=" * 60)

    @property
    def logger(self) -> logging.Logger:
        """Get underlying logger instance"""
        return self._logger


# Global singleton instance
_logging_service: Optional[LoggingService] = None


def get_logger(name: str = 'zoneclock', level: str = 'INFO') -> LoggingService:
    """
    Get or create logging service singleton.

    Args:
        name: Logger name
        level: Log level

    Returns:
        LoggingService instance
    """
    global _logging_service
    if _logging_service is None:
        _logging_service = LoggingService(name, level)
    return _logging_service
