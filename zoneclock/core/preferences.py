"""
Preferences - Small persisted user settings (tick sound on/off)
"""
import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml

logger = logging.getLogger(__name__)

TICK_SOUND_KEY = 'tickSoundEnabled'


class PreferencesStore:
    """
    YAML-backed key/value store for settings that survive restarts.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path).expanduser()

    def _read(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not read preferences from {self._path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring preferences in {self._path}: not a mapping")
            return {}
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, 'w') as f:
                yaml.safe_dump(data, f, default_flow_style=False)
        except OSError as e:
            logger.warning(f"Could not save preferences to {self._path}: {e}")

    def load_sound_enabled(self) -> bool:
        """Stored tick sound flag; False when missing or unreadable"""
        return self._read().get(TICK_SOUND_KEY) is True

    def save_sound_enabled(self, enabled: bool) -> None:
        data = self._read()
        data[TICK_SOUND_KEY] = bool(enabled)
        self._write(data)

    @property
    def path(self) -> Path:
        return self._path
