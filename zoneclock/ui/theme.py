"""
Theme - Day-period palettes, emoji and font constants
"""
from typing import Dict, Tuple

from ..core.models import DayPeriod


class Theme:
    """
    Colors and fonts for the clock window, one palette per day period.
    """

    PALETTES: Dict[DayPeriod, Dict[str, str]] = {
        DayPeriod.SUNRISE: {
            'bg': '#2b1d2f',
            'fg': '#ffd7a8',
            'accent': '#ff9f68',
            'dim': '#a07c86',
        },
        DayPeriod.DAY: {
            'bg': '#e8f1fb',
            'fg': '#1b2a3a',
            'accent': '#0077cc',
            'dim': '#6a7f95',
        },
        DayPeriod.SUNSET: {
            'bg': '#3a1f2b',
            'fg': '#ffcf9e',
            'accent': '#ff6f59',
            'dim': '#b07f7f',
        },
        DayPeriod.NIGHT: {
            'bg': '#000000',
            'fg': '#ffffff',
            'accent': '#00aaff',
            'dim': '#666666',
        },
    }

    PERIOD_EMOJI: Dict[DayPeriod, str] = {
        DayPeriod.SUNRISE: '🌅',
        DayPeriod.DAY: '☀️',
        DayPeriod.SUNSET: '🌇',
        DayPeriod.NIGHT: '🌙',
    }

    FONT_FAMILY = 'Helvetica'
    FONT_SIZE_HUGE = 120          # Main clock time
    FONT_SIZE_LARGE = 40          # Date
    FONT_SIZE_MEDIUM = 24         # AM/PM, timezone label
    FONT_SIZE_SMALL = 14          # Status line
    FONT_WEIGHT_BOLD = 'bold'
    FONT_WEIGHT_NORMAL = 'normal'

    @staticmethod
    def palette(period: DayPeriod) -> Dict[str, str]:
        """
        Get colors for a day period.

        Args:
            period: Current day period

        Returns:
            Dictionary with 'bg', 'fg', 'accent' and 'dim' hex colors
        """
        return Theme.PALETTES.get(period, Theme.PALETTES[DayPeriod.DAY])

    @staticmethod
    def emoji(period: DayPeriod) -> str:
        return Theme.PERIOD_EMOJI.get(period, Theme.PERIOD_EMOJI[DayPeriod.DAY])

    @staticmethod
    def get_time_font(size: int = None) -> Tuple[str, int, str]:
        if size is None:
            size = Theme.FONT_SIZE_HUGE
        return (Theme.FONT_FAMILY, size, Theme.FONT_WEIGHT_BOLD)

    @staticmethod
    def get_text_font(size: int = None) -> Tuple[str, int, str]:
        if size is None:
            size = Theme.FONT_SIZE_MEDIUM
        return (Theme.FONT_FAMILY, size, Theme.FONT_WEIGHT_NORMAL)
