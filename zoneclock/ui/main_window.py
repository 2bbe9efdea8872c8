"""
Main Window - Tkinter clock display driven by the render loop
"""
import logging
import tkinter as tk
from typing import Any, Callable, Dict, Optional

from ..core.models import ClockFrame, DayPeriod
from .theme import Theme

logger = logging.getLogger(__name__)

KEY_HINT = "f: 12/24h   s: seconds   m: sound   ←/→: timezone"


class MainWindow:
    """
    Tkinter window for the zone clock.

    Acts as the render loop's display (render, apply_period, set_zone_label)
    and as its scheduler (after, after_cancel).
    """

    def __init__(self, width: int = 800, height: int = 480, fullscreen: bool = False,
                 title: str = "Zone Clock"):
        """
        Initialize main window.

        Args:
            width: Window width
            height: Window height
            fullscreen: Whether to run fullscreen
            title: Window title
        """
        self._width = width
        self._height = height
        self._fullscreen = fullscreen
        self._title = title

        self._root: Optional[tk.Tk] = None
        self._canvas: Optional[tk.Canvas] = None
        self._text_ids: Dict[str, int] = {}
        self._period = DayPeriod.NIGHT
        self._key_handlers: Dict[str, Callable[[], Any]] = {}
        self._running = False

    def initialize(self) -> None:
        """Create the Tk root, canvas and text items"""
        logger.info("Initializing UI window")

        self._root = tk.Tk()
        self._root.title(self._title)
        palette = Theme.palette(self._period)
        self._root.configure(bg=palette['bg'])

        if self._fullscreen:
            self._root.attributes('-fullscreen', True)
            self._root.config(cursor='none')
        else:
            self._root.geometry(f"{self._width}x{self._height}")

        self._canvas = tk.Canvas(
            self._root,
            width=self._width,
            height=self._height,
            bg=palette['bg'],
            highlightthickness=0
        )
        self._canvas.pack(fill=tk.BOTH, expand=True)

        self._create_ui_elements()

        self._root.bind('<Escape>', self._exit_fullscreen)
        self._root.bind('<Key>', self._on_key)
        self._root.protocol("WM_DELETE_WINDOW", self.stop)

        logger.info(f"UI initialized: {self._width}x{self._height}")

    def _create_ui_elements(self) -> None:
        palette = Theme.palette(self._period)
        cx = self._width // 2

        self._text_ids['zone'] = self._canvas.create_text(
            cx, int(self._height * 0.12), text="", font=Theme.get_text_font(),
            fill=palette['dim'], anchor='center')
        self._text_ids['emoji'] = self._canvas.create_text(
            self._width - 30, 30, text=Theme.emoji(self._period),
            font=Theme.get_text_font(), fill=palette['accent'], anchor='center')
        self._text_ids['time'] = self._canvas.create_text(
            cx, int(self._height * 0.42), text="--:--:--", font=Theme.get_time_font(),
            fill=palette['fg'], anchor='center')
        self._text_ids['ampm'] = self._canvas.create_text(
            cx, int(self._height * 0.62), text="", font=Theme.get_text_font(),
            fill=palette['accent'], anchor='center')
        self._text_ids['date'] = self._canvas.create_text(
            cx, int(self._height * 0.75), text="----", font=Theme.get_text_font(Theme.FONT_SIZE_LARGE),
            fill=palette['fg'], anchor='center')
        self._text_ids['status'] = self._canvas.create_text(
            cx, int(self._height * 0.93), text=KEY_HINT, font=Theme.get_text_font(Theme.FONT_SIZE_SMALL),
            fill=palette['dim'], anchor='center')

    # Display interface

    def render(self, frame: ClockFrame) -> None:
        if not self._canvas:
            return
        self._canvas.itemconfig(self._text_ids['time'], text=frame.time_text)
        self._canvas.itemconfig(self._text_ids['ampm'], text=frame.ampm or "")
        self._canvas.itemconfig(self._text_ids['date'], text=frame.date_text)

    def apply_period(self, period: DayPeriod) -> None:
        """Recolor the window for a new day period"""
        self._period = period
        if not self._canvas:
            return
        palette = Theme.palette(period)
        self._root.configure(bg=palette['bg'])
        self._canvas.configure(bg=palette['bg'])
        for name in ('time', 'date'):
            self._canvas.itemconfig(self._text_ids[name], fill=palette['fg'])
        for name in ('zone', 'status'):
            self._canvas.itemconfig(self._text_ids[name], fill=palette['dim'])
        self._canvas.itemconfig(self._text_ids['ampm'], fill=palette['accent'])
        self._canvas.itemconfig(self._text_ids['emoji'], text=Theme.emoji(period), fill=palette['accent'])

    def set_zone_label(self, label: str) -> None:
        if self._canvas:
            self._canvas.itemconfig(self._text_ids['zone'], text=label)

    # Scheduler interface

    def after(self, ms: int, callback: Callable[[], Any]) -> Any:
        return self._root.after(ms, callback)

    def after_cancel(self, after_id: Any) -> None:
        if self._root:
            self._root.after_cancel(after_id)

    # Controls

    def bind_key(self, key: str, handler: Callable[[], Any]) -> None:
        """
        Register a handler for a key.

        Args:
            key: Tk keysym, e.g. 'f' or 'Left'
            handler: Called with no arguments
        """
        self._key_handlers[key] = handler

    def _on_key(self, event) -> None:
        handler = self._key_handlers.get(event.keysym)
        if handler is None:
            return
        try:
            handler()
        except Exception as e:
            logger.error(f"Key handler error for '{event.keysym}': {e}", exc_info=True)

    def _exit_fullscreen(self, event=None) -> None:
        if self._root and self._fullscreen:
            self._root.attributes('-fullscreen', False)
            self._root.config(cursor='')
            self._fullscreen = False
            logger.info("Exited fullscreen mode")

    def start(self) -> None:
        """Run the Tk main loop (blocking)"""
        if not self._root:
            self.initialize()
        logger.info("Starting UI event loop")
        self._running = True
        self._root.mainloop()

    def stop(self) -> None:
        """Stop UI and cleanup"""
        logger.info("Stopping UI")
        self._running = False
        if self._root:
            try:
                self._root.quit()
                self._root.destroy()
            except tk.TclError as e:
                logger.error(f"Error during UI cleanup: {e}")
        self._root = None
        self._canvas = None

    def is_running(self) -> bool:
        return self._running
