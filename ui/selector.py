# ui/selector.py
# -*- coding: utf-8 -*-
"""
Paginated single-choice selector.

``SelectorState`` holds the cursor and visible window and knows nothing about
terminals; ``InteractiveSelector`` renders it with urwid and feeds key presses
into it. Cancelling raises ``SelectionCancelled``, which ends the whole run.
"""

import logging
from typing import Optional, Sequence

import urwid  # type: ignore[import-untyped]

from provisioning.errors import SelectionCancelled

from .tui_constants import palette
from .tui_widgets import SelectorView

module_logger = logging.getLogger(__name__)


class SelectorState:
    """
    Cursor over ``item_count`` options seen through a window of ``page_size``.

    Single steps wrap around both ends; page jumps clamp to the first and last
    option. After every move the window is scrolled just far enough to keep
    the cursor visible.
    """

    def __init__(self, item_count: int, page_size: int = 10):
        if item_count < 1:
            raise ValueError("A selector needs at least one option")
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.item_count = item_count
        self.page_size = page_size
        self.cursor = 0
        self.top = 0

    def _scroll_into_view(self) -> None:
        if self.cursor < self.top:
            self.top = self.cursor
        elif self.cursor >= self.top + self.page_size:
            self.top = self.cursor - self.page_size + 1

    def move_up(self) -> int:
        self.cursor = self.item_count - 1 if self.cursor == 0 else self.cursor - 1
        self._scroll_into_view()
        return self.cursor

    def move_down(self) -> int:
        self.cursor = 0 if self.cursor == self.item_count - 1 else self.cursor + 1
        self._scroll_into_view()
        return self.cursor

    def page_up(self) -> int:
        self.cursor = max(self.cursor - self.page_size, 0)
        self._scroll_into_view()
        return self.cursor

    def page_down(self) -> int:
        self.cursor = min(self.cursor + self.page_size, self.item_count - 1)
        self._scroll_into_view()
        return self.cursor

    def visible_range(self) -> range:
        return range(self.top, min(self.top + self.page_size, self.item_count))

    @property
    def page_number(self) -> int:
        return self.cursor // self.page_size + 1

    @property
    def page_count(self) -> int:
        return (self.item_count + self.page_size - 1) // self.page_size


class InteractiveSelector:
    """Terminal selector; call an instance with ``(options, title)``."""

    def __init__(
        self, page_size: int = 10, logger: Optional[logging.Logger] = None
    ):
        self.page_size = page_size
        self.logger = logger or module_logger

    def __call__(self, options: Sequence[str], title: str) -> str:
        return self.select(options, title)

    def select(self, options: Sequence[str], title: str) -> str:
        """
        Show ``options`` and block until one is confirmed.

        Raises:
            ValueError: If ``options`` is empty.
            SelectionCancelled: If the operator aborts.
        """
        state = SelectorState(len(options), self.page_size)
        view = SelectorView(list(options), title, state)

        loop = urwid.MainLoop(view, palette=palette)
        try:
            loop.run()
        except KeyboardInterrupt:
            view.cancelled = True

        if view.cancelled or view.selected is None:
            self.logger.warning(f"Selection '{title}' cancelled by user")
            raise SelectionCancelled(f"Selection '{title}' cancelled")

        self.logger.info(f"{title}: selected {view.selected}")
        return view.selected
