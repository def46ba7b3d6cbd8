# ui/tui_widgets.py
# -*- coding: utf-8 -*-
"""
Custom Urwid widget components for the TUI.
"""

from typing import TYPE_CHECKING, List, Optional

import urwid  # type: ignore[import-untyped]

from .tui_constants import (
    KEYS_CANCEL,
    KEYS_CONFIRM,
    KEYS_DOWN,
    KEYS_PAGE_DOWN,
    KEYS_PAGE_UP,
    KEYS_UP,
    SELECTOR_HELP_TEXT,
)

ALL_KEYS = (
    KEYS_UP | KEYS_DOWN | KEYS_PAGE_UP | KEYS_PAGE_DOWN | KEYS_CONFIRM | KEYS_CANCEL
)

if TYPE_CHECKING:  # pragma: no cover
    from .selector import SelectorState


class SelectorView(urwid.WidgetWrap):
    """A fixed-height page of options with a highlighted cursor row."""

    def __init__(
        self, options: List[str], title: str, state: "SelectorState"
    ) -> None:
        self.options = options
        self.state = state
        self.selected: Optional[str] = None
        self.cancelled: bool = False

        self.option_rows = urwid.Pile([])
        self.page_text = urwid.Text("", align="right")
        body = urwid.Pile([
            self.option_rows,
            urwid.Divider(),
            self.page_text,
        ])
        frame = urwid.Frame(
            body=urwid.Filler(
                urwid.LineBox(urwid.Padding(body, left=1, right=1), title=title),
                valign="top",
            ),
            footer=urwid.AttrMap(
                urwid.Text(SELECTOR_HELP_TEXT, align="center"), "footer"
            ),
        )
        super().__init__(urwid.AttrMap(frame, "body"))
        self.refresh()

    def selectable(self) -> bool:
        return True

    def refresh(self) -> None:
        rows: List[urwid.Widget] = []
        for index in self.state.visible_range():
            is_cursor = index == self.state.cursor
            marker = "> " if is_cursor else "  "
            rows.append(
                urwid.AttrMap(
                    urwid.Text(marker + self.options[index]),
                    "option_focus" if is_cursor else "option",
                )
            )
        while len(rows) < self.state.page_size:
            rows.append(urwid.Text(""))
        self.option_rows.contents = [(row, self.option_rows.options()) for row in rows]
        self.page_text.set_text(
            f"Page {self.state.page_number}/{self.state.page_count}"
        )

    def handle_key(self, key: str) -> bool:
        """
        Apply one key press. Returns True when the selector should close.
        """
        if key in KEYS_UP:
            self.state.move_up()
        elif key in KEYS_DOWN:
            self.state.move_down()
        elif key in KEYS_PAGE_UP:
            self.state.page_up()
        elif key in KEYS_PAGE_DOWN:
            self.state.page_down()
        elif key in KEYS_CONFIRM:
            self.selected = self.options[self.state.cursor]
            return True
        elif key in KEYS_CANCEL:
            self.cancelled = True
            return True
        else:
            return False
        self.refresh()
        return False

    def keypress(self, size, key: str) -> Optional[str]:
        if key not in ALL_KEYS:
            return key
        if self.handle_key(key):
            raise urwid.ExitMainLoop()
        return None
