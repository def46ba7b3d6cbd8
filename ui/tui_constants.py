# ui/tui_constants.py
# -*- coding: utf-8 -*-
"""
Constants and type aliases for the TUI.
"""

from typing import Callable, Sequence

# --- Palette Definition ---
palette = [
    ("footer", "white", "dark blue", "standout"),
    ("body", "black", "light gray"),
    ("option", "black", "light gray"),
    ("option_focus", "white", "dark blue", "standout"),
]

SELECTOR_HELP_TEXT = (
    "Up/Down: move | PgUp/PgDn: page | Enter: select | Esc/q/Ctrl-C: abort"
)

KEYS_UP = frozenset({"up", "k"})
KEYS_DOWN = frozenset({"down", "j"})
KEYS_PAGE_UP = frozenset({"page up"})
KEYS_PAGE_DOWN = frozenset({"page down"})
KEYS_CONFIRM = frozenset({"enter"})
KEYS_CANCEL = frozenset({"esc", "q", "ctrl c"})

# Signature shared by the interactive selector and its test doubles:
# (options, title) -> chosen option
SelectFunction = Callable[[Sequence[str], str], str]
