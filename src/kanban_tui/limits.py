"""Numeric limits and timings - no circular dependencies."""

from __future__ import annotations

# Event loop
TICK_RATE_MS = 250
MIN_TICK_RATE_MS = 10
MAX_TICK_RATE_MS = 1000
SHUTDOWN_TIMEOUT = 5.0

# Terminal surface
MIN_TERM_WIDTH = 110
MIN_TERM_HEIGHT = 30

# Visible projection
DEFAULT_BOARDS_TO_SHOW = 4
DEFAULT_CARDS_TO_SHOW = 4
MAX_BOARDS_TO_SHOW = 10
MAX_CARDS_TO_SHOW = 10
DEFAULT_WARNING_DELTA_DAYS = 3
MAX_WARNING_DELTA_DAYS = 365

# Toasts (seconds)
TOAST_DEFAULT_DURATION = 3.0
TOAST_ERROR_DURATION = 6.0
TOAST_LOADING_DURATION = 600.0
TOAST_FADE_IN = 0.2
TOAST_FADE_OUT = 0.4
MAX_TOASTS_TO_DISPLAY = 4

# Date/time picker
DATE_TIME_PICKER_ANIM_DURATION = 0.2
MIN_DATE_PICKER_WIDTH = 26
MIN_DATE_PICKER_HEIGHT = 4
TIME_PICKER_WIDTH = 14

# Command palette
PALETTE_MIN_QUERY_LENGTH = 2

# History and logging
MAX_UNDO_ENTRIES = 1000
MAX_LOG_MESSAGE_LENGTH = 4096
MAX_LOG_LINES = 2000

# Cloud
RESET_PASSWORD_LINK_COOLDOWN = 60.0
MIN_PASSWORD_LENGTH = 8
