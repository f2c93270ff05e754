"""Shared style constants for the GUI client."""

HEADER_BG = "#fdf2f8"
PRIMARY_BG = "#f5f7fa"
ACCENT = "#ff6b6b"
ACCENT_SOFT = "#d4a5c9"
TEXT_PRIMARY = "#1f2933"
TEXT_MUTED = "#6b7280"
SUCCESS_BG = "#d1fae5"
ERROR_BG = "#fee2e2"
OUTGOING_BUBBLE = "#dbeafe"
INCOMING_BUBBLE = "#e5e7eb"
PADDING = 8
BORDER_RADIUS = 6
