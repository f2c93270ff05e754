"""PyQt6 presentation layer."""
