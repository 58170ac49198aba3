"""Head-tracked virtual window over a background image."""

__version__ = "0.2.0"
