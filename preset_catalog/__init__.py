"""Browse, merge and export game-mod presets."""

__version__ = "0.1.0"
