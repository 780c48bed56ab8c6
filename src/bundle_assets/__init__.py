"""Bundle build-time assets into generated Go source."""

__version__ = "0.1.0"
