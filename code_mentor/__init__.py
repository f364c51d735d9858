"""Client for a remote code-analysis service."""

__version__ = "0.1.0"
