"""Quote Gateway: plain-text market quotes over HTTP with response caching."""

__version__ = "1.0.0"
