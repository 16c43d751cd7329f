"""Random asset server backed by live filesystem caches."""

__version__ = "0.1.0"
