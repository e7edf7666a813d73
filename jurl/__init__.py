"""jurl: a curl-like fetcher that renders pages in a real browser engine."""

__version__ = "1.0.0"
