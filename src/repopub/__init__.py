"""repopub — install build artifacts into local filesystem repositories."""

__version__ = "0.1.0"
