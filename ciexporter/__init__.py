"""Data model, state stores and rate limiting for a CI pipelines metrics exporter."""

__version__ = "0.1.0"