"""Idempotent URL shortener: shortcode generation, request deduplication and resolution."""

__version__ = '0.3.0'
