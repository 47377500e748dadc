"""Core utilities."""

from .urls import format_url_label, has_scheme, is_blank, normalize_url, short_url

__all__ = ["format_url_label", "has_scheme", "is_blank", "normalize_url", "short_url"]
