"""Utility helpers for the integrator."""

from integrator.utils.sanitization import sanitize_url

__all__ = ["sanitize_url"]
