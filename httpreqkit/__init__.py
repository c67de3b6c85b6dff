"""Helpers for HTTP request resources: jq-style queries, JSON utilities, secret placeholders and status updates."""

__version__ = "0.1.0"